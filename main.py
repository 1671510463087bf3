import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from config.config import Config
from orchestrator.core import QueryOrchestrator
from utils.logger import get_logger

logger = get_logger(__name__)


def show_loading_animation(stop_event: threading.Event) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stdout.write(f'\r\033[93mThinking {char}\033[0m')
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write('\r' + ' ' * 20 + '\r')
    sys.stdout.flush()


def run_with_spinner(fn, *args):
    """Run a blocking call while the spinner runs in a daemon thread."""
    stop_animation = threading.Event()
    loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation,))
    loading_thread.daemon = True
    loading_thread.start()
    try:
        return fn(*args)
    finally:
        stop_animation.set()
        loading_thread.join()


def print_help() -> None:
    print("\n=== Available Commands ===")
    print("login     - Sign in with your Microsoft account")
    print("help      - Show this help message")
    print("exit/quit - Exit the program")
    print("Anything else is sent as a question.\n")


def main():
    config = Config()
    if not config.validate():
        return

    try:
        orchestrator = QueryOrchestrator.from_config(config)
    except ValueError as e:
        print(f"Error initializing: {e}")
        return

    print("\n=== SharePoint List Q&A ===")
    print(f"Configuration: {config.describe()}")
    print("Type 'login' to sign in, 'help' for commands, 'exit' to quit\n")

    while True:
        try:
            user_input = input("You: ").strip()

            if not user_input:
                continue

            command = user_input.lower()
            if command in ('exit', 'quit'):
                print("\nGoodbye!")
                break

            if command == 'help':
                print_help()
                continue

            if command == 'login':
                result = orchestrator.login_sync()
                if result.is_success:
                    account = result.data.account_username or "unknown account"
                    print(f"Signed in as {account}\n")
                else:
                    print("Login failed.\n")
                continue

            answer = run_with_spinner(orchestrator.answer_sync, user_input)
            print(f"\nAnswer: {answer}\n")

        except KeyboardInterrupt:
            print("\nExiting...")
            break
        except Exception as e:
            logger.exception("Unexpected error in CLI loop")
            print(f"\nError: {e!s}")
            continue

    orchestrator.close()


if __name__ == "__main__":
    main()
