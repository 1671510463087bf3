#!/usr/bin/env python3
"""
Launch the Q&A web page and API with uvicorn.

Sign-in opens a browser on the machine running the server, so the default
bind address is loopback. SERVER_HOST / SERVER_PORT override the defaults.
"""

import argparse
import os

import uvicorn
from dotenv import load_dotenv

from config.config import Config

APP_FACTORY = "server.app:create_app"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the SharePoint list Q&A page")
    parser.add_argument("--host", default=os.getenv("SERVER_HOST", "127.0.0.1"), help="Bind address")
    parser.add_argument("--port", type=int, default=int(os.getenv("SERVER_PORT", "8000")), help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    load_dotenv()
    args = parse_args(argv)

    config = Config()
    if not config.validate():
        print("Starting anyway: /v1/login and /v1/ask answer 503 until the keys are set.")
    print(f"Serving http://{args.host}:{args.port}/ ({config.describe()})")

    uvicorn.run(
        APP_FACTORY,
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
