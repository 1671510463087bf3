import os
from dotenv import load_dotenv
from pathlib import Path
from enum import Enum

GRAPH_DEFAULT_SCOPE = "https://graph.microsoft.com/.default"
ENV_FILE = Path(__file__).parent.parent / '.env'


class SynthesisMode(Enum):
    """Supported answer synthesis modes."""
    GENERATIVE = "generative"
    LOOKUP = "lookup"


def _split_scopes(raw: str | None, default: list[str]) -> list[str]:
    if not raw:
        return list(default)
    scopes = [s.strip() for s in raw.replace(" ", ",").split(",") if s.strip()]
    return scopes or list(default)


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = ENV_FILE
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Identity (Microsoft Entra ID)
        self.AZURE_CLIENT_ID = os.getenv('AZURE_CLIENT_ID')
        self.AZURE_TENANT_ID = os.getenv('AZURE_TENANT_ID', 'common')
        self.AZURE_AUTHORITY = os.getenv(
            'AZURE_AUTHORITY', f"https://login.microsoftonline.com/{self.AZURE_TENANT_ID}"
        )
        self.GRAPH_SCOPES = _split_scopes(os.getenv('GRAPH_SCOPES'), [GRAPH_DEFAULT_SCOPE])
        self.LOGIN_SCOPES = _split_scopes(os.getenv('LOGIN_SCOPES'), ['User.Read'])

        # Microsoft Graph
        self.GRAPH_BASE_URL = os.getenv('GRAPH_BASE_URL', 'https://graph.microsoft.com/v1.0').rstrip('/')
        self.GRAPH_TIMEOUT_S = _optional_float(os.getenv('GRAPH_TIMEOUT_S'))
        self.SITE_SEARCH = os.getenv('SITE_SEARCH', '*')

        # Completion service
        self.OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
        self.DEFAULT_OPENAI_MODEL = os.getenv('DEFAULT_OPENAI_MODEL', 'gpt-3.5-turbo')
        self.COMPLETION_TEMPERATURE = float(os.getenv('COMPLETION_TEMPERATURE', '0.3'))
        self.COMPLETION_MAX_TOKENS = int(os.getenv('COMPLETION_MAX_TOKENS', '300'))

        self.SYNTHESIS_MODE = os.getenv('SYNTHESIS_MODE', SynthesisMode.GENERATIVE.value).lower()

    def validate(self) -> bool:
        """
        Validate that all required configuration is present for the selected synthesis mode.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if not self.AZURE_CLIENT_ID:
            print("Error: AZURE_CLIENT_ID is not set. Please set it in the .env file.")
            return False

        if self.SYNTHESIS_MODE == SynthesisMode.GENERATIVE.value:
            if not self.OPENAI_API_KEY:
                print("Error: OPENAI_API_KEY is not set. Please set it in the .env file.")
                return False
        elif self.SYNTHESIS_MODE != SynthesisMode.LOOKUP.value:
            print(f"Error: Unknown SYNTHESIS_MODE '{self.SYNTHESIS_MODE}'. Must be one of: {', '.join([e.value for e in SynthesisMode])}")
            return False

        return True

    def describe(self) -> str:
        """
        Get a one-line summary of the identity tenant and synthesis mode.

        Returns:
            str: Formatted string with configuration information
        """
        if self.SYNTHESIS_MODE == SynthesisMode.GENERATIVE.value:
            synthesis = f"OpenAI ({self.DEFAULT_OPENAI_MODEL})"
        elif self.SYNTHESIS_MODE == SynthesisMode.LOOKUP.value:
            synthesis = "local title lookup"
        else:
            synthesis = "Unknown"
        return f"tenant={self.AZURE_TENANT_ID} synthesis={synthesis}"
