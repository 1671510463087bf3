import os
import tempfile

# keep test runs from writing into ./logs
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="spqa-test-logs-"))

import pytest

from api.base_client import BaseAIClient
import config.config as config_module
from config.config import SynthesisMode
from models.completion import CompletionResponse, TokenUsage
from models.graph import Credential, ListDescriptor, ListRecord, SiteDescriptor
from models.stage_result import StageResult

GRAPH_KEYS = (
    "AZURE_CLIENT_ID",
    "AZURE_TENANT_ID",
    "AZURE_AUTHORITY",
    "GRAPH_SCOPES",
    "LOGIN_SCOPES",
    "GRAPH_BASE_URL",
    "GRAPH_TIMEOUT_S",
    "SITE_SEARCH",
    "OPENAI_API_KEY",
    "DEFAULT_OPENAI_MODEL",
    "COMPLETION_TEMPERATURE",
    "COMPLETION_MAX_TOKENS",
    "SYNTHESIS_MODE",
)


class FakeMsalApp:
    """
    In-memory stand-in for msal.PublicClientApplication.

    silent_result / interactive_result may be a dict, None, or an Exception
    instance (raised when the call is made).
    """

    def __init__(self, accounts=None, silent_result=None, interactive_result=None):
        self.accounts = list(accounts or [])
        self.silent_result = silent_result
        self.interactive_result = interactive_result
        self.silent_calls = []
        self.interactive_calls = []

    def get_accounts(self, username=None):
        return list(self.accounts)

    def acquire_token_silent(self, scopes, account, **kwargs):
        self.silent_calls.append({"scopes": list(scopes), "account": account})
        if isinstance(self.silent_result, Exception):
            raise self.silent_result
        return self.silent_result

    def acquire_token_interactive(self, scopes, **kwargs):
        self.interactive_calls.append({"scopes": list(scopes)})
        if isinstance(self.interactive_result, Exception):
            raise self.interactive_result
        return self.interactive_result


def token_result(token="tok-123", username="ada@contoso.com"):
    return {
        "access_token": token,
        "token_type": "Bearer",
        "expires_in": 3600,
        "id_token_claims": {"preferred_username": username},
    }


class FakeCredentialProvider:
    def __init__(self, acquire_result=None, login_result=None):
        self.acquire_result = acquire_result or StageResult.ok(Credential(access_token="tok-123"))
        self.login_result = login_result or StageResult.ok("ada@contoso.com")
        self.acquire_calls = 0
        self.login_calls = 0

    async def acquire(self):
        self.acquire_calls += 1
        return self.acquire_result

    async def login(self):
        self.login_calls += 1
        return self.login_result


class FakeGraphClient:
    """Graph client returning canned StageResults and counting calls."""

    def __init__(self, sites=None, lists=None, items=None):
        self.sites = sites if sites is not None else StageResult.ok([SiteDescriptor(id="site-1")])
        self.lists = lists if lists is not None else StageResult.ok([ListDescriptor(id="list-1")])
        self.items = items if items is not None else StageResult.ok(
            [ListRecord(id="1", fields={"Title": "Budget Report", "Description": "Q3 figures"})]
        )
        self.calls = []

    async def list_sites(self, credential, search="*"):
        self.calls.append(("sites", credential, search))
        return self.sites

    async def list_lists(self, credential, site_id):
        self.calls.append(("lists", credential, site_id))
        return self.lists

    async def list_items(self, credential, site_id, list_id, *, expand_fields=True):
        self.calls.append(("items", credential, site_id, list_id))
        return self.items

    def count(self, stage):
        return sum(1 for c in self.calls if c[0] == stage)


class FakeSynthesizer:
    mode = SynthesisMode.GENERATIVE

    def __init__(self, answer="Generated answer"):
        self.answer = answer
        self.calls = []

    async def synthesize(self, question, records):
        self.calls.append((question, list(records)))
        return self.answer


class FakeCompletionClient(BaseAIClient):
    """Completion client returning a fixed text, an error response, or raising."""

    def __init__(self, text="Fake answer", error=None, raise_exc=None):
        self.api_key = "fake-key"
        self.model_name = "fake-model"
        self.text = text
        self.error = error
        self.raise_exc = raise_exc
        self.prompts = []
        self.kwargs = []

    async def get_completion(self, prompt, **kwargs):
        self.prompts.append(prompt)
        self.kwargs.append(kwargs)
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.error is not None:
            return self._create_error_response(
                request_id="req-err", error=self.error, latency_ms=1, model=self.model_name
            )
        return CompletionResponse(
            request_id="req-1",
            text=self.text,
            model=self.model_name,
            latency_ms=1,
            token_usage=TokenUsage(prompt_tokens=10, completion_tokens=5),
            finish_reason="stop",
        )


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove every config key and point Config at an empty .env so it sees only what a test sets."""
    for key in GRAPH_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "ENV_FILE", tmp_path / ".env")
    return monkeypatch


@pytest.fixture
def credential():
    return Credential(access_token="tok-123", account_username="ada@contoso.com")
