"""
Tests for OpenAIClient with a stubbed AsyncOpenAI-compatible client (no network).
"""

import asyncio
from types import SimpleNamespace

import pytest

from api.openai_client import OpenAIClient


class StubCompletions:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return self.response


def stub_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def chat_response(*texts, finish_reason="stop"):
    return SimpleNamespace(
        choices=[
            SimpleNamespace(message=SimpleNamespace(content=t), finish_reason=finish_reason)
            for t in texts
        ],
        usage=SimpleNamespace(prompt_tokens=40, completion_tokens=12, total_tokens=52),
    )


class APITimeoutError(Exception):
    pass


@pytest.mark.unit
def test_request_shape_and_first_choice():
    completions = StubCompletions(response=chat_response("first", "second"))
    client = OpenAIClient(api_key="sk-test", client=stub_client(completions))

    response = asyncio.run(client.get_completion("the prompt", temperature=0.3, max_tokens=300))

    assert completions.calls == [
        {
            "model": "gpt-3.5-turbo",
            "messages": [{"role": "user", "content": "the prompt"}],
            "temperature": 0.3,
            "max_tokens": 300,
        }
    ]
    assert response.is_success
    assert response.text == "first"
    assert response.finish_reason == "stop"
    assert response.token_usage.total_tokens == 52


@pytest.mark.unit
def test_no_choices_gives_empty_text():
    response_obj = SimpleNamespace(choices=[], usage=None)
    client = OpenAIClient(api_key="sk-test", client=stub_client(StubCompletions(response=response_obj)))

    response = asyncio.run(client.get_completion("p"))

    assert response.is_success
    assert response.text == ""
    assert response.token_usage.total_tokens == 0


@pytest.mark.unit
def test_null_content_gives_empty_text():
    client = OpenAIClient(api_key="sk-test", client=stub_client(StubCompletions(response=chat_response(None))))
    assert asyncio.run(client.get_completion("p")).text == ""


@pytest.mark.unit
def test_exception_is_normalized_not_raised():
    completions = StubCompletions(exc=APITimeoutError("timed out"))
    client = OpenAIClient(api_key="sk-test", model_name="gpt-4o-mini", client=stub_client(completions))

    response = asyncio.run(client.get_completion("p"))

    assert response.is_error
    assert response.text == ""
    assert response.finish_reason == "error"
    assert response.model == "gpt-4o-mini"
    assert response.error.code == "synthesis_transport"
    assert response.error.stage == "synthesis"
    assert response.error.retryable is True
    assert response.error.details["exception_type"] == "APITimeoutError"


@pytest.mark.unit
def test_unknown_finish_reason_is_kept_in_metadata():
    client = OpenAIClient(
        api_key="sk-test",
        client=stub_client(StubCompletions(response=chat_response("x", finish_reason="tool_calls"))),
    )
    response = asyncio.run(client.get_completion("p"))

    assert response.finish_reason is None
    assert response.metadata["provider_finish_reason"] == "tool_calls"


@pytest.mark.unit
@pytest.mark.parametrize("reason, expected", [("stop", "stop"), ("length", "length"), ("content_filter", "content_filter"), (None, None)])
def test_openai_finish_reasons_map_directly(reason, expected):
    assert OpenAIClient._normalize_finish_reason(reason) == expected


@pytest.mark.unit
@pytest.mark.parametrize("reason", ["end_turn", "max_tokens"])
def test_non_openai_finish_reasons_are_not_translated(reason):
    client = OpenAIClient(
        api_key="sk-test",
        client=stub_client(StubCompletions(response=chat_response("x", finish_reason=reason))),
    )
    response = asyncio.run(client.get_completion("p"))

    assert response.finish_reason is None
    assert response.metadata["provider_finish_reason"] == reason
