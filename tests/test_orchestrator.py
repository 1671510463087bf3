"""
Tests for QueryOrchestrator: stage sequencing, short-circuit statuses, and the
session-owned credential slot. All collaborators are in-memory fakes.
"""

import asyncio

import pytest

from conftest import FakeCredentialProvider, FakeGraphClient, FakeSynthesizer
from models.graph import Credential, ListDescriptor, ListRecord, SiteDescriptor
from models.session import QuerySession
from models.stage_result import StageResult
from orchestrator.core import (
    AUTH_FAILED,
    EMPTY_QUESTION,
    NO_ITEMS,
    NO_LISTS,
    NO_SITES,
    QueryOrchestrator,
)
from orchestrator.synthesizer import LookupSynthesizer


def make_orchestrator(provider=None, graph=None, synthesizer=None, site_search="*"):
    provider = provider or FakeCredentialProvider()
    graph = graph or FakeGraphClient()
    synthesizer = synthesizer or FakeSynthesizer()
    orchestrator = QueryOrchestrator(provider, graph, synthesizer, site_search=site_search)
    return orchestrator, provider, graph, synthesizer


def auth_failure(code="interactive_auth_failed"):
    return StageResult.fail(code=code, message="nope", stage="auth")


@pytest.mark.unit
class TestShortCircuit:
    @pytest.mark.parametrize("code", ["not_authenticated", "interactive_auth_failed"])
    def test_auth_failure_never_reaches_discovery(self, code):
        orch, _, graph, synth = make_orchestrator(provider=FakeCredentialProvider(acquire_result=auth_failure(code)))

        outcome = asyncio.run(orch.run("Budget"))

        assert outcome.answer == AUTH_FAILED
        assert outcome.stage == "auth"
        assert outcome.failure_code == code
        assert graph.calls == []
        assert synth.calls == []

    def test_no_sites_stops_before_lists_and_items(self):
        orch, _, graph, synth = make_orchestrator(graph=FakeGraphClient(sites=StageResult.ok([])))

        assert asyncio.run(orch.answer("Budget")) == NO_SITES
        assert graph.count("sites") == 1
        assert graph.count("lists") == 0
        assert graph.count("items") == 0
        assert synth.calls == []

    def test_no_lists(self):
        orch, _, graph, _ = make_orchestrator(graph=FakeGraphClient(lists=StageResult.ok([])))

        assert asyncio.run(orch.answer("Budget")) == NO_LISTS
        assert graph.count("items") == 0

    def test_no_items(self):
        orch, _, _, synth = make_orchestrator(graph=FakeGraphClient(items=StageResult.ok([])))

        assert asyncio.run(orch.answer("Budget")) == NO_ITEMS
        assert synth.calls == []

    def test_failed_call_and_empty_result_look_the_same_to_the_user(self):
        failed = StageResult.fail(code="unauthorized", message="HTTP 403", stage="sites")
        orch_failed, *_ = make_orchestrator(graph=FakeGraphClient(sites=failed))
        orch_empty, *_ = make_orchestrator(graph=FakeGraphClient(sites=StageResult.ok([])))

        outcome_failed = asyncio.run(orch_failed.run("q"))
        outcome_empty = asyncio.run(orch_empty.run("q"))

        assert outcome_failed.answer == outcome_empty.answer == NO_SITES
        assert outcome_failed.failure_code == "unauthorized"
        assert outcome_empty.failure_code is None

    def test_precedence_auth_before_sites(self):
        graph = FakeGraphClient(sites=StageResult.ok([]), lists=StageResult.ok([]), items=StageResult.ok([]))
        orch, *_ = make_orchestrator(provider=FakeCredentialProvider(acquire_result=auth_failure()), graph=graph)

        assert asyncio.run(orch.answer("q")) == AUTH_FAILED

    def test_first_site_without_id_is_a_bad_response(self):
        graph = FakeGraphClient(sites=StageResult.ok([SiteDescriptor(id=""), SiteDescriptor(id="site-b")]))
        orch, *_ = make_orchestrator(graph=graph)

        outcome = asyncio.run(orch.run("Budget"))

        assert outcome.answer == NO_SITES
        assert outcome.failure_code == "bad_response"
        assert graph.count("lists") == 0

    def test_first_list_without_id_is_a_bad_response(self):
        graph = FakeGraphClient(lists=StageResult.ok([ListDescriptor(id="")]))
        orch, *_ = make_orchestrator(graph=graph)

        outcome = asyncio.run(orch.run("Budget"))

        assert outcome.answer == NO_LISTS
        assert outcome.stage == "lists"
        assert outcome.failure_code == "bad_response"
        assert graph.count("items") == 0

    @pytest.mark.parametrize("question", ["", "   ", None])
    def test_blank_question_makes_no_remote_calls(self, question):
        orch, provider, graph, _ = make_orchestrator()

        outcome = asyncio.run(orch.run(question))

        assert outcome.answer == EMPTY_QUESTION
        assert outcome.stage == "input"
        assert provider.acquire_calls == 0
        assert graph.calls == []


@pytest.mark.unit
class TestHappyPath:
    def test_only_first_site_and_first_list_are_used(self):
        graph = FakeGraphClient(
            sites=StageResult.ok([SiteDescriptor(id="site-a"), SiteDescriptor(id="site-b")]),
            lists=StageResult.ok([ListDescriptor(id="list-a"), ListDescriptor(id="list-b")]),
        )
        orch, _, graph, synth = make_orchestrator(graph=graph, site_search="finance")

        outcome = asyncio.run(orch.run("Budget"))

        assert outcome.answer == "Generated answer"
        assert outcome.completed
        assert outcome.error is None
        assert graph.calls[0][2] == "finance"
        assert graph.calls[1][2] == "site-a"
        assert graph.calls[2][2:] == ("site-a", "list-a")
        assert synth.calls[0][0] == "Budget"

    def test_credential_is_passed_explicitly_to_every_stage(self):
        cred = Credential(access_token="tok-xyz")
        orch, _, graph, _ = make_orchestrator(provider=FakeCredentialProvider(acquire_result=StageResult.ok(cred)))

        asyncio.run(orch.answer("q"))

        assert [c[1] for c in graph.calls] == [cred, cred, cred]

    def test_lookup_mode_end_to_end(self):
        items = StageResult.ok([ListRecord(id="1", fields={"Title": "Budget Report", "Description": "Q3 figures"})])
        orch, *_ = make_orchestrator(graph=FakeGraphClient(items=items), synthesizer=LookupSynthesizer())

        assert asyncio.run(orch.answer("Budget")) == "Q3 figures"

    def test_answer_sync_reuses_one_loop(self):
        orch, _, graph, _ = make_orchestrator()
        try:
            assert orch.answer_sync("first") == "Generated answer"
            assert orch.answer_sync("second") == "Generated answer"
        finally:
            orch.close()
        assert graph.count("sites") == 2


@pytest.mark.unit
class TestSessions:
    def test_login_creates_session(self):
        orch, provider, _, _ = make_orchestrator()

        result = asyncio.run(orch.login())

        assert result.is_success
        assert orch.session is result.data
        assert orch.session.account_username == "ada@contoso.com"
        assert provider.login_calls == 1

    def test_second_login_replaces_session(self):
        orch, *_ = make_orchestrator()
        first = asyncio.run(orch.login()).data
        second = asyncio.run(orch.login()).data

        assert first.session_id != second.session_id
        assert orch.session is second

    def test_failed_login_keeps_previous_session(self):
        orch, provider, _, _ = make_orchestrator()
        first = asyncio.run(orch.login()).data
        provider.login_result = auth_failure()

        result = asyncio.run(orch.login())

        assert result.is_error
        assert orch.session is first

    def test_run_stores_credential_in_session_slot(self):
        cred = Credential(access_token="tok-1")
        orch, *_ = make_orchestrator(provider=FakeCredentialProvider(acquire_result=StageResult.ok(cred)))
        session = QuerySession()

        asyncio.run(orch.run("q", session=session))

        assert session.credential is cred
        assert session.is_authenticated

    def test_reauthentication_replaces_credential(self):
        provider = FakeCredentialProvider(acquire_result=StageResult.ok(Credential(access_token="old")))
        orch, *_ = make_orchestrator(provider=provider)
        session = QuerySession()

        asyncio.run(orch.run("q", session=session))
        provider.acquire_result = StageResult.ok(Credential(access_token="new"))
        asyncio.run(orch.run("q", session=session))

        assert session.credential.access_token == "new"

    def test_auth_failure_clears_slot(self):
        provider = FakeCredentialProvider(acquire_result=StageResult.ok(Credential(access_token="old")))
        orch, *_ = make_orchestrator(provider=provider)
        session = QuerySession()
        asyncio.run(orch.run("q", session=session))

        provider.acquire_result = auth_failure()
        asyncio.run(orch.run("q", session=session))

        assert session.credential is None
