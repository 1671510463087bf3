"""
QueryOrchestrator - the auth -> sites -> lists -> items -> synthesis pipeline.

Key guarantees:
- Front ends (FastAPI, CLI) stay thin: no msal/httpx/openai imports there
- No exceptions bubble up from answer() / run() / login()
- The first empty or failed stage stops the run with a fixed status string
- Only the first site and the first list are ever consulted
"""

import asyncio

from api.graph_client import GraphClient
from api.identity_client import CredentialProvider
from config.config import Config
from models.session import PipelineOutcome, QuerySession
from models.stage_result import Stage, StageError, StageResult
from orchestrator.synthesizer import BaseSynthesizer, create_synthesizer
from utils.logger import get_logger

logger = get_logger(__name__)

AUTH_FAILED = "Authentication failed"
NO_SITES = "No sites found"
NO_LISTS = "No lists found"
NO_ITEMS = "No items found"
EMPTY_QUESTION = "Please enter a question."


class QueryOrchestrator:
    def __init__(
        self,
        credential_provider: CredentialProvider,
        graph_client: GraphClient,
        synthesizer: BaseSynthesizer,
        *,
        site_search: str = "*",
    ):
        self.credential_provider = credential_provider
        self.graph_client = graph_client
        self.synthesizer = synthesizer
        self.site_search = site_search
        self.session: QuerySession | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def from_config(cls, config: Config) -> "QueryOrchestrator":
        if not config.AZURE_CLIENT_ID:
            raise ValueError("AZURE_CLIENT_ID not found in environment variables")

        provider = CredentialProvider(
            config.AZURE_CLIENT_ID,
            authority=config.AZURE_AUTHORITY,
            scopes=config.GRAPH_SCOPES,
            login_scopes=config.LOGIN_SCOPES,
        )
        graph = GraphClient(config.GRAPH_BASE_URL, timeout_s=config.GRAPH_TIMEOUT_S)
        return cls(
            provider,
            graph,
            create_synthesizer(config),
            site_search=config.SITE_SEARCH,
        )

    # ---------- helpers ----------

    @staticmethod
    def _stop(answer: str, stage: Stage, result: StageResult | None = None) -> PipelineOutcome:
        error: StageError | None = result.error if result is not None else None
        if error is not None:
            logger.warning(
                f"Pipeline stopped at {stage}: {error.code}",
                extra={"extra_fields": {"stage": stage, "error": error.to_dict()}},
            )
        else:
            logger.info(
                f"Pipeline stopped at {stage}: nothing returned",
                extra={"extra_fields": {"stage": stage}},
            )
        return PipelineOutcome(answer=answer, stage=stage, error=error)

    @staticmethod
    def _missing_id(stage: Stage) -> StageResult:
        return StageResult.fail(
            code="bad_response",
            message=f"First entry returned for {stage} has no id",
            stage=stage,
        )

    # ---------- public API ----------

    async def login(self) -> StageResult[QuerySession]:
        """
        Interactive sign-in. A successful login replaces the current session.
        """
        result = await self.credential_provider.login()
        if result.is_error:
            return StageResult(error=result.error)

        self.session = QuerySession(account_username=result.data or None)
        logger.info(
            "Session started",
            extra={
                "extra_fields": {
                    "session_id": self.session.session_id,
                    "account": self.session.account_username,
                }
            },
        )
        return StageResult.ok(self.session)

    async def run(self, question: str, session: QuerySession | None = None) -> PipelineOutcome:
        """
        Run the whole pipeline for one question.

        Args:
            question: Free-text question from the user
            session: Session owning the credential slot (default: the last login's)

        Returns:
            PipelineOutcome with the answer or status string, the stage the
            run ended at, and the StageError when a call failed
        """
        if not question or not question.strip():
            return PipelineOutcome(answer=EMPTY_QUESTION, stage="input")

        if session is None:
            if self.session is None:
                self.session = QuerySession()
            session = self.session

        auth = await self.credential_provider.acquire()
        if auth.is_error or auth.data is None:
            session.clear_credential()
            return self._stop(AUTH_FAILED, "auth", auth)
        credential = session.store_credential(auth.data)

        sites = await self.graph_client.list_sites(credential, search=self.site_search)
        if sites.is_empty:
            return self._stop(NO_SITES, "sites", sites)
        site = sites.data[0]
        if not site.id:
            return self._stop(NO_SITES, "sites", self._missing_id("sites"))

        lists = await self.graph_client.list_lists(credential, site.id)
        if lists.is_empty:
            return self._stop(NO_LISTS, "lists", lists)
        sp_list = lists.data[0]
        if not sp_list.id:
            return self._stop(NO_LISTS, "lists", self._missing_id("lists"))

        items = await self.graph_client.list_items(credential, site.id, sp_list.id)
        if items.is_empty:
            return self._stop(NO_ITEMS, "items", items)

        logger.info(
            "Synthesizing answer",
            extra={
                "extra_fields": {
                    "session_id": session.session_id,
                    "site_id": site.id,
                    "list_id": sp_list.id,
                    "item_count": len(items.data),
                    "mode": self.synthesizer.mode.value,
                }
            },
        )
        answer = await self.synthesizer.synthesize(question, items.data)
        return PipelineOutcome(answer=answer, stage="synthesis")

    async def answer(self, question: str, session: QuerySession | None = None) -> str:
        """Run the pipeline and return only the user-facing string."""
        outcome = await self.run(question, session)
        return outcome.answer

    def _run_sync(self, coro):
        # one loop for the orchestrator's lifetime; the OpenAI async client is bound to it
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
        return self._loop.run_until_complete(coro)

    def answer_sync(self, question: str, session: QuerySession | None = None) -> str:
        """Blocking wrapper around answer() for callers without an event loop."""
        return self._run_sync(self.answer(question, session))

    def login_sync(self) -> StageResult[QuerySession]:
        return self._run_sync(self.login())

    def close(self) -> None:
        if self._loop is not None and not self._loop.is_closed():
            self._loop.close()
        self._loop = None
