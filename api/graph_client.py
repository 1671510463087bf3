"""Microsoft Graph client for SharePoint site, list and list-item discovery."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

import httpx

from models.graph import Credential, ListDescriptor, ListRecord, SiteDescriptor
from models.stage_result import StageResult
from utils.logger import get_logger
from utils.redaction import redact_sensitive_headers

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
UNAUTHORIZED_STATUSES = {401, 403}
RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


class GraphClient:
    """
    Read-only Graph client.

    Each call is a single GET returning the ``value`` array of a Graph
    collection, mapped to typed descriptors in upstream order. Calls never
    raise: failures come back as a StageResult carrying a StageError, and a
    legitimately empty collection is a success with an empty list.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_GRAPH_BASE_URL,
        *,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Graph root including the API version
            timeout_s: Per-request timeout; None keeps httpx's default
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {"base_url": self.base_url}
        if self.timeout_s is not None:
            kwargs["timeout"] = self.timeout_s
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def _get_collection(
        self,
        credential: Credential,
        path: str,
        *,
        stage: str,
        parse: Callable[[dict[str, Any]], T],
        params: dict[str, str] | None = None,
    ) -> StageResult[list[T]]:
        headers = {
            "Authorization": credential.authorization_header,
            "Accept": "application/json",
        }

        try:
            async with self._client() as client:
                response = await client.get(path, params=params, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            code = "unauthorized" if status_code in UNAUTHORIZED_STATUSES else "transport"
            logger.warning(
                f"Graph {stage} request failed with HTTP {status_code}",
                extra={
                    "extra_fields": {
                        "path": path,
                        "status_code": status_code,
                        "headers": redact_sensitive_headers(headers),
                    }
                },
            )
            return StageResult.fail(
                code=code,
                message=f"Graph returned HTTP {status_code}",
                stage=stage,
                retryable=status_code in RETRYABLE_STATUSES,
                details={"status_code": status_code, "path": path},
            )
        except httpx.HTTPError as e:
            logger.warning(
                f"Graph {stage} request failed: {type(e).__name__}",
                extra={"extra_fields": {"path": path, "error": str(e)}},
            )
            return StageResult.fail(
                code="transport",
                message=str(e) or type(e).__name__,
                stage=stage,
                retryable=True,
                details={"exception_type": type(e).__name__, "path": path},
            )
        except ValueError as e:
            logger.warning(
                f"Graph {stage} response was not JSON",
                extra={"extra_fields": {"path": path, "error": str(e)}},
            )
            return StageResult.fail(
                code="bad_response",
                message="Response body is not valid JSON",
                stage=stage,
                details={"path": path},
            )

        values = payload.get("value") if isinstance(payload, dict) else None
        if not isinstance(values, list):
            logger.warning(
                f"Graph {stage} response has no value array",
                extra={"extra_fields": {"path": path}},
            )
            return StageResult.fail(
                code="bad_response",
                message="Response has no 'value' array",
                stage=stage,
                details={"path": path},
            )

        if payload.get("@odata.nextLink"):
            logger.debug(
                f"Graph {stage} has more pages; only the first is read",
                extra={"extra_fields": {"path": path, "page_size": len(values)}},
            )

        items = [parse(v) for v in values if isinstance(v, dict)]
        logger.info(
            f"Graph {stage} fetched",
            extra={"extra_fields": {"path": path, "count": len(items)}},
        )
        return StageResult.ok(items)

    async def list_sites(
        self, credential: Credential, search: str = "*"
    ) -> StageResult[list[SiteDescriptor]]:
        """
        List SharePoint sites matching a search term.

        Args:
            credential: Bearer credential
            search: Graph site search term ("*" matches every site the user can see)
        """
        return await self._get_collection(
            credential,
            "/sites",
            stage="sites",
            parse=SiteDescriptor.from_graph,
            params={"search": search},
        )

    async def list_lists(
        self, credential: Credential, site_id: str
    ) -> StageResult[list[ListDescriptor]]:
        """List the lists of one site."""
        return await self._get_collection(
            credential,
            f"/sites/{site_id}/lists",
            stage="lists",
            parse=ListDescriptor.from_graph,
        )

    async def list_items(
        self,
        credential: Credential,
        site_id: str,
        list_id: str,
        *,
        expand_fields: bool = True,
    ) -> StageResult[list[ListRecord]]:
        """
        List the items of one list.

        Args:
            credential: Bearer credential
            site_id: Graph site ID
            list_id: Graph list ID
            expand_fields: Ask Graph to inline each item's column values
        """
        return await self._get_collection(
            credential,
            f"/sites/{site_id}/lists/{list_id}/items",
            stage="items",
            parse=ListRecord.from_graph,
            params={"expand": "fields"} if expand_fields else None,
        )
