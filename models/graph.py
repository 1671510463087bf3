"""
Typed views over the Microsoft Graph objects the pipeline reads.

Only the fields the pipeline needs are lifted out of the JSON payloads;
list item fields are kept verbatim.
"""

import time
from dataclasses import dataclass, field
from typing import Any

TITLE_FIELD = "Title"
DESCRIPTION_FIELD = "Description"
NO_TITLE = "No Title"
NO_DESCRIPTION = "No Description"


@dataclass(frozen=True)
class Credential:
    """Bearer credential for Graph calls. The token never appears in repr()."""

    access_token: str = field(repr=False)
    expires_on: int | None = None
    account_username: str | None = None

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"

    @classmethod
    def from_msal_result(cls, result: dict[str, Any]) -> "Credential":
        claims = result.get("id_token_claims") or {}
        expires_in = result.get("expires_in")
        expires_on = None
        if isinstance(expires_in, (int, float)):
            expires_on = int(time.time() + expires_in)
        return cls(
            access_token=result["access_token"],
            expires_on=expires_on,
            account_username=claims.get("preferred_username"),
        )


@dataclass(frozen=True)
class SiteDescriptor:
    id: str
    display_name: str = ""
    name: str = ""
    web_url: str = ""

    @classmethod
    def from_graph(cls, data: dict[str, Any]) -> "SiteDescriptor":
        return cls(
            id=str(data.get("id", "")),
            display_name=data.get("displayName") or "",
            name=data.get("name") or "",
            web_url=data.get("webUrl") or "",
        )


@dataclass(frozen=True)
class ListDescriptor:
    id: str
    display_name: str = ""
    name: str = ""
    web_url: str = ""

    @classmethod
    def from_graph(cls, data: dict[str, Any]) -> "ListDescriptor":
        return cls(
            id=str(data.get("id", "")),
            display_name=data.get("displayName") or "",
            name=data.get("name") or "",
            web_url=data.get("webUrl") or "",
        )


@dataclass(frozen=True)
class ListRecord:
    id: str
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str | None:
        value = self.fields.get(TITLE_FIELD)
        return str(value) if value else None

    @property
    def description(self) -> str | None:
        value = self.fields.get(DESCRIPTION_FIELD)
        return str(value) if value else None

    @classmethod
    def from_graph(cls, data: dict[str, Any]) -> "ListRecord":
        fields = data.get("fields")
        return cls(
            id=str(data.get("id", "")),
            fields=dict(fields) if isinstance(fields, dict) else {},
        )
