"""
Credential provider backed by msal.

Acquires Microsoft Graph bearer tokens for the signed-in user: silently from
msal's token cache when possible, interactively (system browser) otherwise.
msal is synchronous, so every msal call runs in a worker thread and the
calling coroutine simply awaits it.
"""

import asyncio
from typing import Any

import msal

from models.graph import Credential
from models.stage_result import StageResult
from utils.logger import get_logger
from utils.redaction import mask_token

logger = get_logger(__name__)


def _describe_msal_failure(result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return {
            "error": result.get("error"),
            "error_description": result.get("error_description"),
        }
    return {"error": None if result is None else type(result).__name__}


class CredentialProvider:
    """
    Obtains bearer credentials for the current user.

    Example:
        provider = CredentialProvider(client_id, authority=authority, scopes=scopes)
        await provider.login()
        result = await provider.acquire()
        if result.is_success:
            token = result.data.access_token
    """

    def __init__(
        self,
        client_id: str,
        *,
        authority: str,
        scopes: list[str],
        login_scopes: list[str] | None = None,
        app: Any = None,
    ):
        """
        Args:
            client_id: Application (client) ID of the Entra ID app registration
            authority: Authority URL, e.g. https://login.microsoftonline.com/<tenant>
            scopes: Scopes requested for Graph tokens
            login_scopes: Scopes requested at sign-in (default: User.Read)
            app: Pre-built msal application (tests pass a fake here)
        """
        self.scopes = list(scopes)
        self.login_scopes = list(login_scopes or ["User.Read"])
        self._app = app or msal.PublicClientApplication(client_id, authority=authority)

    def _first_account(self) -> dict[str, Any] | None:
        accounts = self._app.get_accounts()
        return accounts[0] if accounts else None

    async def _acquire_silent(self, account: dict[str, Any]) -> dict[str, Any] | None:
        try:
            result = await asyncio.to_thread(
                self._app.acquire_token_silent, self.scopes, account=account
            )
        except Exception as e:
            logger.info(
                "Silent token acquisition raised, falling back to interactive",
                extra={"extra_fields": {"error_type": type(e).__name__, "error": str(e)}},
            )
            return None

        if isinstance(result, dict) and result.get("access_token"):
            return result

        logger.info(
            "Silent token acquisition unavailable, falling back to interactive",
            extra={"extra_fields": _describe_msal_failure(result)},
        )
        return None

    async def _acquire_interactive(self, scopes: list[str]) -> dict[str, Any] | None:
        try:
            result = await asyncio.to_thread(self._app.acquire_token_interactive, scopes=scopes)
        except Exception as e:
            logger.error(
                "Interactive token acquisition raised",
                extra={"extra_fields": {"error_type": type(e).__name__, "error": str(e)}},
            )
            return None

        if isinstance(result, dict) and result.get("access_token"):
            return result

        logger.error(
            "Interactive token acquisition failed",
            extra={"extra_fields": _describe_msal_failure(result)},
        )
        return None

    async def acquire(self) -> StageResult[Credential]:
        """
        Get a Graph credential, silently if possible, interactively otherwise.

        Returns:
            StageResult with the Credential, or a failure coded
            ``not_authenticated`` (nobody signed in) or
            ``interactive_auth_failed`` (both paths failed)
        """
        account = self._first_account()
        if account is None:
            logger.warning("No signed-in account, cannot acquire a token")
            return StageResult.fail(
                code="not_authenticated",
                message="No signed-in account",
                stage="auth",
            )

        result = await self._acquire_silent(account)
        if result is None:
            result = await self._acquire_interactive(self.scopes)
        if result is None:
            return StageResult.fail(
                code="interactive_auth_failed",
                message="Interactive token acquisition failed",
                stage="auth",
            )

        credential = Credential.from_msal_result(result)
        logger.debug(
            "Graph token acquired",
            extra={
                "extra_fields": {
                    "account": credential.account_username or account.get("username"),
                    "token": mask_token(credential.access_token),
                    "expires_on": credential.expires_on,
                }
            },
        )
        return StageResult.ok(credential)

    async def login(self) -> StageResult[str]:
        """
        Run the interactive sign-in flow.

        Returns:
            StageResult with the signed-in username, or an
            ``interactive_auth_failed`` failure
        """
        result = await self._acquire_interactive(self.login_scopes)
        if result is None:
            return StageResult.fail(
                code="interactive_auth_failed",
                message="Login failed",
                stage="auth",
            )

        claims = result.get("id_token_claims") or {}
        username = claims.get("preferred_username")
        if not username:
            account = self._first_account()
            username = account.get("username") if account else None

        logger.info("User signed in", extra={"extra_fields": {"account": username}})
        return StageResult.ok(username or "")
