"""Identity library boundary.

The client never talks to the identity provider itself. Everything goes through
an IdentityClient: tests use fakes, the CLI uses MsalIdentityClient.
"""

import asyncio
import logging
import webbrowser
from collections.abc import Callable
from typing import Any, Protocol

import msal

from todolist_client.auth.models import AccessToken, Account, InteractionErrorCode, TokenRequest
from todolist_client.exceptions import InteractiveAuthError, TokenAcquisitionError

logger = logging.getLogger(__name__)


class IdentityClient(Protocol):
    """Operations consumed from the identity library."""

    async def get_active_account(self) -> Account | None: ...

    async def acquire_token_silent(self, request: TokenRequest) -> AccessToken: ...

    async def acquire_token_popup(self, claims: str | None, scopes: list[str]) -> AccessToken: ...

    async def acquire_token_redirect(
        self, claims: str | None, scopes: list[str]
    ) -> AccessToken: ...

    async def sign_in(self, scopes: list[str]) -> Account | None: ...

    async def sign_out(self) -> None: ...


def _to_account(raw: dict[str, Any]) -> Account:
    return Account(
        home_account_id=raw["home_account_id"],
        username=raw.get("username"),
        environment=raw.get("environment"),
    )


def _to_access_token(result: dict[str, Any], scopes: list[str]) -> AccessToken:
    scope = result.get("scope")
    return AccessToken(
        access_token=result["access_token"],
        token_type=result.get("token_type", "Bearer"),
        expires_in=result.get("expires_in"),
        scopes=scope.split() if isinstance(scope, str) else list(scopes),
    )


def _log_device_code(message: str) -> None:
    logger.warning(message)


class MsalIdentityClient:
    """IdentityClient backed by an MSAL PublicClientApplication.

    The browser flows map onto MSAL for Python as follows:

    * popup: ``acquire_token_interactive`` in the system browser. If no browser
      can be launched the failure is reported as ``popup_window_error``.
    * redirect: device code flow. The user completes sign-in on any device,
      which works where no local browser is available.

    MSAL is synchronous, so every call runs in a worker thread.
    """

    def __init__(
        self,
        client_id: str,
        authority: str,
        cache: msal.SerializableTokenCache | None = None,
        interactive_timeout: int | None = None,
        on_device_code: Callable[[str], None] | None = None,
        app: msal.PublicClientApplication | None = None,
    ):
        self.cache = cache or msal.SerializableTokenCache()
        self._app = app or msal.PublicClientApplication(
            client_id, authority=authority, token_cache=self.cache
        )
        self._interactive_timeout = interactive_timeout
        self._on_device_code = on_device_code or _log_device_code
        self._active: Account | None = None

    async def _raw_accounts(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._app.get_accounts)

    async def _raw_account(self, account: Account) -> dict[str, Any] | None:
        for raw in await self._raw_accounts():
            if raw.get("home_account_id") == account.home_account_id:
                return raw
        return None

    async def get_active_account(self) -> Account | None:
        """Get the active account, restoring it from the token cache if unset."""
        if self._active is None:
            accounts = await self._raw_accounts()
            if accounts:
                self._active = _to_account(accounts[0])
                logger.debug("Restored active account %s from cache", self._active.username)
        return self._active

    async def acquire_token_silent(self, request: TokenRequest) -> AccessToken:
        """Acquire a token from the cache or by refresh token.

        Raises:
            TokenAcquisitionError: If no token can be obtained without user interaction.
        """
        raw = await self._raw_account(request.account)
        if raw is None:
            raise TokenAcquisitionError(
                f"Account {request.account.username} not found in token cache",
                code="no_account",
            )

        result = await asyncio.to_thread(
            self._app.acquire_token_silent_with_error,
            request.scopes,
            raw,
            claims_challenge=request.claims,
        )
        if not result:
            raise TokenAcquisitionError(
                "No cached token available, interaction required",
                code="interaction_required",
            )
        if "error" in result:
            raise TokenAcquisitionError(
                f"Silent token acquisition failed: {result.get('error_description') or result['error']}",
                code=result["error"],
            )
        return _to_access_token(result, request.scopes)

    async def _complete_interactive(
        self, result: dict[str, Any], scopes: list[str]
    ) -> AccessToken:
        if "error" in result:
            raise InteractiveAuthError(result["error"], result.get("error_description"))
        if "access_token" not in result:
            raise InteractiveAuthError("no_token", "Identity provider returned no access token")

        username = (result.get("id_token_claims") or {}).get("preferred_username")
        for raw in await self._raw_accounts():
            if username is None or raw.get("username") == username:
                self._active = _to_account(raw)
                break
        return _to_access_token(result, scopes)

    async def acquire_token_popup(self, claims: str | None, scopes: list[str]) -> AccessToken:
        """Acquire a token through the system browser.

        MSAL swallows browser launch failures and keeps waiting on its loopback
        listener, so a missing browser is detected before handing over.

        Raises:
            InteractiveAuthError: popup_window_error if no browser is available,
                timeout if the user did not finish in time, otherwise the error
                code reported by the identity provider.
        """
        try:
            webbrowser.get()
        except webbrowser.Error as e:
            raise InteractiveAuthError(
                InteractionErrorCode.POPUP_WINDOW_ERROR.value,
                f"No browser available: {e}",
            ) from e

        login_hint = self._active.username if self._active else None
        try:
            result = await asyncio.to_thread(
                self._app.acquire_token_interactive,
                scopes,
                login_hint=login_hint,
                claims_challenge=claims,
                timeout=self._interactive_timeout,
            )
        except RuntimeError as e:
            # Raised by MSAL when the loopback listener times out
            raise InteractiveAuthError(InteractionErrorCode.TIMEOUT.value, str(e)) from e
        return await self._complete_interactive(result, scopes)

    async def acquire_token_redirect(
        self, claims: str | None, scopes: list[str]
    ) -> AccessToken:
        """Acquire a token through the device code flow.

        Raises:
            InteractiveAuthError: If the flow cannot be started or does not complete.
        """
        flow = await asyncio.to_thread(
            self._app.initiate_device_flow, scopes, claims_challenge=claims
        )
        if "user_code" not in flow:
            raise InteractiveAuthError(
                flow.get("error", "device_flow_error"), flow.get("error_description")
            )

        self._on_device_code(flow["message"])
        result = await asyncio.to_thread(
            self._app.acquire_token_by_device_flow, flow, claims_challenge=claims
        )
        return await self._complete_interactive(result, scopes)

    async def sign_in(self, scopes: list[str]) -> Account | None:
        """Sign in interactively and make the signed-in account active."""
        await self.acquire_token_popup(None, scopes)
        return self._active

    async def sign_out(self) -> None:
        """Remove every account from the token cache."""
        for raw in await self._raw_accounts():
            await asyncio.to_thread(self._app.remove_account, raw)
        self._active = None
