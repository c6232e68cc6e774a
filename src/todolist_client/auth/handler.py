"""Claims challenge handling for API responses."""

import logging

import httpx

from todolist_client.api.models import UNKNOWN_HEADER, ApiResult, RequestOptions
from todolist_client.api.transport import parse_json, send
from todolist_client.auth.challenge import decode_claims, extract_claims_challenge
from todolist_client.auth.identity import IdentityClient
from todolist_client.auth.models import POPUP_BLOCKED_CODES, AccessToken, ChallengePolicy
from todolist_client.auth.storage import ChallengeStore
from todolist_client.exceptions import (
    ChallengeError,
    ChallengeParseError,
    InteractiveAuthError,
    TransportError,
    UnknownChallengeError,
)

logger = logging.getLogger(__name__)


class ChallengeHandler:
    """Resolve API responses, recovering from claims challenges.

    On a 401 carrying a claims challenge the challenge is stored under the
    request method, a new token is acquired interactively (popup, falling back
    to redirect when the popup cannot open), and the request is replayed
    exactly once. Any other response is decoded and returned as is.
    """

    def __init__(
        self,
        identity: IdentityClient,
        store: ChallengeStore,
        http: httpx.AsyncClient,
        scopes: list[str],
        policy: ChallengePolicy = ChallengePolicy.KEEP,
    ):
        self.identity = identity
        self.store = store
        self.http = http
        self.scopes = scopes
        self.policy = policy

    async def resolve(
        self,
        response: httpx.Response,
        options: RequestOptions,
        resource_id: str | int | None = None,
    ) -> ApiResult:
        """Turn a completed response into an ApiResult.

        Args:
            response: Response to the original request.
            options: The original request, replayed after re-authentication.
            resource_id: Item id for single-item operations.
        """
        if response.status_code != 401:
            return parse_json(response)

        header = response.headers.get("www-authenticate")
        if not header:
            logger.warning("401 for %s %s without www-authenticate header", options.method, options.url)
            return ApiResult.failure(UnknownChallengeError(), value=dict(UNKNOWN_HEADER))

        try:
            challenge = extract_claims_challenge(header)
            claims = decode_claims(challenge)
        except ChallengeParseError as e:
            logger.error("Unusable claims challenge for %s: %s", options.method, e)
            return ApiResult.failure(e)

        await self.store.set(options.method, challenge)
        logger.info("Claims challenge received for %s, re-authenticating", options.method)

        try:
            token = await self._reacquire(claims)
        except InteractiveAuthError as e:
            logger.error("Re-authentication for %s failed: %s", options.method, e)
            return ApiResult.failure(e)

        return await self._retry(options, token, resource_id)

    async def _reacquire(self, claims: str) -> AccessToken:
        try:
            return await self.identity.acquire_token_popup(claims, self.scopes)
        except InteractiveAuthError as e:
            if e.code not in POPUP_BLOCKED_CODES:
                raise
            logger.warning("Popup unavailable (%s), falling back to redirect", e.code)
        return await self.identity.acquire_token_redirect(claims, self.scopes)

    async def _retry(
        self,
        options: RequestOptions,
        token: AccessToken,
        resource_id: str | int | None,
    ) -> ApiResult:
        retry = options.with_token(token.access_token)
        try:
            response = await send(self.http, retry, resource_id)
        except httpx.HTTPError as e:
            logger.error("Retry of %s %s failed: %s", retry.method, retry.url_for(resource_id), e)
            return ApiResult.failure(TransportError(str(e)))

        if response.status_code == 401:
            logger.error("Retry of %s was challenged again", retry.method)
            return ApiResult.failure(ChallengeError("Request was challenged again after re-authentication"))

        if self.policy == ChallengePolicy.CLEAR_AFTER_RETRY:
            await self.store.delete(options.method)
            logger.debug("Cleared stored claims challenge for %s", options.method)

        return parse_json(response)
