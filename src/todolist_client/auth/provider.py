"""Token provider: bearer tokens for the todo list API."""

import logging

from todolist_client.auth.challenge import decode_claims
from todolist_client.auth.identity import IdentityClient
from todolist_client.auth.models import TokenRequest
from todolist_client.auth.storage import ChallengeStore
from todolist_client.exceptions import AuthenticationStateError

logger = logging.getLogger(__name__)


class TokenProvider:
    """Acquire access tokens silently, adding any stored claims challenge."""

    def __init__(self, identity: IdentityClient, store: ChallengeStore, scopes: list[str]):
        self.identity = identity
        self.store = store
        self.scopes = scopes

    async def build_request(self, method: str | None = None) -> TokenRequest:
        """Build the silent token request for an HTTP method.

        Args:
            method: HTTP method the token is for. None never attaches claims.

        Raises:
            AuthenticationStateError: If no account is signed in.
        """
        account = await self.identity.get_active_account()
        if account is None:
            raise AuthenticationStateError()

        claims = None
        if method:
            challenge = await self.store.get(method)
            if challenge:
                claims = decode_claims(challenge)
                logger.debug("Attaching stored claims challenge for %s", method)

        return TokenRequest(account=account, scopes=self.scopes, claims=claims)

    async def acquire_token(self, method: str | None = None) -> str:
        """Get an access token string, propagating identity library failures."""
        request = await self.build_request(method)
        token = await self.identity.acquire_token_silent(request)
        return token.access_token
