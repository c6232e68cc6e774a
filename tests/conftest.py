"""Shared test fixtures."""

from unittest.mock import AsyncMock

import httpx
import pytest

from todolist_client.api.models import RequestOptions
from todolist_client.auth.models import AccessToken, Account
from todolist_client.auth.storage import MemoryChallengeStore

from helpers import ENDPOINT


@pytest.fixture
def account() -> Account:
    """Signed-in account."""
    return Account(home_account_id="uid.tid", username="ada@example.com")


@pytest.fixture
def identity(account):
    """Identity client whose flows all succeed."""
    client = AsyncMock()
    client.get_active_account.return_value = account
    client.acquire_token_silent.return_value = AccessToken(access_token="silent-token")
    client.acquire_token_popup.return_value = AccessToken(access_token="popup-token")
    client.acquire_token_redirect.return_value = AccessToken(access_token="redirect-token")
    return client


@pytest.fixture
def store() -> MemoryChallengeStore:
    """Empty in-memory challenge store."""
    return MemoryChallengeStore()


@pytest.fixture
def make_http():
    """Build an httpx client answering with canned responses.

    Returns (client, sent) where sent collects every request issued. A canned
    exception is raised instead of answering.
    """

    def _make(*responses):
        sent: list[httpx.Request] = []
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            answer = queue.pop(0)
            if isinstance(answer, Exception):
                raise answer
            return answer

        return httpx.AsyncClient(transport=httpx.MockTransport(handler)), sent

    return _make


@pytest.fixture
def put_options() -> RequestOptions:
    """Options of a PUT that may get challenged."""
    return RequestOptions(
        method="PUT",
        url=ENDPOINT,
        headers={"Authorization": "Bearer old-token", "Content-Type": "application/json"},
        body={"id": 1, "description": "walk the dog"},
    )
