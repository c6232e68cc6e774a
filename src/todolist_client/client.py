"""Factories wiring settings, auth and transport into a TasksClient."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from todolist_client.api.tasks import TasksClient
from todolist_client.auth.handler import ChallengeHandler
from todolist_client.auth.identity import IdentityClient, MsalIdentityClient
from todolist_client.auth.provider import TokenProvider
from todolist_client.auth.storage import (
    CHALLENGES_FILE,
    ChallengeStore,
    FileChallengeStore,
    _get_data_dir,
    load_token_cache,
    save_token_cache,
)
from todolist_client.exceptions import ConfigurationError
from todolist_client.settings import Settings, get_settings

logger = logging.getLogger(__name__)


async def create_identity(settings: Settings) -> MsalIdentityClient:
    """Create an MSAL identity client backed by the persisted token cache.

    Raises:
        ConfigurationError: If no client id is configured.
    """
    if not settings.client_id:
        raise ConfigurationError("client_id")
    cache = await load_token_cache(settings.data_dir)
    return MsalIdentityClient(
        settings.client_id,
        settings.authority,
        cache=cache,
        interactive_timeout=settings.interactive_timeout,
    )


def create_challenge_store(settings: Settings) -> FileChallengeStore:
    """Create the on-disk challenge store."""
    return FileChallengeStore(_get_data_dir(settings.data_dir) / CHALLENGES_FILE)


def build_tasks_client(
    settings: Settings,
    identity: IdentityClient,
    store: ChallengeStore,
    http: httpx.AsyncClient,
) -> TasksClient:
    """Assemble a TasksClient from its collaborators."""
    tokens = TokenProvider(identity, store, settings.api_scopes)
    handler = ChallengeHandler(
        identity,
        store,
        http,
        settings.api_scopes,
        policy=settings.challenge_policy,
    )
    return TasksClient(settings.api_endpoint, tokens, handler, http)


@asynccontextmanager
async def open_tasks_client(settings: Settings | None = None) -> AsyncIterator[TasksClient]:
    """Open a TasksClient, saving the token cache when done."""
    settings = settings or get_settings()
    identity = await create_identity(settings)
    store = create_challenge_store(settings)

    async with httpx.AsyncClient(timeout=settings.request_timeout) as http:
        try:
            yield build_tasks_client(settings, identity, store, http)
        finally:
            await save_token_cache(identity.cache, settings.data_dir)
            logger.debug("Token cache saved")
