"""Client for the todo list API."""

import logging
from typing import Any

import httpx

from todolist_client.api.models import ApiResult, RequestOptions
from todolist_client.api.transport import parse_json, send
from todolist_client.auth.handler import ChallengeHandler
from todolist_client.auth.provider import TokenProvider
from todolist_client.exceptions import TransportError

logger = logging.getLogger(__name__)


class TasksClient:
    """CRUD operations on the tasks collection.

    Reads decode the response directly. Writes go through the challenge
    handler since those are the calls a step-up policy protects. Network
    failures come back as failed results, token provider errors are raised.
    """

    def __init__(
        self,
        endpoint: str,
        tokens: TokenProvider,
        handler: ChallengeHandler,
        http: httpx.AsyncClient,
    ):
        self.endpoint = endpoint
        self.tokens = tokens
        self.handler = handler
        self.http = http

    async def _options(
        self, method: str, token_method: str | None, body: Any = None
    ) -> RequestOptions:
        access_token = await self.tokens.acquire_token(token_method)
        headers = {"Authorization": f"Bearer {access_token}"}
        if body is not None:
            headers["Content-Type"] = "application/json"
        return RequestOptions(method=method, url=self.endpoint, headers=headers, body=body)

    async def _send(
        self, options: RequestOptions, resource_id: str | int | None
    ) -> httpx.Response | ApiResult:
        try:
            return await send(self.http, options, resource_id)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", options.method, options.url_for(resource_id), e)
            return ApiResult.failure(TransportError(str(e)))

    async def _read(self, resource_id: str | int | None = None) -> ApiResult:
        options = await self._options("GET", None)
        response = await self._send(options, resource_id)
        if isinstance(response, ApiResult):
            return response
        return parse_json(response)

    async def _write(
        self, method: str, resource_id: str | int | None = None, body: Any = None
    ) -> ApiResult:
        options = await self._options(method, method, body)
        response = await self._send(options, resource_id)
        if isinstance(response, ApiResult):
            return response
        return await self.handler.resolve(response, options, resource_id)

    async def list_tasks(self) -> ApiResult:
        """Get all tasks."""
        return await self._read()

    async def get_task(self, task_id: str | int) -> ApiResult:
        """Get a single task."""
        return await self._read(task_id)

    async def create_task(self, task: dict[str, Any]) -> ApiResult:
        """Create a task."""
        return await self._write("POST", body=task)

    async def delete_task(self, task_id: str | int) -> ApiResult:
        """Delete a task."""
        return await self._write("DELETE", task_id)

    async def update_task(self, task_id: str | int, task: dict[str, Any]) -> ApiResult:
        """Replace a task."""
        return await self._write("PUT", task_id, body=task)
