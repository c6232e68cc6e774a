"""HTTP plumbing shared by the tasks client and the challenge handler."""

import logging

import httpx

from todolist_client.api.models import ApiResult, RequestOptions
from todolist_client.exceptions import ResponseDecodeError

logger = logging.getLogger(__name__)


async def send(
    http: httpx.AsyncClient,
    options: RequestOptions,
    resource_id: str | int | None = None,
) -> httpx.Response:
    """Issue the request described by options.

    Raises:
        httpx.HTTPError: On network level failure.
    """
    url = options.url_for(resource_id)
    logger.debug("%s %s", options.method, url)
    return await http.request(
        options.method,
        url,
        headers=options.headers,
        json=options.body,
    )


def parse_json(response: httpx.Response) -> ApiResult:
    """Decode a response body. An empty body decodes to None."""
    if not response.content:
        return ApiResult.success(None)
    try:
        return ApiResult.success(response.json())
    except ValueError as e:
        logger.error("Invalid JSON in %d response: %s", response.status_code, e)
        return ApiResult.failure(ResponseDecodeError(f"Invalid JSON in response: {e}"))
