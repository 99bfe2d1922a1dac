"""HTTP transport shared by the Slack OAuth calls.

Slack reports most API failures as HTTP 200 with ``{"ok": false, "error": ...}``.
The response hook below turns those into ``SlackApiError`` (an
``httpx.HTTPStatusError``) so callers can handle logical API errors and real
HTTP errors the same way.

Strict checking is on for every request. A call site opts out with
``extensions={HTTP_ERRORS: False}``.
"""
from __future__ import annotations

import logging

import httpx

from slack_login.core.config import settings

from .exceptions import SlackApiError

logger = logging.getLogger(__name__)

HTTP_ERRORS = "http_errors"


async def slack_api_error_hook(response: httpx.Response) -> None:
    """Raise ``SlackApiError`` when a strict request gets a body with a falsy ``ok``."""
    request = response.request
    if not request.extensions.get(HTTP_ERRORS, True):
        return

    await response.aread()
    try:
        body = response.json()
    except ValueError:
        # Not JSON; leave it to raise_for_status()
        return

    if isinstance(body, dict) and body.get("ok"):
        return

    error = body.get("error") if isinstance(body, dict) else None
    logger.debug(f"Slack API error | url={request.url} status={response.status_code} error={error}")
    raise SlackApiError(
        f"Slack API call to '{request.url}' failed: {error or 'unknown_error'}",
        request=request,
        response=response,
    )


def build_http_client(
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float | None = None,
) -> httpx.AsyncClient:
    """
    Create the async client used for the token exchange and profile fetch.

    Args:
        transport: Optional transport (e.g. ``httpx.MockTransport`` in tests)
        timeout: Request timeout in seconds; defaults to ``OAUTH_HTTP_TIMEOUT``

    Returns:
        Client with the Slack API error hook installed
    """
    return httpx.AsyncClient(
        transport=transport,
        timeout=timeout if timeout is not None else settings.OAUTH_HTTP_TIMEOUT,
        headers={"Accept": "application/json"},
        event_hooks={"response": [slack_api_error_hook]},
    )
