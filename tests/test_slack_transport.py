"""Tests for the Slack API error response hook."""
import httpx
import pytest

from slack_login.services.oauth import SlackApiError
from slack_login.services.oauth.transport import HTTP_ERRORS, build_http_client

URL = "https://slack.com/api/auth.test"


def _client(response: httpx.Response) -> httpx.AsyncClient:
    return build_http_client(transport=httpx.MockTransport(lambda request: response))


@pytest.mark.asyncio
async def test_ok_response_passes_through():
    async with _client(httpx.Response(200, json={"ok": True, "team": "T1"})) as client:
        response = await client.get(URL)

    assert response.json() == {"ok": True, "team": "T1"}


@pytest.mark.asyncio
async def test_ok_false_raises_even_on_http_200():
    async with _client(httpx.Response(200, json={"ok": False, "error": "invalid_auth"})) as client:
        with pytest.raises(SlackApiError) as exc_info:
            await client.get(URL)

    error = exc_info.value
    assert isinstance(error, httpx.HTTPStatusError)
    assert error.error_code == "invalid_auth"
    assert error.request.url == URL
    assert error.response.status_code == 200


@pytest.mark.asyncio
async def test_missing_ok_field_counts_as_failure():
    async with _client(httpx.Response(200, json={"error": "fatal_error"})) as client:
        with pytest.raises(SlackApiError):
            await client.get(URL)


@pytest.mark.asyncio
async def test_non_json_body_is_left_to_status_checks():
    async with _client(httpx.Response(200, text="plain")) as client:
        response = await client.get(URL)

    assert response.text == "plain"


@pytest.mark.asyncio
async def test_requests_can_opt_out_of_strict_errors():
    async with _client(httpx.Response(200, json={"ok": False, "error": "invalid_auth"})) as client:
        response = await client.get(URL, extensions={HTTP_ERRORS: False})

    assert response.json()["error"] == "invalid_auth"


def test_client_defaults():
    client = build_http_client(timeout=3.0)

    assert client.timeout.read == 3.0
    assert client.headers["accept"] == "application/json"
