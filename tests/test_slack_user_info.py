"""Tests for fetching and mapping users.identity."""
import httpx
import pytest

from slack_login.services.oauth import Identity, OAuthUserInfoError, SlackApiError

from conftest import IDENTITY_PAYLOAD, IDENTITY_URL


@pytest.mark.asyncio
async def test_get_user_info_sends_bearer_token(slack_api, make_provider):
    slack_api.on(IDENTITY_URL, httpx.Response(200, json=IDENTITY_PAYLOAD))

    async with make_provider() as provider:
        profile = await provider.get_user_info("xoxp-user")

    assert profile == IDENTITY_PAYLOAD
    request = slack_api.requests[0]
    assert request.method == "GET"
    assert request.headers["authorization"] == "Bearer xoxp-user"


@pytest.mark.asyncio
async def test_missing_scope_returns_empty_profile(slack_api, make_provider):
    slack_api.on(IDENTITY_URL, httpx.Response(200, json={"ok": False, "error": "missing_scope"}))

    async with make_provider() as provider:
        assert await provider.get_user_info("xoxp-user") == {}


@pytest.mark.asyncio
async def test_missing_scope_on_http_error_returns_empty_profile(slack_api, make_provider):
    slack_api.on(IDENTITY_URL, httpx.Response(403, json={"ok": False, "error": "missing_scope"}))

    async with make_provider() as provider:
        assert await provider.get_user_info("xoxp-user") == {}


@pytest.mark.asyncio
async def test_other_slack_errors_propagate(slack_api, make_provider):
    slack_api.on(IDENTITY_URL, httpx.Response(200, json={"ok": False, "error": "invalid_auth"}))

    async with make_provider() as provider:
        with pytest.raises(OAuthUserInfoError, match="invalid_auth") as exc_info:
            await provider.get_user_info("xoxp-user")

    cause = exc_info.value.__cause__
    assert isinstance(cause, SlackApiError)
    assert cause.error_code == "invalid_auth"
    assert exc_info.value.response is cause.response


@pytest.mark.asyncio
async def test_non_json_http_error_propagates(slack_api, make_provider):
    slack_api.on(IDENTITY_URL, httpx.Response(502, text="<html>bad gateway</html>"))

    async with make_provider() as provider:
        with pytest.raises(OAuthUserInfoError, match="502") as exc_info:
            await provider.get_user_info("xoxp-user")

    assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
    assert not isinstance(exc_info.value.__cause__, SlackApiError)


@pytest.mark.asyncio
async def test_network_error_propagates(slack_api, make_provider):
    def _fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    slack_api.on(IDENTITY_URL, _fail)

    async with make_provider() as provider:
        with pytest.raises(OAuthUserInfoError, match="Failed to connect"):
            await provider.get_user_info("xoxp-user")


def test_extract_user_data_maps_identity_fields(make_provider):
    identity = make_provider().extract_user_data(IDENTITY_PAYLOAD)

    assert identity == Identity(
        id="U1",
        name="Ann",
        email="a@x.com",
        avatar_url="http://img",
        organization_id="T1",
        raw=IDENTITY_PAYLOAD,
    )
    assert identity.raw == IDENTITY_PAYLOAD


def test_extract_user_data_from_empty_profile(make_provider):
    identity = make_provider().extract_user_data({})

    assert identity.id is None
    assert identity.name is None
    assert identity.email is None
    assert identity.avatar_url is None
    assert identity.organization_id is None
    assert identity.raw == {}


def test_extract_user_data_partial_profile(make_provider):
    identity = make_provider().extract_user_data({"ok": True, "user": {"id": "U2", "name": "Bo"}})

    assert identity.id == "U2"
    assert identity.name == "Bo"
    assert identity.email is None
    assert identity.organization_id is None


@pytest.mark.asyncio
async def test_user_from_token(slack_api, make_provider):
    slack_api.on(IDENTITY_URL, httpx.Response(200, json=IDENTITY_PAYLOAD))

    async with make_provider() as provider:
        identity = await provider.user_from_token("xoxp-user")

    assert identity.email == "a@x.com"


@pytest.mark.asyncio
async def test_http_client_is_reused_and_released(slack_api, make_provider):
    slack_api.on(IDENTITY_URL, httpx.Response(200, json=IDENTITY_PAYLOAD))
    provider = make_provider()

    client = provider.get_http_client()
    assert provider.get_http_client() is client
    await provider.get_user_info("xoxp-user")
    await provider.aclose()

    assert client.is_closed
    assert provider.get_http_client() is not client
    await provider.aclose()


def test_extract_user_data_passes_unexpected_value_types_through(make_provider):
    raw = {"user": {"id": 42, "name": None}, "team": {"id": ["T"]}}

    identity = make_provider().extract_user_data(raw)

    assert identity.id == 42
    assert identity.name is None
    assert identity.organization_id == ["T"]
    assert identity.raw == raw


@pytest.mark.asyncio
async def test_non_json_success_body_raises_user_info_error(slack_api, make_provider):
    slack_api.on(IDENTITY_URL, httpx.Response(200, text="<html>maintenance</html>"))

    async with make_provider() as provider:
        with pytest.raises(OAuthUserInfoError, match="invalid_response") as exc_info:
            await provider.get_user_info("xoxp-user")

    assert isinstance(exc_info.value.__cause__, ValueError)
    assert exc_info.value.response.status_code == 200
    assert exc_info.value.request.url == IDENTITY_URL
