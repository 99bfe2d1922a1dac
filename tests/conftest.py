from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

from collections.abc import Callable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from slack_login.services.oauth import SlackOAuthProvider  # noqa: E402

TOKEN_URL = "https://slack.com/api/oauth.v2.access"
IDENTITY_URL = "https://slack.com/api/users.identity"

IDENTITY_PAYLOAD = {
    "ok": True,
    "user": {
        "id": "U1",
        "name": "Ann",
        "email": "a@x.com",
        "image_192": "http://img",
    },
    "team": {"id": "T1"},
}


class SlackApiStub:
    """Routes httpx requests to canned Slack responses and records them."""

    def __init__(self):
        self.responses: dict[str, httpx.Response | Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, url: str, response: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> SlackApiStub:
        self.responses[url] = response
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        response = self.responses.get(url)
        if response is None:
            return httpx.Response(404, json={"ok": False, "error": "unknown_method"})
        if callable(response):
            return response(request)
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def slack_api() -> SlackApiStub:
    return SlackApiStub()


@pytest.fixture
def make_provider(slack_api):
    def _make(**overrides) -> SlackOAuthProvider:
        options = {
            "client_id": "client-123",
            "client_secret": "secret-456",
            "redirect_uri": "https://app.example.com/callback",
            "transport": slack_api.transport,
        }
        options.update(overrides)
        return SlackOAuthProvider(**options)

    return _make


class FakeRedis:
    """In-memory stand-in for the handful of redis calls the OAuth routes make."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value
        self.ttls[key] = ttl

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def delete(self, key: str) -> int:
        self.ttls.pop(key, None)
        return 1 if self.store.pop(key, None) is not None else 0

    def ping(self) -> bool:
        return True


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    from slack_login.api import routes_oauth

    fake = FakeRedis()
    monkeypatch.setattr(routes_oauth, "_get_redis_client", lambda: fake)
    return fake
