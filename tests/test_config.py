"""Tests for environment-driven settings."""
import pytest
from pydantic import ValidationError

from slack_login.core import config


def test_scope_lists_accept_comma_separated_env(monkeypatch):
    monkeypatch.setenv("SLACK_SCOPES", "chat:write, channels:read")
    monkeypatch.setenv("SLACK_USER_SCOPES", "identity.basic")

    settings = config.DevSettings(_env_file=None)

    assert settings.SLACK_SCOPES == ["chat:write", "channels:read"]
    assert settings.SLACK_USER_SCOPES == ["identity.basic"]


def test_redirect_uri_defaults_to_backend_callback():
    settings = config.DevSettings(_env_file=None, BACKEND_URL="https://api.example.com")
    assert settings.slack_redirect_uri == "https://api.example.com/auth/oauth/slack/callback"

    explicit = config.DevSettings(_env_file=None, SLACK_REDIRECT_URI="https://x/cb")
    assert explicit.slack_redirect_uri == "https://x/cb"


def test_pkce_requires_state():
    with pytest.raises(ValidationError, match="OAUTH_USE_PKCE requires OAUTH_USE_STATE"):
        config.TestSettings(_env_file=None, OAUTH_USE_PKCE=True, OAUTH_USE_STATE=False)


def test_prod_requires_slack_credentials(monkeypatch):
    monkeypatch.delenv("SLACK_CLIENT_ID", raising=False)
    monkeypatch.delenv("SLACK_CLIENT_SECRET", raising=False)

    with pytest.raises(ValidationError, match="SLACK_CLIENT_ID"):
        config.ProdSettings(_env_file=None)

    prod = config.ProdSettings(_env_file=None, SLACK_CLIENT_ID="c", SLACK_CLIENT_SECRET="s")
    assert prod.LOG_FORMAT == "json"
