"""OAuth service exceptions."""
from __future__ import annotations

import httpx


class OAuthProviderError(Exception):
    """Raised when OAuth provider communication fails."""

    def __init__(
        self,
        message: str,
        *,
        request: httpx.Request | None = None,
        response: httpx.Response | None = None,
    ):
        super().__init__(message)
        self.request = request
        self.response = response


class OAuthTokenError(OAuthProviderError):
    """Raised when token exchange fails."""


class OAuthUserInfoError(OAuthProviderError):
    """Raised when fetching user info fails."""


class OAuthStateError(OAuthProviderError):
    """Raised when the callback state is missing, unknown or expired."""


class SlackApiError(httpx.HTTPStatusError):
    """Slack answered with ``"ok": false``, whatever the HTTP status was."""

    @property
    def error_code(self) -> str | None:
        try:
            body = self.response.json()
        except ValueError:
            return None
        return body.get("error") if isinstance(body, dict) else None
