"""Slack OAuth 2.0 sign-in.

Providers:
- Slack (OAuth v2, users.identity)

Flow: authorize URL -> code exchange -> profile fetch -> Identity.
"""
from .exceptions import (
    OAuthProviderError,
    OAuthStateError,
    OAuthTokenError,
    OAuthUserInfoError,
    SlackApiError,
)
from .factory import create_oauth_service
from .identity import Identity
from .providers import (
    AuthorizationRequest,
    OAuthProvider,
    SlackOAuthProvider,
)
from .service import LoginRedirect, OAuthService

__all__ = [
    # Exceptions
    "OAuthProviderError",
    "OAuthStateError",
    "OAuthTokenError",
    "OAuthUserInfoError",
    "SlackApiError",
    # Models
    "AuthorizationRequest",
    "Identity",
    "LoginRedirect",
    # Providers
    "OAuthProvider",
    "SlackOAuthProvider",
    # Service
    "OAuthService",
    # Factory
    "create_oauth_service",
]
