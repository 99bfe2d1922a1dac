"""OAuth providers module."""
from .base import OAuthProvider
from .slack import AuthorizationRequest, SlackOAuthProvider

__all__ = ["OAuthProvider", "AuthorizationRequest", "SlackOAuthProvider"]
