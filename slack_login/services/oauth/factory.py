"""Factory function for creating configured OAuth service."""
import logging

import httpx

from slack_login.core.config import settings

from .providers import SlackOAuthProvider
from .service import OAuthService

logger = logging.getLogger(__name__)


def create_oauth_service(transport: httpx.AsyncBaseTransport | None = None) -> OAuthService:
    """
    Factory function to create configured OAuth service.

    Automatically registers all enabled OAuth providers.

    Args:
        transport: Optional httpx transport handed to every provider client

    Returns:
        Configured OAuthService instance
    """
    service = OAuthService()

    # Register Slack OAuth if configured
    if settings.SLACK_CLIENT_ID and settings.SLACK_CLIENT_SECRET:
        slack_provider = SlackOAuthProvider(
            client_id=settings.SLACK_CLIENT_ID,
            client_secret=settings.SLACK_CLIENT_SECRET,
            redirect_uri=settings.slack_redirect_uri,
            scopes=settings.SLACK_SCOPES,
            user_scopes=settings.SLACK_USER_SCOPES,
            scope_separator=settings.SLACK_SCOPE_SEPARATOR,
            stateless=not settings.OAUTH_USE_STATE,
            enable_pkce=settings.OAUTH_USE_PKCE,
            transport=transport,
        )
        service.register_provider(slack_provider.name, slack_provider)
        logger.info("Slack OAuth provider enabled")
    else:
        logger.warning("Slack OAuth not configured (missing client ID/secret)")

    return service
