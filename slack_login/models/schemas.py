"""API schemas for the OAuth endpoints."""
from pydantic import BaseModel

from slack_login.services.oauth.identity import Identity


class OAuthProviderInfo(BaseModel):
    """Information about an OAuth provider."""
    name: str
    display_name: str
    enabled: bool
    uses_pkce: bool
    icon_url: str | None = None


class OAuthProvidersOut(BaseModel):
    """List of available OAuth providers."""
    providers: list[OAuthProviderInfo]


class OAuthCallbackOut(BaseModel):
    """Response from OAuth callback with the authenticated identity."""
    identity: Identity
    redirect_uri: str
