"""OAuth Service coordinating the sign-in flow across providers.

Responsibilities:
- Keep the registry of configured providers
- Start a login (state + PKCE verifier + authorize URL)
- Complete a login (code -> token -> profile -> Identity)

The service holds no per-login state; storing state and verifier between the
redirect and the callback is up to the caller.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from slack_login import metrics

from .exceptions import OAuthTokenError, OAuthUserInfoError
from .identity import Identity
from .pkce import code_challenge, generate_code_verifier
from .providers import OAuthProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginRedirect:
    """Where to send the browser, plus what must be kept for the callback."""

    url: str
    state: str | None = None
    code_verifier: str | None = None


def generate_state() -> str:
    """
    Generate cryptographically secure state token for CSRF protection.

    Returns:
        Random 32-character hex string
    """
    return secrets.token_hex(16)


class OAuthService:
    """OAuth service for Slack (and future) sign-in providers."""

    def __init__(self):
        self._providers: dict[str, OAuthProvider] = {}

    def register_provider(self, name: str, provider: OAuthProvider) -> None:
        """
        Register an OAuth provider.

        Args:
            name: Provider identifier (e.g., "slack")
            provider: Object implementing ``OAuthProvider``
        """
        self._providers[name] = provider
        logger.info(f"Registered OAuth provider: {name}")

    def get_provider(self, name: str) -> OAuthProvider:
        """
        Get registered OAuth provider.

        Raises:
            ValueError: If provider not registered
        """
        if name not in self._providers:
            raise ValueError(f"OAuth provider '{name}' not registered")
        return self._providers[name]

    def list_providers(self) -> list[OAuthProvider]:
        return list(self._providers.values())

    def start_login(self, provider_name: str) -> LoginRedirect:
        """
        Build the authorize redirect for a provider.

        A state token is generated when the provider uses state, and a PKCE
        verifier when it uses PKCE. Both are returned so the caller can keep
        them until the callback.
        """
        provider = self.get_provider(provider_name)
        state = generate_state() if provider.uses_state else None
        code_verifier = generate_code_verifier() if provider.uses_pkce else None
        challenge = code_challenge(code_verifier) if code_verifier else None

        url = provider.get_authorization_url(state=state, code_challenge=challenge)
        return LoginRedirect(url=url, state=state, code_verifier=code_verifier)

    async def authenticate_with_code(
        self, provider_name: str, code: str, code_verifier: str | None = None
    ) -> Identity:
        """
        Authenticate user with OAuth authorization code.

        Complete OAuth flow:
        1. Exchange code for access token
        2. Fetch user info from provider
        3. Map it to an Identity

        An empty access token is fatal here, even though providers pass it
        through untouched.

        Raises:
            ValueError: If provider not registered
            OAuthProviderError: If any step of the OAuth flow fails
        """
        provider = self.get_provider(provider_name)

        try:
            access_token = await provider.exchange_code_for_token(code, code_verifier)
            if not access_token:
                raise OAuthTokenError("No access token in response")
        except OAuthTokenError:
            metrics.oauth_login_failure(provider_name, "token")
            raise

        try:
            user_info = await provider.get_user_info(access_token)
        except OAuthUserInfoError:
            metrics.oauth_login_failure(provider_name, "user_info")
            raise

        if not user_info:
            metrics.oauth_missing_scope(provider_name)
            logger.warning(f"{provider_name} returned no profile; identity scopes were not granted")

        identity = provider.extract_user_data(user_info)
        metrics.oauth_login_success(provider_name)
        logger.info(f"User authenticated via {provider_name}: id={identity.id} team={identity.organization_id}")
        return identity

    async def aclose(self) -> None:
        """Release the HTTP clients held by registered providers."""
        for provider in self._providers.values():
            await provider.aclose()
