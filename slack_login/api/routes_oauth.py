"""
OAuth 2.0 / SSO Authentication Routes.

Endpoints:
- GET  /auth/oauth/providers - List available providers
- GET  /auth/oauth/{provider}/login - Initiate OAuth flow
- GET  /auth/oauth/{provider}/callback - Handle OAuth callback

Follows SRP: Only handles HTTP layer for OAuth.
Flow logic delegated to OAuthService.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Annotated
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import redis
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from slack_login.core.config import settings
from slack_login.models import schemas
from slack_login.services.oauth import (
    OAuthService,
    OAuthStateError,
    create_oauth_service,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth/oauth", tags=["oauth"])


# Redis client for OAuth state storage (shared across workers)
_redis_client: redis.Redis | None = None


def _get_redis_client() -> redis.Redis:
    """Get or create Redis client for OAuth state storage."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
    return _redis_client


async def get_oauth_service() -> AsyncIterator[OAuthService]:
    """Per-request OAuth service; provider HTTP clients are closed afterwards."""
    service = create_oauth_service()
    try:
        yield service
    finally:
        await service.aclose()


def _store_oauth_state(state: str, redirect_uri: str, code_verifier: str | None) -> None:
    """
    Store OAuth state token in Redis with a short expiration.

    Args:
        state: State token for CSRF protection
        redirect_uri: Frontend redirect URI to store with state
        code_verifier: PKCE verifier to send back on code exchange
    """
    redis_client = _get_redis_client()
    key = f"oauth:state:{state}"
    payload = json.dumps({"redirect_uri": redirect_uri, "code_verifier": code_verifier})
    redis_client.setex(key, settings.OAUTH_STATE_TTL_SECONDS, payload)
    logger.debug(f"Stored OAuth state: {state}")


def _load_oauth_state(state: str, consume: bool = True) -> dict[str, str | None]:
    """
    Validate OAuth state token and return what was stored with it.

    Args:
        state: State token from OAuth callback
        consume: Whether to delete the state entry after retrieval

    Raises:
        OAuthStateError: If the state is unknown or expired
    """
    redis_client = _get_redis_client()
    key = f"oauth:state:{state}"

    raw = redis_client.get(key)
    if raw is None:
        raise OAuthStateError("Invalid state token. Possible CSRF attack or expired session.")

    if consume:
        redis_client.delete(key)
        logger.debug(f"Validated and consumed OAuth state: {state}")
    else:
        logger.debug(f"Validated OAuth state without consuming: {state}")

    return json.loads(raw)


def _build_redirect_with_params(base_url: str, params: dict[str, str]) -> str:
    """Append query parameters to an existing URL safely."""
    parsed = urlparse(base_url)
    existing_params = dict(parse_qsl(parsed.query, keep_blank_values=True))
    existing_params.update(params)
    new_query = urlencode(existing_params)
    return urlunparse(parsed._replace(query=new_query))


def _expects_json(request: Request) -> bool:
    accept_header = (request.headers.get("accept", "") or "").lower()
    sec_fetch_mode = (request.headers.get("sec-fetch-mode", "") or "").lower()
    return "application/json" in accept_header or bool(sec_fetch_mode and sec_fetch_mode != "navigate")


@router.get("/providers", response_model=schemas.OAuthProvidersOut)
async def list_oauth_providers(
    oauth_service: Annotated[OAuthService, Depends(get_oauth_service)],
) -> dict:
    """
    List available OAuth providers.

    Returns:
        {
            "providers": [
                {
                    "name": "slack",
                    "display_name": "Slack",
                    "enabled": true,
                    "uses_pkce": false
                }
            ]
        }
    """
    providers = [
        {
            "name": provider.name,
            "display_name": provider.display_name,
            "enabled": True,
            "uses_pkce": provider.uses_pkce,
            "icon_url": getattr(provider, "icon_url", None),
        }
        for provider in oauth_service.list_providers()
    ]
    return {"providers": providers}


@router.get("/{provider}/login")
async def oauth_login(
    provider: str,
    oauth_service: Annotated[OAuthService, Depends(get_oauth_service)],
    redirect_uri: str | None = Query(None, description="Frontend redirect after auth"),
) -> RedirectResponse:
    """
    Initiate OAuth login flow.

    Redirects user to the provider's authorization page.

    Example:
        GET /auth/oauth/slack/login?redirect_uri=https://app.example.com/dashboard
    """
    try:
        login = oauth_service.start_login(provider)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    if login.state is not None:
        _store_oauth_state(login.state, redirect_uri or settings.FRONTEND_URL, login.code_verifier)

    logger.info(f"Initiating OAuth login with {provider}")
    return RedirectResponse(url=login.url)


@router.get("/{provider}/callback", response_model=schemas.OAuthCallbackOut)
async def oauth_callback(
    provider: str,
    request: Request,
    oauth_service: Annotated[OAuthService, Depends(get_oauth_service)],
    code: str | None = Query(None, description="Authorization code from OAuth provider"),
    state: str | None = Query(None, description="CSRF protection token"),
    error: str | None = Query(None, description="Error reported by the provider"),
):
    """
    Handle OAuth provider callback.

    Completes OAuth flow:
    1. Validates CSRF state
    2. Exchanges code for a token
    3. Fetches the user's identity
    4. Returns the normalized identity

    Browser navigations are redirected to the stored frontend URL with the
    original ``code``/``state`` so the frontend can finish the flow over JSON.

    Example:
        GET /auth/oauth/slack/callback?code=xxx&state=abc123
    """
    try:
        oauth_provider = oauth_service.get_provider(provider)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    if error:
        logger.warning(f"OAuth provider {provider} returned error: {error}")
        raise HTTPException(status_code=400, detail=f"OAuth authorization failed: {error}")
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code")

    stored: dict[str, str | None] = {"redirect_uri": settings.FRONTEND_URL, "code_verifier": None}
    if oauth_provider.uses_state:
        if not state:
            raise HTTPException(status_code=400, detail="Missing state token")
        if not _expects_json(request):
            # For browser navigations we redirect back to the frontend with original parameters
            stored = _load_oauth_state(state, consume=False)
            redirect_with_params = _build_redirect_with_params(
                stored["redirect_uri"], {"code": code, "state": state}
            )
            logger.info("Redirecting browser to frontend callback with OAuth code")
            return RedirectResponse(url=redirect_with_params)
        stored = _load_oauth_state(state, consume=True)

    # OAuthStateError / OAuthProviderError are mapped to 400 by the app's error handlers
    identity = await oauth_service.authenticate_with_code(provider, code, stored.get("code_verifier"))

    logger.info(f"OAuth authentication successful for {provider}")
    return {
        "identity": identity,
        "redirect_uri": stored["redirect_uri"],
    }
