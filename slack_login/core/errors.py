"""Exception handlers for the OAuth API.

- ``OAuthStateError``     -> 400, the callback cannot be trusted
- ``OAuthProviderError``  -> 400, Slack refused the code or the token
- anything else           -> 500 with a correlation id
"""
import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slack_login.services.oauth import OAuthProviderError, OAuthStateError

logger = logging.getLogger("slack_login.errors")


def _provider_name(request: Request) -> str:
    return request.path_params.get("provider", "unknown")


def register_error_handlers(app: FastAPI) -> FastAPI:
    @app.exception_handler(OAuthStateError)
    async def oauth_state_error(request: Request, exc: OAuthStateError):
        logger.warning(
            "Rejected OAuth callback provider=%s state=%s: %s",
            _provider_name(request),
            request.query_params.get("state"),
            exc,
        )
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(OAuthProviderError)
    async def oauth_provider_error(request: Request, exc: OAuthProviderError):
        upstream_status = exc.response.status_code if exc.response is not None else None
        logger.error(
            "OAuth authentication failed provider=%s upstream_status=%s: %s",
            _provider_name(request),
            upstream_status,
            exc,
        )
        return JSONResponse(status_code=400, content={"detail": f"OAuth authentication failed: {exc}"})

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):  # noqa: BLE001
        correlation_id = uuid.uuid4().hex
        logger.exception("Unhandled error cid=%s path=%s method=%s", correlation_id, request.url.path, request.method)
        return JSONResponse(status_code=500, content={"detail": "Internal server error", "cid": correlation_id})

    return app
