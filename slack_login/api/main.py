from fastapi import FastAPI

from slack_login.api.routes_health import router as health_router
from slack_login.api.routes_metrics import router as metrics_router
from slack_login.api.routes_oauth import router as oauth_router
from slack_login.core.config import settings
from slack_login.core.errors import register_error_handlers
from slack_login.core.logger import init_logging


def create_app() -> FastAPI:
    init_logging()

    # Disable interactive docs in production
    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    register_error_handlers(app)
    app.include_router(oauth_router, tags=["oauth"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)
    return app


app = create_app()
