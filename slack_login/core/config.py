from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Slack Login"
    ENV: str = "dev"
    FRONTEND_URL: str = "http://localhost:3000"
    BACKEND_URL: str = "http://localhost:8000"
    REDIS_URL: str = "redis://localhost:6379/0"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"

    # Slack OAuth 2.0 (Sign in with Slack)
    SLACK_CLIENT_ID: str | None = None
    SLACK_CLIENT_SECRET: str | None = None
    SLACK_REDIRECT_URI: str | None = None  # Defaults to {BACKEND_URL}/auth/oauth/slack/callback
    SLACK_SCOPES: Annotated[list[str], NoDecode] = []
    SLACK_USER_SCOPES: Annotated[list[str], NoDecode] = []
    SLACK_SCOPE_SEPARATOR: str = ","

    # Flow toggles
    OAUTH_USE_STATE: bool = True
    OAUTH_USE_PKCE: bool = False
    OAUTH_STATE_TTL_SECONDS: int = 600
    OAUTH_HTTP_TIMEOUT: float = 10.0

    @field_validator("SLACK_SCOPES", "SLACK_USER_SCOPES", mode="before")
    @classmethod
    def split_scope_string(cls, v):
        """Accept comma separated scope lists from the environment."""
        if isinstance(v, str):
            return [scope.strip() for scope in v.split(",") if scope.strip()]
        return v

    @property
    def slack_redirect_uri(self) -> str:
        return self.SLACK_REDIRECT_URI or f"{self.BACKEND_URL}/auth/oauth/slack/callback"

    @model_validator(mode="after")
    def _validate_oauth_settings(self) -> BaseAppSettings:
        # The PKCE verifier is stored under the state key between login and callback
        if self.OAUTH_USE_PKCE and not self.OAUTH_USE_STATE:
            raise ValueError("OAUTH_USE_PKCE requires OAUTH_USE_STATE")

        required_in_prod = ("SLACK_CLIENT_ID", "SLACK_CLIENT_SECRET")
        if self.ENV.lower() == "prod":
            missing = [name for name in required_in_prod if not getattr(self, name)]
            if missing:
                raise ValueError(f"Missing required production settings: {', '.join(missing)}")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    SLACK_CLIENT_ID: str | None = "test-client-id"
    SLACK_CLIENT_SECRET: str | None = "test-client-secret"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
