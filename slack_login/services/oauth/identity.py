"""Normalized identity returned by OAuth providers."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """
    User identity mapped from a provider profile.

    Every field is optional and carried as the provider sent it; Slack ids are
    strings, but an unexpected shape maps through instead of failing the login.
    """

    model_config = ConfigDict(frozen=True)

    id: Any = None
    name: Any = None
    email: Any = None
    avatar_url: Any = None
    organization_id: Any = None
    raw: dict[str, Any] = Field(default_factory=dict)
