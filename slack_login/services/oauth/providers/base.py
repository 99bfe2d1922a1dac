"""Capability interface shared by OAuth 2.0 providers.

Providers are plain classes that satisfy ``OAuthProvider`` structurally; the
service layer only depends on this protocol.
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from ..identity import Identity


def unique_scopes(scopes: Iterable[str] | str | None) -> tuple[str, ...]:
    """De-duplicate scopes, keeping first-seen order."""
    if scopes is None:
        return ()
    if isinstance(scopes, str):
        scopes = [scopes]
    return tuple(dict.fromkeys(scopes))


@runtime_checkable
class OAuthProvider(Protocol):
    """Authorization code flow as seen by the service layer."""

    name: str
    display_name: str

    @property
    def uses_state(self) -> bool:
        """Whether a CSRF ``state`` is sent and must be verified."""
        ...

    @property
    def uses_pkce(self) -> bool:
        """Whether a PKCE challenge is sent and a verifier must be kept."""
        ...

    def get_authorization_url(self, state: str | None = None, code_challenge: str | None = None) -> str:
        ...

    async def exchange_code_for_token(self, code: str, code_verifier: str | None = None) -> str | None:
        ...

    async def get_user_info(self, access_token: str) -> dict[str, Any]:
        ...

    def extract_user_data(self, user_info: dict[str, Any]) -> Identity:
        ...

    async def aclose(self) -> None:
        ...
