"""Slack OAuth 2.0 ("Sign in with Slack", v2 flow) implementation.

Flow:
1. ``get_authorization_url`` - redirect target at slack.com/oauth/v2/authorize
2. ``exchange_code_for_token`` - oauth.v2.access, user token at authed_user.access_token
3. ``get_user_info`` - users.identity with the user token
4. ``extract_user_data`` - normalize the identity payload
"""
from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import urlencode

import httpx

from slack_login.utils.nested import get_path

from ..exceptions import OAuthTokenError, OAuthUserInfoError, SlackApiError
from ..identity import Identity
from ..pkce import CODE_CHALLENGE_METHOD
from ..transport import build_http_client
from .base import unique_scopes

logger = logging.getLogger(__name__)

# Requested when the caller configured neither bot nor user scopes
DEFAULT_USER_SCOPES = ("identity.basic", "identity.email", "identity.team", "identity.avatar")


def _fingerprint(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()[:12]


@dataclass(frozen=True)
class AuthorizationRequest:
    """Query parameters of a Slack authorize redirect."""

    client_id: str
    redirect_uri: str
    scopes: tuple[str, ...] = ()
    user_scopes: tuple[str, ...] = ()
    scope_separator: str = ","
    state: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    extra_parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra_parameters", MappingProxyType(dict(self.extra_parameters)))

    def to_query(self) -> dict[str, Any]:
        """Ordered fields; extra parameters win on key collision."""
        fields: dict[str, Any] = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope_separator.join(self.scopes),
            "user_scope": self.scope_separator.join(self.user_scopes),
            "response_type": "code",
            "granular_bot_scope": "true",
        }
        if self.state is not None:
            fields["state"] = self.state
        if self.code_challenge is not None:
            fields["code_challenge"] = self.code_challenge
            fields["code_challenge_method"] = self.code_challenge_method
        fields.update(self.extra_parameters)
        return fields

    def to_url(self, base_url: str) -> str:
        return f"{base_url}?{urlencode(self.to_query())}"


class SlackOAuthProvider:
    """
    Slack OAuth 2.0 provider.

    Holds the client configuration and one lazily created ``httpx.AsyncClient``
    shared by the token exchange and the profile fetch. Release it with
    ``aclose()`` or by using the provider as an async context manager.
    """

    name = "slack"
    display_name = "Slack"
    icon_url = "https://a.slack-edge.com/80588/marketing/img/meta/favicon-32.png"

    authorization_url = "https://slack.com/oauth/v2/authorize"
    token_url = "https://slack.com/api/oauth.v2.access"
    user_info_url = "https://slack.com/api/users.identity"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: Iterable[str] | None = None,
        user_scopes: Iterable[str] | None = None,
        scope_separator: str = ",",
        stateless: bool = False,
        enable_pkce: bool = False,
        parameters: Mapping[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize Slack provider.

        Args:
            client_id: Slack app client ID
            client_secret: Slack app client secret
            redirect_uri: Callback URL registered with the Slack app
            scopes: Bot scopes (``scope`` parameter)
            user_scopes: User token scopes (``user_scope`` parameter)
            scope_separator: Separator used to join scopes
            stateless: Skip the CSRF ``state`` parameter
            enable_pkce: Send a PKCE challenge and the verifier on exchange
            parameters: Extra authorize parameters, applied last
            transport: Optional httpx transport for the API client
            timeout: Optional request timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = unique_scopes(scopes)
        self.user_scopes = unique_scopes(user_scopes)
        self.scope_separator = scope_separator
        self.stateless = stateless
        self.enable_pkce = enable_pkce
        self.parameters: dict[str, Any] = dict(parameters or {})
        self._transport = transport
        self._timeout = timeout
        self._http_client: httpx.AsyncClient | None = None

    # -- configuration ---------------------------------------------------

    @property
    def uses_state(self) -> bool:
        return not self.stateless

    @property
    def uses_pkce(self) -> bool:
        return self.enable_pkce

    def set_scopes(self, scopes: Iterable[str] | str) -> SlackOAuthProvider:
        self.scopes = unique_scopes(scopes)
        return self

    def add_scopes(self, scopes: Iterable[str] | str) -> SlackOAuthProvider:
        self.scopes = unique_scopes(self.scopes + unique_scopes(scopes))
        return self

    def set_user_scopes(self, scopes: Iterable[str] | str) -> SlackOAuthProvider:
        self.user_scopes = unique_scopes(scopes)
        return self

    def with_parameters(self, parameters: Mapping[str, Any]) -> SlackOAuthProvider:
        self.parameters = dict(parameters)
        return self

    def set_stateless(self, stateless: bool = True) -> SlackOAuthProvider:
        self.stateless = stateless
        return self

    def set_pkce(self, enabled: bool = True) -> SlackOAuthProvider:
        self.enable_pkce = enabled
        return self

    def get_user_scopes(self) -> tuple[str, ...]:
        if not self.user_scopes and not self.scopes:
            return DEFAULT_USER_SCOPES
        return self.user_scopes

    # -- HTTP client -----------------------------------------------------

    def get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = build_http_client(transport=self._transport, timeout=self._timeout)
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> SlackOAuthProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- authorization request -------------------------------------------

    def build_authorization_request(
        self, state: str | None = None, code_challenge: str | None = None
    ) -> AuthorizationRequest:
        """
        Collect the authorize parameters for this provider's configuration.

        ``state`` is only included when state is in use, and the challenge pair
        only when PKCE is enabled.
        """
        return AuthorizationRequest(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scopes=self.scopes,
            user_scopes=self.get_user_scopes(),
            scope_separator=self.scope_separator,
            state=state if self.uses_state else None,
            code_challenge=code_challenge if self.uses_pkce else None,
            code_challenge_method=CODE_CHALLENGE_METHOD if self.uses_pkce else None,
            extra_parameters=self.parameters,
        )

    def get_authorization_url(self, state: str | None = None, code_challenge: str | None = None) -> str:
        return self.build_authorization_request(state, code_challenge).to_url(self.authorization_url)

    # -- token exchange --------------------------------------------------

    def get_token_fields(self, code: str, code_verifier: str | None = None) -> dict[str, str]:
        fields = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri,
        }
        if self.uses_pkce and code_verifier is not None:
            fields["code_verifier"] = code_verifier
        return fields

    async def get_access_token_response(self, code: str, code_verifier: str | None = None) -> dict[str, Any]:
        """
        POST the authorization code to oauth.v2.access.

        Returns:
            Decoded token response (bot token, team, authed_user, ...)

        Raises:
            OAuthTokenError: On network errors, HTTP errors or ``"ok": false``
        """
        code_hash = _fingerprint(code)
        logger.info(
            f"Token exchange attempt | "
            f"provider={self.name} "
            f"code_hash={code_hash} "
            f"client_id={self.client_id} "
            f"redirect_uri={self.redirect_uri}"
        )
        client = self.get_http_client()
        try:
            response = await client.post(self.token_url, data=self.get_token_fields(code, code_verifier))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Token exchange failed | "
                f"code_hash={code_hash} "
                f"status={e.response.status_code} "
                f"response={e.response.text}"
            )
            raise OAuthTokenError(
                f"Token exchange failed: {_describe(e)}",
                request=e.request,
                response=e.response,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Token exchange request failed: {str(e)}")
            raise OAuthTokenError("Failed to connect to OAuth provider", request=e.request) from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Token exchange returned non-JSON body | code_hash={code_hash} response={response.text}")
            raise OAuthTokenError(
                "Token exchange failed: invalid_response",
                request=response.request,
                response=response,
            ) from e

        logger.info(f"Token exchange SUCCESS | code_hash={code_hash}")
        return body

    @staticmethod
    def parse_access_token(body: Mapping[str, Any]) -> str | None:
        return get_path(body, "authed_user.access_token")

    async def exchange_code_for_token(self, code: str, code_verifier: str | None = None) -> str | None:
        """
        Exchange authorization code for the user access token.

        An absent ``authed_user.access_token`` is returned as ``None``; deciding
        whether that is fatal is left to the caller.
        """
        body = await self.get_access_token_response(code, code_verifier)
        return self.parse_access_token(body)

    # -- profile ---------------------------------------------------------

    async def get_user_info(self, access_token: str) -> dict[str, Any]:
        """
        Fetch the signed-in user's identity.

        Reading users.identity needs the ``identity.*`` user scopes. Apps may
        leave them out on purpose, so a ``missing_scope`` error yields an empty
        profile instead of failing the login.

        Raises:
            OAuthUserInfoError: On any other transport or Slack API error
        """
        headers = {"Authorization": f"Bearer {access_token}"}
        client = self.get_http_client()
        try:
            response = await client.get(self.user_info_url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if get_path(_json_or_none(e.response), "error") == "missing_scope":
                logger.info("users.identity returned missing_scope; continuing with empty profile")
                return {}
            logger.error(f"User info fetch failed: {e.response.text}")
            raise OAuthUserInfoError(
                f"User info fetch failed: {_describe(e)}",
                request=e.request,
                response=e.response,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"User info request failed: {str(e)}")
            raise OAuthUserInfoError("Failed to connect to OAuth provider", request=e.request) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"User info returned non-JSON body: {response.text}")
            raise OAuthUserInfoError(
                "User info fetch failed: invalid_response",
                request=response.request,
                response=response,
            ) from e

    def extract_user_data(self, user_info: dict[str, Any]) -> Identity:
        """
        Map a users.identity payload onto ``Identity``.

        Expected shape::

            {"user": {"id", "name", "email", "image_192"}, "team": {"id"}}
        """
        return Identity(
            id=get_path(user_info, "user.id"),
            name=get_path(user_info, "user.name"),
            email=get_path(user_info, "user.email"),
            avatar_url=get_path(user_info, "user.image_192"),
            organization_id=get_path(user_info, "team.id"),
            raw=user_info,
        )

    async def user_from_token(self, access_token: str) -> Identity:
        return self.extract_user_data(await self.get_user_info(access_token))


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _describe(error: httpx.HTTPStatusError) -> str:
    if isinstance(error, SlackApiError):
        return error.error_code or "unknown_error"
    return str(error.response.status_code)
