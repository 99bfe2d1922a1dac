"""Metrics facade.

Service code should ONLY call the semantic helpers here so we can change backend freely.

Metrics:
- oauth_logins_total                 Successful OAuth logins
- oauth_login_failures_total{stage}  Failed logins by flow stage (state, token, user_info)
- oauth_missing_scope_total          Profiles skipped because identity scopes were not granted
"""

from __future__ import annotations

import logging

from prometheus_client import Counter

logger = logging.getLogger("metrics")

_OAUTH_LOGINS = Counter("oauth_logins_total", "Successful OAuth logins", ["provider"])
_OAUTH_LOGIN_FAILURES = Counter(
    "oauth_login_failures_total", "Failed OAuth logins by flow stage", ["provider", "stage"]
)
_OAUTH_MISSING_SCOPE = Counter(
    "oauth_missing_scope_total", "Logins completed without identity scopes", ["provider"]
)


def oauth_login_success(provider: str) -> None:
    _OAUTH_LOGINS.labels(provider=provider).inc()
    logger.debug("metric oauth_logins_total += 1 provider=%s", provider)


def oauth_login_failure(provider: str, stage: str) -> None:
    _OAUTH_LOGIN_FAILURES.labels(provider=provider, stage=stage).inc()
    logger.debug("metric oauth_login_failures_total += 1 provider=%s stage=%s", provider, stage)


def oauth_missing_scope(provider: str) -> None:
    _OAUTH_MISSING_SCOPE.labels(provider=provider).inc()
    logger.debug("metric oauth_missing_scope_total += 1 provider=%s", provider)


__all__ = [
    "oauth_login_success",
    "oauth_login_failure",
    "oauth_missing_scope",
]
