from __future__ import annotations

import logging
import time

from fastapi import APIRouter, HTTPException

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


def _check_redis() -> bool:
    try:
        from slack_login.api.routes_oauth import _get_redis_client
        return bool(_get_redis_client().ping())
    except Exception:  # noqa: BLE001
        logger.warning("Redis health check failed", exc_info=True)
        return False


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    """Basic liveness probe (cheap)."""
    return {"status": "ok"}


@router.get("/readyz")
async def readyz() -> dict[str, object]:
    """Readiness: OAuth state storage must be reachable."""
    start = time.time()
    redis_ok = _check_redis()
    duration_ms = int((time.time() - start) * 1000)
    if not redis_ok:
        raise HTTPException(status_code=503, detail={"redis": redis_ok, "latency_ms": duration_ms})
    return {"status": "ready", "redis": redis_ok, "latency_ms": duration_ms}
