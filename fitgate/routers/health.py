"""Health check endpoints: public, no API key required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from fitgate.dependencies import AppSettings

router = APIRouter(tags=["system"])
logger = logging.getLogger("fitgate.health")


@router.get("/")
@router.get("/health")
async def health_check(request: Request, settings: AppSettings) -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also reports whether a Fitbit credential is currently held.
    """
    gateway = getattr(request.app.state, "gateway", None)
    credential_loaded = bool(gateway and gateway.credentials.has_credential)
    if not credential_loaded:
        logger.debug("Health check: no credential held")

    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "credential_loaded": credential_loaded,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
