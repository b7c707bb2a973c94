"""Heart rate endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from fitgate.dependencies import Gateway
from fitgate.fitbit.reports import heart_rate as heart_rate_reports

router = APIRouter(prefix="/heart-rate", tags=["heart-rate"])


@router.get("/today")
async def today(gw: Gateway) -> Any:
    return await heart_rate_reports.today(gw)


@router.get("/resting/history")
async def resting_history(gw: Gateway, days: str | None = None) -> Any:
    return await heart_rate_reports.resting_history(gw, days)
