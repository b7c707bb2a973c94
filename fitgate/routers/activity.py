"""Activity endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from fitgate.dependencies import Gateway
from fitgate.fitbit.reports import activity as activity_reports

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("/today")
async def today(gw: Gateway) -> Any:
    return await activity_reports.today(gw)


@router.get("/history")
async def history(gw: Gateway, days: str | None = None) -> Any:
    return await activity_reports.history(gw, days)


@router.get("/exercises")
async def exercises(gw: Gateway, limit: str | None = None) -> Any:
    return await activity_reports.exercises(gw, limit)
