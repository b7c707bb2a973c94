"""Sleep endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from fitgate.dependencies import Gateway
from fitgate.fitbit.reports import sleep as sleep_reports

router = APIRouter(prefix="/sleep", tags=["sleep"])


@router.get("/last-night")
async def last_night(gw: Gateway) -> Any:
    return await sleep_reports.last_night(gw)


@router.get("/history")
async def history(gw: Gateway, days: str | None = None) -> Any:
    return await sleep_reports.history(gw, days)


@router.get("/stages-history")
async def stages_history(gw: Gateway, days: str | None = None) -> Any:
    return await sleep_reports.stages_history(gw, days)
