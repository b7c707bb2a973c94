"""Recovery endpoints: HRV, SpO2, breathing rate, skin temperature."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from fitgate.dependencies import Gateway
from fitgate.fitbit.reports import recovery as recovery_reports

router = APIRouter(prefix="/recovery", tags=["recovery"])


@router.get("/today")
async def today(gw: Gateway) -> Any:
    return await recovery_reports.today(gw)


@router.get("/history")
async def history(gw: Gateway, days: str | None = None) -> Any:
    return await recovery_reports.history(gw, days)
