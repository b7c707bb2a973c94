"""Composite report endpoints for the coaching agent and the dashboard."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from fitgate.dependencies import Gateway
from fitgate.fitbit.reports import summary as summary_reports

router = APIRouter(prefix="/summary", tags=["summary"])


@router.get("/morning-report")
async def morning_report(gw: Gateway) -> Any:
    return await summary_reports.morning_report(gw)


@router.get("/week")
async def week(gw: Gateway) -> Any:
    return await summary_reports.weekly_summary(gw)


@router.get("/snapshot")
@router.get("/grafana-snapshot")
async def snapshot(gw: Gateway) -> Any:
    return await summary_reports.snapshot(gw)
