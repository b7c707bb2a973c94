"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from fitgate.config import Settings, get_settings
from fitgate.fitbit.client import FitbitGateway


async def get_gateway(request: Request) -> FitbitGateway:
    """The gateway built by the app lifespan and kept on ``app.state``."""
    return request.app.state.gateway


# Annotated shortcuts for route signatures
Gateway = Annotated[FitbitGateway, Depends(get_gateway)]
AppSettings = Annotated[Settings, Depends(get_settings)]
