"""fitgate API: FastAPI application entry point.

Run locally:
    uvicorn fitgate.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fitgate.config import Settings, get_settings
from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.credentials import CredentialStore
from fitgate.fitbit.errors import FitbitError
from fitgate.middleware.api_key import ApiKeyMiddleware
from fitgate.routers import activity, health, heart_rate, recovery, sleep, summary

# ---------- Logging ----------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("fitgate")


# ---------- Lifespan ----------

def build_gateway(settings: Settings, http_client: httpx.AsyncClient) -> FitbitGateway:
    """Load the credential and wire the gateway around a shared HTTP client."""
    credentials = CredentialStore.from_settings(settings, http_client=http_client)
    if credentials.load() is None:
        logger.warning("No Fitbit credential loaded; data routes will answer 401")
    return FitbitGateway.from_settings(settings, credentials, http_client=http_client)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(
        "Starting fitgate v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    http_client = httpx.AsyncClient(timeout=settings.request_timeout_seconds)
    gateway = build_gateway(settings, http_client)
    app.state.http_client = http_client
    app.state.credentials = gateway.credentials
    app.state.gateway = gateway
    yield
    await http_client.aclose()
    logger.info("fitgate shut down")


# ---------- Error mapping ----------

async def fitbit_error_handler(request: Request, exc: FitbitError) -> JSONResponse:
    logger.warning("%s %s failed (%s): %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code or 500, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "message": str(exc) or exc.__class__.__name__},
    )


# ---------- App factory ----------

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="fitgate",
        description=(
            "Authenticated gateway over the Fitbit Web API: normalized sleep, "
            "heart rate, activity and recovery data plus composite reports."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(ApiKeyMiddleware, settings=settings)

    app.add_exception_handler(FitbitError, fitbit_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health.router)
    app.include_router(sleep.router)
    app.include_router(heart_rate.router)
    app.include_router(activity.router)
    app.include_router(recovery.router)
    app.include_router(summary.router)

    return app


app = create_app()
