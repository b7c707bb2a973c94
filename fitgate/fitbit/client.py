"""Fitbit Web API gateway.

Issues authenticated GET requests, recovers once from an expired access
token by asking the ``CredentialStore`` to refresh, and classifies every
failure into the ``fitgate.fitbit.errors`` taxonomy.  Successful responses
are returned as parsed JSON without interpretation; normalizers turn them
into records.

API base: https://api.fitbit.com
Rate limit: ~150 requests/hour per user (429 beyond that).
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from fitgate.config import Settings
from fitgate.fitbit import metric_requests as mr
from fitgate.fitbit.config_loader import EndpointConfig, get_endpoint_config
from fitgate.fitbit.credentials import CredentialStore
from fitgate.fitbit.errors import (
    AuthExpiredError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitedError,
    UnauthenticatedError,
)
from fitgate.fitbit.metric_requests import MetricRequest

logger = logging.getLogger("fitgate.fitbit.client")

DEFAULT_API_BASE = "https://api.fitbit.com"
DEFAULT_TIMEOUT_SECONDS = 30.0

DateLike = date | str


class FitbitGateway:
    """Authenticated, classified access to the Fitbit Web API."""

    def __init__(
        self,
        credentials: CredentialStore,
        *,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
        config: EndpointConfig | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            credentials: Store holding the active credential.
            api_base:    Provider host.
            timeout:     Per-request timeout in seconds.
            http_client: Optional shared httpx client (injected in tests).
            config:      Fixed endpoint config.  When omitted the process-wide
                         config is read on every access, so a reload applies
                         to a running gateway.
        """
        self._credentials = credentials
        self._api_base = api_base
        self._timeout = timeout
        self._http_client = http_client
        self._config = config

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        credentials: CredentialStore,
        http_client: httpx.AsyncClient | None = None,
    ) -> FitbitGateway:
        return cls(
            credentials,
            api_base=settings.fitbit_api_base,
            timeout=settings.request_timeout_seconds,
            http_client=http_client,
        )

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    @property
    def config(self) -> EndpointConfig:
        return self._config if self._config is not None else get_endpoint_config()

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    async def call(self, request: MetricRequest) -> Any:
        """Execute one provider request and return its JSON body.

        A 401 triggers one credential refresh and, if that succeeds, exactly
        one retry of the same request.  A second 401 is not retried.

        Raises:
            UnauthenticatedError:     No credential is held.
            AuthExpiredError:         Refresh failed, or the retry got 401 again.
            RateLimitedError:         Provider answered 429.
            ProviderError:            Any other non-2xx status, or a non-JSON body.
            ProviderTimeoutError:     The request timed out.
            ProviderUnavailableError: Transport failure.
        """
        token = self._credentials.current_access_token()
        if not token:
            raise UnauthenticatedError("No access token available. Run authentication first.")

        response = await self._send(request, token)

        if response.status_code == 401:
            logger.info("Access token expired, attempting refresh")
            if not await self._credentials.refresh(stale_token=token):
                raise AuthExpiredError("Token expired and refresh failed. Re-authenticate.")
            retry_token = self._credentials.current_access_token()
            if not retry_token:
                raise AuthExpiredError("Token expired and refresh failed. Re-authenticate.")
            response = await self._send(request, retry_token)
            if response.status_code == 401:
                raise AuthExpiredError("Access token rejected after refresh. Re-authenticate.")

        if response.status_code == 429:
            logger.warning("Fitbit rate limit hit on %s", request.path)
            raise RateLimitedError()

        if not response.is_success:
            logger.error("Fitbit API error: %s on %s", response.status_code, request.path)
            raise ProviderError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError:
            logger.error("Fitbit returned a non-JSON body for %s", request.path)
            raise ProviderError(502, f"Invalid JSON from provider: {response.text}") from None

    async def _send(self, request: MetricRequest, token: str) -> httpx.Response:
        url = request.url(self._api_base)
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        try:
            if self._http_client:
                return await self._http_client.get(
                    url, params=request.params, headers=headers, timeout=self._timeout
                )
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.get(url, params=request.params, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("Fitbit request timed out: %s (%s)", request.path, exc)
            raise ProviderTimeoutError(
                f"Request timed out after {self._timeout:g} seconds"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Fitbit request failed: %s (%s)", request.path, exc)
            raise ProviderUnavailableError(f"Request failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Sleep
    # ------------------------------------------------------------------

    async def get_sleep_by_date(self, day: DateLike) -> Any:
        return await self.call(mr.sleep_by_date(day))

    async def get_sleep_range(self, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.sleep_range(start, end, self.config))

    async def get_sleep_list(self, before_date: DateLike, limit: int | None = None) -> Any:
        return await self.call(mr.sleep_list(before_date, limit, self.config))

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    async def get_activity_by_date(self, day: DateLike) -> Any:
        return await self.call(mr.activity_by_date(day))

    async def get_activity_time_series(self, resource: str, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.activity_time_series(resource, start, end, self.config))

    async def get_activity_logs(self, before_date: DateLike, limit: int | None = None) -> Any:
        return await self.call(mr.activity_logs(before_date, limit, self.config))

    async def get_active_zone_minutes_by_date(self, day: DateLike) -> Any:
        return await self.call(mr.active_zone_minutes_by_date(day))

    async def get_active_zone_minutes_range(self, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.active_zone_minutes_range(start, end, self.config))

    # ------------------------------------------------------------------
    # Heart rate
    # ------------------------------------------------------------------

    async def get_heart_rate_by_date(self, day: DateLike, detail_level: str = "1min") -> Any:
        return await self.call(mr.heart_rate_by_date(day, detail_level))

    async def get_heart_rate_range(self, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.heart_rate_range(start, end, self.config))

    # ------------------------------------------------------------------
    # Recovery: HRV, SpO2, breathing rate, skin temperature, cardio fitness
    # ------------------------------------------------------------------

    async def get_hrv_by_date(self, day: DateLike) -> Any:
        return await self.call(mr.family_by_date("hrv", day))

    async def get_hrv_range(self, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.family_range("hrv", start, end, self.config))

    async def get_spo2_by_date(self, day: DateLike) -> Any:
        return await self.call(mr.family_by_date("spo2", day))

    async def get_spo2_range(self, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.family_range("spo2", start, end, self.config))

    async def get_breathing_rate_by_date(self, day: DateLike) -> Any:
        return await self.call(mr.family_by_date("breathing_rate", day))

    async def get_breathing_rate_range(self, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.family_range("breathing_rate", start, end, self.config))

    async def get_temperature_by_date(self, day: DateLike) -> Any:
        return await self.call(mr.family_by_date("temperature", day))

    async def get_temperature_range(self, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.family_range("temperature", start, end, self.config))

    async def get_cardio_fitness_by_date(self, day: DateLike) -> Any:
        return await self.call(mr.family_by_date("cardio_fitness", day))

    async def get_cardio_fitness_range(self, start: DateLike, end: DateLike) -> Any:
        return await self.call(mr.family_range("cardio_fitness", start, end, self.config))
