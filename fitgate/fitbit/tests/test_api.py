"""Tests for the HTTP surface: routing, error mapping, API key check."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from fitgate.config import Settings, get_settings
from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.credentials import CredentialStore
from fitgate.fitbit.models import ClientIdentity
from fitgate.fitbit.tests.conftest import API_BASE, FakeFitbit
from fitgate.main import create_app

ANY_SLEEP_DAY = r"/1\.2/user/-/sleep/date/\d{4}-\d{2}-\d{2}\.json"
ANY_SLEEP_RANGE = r"/1\.2/user/-/sleep/date/\d{4}-\d{2}-\d{2}/\d{4}-\d{2}-\d{2}\.json"


def _client(gateway: object, api_key: str = "") -> TestClient:
    app = create_app(Settings(api_key=api_key, _env_file=None))
    app.state.gateway = gateway
    return TestClient(app, raise_server_exceptions=False)


class TestHealth:
    def test_health_reports_credential(self, gateway: FitbitGateway) -> None:
        client = _client(gateway)
        for path in ("/", "/health"):
            response = client.get(path)
            assert response.status_code == 200
            body = response.json()
            assert body["status"] == "ok"
            assert body["credential_loaded"] is True

    def test_health_reads_injected_settings(self, gateway: FitbitGateway) -> None:
        client = _client(gateway)
        client.app.dependency_overrides[get_settings] = lambda: Settings(
            app_name="fitgate-test", app_version="9.9.9", _env_file=None
        )
        body = client.get("/health").json()
        assert (body["service"], body["version"]) == ("fitgate-test", "9.9.9")

    def test_health_without_gateway(self) -> None:
        app = create_app(Settings(_env_file=None))
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json()["credential_loaded"] is False


class TestDataRoutes:
    def test_last_night(self, gateway: FitbitGateway, fake_fitbit: FakeFitbit, sleep_day_raw: dict) -> None:
        fake_fitbit.add(ANY_SLEEP_DAY, sleep_day_raw)
        response = _client(gateway).get("/sleep/last-night")
        assert response.status_code == 200
        assert response.json()["sleep"]["duration_hours"] == 7.5

    def test_days_query_is_clamped_not_rejected(self, gateway: FitbitGateway, fake_fitbit: FakeFitbit) -> None:
        fake_fitbit.add(ANY_SLEEP_RANGE, {"sleep": []})
        client = _client(gateway)
        assert client.get("/sleep/history", params={"days": "abc"}).json()["days_requested"] == 30
        assert client.get("/sleep/history", params={"days": "7"}).json()["days_requested"] == 7
        assert client.get("/sleep/stages-history", params={"days": "400"}).json()["days_requested"] == 30

    def test_snapshot_survives_provider_failures(self, gateway: FitbitGateway, fake_fitbit: FakeFitbit) -> None:
        fake_fitbit.add(r"/.*", status=500, text="down")
        response = _client(gateway).get("/summary/snapshot")
        assert response.status_code == 200
        assert response.json()["sleep_hours"] is None

    def test_grafana_snapshot_path_serves_the_snapshot(
        self, gateway: FitbitGateway, fake_fitbit: FakeFitbit
    ) -> None:
        fake_fitbit.add(r"/.*", status=500, text="down")
        client = _client(gateway)
        legacy = client.get("/summary/grafana-snapshot")
        assert legacy.status_code == 200
        assert set(legacy.json()) == set(client.get("/summary/snapshot").json())
        assert "resting_hr" in legacy.json()


class TestErrorMapping:
    def test_no_credential_is_401(self, endpoint_config) -> None:
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
        store = CredentialStore(ClientIdentity("id", "secret"), http_client=http)
        gw = FitbitGateway(store, api_base=API_BASE, http_client=http, config=endpoint_config)

        response = _client(gw).get("/heart-rate/today")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    def test_rate_limit_is_429(self, gateway: FitbitGateway, fake_fitbit: FakeFitbit) -> None:
        fake_fitbit.add(r"/.*", status=429, text="Too Many Requests")
        response = _client(gateway).get("/activity/today")
        assert response.status_code == 429
        body = response.json()
        assert body["error"] == "rate_limited"
        assert "retry_after" in body

    def test_provider_status_is_passed_through(self, gateway: FitbitGateway, fake_fitbit: FakeFitbit) -> None:
        fake_fitbit.add(r"/.*", status=503, text="maintenance")
        response = _client(gateway).get("/recovery/history")
        assert response.status_code == 503
        assert response.json() == {
            "error": "provider_error",
            "message": "HTTP 503: maintenance",
            "status_code": 503,
        }

    def test_unexpected_error_is_500(self) -> None:
        gw = MagicMock()
        gw.get_sleep_by_date = AsyncMock(side_effect=RuntimeError("boom"))
        response = _client(gw).get("/sleep/last-night")
        assert response.status_code == 500
        assert response.json()["error"] == "internal_error"


class TestApiKey:
    @pytest.fixture
    def client(self, gateway: FitbitGateway, fake_fitbit: FakeFitbit, sleep_day_raw: dict) -> TestClient:
        fake_fitbit.add(ANY_SLEEP_DAY, sleep_day_raw)
        return _client(gateway, api_key="s3cret")

    def test_missing_key_is_rejected(self, client: TestClient) -> None:
        response = client.get("/sleep/last-night")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    def test_wrong_key_is_rejected(self, client: TestClient) -> None:
        assert client.get("/sleep/last-night", headers={"X-API-Key": "nope"}).status_code == 401

    def test_correct_key_passes(self, client: TestClient) -> None:
        assert client.get("/sleep/last-night", headers={"X-API-Key": "s3cret"}).status_code == 200

    def test_public_paths_need_no_key(self, client: TestClient) -> None:
        assert client.get("/health").status_code == 200
        assert client.get("/").status_code == 200
        assert client.get("/openapi.json").status_code == 200
