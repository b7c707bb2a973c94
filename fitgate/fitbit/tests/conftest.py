"""Shared fixtures and a routed fake of the Fitbit Web API for gateway tests."""

from __future__ import annotations

import inspect
import json
import re
from datetime import date
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.config_loader import EndpointConfig, load_endpoint_config
from fitgate.fitbit.credentials import CredentialStore
from fitgate.fitbit.models import ClientIdentity, Credential

# Fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

API_BASE = "https://api.fitbit.com"
TOKEN_URL = "https://api.fitbit.com/oauth2/token"
TOKEN_PATH = "/oauth2/token"

# A Monday; "yesterday" is 2026-02-22 and the trailing week starts 2026-02-16
TEST_TODAY = date(2026, 2, 23)


def load_fixture(name: str) -> Any:
    return json.loads((FIXTURES_DIR / name).read_text())


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------


class FakeFitbit:
    """Routes request paths (regex, full match) to canned responses.

    Unrouted paths answer 404 so a missing route shows up as a ProviderError.
    Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self._routes: list[tuple[re.Pattern[str], Callable[[httpx.Request], Any]]] = []
        self.requests: list[httpx.Request] = []

    def route(self, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        self._routes.insert(0, (re.compile(path), handler))

    def add(self, path: str, body: Any = None, status: int = 200, text: str | None = None) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=body if body is not None else {})

        self.route(path, respond)

    def hits(self, path: str) -> int:
        pattern = re.compile(path)
        return sum(1 for r in self.requests if pattern.fullmatch(r.url.path))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for pattern, respond in self._routes:
            if pattern.fullmatch(request.url.path):
                result = respond(request)
                if inspect.isawaitable(result):
                    result = await result
                return result
        return httpx.Response(404, text=f"no route for {request.url.path}")


@pytest.fixture
def fake_fitbit() -> FakeFitbit:
    return FakeFitbit()


@pytest.fixture
def http_client(fake_fitbit: FakeFitbit) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_fitbit.handler))


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def endpoint_config() -> EndpointConfig:
    """Load the real endpoint config for tests."""
    return load_endpoint_config()


# ---------------------------------------------------------------------------
# Credential store and gateway
# ---------------------------------------------------------------------------


@pytest.fixture
def token_file(tmp_path: Path) -> Path:
    return tmp_path / "output" / ".token.json"


@pytest.fixture
def credential_store(http_client: httpx.AsyncClient, token_file: Path) -> CredentialStore:
    """File-backed store holding an access token the fake provider may reject."""
    store = CredentialStore(
        ClientIdentity("test_client_id", "test_client_secret"),
        token_file=token_file,
        token_url=TOKEN_URL,
        http_client=http_client,
    )
    store.set_credential(Credential("old-access", "old-refresh"))
    return store


@pytest.fixture
def gateway(
    credential_store: CredentialStore,
    http_client: httpx.AsyncClient,
    endpoint_config: EndpointConfig,
) -> FitbitGateway:
    return FitbitGateway(
        credential_store,
        api_base=API_BASE,
        timeout=5.0,
        http_client=http_client,
        config=endpoint_config,
    )


# ---------------------------------------------------------------------------
# JSON fixture loaders
# ---------------------------------------------------------------------------


@pytest.fixture
def sleep_day_raw() -> dict:
    return load_fixture("sleep_day.json")


@pytest.fixture
def sleep_week_raw() -> dict:
    return load_fixture("sleep_week.json")


@pytest.fixture
def heart_day_raw() -> dict:
    return load_fixture("heart_day.json")


@pytest.fixture
def heart_week_raw() -> dict:
    return load_fixture("heart_week.json")


@pytest.fixture
def activity_day_raw() -> dict:
    return load_fixture("activity_day.json")


@pytest.fixture
def steps_week_raw() -> dict:
    return load_fixture("steps_week.json")


@pytest.fixture
def azm_week_raw() -> dict:
    return load_fixture("azm_week.json")


@pytest.fixture
def hrv_week_raw() -> dict:
    return load_fixture("hrv_week.json")


@pytest.fixture
def exercises_raw() -> dict:
    return load_fixture("exercises.json")
