"""Tests for endpoint_config.yaml loading and validation."""

from __future__ import annotations

import textwrap
from pathlib import Path

import httpx
import pytest

from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.config_loader import (
    ConfigValidationError,
    DayRange,
    EndpointConfig,
    _validate_and_build,
    get_endpoint_config,
    load_endpoint_config,
    reload_endpoint_config,
)
from fitgate.fitbit.credentials import CredentialStore
from fitgate.fitbit.reports import sleep as sleep_reports
from fitgate.fitbit.tests.conftest import API_BASE, TEST_TODAY, FakeFitbit


class TestConfigLoading:
    def test_load_default_config(self, endpoint_config: EndpointConfig) -> None:
        """The bundled endpoint_config.yaml loads without errors."""
        assert endpoint_config.version == "1.0"
        assert endpoint_config.baseline_window_days == 7
        assert endpoint_config.paging.max_limit == 100

    @pytest.mark.parametrize(
        ("endpoint", "expected"),
        [
            ("sleep_history", DayRange(1, 90, 30)),
            ("sleep_stages_history", DayRange(1, 30, 14)),
            ("resting_hr_history", DayRange(1, 90, 30)),
            ("activity_history", DayRange(1, 90, 14)),
            ("recovery_history", DayRange(1, 30, 30)),
            ("exercises", DayRange(1, 100, 20)),
        ],
    )
    def test_history_ranges(self, endpoint_config: EndpointConfig, endpoint: str, expected: DayRange) -> None:
        assert endpoint_config.history_range(endpoint) == expected

    def test_recovery_families_span_30_days(self, endpoint_config: EndpointConfig) -> None:
        for family in ["hrv", "spo2", "breathing_rate", "temperature", "cardio_fitness"]:
            assert endpoint_config.max_span(family) == 30

    def test_unknown_endpoint_raises_key_error(self, endpoint_config: EndpointConfig) -> None:
        with pytest.raises(KeyError, match="Available"):
            endpoint_config.history_range("weight_history")

    def test_unknown_family_is_unbounded(self, endpoint_config: EndpointConfig) -> None:
        assert endpoint_config.max_span("weight") is None

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_endpoint_config(tmp_path / "absent.yaml")

    def test_singleton_is_cached(self) -> None:
        assert get_endpoint_config() is get_endpoint_config()


class TestConfigValidation:
    def test_missing_history_ranges(self) -> None:
        with pytest.raises(ConfigValidationError, match="history_ranges"):
            _validate_and_build({"version": "1.0"})

    def test_default_outside_range(self) -> None:
        raw = {"history_ranges": {"sleep_history": {"min": 1, "max": 90, "default": 120}}}
        with pytest.raises(ConfigValidationError, match="default 120 outside"):
            _validate_and_build(raw)

    def test_errors_are_collected(self) -> None:
        raw = {
            "history_ranges": {
                "a": {"min": 5, "max": 2, "default": 3},
                "b": {"min": 1, "max": 2},
            },
            "max_span_days": {"hrv": 0},
        }
        with pytest.raises(ConfigValidationError, match="3 validation error"):
            _validate_and_build(raw)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("history_ranges: [unclosed")
        with pytest.raises(ConfigValidationError, match="YAML parse error"):
            load_endpoint_config(path)


class TestConfigReload:
    def test_reload_replaces_cached_config(self, tmp_path: Path) -> None:
        path = tmp_path / "endpoint_config.yaml"
        path.write_text(
            textwrap.dedent(
                """
                version: "2.0"
                history_ranges:
                  sleep_history: {min: 1, max: 60, default: 10}
                """
            )
        )
        try:
            reloaded = reload_endpoint_config(path)
            assert reloaded.version == "2.0"
            assert get_endpoint_config() is reloaded
            assert get_endpoint_config().history_range("sleep_history").max == 60
        finally:
            reload_endpoint_config()
        assert get_endpoint_config().version == "1.0"

    @pytest.mark.asyncio
    async def test_reload_reaches_running_gateway(
        self, tmp_path: Path, credential_store: CredentialStore, http_client: httpx.AsyncClient,
        fake_fitbit: FakeFitbit,
    ) -> None:
        fake_fitbit.add(r"/1\.2/user/-/sleep/date/.*", {"sleep": []})
        gw = FitbitGateway(credential_store, api_base=API_BASE, http_client=http_client)
        assert (await sleep_reports.history(gw, "60", today=TEST_TODAY))["days_requested"] == 60

        path = tmp_path / "endpoint_config.yaml"
        path.write_text(
            textwrap.dedent(
                """
                version: "2.1"
                history_ranges:
                  sleep_history: {min: 1, max: 5, default: 3}
                """
            )
        )
        try:
            reload_endpoint_config(path)
            assert gw.config.version == "2.1"
            assert (await sleep_reports.history(gw, "60", today=TEST_TODAY))["days_requested"] == 5
        finally:
            reload_endpoint_config()

    def test_injected_config_is_pinned(
        self, tmp_path: Path, credential_store: CredentialStore, endpoint_config: EndpointConfig
    ) -> None:
        gw = FitbitGateway(credential_store, config=endpoint_config)
        path = tmp_path / "endpoint_config.yaml"
        path.write_text('version: "3.0"\nhistory_ranges:\n  sleep_history: {min: 1, max: 5, default: 3}\n')
        try:
            reload_endpoint_config(path)
            assert gw.config is endpoint_config
        finally:
            reload_endpoint_config()
