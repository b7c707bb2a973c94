"""Credential types and canonical normalized records for the Fitbit gateway.

Every normalizer returns one of the record types below.  ``to_dict()`` always
emits every field, so consumers (routes, dashboards, the coaching agent) can
rely on a fixed schema: a value the provider did not report is ``None``,
never a missing key.
"""

from __future__ import annotations

import base64
import json
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping


class _Record:
    """Mixin giving dataclass records a JSON-ready dict."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Credential:
    """Provider access/refresh token pair.

    No expiry is tracked: expiration is discovered from a 401 response.

    Attributes:
        access_token:  Bearer token for API calls.
        refresh_token: Token exchanged for a new Credential.
        extra:         Any other fields of the token response (user_id, scope,
                       expires_in), kept so the persisted form equals the body.
    """

    access_token: str
    refresh_token: str
    extra: dict = field(default_factory=dict, compare=False)

    @classmethod
    def from_mapping(cls, data: object) -> Credential | None:
        """Build a Credential from a parsed JSON object.

        Returns None unless both tokens are present non-empty strings.
        """
        if not isinstance(data, Mapping):
            return None
        access = data.get("access_token")
        refresh = data.get("refresh_token")
        if not (isinstance(access, str) and access and isinstance(refresh, str) and refresh):
            return None
        extra = {k: v for k, v in data.items() if k not in ("access_token", "refresh_token")}
        return cls(access_token=access, refresh_token=refresh, extra=extra)

    @classmethod
    def from_json(cls, text: str) -> Credential | None:
        """Parse a JSON document; raises ``ValueError`` on malformed JSON."""
        return cls.from_mapping(json.loads(text))

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "access_token": self.access_token, "refresh_token": self.refresh_token}

    def __repr__(self) -> str:
        return "Credential(access_token=***, refresh_token=***)"


@dataclass(frozen=True)
class ClientIdentity:
    """OAuth client identity used for the refresh-token exchange."""

    client_id: str
    client_secret: str

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def basic_auth_header(self) -> str:
        raw = f"{self.client_id}:{self.client_secret}".encode()
        return "Basic " + base64.b64encode(raw).decode()


@dataclass(frozen=True)
class PersistResult:
    """Outcome of writing a refreshed Credential to its durable channel.

    A failed write is a soft failure: the in-memory credential stays valid.
    """

    ok: bool
    target: str
    warning: str | None = None


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of a refresh-token exchange.  Truthy iff the exchange succeeded."""

    succeeded: bool
    persisted: PersistResult | None = None

    def __bool__(self) -> bool:
        return self.succeeded


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@dataclass
class BaselineComparison(_Record):
    """A current value compared to a trailing-window average."""

    current_value: float | None
    baseline_average: float | None
    percent_difference: float | None


@dataclass
class WindowStats(_Record):
    average: float | None
    min_value: float | None
    max_value: float | None
    count: int = 0


# ---------------------------------------------------------------------------
# Sleep
# ---------------------------------------------------------------------------


@dataclass
class SleepStages(_Record):
    """Stage minutes with percentages of deep+light+rem."""

    deep: int | None
    deep_percent: float | None
    light: int | None
    light_percent: float | None
    rem: int | None
    rem_percent: float | None
    wake: int | None


@dataclass
class SleepRecord(_Record):
    """Canonical sleep record for one sleep log entry."""

    date: str
    start_time: str | None = None
    end_time: str | None = None
    duration_hours: float | None = None
    time_in_bed_minutes: int | None = None
    minutes_asleep: int | None = None
    minutes_awake: int | None = None
    efficiency: int | None = None
    stages: SleepStages | None = None
    is_main_sleep: bool = True


@dataclass
class SleepStageRow(_Record):
    """Flat per-night stage minutes for time-ordered charts."""

    date: str
    deep: int
    light: int
    rem: int
    wake: int
    total_sleep: int
    efficiency: int | None


# ---------------------------------------------------------------------------
# Heart rate
# ---------------------------------------------------------------------------


@dataclass
class HeartRateZone(_Record):
    name: str
    minutes: int | None
    calories_out: float | None
    min_hr: int | None
    max_hr: int | None


@dataclass
class RestingHeartRate(_Record):
    date: str
    value: int | None


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------


@dataclass
class ActivitySummary(_Record):
    date: str
    steps: int | None = None
    calories_out: int | None = None
    floors: int | None = None
    distance_km: float | None = None
    sedentary_minutes: int | None = None
    lightly_active_minutes: int | None = None
    fairly_active_minutes: int | None = None
    very_active_minutes: int | None = None


@dataclass
class DailySteps(_Record):
    date: str
    steps: int


@dataclass
class ActiveZoneMinutes(_Record):
    """Intensity-weighted activity minutes for one day."""

    date: str
    total: int | None
    fat_burn: int | None
    cardio: int | None
    peak: int | None


@dataclass
class ExerciseLog(_Record):
    log_id: int | None
    name: str | None
    start_time: str | None
    duration_minutes: float | None
    calories: int | None
    steps: int | None
    average_heart_rate: int | None
    active_zone_minutes: int | None


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------


@dataclass
class HrvReading(_Record):
    """Nightly RMSSD in milliseconds."""

    date: str
    daily_rmssd: float | None
    deep_rmssd: float | None
    vs_baseline_percent: float | None = None


@dataclass
class Spo2Reading(_Record):
    date: str
    avg: float | None
    min: float | None
    max: float | None


@dataclass
class BreathingRateReading(_Record):
    date: str
    breathing_rate: float | None


@dataclass
class TemperatureReading(_Record):
    """Nightly skin temperature relative to the personal baseline (°C)."""

    date: str
    nightly_relative: float | None


@dataclass
class CardioFitnessReading(_Record):
    """VO2 max estimate; the provider reports either a value or a range like "44-48"."""

    date: str
    vo2_max: str | None
    vo2_max_low: float | None
    vo2_max_high: float | None
