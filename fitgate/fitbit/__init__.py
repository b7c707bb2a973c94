"""Fitbit Web API gateway core.

Subpackages:
    normalizers/ — Provider payloads to canonical records, one module per family
    reports/     — Today/history operations and composite reports

Core modules:
    credentials     — Credential store: load, single-flight refresh, persist
    client          — FitbitGateway: authenticated calls, 401 retry, error classification
    metric_requests — Request builders and date-range/paging clamping
    config_loader   — Load/validate/hot-reload endpoint_config.yaml
    stats           — Rounding, window statistics and baseline comparisons
"""

from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.config_loader import EndpointConfig, get_endpoint_config
from fitgate.fitbit.credentials import CredentialStore
from fitgate.fitbit.errors import (
    AuthExpiredError,
    FitbitError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitedError,
    UnauthenticatedError,
)
from fitgate.fitbit.models import Credential, PersistResult, RefreshResult

__all__ = [
    "FitbitGateway",
    "CredentialStore",
    "Credential",
    "RefreshResult",
    "PersistResult",
    "EndpointConfig",
    "get_endpoint_config",
    "FitbitError",
    "UnauthenticatedError",
    "AuthExpiredError",
    "RateLimitedError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
]
