"""Error taxonomy for the Fitbit request pipeline.

Every failure raised by the gateway is a ``FitbitError`` subclass carrying a
stable ``kind`` tag and the HTTP status the outer surface should answer with.

    UnauthenticatedError      unauthenticated  401  no credential loaded
    AuthExpiredError          unauthenticated  401  401 after failed/used-up refresh
    RateLimitedError          rate_limited     429  provider quota (150 req/hour)
    ProviderError             provider_error   <provider status>
    ProviderTimeoutError      timeout          504
    ProviderUnavailableError  unavailable      503  transport failure
"""

from __future__ import annotations

from typing import Any

RATE_LIMIT_RETRY_AFTER = (
    "Wait until the top of the hour for quota reset (150 requests/hour limit)."
)

# Longest provider body excerpt carried by ProviderError
BODY_EXCERPT_LIMIT = 200


class FitbitError(Exception):
    """Base class for all gateway failures."""

    kind: str = "provider_error"
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Structured body for the outer HTTP surface."""
        return {"error": self.kind, "message": self.message}


class UnauthenticatedError(FitbitError):
    """No credential is loaded; out-of-band authentication is required."""

    kind = "unauthenticated"
    status_code = 401


class AuthExpiredError(UnauthenticatedError):
    """The provider rejected the token and the refresh did not recover it."""


class RateLimitedError(FitbitError):
    """The provider answered 429."""

    kind = "rate_limited"
    status_code = 429

    def __init__(
        self,
        message: str = "Fitbit API rate limit exceeded (150 requests/hour). Try again later.",
    ) -> None:
        super().__init__(message)
        self.retry_after = RATE_LIMIT_RETRY_AFTER

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["retry_after"] = self.retry_after
        return body


class ProviderError(FitbitError):
    """Any other non-2xx provider answer."""

    kind = "provider_error"

    def __init__(self, status_code: int, body: str = "") -> None:
        self.body_excerpt = (body or "")[:BODY_EXCERPT_LIMIT]
        super().__init__(f"HTTP {status_code}: {self.body_excerpt}", status_code)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["status_code"] = self.status_code
        return body


class ProviderTimeoutError(FitbitError):
    """The provider did not answer within the request timeout."""

    kind = "timeout"
    status_code = 504


class ProviderUnavailableError(FitbitError):
    """Network or transport failure before any provider answer."""

    kind = "unavailable"
    status_code = 503
