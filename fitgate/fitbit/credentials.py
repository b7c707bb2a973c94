"""Credential store for the Fitbit OAuth2 token pair.

One ``CredentialStore`` is built at startup and injected into the gateway.
It owns the active ``Credential``, performs the refresh-token exchange when
the gateway reports a 401, and writes renewed credentials back to whichever
channel the deployment reads them from:

    FITBIT_TOKEN set    → new version of the managed secret (cloud)
    otherwise           → JSON file at ``token_file`` (local development)

Refreshes are single-flight: concurrent callers that all saw the same stale
token share one exchange instead of racing each other.
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx

from fitgate.config import Settings
from fitgate.fitbit.models import ClientIdentity, Credential, PersistResult, RefreshResult
from fitgate.services.secrets import put_secret_version

logger = logging.getLogger("fitgate.fitbit.credentials")

DEFAULT_TOKEN_URL = "https://api.fitbit.com/oauth2/token"
DEFAULT_TIMEOUT_SECONDS = 30.0

SecretWriter = Callable[[dict[str, Any]], Awaitable[Any]]


class CredentialStore:
    """Single source of truth for the active Fitbit credential."""

    def __init__(
        self,
        identity: ClientIdentity,
        *,
        token_blob: str = "",
        token_file: str | Path | None = None,
        token_url: str = DEFAULT_TOKEN_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
        secret_writer: SecretWriter | None = None,
    ) -> None:
        """Initialize the store.  Call ``load()`` before first use.

        Args:
            identity:      OAuth client id/secret for the refresh exchange.
            token_blob:    Credential JSON from the environment (FITBIT_TOKEN).
            token_file:    Local persisted credential path.
            token_url:     Provider token endpoint.
            timeout:       Exchange timeout in seconds.
            http_client:   Optional shared httpx client (injected in tests).
            secret_writer: Coroutine storing a credential dict in the secret store.
        """
        self._identity = identity
        self._token_blob = token_blob or ""
        self._token_file = Path(token_file) if token_file else None
        self._token_url = token_url
        self._timeout = timeout
        self._http_client = http_client
        self._secret_writer = secret_writer or put_secret_version

        self._credential: Credential | None = None
        self._source: str | None = None
        self._last_persist: PersistResult | None = None
        self._refresh_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> CredentialStore:
        return cls(
            ClientIdentity(settings.client_id, settings.client_secret),
            token_blob=settings.fitbit_token,
            token_file=settings.token_file,
            token_url=settings.fitbit_token_url,
            timeout=settings.request_timeout_seconds,
            http_client=http_client,
            secret_writer=functools.partial(put_secret_version, settings=settings),
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def has_credential(self) -> bool:
        return self._credential is not None

    @property
    def source(self) -> str | None:
        """Where the current credential came from: 'environment', 'file', 'refresh', 'external'."""
        return self._source

    @property
    def uses_secret_store(self) -> bool:
        """True when the deployment supplies credentials through the environment blob."""
        return bool(self._token_blob)

    @property
    def last_persist(self) -> PersistResult | None:
        return self._last_persist

    def current_access_token(self) -> str | None:
        return self._credential.access_token if self._credential else None

    def set_credential(self, credential: Credential) -> None:
        """Install a credential obtained out of band (e.g. an OAuth callback)."""
        self._credential = credential
        self._source = "external"
        logger.info("Installed externally supplied credential")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> Credential | None:
        """Load the credential: environment blob first, then the local file.

        Malformed or incomplete candidates are logged and skipped.  When
        neither source yields a credential the store stays empty.
        """
        if self._token_blob:
            credential = self._parse(self._token_blob, "FITBIT_TOKEN environment variable")
            if credential is not None:
                self._credential, self._source = credential, "environment"
                logger.info("Loaded tokens from FITBIT_TOKEN environment variable")
                return credential

        if self._token_file is not None:
            if self._token_file.exists():
                try:
                    text = self._token_file.read_text(encoding="utf-8")
                except OSError as exc:
                    logger.warning("Failed to read token file %s: %s", self._token_file, exc)
                else:
                    credential = self._parse(text, f"token file {self._token_file}")
                    if credential is not None:
                        self._credential, self._source = credential, "file"
                        logger.info("Loaded tokens from %s", self._token_file)
                        return credential
            else:
                logger.info(
                    "Token file not found at %s - run authentication first", self._token_file
                )

        logger.warning("No Fitbit credential available; requests will fail until one is loaded")
        return None

    @staticmethod
    def _parse(text: str, origin: str) -> Credential | None:
        try:
            credential = Credential.from_json(text)
        except ValueError as exc:
            logger.warning("Failed to parse %s: %s", origin, exc)
            return None
        if credential is None:
            logger.warning("%s lacks access_token or refresh_token", origin)
        return credential

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self, stale_token: str | None = None) -> RefreshResult:
        """Exchange the refresh token for a new credential.

        Args:
            stale_token: The access token the caller saw rejected.  If the
                held token already differs, another request refreshed it
                while this one waited and no second exchange is made.

        Returns:
            RefreshResult, truthy when the store now holds a fresh credential.
        """
        async with self._refresh_lock:
            current = self._credential
            if (
                stale_token is not None
                and current is not None
                and current.access_token != stale_token
            ):
                logger.info("Access token already refreshed by a concurrent request")
                return RefreshResult(succeeded=True)
            return await self._exchange(current)

    async def _exchange(self, current: Credential | None) -> RefreshResult:
        if current is None or not current.refresh_token or not self._identity.is_complete:
            logger.warning(
                "Cannot refresh token: missing refresh_token, client_id, or client_secret"
            )
            return RefreshResult(succeeded=False)

        try:
            response = await self._post_refresh(current.refresh_token)
        except httpx.HTTPError as exc:
            logger.error("Token refresh request failed: %s", exc)
            return RefreshResult(succeeded=False)

        if not response.is_success:
            logger.error("Token refresh failed: %s %s", response.status_code, response.text)
            return RefreshResult(succeeded=False)

        try:
            body = response.json()
        except ValueError:
            logger.error("Token refresh returned a non-JSON body")
            return RefreshResult(succeeded=False)

        renewed = Credential.from_mapping(body)
        if renewed is None:
            logger.error("Token refresh response lacks access_token or refresh_token")
            return RefreshResult(succeeded=False)

        self._credential = renewed
        if self._source is None:
            self._source = "refresh"
        logger.info("Successfully refreshed access token")

        persisted = await self.persist(renewed)
        return RefreshResult(succeeded=True, persisted=persisted)

    async def _post_refresh(self, refresh_token: str) -> httpx.Response:
        data = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        headers = {
            "Authorization": self._identity.basic_auth_header(),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        if self._http_client:
            return await self._http_client.post(
                self._token_url, data=data, headers=headers, timeout=self._timeout
            )
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._token_url, data=data, headers=headers)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def persist(self, credential: Credential) -> PersistResult:
        """Write ``credential`` to the deployment's durable channel.

        Never raises: a failed write is reported as ``PersistResult(ok=False)``
        and logged, since the in-memory credential keeps the process working.
        """
        if self.uses_secret_store:
            result = await self._persist_to_secret_store(credential)
        else:
            result = self._persist_to_file(credential)
        self._last_persist = result
        return result

    async def _persist_to_secret_store(self, credential: Credential) -> PersistResult:
        try:
            await self._secret_writer(credential.to_dict())
        except Exception as exc:  # botocore raises a wide family of error types
            logger.warning("Failed to persist token to secret store: %s", exc)
            return PersistResult(ok=False, target="secret_store", warning=str(exc))
        logger.info("Persisted refreshed token to secret store")
        return PersistResult(ok=True, target="secret_store")

    def _persist_to_file(self, credential: Credential) -> PersistResult:
        if self._token_file is None:
            logger.warning("No token file configured; refreshed token kept in memory only")
            return PersistResult(ok=False, target="file", warning="no token file configured")
        try:
            self._token_file.parent.mkdir(parents=True, exist_ok=True)
            self._token_file.write_text(json.dumps(credential.to_dict(), indent=2), encoding="utf-8")
            self._token_file.chmod(0o600)
        except OSError as exc:
            logger.warning("Failed to save token file %s: %s", self._token_file, exc)
            return PersistResult(ok=False, target="file", warning=str(exc))
        logger.info("Saved tokens to %s", self._token_file)
        return PersistResult(ok=True, target="file")
