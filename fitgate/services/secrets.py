"""AWS Secrets Manager access for the persisted Fitbit credential.

Cloud deployments receive the credential through the ``FITBIT_TOKEN``
environment variable, which is populated from a managed secret.  After a
refresh the new token pair is written back as a new secret version so the
next process start picks it up.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import boto3
from botocore.config import Config as BotoConfig

from fitgate.config import Settings, get_settings

logger = logging.getLogger("fitgate.secrets")

# Reusable client, created lazily
_client: Any | None = None


def _get_client(settings: Settings | None = None) -> Any:
    global _client
    if _client is not None:
        return _client

    s = settings or get_settings()
    _client = boto3.client(
        "secretsmanager",
        region_name=s.aws_region,
        config=BotoConfig(retries={"max_attempts": 3, "mode": "standard"}),
    )
    return _client


def reset_client() -> None:
    """Forget the cached client (tests, credential rotation)."""
    global _client
    _client = None


async def put_secret_version(
    payload: dict[str, Any],
    *,
    secret_id: str | None = None,
    settings: Settings | None = None,
) -> str:
    """Store ``payload`` as JSON in a new version of the secret.

    Returns:
        The new version id.

    Raises:
        ValueError: If no secret id is configured.
        botocore.exceptions.BotoCoreError / ClientError: On AWS failures.
    """
    s = settings or get_settings()
    target = secret_id or s.token_secret_id
    if not target:
        raise ValueError("No secret id configured for credential persistence")

    client = _get_client(s)
    # boto3 blocks; run it off the event loop
    response = await asyncio.to_thread(
        client.put_secret_value, SecretId=target, SecretString=json.dumps(payload)
    )
    version_id = response.get("VersionId", "")
    logger.info("Stored new version of secret %s (version=%s)", target, version_id)
    return version_id
