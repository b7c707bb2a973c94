"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "fitgate"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | production

    # --- Fitbit OAuth client identity ---
    client_id: str = Field(default="", validation_alias="CLIENT_ID")
    client_secret: str = Field(default="", validation_alias="CLIENT_SECRET")

    # --- Credential sources ---
    # JSON blob {"access_token": ..., "refresh_token": ...}; set on cloud deployments
    fitbit_token: str = Field(default="", validation_alias="FITBIT_TOKEN")
    token_file: str = "output/.token.json"

    # --- Managed secret store (used when FITBIT_TOKEN is the credential source) ---
    token_secret_id: str = "fitbit-token"
    aws_region: str | None = None

    # --- Provider ---
    fitbit_api_base: str = "https://api.fitbit.com"
    fitbit_token_url: str = "https://api.fitbit.com/oauth2/token"
    request_timeout_seconds: float = 30.0

    # --- HTTP surface ---
    api_key: str = Field(default="", validation_alias="API_KEY")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
