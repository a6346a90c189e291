# daybreak/config.py
"""
Runtime configuration for the events API.

Everything comes from environment variables (or a local .env file):
- PORT / HOST: where uvicorn listens
- APP_ENV: "production" hides upstream error details from API responses
- CLERK_*: how we verify session tokens and call Clerk's Backend API

The settings object is built once at startup and passed into the pieces that
need it, so tests can construct their own without touching os.environ.
"""

from __future__ import annotations

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(raw: str) -> List[str]:
    return [x.strip() for x in raw.split(",") if x.strip()]


class Settings(BaseSettings):
    port: int = 3000
    host: str = "0.0.0.0"
    app_env: str = "production"
    log_level: str = "INFO"

    # Clerk (identity provider)
    clerk_secret_key: str = ""
    clerk_api_url: str = "https://api.clerk.com/v1"
    clerk_jwt_key: str = ""  # PEM public key; enables networkless verification
    clerk_authorized_parties: str = ""
    clerk_clock_skew_seconds: int = 5

    http_timeout_seconds: float = 10.0
    cors_allow_origins: str = "*"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def expose_error_details(self) -> bool:
        """
        True outside production: upstream error payloads are echoed to callers.
        """
        return self.app_env.strip().lower() != "production"

    @property
    def authorized_parties(self) -> List[str]:
        return _split_csv(self.clerk_authorized_parties)

    @property
    def cors_origins(self) -> List[str]:
        return _split_csv(self.cors_allow_origins) or ["*"]
