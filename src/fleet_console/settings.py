"""
fleet_console.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the console and the record-store service.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single settings object shared by:
    - the record-store API (auth, persistence, HTTP binding)
    - the console client (record-store base url, timeouts)
    """

    model_config = SettingsConfigDict(env_prefix="FLEET_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and dev bootstrap.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "fleet-records"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "fleet-records"
    jwt_audience: str = "fleet-console"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    session_ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)
    min_password_length: int = Field(default=6, ge=1)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./fleet.db"

    # Console -> record store
    records_base_url: str = "http://localhost:8080"
    http_timeout_seconds: float = 10.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Both sides of the record-store boundary read this module; keep field names stable.
