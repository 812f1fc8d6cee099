"""Application configuration."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    ledger_db_path: Path = Path("nutrition_ledger.db")
    ledger_timezone: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_timezone(raw: str | None) -> ZoneInfo | None:
    """Return the configured zone, or None to use the system local zone."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "local"}:
        return None
    try:
        return ZoneInfo(cleaned)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {cleaned}") from exc
