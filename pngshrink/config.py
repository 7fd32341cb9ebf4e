from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


def _default_key_file() -> Path:
    return Path.home() / ".tinypng"


class Settings(BaseSettings):
    """Client configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_prefix="PNGSHRINK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Shrink service
    api_host: str = Field("api.tinypng.com", description="Host serving the /shrink endpoint.")
    api_user: str = Field("api", description="Basic-auth username; the API key is the password.")

    # Credential cache
    key_file: Path = Field(
        default_factory=_default_key_file,
        description="File the API key is cached in, created with owner-only permissions.",
    )

    # Reachability probe
    probe_port: int = Field(443, ge=1, le=65535)
    probe_timeout: float = Field(3.0, gt=0, description="Seconds to wait for the probe connection.")

    # Logging
    log_level: str = Field("INFO")


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
