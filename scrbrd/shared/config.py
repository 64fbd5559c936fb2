"""
Central configuration for scrbrd.
Uses pydantic-settings for env-based config with validation.
"""
from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEV = "dev"
    PRODUCTION = "production"


def _default_log_file() -> Path:
    return Path.home() / ".cache" / "scrbrd" / "scrbrd.log"


class Settings(BaseSettings):
    """Operational knobs. Everything here has a sane default; no config file is read."""

    model_config = SettingsConfigDict(
        env_prefix="SCRBRD_",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────
    environment: Environment = Environment.DEV
    log_level: str = "INFO"
    log_file: Optional[Path] = Field(
        default_factory=_default_log_file,
        description="The terminal is owned by the scoreboard, so logs go to a file.",
    )

    # ── Provider ─────────────────────────────────────────────
    espn_base_url: str = "https://site.api.espn.com/apis/site/v2/sports"
    user_agent: str = "scrbrd/0.1.0"
    fetch_timeout_s: float = 10.0
    http_max_retries: int = 2

    # ── Scheduler ────────────────────────────────────────────
    refresh_interval_s: float = 30.0
    backoff_ceiling_s: float = 300.0
    backoff_jitter_factor: float = 0.15

    # ── Board ────────────────────────────────────────────────
    render_tick_s: float = 0.5

    # ── Observability ────────────────────────────────────────
    metrics_enabled: bool = False
    metrics_port: int = 9095

    @model_validator(mode="after")
    def check_backoff_bounds(self) -> "Settings":
        """Backoff must be able to reach at least twice the base interval."""
        if self.refresh_interval_s <= 0:
            raise ValueError("refresh_interval_s must be positive")
        if self.backoff_ceiling_s < 2 * self.refresh_interval_s:
            raise ValueError("backoff_ceiling_s must be at least 2x refresh_interval_s")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton access to validated settings."""
    return Settings()
