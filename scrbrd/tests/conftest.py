"""Shared pytest fixtures."""
from __future__ import annotations

from pathlib import Path

import pytest

from shared.config import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        log_file=tmp_path / "scrbrd.log",
        refresh_interval_s=30.0,
        backoff_ceiling_s=300.0,
        backoff_jitter_factor=0.0,
        fetch_timeout_s=0.2,
        http_max_retries=0,
    )
