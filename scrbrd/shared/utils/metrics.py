"""
Lightweight metrics collection for scrbrd.
Wraps prometheus_client; the exporter only starts when metrics are enabled.
"""
from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, start_http_server

from shared.config import get_settings
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Counters ────────────────────────────────────────────────────────────
PROVIDER_REQUESTS = Counter(
    "scrbrd_provider_requests_total",
    "Total provider HTTP requests",
    ["provider", "league", "status"],
)
REFRESH_CYCLES = Counter(
    "scrbrd_refresh_cycles_total",
    "Refresh cycles by outcome",
    ["league", "outcome"],
)
GAMES_SKIPPED = Counter(
    "scrbrd_games_skipped_total",
    "Games dropped by an adapter because an essential field was unusable",
    ["league", "field"],
)

# ── Histograms ──────────────────────────────────────────────────────────
PROVIDER_LATENCY = Histogram(
    "scrbrd_provider_latency_seconds",
    "Provider request latency in seconds",
    ["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
SCHEDULER_INTERVAL = Histogram(
    "scrbrd_scheduler_interval_seconds",
    "Wait before the next scheduled refresh",
    ["state"],
    buckets=(5, 10, 15, 30, 60, 120, 300),
)

# ── Gauges ──────────────────────────────────────────────────────────────
GAMES_ON_BOARD = Gauge(
    "scrbrd_games_on_board",
    "Games in the current snapshot",
    ["league"],
)
CONSECUTIVE_FAILURES = Gauge(
    "scrbrd_consecutive_transport_failures",
    "Consecutive transport failures seen by the refresh scheduler",
)


def start_metrics_server(port: int | None = None) -> None:
    """Start the Prometheus metrics HTTP server."""
    settings = get_settings()
    if not settings.metrics_enabled:
        return
    metrics_port = port or settings.metrics_port
    try:
        start_http_server(metrics_port)
        logger.info("metrics_server_started", port=metrics_port)
    except OSError as exc:
        logger.warning("metrics_server_failed", error=str(exc), port=metrics_port)
