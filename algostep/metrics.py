"""
Prometheus metrics for the algostep engine.

Exposes engine metrics via HTTP /metrics endpoint for Prometheus scraping.

The CLI starts the server when --metrics-port (or ALGOSTEP_METRICS_PORT) is set.

Usage:
    from algostep.metrics import start_metrics_server, track_run

    start_metrics_server(enabled=True, port=8080)
    track_run("bubble-sort", events=42)
"""

import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Algorithm loads (labels: algorithm)
RUNS_TOTAL = Counter(
    "algostep_runs_total",
    "Total number of algorithm runs drained into a timeline",
    labelnames=["algorithm"],
)

# Events produced by algorithm runs (labels: algorithm)
EVENTS_TOTAL = Counter(
    "algostep_events_total",
    "Total number of events produced by algorithm runs",
    labelnames=["algorithm"],
)

TIMELINE_BUILD_DURATION = Histogram(
    "algostep_timeline_build_seconds",
    "Duration of timeline construction in seconds",
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)

# Sandbox executions (labels: outcome = success|error|timeout)
SANDBOX_EXECUTIONS = Counter(
    "algostep_sandbox_executions_total",
    "Total number of sandboxed script executions",
    labelnames=["outcome"],
)

SANDBOX_DURATION = Histogram(
    "algostep_sandbox_duration_seconds",
    "Wall-clock duration of sandboxed script executions in seconds",
    buckets=(0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0),
)


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in background thread.

    Args:
        enabled: Whether to start metrics server
        port: HTTP port for /metrics endpoint

    Example:
        start_metrics_server(enabled=True, port=8080)
        # curl http://localhost:8080/metrics
    """
    if not enabled:
        logger.info("Metrics server disabled")
        return

    try:
        start_http_server(port, addr="0.0.0.0")
        logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")


def track_run(algorithm_id: str, events: int) -> None:
    """Count one drained run and the events it produced."""
    RUNS_TOTAL.labels(algorithm=algorithm_id).inc()
    EVENTS_TOTAL.labels(algorithm=algorithm_id).inc(events)


def track_timeline_build(seconds: float) -> None:
    TIMELINE_BUILD_DURATION.observe(seconds)


def track_sandbox(outcome: str, seconds: float) -> None:
    """
    Track one sandboxed execution.

    Args:
        outcome: "success", "error" or "timeout"
        seconds: Wall-clock duration
    """
    SANDBOX_EXECUTIONS.labels(outcome=outcome).inc()
    SANDBOX_DURATION.observe(seconds)
