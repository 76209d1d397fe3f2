"""Prometheus metrics for risk job runs."""

from __future__ import annotations

import threading
from typing import Final

from prometheus_client import Counter, Histogram, start_http_server

from dlp_numerical_stats.config.logging_config import get_logger

logger = get_logger(__name__)

RISK_JOBS_SUBMITTED_TOTAL: Final[Counter] = Counter(
    "dlp_risk_jobs_submitted_total",
    "Total number of DLP risk jobs submitted",
    labelnames=("metric",),
)

NOTIFICATIONS_HANDLED_TOTAL: Final[Counter] = Counter(
    "dlp_job_notifications_handled_total",
    "Job-completion notifications received, by acknowledgement outcome",
    labelnames=("outcome",),
)

JOB_WAIT_TIMEOUTS_TOTAL: Final[Counter] = Counter(
    "dlp_job_wait_timeouts_total",
    "Waits for a job-completion notification that ran out of time",
)

JOB_WAIT_SECONDS: Final[Histogram] = Histogram(
    "dlp_job_wait_seconds",
    "Time spent waiting for the job-completion notification",
    buckets=(1, 5, 15, 30, 60, 120, 300, 600, 900),
)

_EXPORTER_LOCK = threading.Lock()
_EXPORTER_STARTED = False


def ensure_metrics_exporter(port: int) -> None:
    """Start Prometheus HTTP exporter once per process."""

    global _EXPORTER_STARTED
    with _EXPORTER_LOCK:
        if _EXPORTER_STARTED:
            return

        try:
            start_http_server(port)
        except OSError as exc:
            logger.error(
                "metrics_exporter_start_failed",
                port=port,
                error=str(exc),
            )
            raise

        _EXPORTER_STARTED = True
        logger.info("metrics_exporter_started", port=port)


__all__ = [
    "JOB_WAIT_SECONDS",
    "JOB_WAIT_TIMEOUTS_TOTAL",
    "NOTIFICATIONS_HANDLED_TOTAL",
    "RISK_JOBS_SUBMITTED_TOTAL",
    "ensure_metrics_exporter",
]
