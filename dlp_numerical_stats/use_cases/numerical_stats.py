"""Numerical stats use case.

Submits one DLP numerical stats job, waits for its completion notification,
fetches the result and writes the report.
"""

from collections.abc import Callable

from dlp_numerical_stats.config.logging_config import get_logger
from dlp_numerical_stats.domain.job_constants import (
    DEFAULT_JOB_WAIT_TIMEOUT_SECONDS,
    DEFAULT_SETTLE_DELAY_SECONDS,
)
from dlp_numerical_stats.domain.models import (
    NumericalStatsJobSpec,
    NumericalStatsRunResult,
)
from dlp_numerical_stats.observability.tracing import bind_job_name, run_scope
from dlp_numerical_stats.ports.notifications import NotificationChannelPort
from dlp_numerical_stats.ports.risk_jobs import RiskJobServicePort
from dlp_numerical_stats.services.completion_waiter import wait_for_job_completion
from dlp_numerical_stats.services.stats_formatter import render_report

logger = get_logger(__name__)


def numerical_stats_use_case(
    job_service: RiskJobServicePort,
    channel: NotificationChannelPort,
    spec: NumericalStatsJobSpec,
    *,
    timeout_seconds: float = DEFAULT_JOB_WAIT_TIMEOUT_SECONDS,
    settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS,
    output: Callable[[str], None] = print,
    run_id: str | None = None,
) -> NumericalStatsRunResult:
    """Run numerical stats for one column end to end.

    Steps:
    1. Submit the job (errors propagate, nothing is retried)
    2. Wait for the completion notification; a timeout is logged, not raised
    3. Fetch the result (errors propagate, including an incomplete job)
    4. Write the value range and the distinct quantiles through ``output``

    Args:
        job_service: Risk job service
        channel: Notification channel the job publishes to
        spec: Job to submit
        timeout_seconds: Overall wait for the notification
        settle_delay_seconds: Pause after the matching notification
        output: Line sink for the report
        run_id: Optional identifier bound to every log line

    Returns:
        Run result with the statistics and the printed lines
    """
    with run_scope(run_id):
        submitted = job_service.create_numerical_stats_job(spec)
        bind_job_name(submitted.job_name)

        outcome = wait_for_job_completion(
            channel,
            submitted.job_name,
            timeout_seconds=timeout_seconds,
            settle_delay_seconds=settle_delay_seconds,
        )
        if not outcome.completed:
            logger.warning("fetching_job_without_completion_notification")

        statistics = job_service.get_numerical_stats(submitted.job_name)

        report_lines = render_report(statistics)
        for line in report_lines:
            output(line)

        logger.info("numerical_stats_run_finished", lines=len(report_lines))
        return NumericalStatsRunResult(
            job_name=submitted.job_name,
            completed_before_timeout=outcome.completed,
            statistics=statistics,
            report_lines=report_lines,
        )


__all__ = ["numerical_stats_use_case"]
