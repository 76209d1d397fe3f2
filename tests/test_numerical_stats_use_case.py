"""Tests for the end-to-end numerical stats use case."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from dlp_numerical_stats.domain.exceptions import (
    JobFetchError,
    JobIncompleteError,
    JobSubmissionError,
)
from dlp_numerical_stats.domain.models import NumericalStatsJobSpec, StatisticsResult
from dlp_numerical_stats.use_cases.numerical_stats import numerical_stats_use_case
from tests.conftest import JOB_NAME, StubChannel, StubJobService, StubMessage


def test_run_prints_range_and_distinct_quantiles(
    job_spec: NumericalStatsJobSpec, statistics: StatisticsResult
) -> None:
    job_service = StubJobService(statistics)
    notification = StubMessage(JOB_NAME)
    channel = StubChannel([notification])
    printed: list[str] = []

    result = numerical_stats_use_case(
        job_service,
        channel,
        job_spec,
        settle_delay_seconds=0,
        output=printed.append,
    )

    assert printed == [
        "Value Range: [1, 100]",
        "Value at 1% quantile: 10",
        "Value at 3% quantile: 20",
        "Value at 6% quantile: 30",
    ]
    assert result.report_lines == printed
    assert result.job_name == JOB_NAME
    assert result.completed_before_timeout is True
    assert result.statistics == statistics
    assert job_service.submitted == [job_spec]
    assert job_service.fetched == [JOB_NAME]
    assert notification.acked
    assert channel.stopped == 1


def test_run_fetches_after_timeout(
    job_spec: NumericalStatsJobSpec, statistics: StatisticsResult
) -> None:
    job_service = StubJobService(statistics)
    channel = StubChannel()
    printed: list[str] = []

    result = numerical_stats_use_case(
        job_service,
        channel,
        job_spec,
        timeout_seconds=0.01,
        output=printed.append,
    )

    assert result.completed_before_timeout is False
    assert job_service.fetched == [JOB_NAME]
    assert printed[0] == "Value Range: [1, 100]"
    assert channel.stopped == 1


def test_incomplete_job_after_timeout_propagates(
    job_spec: NumericalStatsJobSpec, statistics: StatisticsResult
) -> None:
    job_service = StubJobService(
        statistics, fetch_error=JobIncompleteError(JOB_NAME, "RUNNING")
    )
    channel = StubChannel()
    printed: list[str] = []

    with pytest.raises(JobIncompleteError):
        numerical_stats_use_case(
            job_service,
            channel,
            job_spec,
            timeout_seconds=0.01,
            output=printed.append,
        )

    assert printed == []
    assert channel.stopped == 1


def test_submission_error_propagates_before_listening(
    job_spec: NumericalStatsJobSpec, statistics: StatisticsResult
) -> None:
    job_service = StubJobService(
        statistics, submit_error=JobSubmissionError("quota exceeded")
    )
    channel = StubChannel()

    with pytest.raises(JobSubmissionError):
        numerical_stats_use_case(job_service, channel, job_spec, output=print)

    assert channel.started == 0
    assert job_service.fetched == []


def test_fetch_error_propagates(
    job_spec: NumericalStatsJobSpec,
    statistics: StatisticsResult,
    fetch_error: JobFetchError,
) -> None:
    job_service = StubJobService(statistics, fetch_error=fetch_error)
    channel = StubChannel([StubMessage(JOB_NAME)])

    with pytest.raises(JobFetchError):
        numerical_stats_use_case(
            job_service, channel, job_spec, settle_delay_seconds=0, output=print
        )


def test_run_logs_completion(
    job_spec: NumericalStatsJobSpec, statistics: StatisticsResult
) -> None:
    channel = StubChannel([StubMessage(JOB_NAME)])

    with capture_logs() as logs:
        numerical_stats_use_case(
            StubJobService(statistics),
            channel,
            job_spec,
            settle_delay_seconds=0,
            output=lambda line: None,
            run_id="run-1",
        )

    finished = [e for e in logs if e["event"] == "numerical_stats_run_finished"]
    assert finished
    assert finished[0]["lines"] == 4
