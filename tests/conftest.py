"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import pytest

from dlp_numerical_stats.domain.exceptions import JobFetchError
from dlp_numerical_stats.domain.job_constants import DLP_JOB_NAME_ATTRIBUTE
from dlp_numerical_stats.domain.models import (
    BigQueryTableRef,
    NumericalStatsJobSpec,
    ScalarKind,
    ScalarValue,
    StatisticsResult,
    SubmittedJob,
)
from dlp_numerical_stats.ports.notifications import MessageHandler

JOB_NAME = "projects/calling-project/locations/global/dlpJobs/r-1234"


class StubMessage:
    """Pub/Sub message double recording its acknowledgement."""

    def __init__(self, job_name: str | None) -> None:
        self.attributes: dict[str, str] = (
            {DLP_JOB_NAME_ATTRIBUTE: job_name} if job_name is not None else {}
        )
        self.acked = False
        self.nacked = False
        self._lock = threading.Lock()

    def ack(self) -> None:
        with self._lock:
            self.acked = True

    def nack(self) -> None:
        with self._lock:
            self.nacked = True


class StubChannel:
    """Notification channel that delivers queued messages when listening starts."""

    def __init__(self, messages: list[StubMessage] | None = None) -> None:
        self.messages = list(messages or [])
        self.started = 0
        self.stopped = 0
        self.handler: MessageHandler | None = None

    @contextmanager
    def listen(self, handler: MessageHandler) -> Iterator[None]:
        self.handler = handler
        self.started += 1
        try:
            for message in self.messages:
                handler(message)
            yield
        finally:
            self.stopped += 1


class StubJobService:
    """Risk job service double returning a fixed result."""

    def __init__(
        self,
        result: StatisticsResult,
        *,
        submit_error: Exception | None = None,
        fetch_error: Exception | None = None,
    ) -> None:
        self.result = result
        self.submit_error = submit_error
        self.fetch_error = fetch_error
        self.submitted: list[NumericalStatsJobSpec] = []
        self.fetched: list[str] = []

    def create_numerical_stats_job(self, spec: NumericalStatsJobSpec) -> SubmittedJob:
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(spec)
        return SubmittedJob(job_name=JOB_NAME)

    def get_numerical_stats(self, job_name: str) -> StatisticsResult:
        self.fetched.append(job_name)
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.result


def integers(*values: int) -> tuple[ScalarValue, ...]:
    return tuple(ScalarValue(kind=ScalarKind.INTEGER, raw_text=str(v)) for v in values)


def make_statistics(
    min_value: int = 1,
    max_value: int = 100,
    quantiles: tuple[int, ...] = (10, 10, 20, 20, 20, 30),
) -> StatisticsResult:
    (low,) = integers(min_value)
    (high,) = integers(max_value)
    return StatisticsResult(
        min_value=low, max_value=high, quantile_values=integers(*quantiles)
    )


@pytest.fixture
def job_spec() -> NumericalStatsJobSpec:
    return NumericalStatsJobSpec(
        calling_project_id="calling-project",
        table=BigQueryTableRef(
            project_id="bigquery-public-data",
            dataset_id="samples",
            table_id="natality",
        ),
        column_name="mother_age",
        topic_id="dlp-jobs",
    )


@pytest.fixture
def statistics() -> StatisticsResult:
    return make_statistics()


@pytest.fixture
def fetch_error() -> JobFetchError:
    return JobFetchError("backend unavailable")
