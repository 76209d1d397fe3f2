"""Port definition for the remote risk-analysis job service."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from dlp_numerical_stats.domain.models import (
    NumericalStatsJobSpec,
    StatisticsResult,
    SubmittedJob,
)


@runtime_checkable
class RiskJobServicePort(Protocol):
    """Interface for submitting risk jobs and fetching their results."""

    def create_numerical_stats_job(self, spec: NumericalStatsJobSpec) -> SubmittedJob:
        """Submit a numerical stats job.

        Args:
            spec: Table, column and notification topic for the job.

        Returns:
            Handle carrying the job's resource name.

        Raises:
            JobSubmissionError: If the service rejects the job.
        """

    def get_numerical_stats(self, job_name: str) -> StatisticsResult:
        """Fetch the numerical stats of a finished job.

        Raises:
            JobNotFoundError: If no job exists under ``job_name``.
            JobIncompleteError: If the job has not produced its result yet.
            JobFetchError: On any other lookup failure.
        """


__all__ = ["RiskJobServicePort"]
