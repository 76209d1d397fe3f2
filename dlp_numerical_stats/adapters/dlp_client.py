"""Google Cloud DLP adapter for numerical stats risk jobs."""

from typing import Any

from google.api_core import exceptions as google_exceptions
from google.cloud import dlp_v2

from dlp_numerical_stats.config.logging_config import get_logger
from dlp_numerical_stats.domain.exceptions import (
    JobFailedError,
    JobFetchError,
    JobIncompleteError,
    JobNotFoundError,
    JobSubmissionError,
)
from dlp_numerical_stats.domain.models import (
    NumericalStatsJobSpec,
    StatisticsResult,
    SubmittedJob,
)
from dlp_numerical_stats.observability.metrics import RISK_JOBS_SUBMITTED_TOTAL
from dlp_numerical_stats.services.value_unpacker import decode_scalar

logger = get_logger(__name__)

_FAILED_STATES = frozenset(
    {dlp_v2.DlpJob.JobState.FAILED, dlp_v2.DlpJob.JobState.CANCELED}
)


def build_risk_job_config(spec: NumericalStatsJobSpec) -> dict[str, Any]:
    """Build the `RiskAnalysisJobConfig` request body for a job spec.

    One numerical stats metric over the column and one Pub/Sub action.
    """
    return {
        "privacy_metric": {
            "numerical_stats_config": {"field": {"name": spec.column_name}}
        },
        "source_table": {
            "project_id": spec.table.project_id,
            "dataset_id": spec.table.dataset_id,
            "table_id": spec.table.table_id,
        },
        "actions": [{"pub_sub": {"topic": spec.topic_path}}],
    }


class DlpRiskJobClient:
    """DLP API client for submitting and reading numerical stats jobs.

    No call is retried; every API failure surfaces as a domain error.
    """

    def __init__(self, client: dlp_v2.DlpServiceClient | None = None) -> None:
        """Initialize DLP client.

        Args:
            client: Preconfigured service client (defaults to ADC credentials)
        """
        self.client = client or dlp_v2.DlpServiceClient()

    def create_numerical_stats_job(self, spec: NumericalStatsJobSpec) -> SubmittedJob:
        """Submit a numerical stats job over ``spec.column_name``.

        Raises:
            JobSubmissionError: On any API error (auth, bad reference, quota)
        """
        request = {"parent": spec.parent, "risk_job": build_risk_job_config(spec)}
        try:
            job = self.client.create_dlp_job(request=request)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(
                "risk_job_submit_failed",
                parent=spec.parent,
                column=spec.column_name,
                error=str(e),
            )
            raise JobSubmissionError(f"Failed to submit DLP risk job: {e}") from e

        RISK_JOBS_SUBMITTED_TOTAL.labels(metric="numerical_stats").inc()
        logger.info(
            "risk_job_submitted",
            job_name=job.name,
            table=f"{spec.table.project_id}.{spec.table.dataset_id}.{spec.table.table_id}",
            column=spec.column_name,
            topic=spec.topic_path,
        )
        return SubmittedJob(job_name=job.name)

    def get_numerical_stats(self, job_name: str) -> StatisticsResult:
        """Fetch the numerical stats of a finished job.

        Raises:
            JobNotFoundError: If the job does not exist
            JobFailedError: If the job failed or was canceled
            JobIncompleteError: If the job is still pending or running, or DONE
                without numerical stats
            JobFetchError: On any other API error
            ValueDecodingError: If a returned value cannot be decoded
        """
        try:
            job = self.client.get_dlp_job(request={"name": job_name})
        except google_exceptions.NotFound as e:
            raise JobNotFoundError(job_name) from e
        except google_exceptions.GoogleAPICallError as e:
            logger.error("risk_job_fetch_failed", job_name=job_name, error=str(e))
            raise JobFetchError(f"Failed to fetch DLP job {job_name}: {e}") from e

        state = dlp_v2.DlpJob.JobState(job.state)
        if state in _FAILED_STATES:
            raise JobFailedError(job_name, state.name)
        if state != dlp_v2.DlpJob.JobState.DONE:
            raise JobIncompleteError(job_name, state.name)
        if "numerical_stats_result" not in job.risk_details:
            raise JobIncompleteError(job_name, f"{state.name} without numerical stats")

        stats = job.risk_details.numerical_stats_result
        result = StatisticsResult(
            min_value=decode_scalar(stats.min_value),
            max_value=decode_scalar(stats.max_value),
            quantile_values=tuple(decode_scalar(v) for v in stats.quantile_values),
        )
        logger.info(
            "risk_job_result_fetched",
            job_name=job_name,
            quantile_count=len(result.quantile_values),
        )
        return result

    def close(self) -> None:
        self.client.transport.close()


__all__ = ["DlpRiskJobClient", "build_risk_job_config"]
