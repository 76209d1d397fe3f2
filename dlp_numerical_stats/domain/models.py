"""Domain models for DLP numerical stats runs.

All models use Pydantic v2 for validation and serialization.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from dlp_numerical_stats.domain.job_constants import DEFAULT_DLP_LOCATION


class BigQueryTableRef(BaseModel):
    """Fully qualified BigQuery table analysed by a risk job."""

    model_config = ConfigDict(frozen=True)

    project_id: str = Field(..., min_length=1, description="Project owning the table")
    dataset_id: str = Field(..., min_length=1, description="BigQuery dataset ID")
    table_id: str = Field(..., min_length=1, description="BigQuery table ID")


class NumericalStatsJobSpec(BaseModel):
    """Everything needed to submit one numerical stats risk job.

    Built once per run and never modified after submission.
    """

    model_config = ConfigDict(frozen=True)

    calling_project_id: str = Field(
        ..., min_length=1, description="Project the DLP job runs and bills under"
    )
    table: BigQueryTableRef
    column_name: str = Field(..., min_length=1, description="Column to analyse")
    topic_id: str = Field(
        ..., min_length=1, description="Pub/Sub topic notified on job completion"
    )
    location: str = Field(default=DEFAULT_DLP_LOCATION, description="DLP location")

    @property
    def parent(self) -> str:
        """Resource name the job is created under."""
        return f"projects/{self.calling_project_id}/locations/{self.location}"

    @property
    def topic_path(self) -> str:
        """Fully qualified topic name for the Pub/Sub action."""
        return f"projects/{self.calling_project_id}/topics/{self.topic_id}"


class SubmittedJob(BaseModel):
    """Handle returned by job submission."""

    model_config = ConfigDict(frozen=True)

    job_name: str = Field(..., description="Opaque DLP job resource name")


class ScalarKind(str, Enum):
    """Kinds of scalar a DLP value wrapper can hold."""

    INTEGER = "integerValue"
    FLOAT = "floatValue"
    STRING = "stringValue"
    BOOLEAN = "booleanValue"
    TIMESTAMP = "timestampValue"
    TIME = "timeValue"
    DATE = "dateValue"
    DAY_OF_WEEK = "dayOfWeekValue"


class ScalarValue(BaseModel):
    """Tagged scalar decoded from a DLP value wrapper."""

    model_config = ConfigDict(frozen=True)

    kind: ScalarKind
    raw_text: str

    def __str__(self) -> str:
        return self.raw_text


class StatisticsResult(BaseModel):
    """Numerical stats computed by DLP for one column."""

    model_config = ConfigDict(frozen=True)

    min_value: ScalarValue
    max_value: ScalarValue
    quantile_values: tuple[ScalarValue, ...] = Field(
        default=(), description="Quantile boundaries in ascending rank order"
    )


class WaitOutcome(BaseModel):
    """How the wait for the completion notification ended."""

    job_name: str
    completed: bool = Field(
        ..., description="True if the matching notification arrived before timeout"
    )
    elapsed_seconds: float = Field(default=0.0, ge=0.0)


class NumericalStatsRunResult(BaseModel):
    """Result of one end-to-end numerical stats run."""

    job_name: str
    completed_before_timeout: bool
    statistics: StatisticsResult
    report_lines: list[str] = Field(default_factory=list)
