"""Custom exception hierarchy for DLP numerical stats runs.

Following error taxonomy: retryable, non-retryable. Nothing in this package
retries; the split only tells callers what would be safe to re-run.
"""


class RiskAnalysisError(Exception):
    """Base exception for all application errors."""

    pass


class RetryableError(RiskAnalysisError):
    """Errors that could succeed on a later attempt (transient API failures)."""

    pass


class NonRetryableError(RiskAnalysisError):
    """Errors that will not succeed without a change of input or state."""

    pass


class ConfigurationError(NonRetryableError):
    """Required invocation parameters are missing or invalid."""

    pass


class JobSubmissionError(NonRetryableError):
    """The DLP API rejected the risk job (auth, malformed reference, quota)."""

    pass


class JobFetchError(NonRetryableError):
    """The DLP API failed to return the job."""

    pass


class JobNotFoundError(JobFetchError):
    """No DLP job exists under the requested name."""

    def __init__(self, job_name: str) -> None:
        """Initialize with the missing job name."""
        self.job_name = job_name
        super().__init__(f"DLP job not found: {job_name}")


class JobIncompleteError(JobFetchError):
    """The job exists but has no numerical stats result yet."""

    def __init__(self, job_name: str, state: str) -> None:
        """Initialize with the job name and its reported state."""
        self.job_name = job_name
        self.state = state
        super().__init__(f"DLP job {job_name} is not complete (state: {state})")


class JobFailedError(JobFetchError):
    """The job reached a terminal state other than DONE."""

    def __init__(self, job_name: str, state: str) -> None:
        """Initialize with the job name and its terminal state."""
        self.job_name = job_name
        self.state = state
        super().__init__(f"DLP job {job_name} ended without a result (state: {state})")


class ValueDecodingError(NonRetryableError):
    """A DLP value wrapper does not hold exactly one known scalar."""

    pass


class NotificationChannelError(RetryableError):
    """The notification listener stopped with an error."""

    pass
