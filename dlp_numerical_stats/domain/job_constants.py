"""Constants for submitting and awaiting DLP risk jobs.

The wait constants are defaults for `Settings`; runs use them unchanged unless
configuration overrides them.
"""

from typing import Final

DEFAULT_JOB_WAIT_TIMEOUT_SECONDS: Final[float] = 600.0
"""Overall time to wait for the job-completion notification (10 minutes).

Not scaled to job size: large tables can take longer, in which case the run
proceeds to fetch the job anyway and the fetch may report it as incomplete.
"""

DEFAULT_SETTLE_DELAY_SECONDS: Final[float] = 0.5
"""Pause after the matching notification before signalling completion.

The notification can arrive slightly before the job results are readable
through `get_dlp_job`.
"""

DLP_JOB_NAME_ATTRIBUTE: Final[str] = "DlpJobName"
"""Pub/Sub message attribute that carries the finished job's resource name."""

DEFAULT_DLP_LOCATION: Final[str] = "global"
