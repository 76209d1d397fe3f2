"""Run-scoped log context.

Every log line emitted during a run carries the run id, and once the job is
submitted, its DLP job name as well.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

import structlog

RUN_ID_KEY = "run_id"
JOB_NAME_KEY = "dlp_job_name"


@contextmanager
def run_scope(run_id: str | None = None) -> Iterator[str]:
    """Bind a run identifier, and clear all run context on exit."""

    resolved_id = run_id or uuid4().hex
    structlog.contextvars.bind_contextvars(**{RUN_ID_KEY: resolved_id})
    try:
        yield resolved_id
    finally:
        structlog.contextvars.unbind_contextvars(RUN_ID_KEY, JOB_NAME_KEY)


def bind_job_name(job_name: str) -> None:
    structlog.contextvars.bind_contextvars(**{JOB_NAME_KEY: job_name})


__all__ = ["JOB_NAME_KEY", "RUN_ID_KEY", "bind_job_name", "run_scope"]
