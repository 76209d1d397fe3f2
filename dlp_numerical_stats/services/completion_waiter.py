"""Wait for the Pub/Sub notification that a DLP job has finished."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from dlp_numerical_stats.config.logging_config import get_logger
from dlp_numerical_stats.domain.job_constants import (
    DEFAULT_JOB_WAIT_TIMEOUT_SECONDS,
    DEFAULT_SETTLE_DELAY_SECONDS,
    DLP_JOB_NAME_ATTRIBUTE,
)
from dlp_numerical_stats.domain.models import WaitOutcome
from dlp_numerical_stats.domain.protocols import NotificationMessage
from dlp_numerical_stats.observability.metrics import (
    JOB_WAIT_SECONDS,
    JOB_WAIT_TIMEOUTS_TOTAL,
    NOTIFICATIONS_HANDLED_TOTAL,
)
from dlp_numerical_stats.ports.notifications import NotificationChannelPort

logger = get_logger(__name__)


class JobCompletionListener:
    """Message handler that signals once the notification for one job arrives.

    ``handle_message`` is called from the subscriber's worker threads, possibly
    for several messages at once. Only messages for ``job_name`` are acked;
    everything else is nacked so other consumers can still receive it.

    The first matching message settles and sets the completion event; later
    duplicates for the same job are only acked.
    """

    def __init__(
        self,
        job_name: str,
        *,
        settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        event: threading.Event | None = None,
    ) -> None:
        if not job_name:
            raise ValueError("job_name must not be empty")
        self.job_name = job_name
        self._settle_delay_seconds = max(settle_delay_seconds, 0.0)
        self._sleep = sleep
        self._done = event if event is not None else threading.Event()
        self._claim_lock = threading.Lock()
        self._claimed = False

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def handle_message(self, message: NotificationMessage) -> None:
        received_job_name = message.attributes.get(DLP_JOB_NAME_ATTRIBUTE)
        if received_job_name != self.job_name:
            logger.debug(
                "job_notification_rejected",
                received_job_name=received_job_name,
            )
            NOTIFICATIONS_HANDLED_TOTAL.labels(outcome="nack").inc()
            message.nack()
            return

        with self._claim_lock:
            first = not self._claimed
            self._claimed = True

        if first:
            if self._settle_delay_seconds > 0:
                self._sleep(self._settle_delay_seconds)
            self._done.set()
            logger.info("job_notification_received")
        else:
            logger.debug("job_notification_duplicate")
        NOTIFICATIONS_HANDLED_TOTAL.labels(outcome="ack").inc()
        message.ack()

    def wait(self, timeout_seconds: float) -> bool:
        """Block until the job notification arrives or the timeout elapses."""
        return self._done.wait(timeout=timeout_seconds)


def wait_for_job_completion(
    channel: NotificationChannelPort,
    job_name: str,
    *,
    timeout_seconds: float = DEFAULT_JOB_WAIT_TIMEOUT_SECONDS,
    settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS,
    listener: JobCompletionListener | None = None,
) -> WaitOutcome:
    """Listen on ``channel`` until ``job_name`` finishes or time runs out.

    A timeout is not an error: the outcome reports ``completed=False`` and the
    caller decides whether to fetch the job anyway. The listener is stopped
    before this function returns on every path.

    Args:
        channel: Notification channel to listen on
        job_name: DLP job resource name to wait for
        timeout_seconds: Overall wait bound
        settle_delay_seconds: Pause between the matching message and the signal
        listener: Pre-built listener (tests inject one to observe it)

    Returns:
        How the wait ended
    """
    listener = listener or JobCompletionListener(
        job_name, settle_delay_seconds=settle_delay_seconds
    )

    logger.info("job_wait_started", timeout_seconds=timeout_seconds)
    started = time.monotonic()
    with channel.listen(listener.handle_message):
        completed = listener.wait(timeout_seconds)
    elapsed = time.monotonic() - started
    JOB_WAIT_SECONDS.observe(elapsed)

    if completed:
        logger.info("job_wait_completed", elapsed_seconds=round(elapsed, 3))
    else:
        JOB_WAIT_TIMEOUTS_TOTAL.inc()
        logger.warning(
            "job_wait_timed_out",
            timeout_seconds=timeout_seconds,
            elapsed_seconds=round(elapsed, 3),
        )

    return WaitOutcome(job_name=job_name, completed=completed, elapsed_seconds=elapsed)


__all__ = ["JobCompletionListener", "wait_for_job_completion"]
