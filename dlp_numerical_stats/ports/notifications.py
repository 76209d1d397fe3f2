"""Port definition for the job-completion notification channel."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from dlp_numerical_stats.domain.protocols import NotificationMessage

MessageHandler = Callable[[NotificationMessage], None]


@runtime_checkable
class NotificationChannelPort(Protocol):
    """Interface for listening to job-completion notifications."""

    def listen(self, handler: MessageHandler) -> AbstractContextManager[None]:
        """Deliver messages to ``handler`` while the context is open.

        The handler may be invoked concurrently from several worker threads.
        Leaving the context stops the listener and blocks until it has shut
        down, whether the block exits normally or by exception.
        """


__all__ = ["MessageHandler", "NotificationChannelPort"]
