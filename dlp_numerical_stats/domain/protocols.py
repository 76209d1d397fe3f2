"""Protocol definitions for dependency inversion.

These describe the shape of objects handed to us by external client libraries.
"""

from collections.abc import Mapping
from typing import Protocol


class NotificationMessage(Protocol):
    """A delivered notification that must be acknowledged or rejected.

    Matches `google.cloud.pubsub_v1.subscriber.message.Message`.
    """

    @property
    def attributes(self) -> Mapping[str, str]:
        """Message attributes set by the publisher."""
        ...

    def ack(self) -> None:
        """Acknowledge the message so it is not redelivered."""
        ...

    def nack(self) -> None:
        """Reject the message, leaving it for redelivery or other consumers."""
        ...
