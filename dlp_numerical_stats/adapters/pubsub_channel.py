"""Google Cloud Pub/Sub adapter for job-completion notifications."""

from collections.abc import Iterator
from contextlib import contextmanager

from google.api_core import exceptions as google_exceptions
from google.cloud import pubsub_v1

from dlp_numerical_stats.config.logging_config import get_logger
from dlp_numerical_stats.domain.exceptions import NotificationChannelError
from dlp_numerical_stats.ports.notifications import MessageHandler

logger = get_logger(__name__)


class PubSubNotificationChannel:
    """Streaming-pull listener on one Pub/Sub subscription.

    The subscriber client runs the handler on its own callback thread pool;
    this class only starts and stops the stream.
    """

    def __init__(
        self,
        project_id: str,
        subscription_id: str,
        *,
        subscriber: pubsub_v1.SubscriberClient | None = None,
    ) -> None:
        """Initialize Pub/Sub channel.

        Args:
            project_id: Project owning the subscription
            subscription_id: Subscription attached to the job's topic
            subscriber: Preconfigured subscriber client (defaults to ADC credentials)
        """
        self.subscriber = subscriber or pubsub_v1.SubscriberClient()
        self.subscription_path = self.subscriber.subscription_path(
            project_id, subscription_id
        )

    @contextmanager
    def listen(self, handler: MessageHandler) -> Iterator[None]:
        """Stream messages to ``handler`` until the context exits.

        Exiting cancels the stream and blocks until shutdown has finished.

        Raises:
            NotificationChannelError: If the stream ended with an API error
        """
        # Handlers still running at shutdown finish (and ack) before the join returns
        streaming_pull_future = self.subscriber.subscribe(
            self.subscription_path,
            callback=handler,
            await_callbacks_on_shutdown=True,
        )
        logger.info("pubsub_listener_started", subscription=self.subscription_path)
        try:
            yield
        finally:
            streaming_pull_future.cancel()
            try:
                streaming_pull_future.result()
            except google_exceptions.GoogleAPICallError as e:
                logger.error(
                    "pubsub_listener_failed",
                    subscription=self.subscription_path,
                    error=str(e),
                )
                raise NotificationChannelError(
                    f"Pub/Sub listener on {self.subscription_path} failed: {e}"
                ) from e
            logger.info("pubsub_listener_stopped", subscription=self.subscription_path)

    def close(self) -> None:
        self.subscriber.close()


__all__ = ["PubSubNotificationChannel"]
