"""Factories for the Google Cloud adapters."""

from google.auth import exceptions as auth_exceptions

from dlp_numerical_stats.adapters.dlp_client import DlpRiskJobClient
from dlp_numerical_stats.adapters.pubsub_channel import PubSubNotificationChannel
from dlp_numerical_stats.config.logging_config import get_logger
from dlp_numerical_stats.config.settings import Settings
from dlp_numerical_stats.domain.exceptions import ConfigurationError

logger = get_logger(__name__)


def create_risk_job_client() -> DlpRiskJobClient:
    """Create a DLP client using Application Default Credentials.

    Raises:
        ConfigurationError: If no credentials can be found
    """
    try:
        client = DlpRiskJobClient()
    except auth_exceptions.DefaultCredentialsError as e:
        raise ConfigurationError(f"Google Cloud credentials not found: {e}") from e
    logger.info("dlp_client_initialized")
    return client


def create_notification_channel(settings: Settings) -> PubSubNotificationChannel:
    """Create the Pub/Sub channel for the configured subscription.

    The subscription lives in the calling project, next to the job's topic.

    Raises:
        ConfigurationError: If the subscription or project is not configured,
            or no credentials can be found
    """
    subscription_id = settings.require_subscription_id()
    if not settings.calling_project_id:
        raise ConfigurationError("Missing required settings: calling_project_id")

    try:
        channel = PubSubNotificationChannel(
            project_id=settings.calling_project_id,
            subscription_id=subscription_id,
        )
    except auth_exceptions.DefaultCredentialsError as e:
        raise ConfigurationError(f"Google Cloud credentials not found: {e}") from e
    logger.info("pubsub_channel_initialized", subscription=channel.subscription_path)
    return channel


__all__ = ["create_notification_channel", "create_risk_job_client"]
