from __future__ import annotations

"""Entry point for a one-shot DLP numerical stats run.

Command-line flags override the matching settings from the environment and
config/main.yaml.
"""

import argparse
import sys
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).parent.parent))

from dlp_numerical_stats.adapters.client_factory import (
    create_notification_channel,
    create_risk_job_client,
)
from dlp_numerical_stats.config.logging_config import get_logger, setup_logging
from dlp_numerical_stats.config.settings import Settings, get_settings
from dlp_numerical_stats.domain.exceptions import RiskAnalysisError
from dlp_numerical_stats.observability.metrics import ensure_metrics_exporter
from dlp_numerical_stats.use_cases.numerical_stats import numerical_stats_use_case

logger = get_logger(__name__)

_OVERRIDABLE_SETTINGS = (
    "calling_project_id",
    "table_project_id",
    "dataset_id",
    "table_id",
    "column_name",
    "topic_id",
    "subscription_id",
    "job_wait_timeout_seconds",
)


def positive_seconds(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}") from exc
    if not value > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {raw}")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute numerical stats for a BigQuery column with Cloud DLP"
    )
    parser.add_argument(
        "--calling-project-id", help="Project the DLP job runs under"
    )
    parser.add_argument(
        "--table-project-id",
        help="Project owning the table (defaults to the calling project)",
    )
    parser.add_argument("--dataset-id", help="BigQuery dataset ID")
    parser.add_argument("--table-id", help="BigQuery table ID")
    parser.add_argument("--column-name", help="Column to analyse")
    parser.add_argument(
        "--topic-id", help="Pub/Sub topic notified when the job finishes"
    )
    parser.add_argument(
        "--subscription-id", help="Pub/Sub subscription attached to the topic"
    )
    parser.add_argument(
        "--timeout-seconds",
        dest="job_wait_timeout_seconds",
        type=positive_seconds,
        help="Overall wait for the completion notification",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs in JSON format",
    )
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with every flag that was given on the command line."""

    updates: dict[str, Any] = {
        name: getattr(args, name)
        for name in _OVERRIDABLE_SETTINGS
        if getattr(args, name, None) is not None
    }
    if args.json_logs:
        updates["json_logs"] = True
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = apply_overrides(get_settings(), args)
    except RiskAnalysisError as exc:
        logger.error("numerical_stats_settings_invalid", error=str(exc))
        return 1
    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

    if settings.metrics_port is not None:
        ensure_metrics_exporter(settings.metrics_port)

    try:
        spec = settings.build_job_spec()
        job_service = create_risk_job_client()
    except RiskAnalysisError as exc:
        logger.error("numerical_stats_setup_failed", error=str(exc))
        return 1

    try:
        channel = create_notification_channel(settings)
    except RiskAnalysisError as exc:
        logger.error("numerical_stats_setup_failed", error=str(exc))
        job_service.close()
        return 1

    try:
        numerical_stats_use_case(
            job_service,
            channel,
            spec,
            timeout_seconds=settings.job_wait_timeout_seconds,
            settle_delay_seconds=settings.settle_delay_seconds,
        )
    except RiskAnalysisError as exc:
        logger.error(
            "numerical_stats_run_failed",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return 1
    finally:
        channel.close()
        job_service.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
