"""Application settings with Pydantic Settings validation.

Values come from environment variables (and a .env file when present), with
non-sensitive defaults loaded from config/main.yaml. The YAML file is
validated against config/schemas/main.schema.json when that schema exists.
Environment values always win over YAML values.
"""

import json
from pathlib import Path
from typing import Any, Final, cast

import yaml
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dlp_numerical_stats.config.logging_config import get_logger
from dlp_numerical_stats.domain.exceptions import ConfigurationError
from dlp_numerical_stats.domain.job_constants import (
    DEFAULT_DLP_LOCATION,
    DEFAULT_JOB_WAIT_TIMEOUT_SECONDS,
    DEFAULT_SETTLE_DELAY_SECONDS,
)
from dlp_numerical_stats.domain.models import BigQueryTableRef, NumericalStatsJobSpec

CONFIG_DIR_DEFAULT: Final[Path] = Path("config")
MAIN_CONFIG_FILE: Final[str] = "main.yaml"
MAIN_SCHEMA_FILE: Final[str] = "schemas/main.schema.json"

logger = cast(Any, get_logger(__name__))


def load_schema(config_dir: Path = CONFIG_DIR_DEFAULT) -> dict[str, Any]:
    """Load the JSON Schema for main.yaml.

    Returns:
        JSON Schema dictionary or empty dict if not found
    """
    schema_path = config_dir / MAIN_SCHEMA_FILE
    if not schema_path.exists():
        return {}

    try:
        with open(schema_path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(
            "config_schema_load_failed",
            path=str(schema_path),
            error=str(e),
        )
        return {}


def load_yaml_config(config_dir: Path = CONFIG_DIR_DEFAULT) -> dict[str, Any]:
    """Load and validate config/main.yaml.

    A missing or unreadable file yields an empty config; a file that fails
    schema validation is an error.

    Raises:
        ConfigurationError: If the file does not match its schema
    """
    main_path = config_dir / MAIN_CONFIG_FILE
    if not main_path.exists():
        return {}

    try:
        with open(main_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        logger.warning(
            "config_file_load_failed",
            path=str(main_path),
            error=str(e),
        )
        return {}

    schema = load_schema(config_dir)
    if schema:
        try:
            validate(instance=config, schema=schema)
        except JSONSchemaValidationError as e:
            raise ConfigurationError(
                f"Config validation failed (file: {main_path}): {e.message}"
            ) from e

    logger.debug("config_file_loaded", path=str(main_path))
    return config


class Settings(BaseSettings):
    """Application settings.

    Invocation parameters may be left unset here and supplied on the command
    line instead; `build_job_spec` reports whatever is still missing.
    """

    model_config = SettingsConfigDict(
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === DLP job ===
    calling_project_id: str | None = Field(
        default=None, description="Project the DLP job runs under"
    )
    dlp_location: str = Field(
        default=DEFAULT_DLP_LOCATION, description="DLP processing location"
    )
    table_project_id: str | None = Field(
        default=None, description="Project owning the BigQuery table"
    )
    dataset_id: str | None = Field(default=None, description="BigQuery dataset ID")
    table_id: str | None = Field(default=None, description="BigQuery table ID")
    column_name: str | None = Field(default=None, description="Column to analyse")

    # === Notifications ===
    topic_id: str | None = Field(
        default=None, description="Pub/Sub topic the job publishes to when done"
    )
    subscription_id: str | None = Field(
        default=None, description="Pub/Sub subscription attached to the topic"
    )
    job_wait_timeout_seconds: float = Field(
        default=DEFAULT_JOB_WAIT_TIMEOUT_SECONDS,
        gt=0,
        description="Overall wait for the completion notification",
    )
    settle_delay_seconds: float = Field(
        default=DEFAULT_SETTLE_DELAY_SECONDS,
        ge=0,
        description="Pause after the matching notification before fetching",
    )

    # === Observability ===
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON log lines")
    metrics_port: int | None = Field(
        default=None, description="Port for the Prometheus exporter (off if unset)"
    )

    def __init__(self, config_dir: Path = CONFIG_DIR_DEFAULT, **data: Any):
        """Initialize settings, then fill unset fields from YAML."""
        config = load_yaml_config(config_dir)

        super().__init__(**data)
        self._apply_yaml_defaults(config)

    def _apply_yaml_defaults(self, config: dict[str, Any]) -> None:
        """Apply YAML-sourced defaults without overriding env-provided values."""

        fields_from_env = set(self.model_fields_set)

        def _assign(field_name: str, value: Any) -> None:
            if value is None:
                return
            if field_name in fields_from_env:
                return

            object.__setattr__(self, field_name, value)
            self.model_fields_set.add(field_name)

        dlp_config = config.get("dlp") or {}
        _assign("calling_project_id", dlp_config.get("calling_project_id"))
        _assign("dlp_location", dlp_config.get("location"))

        table_config = config.get("source_table") or {}
        _assign("table_project_id", table_config.get("project_id"))
        _assign("dataset_id", table_config.get("dataset_id"))
        _assign("table_id", table_config.get("table_id"))
        _assign("column_name", table_config.get("column_name"))

        notifications_config = config.get("notifications") or {}
        _assign("topic_id", notifications_config.get("topic_id"))
        _assign("subscription_id", notifications_config.get("subscription_id"))

        wait_config = config.get("wait") or {}
        _assign("job_wait_timeout_seconds", wait_config.get("timeout_seconds"))
        _assign("settle_delay_seconds", wait_config.get("settle_delay_seconds"))

        logging_config = config.get("logging") or {}
        _assign("log_level", logging_config.get("level"))
        _assign("json_logs", logging_config.get("json"))

        metrics_config = config.get("metrics") or {}
        _assign("metrics_port", metrics_config.get("port"))

    def build_job_spec(self) -> NumericalStatsJobSpec:
        """Assemble the job spec from settings.

        The table project defaults to the calling project.

        Raises:
            ConfigurationError: If a required parameter is missing
        """
        required = {
            "calling_project_id": self.calling_project_id,
            "dataset_id": self.dataset_id,
            "table_id": self.table_id,
            "column_name": self.column_name,
            "topic_id": self.topic_id,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing required settings: {', '.join(missing)}"
            )

        calling_project_id = cast(str, self.calling_project_id)
        return NumericalStatsJobSpec(
            calling_project_id=calling_project_id,
            table=BigQueryTableRef(
                project_id=self.table_project_id or calling_project_id,
                dataset_id=cast(str, self.dataset_id),
                table_id=cast(str, self.table_id),
            ),
            column_name=cast(str, self.column_name),
            topic_id=cast(str, self.topic_id),
            location=self.dlp_location,
        )

    def require_subscription_id(self) -> str:
        if not self.subscription_id:
            raise ConfigurationError("Missing required settings: subscription_id")
        return self.subscription_id


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
