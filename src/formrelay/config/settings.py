"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Configures all application settings from environment variables with
validation and defaults. Supports .env files for local development.
"""

import ipaddress
import re
from typing import List, Literal, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="FormRelay", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS settings
    aws_region: str = Field(default="us-east-1", description="AWS region")
    stage: str = Field(default="dev", description="Deployment stage")

    # Queue settings
    queue_backend: Literal["sqs", "memory"] = Field(
        default="sqs",
        description="Submission queue backend"
    )
    queue_url: Optional[str] = Field(
        default=None,
        description="URL of the SQS submission queue (FIFO queue recommended)"
    )
    queue_topic: str = Field(
        default="form_submissions",
        min_length=1,
        description="Name of the single ordered submission channel"
    )
    queue_wait_seconds: int = Field(
        default=20,
        ge=1,
        le=20,
        description="SQS long-poll wait time per receive call"
    )
    queue_visibility_timeout: int = Field(
        default=120,
        ge=1,
        le=43200,
        description="Seconds a received entry stays hidden while it is processed"
    )
    queue_error_backoff: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait after a failed dequeue before polling again"
    )

    # Status store settings
    status_backend: Literal["dynamodb", "memory"] = Field(
        default="dynamodb",
        description="Status store backend"
    )
    status_table_name: Optional[str] = Field(
        default=None,
        description="Name of the DynamoDB submission status table"
    )
    status_ttl_hours: int = Field(
        default=24,
        ge=1,
        description="Retention window for status records in hours"
    )

    # Sink settings
    sink_backend: Literal["sheets", "webhook"] = Field(
        default="sheets",
        description="Downstream record sink"
    )
    sheets_spreadsheet_id: Optional[str] = Field(
        default=None,
        description="Google Sheets spreadsheet ID"
    )
    sheets_sheet_name: str = Field(
        default="Sheet1",
        description="Sheet (tab) rows are appended to"
    )
    sheets_access_token: Optional[SecretStr] = Field(
        default=None,
        description="OAuth bearer token for the Sheets API"
    )
    webhook_url: Optional[str] = Field(
        default=None,
        description="Webhook URL for the webhook sink"
    )
    sink_timeout: int = Field(
        default=10,
        ge=1,
        le=60,
        description="HTTP timeout in seconds for a single delivery attempt"
    )

    # Delivery settings
    delivery_max_retries: int = Field(
        default=3,
        ge=0,
        le=20,
        description="Retries after the first failed delivery attempt"
    )
    delivery_retry_delay: float = Field(
        default=2.0,
        ge=0,
        le=300,
        description="Fixed delay in seconds between delivery attempts"
    )
    run_worker_in_process: bool = Field(
        default=False,
        description="Run the delivery worker inside the API process"
    )

    # Security settings
    allowed_networks: List[str] = Field(
        default_factory=list,
        description="CIDR networks allowed to submit forms (empty allows all)"
    )

    # Observability settings
    metrics_enabled: bool = Field(
        default=True,
        description="Publish CloudWatch metrics"
    )

    @field_validator('status_table_name')
    @classmethod
    def validate_table_name(cls, v: Optional[str]) -> Optional[str]:
        """Validate DynamoDB table name."""
        if v is None:
            return v

        # Allow alphanumeric, hyphens, underscores, dots
        if not re.match(r'^[a-zA-Z0-9_.-]{3,255}$', v):
            raise ValueError(
                "Table name must contain only letters, numbers, dots, hyphens, and underscores"
            )

        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator('allowed_networks')
    @classmethod
    def validate_allowed_networks(cls, v: List[str]) -> List[str]:
        """Validate every allowlist entry is a CIDR network."""
        for network in v:
            try:
                ipaddress.ip_network(network, strict=False)
            except ValueError as e:
                raise ValueError(f"Invalid network in allowed_networks: {network}") from e
        return v

    @model_validator(mode='after')
    def validate_backends(self) -> 'Settings':
        """Require the connection settings of the selected backends."""
        if self.queue_backend == "sqs" and not self.queue_url:
            raise ValueError("queue_url is required when queue_backend is 'sqs'")
        if self.status_backend == "dynamodb" and not self.status_table_name:
            raise ValueError("status_table_name is required when status_backend is 'dynamodb'")
        return self

    @property
    def delivery_window_seconds(self) -> float:
        """Worst-case seconds spent delivering one submission, retries included."""
        attempts = self.delivery_max_retries + 1
        return attempts * self.sink_timeout + self.delivery_max_retries * self.delivery_retry_delay

    @model_validator(mode='after')
    def validate_visibility_timeout(self) -> 'Settings':
        """Keep an SQS entry hidden for the whole delivery window."""
        if self.queue_backend == "sqs" and self.queue_visibility_timeout < self.delivery_window_seconds:
            raise ValueError(
                f"queue_visibility_timeout ({self.queue_visibility_timeout}s) must cover the "
                f"delivery window of {self.delivery_window_seconds:g}s "
                "((delivery_max_retries + 1) * sink_timeout + delivery_max_retries * delivery_retry_delay)"
            )
        return self


# Global settings instance
settings = Settings()
