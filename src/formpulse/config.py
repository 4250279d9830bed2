"""Configuration management for formpulse."""

import logging
import warnings
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """formpulse configuration loaded from environment variables.

    All settings can be overridden via environment variables with
    the FORMPULSE_ prefix. For example:
        FORMPULSE_LOG_LEVEL=DEBUG
        FORMPULSE_WEBHOOK_TIMEOUT_SECONDS=10

    The webhook retry count and backoff schedule are fixed constants in
    ``formpulse.webhooks.delivery`` and are not configurable here.
    """

    # Environment
    env: Literal["development", "production", "test"] = Field(
        default="development",
        description="Environment: development, production, or test",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format",
    )

    # Webhook delivery
    webhook_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=120.0,
        description="Per-attempt HTTP timeout; the request is cancelled when it elapses",
    )
    webhook_max_response_body: int = Field(
        default=10000,
        ge=0,
        le=1_000_000,
        description="Characters of the subscriber's response body kept in the delivery log",
    )
    webhook_user_agent: str = Field(
        default="formpulse-webhooks/0.1",
        min_length=1,
        description="User-Agent header sent with every delivery",
    )

    # Analytics
    analytics_window_days: int = Field(
        default=30,
        ge=1,
        le=366,
        description="Number of daily buckets in the responses-over-time series",
    )

    model_config = {
        "env_prefix": "FORMPULSE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
    }

    @model_validator(mode="after")
    def validate_logging_settings(self) -> "Settings":
        """Reject unknown log levels and warn about text logs in production."""
        if self.log_level.upper() not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log_level: {self.log_level}")

        if self.env == "production" and self.log_format == "text":
            warnings.warn(
                "Text log format is intended for development. "
                "Set FORMPULSE_LOG_FORMAT=json in production.",
                UserWarning,
                stacklevel=2,
            )
            logger.warning("Text log format enabled in production")
        return self


# Global settings instance
settings = Settings()
