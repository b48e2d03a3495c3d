"""Configuration management for the document intake service.

This module uses Pydantic Settings to load configuration from environment
variables. Thresholds and calibration parameters are validated at startup
so a misconfigured classifier fails fast instead of producing skewed
confidence values.
"""

import logging
import sys
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every field has a default, so the service runs with an empty
    environment. Values may be overridden via environment variables or a
    .env file in the working directory.
    """

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Standard library logging level name"
    )

    # Classifier waterfall thresholds
    confidence_high: float = Field(
        default=0.85, ge=0.0, le=1.0,
        description="Early-exit threshold for the keyword and structure stages"
    )
    confidence_medium: float = Field(
        default=0.60, ge=0.0, le=1.0,
        description="Threshold for the combined stage and automatic acceptance"
    )
    confidence_low: float = Field(
        default=0.40, ge=0.0, le=1.0,
        description="Minimum confidence for a best-effort classification"
    )

    # Calibration parameters
    unique_identifier_bonus: float = Field(
        default=5.0, ge=0.0,
        description="Score added per occurrence of a type's unique identifier phrase"
    )
    largest_amount_confidence: float = Field(
        default=0.6, ge=0.0, le=1.0,
        description="Confidence assigned to the largest-amount total value fallback"
    )
    max_clauses: int = Field(
        default=20, ge=1,
        description="Maximum number of clauses kept per document"
    )

    # Batch processing
    batch_workers: int = Field(
        default=0, ge=0,
        description="Worker threads for batch classification (0 = os.cpu_count())"
    )

    # Upstream text extraction
    text_extraction_retries: int = Field(
        default=2, ge=0, le=10,
        description="Retries for transient text extraction failures"
    )
    text_extraction_base_delay: float = Field(
        default=0.5, ge=0.0,
        description="Base delay in seconds for extraction retry backoff"
    )

    # HTTP API
    max_upload_size_mb: int = Field(
        default=50, ge=1, le=500,
        description="Maximum accepted upload size in megabytes"
    )
    trusted_proxies: str = Field(
        default="",
        description="Comma-separated proxy IPs allowed to set X-Forwarded-For"
    )
    api_rate_limit: str = Field(
        default="60/minute",
        description="slowapi rate limit applied to the API routes"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that LOG_LEVEL names a standard logging level."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(
                f"LOG_LEVEL must be a standard logging level (got: {v!r})"
            )
        return level

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "Settings":
        """Thresholds must be strictly decreasing: high > medium > low."""
        if not (self.confidence_high > self.confidence_medium > self.confidence_low):
            raise ValueError(
                "Confidence thresholds must satisfy "
                "CONFIDENCE_HIGH > CONFIDENCE_MEDIUM > CONFIDENCE_LOW"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached Settings instance.

    Returns:
        Settings: Validated application settings

    Raises:
        ValueError: If environment variables are present but invalid
    """
    return Settings()


def configure_logging(level: str, fmt: str = "%(asctime)s %(levelname)s %(name)s: %(message)s") -> None:
    """Configure root logging to stdout at the given level name."""
    logging.basicConfig(level=level, format=fmt, stream=sys.stdout)
