"""
Configuration Management Module

Environment-based settings for the command line runner, read with
pydantic-settings. Every variable is prefixed with ``PAYMENTS_``.
"""

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaymentsConfig(BaseSettings):
    """Payments ledger runtime configuration"""

    model_config = SettingsConfigDict(env_prefix="PAYMENTS_")

    # Logging configuration
    log_level: str = "WARNING"

    # Retention: None keeps every deposit/withdrawal for dispute lookups
    max_transactions: Optional[int] = Field(default=None, ge=1)

    # Print "Processed: N, Failed: M" to stderr after the run
    report_stats: bool = True

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


def get_config() -> PaymentsConfig:
    """Load configuration from the current environment."""
    return PaymentsConfig()
