# core_forum_db/config.py
"""
Configuration management

Settings are read from ``FORUM_DB_*`` environment variables and an optional
``.env`` file; keyword overrides win over both.
"""
import logging
from typing import Any, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_BACKOFF_MULTIPLIER, DEFAULT_INITIAL_DELAY, DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES, ENV_PREFIX, MAX_PAGE_SIZE, SLOW_QUERY_THRESHOLD
)
from .types import TransactionMode

logger = logging.getLogger(__name__)


class DatabaseConfig(BaseSettings):
    """Immutable configuration for retries, transactions and query logging"""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    initial_delay: float = Field(default=DEFAULT_INITIAL_DELAY, ge=0)
    max_delay: float = Field(default=DEFAULT_MAX_DELAY, ge=0)
    backoff_multiplier: float = Field(default=DEFAULT_BACKOFF_MULTIPLIER, ge=1)
    transaction_mode: TransactionMode = TransactionMode.BOOKKEEPING
    slow_query_threshold: float = Field(default=SLOW_QUERY_THRESHOLD, ge=0)
    max_page_size: int = Field(default=MAX_PAGE_SIZE, ge=1)

    @model_validator(mode="after")
    def _check_delays(self) -> "DatabaseConfig":
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay cannot be smaller than initial_delay")
        return self


def get_database_config(env_file: Optional[str] = None, **overrides: Any) -> DatabaseConfig:
    """
    Main function to get configuration
    Supports both environment variables and parameters

    Args:
        env_file: Alternative ``.env`` file to read
        **overrides: Explicit values taking precedence over the environment
    """
    if env_file:
        config = DatabaseConfig(_env_file=env_file, **overrides)
    else:
        config = DatabaseConfig(**overrides)
    logger.debug(f"Loaded database config: mode={config.transaction_mode.value}, retries={config.max_retries}")
    return config
