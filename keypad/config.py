"""
Configuration for the keypad engine.

Settings are read from KEYPAD_* environment variables (or a .env file) and
fall back to the behaviour of a phone calculator: 13 characters of display
and input, "Undefined" for results that are not finite numbers.
"""

import logging

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="KEYPAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Display settings
    max_display_length: int = Field(default=13, ge=1)
    max_input_length: int = Field(default=13, ge=1)
    error_text: str = "Undefined"

    # Run Session.check_invariants() after every key; meant for tests and debugging
    check_invariants: bool = False

    log_level: str = "WARNING"


# Global settings instance
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Set up structlog console output filtered at the given level name."""
    level_name = (level or settings.log_level).upper()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level_name)),
    )


# quiet by default; KEYPAD_LOG_LEVEL or a later configure_logging() call raises verbosity
configure_logging()
