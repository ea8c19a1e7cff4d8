"""
Shared configuration fields.

Every component settings class inherits the environment name, debug flag
and log level from here, and reads `.env` the same way.

Dependencies: pydantic, pydantic_settings
System role: Common parent of the component settings classes
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings parent with environment and logging fields."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Deployment environment (development, test, production)",
    )
    debug: bool = Field(default=False, description="Verbose diagnostics")
    log_level: str = Field(
        default="INFO",
        description="Root log level name passed to configure_logging",
    )

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        """Upper-case the level and reject names logging does not know."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug is on, else the configured level."""
        return "DEBUG" if self.debug else self.log_level
