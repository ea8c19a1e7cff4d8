"""
Database configuration settings.

Connection parameters for the async SQLAlchemy store. PostgreSQL via
asyncpg by default; a full URL (for example SQLite via aiosqlite) can be
given instead.

Dependencies: pydantic, pydantic_settings
System role: Store connection configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from study_engine.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Store connection and pool configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="postgres")
    password: str = Field(default="postgres")
    db: str = Field(default="study_engine", description="Database name")
    url: str | None = Field(
        default=None,
        description="Full async SQLAlchemy URL; overrides host/port/user/password/db",
    )

    pool_size: int = Field(default=10, gt=0, description="Persistent connections per process")
    max_overflow: int = Field(default=20, ge=0, description="Connections allowed beyond pool_size")
    pool_timeout: int = Field(default=30, gt=0, description="Seconds to wait for a pooled connection")
    echo_sql: bool = Field(default=False, description="Log emitted SQL")

    @property
    def async_database_url(self) -> str:
        """
        Async SQLAlchemy URL.

        Returns:
            str: `url` when set, else a postgresql+asyncpg URL built from the parts
        """
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"

    @property
    def is_sqlite(self) -> bool:
        return self.async_database_url.startswith("sqlite")
