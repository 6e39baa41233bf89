"""Configuration settings for Vehicle Makes DB."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VPICConfig(BaseModel):
    """Configuration for the NHTSA vPIC remote source."""

    base_url: str = Field(
        default="https://vpic.nhtsa.dot.gov/api/vehicles",
        description="Base URL of the vPIC vehicles API",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=600.0,
        description="Timeout applied to every outbound request",
    )
    user_agent_prefix: str = Field(
        default="vehicle-makes-db",
        description="Prefix of the per-request randomized User-Agent header",
    )


class PacingConfig(BaseModel):
    """Configuration for type-loading concurrency and pacing.

    vPIC has no published quota, so the client throttles itself: at most
    ``max_concurrent_requests`` fetches are in flight, and every group of
    that size is followed by a fixed pause.
    """

    max_concurrent_requests: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum simultaneous fetch-and-persist operations",
    )
    batch_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Pause between successive groups of requests",
    )


class SyncConfig(BaseModel):
    """Configuration for the periodic sync run."""

    interval_hours: float = Field(
        default=6.0,
        gt=0.0,
        description="Hours between scheduled sync runs",
    )
    run_on_startup: bool = Field(
        default=True,
        description="Run one sync immediately when the scheduler starts",
    )
    self_check: bool = Field(
        default=True,
        description="Compare remote make count with stored row count after each run",
    )
    shuffle: bool = Field(
        default=True,
        description="Randomize the make processing order every run",
    )
    max_makes: int | None = Field(
        default=None,
        ge=1,
        description="Only load types for this many makes (None = all)",
    )
    commit_batch_size: int = Field(
        default=1,
        ge=1,
        le=100,
        description="Makes to commit per batch while loading types (1 = commit each make)",
    )


class ServerConfig(BaseModel):
    """Configuration for the read API server."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Nested sections use ``__`` as delimiter, e.g. ``PACING__BATCH_DELAY_SECONDS=2``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Database
    # --------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite+aiosqlite:///./vehicle_makes.db",
        description="Async database connection string",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Remote source & pacing
    # --------------------------------------------------------------------------
    vpic: VPICConfig = Field(
        default_factory=VPICConfig,
        description="vPIC remote source configuration",
    )
    pacing: PacingConfig = Field(
        default_factory=PacingConfig,
        description="Request pacing configuration",
    )

    # --------------------------------------------------------------------------
    # Sync & serving
    # --------------------------------------------------------------------------
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Sync run configuration",
    )
    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Read API server configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
