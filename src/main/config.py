"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
This module handles configuration settings provided using
environment variables, .env files and default values.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared import MODEL_VERSION, EnumEnvironment, EnumLogLevel
from src.shared.env import load_secret_file_variables  # noqa: F401


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    mongo_uri: str = Field(
        default="mongodb://localhost:27017/?replicaSet=rs0",
        description="MongoDB connection URI (replica set required for batch writes)",
    )
    database_name: str = Field(
        default="lice_forecast", description="Name of the MongoDB database"
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_", case_sensitive=False, extra="ignore"
    )


class ServiceSettings(BaseSettings):
    """Service metadata settings."""

    title: str = Field(default="Lice Forecast Service", description="Service title")
    description: str = Field(
        default="Sea lice growth forecasting and composite risk scoring "
        "for aquaculture populations",
        description="Service description",
    )
    version: str = Field(default="1.0.0", description="Service version")
    git_commit: str = Field(
        default="unknown",
        description="Git commit hash",
        validation_alias=AliasChoices("SERVICE_GIT_COMMIT", "GIT_COMMIT"),
    )
    build_time: str = Field(
        default="unknown",
        description="Build timestamp",
        validation_alias=AliasChoices("SERVICE_BUILD_TIME", "BUILD_TIME"),
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = SettingsConfigDict(
        env_prefix="SERVICE_", case_sensitive=False, extra="ignore"
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format",
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class SchedulerSettings(BaseSettings):
    """Daily forecast scheduler settings."""

    enabled: bool = Field(
        default=True, description="Arm the scheduler when the process starts"
    )
    target_hour: int = Field(
        default=6, ge=0, le=23, description="Local hour of the daily run"
    )
    interval_hours: float = Field(
        default=24.0, gt=0, description="Hours between runs after the first fire"
    )
    timezone: str = Field(
        default="Europe/Oslo", description="IANA timezone of the target hour"
    )
    horizons: List[int] = Field(
        default_factory=lambda: [7, 14],
        description="Forecast horizons in days, the first one drives alerts",
    )
    run_on_start: Optional[bool] = Field(
        default=None,
        description="Run immediately on start; defaults to True in production",
    )
    refresh_risk_scores: bool = Field(
        default=True,
        description="Recompute composite risk scores after each cycle",
    )

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_", case_sensitive=False, extra="ignore"
    )

    @field_validator("horizons")
    @classmethod
    def _positive_horizons(cls, value: List[int]) -> List[int]:
        if not value or any(h <= 0 for h in value):
            raise ValueError("horizons must be a non-empty list of positive days")
        return value


class ForecastSettings(BaseSettings):
    """Forecast engine settings."""

    history_window_days: int = Field(
        default=30, gt=0, description="Lookback window for lice counts"
    )
    treatment_window_days: int = Field(
        default=14, gt=0, description="Lookback window for completed treatments"
    )
    read_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout applied to every records read"
    )
    model_version: str = Field(
        default=MODEL_VERSION, description="Version tag stored on predictions"
    )

    model_config = SettingsConfigDict(
        env_prefix="FORECAST_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    forecast: ForecastSettings = Field(default_factory=ForecastSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def run_scheduler_on_start(self) -> bool:
        """Explicit setting wins, otherwise production runs immediately."""
        if self.scheduler.run_on_start is not None:
            return self.scheduler.run_on_start
        return self.environment == EnumEnvironment.PRODUCTION


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Used to be mocked in tests, allowing different settings based on enviroment.
    """
    return AppSettings()


settings = get_settings()
