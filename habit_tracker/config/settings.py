"""
Configuration Management for Habit Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage locations and limits are read once and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_MAX_TASKS = 20


class StorageSettings(BaseSettings):
    """Local blob storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRACKER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path(".tracker_data"),
        description="Directory holding the JSON blobs"
    )

    # Blob names (one JSON file each)
    tasks_blob_name: str = Field(
        default="trackerTasks",
        description="Blob holding the ordered list of task names"
    )
    completions_blob_name: str = Field(
        default="trackerCompletions",
        description="Blob holding the date key -> task indices map"
    )

    # Audit trail
    audit_log_enabled: bool = Field(
        default=True,
        description="Append audit events to a JSON-lines file in data_dir"
    )
    audit_file_name: str = Field(
        default="audit.jsonl",
        description="Audit log file name inside data_dir"
    )

    @field_validator('tasks_blob_name', 'completions_blob_name', 'audit_file_name')
    @classmethod
    def validate_plain_name(cls, v: str) -> str:
        """Blob names become file names, so no path separators."""
        v = v.strip()
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"Invalid storage name: {v!r}")
        return v

    @property
    def audit_path(self) -> Path:
        return self.data_dir / self.audit_file_name


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Limits
    max_tasks: int = Field(
        default=DEFAULT_MAX_TASKS,
        ge=1,
        le=100,
        description="Maximum number of tasks that can be tracked"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries describing failures. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
