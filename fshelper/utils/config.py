"""
FSHelper Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# so nested BaseSettings classes can read the values
load_dotenv()


class HelperSettings(BaseSettings):
    """Defaults for one-shot file operations."""

    model_config = SettingsConfigDict(env_prefix="HELPER_")

    encoding: str = Field(default="utf-8", description="Text encoding for read_text/write_file")
    touch_flag: str = Field(default="a", description="Write flag used by touch")

    @field_validator("touch_flag")
    @classmethod
    def validate_touch_flag(cls, v: str) -> str:
        """Only plain write flags make sense for touch."""
        if v not in ("a", "w", "x"):
            raise ValueError(f"touch_flag must be one of 'a', 'w', 'x', got {v!r}")
        return v


class WatcherSettings(BaseSettings):
    """Watch configuration settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    poll_interval_ms: int = Field(default=5007, ge=1, description="Stat polling interval for watch_file")
    persistent: bool = Field(default=True, description="Keep the interpreter alive while watching")
    join_timeout: float = Field(default=5.0, ge=0.0, description="Seconds to wait for a watch thread on abort")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"


class Settings(BaseSettings):
    """Main settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="FSHelper")
    app_version: str = Field(default="0.1.0")

    # Root used by the command line front end only
    root_path: Path | None = Field(default=None, alias="FSHELPER_ROOT_PATH")

    # Sub-settings
    helper: HelperSettings = Field(default_factory=HelperSettings)
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings.

    Returns singleton instance of Settings. Call get_settings.cache_clear()
    after changing the environment to reload.
    """
    return Settings()
