"""
Rebuild Watch Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Try current working directory
    load_dotenv()


class WatcherSettings(BaseSettings):
    """File watcher configuration settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    # "events" or "polling"; anything else behaves like "events"
    strategy: str = Field(default="events", description="Change notification strategy")
    verbose: bool = Field(default=False)
    debounce_delay_ms: int = Field(default=100, ge=0, le=5000)
    poll_interval_s: float = Field(default=1.0, gt=0.0)
    recursive: bool = Field(default=True)
    native_daemon_command: list[str] = Field(
        default=["watchman", "version"],
        description="Command used to check that the native watch daemon is usable",
    )
    ignore_patterns: list[str] = Field(
        default=[
            "*.pyc",
            "__pycache__",
            ".git",
            ".venv",
            "node_modules",
            "tmp",
            "dist",
            ".pytest_cache",
        ],
        description="Glob patterns ignored by the file watcher",
    )

    @field_validator("ignore_patterns", "native_daemon_command", mode="before")
    @classmethod
    def parse_list(cls, v: str | list[str]) -> list[str]:
        """Parse a list from a comma-separated string or list."""
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @property
    def watcher(self) -> str:
        """Strategy name under the key the strategy selector reads."""
        return self.strategy


class BuildSettings(BaseSettings):
    """Build command configuration settings."""

    model_config = SettingsConfigDict(env_prefix="BUILD_")

    command: str = Field(default="make", description="Shell command run on every rebuild")
    cwd: Path | None = Field(default=None)


class AnalyticsSettings(BaseSettings):
    """Analytics configuration settings."""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    enabled: bool = Field(default=True)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="WARNING")
    format: str = Field(default="console")  # "json" or "console"


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="rebuild-watch")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")

    # Sub-settings
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() in ("development", "dev", "local")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    """
    return Settings()


# Type alias for dependency injection
SettingsDep = Annotated[Settings, Field(default_factory=get_settings)]
