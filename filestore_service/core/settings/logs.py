"""Logging settings for the API process and the CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_logging_yaml_source

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Where gateway and request logs go, and in which format.

    Environment variables use the LOG_ prefix: LOG_LEVEL=debug, LOG_JSON=false,
    LOG_FILE_ENABLED=true.
    """

    service_name: str = Field(
        default="filestore-service",
        description="Static `service` field on every JSON record",
    )
    level: LogLevel = "INFO"
    json_logs: bool = Field(default=True, alias="json", description="Emit JSON Lines")
    include_function_name: bool = False

    console_enabled: bool = True

    file_enabled: bool = False
    file_path: Path = Path("logs/filestore-service.log.jsonl")
    file_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    file_backup_count: int = Field(default=5, ge=0, le=100)

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``configure_logging``.

        ``file_path`` is None unless file logging is enabled.
        """
        return {
            "service_name": self.service_name,
            "log_level": self.level,
            "json_logs": self.json_logs,
            "include_function_name": self.include_function_name,
            "console_enabled": self.console_enabled,
            "file_path": str(self.file_path) if self.file_enabled else None,
            "file_max_bytes": self.file_max_bytes,
            "file_backup_count": self.file_backup_count,
        }

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_logging_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
