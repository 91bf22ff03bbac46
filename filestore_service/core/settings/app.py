"""HTTP application and server settings."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_app_yaml_source

Environment = Literal["development", "staging", "production", "test"]


class AppSettings(BaseSettings):
    """Settings for the file API and the ``serve`` command.

    Environment variables use the APP_ prefix, e.g. APP_PORT=8080 or
    APP_DOCS_ENABLED=false.
    """

    service_name: str = Field(
        default="filestore-service",
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Name reported in startup logs",
    )
    title: str = Field(default="File Store API", min_length=1)
    description: str = Field(
        default="Upload, list and download files kept in an S3-compatible object store",
    )
    version: str = Field(default="0.1.0", pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$")
    environment: Environment = "development"
    api_prefix: str = Field(
        default="/api",
        pattern=r"^/.*$",
        description="Prefix for the file and health routes",
    )

    debug: bool = False
    docs_enabled: bool = Field(
        default=True, description="Serve Swagger UI at /docs and the schema at /openapi.json",
    )
    root_path: str = Field(
        default="",
        description="Path the service is mounted under behind a reverse proxy",
    )

    # uvicorn, used by `filestore-service serve`
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = False

    @model_validator(mode="after")
    def validate_production_settings(self) -> AppSettings:
        if self.environment == "production" and self.debug:
            msg = "Debug mode cannot be enabled in production environment"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_app_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    def docs_urls(self) -> dict[str, str | None]:
        """FastAPI keyword arguments for the interactive docs; all None when disabled."""
        if not self.docs_enabled:
            return {"docs_url": None, "redoc_url": None, "openapi_url": None}
        return {"docs_url": "/docs", "redoc_url": None, "openapi_url": "/openapi.json"}
