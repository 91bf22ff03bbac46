"""S3-compatible object storage configuration settings.

Environment variables use STORAGE_ prefix.
Example: STORAGE_ENDPOINT="http://localhost:9000"
         STORAGE_BUCKET="chatbot-files"

Supports any S3-compatible store addressed path-style (RustFS, MinIO,
LocalStack, Ceph RGW) as well as AWS S3 itself.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import (
    Field,
    SecretStr,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_storage_yaml_source

AddressingStyle = Literal["path", "virtual", "auto"]


class StorageSettings(BaseSettings):
    """S3-compatible object storage settings.

    Environment variables use STORAGE_ prefix.
    Example: STORAGE_ACCESS_KEY=rustfsadmin
    """

    # ──────────────────────────────────────────────────────────────
    # Enable/Disable toggle
    # ──────────────────────────────────────────────────────────────

    enabled: bool = Field(
        default=True,
        description="Enable the object store connection",
    )

    # ──────────────────────────────────────────────────────────────
    # S3 Connection Configuration
    # ──────────────────────────────────────────────────────────────

    endpoint: str = Field(
        default="http://localhost:9000",
        min_length=1,
        description="S3-compatible endpoint URL",
    )

    public_base_url: str | None = Field(
        default=None,
        description="Base URL used to build public object URLs. Defaults to the endpoint.",
    )

    bucket: str = Field(
        default="chatbot-files",
        min_length=3,
        max_length=63,
        pattern=r"^[a-z0-9][a-z0-9.-]*[a-z0-9]$",
        description="Bucket that holds uploaded files",
    )

    region: str = Field(
        default="us-east-1",
        description="Region used for request signing and bucket creation",
    )

    access_key: SecretStr | None = Field(
        default=None,
        description="S3 access key ID",
    )

    secret_key: SecretStr | None = Field(
        default=None,
        description="S3 secret access key",
    )

    addressing_style: AddressingStyle = Field(
        default="path",
        description="Bucket addressing style: path (bucket in URL path), virtual, or auto",
    )

    use_ssl: bool = Field(
        default=True,
        description="Use SSL/TLS for S3 connections (ignored for http:// endpoints)",
    )

    verify_ssl: bool = Field(
        default=True,
        description="Verify SSL certificates (set False for self-signed certs)",
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum number of retry attempts performed by botocore",
    )

    retry_mode: str = Field(
        default="standard",
        description="botocore retry mode: standard, adaptive, or legacy",
    )

    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Connect and read timeout in seconds",
    )

    max_pool_connections: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Maximum number of connections in the connection pool",
    )

    operation_timeout: float | None = Field(
        default=None,
        gt=0,
        le=3600,
        description="Upper bound in seconds for a single gateway operation (None = unbounded)",
    )

    # ──────────────────────────────────────────────────────────────
    # Transfer Configuration
    # ──────────────────────────────────────────────────────────────

    list_page_size: int = Field(
        default=1000,
        ge=1,
        le=1000,
        description="MaxKeys requested per list_objects_v2 page",
    )

    download_chunk_size: int = Field(
        default=64 * 1024,
        ge=1024,
        le=16 * 1024 * 1024,
        description="Chunk size in bytes when streaming downloads to clients",
    )

    max_file_size_mb: int = Field(
        default=100,
        ge=1,
        le=5000,
        description="Maximum accepted upload size in MB",
    )

    # ──────────────────────────────────────────────────────────────
    # Service Lifecycle Configuration
    # ──────────────────────────────────────────────────────────────

    startup_require_storage: bool = Field(
        default=False,
        description="Fail application startup if storage is unavailable (False = degraded mode)",
    )

    ensure_bucket_on_startup: bool = Field(
        default=True,
        description="Create the configured bucket during startup when it does not exist",
    )

    # ──────────────────────────────────────────────────────────────
    # Validators
    # ──────────────────────────────────────────────────────────────

    @field_validator("endpoint", "public_base_url")
    @classmethod
    def _validate_url(cls, value: str | None) -> str | None:
        """Require an http(s) URL and drop any trailing slash."""
        if value is None:
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got {value!r}")
        return value.rstrip("/")

    @field_validator("retry_mode")
    @classmethod
    def _validate_retry_mode(cls, value: str) -> str:
        """Validate retry_mode is one of the allowed values."""
        allowed_modes = {"standard", "adaptive", "legacy"}
        if value not in allowed_modes:
            raise ValueError(f"retry_mode must be one of {allowed_modes}, got {value}")
        return value

    @model_validator(mode="after")
    def _validate_credential_consistency(self) -> StorageSettings:
        """Validate that both credentials are provided together or neither."""
        has_access_key = self.access_key is not None
        has_secret_key = self.secret_key is not None

        if has_access_key != has_secret_key:
            raise ValueError(
                "Both access_key and secret_key must be provided together when using "
                "static credentials. Provide both or neither."
            )

        return self

    # ──────────────────────────────────────────────────────────────
    # Computed Properties
    # ──────────────────────────────────────────────────────────────

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_configured(self) -> bool:
        """Check if storage is enabled and has an endpoint to talk to."""
        return self.enabled and bool(self.endpoint)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def public_url_base(self) -> str:
        """Base of the public object URLs handed back after uploads."""
        return self.public_base_url or self.endpoint

    @computed_field  # type: ignore[prop-decorator]
    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    # ──────────────────────────────────────────────────────────────
    # Helper Methods
    # ──────────────────────────────────────────────────────────────

    def object_url(self, bucket: str, key: str) -> str:
        """Build the public URL of an object (`<base>/<bucket>/<key>`)."""
        return f"{self.public_url_base}/{bucket}/{key}"

    def get_boto3_config(self) -> dict[str, Any]:
        """Get keyword arguments for creating an aioboto3 S3 client.

        Returns:
            Dictionary with region, endpoint, SSL settings and, when
            provided, the static credential pair.
        """
        if not self.is_configured:
            raise ValueError("Storage not configured")

        config: dict[str, Any] = {
            "region_name": self.region,
            "endpoint_url": self.endpoint,
            "use_ssl": self.use_ssl,
            "verify": self.verify_ssl,
        }

        # Without static credentials botocore falls back to its own chain
        if self.access_key is not None and self.secret_key is not None:
            config["aws_access_key_id"] = self.access_key.get_secret_value()
            config["aws_secret_access_key"] = self.secret_key.get_secret_value()

        return config

    # ──────────────────────────────────────────────────────────────
    # Model Configuration
    # ──────────────────────────────────────────────────────────────

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
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
            create_storage_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
