"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: storage settings with test values
    - Storage Fixtures: in-memory S3 client and a gateway bound to it
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from filestore_service.core.settings import StorageSettings, clear_settings_cache
from filestore_service.infra.storage.gateway import S3StorageGateway, set_storage_gateway
from tests.fixtures.fake_s3 import TEST_BUCKET, FakeS3Client

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ROOT_PATH", "")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("STORAGE_ENDPOINT", "http://localhost:9000")
os.environ.setdefault("STORAGE_ENSURE_BUCKET_ON_STARTUP", "false")


@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    """Drop cached settings and the process-wide gateway around each test."""
    clear_settings_cache()
    set_storage_gateway(None)
    yield
    clear_settings_cache()
    set_storage_gateway(None)


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def storage_settings() -> StorageSettings:
    """Storage settings pointing at a local RustFS-style endpoint."""
    return StorageSettings(
        endpoint="http://rustfs:9000",
        bucket=TEST_BUCKET,
        access_key="rustfsadmin",
        secret_key="rustfsadmin",
    )


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
def fake_s3() -> FakeS3Client:
    """Empty in-memory S3 client."""
    return FakeS3Client()


@pytest.fixture
def gateway(storage_settings: StorageSettings, fake_s3: FakeS3Client) -> S3StorageGateway:
    """Gateway bound to the in-memory client (already ready)."""
    return S3StorageGateway(storage_settings, client=fake_s3)
