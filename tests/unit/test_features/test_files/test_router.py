"""Unit tests for the file management API endpoints."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient

from filestore_service.core.settings import StorageSettings, get_storage_settings
from filestore_service.infra.storage.dependencies import get_storage_gateway
from filestore_service.infra.storage.gateway import S3StorageGateway
from tests.fixtures.fake_s3 import TEST_BUCKET, FakeS3Client, client_error

BASE = "/api/file-management"


@pytest.fixture
def app(storage_settings: StorageSettings, gateway: S3StorageGateway) -> FastAPI:
    """Application with the gateway bound to the in-memory S3 client."""
    from filestore_service.app.main import create_app

    app = create_app()
    app.dependency_overrides[get_storage_gateway] = lambda: gateway
    app.dependency_overrides[get_storage_settings] = lambda: storage_settings
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


class TestUploadFile:
    """POST /upload-file."""

    @pytest.mark.asyncio
    async def test_upload_success(self, client: AsyncClient, fake_s3: FakeS3Client):
        response = await client.post(
            f"{BASE}/upload-file",
            files={"file": ("report.pdf", b"%PDF-1.7", "application/pdf")},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "file_url": "http://rustfs:9000/chatbot-files/report.pdf",
            "file_name": "report.pdf",
        }
        stored = fake_s3.buckets[TEST_BUCKET]["report.pdf"]
        assert stored.data == b"%PDF-1.7"
        assert stored.content_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_missing_file(self, client: AsyncClient, fake_s3: FakeS3Client):
        response = await client.post(f"{BASE}/upload-file", data={"description": "nothing"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "No file was uploaded."
        assert fake_s3.calls == []

    @pytest.mark.asyncio
    async def test_empty_file(self, client: AsyncClient, fake_s3: FakeS3Client):
        response = await client.post(
            f"{BASE}/upload-file", files={"file": ("empty.txt", b"", "text/plain")}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "No file was uploaded."
        assert "put_object" not in fake_s3.calls

    @pytest.mark.asyncio
    async def test_oversized_file(self, app: FastAPI, client: AsyncClient, fake_s3: FakeS3Client):
        small_limit = StorageSettings(endpoint="http://rustfs:9000", max_file_size_mb=1)
        app.dependency_overrides[get_storage_settings] = lambda: small_limit

        response = await client.post(
            f"{BASE}/upload-file",
            files={"file": ("big.bin", b"x" * (1024 * 1024 + 1), "application/octet-stream")},
        )

        assert response.status_code == 413
        assert response.json()["max_file_size_mb"] == 1
        assert "put_object" not in fake_s3.calls

    @pytest.mark.asyncio
    async def test_bucket_provisioning_failure(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.errors["list_buckets"] = client_error("AccessDenied", "Access Denied", 403, "ListBuckets")

        response = await client.post(
            f"{BASE}/upload-file", files={"file": ("a.txt", b"hello", "text/plain")}
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["type"] == "storage-protocol-error"
        assert body["store_error_code"] == "AccessDenied"

    @pytest.mark.asyncio
    async def test_upload_failure(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.errors["put_object"] = client_error("InternalError", "We encountered an internal error.", 500, "PutObject")

        response = await client.post(
            f"{BASE}/upload-file", files={"file": ("a.txt", b"hello", "text/plain")}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "internal error" in response.json()["detail"]


class TestListFiles:
    """GET /list-files."""

    @pytest.mark.asyncio
    async def test_list_files(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.add_object(TEST_BUCKET, "a.txt", b"a")
        fake_s3.add_object(TEST_BUCKET, "b.pdf", b"b")

        response = await client.get(f"{BASE}/list-files")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == ["a.txt", "b.pdf"]

    @pytest.mark.asyncio
    async def test_list_creates_missing_bucket(self, client: AsyncClient, fake_s3: FakeS3Client):
        response = await client.get(f"{BASE}/list-files")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []
        assert TEST_BUCKET in fake_s3.buckets

    @pytest.mark.asyncio
    async def test_list_failure(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.errors["list_objects_v2"] = client_error("AccessDenied", "Access Denied", 403, "ListObjectsV2")

        response = await client.get(f"{BASE}/list-files")

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestDownloadFile:
    """GET /download/{file_name}."""

    @pytest.mark.asyncio
    async def test_download_success(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.add_object(TEST_BUCKET, "report.pdf", b"%PDF-1.7 body")

        response = await client.get(f"{BASE}/download/report.pdf")

        assert response.status_code == status.HTTP_200_OK
        assert response.content == b"%PDF-1.7 body"
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="report.pdf"'
        assert response.headers["content-length"] == str(len(b"%PDF-1.7 body"))
        assert fake_s3.bodies.open_count == 0

    @pytest.mark.asyncio
    async def test_download_unknown_extension(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.add_object(TEST_BUCKET, "data.bin", b"\x00\x01")

        response = await client.get(f"{BASE}/download/data.bin")

        assert response.headers["content-type"] == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_download_non_ascii_name(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.add_object(TEST_BUCKET, "résumé.pdf", b"cv")

        response = await client.get(f"{BASE}/download/résumé.pdf")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-disposition"] == (
            "attachment; filename*=UTF-8''r%C3%A9sum%C3%A9.pdf"
        )

    @pytest.mark.asyncio
    async def test_download_nested_key(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.add_object(TEST_BUCKET, "reports/2024/q1.pdf", b"%PDF-1.7 q1")

        response = await client.get(f"{BASE}/download/reports/2024/q1.pdf")

        assert response.status_code == status.HTTP_200_OK
        assert response.content == b"%PDF-1.7 q1"
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="q1.pdf"'

    @pytest.mark.asyncio
    async def test_download_not_found(self, client: AsyncClient, fake_s3: FakeS3Client):
        response = await client.get(f"{BASE}/download/missing.pdf")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["type"] == "storage-not-found"
        assert body["detail"] == "Requested file was not found: missing.pdf"

    @pytest.mark.asyncio
    async def test_download_failure(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.errors["get_object"] = client_error("AccessDenied", "Access Denied", 403, "GetObject")

        response = await client.get(f"{BASE}/download/a.txt")

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestStorageUnavailable:
    """Routes answer 503 while the gateway has no client."""

    @pytest.fixture
    def gateway(self, storage_settings: StorageSettings) -> S3StorageGateway:
        return S3StorageGateway(storage_settings)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "path"),
        [("get", "/list-files"), ("get", "/download/a.txt"), ("post", "/upload-file")],
    )
    async def test_returns_503(self, client: AsyncClient, method: str, path: str):
        response = await client.request(method, f"{BASE}{path}")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["detail"]["error"] == "storage_unavailable"


class TestHealth:
    """GET /api/health."""

    @pytest.mark.asyncio
    async def test_healthy(self, client: AsyncClient, fake_s3: FakeS3Client):
        fake_s3.buckets[TEST_BUCKET] = {}

        response = await client.get("/api/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "healthy", "storage": "ready", "bucket": TEST_BUCKET}

    @pytest.mark.asyncio
    async def test_unhealthy_when_bucket_unreachable(self, client: AsyncClient):
        response = await client.get("/api/health")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["storage"] == "unavailable"
