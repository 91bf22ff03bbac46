"""Unit tests for S3StorageGateway against the in-memory S3 client."""

from __future__ import annotations

import asyncio
from io import BytesIO
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import EndpointConnectionError

from filestore_service.core.settings import StorageSettings
from filestore_service.infra.storage.exceptions import StorageNotConfiguredError
from filestore_service.infra.storage.gateway import S3StorageGateway
from filestore_service.infra.storage.results import Failure, FailureKind, Success
from tests.fixtures.fake_s3 import TEST_BUCKET, FakeS3Client, client_error


async def _read_all(gateway: S3StorageGateway, key: str, bucket: str = TEST_BUCKET) -> bytes:
    result = await gateway.download_object(key, bucket)
    assert isinstance(result, Success)
    async with result.value.content_stream as stream:
        return await stream.read()


class TestConstruction:
    """Gateway construction and lifecycle."""

    def test_disabled_storage_is_rejected(self):
        settings = StorageSettings(enabled=False)

        with pytest.raises(StorageNotConfiguredError):
            S3StorageGateway(settings)

    def test_injected_client_is_ready(self, gateway: S3StorageGateway):
        assert gateway.is_ready is True

    @pytest.mark.asyncio
    async def test_operations_before_startup_fail_without_raising(
        self, storage_settings: StorageSettings
    ):
        gateway = S3StorageGateway(storage_settings)

        result = await gateway.ensure_bucket(TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.UNEXPECTED
        assert result.error.message == "Storage gateway is not started"

    @pytest.mark.asyncio
    async def test_startup_opens_path_style_client(self, storage_settings: StorageSettings):
        client = FakeS3Client()
        client_context = MagicMock()
        client_context.__aenter__ = AsyncMock(return_value=client)
        client_context.__aexit__ = AsyncMock(return_value=None)
        session = MagicMock()
        session.client.return_value = client_context

        async with S3StorageGateway(storage_settings, session=session) as gateway:
            assert gateway.is_ready

        assert not gateway.is_ready
        client_context.__aexit__.assert_awaited_once()
        args, kwargs = session.client.call_args
        assert args == ("s3",)
        assert kwargs["endpoint_url"] == "http://rustfs:9000"
        assert kwargs["aws_access_key_id"] == "rustfsadmin"
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    @pytest.mark.asyncio
    async def test_shutdown_leaves_injected_client_alone(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        await gateway.shutdown()

        assert not gateway.is_ready
        assert fake_s3.calls == []

    @pytest.mark.asyncio
    async def test_health_check(self, gateway: S3StorageGateway, fake_s3: FakeS3Client):
        assert await gateway.health_check() is False

        fake_s3.buckets[TEST_BUCKET] = {}

        assert await gateway.health_check() is True


class TestEnsureBucket:
    """Bucket provisioning."""

    @pytest.mark.asyncio
    async def test_creates_missing_bucket(self, gateway: S3StorageGateway, fake_s3: FakeS3Client):
        result = await gateway.ensure_bucket(TEST_BUCKET)

        assert result == Success(None)
        assert TEST_BUCKET in fake_s3.buckets
        assert fake_s3.create_bucket_kwargs == [{"Bucket": TEST_BUCKET}]

    @pytest.mark.asyncio
    async def test_is_idempotent(self, gateway: S3StorageGateway, fake_s3: FakeS3Client):
        first = await gateway.ensure_bucket(TEST_BUCKET)
        second = await gateway.ensure_bucket(TEST_BUCKET)

        assert first.is_success and second.is_success
        assert fake_s3.calls.count("create_bucket") == 1

    @pytest.mark.asyncio
    async def test_existing_bucket_is_left_untouched(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        fake_s3.add_object(TEST_BUCKET, "keep.txt", b"keep")

        result = await gateway.ensure_bucket(TEST_BUCKET)

        assert result.is_success
        assert "create_bucket" not in fake_s3.calls
        assert fake_s3.buckets[TEST_BUCKET]["keep.txt"].data == b"keep"

    @pytest.mark.asyncio
    async def test_concurrent_calls_all_succeed(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        results = await asyncio.gather(*(gateway.ensure_bucket(TEST_BUCKET) for _ in range(5)))

        assert all(result.is_success for result in results)
        assert list(fake_s3.buckets) == [TEST_BUCKET]

    @pytest.mark.asyncio
    async def test_region_constraint_outside_us_east_1(self, fake_s3: FakeS3Client):
        settings = StorageSettings(endpoint="http://rustfs:9000", region="eu-west-1")
        gateway = S3StorageGateway(settings, client=fake_s3)

        await gateway.ensure_bucket(TEST_BUCKET)

        assert fake_s3.create_bucket_kwargs == [
            {"Bucket": TEST_BUCKET, "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"}}
        ]

    @pytest.mark.asyncio
    async def test_access_denied_is_protocol_failure(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        fake_s3.errors["create_bucket"] = client_error("AccessDenied", "Access Denied", 403, "CreateBucket")

        result = await gateway.ensure_bucket(TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.STORAGE_PROTOCOL
        assert result.error.code == "AccessDenied"
        assert "Access Denied" in result.error.message

    @pytest.mark.asyncio
    async def test_unreachable_store_is_protocol_failure(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        fake_s3.errors["list_buckets"] = EndpointConnectionError(endpoint_url="http://rustfs:9000")

        result = await gateway.ensure_bucket(TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.STORAGE_PROTOCOL
        assert "rustfs:9000" in result.error.message


class TestUploadObject:
    """Uploading content."""

    @pytest.mark.asyncio
    async def test_round_trip(self, gateway: S3StorageGateway, fake_s3: FakeS3Client):
        await gateway.ensure_bucket(TEST_BUCKET)

        result = await gateway.upload_object(BytesIO(b"%PDF-1.7 report"), "report.pdf", TEST_BUCKET)

        assert isinstance(result, Success)
        assert result.value.object_key == "report.pdf"
        assert result.value.public_url == "http://rustfs:9000/chatbot-files/report.pdf"
        assert await _read_all(gateway, "report.pdf") == b"%PDF-1.7 report"
        assert fake_s3.bodies.open_count == 0

    @pytest.mark.asyncio
    async def test_public_url_uses_public_base(self, fake_s3: FakeS3Client):
        settings = StorageSettings(
            endpoint="http://rustfs:9000", public_base_url="https://files.example.com/"
        )
        gateway = S3StorageGateway(settings, client=fake_s3)
        await gateway.ensure_bucket(TEST_BUCKET)

        result = await gateway.upload_object(BytesIO(b"x"), "a.txt", TEST_BUCKET)

        assert result.unwrap().public_url == "https://files.example.com/chatbot-files/a.txt"

    @pytest.mark.asyncio
    async def test_overwrite_keeps_last_write(self, gateway: S3StorageGateway):
        await gateway.ensure_bucket(TEST_BUCKET)

        await gateway.upload_object(BytesIO(b"first"), "notes.txt", TEST_BUCKET)
        await gateway.upload_object(BytesIO(b"second"), "notes.txt", TEST_BUCKET)

        assert await _read_all(gateway, "notes.txt") == b"second"

    @pytest.mark.asyncio
    async def test_caller_stream_is_not_closed(self, gateway: S3StorageGateway):
        await gateway.ensure_bucket(TEST_BUCKET)
        data = BytesIO(b"payload")

        await gateway.upload_object(data, "payload.bin", TEST_BUCKET)

        assert not data.closed

    @pytest.mark.asyncio
    async def test_content_type_is_forwarded(self, gateway: S3StorageGateway, fake_s3: FakeS3Client):
        await gateway.ensure_bucket(TEST_BUCKET)

        await gateway.upload_object(BytesIO(b"\x89PNG"), "logo.png", TEST_BUCKET, content_type="image/png")

        assert fake_s3.buckets[TEST_BUCKET]["logo.png"].content_type == "image/png"

    @pytest.mark.asyncio
    async def test_missing_bucket_is_protocol_failure(self, gateway: S3StorageGateway):
        result = await gateway.upload_object(BytesIO(b"x"), "a.txt", "absent-bucket")

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.STORAGE_PROTOCOL
        assert result.error.code == "NoSuchBucket"

    @pytest.mark.asyncio
    async def test_non_success_status_is_protocol_failure(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        await gateway.ensure_bucket(TEST_BUCKET)
        fake_s3.statuses["put_object"] = 500

        result = await gateway.upload_object(BytesIO(b"x"), "a.txt", TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.STORAGE_PROTOCOL
        assert "500" in result.error.message

    @pytest.mark.asyncio
    async def test_local_read_error_is_unexpected_failure(self, gateway: S3StorageGateway):
        await gateway.ensure_bucket(TEST_BUCKET)
        broken = MagicMock()
        broken.read.side_effect = OSError("disk gone")

        result = await gateway.upload_object(broken, "a.txt", TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.UNEXPECTED
        assert result.error.message == "Unexpected error during upload"

    @pytest.mark.asyncio
    async def test_operation_timeout_is_protocol_failure(self, fake_s3: FakeS3Client):
        settings = StorageSettings(endpoint="http://rustfs:9000", operation_timeout=0.01)
        gateway = S3StorageGateway(settings, client=fake_s3)
        fake_s3.buckets[TEST_BUCKET] = {}
        fake_s3.delays["put_object"] = 1.0

        result = await gateway.upload_object(BytesIO(b"x"), "slow.txt", TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.STORAGE_PROTOCOL
        assert "timed out" in result.error.message

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, gateway: S3StorageGateway, fake_s3: FakeS3Client):
        fake_s3.buckets[TEST_BUCKET] = {}
        fake_s3.delays["put_object"] = 1.0

        task = asyncio.create_task(gateway.upload_object(BytesIO(b"x"), "a.txt", TEST_BUCKET))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestListObjects:
    """Listing keys."""

    @pytest.mark.asyncio
    async def test_lists_every_uploaded_key(self, gateway: S3StorageGateway):
        await gateway.ensure_bucket(TEST_BUCKET)
        names = ["a.txt", "b.pdf", "c.png"]
        for name in names:
            await gateway.upload_object(BytesIO(name.encode()), name, TEST_BUCKET)

        result = await gateway.list_objects(TEST_BUCKET)

        assert isinstance(result, Success)
        assert sorted(result.value.object_keys) == names

    @pytest.mark.asyncio
    async def test_empty_bucket(self, gateway: S3StorageGateway):
        await gateway.ensure_bucket(TEST_BUCKET)

        result = await gateway.list_objects(TEST_BUCKET)

        assert result.unwrap().object_keys == ()

    @pytest.mark.asyncio
    async def test_follows_continuation_tokens(self, fake_s3: FakeS3Client):
        settings = StorageSettings(endpoint="http://rustfs:9000", list_page_size=2)
        gateway = S3StorageGateway(settings, client=fake_s3)
        for index in range(5):
            fake_s3.add_object(TEST_BUCKET, f"file-{index}.txt", b"x")

        result = await gateway.list_objects(TEST_BUCKET)

        assert result.unwrap().object_keys == tuple(f"file-{index}.txt" for index in range(5))
        assert [request["ContinuationToken"] for request in fake_s3.list_requests] == [None, "2", "4"]
        assert all(request["MaxKeys"] == 2 for request in fake_s3.list_requests)

    @pytest.mark.asyncio
    async def test_missing_bucket_is_protocol_failure(self, gateway: S3StorageGateway):
        result = await gateway.list_objects("absent-bucket")

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.STORAGE_PROTOCOL
        assert not result.error.is_not_found


class TestDownloadObject:
    """Downloading content."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("scan.pdf", "application/pdf"),
            ("photo.JPG", "image/jpeg"),
            ("photo.jpeg", "image/jpeg"),
            ("logo.png", "image/png"),
            ("notes.txt", "text/plain"),
            ("archive.zip", "application/octet-stream"),
            ("README", "application/octet-stream"),
        ],
    )
    async def test_content_type_comes_from_extension(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client, key: str, expected: str
    ):
        fake_s3.add_object(TEST_BUCKET, key, b"data", content_type="image/png")

        result = await gateway.download_object(key, TEST_BUCKET)

        assert isinstance(result, Success)
        assert result.value.content_type == expected
        assert result.value.object_key == key
        assert result.value.content_length == 4
        await result.value.content_stream.aclose()

    @pytest.mark.asyncio
    async def test_missing_key_is_not_found(self, gateway: S3StorageGateway):
        await gateway.ensure_bucket(TEST_BUCKET)

        result = await gateway.download_object("never-uploaded.pdf", TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.is_not_found
        assert result.error.code == "NoSuchKey"
        assert "never-uploaded.pdf" in result.error.message

    @pytest.mark.asyncio
    async def test_missing_bucket_is_not_found(self, gateway: S3StorageGateway):
        result = await gateway.download_object("a.txt", "absent-bucket")

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_bare_404_is_not_found(self, gateway: S3StorageGateway, fake_s3: FakeS3Client):
        fake_s3.errors["get_object"] = client_error("404", "Not Found", 404, "GetObject")

        result = await gateway.download_object("a.txt", TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.is_not_found

    @pytest.mark.asyncio
    async def test_access_denied_is_protocol_failure(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        fake_s3.errors["get_object"] = client_error("AccessDenied", "Access Denied", 403, "GetObject")

        result = await gateway.download_object("a.txt", TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.STORAGE_PROTOCOL

    @pytest.mark.asyncio
    async def test_stream_is_open_and_owned_by_caller(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        fake_s3.add_object(TEST_BUCKET, "big.bin", b"x" * 1000)

        result = await gateway.download_object("big.bin", TEST_BUCKET)
        stream = result.unwrap().content_stream

        assert not stream.closed
        assert fake_s3.bodies.open_count == 1

        await stream.aclose()

        assert stream.closed
        assert fake_s3.bodies.open_count == 0

    @pytest.mark.asyncio
    async def test_released_without_consuming_leaks_nothing(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        fake_s3.add_object(TEST_BUCKET, "big.bin", b"x" * 1000)

        for _ in range(10):
            result = await gateway.download_object("big.bin", TEST_BUCKET)
            async with result.unwrap().content_stream:
                pass

        assert fake_s3.bodies.opened == 10
        assert fake_s3.bodies.open_count == 0

    @pytest.mark.asyncio
    async def test_non_success_status_releases_body(
        self, gateway: S3StorageGateway, fake_s3: FakeS3Client
    ):
        fake_s3.add_object(TEST_BUCKET, "a.txt", b"x")
        fake_s3.statuses["get_object"] = 503

        result = await gateway.download_object("a.txt", TEST_BUCKET)

        assert isinstance(result, Failure)
        assert result.error.kind is FailureKind.STORAGE_PROTOCOL
        assert fake_s3.bodies.open_count == 0
