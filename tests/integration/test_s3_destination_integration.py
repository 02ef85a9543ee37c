"""
Integration tests for the S3 destination store using LocalStack.

LocalStack provides a local S3 service that supports aioboto3's async
operations, so the full pipeline runs from a real directory to a real
bucket.

Requires:
    - testcontainers[localstack] installed
    - Docker running

Run with: pytest -m integration
"""

import boto3
import pytest

from sharelift.core.config import MigrationConfig
from sharelift.core.exceptions import ConfigurationError
from sharelift.core.types import OutcomeKind
from sharelift.storage.backends.filesystem import FilesystemSourceStore
from sharelift.storage.backends.s3 import S3DestinationStore
from sharelift.transfer.coordinator import MigrationCoordinator

# Mark all tests in this module as integration tests (excluded by default)
pytestmark = pytest.mark.integration

BUCKET = "livestream-recorder"
CREDENTIALS = {
    "aws_access_key_id": "test",
    "aws_secret_access_key": "test",
}


@pytest.fixture(scope="module")
def localstack_container():
    """Start LocalStack with S3 once for the module."""
    localstack = pytest.importorskip("testcontainers.localstack")

    container = localstack.LocalStackContainer("localstack/localstack:3.0").with_services("s3")
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"LocalStack not available: {e}")

    yield container
    container.stop()


@pytest.fixture(scope="module")
def s3_admin(localstack_container):
    """Synchronous boto3 client used to create and inspect the bucket."""
    client = boto3.client(
        "s3",
        endpoint_url=localstack_container.get_url(),
        region_name="us-east-1",
        **CREDENTIALS,
    )
    client.create_bucket(Bucket=BUCKET)
    return client


@pytest.fixture
def share(tmp_path):
    root = tmp_path / "share"
    root.mkdir()
    return root


@pytest.fixture
async def coordinator(share, s3_admin, localstack_container, migration_logger):
    config = MigrationConfig(
        source_url=f"file://{share}",
        destination_url=f"s3://{BUCKET}",
        extensions=(".mp4", ".jpg", ".info.json"),
    )
    destination = S3DestinationStore(
        bucket_name=BUCKET,
        key_prefix="videos/",
        endpoint_url=localstack_container.get_url(),
        # Small parts so a modest file exercises multipart upload
        multipart_chunksize=5 * 1024 * 1024,
        **CREDENTIALS,
    )
    async with MigrationCoordinator(
        FilesystemSourceStore(share), destination, config, logger=migration_logger
    ) as coordinator:
        yield coordinator


class TestS3DestinationIntegration:
    @pytest.mark.asyncio
    async def test_full_migration(self, coordinator, share, s3_admin):
        video = bytes(range(256)) * (12 * 1024 * 4)  # 12 MiB
        (share / "it-1.mp4").write_bytes(video)
        (share / "it-1.info.json").write_bytes(b'{"title": "stream"}')

        result = await coordinator.migrate("it-1")

        assert result.success
        assert result.outcome_for("it-1.jpg").kind is OutcomeKind.SKIPPED_NOT_FOUND
        assert not (share / "it-1.mp4").exists()
        assert not (share / "it-1.info.json").exists()

        head = s3_admin.head_object(Bucket=BUCKET, Key="videos/it-1.mp4")
        assert head["ContentLength"] == len(video)
        assert head["ContentType"] == "video/mp4"
        assert head.get("StorageClass") == "STANDARD_IA"
        assert head["Metadata"] == {"id": "it-1", "filesize": str(len(video))}

        tags = s3_admin.get_object_tagging(Bucket=BUCKET, Key="videos/it-1.mp4")
        assert {t["Key"]: t["Value"] for t in tags["TagSet"]} == {
            "id": "it-1",
            "fileSize": str(len(video)),
        }

        body = s3_admin.get_object(Bucket=BUCKET, Key="videos/it-1.info.json")["Body"].read()
        assert body == b'{"title": "stream"}'

    @pytest.mark.asyncio
    async def test_rerun_is_noop(self, coordinator, share, s3_admin):
        (share / "it-2.jpg").write_bytes(b"thumb")
        await coordinator.migrate("it-2")
        first = s3_admin.head_object(Bucket=BUCKET, Key="videos/it-2.jpg")["ETag"]

        result = await coordinator.migrate("it-2")

        assert result.counts()["skipped_not_found"] == 3
        assert s3_admin.head_object(Bucket=BUCKET, Key="videos/it-2.jpg")["ETag"] == first

    @pytest.mark.asyncio
    async def test_exists(self, coordinator, share):
        (share / "it-3.jpg").write_bytes(b"thumb")
        await coordinator.migrate("it-3")

        assert await coordinator.destination.exists("videos/it-3.jpg") is True
        assert await coordinator.destination.exists("videos/never-uploaded.jpg") is False

    @pytest.mark.asyncio
    async def test_missing_bucket_is_configuration_error(self, localstack_container):
        store = S3DestinationStore(
            bucket_name="no-such-bucket",
            endpoint_url=localstack_container.get_url(),
            **CREDENTIALS,
        )
        try:
            with pytest.raises(ConfigurationError, match="no-such-bucket"):
                await store.check_available()
        finally:
            await store.close()
