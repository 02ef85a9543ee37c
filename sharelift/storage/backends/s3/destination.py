# ============================================
# FILE: sharelift/storage/backends/s3/destination.py
# ============================================

"""
S3 Destination Store

S3-compatible object storage for migrated artifacts. Uploads are streamed
with aioboto3's managed transfer (multipart for large files), so a file is
never held in memory in full.

Storage tiers map to S3 storage classes:
    HOT  -> STANDARD
    COOL -> STANDARD_IA

Requires: pip install aioboto3
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from sharelift.core.cancellation import CancellationScope
from sharelift.core.exceptions import ConfigurationError, MissingDependencyError
from sharelift.core.types import StorageTier
from sharelift.storage.core import ConnectionError, NotFoundError
from sharelift.storage.interfaces.destination import DestinationStore

if TYPE_CHECKING:
    from sharelift.storage.interfaces.source import SourceStream
    from sharelift.transfer.progress import ProgressMeter

try:
    import aioboto3
    from boto3.s3.transfer import TransferConfig
    from botocore.exceptions import ClientError

    AIOBOTO3_AVAILABLE = True
except ImportError:  # pragma: no cover
    AIOBOTO3_AVAILABLE = False
    aioboto3 = None
    TransferConfig = None
    ClientError = Exception

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})

STORAGE_CLASSES = {
    StorageTier.HOT: "STANDARD",
    StorageTier.COOL: "STANDARD_IA",
}


def _error_code(error: Exception) -> str:
    response = getattr(error, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))


class S3DestinationStore(DestinationStore):
    """
    S3 implementation of the destination store

    Example:
        >>> store = S3DestinationStore(
        ...     bucket_name="livestream-recorder",
        ...     key_prefix="videos/",
        ...     region_name="us-east-1",
        ... )
        >>> async with store:
        ...     await store.exists("videos/abc123.mp4")
    """

    name = "s3"

    def __init__(
        self,
        bucket_name: str,
        key_prefix: str = "",
        region_name: str = "us-east-1",
        multipart_chunksize: int = 8 * 1024 * 1024,
        max_concurrency: int = 4,
        **s3_kwargs,
    ):
        if not AIOBOTO3_AVAILABLE:  # pragma: no cover
            msg = "aioboto3"
            raise MissingDependencyError(msg, "S3 destination store")

        super().__init__(key_prefix)
        self.bucket_name = bucket_name
        self.region_name = region_name
        self.multipart_chunksize = multipart_chunksize
        self.max_concurrency = max_concurrency
        self.s3_kwargs = s3_kwargs
        self._session = None
        self._s3_client = None
        self._lock = asyncio.Lock()

    async def _get_s3_client(self):
        """Get S3 client, creating if necessary"""
        async with self._lock:
            if self._s3_client is None:
                try:
                    self._session = aioboto3.Session()
                    self._s3_client = await self._session.client(
                        "s3", region_name=self.region_name, **self.s3_kwargs
                    ).__aenter__()
                except Exception as e:
                    msg = f"Failed to create S3 client: {e}"
                    raise ConnectionError(
                        msg, backend="s3", url=self.s3_kwargs.get("endpoint_url")
                    ) from e

        return self._s3_client

    def _transfer_config(self):
        return TransferConfig(
            multipart_chunksize=self.multipart_chunksize,
            max_concurrency=self.max_concurrency,
        )

    async def check_available(self) -> None:
        """Fail fast when the bucket is missing or unreachable"""
        try:
            s3 = await self._get_s3_client()
            await s3.head_bucket(Bucket=self.bucket_name)
        except (ClientError, ConnectionError) as e:
            msg = f"Destination bucket is not available: {self.bucket_name} ({e})"
            raise ConfigurationError(msg) from e

    async def exists(self, key: str) -> bool:
        s3 = await self._get_s3_client()
        try:
            await s3.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                return False
            raise
        return True

    async def write_stream(
        self,
        key: str,
        stream: SourceStream,
        total_size: int,
        content_type: str,
        storage_tier: StorageTier,
        metadata: dict[str, str],
        progress: ProgressMeter | None,
        cancel: CancellationScope,
    ) -> None:
        """Stream the source into S3 with content type, storage class and metadata"""
        if cancel.cancelled:
            return

        s3 = await self._get_s3_client()

        extra_args = {
            "ContentType": content_type,
            "StorageClass": STORAGE_CLASSES[storage_tier],
            "Metadata": {name: str(value) for name, value in metadata.items()},
        }

        if progress is not None:
            progress.start()

        await s3.upload_fileobj(
            stream,
            self.bucket_name,
            key,
            ExtraArgs=extra_args,
            Callback=progress.advance if progress is not None else None,
            Config=self._transfer_config(),
        )

    async def set_tags(self, key: str, tags: dict[str, str]) -> None:
        s3 = await self._get_s3_client()
        tag_set = [{"Key": name, "Value": str(value)} for name, value in tags.items()]
        try:
            await s3.put_object_tagging(
                Bucket=self.bucket_name,
                Key=key,
                Tagging={"TagSet": tag_set},
            )
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                msg = f"Cannot tag missing object: {key}"
                raise NotFoundError(msg, item_type="object", item_id=key) from e
            raise

    async def close(self) -> None:
        """Close S3 client"""
        if self._s3_client:
            await self._s3_client.__aexit__(None, None, None)
            self._s3_client = None
            self._session = None
