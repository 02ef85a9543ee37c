"""
Tests for URL-driven store construction.
"""

from pathlib import Path

import pytest

from sharelift.core.exceptions import ConfigurationError
from sharelift.storage.backends.filesystem import FilesystemSourceStore
from sharelift.storage.backends.memory import InMemoryDestinationStore, InMemorySourceStore
from sharelift.storage.backends.s3 import S3DestinationStore
from sharelift.storage.core import UnsupportedBackendError
from sharelift.storage.factory import (
    create_destination_store,
    create_source_store,
    get_available_backends,
)


class TestCreateSourceStore:
    def test_file_url(self):
        store = create_source_store("file:///mnt/recordings")
        assert isinstance(store, FilesystemSourceStore)
        assert store.root == Path("/mnt/recordings")

    def test_bare_path(self, tmp_path):
        store = create_source_store(str(tmp_path))
        assert isinstance(store, FilesystemSourceStore)
        assert store.root == tmp_path

    def test_memory(self):
        assert isinstance(create_source_store("memory://"), InMemorySourceStore)

    def test_unknown_scheme(self):
        with pytest.raises(UnsupportedBackendError) as exc_info:
            create_source_store("ftp://recorder/share")
        assert "file" in exc_info.value.available


class TestCreateDestinationStore:
    def test_memory_with_prefix(self):
        store = create_destination_store("memory://", key_prefix="archive/")
        assert isinstance(store, InMemoryDestinationStore)
        assert store.object_key("abc123.mp4") == "archive/abc123.mp4"

    def test_s3(self):
        store = create_destination_store(
            "s3://recordings",
            region_name="eu-west-1",
            endpoint_url="http://localhost:4566",
        )

        assert isinstance(store, S3DestinationStore)
        assert store.bucket_name == "recordings"
        assert store.region_name == "eu-west-1"
        assert store.key_prefix == "videos/"
        assert store.s3_kwargs == {"endpoint_url": "http://localhost:4566"}

    def test_s3_without_endpoint(self):
        store = create_destination_store("s3://recordings")
        assert store.s3_kwargs == {}
        assert store.region_name == "us-east-1"

    def test_s3_requires_bucket(self):
        with pytest.raises(ConfigurationError, match="bucket name"):
            create_destination_store("s3://")

    def test_unknown_scheme(self):
        with pytest.raises(UnsupportedBackendError):
            create_destination_store("gs://recordings")


def test_available_backends():
    backends = get_available_backends()

    assert set(backends) == {"file", "memory", "s3"}
    assert backends["memory"]["available"] is True
    assert backends["s3"]["role"] == "destination"
