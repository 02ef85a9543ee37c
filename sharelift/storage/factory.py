"""
Storage Factory - Create source and destination stores from URLs

Store URLs select the backend by scheme:

    Source:      file:///mnt/share, /mnt/share (bare path), memory://
    Destination: s3://bucket-name, memory://
"""

from typing import Any
from urllib.parse import urlsplit

from sharelift.core.config import DEFAULT_KEY_PREFIX
from sharelift.core.exceptions import ConfigurationError
from sharelift.storage.backends.filesystem import FilesystemSourceStore
from sharelift.storage.backends.memory import InMemoryDestinationStore, InMemorySourceStore
from sharelift.storage.core import UnsupportedBackendError
from sharelift.storage.interfaces import DestinationStore, SourceStore


def _scheme(url: str) -> str:
    # Bare paths (no "scheme://") are filesystem locations
    if "://" not in url:
        return "file"
    return urlsplit(url).scheme.lower()


def _create_filesystem_source(url: str, kwargs: dict) -> SourceStore:
    """Create filesystem source store instance."""
    path = urlsplit(url).path if "://" in url else url
    return FilesystemSourceStore(path)


def _create_s3_destination(url: str, kwargs: dict) -> DestinationStore:
    """Create S3 destination store instance."""
    bucket = urlsplit(url).netloc
    if not bucket:
        msg = (
            "S3 destination requires a bucket name.\n"
            "Example: create_destination_store('s3://livestream-recorder')"
        )
        raise ConfigurationError(msg)

    from sharelift.storage.backends.s3 import S3DestinationStore

    s3_kwargs = {}
    if kwargs.get("endpoint_url"):
        s3_kwargs["endpoint_url"] = kwargs["endpoint_url"]

    return S3DestinationStore(
        bucket_name=bucket,
        key_prefix=kwargs.get("key_prefix", DEFAULT_KEY_PREFIX),
        region_name=kwargs.get("region_name") or "us-east-1",
        **s3_kwargs,
    )


# Registries mapping URL schemes to factory functions
_SOURCE_REGISTRY = {
    "file": _create_filesystem_source,
    "memory": lambda url, kwargs: InMemorySourceStore(),
}

_DESTINATION_REGISTRY = {
    "s3": _create_s3_destination,
    "memory": lambda url, kwargs: InMemoryDestinationStore(
        key_prefix=kwargs.get("key_prefix", DEFAULT_KEY_PREFIX)
    ),
}


def create_source_store(url: str) -> SourceStore:
    """
    Create a source store from its URL.

    Raises:
        UnsupportedBackendError: If no backend handles the URL's scheme

    Examples:
        >>> store = create_source_store("file:///mnt/livestream-recorder")
        >>> store = create_source_store("memory://")
    """
    url = url.strip()
    scheme = _scheme(url)
    if scheme not in _SOURCE_REGISTRY:
        raise UnsupportedBackendError(url, sorted(_SOURCE_REGISTRY))
    return _SOURCE_REGISTRY[scheme](url, {})


def create_destination_store(
    url: str,
    *,
    key_prefix: str = DEFAULT_KEY_PREFIX,
    region_name: str | None = None,
    endpoint_url: str | None = None,
) -> DestinationStore:
    """
    Create a destination store from its URL.

    Args:
        url: Destination URL, e.g. ``s3://livestream-recorder``
        key_prefix: Prefix prepended to every object key
        region_name: S3 region (s3 backend)
        endpoint_url: Custom S3 endpoint, e.g. LocalStack/MinIO (s3 backend)

    Raises:
        UnsupportedBackendError: If no backend handles the URL's scheme
        MissingDependencyError: If the backend's packages aren't installed
    """
    url = url.strip()
    scheme = _scheme(url)
    if scheme not in _DESTINATION_REGISTRY:
        raise UnsupportedBackendError(url, sorted(_DESTINATION_REGISTRY))

    factory_kwargs = {
        "key_prefix": key_prefix,
        "region_name": region_name,
        "endpoint_url": endpoint_url,
    }
    return _DESTINATION_REGISTRY[scheme](url, factory_kwargs)


def get_available_backends() -> dict[str, dict[str, Any]]:
    """
    Get information about available storage backends.

    Returns:
        Dictionary keyed by backend name with availability, role and
        install hint.
    """
    backends = {
        "file": {
            "available": True,
            "role": "source",
            "description": "Mounted file share (SMB/NFS) or local directory",
            "install": None,
        },
        "memory": {
            "available": True,
            "role": "source, destination",
            "description": "In-memory storage (no persistence)",
            "install": None,
        },
    }

    from sharelift.storage.backends.s3 import AIOBOTO3_AVAILABLE

    backends["s3"] = {
        "available": AIOBOTO3_AVAILABLE,
        "role": "destination",
        "description": "S3-compatible object storage",
        "install": None if AIOBOTO3_AVAILABLE else "pip install aioboto3",
    }

    return backends
