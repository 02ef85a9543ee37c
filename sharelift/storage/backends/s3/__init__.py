from .destination import AIOBOTO3_AVAILABLE, STORAGE_CLASSES, S3DestinationStore

__all__ = ["AIOBOTO3_AVAILABLE", "STORAGE_CLASSES", "S3DestinationStore"]
