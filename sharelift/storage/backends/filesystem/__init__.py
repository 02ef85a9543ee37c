from .source import FilesystemSourceStore, FilesystemSourceStream

__all__ = ["FilesystemSourceStore", "FilesystemSourceStream"]
