"""
Content-type resolution for destination objects.

Uses the standard ``mimetypes`` registry, with the handful of media and
sidecar suffixes it does not reliably know registered up front. Multi-dot
sidecars (``.info.json``, ``.live_chat.json``) resolve by their last suffix.
"""

import mimetypes

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_EXTRA_TYPES = {
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".webp": "image/webp",
    ".json": "application/json",
    ".vtt": "text/vtt",
}

_types = mimetypes.MimeTypes()
for _ext, _type in _EXTRA_TYPES.items():
    _types.add_type(_type, _ext)


def content_type_for(filename: str) -> str:
    """Content type for a filename, falling back to ``application/octet-stream``."""
    guessed, _encoding = _types.guess_type(filename, strict=False)
    return guessed or DEFAULT_CONTENT_TYPE
