"""Content type lookup by file extension."""

from __future__ import annotations

import os
from pathlib import PurePath

TYPES: dict[str, str] = {
    ".json": "application/json",
    ".pdf": "application/pdf",
    ".xml": "application/xml",
    ".zip": "application/zip",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".ico": "image/vnd.microsoft.icon",
    ".css": "text/css",
    ".txt": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".js": "text/javascript",
}

DEFAULT_TYPE = "application/octet_stream"


def get_type(path: str | os.PathLike[str]) -> str:
    """Return the content type for ``path`` based on its extension."""
    return TYPES.get(PurePath(path).suffix, DEFAULT_TYPE)