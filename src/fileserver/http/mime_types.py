"""
=============================================================================
CONTENT TYPE CLASSIFICATION
=============================================================================

Decides the Content-Type header for a served file.

=============================================================================
TWO SOURCES OF TRUTH
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      CLASSIFICATION PIPELINE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   file bytes ──► 1. CONTENT SNIFFING (magic numbers)                │
    │                     \\x89PNG...      → image/png                      │
    │                     %PDF-...        → application/pdf                │
    │                     │                                                │
    │                     │ no signature matched                           │
    │                     ▼                                                │
    │   file name  ──► 2. EXTENSION TABLE                                 │
    │                     index.html      → text/html                      │
    │                     app.js          → application/javascript         │
    │                     │                                                │
    │                     │ unknown extension                              │
    │                     ▼                                                │
    │                  3. application/octet-stream                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Sniffing wins because a name can lie: "photo.txt" that starts with a PNG
signature is still a PNG. Text formats (HTML, CSS, JSON) have no magic
number, so they always fall through to the extension table.

Sniffing is delegated to the `filetype` package, which matches the first
few hundred bytes against known signatures without reading the whole file
again or shelling out to libmagic.

The classifier is pluggable: StaticFileHandler accepts any
ContentTypeClassifier, so tests (or a deployment with libmagic available)
can swap it out.

=============================================================================
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import filetype


# =============================================================================
# EXTENSION TABLE
# =============================================================================
#
# Lowercase extension (with dot) → MIME type. Deliberately short: these are
# the types the server knows how to label without sniffing.
#
# =============================================================================

MIME_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".txt": "text/plain",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".ogg": "video/ogg",
}

# "I don't know what this is, treat it as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: Union[str, Path], default: Optional[str] = None) -> str:
    """
    Look up a MIME type by file extension.

    Args:
        path: File path or bare name.
        default: Returned for unknown extensions
                 (application/octet-stream if not given).

    Examples:
        >>> get_mime_type("style.CSS")
        'text/css'
        >>> get_mime_type("archive.xyz")
        'application/octet-stream'
    """
    extension = Path(path).suffix.lower()
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)


def sniff_mime_type(data: bytes) -> Optional[str]:
    """Return the MIME type implied by the content's signature, if any."""
    if not data:
        return None
    kind = filetype.guess(data)
    return kind.mime if kind is not None else None


class ContentTypeClassifier(ABC):
    """
    Maps a file's bytes and name to a Content-Type value.

    Implementations must always return a usable string; "unknown" is
    application/octet-stream, never None.
    """

    @abstractmethod
    def classify(self, data: bytes, path: Union[str, Path]) -> str:
        """Return the content type for a file."""

    def __call__(self, data: bytes, path: Union[str, Path]) -> str:
        return self.classify(data, path)


class ExtensionClassifier(ContentTypeClassifier):
    """Classifies by extension only. Never looks at the bytes."""

    def classify(self, data: bytes, path: Union[str, Path]) -> str:
        return get_mime_type(path)


class SniffingClassifier(ContentTypeClassifier):
    """
    Content sniffing first, extension table second.

    This is the default classifier used by the static file handler.
    """

    def __init__(self, fallback: Optional[ContentTypeClassifier] = None):
        self.fallback = fallback or ExtensionClassifier()

    def classify(self, data: bytes, path: Union[str, Path]) -> str:
        return sniff_mime_type(data) or self.fallback.classify(data, path)
