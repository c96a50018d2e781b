"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

Decides the Content-Type of a served file.

=============================================================================
TWO SOURCES OF TRUTH
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │                    sniff_content_type(path, data)                  │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   1. EXTENSION      index.html → text/html                         │
    │      └── fast, and what browsers expect for web assets             │
    │                                                                     │
    │   2. MAGIC BYTES    README (no extension), starts with \x89PNG     │
    │      └── → image/png                                               │
    │                                                                     │
    │   3. FALLBACK       application/octet-stream                       │
    │      └── "unknown binary data", browsers download it               │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

Types are returned bare ("text/html", not "text/html; charset=utf-8"):
the server does not know the encoding of the files it serves.

=============================================================================
"""

from pathlib import Path
from typing import Optional, Union


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Maps file extensions (lowercase, with dot) to MIME types.
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # FONT TYPES
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO TYPES
    # -------------------------------------------------------------------------
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # -------------------------------------------------------------------------
    # DOCUMENTS AND ARCHIVES
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tar": "application/x-tar",
    ".wasm": "application/wasm",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


# =============================================================================
# MAGIC NUMBERS
# =============================================================================
#
# Leading bytes that identify a format regardless of the file name.
# Checked in order; the first matching prefix wins.
#
# =============================================================================

MAGIC_NUMBERS = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
    (b"\x00asm", "application/wasm"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"ID3", "audio/mpeg"),
    (b"OggS", "audio/ogg"),
)

# Markup prefixes, compared case-insensitively after leading whitespace
HTML_PREFIXES = (b"<!doctype html", b"<html", b"<head", b"<body")


def get_mime_type(path: Union[str, Path]) -> Optional[str]:
    """
    Look up the MIME type for a file name by its extension.

    Returns:
        The MIME type, or None when the extension is unknown.

    Examples:
        >>> get_mime_type("style.css")
        'text/css'
        >>> get_mime_type("/srv/www/LOGO.PNG")
        'image/png'
        >>> get_mime_type("Makefile") is None
        True
    """
    if isinstance(path, str):
        path = Path(path)

    return MIME_TYPES.get(path.suffix.lower())


def guess_from_content(data: bytes) -> Optional[str]:
    """
    Identify a format from the first bytes of its content.

    RIFF containers (WebP, WAV) share a prefix and carry the real
    format at offset 8, so they are checked separately.
    """
    for magic, mime_type in MAGIC_NUMBERS:
        if data.startswith(magic):
            return mime_type

    if data[:4] == b"RIFF":
        if data[8:12] == b"WEBP":
            return "image/webp"
        if data[8:12] == b"WAVE":
            return "audio/wav"

    head = data[:512].lstrip().lower()
    if head.startswith(HTML_PREFIXES):
        return "text/html"
    if head.startswith(b"<?xml"):
        return "application/xml"

    return None


def sniff_content_type(path: Union[str, Path], data: bytes) -> str:
    """
    Decide the Content-Type of a file from its name and content.

    Args:
        path: File path or name.
        data: The file content (only the first bytes are inspected).

    Returns:
        A MIME type, never None.
    """
    return get_mime_type(path) or guess_from_content(data) or DEFAULT_MIME_TYPE
