"""
URL normalization and file-extension inference.

Every URL that enters the canonical payload (channel artwork, episode
artwork, audio) passes through ``normalize_url`` so the output never holds
scheme-relative or plain-http references.
"""

import posixpath
from typing import Optional
from urllib.parse import urlsplit

# Longest path suffix (dot included) accepted as a real file extension
MAX_EXTENSION_LENGTH = 5

CONTENT_TYPE_EXTENSIONS = (
    ("jpeg", ".jpg"),
    ("png", ".png"),
    ("webp", ".webp"),
    ("gif", ".gif"),
)


def normalize_url(url: Optional[str]) -> str:
    """
    Normalize a URL to an absolute https reference where possible.

    Rules, applied in order:
    - empty or missing input becomes ``""``
    - scheme-relative ``//host/path`` gets an ``https:`` prefix
    - ``http://`` is rewritten to ``https://`` (nothing else changes)
    - anything else is returned untouched

    Args:
        url: Raw URL from the feed

    Returns:
        Normalized URL string

    Example:
        >>> normalize_url("http://cdn.example.com/a.png")
        'https://cdn.example.com/a.png'
        >>> normalize_url("//cdn.example.com/a.png")
        'https://cdn.example.com/a.png'
    """
    if not url:
        return ""
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


def extension_from_url(url: str) -> str:
    """
    Infer a file extension from the path component of a URL.

    Query strings and fragments are ignored. Suffixes longer than
    ``MAX_EXTENSION_LENGTH`` characters are rejected, since they are
    usually path noise rather than a real extension.

    Args:
        url: Absolute URL

    Returns:
        Extension including the leading dot, or ``""`` if none is usable
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        return ""
    ext = posixpath.splitext(path)[1]
    if not ext or len(ext) > MAX_EXTENSION_LENGTH:
        return ""
    return ext


def extension_from_content_type(content_type: Optional[str]) -> str:
    """
    Map an image Content-Type header to a file extension.

    Unknown image types fall back to ``.jpg``; a missing header gives
    ``.bin``.
    """
    if not content_type:
        return ".bin"
    lowered = content_type.lower()
    for needle, ext in CONTENT_TYPE_EXTENSIONS:
        if needle in lowered:
            return ext
    return ".jpg"
