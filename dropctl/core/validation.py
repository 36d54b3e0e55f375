"""Input validation for dropctl.

Portal links, server URLs, and destination-relative paths.
"""

from __future__ import annotations

import posixpath
import re
from urllib.parse import urlsplit

from dropctl.core.exceptions import (
    InvalidPortalURLError,
    InvalidURLError,
    PathValidationError,
    ValidationError,
)

PORTAL_PATH_PATTERN = re.compile(r"^/p/([^/]+)")
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


def validate_server_url(url: str) -> str:
    """Validate and normalize a server URL.

    Args:
        url: URL with scheme and host.

    Returns:
        URL without trailing slash.

    Raises:
        InvalidURLError: If scheme or host is missing.
    """
    if not url or not url.strip():
        raise InvalidURLError(url or "", "URL is empty")

    url = url.strip()
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parts.netloc:
        raise InvalidURLError(url, "missing host")
    return url.rstrip("/")


def get_portal_id(pathname: str) -> str:
    """Extract the portal ID from a URL path.

    Returns an empty string when the path does not address a portal.
    """
    match = PORTAL_PATH_PATTERN.match(pathname or "")
    return match.group(1) if match else ""


def parse_portal_url(url: str) -> tuple[str, str]:
    """Split a portal link into server base URL and portal ID.

    Args:
        url: Link printed by the server, e.g. ``http://192.168.1.42/p/p_abc123``.

    Returns:
        Tuple of (base_url, portal_id).

    Raises:
        InvalidURLError: If the URL is malformed.
        InvalidPortalURLError: If the path has no portal segment.
    """
    url = validate_server_url(url)
    parts = urlsplit(url)
    portal_id = get_portal_id(parts.path)
    if not portal_id:
        raise InvalidPortalURLError(url)
    return f"{parts.scheme}://{parts.netloc}", portal_id


def strip_leading_slash(value: str) -> str:
    """Remove all leading forward slashes."""
    return value.lstrip("/")


def normalize_relpath(value: str) -> str:
    """Use forward slashes and drop any leading slash."""
    return strip_leading_slash(value.replace("\\", "/"))


def sanitize_relpath(value: str) -> str:
    """Normalize a destination path and reject unsafe ones.

    Backslashes become forward slashes and leading slashes are dropped.
    The result is cleaned of ``.`` segments and duplicate separators.

    Raises:
        PathValidationError: On empty paths, ``..`` segments, NUL bytes,
            home-relative paths, or Windows drive prefixes.
    """
    if not value:
        raise PathValidationError(value, "path is empty")

    normalized = normalize_relpath(value)
    if "\x00" in normalized:
        raise PathValidationError(value, "contains NUL byte")
    if normalized.startswith("~/"):
        raise PathValidationError(value, "home-relative paths are not allowed")

    for segment in normalized.split("/"):
        if segment == "..":
            raise PathValidationError(value, "parent directory segments are not allowed")
        if _DRIVE_PREFIX.match(segment):
            raise PathValidationError(value, "drive prefixes are not allowed")

    cleaned = posixpath.normpath(normalized) if normalized else ""
    if cleaned in ("", "."):
        raise PathValidationError(value, "path is empty")
    return cleaned


def validate_chunk_size(value: int) -> int:
    """Validate the streaming chunk size in bytes."""
    if value <= 0:
        raise ValidationError("Chunk size must be positive", field="chunk_size", value=value)
    return value


def validate_timeout(value: float) -> float:
    """Validate a request timeout in seconds."""
    if value <= 0:
        raise ValidationError("Timeout must be positive", field="timeout", value=value)
    return value
