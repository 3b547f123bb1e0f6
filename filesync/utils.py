"""Utility functions for filesync."""

import hashlib
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .exceptions import InvalidPathError

# =============================================================================
# Constants
# =============================================================================

# Read size used when hashing files (1 MB)
DEFAULT_HASH_CHUNK_SIZE: int = 1024 * 1024

_MD5_HEX_RE = re.compile(r"^[0-9a-f]{32}$")


# =============================================================================
# Path utilities
# =============================================================================


def normalize_path(path: Union[str, Path]) -> str:
    """Normalize a relative path to forward slashes without leading separators.

    Args:
        path: Relative path (string or Path)

    Returns:
        Normalized path string

    Raises:
        InvalidPathError: If a ".." segment would leave the root

    Examples:
        >>> normalize_path("a\\\\b/c.txt")
        'a/b/c.txt'
        >>> normalize_path("./docs/readme.md")
        'docs/readme.md'
    """
    if isinstance(path, Path):
        path = path.as_posix()
    value = path.replace("\\", "/")
    while value.startswith("./"):
        value = value[2:]
    parts = [part for part in value.split("/") if part and part != "."]
    if ".." in parts:
        raise InvalidPathError(f"Path escapes the sync root: {path}")
    return "/".join(parts)


# =============================================================================
# Timestamp utilities
# =============================================================================


def timestamp_to_datetime(timestamp: float) -> datetime:
    """Convert a Unix timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return value as an aware UTC datetime (naive values are assumed UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def same_second(a: datetime, b: datetime) -> bool:
    """Check whether two datetimes fall within the same whole second.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> same_second(t, t.replace(microsecond=999))
        True
    """
    return int(to_utc(a).timestamp()) == int(to_utc(b).timestamp())


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


# =============================================================================
# Hash calculation utilities
# =============================================================================


def md5_bytes(data: bytes) -> str:
    """Return the hex MD5 digest of a byte string."""
    return hashlib.md5(data).hexdigest()


def md5_file(path: Path, chunk_size: int = DEFAULT_HASH_CHUNK_SIZE) -> str:
    """Return the hex MD5 digest of a file, reading it in chunks.

    Args:
        path: File to hash
        chunk_size: Number of bytes read per iteration

    Returns:
        Lowercase hex digest
    """
    digest = hashlib.md5()
    with path.open("rb") as fh:
        while True:
            chunk = fh.read(chunk_size)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def etag_to_md5(etag: Optional[str]) -> Optional[str]:
    """Interpret an S3 ETag as an MD5 digest when possible.

    Only single-part uploads have an ETag equal to the MD5 of the content.
    Multipart ETags ("<hex>-<parts>") and anything else yield None.

    Examples:
        >>> etag_to_md5('"9a0364b9e99bb480dd25e1f0284c8555"')
        '9a0364b9e99bb480dd25e1f0284c8555'
        >>> etag_to_md5('"d41d8cd98f00b204e9800998ecf8427e-2"') is None
        True
    """
    if not etag:
        return None
    value = etag.strip().strip('"').lower()
    if _MD5_HEX_RE.match(value):
        return value
    return None
