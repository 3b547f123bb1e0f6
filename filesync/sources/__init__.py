"""Storage backends and the factory that builds them from a location string."""

import logging
from typing import Any, Optional

from ..config import Config
from ..config import config as default_config
from ..exceptions import ConfigError
from .base import FileSource
from .local import DirectoryScanner, LocalFiles
from .memory import MemoryFiles
from .s3 import S3Files

logger = logging.getLogger(__name__)

S3_SCHEME = "s3://"


def parse_s3_location(location: str) -> tuple[str, str]:
    """Split an ``s3://bucket/prefix`` location into bucket and prefix.

    Examples:
        >>> parse_s3_location("s3://my-bucket/path/in/bucket/")
        ('my-bucket', 'path/in/bucket')
        >>> parse_s3_location("s3://my-bucket")
        ('my-bucket', '')
    """
    if not location.startswith(S3_SCHEME):
        raise ConfigError(f"Not an S3 location: {location}")
    rest = location[len(S3_SCHEME) :]
    bucket, _, prefix = rest.partition("/")
    if not bucket:
        raise ConfigError(f"Missing bucket name in {location}")
    return bucket, prefix.strip("/")


def create_s3_client(cfg: Optional[Config] = None) -> Any:
    """Create a boto3 S3 client with bounded retries and timeouts.

    Args:
        cfg: Configuration to use (defaults to the global config)

    Returns:
        boto3 S3 client
    """
    import boto3
    from botocore.config import Config as BotoConfig

    cfg = cfg or default_config
    session = boto3.session.Session(profile_name=cfg.s3_profile)
    boto_config = BotoConfig(
        retries={"max_attempts": cfg.s3_max_attempts, "mode": "standard"},
        connect_timeout=cfg.s3_timeout,
        read_timeout=cfg.s3_timeout,
    )
    logger.debug(
        "Creating S3 client (endpoint=%s, region=%s, profile=%s)",
        cfg.s3_endpoint_url,
        cfg.s3_region,
        cfg.s3_profile,
    )
    return session.client(
        "s3",
        endpoint_url=cfg.s3_endpoint_url,
        region_name=cfg.s3_region,
        config=boto_config,
    )


def open_source(
    location: str,
    cfg: Optional[Config] = None,
    missing_ok: bool = False,
    compute_hashes: bool = False,
    ignore_patterns: Optional[list[str]] = None,
    exclude_dot_files: bool = False,
    use_ignore_files: bool = True,
    use_etag_as_hash: Optional[bool] = None,
    client: Any = None,
) -> FileSource:
    """Build a file source from a location string.

    Args:
        location: ``s3://bucket/prefix`` or a local directory path
        cfg: Configuration used to create the S3 client
        missing_ok: Treat a missing local root as empty
        compute_hashes: Eagerly hash local files while listing
        ignore_patterns: Ignore patterns for local directories
        exclude_dot_files: Skip dot files in local directories
        use_ignore_files: Honour ignore files found in a local tree; open
            destinations with False so their listing shows every file
        use_etag_as_hash: Use S3 ETags as MD5 digests where possible
            (defaults to the FILESYNC_S3_ETAG_AS_MD5 setting)
        client: Pre-built boto3 S3 client (skips client creation)

    Returns:
        S3Files or LocalFiles
    """
    if location.startswith(S3_SCHEME):
        bucket, prefix = parse_s3_location(location)
        cfg = cfg or default_config
        if use_etag_as_hash is None:
            use_etag_as_hash = cfg.s3_etag_as_md5
        if client is None:
            client = create_s3_client(cfg)
        return S3Files(
            client, bucket, prefix=prefix, use_etag_as_hash=use_etag_as_hash
        )

    if "://" in location:
        raise ConfigError(f"Unsupported location scheme: {location}")

    return LocalFiles(
        location,
        compute_hashes=compute_hashes,
        ignore_patterns=ignore_patterns,
        exclude_dot_files=exclude_dot_files,
        use_ignore_files=use_ignore_files,
        missing_ok=missing_ok,
    )


__all__ = [
    "FileSource",
    "LocalFiles",
    "DirectoryScanner",
    "MemoryFiles",
    "S3Files",
    "open_source",
    "create_s3_client",
    "parse_s3_location",
]
