"""S3 object-store backend.

Objects under ``s3://<bucket>/<prefix>/`` are exposed as files whose relative
path is the key without the prefix. Retries and timeouts are handled by the
botocore client passed in (see :func:`filesync.sources.create_s3_client`).
"""

import base64
import hashlib
import logging
import time
from datetime import datetime
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import (
    EnumerationError,
    HashError,
    InvalidPathError,
    NotFoundError,
    ReadError,
    WriteError,
)
from ..models import FileEntry
from ..utils import etag_to_md5, md5_bytes, normalize_path, to_utc

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3Files:
    """A file source for the objects under a prefix of an S3 bucket."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        prefix: str = "",
        use_etag_as_hash: bool = True,
    ):
        """Initialize S3 file source.

        Args:
            client: boto3 S3 client
            bucket: Bucket name
            prefix: Key prefix acting as the root ("" for the whole bucket)
            use_etag_as_hash: Treat plain 32-hex ETags as MD5 digests of the
                content, so hashing does not need a download. Objects
                encrypted with SSE-KMS or SSE-C also have 32-hex ETags that
                are not the MD5 and the listing cannot tell them apart, so
                disable this for such buckets (FILESYNC_S3_ETAG_AS_MD5=false)
        """
        self.client = client
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.use_etag_as_hash = use_etag_as_hash

    def __repr__(self) -> str:
        return f"S3Files({self.describe()!r})"

    def describe(self) -> str:
        if self.prefix:
            return f"s3://{self.bucket}/{self.prefix}"
        return f"s3://{self.bucket}"

    @property
    def key_prefix(self) -> str:
        """Prefix including the trailing slash ("" for the bucket root)."""
        return f"{self.prefix}/" if self.prefix else ""

    def _key(self, path: str) -> str:
        return self.key_prefix + normalize_path(path)

    def _entry_from_object(self, obj: dict) -> Optional[FileEntry]:
        key = obj.get("Key")
        if not key:
            raise EnumerationError(f"Object without key in {self.describe()}")
        if not key.startswith(self.key_prefix):
            raise EnumerationError(
                f"Object '{key}' is outside of prefix '{self.key_prefix}'"
            )

        relative_path = key[len(self.key_prefix) :]
        # Skip "folder" marker objects
        if not relative_path or relative_path.endswith("/"):
            return None

        # Every other operation addresses keys through normalize_path, so a
        # listed path must already be normalized to map back to its key
        try:
            normalized = normalize_path(relative_path)
        except InvalidPathError as e:
            raise EnumerationError(f"Object '{key}' escapes the sync root") from e
        if normalized != relative_path:
            raise EnumerationError(
                f"Object '{key}' does not map to a clean relative path "
                f"(would be '{normalized}')"
            )

        content_hash = None
        if self.use_etag_as_hash:
            content_hash = etag_to_md5(obj.get("ETag"))

        return FileEntry(
            path=relative_path,
            size=obj.get("Size"),
            modified=to_utc(obj.get("LastModified")),
            content_hash=content_hash,
        )

    def list_files(self) -> list[FileEntry]:
        scan_start = time.time()
        entries: list[FileEntry] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=self.key_prefix):
                for obj in page.get("Contents", []):
                    entry = self._entry_from_object(obj)
                    if entry is not None:
                        entries.append(entry)
        except ClientError as e:
            raise EnumerationError(
                f"Cannot list {self.describe()}: {_error_code(e)} {e}"
            ) from e
        except BotoCoreError as e:
            raise EnumerationError(f"Cannot list {self.describe()}: {e}") from e

        logger.debug(
            f"S3 listing of {self.describe()} took {time.time() - scan_start:.2f}s "
            f"for {len(entries)} objects"
        )
        return entries

    def read_file(self, path: str) -> bytes:
        key = self._key(path)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise NotFoundError(path) from e
            raise ReadError(f"Cannot read s3://{self.bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise ReadError(f"Cannot read s3://{self.bucket}/{key}: {e}") from e

    def write_file(self, path: str, data: bytes) -> None:
        key = self._key(path)
        content_md5 = base64.b64encode(hashlib.md5(data).digest()).decode("ascii")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentMD5=content_md5,
            )
        except (ClientError, BotoCoreError) as e:
            raise WriteError(f"Cannot write s3://{self.bucket}/{key}: {e}") from e

    def delete_file(self, path: str) -> None:
        key = self._key(path)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return
            raise WriteError(f"Cannot delete s3://{self.bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise WriteError(f"Cannot delete s3://{self.bucket}/{key}: {e}") from e

    def hash_file(self, entry: FileEntry) -> str:
        if entry.content_hash:
            return entry.content_hash
        logger.debug(f"Downloading {entry.path} to compute its hash")
        try:
            return md5_bytes(self.read_file(entry.path))
        except NotFoundError:
            raise
        except ReadError as e:
            raise HashError(f"Cannot hash {entry.path}: {e}") from e

    def set_modified(self, path: str, modified: Optional[datetime]) -> bool:
        # S3 sets LastModified itself on every write
        return False
