"""Local filesystem backend."""

import logging
import os
import stat
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from ..exceptions import EnumerationError, HashError, NotFoundError, ReadError, WriteError
from ..models import FileEntry
from ..ignore import IGNORE_FILE_NAME, IgnoreFileManager
from ..utils import md5_file, normalize_path, timestamp_to_datetime

logger = logging.getLogger(__name__)

TEMP_FILE_PREFIX = ".filesync-"
"""Prefix of temporary files created while writing"""

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _target_mode(file_path: Path) -> int:
    """Permission bits for a file about to be written.

    Overwrites keep the mode of the existing file; new files get the usual
    0666 minus the process umask.
    """
    try:
        return stat.S_IMODE(file_path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class DirectoryScanner:
    """Scans a directory tree and builds file entries.

    Supports ``.syncignore`` and ``.gitignore`` files for gitignore-style
    pattern matching. Rules from an ignore file apply to the directory that
    holds it and everything below.

    Examples:
        >>> scanner = DirectoryScanner(ignore_patterns=["*.tmp", "cache/"])
        >>> entries = scanner.scan(Path("/sync/folder"))
    """

    def __init__(
        self,
        ignore_patterns: Optional[list[str]] = None,
        exclude_dot_files: bool = False,
        use_ignore_files: bool = True,
    ):
        """Initialize directory scanner.

        Args:
            ignore_patterns: Glob patterns to ignore (e.g., ["*.log", "temp/*"])
            exclude_dot_files: Whether to exclude files/folders starting with dot
            use_ignore_files: Whether to load ignore files found in directories
        """
        self.ignore_patterns = ignore_patterns or []
        self.exclude_dot_files = exclude_dot_files
        self.use_ignore_files = use_ignore_files
        self._ignore_manager: Optional[IgnoreFileManager] = None

    def should_ignore(self, path: Path, base_path: Path, is_dir: bool = False) -> bool:
        """Check if a path should be ignored.

        Args:
            path: Path to check
            base_path: Root of the scan
            is_dir: Whether the path is a directory

        Returns:
            True if path should be ignored
        """
        if path.name.startswith(TEMP_FILE_PREFIX):
            return True

        if self.use_ignore_files and path.name == IGNORE_FILE_NAME:
            return True

        if self.exclude_dot_files and path.name.startswith("."):
            return True

        if self._ignore_manager is not None:
            relative_path = path.relative_to(base_path).as_posix()
            if self._ignore_manager.is_ignored(relative_path, is_dir=is_dir):
                logger.debug(f"Ignoring (from rules): {relative_path}")
                return True

        return False

    def scan(self, base_path: Path) -> list[tuple[Path, os.stat_result]]:
        """Recursively scan a directory.

        Args:
            base_path: Directory to scan

        Returns:
            List of (absolute path, stat result) tuples in sorted walk order

        Raises:
            EnumerationError: If the root or any directory below it cannot be read
        """
        if not base_path.is_dir():
            raise EnumerationError(f"Not a directory: {base_path}")

        self._ignore_manager = IgnoreFileManager(base_path=base_path)
        if self.ignore_patterns:
            self._ignore_manager.load_cli_patterns(self.ignore_patterns)

        return self._scan_directory(base_path, base_path)

    def _scan_directory(
        self, directory: Path, base_path: Path
    ) -> list[tuple[Path, os.stat_result]]:
        files: list[tuple[Path, os.stat_result]] = []

        if self.use_ignore_files and self._ignore_manager is not None:
            self._ignore_manager.load_from_directory(directory)

        try:
            items = sorted(directory.iterdir())
        except OSError as e:
            # A partially listed tree must not be used for a diff
            raise EnumerationError(f"Cannot list directory {directory}: {e}") from e

        for item in items:
            is_dir = item.is_dir() and not item.is_symlink()
            if self.should_ignore(item, base_path, is_dir=is_dir):
                continue

            if is_dir:
                files.extend(self._scan_directory(item, base_path))
            elif item.is_file():
                try:
                    files.append((item, item.stat()))
                except FileNotFoundError:
                    logger.debug(f"File vanished during scan: {item}")

        return files


class LocalFiles:
    """A file source for a directory on the local disk."""

    def __init__(
        self,
        root: Union[str, Path],
        compute_hashes: bool = False,
        ignore_patterns: Optional[list[str]] = None,
        exclude_dot_files: bool = False,
        use_ignore_files: bool = True,
        missing_ok: bool = False,
    ):
        """Initialize local file source.

        Args:
            root: Root directory
            compute_hashes: Hash every file while listing instead of on demand
            ignore_patterns: Extra gitignore-style patterns to skip
            exclude_dot_files: Skip files and folders starting with a dot
            use_ignore_files: Honour .syncignore/.gitignore files in the tree.
                Pass False for a destination: its listing must show every
                file, or ignored files would be copied again on each run
            missing_ok: List a missing root as empty instead of failing; the
                root is then created by the first write
        """
        self.root = Path(root).expanduser()
        self.compute_hashes = compute_hashes
        self.missing_ok = missing_ok
        self.scanner = DirectoryScanner(
            ignore_patterns=ignore_patterns,
            exclude_dot_files=exclude_dot_files,
            use_ignore_files=use_ignore_files,
        )

    def __repr__(self) -> str:
        return f"LocalFiles({str(self.root)!r})"

    def describe(self) -> str:
        return str(self.root.resolve())

    def _full_path(self, path: str) -> Path:
        return self.root / normalize_path(path)

    def list_files(self) -> list[FileEntry]:
        if self.missing_ok and not self.root.exists():
            logger.debug(f"Root {self.root} does not exist yet, listing it as empty")
            return []

        scan_start = time.time()
        entries = []
        for file_path, stat in self.scanner.scan(self.root):
            entry = FileEntry(
                path=file_path.relative_to(self.root).as_posix(),
                size=stat.st_size,
                modified=timestamp_to_datetime(stat.st_mtime),
            )
            if self.compute_hashes:
                entry = entry.with_hash(self.hash_file(entry))
            entries.append(entry)

        logger.debug(
            f"Local scan of {self.root} took {time.time() - scan_start:.2f}s "
            f"for {len(entries)} files"
        )
        return entries

    def read_file(self, path: str) -> bytes:
        file_path = self._full_path(path)
        try:
            return file_path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(path) from e
        except OSError as e:
            raise ReadError(f"Cannot read {file_path}: {e}") from e

    def write_file(self, path: str, data: bytes) -> None:
        file_path = self._full_path(path)
        tmp_name = None
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            mode = _target_mode(file_path)
            # Write next to the target and rename so readers never see a
            # partially written file
            with tempfile.NamedTemporaryFile(
                dir=file_path.parent, prefix=TEMP_FILE_PREFIX, delete=False
            ) as fh:
                tmp_name = fh.name
                fh.write(data)
            # NamedTemporaryFile creates the file owner-only
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, file_path)
            tmp_name = None
        except OSError as e:
            raise WriteError(f"Cannot write {file_path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def delete_file(self, path: str) -> None:
        file_path = self._full_path(path)
        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            raise WriteError(f"Cannot delete {file_path}: {e}") from e
        self._prune_empty_parents(file_path.parent)

    def _prune_empty_parents(self, directory: Path) -> None:
        """Remove directories left empty by a delete, up to the root."""
        root = self.root.resolve()
        current = directory.resolve()
        while current != root and root in current.parents:
            try:
                current.rmdir()
            except OSError:
                # Not empty (or not removable): stop pruning here
                break
            current = current.parent

    def hash_file(self, entry: FileEntry) -> str:
        if entry.content_hash:
            return entry.content_hash
        file_path = self._full_path(entry.path)
        try:
            return md5_file(file_path)
        except FileNotFoundError as e:
            raise NotFoundError(entry.path) from e
        except OSError as e:
            raise HashError(f"Cannot hash {file_path}: {e}") from e

    def set_modified(self, path: str, modified: Optional[datetime]) -> bool:
        if modified is None:
            return False
        file_path = self._full_path(path)
        if modified.tzinfo is None:
            modified = modified.replace(tzinfo=timezone.utc)
        delta = modified - _EPOCH
        mtime_ns = (delta.days * 86400 + delta.seconds) * 10**9 + delta.microseconds * 1000
        try:
            atime_ns = file_path.stat().st_atime_ns
            os.utime(file_path, ns=(atime_ns, mtime_ns))
        except OSError as e:
            raise WriteError(f"Cannot set modification time of {file_path}: {e}") from e
        return True
