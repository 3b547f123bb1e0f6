"""Single-file operations applied against a source/destination pair."""

import logging
from typing import Optional

from ..models import FileEntry
from ..sources.base import FileSource

logger = logging.getLogger(__name__)


class SyncOperations:
    """Copy and delete operations with a common interface."""

    def __init__(self, source: FileSource, destination: FileSource):
        """Initialize sync operations.

        Args:
            source: Backend files are read from (never modified)
            destination: Backend files are written to and deleted from
        """
        self.source = source
        self.destination = destination

    def copy_file(
        self,
        path: str,
        source_entry: Optional[FileEntry] = None,
        preserve_mtime: bool = True,
    ) -> int:
        """Copy one file from source to destination.

        The content is read fresh from the source; ``source_entry`` only
        supplies the modification time to carry over.

        Args:
            path: Relative path of the file
            source_entry: Source listing entry (for its modification time)
            preserve_mtime: Stamp the source modification time on the copy

        Returns:
            Number of bytes written
        """
        data = self.source.read_file(path)
        self.destination.write_file(path, data)

        if preserve_mtime and source_entry is not None:
            stamped = self.destination.set_modified(path, source_entry.modified)
            if not stamped:
                logger.debug(
                    f"{self.destination.describe()} kept its own modification "
                    f"time for {path}"
                )
        return len(data)

    def delete_file(self, path: str) -> None:
        """Delete one file from the destination.

        Args:
            path: Relative path of the file
        """
        self.destination.delete_file(path)
