"""Tests for the FileComparator class."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from filesync.exceptions import EnumerationError
from filesync.models import FileEntry
from filesync.sources import MemoryFiles
from filesync.sync.comparator import FileComparator, SyncAction
from filesync.sync.fingerprint import FingerprintPolicy

T1 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
T2 = datetime(2024, 1, 2, 12, 0, 0, tzinfo=timezone.utc)


def _mock_source(hashes=None):
    """Create a mock source whose hash_file returns per-path digests."""
    source = Mock(spec=MemoryFiles)
    source.describe.return_value = "mock://"
    hashes = hashes or {}
    source.hash_file.side_effect = lambda entry: hashes[entry.path]
    return source


class TestNewAndChangedFiles:
    """Tests for files that exist on the source."""

    def test_source_only_file_is_copied(self):
        """A file missing on the destination should be copied."""
        comparator = FileComparator(_mock_source(), _mock_source())

        decisions = comparator.compare_files([FileEntry("a.txt", 1, T1)], [])

        assert len(decisions) == 1
        assert decisions[0].action == SyncAction.COPY
        assert decisions[0].reason == "New file"
        assert decisions[0].destination_entry is None

    def test_size_change_is_copied_without_hashing(self):
        """Different sizes should mean a copy and no hashing."""
        source, destination = _mock_source(), _mock_source()
        comparator = FileComparator(source, destination)

        decisions = comparator.compare_files(
            [FileEntry("a.txt", 5, T1)], [FileEntry("a.txt", 3, T1)]
        )

        assert decisions[0].action == SyncAction.COPY
        assert "Size changed" in decisions[0].reason
        source.hash_file.assert_not_called()
        destination.hash_file.assert_not_called()

    def test_same_size_and_mtime_is_skipped_without_hashing(self):
        """Fast path: equal size and mtime should skip without hashing."""
        source, destination = _mock_source(), _mock_source()
        comparator = FileComparator(source, destination)

        decisions = comparator.compare_files(
            [FileEntry("a.txt", 3, T1)], [FileEntry("a.txt", 3, T1)]
        )

        assert decisions[0].action == SyncAction.SKIP
        source.hash_file.assert_not_called()
        destination.hash_file.assert_not_called()

    def test_different_mtime_same_hash_is_skipped(self):
        """Same content with a different mtime should be skipped."""
        comparator = FileComparator(
            _mock_source({"a.txt": "abc"}), _mock_source({"a.txt": "abc"})
        )

        decisions = comparator.compare_files(
            [FileEntry("a.txt", 3, T2)], [FileEntry("a.txt", 3, T1)]
        )

        assert decisions[0].action == SyncAction.SKIP
        assert decisions[0].reason == "Same content hash"

    def test_missing_mtime_falls_back_to_hash(self):
        """Without modification times the hashes should decide."""
        comparator = FileComparator(
            _mock_source({"a.txt": "abc"}), _mock_source({"a.txt": "def"})
        )

        decisions = comparator.compare_files(
            [FileEntry("a.txt", 3, None)], [FileEntry("a.txt", 3, T1)]
        )

        assert decisions[0].action == SyncAction.COPY
        assert decisions[0].reason == "Content hash differs"

    def test_checksum_mode_ignores_matching_mtime(self):
        """With trust_mtime disabled, equal mtimes should not skip hashing."""
        comparator = FileComparator(
            _mock_source({"a.txt": "abc"}),
            _mock_source({"a.txt": "def"}),
            policy=FingerprintPolicy(trust_mtime=False),
        )

        decisions = comparator.compare_files(
            [FileEntry("a.txt", 3, T1)], [FileEntry("a.txt", 3, T1)]
        )

        assert decisions[0].action == SyncAction.COPY

    def test_precomputed_hashes_are_used(self):
        """Entries that carry a content hash should not be re-hashed."""
        source, destination = _mock_source(), _mock_source()
        comparator = FileComparator(source, destination)

        decisions = comparator.compare_files(
            [FileEntry("a.txt", 3, None, "abc")],
            [FileEntry("a.txt", 3, None, "abc")],
        )

        assert decisions[0].action == SyncAction.SKIP
        source.hash_file.assert_not_called()
        destination.hash_file.assert_not_called()


class TestExtraneousFiles:
    """Tests for files that only exist on the destination."""

    def test_destination_only_file_kept_by_default(self):
        """Without delete_extraneous no delete decision should be produced."""
        comparator = FileComparator(_mock_source(), _mock_source())

        decisions = comparator.compare_files([], [FileEntry("old.txt", 1, T1)])

        assert decisions == []

    def test_destination_only_file_deleted_when_enabled(self):
        """With delete_extraneous the file should be deleted."""
        comparator = FileComparator(
            _mock_source(), _mock_source(), delete_extraneous=True
        )

        decisions = comparator.compare_files([], [FileEntry("old.txt", 1, T1)])

        assert len(decisions) == 1
        assert decisions[0].action == SyncAction.DELETE
        assert decisions[0].reason == "File no longer exists on source"
        assert decisions[0].source_entry is None


class TestOrdering:
    """Tests for the order of decisions."""

    def test_copies_precede_deletes(self):
        """Every copy should come before every delete."""
        comparator = FileComparator(
            _mock_source(), _mock_source(), delete_extraneous=True
        )
        source_entries = [FileEntry("z.txt", 1, T1), FileEntry("b.txt", 1, T1)]
        destination_entries = [
            FileEntry("gone1.txt", 1, T1),
            FileEntry("b.txt", 2, T1),
            FileEntry("gone2.txt", 1, T1),
        ]

        decisions = comparator.compare_files(source_entries, destination_entries)
        actions = [d.action for d in decisions]

        assert actions == [
            SyncAction.COPY,
            SyncAction.COPY,
            SyncAction.DELETE,
            SyncAction.DELETE,
        ]

    def test_order_follows_listing_order(self):
        """Copies follow source order, deletes follow destination order."""
        comparator = FileComparator(
            _mock_source(), _mock_source(), delete_extraneous=True
        )

        decisions = comparator.compare_files(
            [FileEntry("z.txt", 1, T1), FileEntry("a.txt", 1, T1)],
            [FileEntry("y.txt", 1, T1), FileEntry("c.txt", 1, T1)],
        )

        assert [d.path for d in decisions] == ["z.txt", "a.txt", "y.txt", "c.txt"]

    def test_actions_filters_skips(self):
        """actions() should drop SKIP decisions."""
        comparator = FileComparator(_mock_source(), _mock_source())

        decisions = comparator.compare_files(
            [FileEntry("same.txt", 1, T1), FileEntry("new.txt", 1, T1)],
            [FileEntry("same.txt", 1, T1)],
        )

        assert [d.action for d in decisions] == [SyncAction.SKIP, SyncAction.COPY]
        assert [d.path for d in FileComparator.actions(decisions)] == ["new.txt"]


class TestDuplicatePaths:
    """Tests for listings that violate path uniqueness."""

    def test_duplicate_source_path_raises(self):
        """A path listed twice should be rejected."""
        comparator = FileComparator(_mock_source(), _mock_source())

        with pytest.raises(EnumerationError, match="Duplicate path in source"):
            comparator.compare_files(
                [FileEntry("a.txt", 1, T1), FileEntry("a.txt", 2, T1)], []
            )

    def test_duplicate_destination_path_raises(self):
        """A destination path listed twice should be rejected."""
        comparator = FileComparator(_mock_source(), _mock_source())

        with pytest.raises(EnumerationError, match="Duplicate path in destination"):
            comparator.compare_files(
                [], [FileEntry("a.txt", 1, T1), FileEntry("a.txt", 1, T1)]
            )
