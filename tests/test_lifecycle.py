"""Tests for the issue file lifecycle."""

from pathlib import Path

import pytest
from unittest.mock import patch

from jbt_importer.exceptions import FileLifecycleError, TransformError
from jbt_importer.export.lifecycle import (
    FileLifecycleManager,
    backup_path_for,
    temp_path_for,
)
from jbt_importer.models.issue import IssueFileState

ORIGINAL = b'<bug><summary>original</summary></bug>'


def upper_transform(source: Path) -> bytes:
    return source.read_bytes().upper()


def failing_transform(source: Path) -> bytes:
    raise TransformError('style sheet exploded')


class TestFileLifecycleManager:
    """Test transform and revert of issue files."""

    def setup_method(self):
        """Set up test fixtures."""
        self.manager = FileLifecycleManager()

    @pytest.fixture
    def issue_file(self, tmp_path):
        path = tmp_path / 'details.xml'
        path.write_bytes(ORIGINAL)
        return path

    def test_apply_transform_creates_backup(self, issue_file):
        """Test the first transform moves the original to the backup."""
        backup = self.manager.apply_transform(issue_file, upper_transform)

        assert backup == backup_path_for(issue_file)
        assert backup.read_bytes() == ORIGINAL
        assert issue_file.read_bytes() == ORIGINAL.upper()
        assert not temp_path_for(issue_file).exists()

    def test_transform_twice_uses_original(self, issue_file):
        """Test a second transform starts from the backup, not its own output."""
        calls = []

        def tagging_transform(source: Path) -> bytes:
            calls.append(source)
            return source.read_bytes() + b'<!-- t -->'

        self.manager.apply_transform(issue_file, tagging_transform)
        first = issue_file.read_bytes()
        self.manager.apply_transform(issue_file, tagging_transform)

        assert issue_file.read_bytes() == first
        assert calls[1] == backup_path_for(issue_file)
        assert backup_path_for(issue_file).read_bytes() == ORIGINAL

    def test_transform_revert_cycles(self, issue_file):
        """Test repeated transform/revert cycles restore identical bytes."""
        for _ in range(3):
            self.manager.apply_transform(issue_file, upper_transform)
            assert self.manager.revert(issue_file) is True
            assert issue_file.read_bytes() == ORIGINAL
            assert not backup_path_for(issue_file).exists()

    def test_failed_transform_leaves_files_untouched(self, issue_file):
        """Test a failing transform changes nothing on disk."""
        with pytest.raises(TransformError):
            self.manager.apply_transform(issue_file, failing_transform)

        assert issue_file.read_bytes() == ORIGINAL
        assert not backup_path_for(issue_file).exists()
        assert not temp_path_for(issue_file).exists()

    def test_failed_retransform_keeps_previous_result(self, issue_file):
        """Test a failing transform after a successful one keeps both files."""
        self.manager.apply_transform(issue_file, upper_transform)

        with pytest.raises(TransformError):
            self.manager.apply_transform(issue_file, failing_transform)

        assert issue_file.read_bytes() == ORIGINAL.upper()
        assert backup_path_for(issue_file).read_bytes() == ORIGINAL

    def test_unexpected_transform_error_wrapped(self, issue_file):
        """Test arbitrary exceptions from the transform become TransformError."""

        def broken(source: Path) -> bytes:
            raise RuntimeError('boom')

        with pytest.raises(TransformError):
            self.manager.apply_transform(issue_file, broken)

        assert issue_file.read_bytes() == ORIGINAL

    def test_stale_temp_file_is_replaced(self, issue_file):
        """Test leftovers of an interrupted run do not affect the next one."""
        temp_path_for(issue_file).write_bytes(b'half written')

        self.manager.apply_transform(issue_file, upper_transform)

        assert issue_file.read_bytes() == ORIGINAL.upper()
        assert not temp_path_for(issue_file).exists()

    def test_recovers_when_live_file_missing(self, issue_file):
        """Test a run interrupted between renames is recovered from the backup."""
        issue_file.rename(backup_path_for(issue_file))

        self.manager.apply_transform(issue_file, upper_transform)

        assert issue_file.read_bytes() == ORIGINAL.upper()
        assert backup_path_for(issue_file).read_bytes() == ORIGINAL

    def test_missing_file(self, tmp_path):
        """Test transforming a file that does not exist."""
        with pytest.raises(FileLifecycleError):
            self.manager.apply_transform(tmp_path / 'nope.xml', upper_transform)

    def test_revert_without_backup_is_noop(self, issue_file):
        """Test revert with nothing to restore."""
        assert self.manager.revert(issue_file) is False
        assert self.manager.revert(issue_file) is False
        assert issue_file.read_bytes() == ORIGINAL

    def test_state(self, issue_file, tmp_path):
        """Test file state reporting."""
        assert self.manager.state(issue_file) == IssueFileState.ORIGINAL

        self.manager.apply_transform(issue_file, upper_transform)
        assert self.manager.state(issue_file) == IssueFileState.TRANSFORMED

        self.manager.revert(issue_file)
        assert self.manager.state(issue_file) == IssueFileState.ORIGINAL

        assert self.manager.state(tmp_path / 'missing.xml') == IssueFileState.MISSING

    def test_load(self, issue_file):
        """Test reading an issue file."""
        assert self.manager.load(issue_file) == ORIGINAL.decode('utf-8')

    def test_load_missing(self, tmp_path):
        """Test reading a missing issue file."""
        with pytest.raises(FileLifecycleError):
            self.manager.load(tmp_path / 'missing.xml')

    def test_unreadable_location(self, tmp_path):
        """Test a path the file system rejects fails with FileLifecycleError."""
        path = tmp_path / ('x' * 300 + '.xml')

        with pytest.raises(FileLifecycleError) as exc_info:
            self.manager.apply_transform(path, upper_transform)
        assert exc_info.value.path is not None

        with pytest.raises(FileLifecycleError):
            self.manager.revert(path)

        with pytest.raises(FileLifecycleError):
            self.manager.state(path)

    def test_permission_denied_on_check(self, issue_file):
        """Test a permission error while checking for the backup is wrapped."""
        with patch(
            'jbt_importer.export.lifecycle.os.stat',
            side_effect=PermissionError(13, 'Permission denied'),
        ):
            with pytest.raises(FileLifecycleError):
                self.manager.revert(issue_file)

        assert issue_file.read_bytes() == ORIGINAL
