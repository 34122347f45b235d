"""Unit tests for the execution engine.

All tests run against real files under tmp_path.
"""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from filetidy.core.executor import ExecutionEngine, classify_os_error, failure_reason
from filetidy.core.planner import plan
from filetidy.core.trash import TrashBin
from filetidy.models.execution import ExecutionOutcome, FailureKind
from filetidy.models.plan import ActionKind, ActionPlan, PlannedAction
from filetidy.models.rule import ExtensionEquals, MoveOutcome, RenameOutcome, Rule
from filetidy.models.snapshot import FileSnapshot

SnapshotOf = Callable[[Path], FileSnapshot]


@pytest.fixture
def engine(tmp_path: Path) -> ExecutionEngine:
    """Engine with a trash bin inside tmp_path."""
    return ExecutionEngine(TrashBin(tmp_path / "trash"))


@pytest.fixture
def downloads(tmp_path: Path) -> Path:
    """Folder holding the files to organize."""
    folder = tmp_path / "Downloads"
    folder.mkdir()
    return folder


def _write(path: Path, content: str = "data") -> Path:
    path.write_text(content)
    return path


class TestMove:
    """Tests for move actions."""

    def test_move_success(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """A move places the file at the destination and records where it went."""
        source = _write(downloads / "invoice.pdf")
        destination = tmp_path / "Archive" / "invoice.pdf"
        action = PlannedAction(
            target=snapshot_of(source),
            kind=ActionKind.MOVE,
            reason="Matched rule: 'Archive PDFs'",
            destination=str(destination),
        )

        log = engine.execute(ActionPlan(actions=(action,)))

        record = log.records[0]
        assert record.outcome == ExecutionOutcome.SUCCEEDED
        assert record.result_path == str(destination)
        assert destination.read_text() == "data"
        assert not source.exists()

    def test_move_never_overwrites(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """An occupied destination fails the action and leaves both files intact."""
        source = _write(downloads / "invoice.pdf", "new")
        archive = tmp_path / "Archive"
        archive.mkdir()
        existing = _write(archive / "invoice.pdf", "old")
        action = PlannedAction(
            target=snapshot_of(source),
            kind=ActionKind.MOVE,
            reason="Matched rule: 'Archive PDFs'",
            destination=str(existing),
        )

        log = engine.execute(ActionPlan(actions=(action,)))

        record = log.records[0]
        assert record.outcome == ExecutionOutcome.FAILED
        assert record.failure == FailureKind.DESTINATION_EXISTS
        assert "already exists" in record.reason
        assert existing.read_text() == "old"
        assert source.read_text() == "new"

    def test_missing_source_is_skipped(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """A file removed after the scan is skipped with source_missing."""
        source = _write(downloads / "gone.pdf")
        snapshot = snapshot_of(source)
        source.unlink()
        action = PlannedAction(
            target=snapshot,
            kind=ActionKind.MOVE,
            reason="Matched rule: 'Archive PDFs'",
            destination=str(tmp_path / "Archive" / "gone.pdf"),
        )

        log = engine.execute(ActionPlan(actions=(action,)))

        record = log.records[0]
        assert record.outcome == ExecutionOutcome.SKIPPED
        assert record.failure == FailureKind.SOURCE_MISSING
        assert not (tmp_path / "Archive").exists()

    def test_parent_create_failure(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """A destination under a regular file cannot get its folder created."""
        source = _write(downloads / "invoice.pdf")
        blocker = _write(tmp_path / "blocker")
        action = PlannedAction(
            target=snapshot_of(source),
            kind=ActionKind.MOVE,
            reason="Matched rule: 'Archive PDFs'",
            destination=str(blocker / "sub" / "invoice.pdf"),
        )

        log = engine.execute(ActionPlan(actions=(action,)))

        record = log.records[0]
        assert record.outcome == ExecutionOutcome.FAILED
        assert record.failure == FailureKind.PARENT_CREATE_FAILED
        assert source.exists()


class TestCopy:
    """Tests for copy actions."""

    def test_copy_keeps_original(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """A copy leaves the original in place."""
        source = _write(downloads / "photo.jpg", "pixels")
        destination = tmp_path / "Backup" / "photo.jpg"
        action = PlannedAction(
            target=snapshot_of(source),
            kind=ActionKind.COPY,
            reason="Matched rule: 'Backup photos'",
            destination=str(destination),
        )

        log = engine.execute(ActionPlan(actions=(action,)))

        assert log.records[0].outcome == ExecutionOutcome.SUCCEEDED
        assert source.read_text() == "pixels"
        assert destination.read_text() == "pixels"

    def test_copy_directory(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """Directories are copied recursively."""
        folder = downloads / "album"
        folder.mkdir()
        _write(folder / "a.jpg")
        destination = tmp_path / "Backup" / "album"
        action = PlannedAction(
            target=snapshot_of(folder),
            kind=ActionKind.COPY,
            reason="Matched rule: 'Backup albums'",
            destination=str(destination),
        )

        log = engine.execute(ActionPlan(actions=(action,)))

        assert log.records[0].outcome == ExecutionOutcome.SUCCEEDED
        assert (destination / "a.jpg").exists()


class TestRename:
    """Tests for rename actions."""

    def test_rename_in_place(self, engine: ExecutionEngine, downloads: Path, snapshot_of: SnapshotOf) -> None:
        """Rename keeps the file in its folder under the new name."""
        source = _write(downloads / "report.pdf")
        action = PlannedAction(
            target=snapshot_of(source),
            kind=ActionKind.RENAME,
            reason="Matched rule: 'Date reports'",
            new_name="2026-report.pdf",
        )

        log = engine.execute(ActionPlan(actions=(action,)))

        record = log.records[0]
        assert record.outcome == ExecutionOutcome.SUCCEEDED
        assert record.result_path == str(downloads / "2026-report.pdf")
        assert (downloads / "2026-report.pdf").exists()
        assert not source.exists()

    def test_rename_never_overwrites(self, engine: ExecutionEngine, downloads: Path, snapshot_of: SnapshotOf) -> None:
        """An existing file with the new name blocks the rename."""
        source = _write(downloads / "report.pdf", "mine")
        _write(downloads / "old_report.pdf", "theirs")
        action = PlannedAction(
            target=snapshot_of(source),
            kind=ActionKind.RENAME,
            reason="Matched rule: 'Prefix'",
            new_name="old_report.pdf",
        )

        log = engine.execute(ActionPlan(actions=(action,)))

        assert log.records[0].failure == FailureKind.DESTINATION_EXISTS
        assert (downloads / "old_report.pdf").read_text() == "theirs"
        assert source.read_text() == "mine"

    def test_name_with_separator_is_recorded_not_raised(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """A rename that would leave the folder fails alone and the batch goes on."""
        text_file = _write(downloads / "a.txt")
        pdf_file = _write(downloads / "b.pdf")
        rules = [
            Rule(name="Prefix text", conditions=(ExtensionEquals("txt"),), outcome=RenameOutcome(prefix="old/")),
            Rule(name="Archive PDFs", conditions=(ExtensionEquals("pdf"),), outcome=MoveOutcome(str(tmp_path / "Archive"))),
        ]

        log = engine.execute(plan([snapshot_of(text_file), snapshot_of(pdf_file)], rules))

        renamed, moved = log.records
        assert renamed.outcome == ExecutionOutcome.FAILED
        assert renamed.failure == FailureKind.INVALID_NAME
        assert "not a plain file name" in renamed.reason
        assert text_file.exists()
        assert moved.outcome == ExecutionOutcome.SUCCEEDED
        assert (tmp_path / "Archive" / "b.pdf").exists()


class TestDelete:
    """Tests for delete actions."""

    def test_delete_moves_to_trash(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """Delete never unlinks; the file lives on inside the trash."""
        source = _write(downloads / "old.log", "log lines")
        action = PlannedAction(target=snapshot_of(source), kind=ActionKind.DELETE, reason="Matched rule: 'Logs'")

        log = engine.execute(ActionPlan(actions=(action,)))

        record = log.records[0]
        assert record.outcome == ExecutionOutcome.SUCCEEDED
        assert not source.exists()
        trashed = Path(record.result_path or "")
        assert trashed.is_relative_to(tmp_path / "trash")
        assert trashed.read_text() == "log lines"

    def test_trash_failure(self, engine: ExecutionEngine, downloads: Path, snapshot_of: SnapshotOf) -> None:
        """A trash error is recorded as trash_failed."""
        source = _write(downloads / "old.log")
        action = PlannedAction(target=snapshot_of(source), kind=ActionKind.DELETE, reason="Matched rule: 'Logs'")

        with patch.object(TrashBin, "put", side_effect=OSError("disk full")):
            log = engine.execute(ActionPlan(actions=(action,)))

        assert log.records[0].outcome == ExecutionOutcome.FAILED
        assert log.records[0].failure == FailureKind.TRASH_FAILED
        assert source.exists()


class TestBatch:
    """Tests for whole-plan behavior."""

    def test_one_record_per_action_in_order(
        self, engine: ExecutionEngine, downloads: Path, tmp_path: Path, snapshot_of: SnapshotOf
    ) -> None:
        """A failure does not stop the batch, and records keep plan order."""
        first = _write(downloads / "a.pdf")
        second = _write(downloads / "b.txt")
        archive = tmp_path / "Archive"
        archive.mkdir()
        _write(archive / "a.pdf")
        actions = (
            PlannedAction(
                target=snapshot_of(first),
                kind=ActionKind.MOVE,
                reason="Matched rule: 'Archive PDFs'",
                destination=str(archive / "a.pdf"),
            ),
            PlannedAction(target=snapshot_of(second), kind=ActionKind.SKIP, reason="No rules matched this file."),
            PlannedAction(
                target=snapshot_of(second),
                kind=ActionKind.RENAME,
                reason="Matched rule: 'Prefix'",
                new_name="x-b.txt",
            ),
        )

        log = engine.execute(ActionPlan(actions=actions))

        assert [record.index for record in log.records] == [0, 1, 2]
        assert [record.outcome for record in log.records] == [
            ExecutionOutcome.FAILED,
            ExecutionOutcome.SKIPPED,
            ExecutionOutcome.SUCCEEDED,
        ]
        assert all(record.reason for record in log.records)
        assert log.undoable

    def test_skip_action_touches_nothing(self, engine: ExecutionEngine, downloads: Path, snapshot_of: SnapshotOf) -> None:
        """Skip actions are recorded as skipped with the plan's reason."""
        source = _write(downloads / "notes.txt")
        action = PlannedAction(target=snapshot_of(source), kind=ActionKind.SKIP, reason="No rules matched this file.")

        log = engine.execute(ActionPlan(actions=(action,)))

        assert log.records[0].outcome == ExecutionOutcome.SKIPPED
        assert "No rules matched this file." in log.records[0].reason
        assert source.exists()
        assert not log.undoable

    def test_log_ids_are_unique(self, engine: ExecutionEngine) -> None:
        """Each execution gets its own 12-character log ID."""
        first = engine.execute(ActionPlan())
        second = engine.execute(ActionPlan())

        assert first.id != second.id
        assert len(first.id) == 12


class TestHelpers:
    """Tests for failure classification and reason rendering."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (PermissionError(), FailureKind.PERMISSION_DENIED),
            (FileNotFoundError(), FailureKind.SOURCE_MISSING),
            (FileExistsError(), FailureKind.DESTINATION_EXISTS),
            (OSError(), FailureKind.UNKNOWN),
        ],
    )
    def test_classify_os_error(self, error: OSError, expected: FailureKind) -> None:
        """OS errors map onto enumerated failure kinds."""
        assert classify_os_error(error) == expected

    def test_failure_reason_mentions_paths(self) -> None:
        """Rendered reasons name the paths involved."""
        reason = failure_reason(FailureKind.DESTINATION_EXISTS, "/a/b.pdf", "/Archive/b.pdf")
        assert "/Archive/b.pdf" in reason

        reason = failure_reason(FailureKind.PARENT_CREATE_FAILED, "/a/b.pdf", "/Archive/sub/b.pdf")
        assert "/Archive/sub" in reason
