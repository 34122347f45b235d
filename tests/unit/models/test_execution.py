"""Unit tests for execution and undo log models."""

import json

import pytest
from filetidy.models.execution import (
    ExecutionLog,
    ExecutionOutcome,
    ExecutionRecord,
    FailureKind,
    UndoCause,
    UndoLog,
    UndoOutcome,
    UndoRecord,
    new_log_id,
)
from filetidy.models.plan import ActionKind


def _record(index: int, outcome: ExecutionOutcome, failure: FailureKind | None = None) -> ExecutionRecord:
    return ExecutionRecord(
        index=index,
        kind=ActionKind.MOVE,
        source=f"/in/{index}.pdf",
        outcome=outcome,
        reason="Something happened.",
        failure=failure,
        destination=f"/out/{index}.pdf",
        result_path=f"/out/{index}.pdf" if outcome == ExecutionOutcome.SUCCEEDED else None,
        timestamp="2026-03-01T12:00:00+00:00",
    )


class TestExecutionRecord:
    """Tests for ExecutionRecord."""

    def test_reason_required(self) -> None:
        """Every record carries a reason."""
        with pytest.raises(ValueError, match="reason cannot be empty"):
            ExecutionRecord(index=0, kind=ActionKind.SKIP, source="/a", outcome=ExecutionOutcome.SKIPPED, reason="")

    def test_dict_roundtrip(self) -> None:
        """Failure kinds survive serialization."""
        record = _record(0, ExecutionOutcome.FAILED, FailureKind.DESTINATION_EXISTS)

        data = record.to_dict()

        assert data["failure"] == "destination_exists"
        assert ExecutionRecord.from_dict(data) == record


class TestExecutionLog:
    """Tests for ExecutionLog."""

    def test_counts_and_undoable(self) -> None:
        """Counts are per outcome and any success makes a log undoable."""
        log = ExecutionLog(
            id="abc",
            started_at="s",
            finished_at="f",
            records=(_record(0, ExecutionOutcome.SUCCEEDED), _record(1, ExecutionOutcome.SKIPPED)),
        )

        assert log.count(ExecutionOutcome.SUCCEEDED) == 1
        assert log.count(ExecutionOutcome.FAILED) == 0
        assert log.undoable

    def test_not_undoable_without_success(self) -> None:
        """Logs without a success have nothing to undo."""
        log = ExecutionLog(id="abc", started_at="s", finished_at="f", records=(_record(0, ExecutionOutcome.FAILED),))

        assert not log.undoable

    def test_json_line_roundtrip(self) -> None:
        """A log is one JSON line."""
        log = ExecutionLog(id="abc", started_at="s", finished_at="f", records=(_record(0, ExecutionOutcome.SUCCEEDED),))

        line = log.to_json_line()

        assert "\n" not in line
        assert ExecutionLog.from_dict(json.loads(line)) == log

    def test_new_log_id(self) -> None:
        """Log IDs are 12 hex characters."""
        log_id = new_log_id()

        assert len(log_id) == 12
        int(log_id, 16)


class TestUndoLog:
    """Tests for UndoLog and UndoRecord."""

    def test_roundtrip_and_count(self) -> None:
        """Undo logs survive serialization and count outcomes."""
        log = UndoLog(
            id="u1",
            execution_log_id="abc",
            started_at="s",
            records=(
                UndoRecord(index=1, kind=ActionKind.MOVE, path="/in/1.pdf", outcome=UndoOutcome.RESTORED, reason="ok"),
                UndoRecord(
                    index=0,
                    kind=ActionKind.DELETE,
                    path="/in/0.pdf",
                    outcome=UndoOutcome.SKIPPED,
                    reason="already",
                    cause=UndoCause.ALREADY_RESTORED,
                ),
            ),
        )

        assert UndoLog.from_dict(json.loads(log.to_json_line())) == log
        assert log.count(UndoOutcome.RESTORED) == 1
        assert log.count(UndoOutcome.FAILED) == 0

    def test_reason_required(self) -> None:
        """Undo records carry a reason."""
        with pytest.raises(ValueError, match="reason cannot be empty"):
            UndoRecord(index=0, kind=ActionKind.MOVE, path="/a", outcome=UndoOutcome.SKIPPED, reason="")
