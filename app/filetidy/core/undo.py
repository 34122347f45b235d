"""Log-driven reversal.

Reverses previously executed actions using only the ExecutionLog. The
live filesystem is re-checked before every reversal instead of trusting
the log's memory of what should be there, which makes undo idempotent:
a second run over the same log finds everything already restored and
records skips.

Inverse operations:
- move, rename -> move the file back to its original path
- copy -> move the copy to the trash (the original was never touched)
- delete -> restore the entry from the trash to its original path

Undo never overwrites and never forces. Missing files are facts to
report, not errors to raise.
"""

import logging
import os
import shutil
from pathlib import Path

from filetidy.core.trash import TrashBin
from filetidy.models.execution import (
    ExecutionLog,
    ExecutionRecord,
    UndoCause,
    UndoLog,
    UndoOutcome,
    UndoRecord,
    new_log_id,
    utc_now,
)
from filetidy.models.plan import ActionKind

logger = logging.getLogger(__name__)

UNDO_REASONS: dict[UndoCause, str] = {
    UndoCause.NOT_APPLICABLE: "Not applicable: the original action did not succeed, so there is nothing to undo.",
    UndoCause.ALREADY_RESTORED: "Skipped because {path} is already in its original state.",
    UndoCause.SOURCE_MISSING: "Skipped because {current} no longer exists, so it cannot be moved back.",
    UndoCause.DESTINATION_OCCUPIED: (
        "Skipped because {path} is occupied again; restoring would overwrite it."
    ),
    UndoCause.ORIGINAL_LOCATION_UNKNOWN: (
        "Skipped because the log does not record where the file went, so it cannot be reversed safely."
    ),
    UndoCause.PERMISSION_DENIED: "Failed because permission was denied while restoring {path}.",
    UndoCause.UNKNOWN: "Failed because of an unexpected filesystem error while restoring {path}.",
}

COPY_KEPT_REASON = (
    "Skipped because the original {path} is gone; the copy at {current} is kept as the only remaining version."
)


def undo_reason(cause: UndoCause, path: str, current: str | None = None) -> str:
    """Render the audit reason for an undo cause."""
    return UNDO_REASONS[cause].format(path=path, current=current or "")


class UndoEngine:
    """Reverses execution logs and produces undo logs.

    Attributes:
        _trash: Trash bin used to restore deletes and discard copies.
    """

    def __init__(self, trash: TrashBin | None = None) -> None:
        """Initialize the UndoEngine.

        Args:
            trash: Trash bin shared with the execution engine.
        """
        self._trash = trash if trash is not None else TrashBin()

    def undo(self, log: ExecutionLog) -> UndoLog:
        """Attempt to reverse every succeeded record in a log.

        Records are processed last-first so later actions are unwound
        before the earlier ones they may depend on. Every execution
        record yields exactly one undo record.

        Args:
            log: Execution log from a prior run.

        Returns:
            UndoLog referencing the execution log.
        """
        started_at = utc_now()
        records = [self._undo_single(record) for record in reversed(log.records)]
        logger.info("Undo of %s finished with %d record(s)", log.id, len(records))
        return UndoLog(
            id=new_log_id(),
            execution_log_id=log.id,
            started_at=started_at,
            records=tuple(records),
        )

    def _undo_single(self, record: ExecutionRecord) -> UndoRecord:
        if not record.succeeded:
            return self._skip(record, UndoCause.NOT_APPLICABLE)

        if record.kind == ActionKind.SKIP:
            return self._skip(record, UndoCause.NOT_APPLICABLE)

        if not record.result_path:
            return self._skip(record, UndoCause.ORIGINAL_LOCATION_UNKNOWN)

        if record.kind in (ActionKind.MOVE, ActionKind.RENAME):
            return self._undo_move(record)
        if record.kind == ActionKind.COPY:
            return self._undo_copy(record)
        return self._undo_delete(record)

    def _undo_move(self, record: ExecutionRecord) -> UndoRecord:
        """Move a moved or renamed file back to where it came from."""
        original = Path(record.source)
        current = Path(record.result_path or "")
        original_exists = os.path.lexists(original)
        current_exists = os.path.lexists(current)

        if original_exists and not current_exists:
            return self._skip(record, UndoCause.ALREADY_RESTORED)
        if original_exists:
            return self._skip(record, UndoCause.DESTINATION_OCCUPIED)
        if not current_exists:
            return self._skip(record, UndoCause.SOURCE_MISSING)

        try:
            original.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(current), str(original))
        except OSError as e:
            logger.warning("Moving %s back to %s failed: %s", current, original, e)
            return self._failed(record, e)

        return self._restored(record, f"Moved back from {current} to {original}.")

    def _undo_copy(self, record: ExecutionRecord) -> UndoRecord:
        """Discard a copy by moving it to the trash."""
        original = Path(record.source)
        copy = Path(record.result_path or "")

        if not os.path.lexists(copy):
            return self._skip(record, UndoCause.ALREADY_RESTORED)
        if not os.path.lexists(original):
            return self._record(
                record,
                UndoOutcome.SKIPPED,
                COPY_KEPT_REASON.format(path=original, current=copy),
                cause=UndoCause.SOURCE_MISSING,
            )

        try:
            trashed = self._trash.put(copy)
        except OSError as e:
            logger.warning("Trashing copy %s failed: %s", copy, e)
            return self._failed(record, e)

        return self._restored(record, f"Moved the copy at {copy} to the trash ({trashed}).")

    def _undo_delete(self, record: ExecutionRecord) -> UndoRecord:
        """Restore a trashed entry to its original path."""
        original = Path(record.source)
        trashed = Path(record.result_path or "")
        original_exists = os.path.lexists(original)
        trashed_exists = os.path.lexists(trashed)

        if original_exists and not trashed_exists:
            return self._skip(record, UndoCause.ALREADY_RESTORED)
        if original_exists:
            return self._skip(record, UndoCause.DESTINATION_OCCUPIED)
        if not trashed_exists:
            return self._skip(record, UndoCause.SOURCE_MISSING)

        try:
            self._trash.restore(trashed, original)
        except OSError as e:
            logger.warning("Restoring %s from trash failed: %s", original, e)
            return self._failed(record, e)

        return self._restored(record, f"Restored {original} from the trash.")

    def _skip(self, record: ExecutionRecord, cause: UndoCause) -> UndoRecord:
        return self._record(
            record,
            UndoOutcome.SKIPPED,
            undo_reason(cause, record.source, record.result_path),
            cause=cause,
        )

    def _failed(self, record: ExecutionRecord, error: OSError) -> UndoRecord:
        cause = UndoCause.PERMISSION_DENIED if isinstance(error, PermissionError) else UndoCause.UNKNOWN
        return self._record(
            record,
            UndoOutcome.FAILED,
            undo_reason(cause, record.source, record.result_path),
            cause=cause,
        )

    def _restored(self, record: ExecutionRecord, reason: str) -> UndoRecord:
        return self._record(record, UndoOutcome.RESTORED, reason)

    def _record(
        self,
        record: ExecutionRecord,
        outcome: UndoOutcome,
        reason: str,
        *,
        cause: UndoCause | None = None,
    ) -> UndoRecord:
        logger.debug("Undo of action %d (%s): %s", record.index, record.kind.value, outcome.value)
        return UndoRecord(
            index=record.index,
            kind=record.kind,
            path=record.source,
            outcome=outcome,
            reason=reason,
            cause=cause,
            timestamp=utc_now(),
        )
