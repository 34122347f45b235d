"""Plan execution.

Applies an approved ActionPlan to the filesystem exactly as given and
records one ExecutionRecord per planned action. Each action is attempted
once and independently: a failure is recorded and the batch continues.

Safety policy:
- move, copy and rename never overwrite an existing destination
- delete moves the entry to the recoverable trash bin
- a target that vanished since the scan is skipped, not treated as an error
"""

import logging
import os
import shutil
from pathlib import Path

from filetidy.core.trash import TrashBin
from filetidy.models.execution import (
    ExecutionLog,
    ExecutionOutcome,
    ExecutionRecord,
    FailureKind,
    new_log_id,
    utc_now,
)
from filetidy.models.plan import ActionKind, ActionPlan, PlannedAction

logger = logging.getLogger(__name__)

# Reasons are rendered from the enumerated cause, never from OS error text,
# so the audit trail reads the same on every platform.
FAILURE_REASONS: dict[FailureKind, str] = {
    FailureKind.DESTINATION_EXISTS: (
        "Not applied because {destination} already exists; nothing was overwritten."
    ),
    FailureKind.PERMISSION_DENIED: "Not applied because permission was denied for {source}.",
    FailureKind.SOURCE_MISSING: (
        "Skipped because {source} no longer exists; the scan may be out of date."
    ),
    FailureKind.PARENT_CREATE_FAILED: "Not applied because the folder {parent} could not be created.",
    FailureKind.TRASH_FAILED: "Not applied because {source} could not be moved to the trash.",
    FailureKind.INVALID_NAME: (
        "Not applied because the new name {destination} is not a plain file name."
    ),
    FailureKind.UNKNOWN: "Not applied because of an unexpected filesystem error on {source}.",
}


def failure_reason(kind: FailureKind, source: str, destination: str | None = None) -> str:
    """Render the audit reason for a failure kind.

    Args:
        kind: Enumerated failure cause.
        source: Path of the file the action targeted.
        destination: Destination path, when the action has one.

    Returns:
        Human-readable explanation.
    """
    parent = str(Path(destination).parent) if destination else ""
    return FAILURE_REASONS[kind].format(source=source, destination=destination or "", parent=parent)


def classify_os_error(error: OSError) -> FailureKind:
    """Map an OSError to the closest enumerated failure kind."""
    if isinstance(error, PermissionError):
        return FailureKind.PERMISSION_DENIED
    if isinstance(error, FileNotFoundError):
        return FailureKind.SOURCE_MISSING
    if isinstance(error, FileExistsError):
        return FailureKind.DESTINATION_EXISTS
    return FailureKind.UNKNOWN


class ExecutionEngine:
    """Applies action plans and produces execution logs.

    Actions run sequentially in plan order, so two actions touching the
    same path can never interleave.

    Attributes:
        _trash: Trash bin receiving deleted entries.
    """

    def __init__(self, trash: TrashBin | None = None) -> None:
        """Initialize the ExecutionEngine.

        Args:
            trash: Trash bin for delete actions. Defaults to the XDG data trash.
        """
        self._trash = trash if trash is not None else TrashBin()

    def execute(self, plan: ActionPlan) -> ExecutionLog:
        """Apply every planned action and record what happened.

        Args:
            plan: Approved, immutable plan.

        Returns:
            ExecutionLog with one record per planned action, in plan order.
        """
        log_id = new_log_id()
        started_at = utc_now()
        records: list[ExecutionRecord] = []

        logger.info("Executing plan with %d action(s) as %s", len(plan.actions), log_id)
        for index, action in enumerate(plan.actions):
            records.append(self._execute_single(index, action))

        return ExecutionLog(
            id=log_id,
            started_at=started_at,
            finished_at=utc_now(),
            records=tuple(records),
        )

    def _execute_single(self, index: int, action: PlannedAction) -> ExecutionRecord:
        """Apply one planned action.

        Dispatches on the action kind after confirming the target still
        exists. Never raises for filesystem errors.
        """
        source = action.target.path

        if action.kind == ActionKind.SKIP:
            return self._record(index, action, ExecutionOutcome.SKIPPED, f"Plan skipped this file: {action.reason}")

        if not os.path.lexists(source):
            return self._failure(index, action, FailureKind.SOURCE_MISSING, outcome=ExecutionOutcome.SKIPPED)

        if action.kind == ActionKind.MOVE:
            return self._transfer(index, action, copy=False)
        if action.kind == ActionKind.COPY:
            return self._transfer(index, action, copy=True)
        if action.kind == ActionKind.RENAME:
            return self._rename(index, action)
        return self._delete(index, action)

    def _transfer(self, index: int, action: PlannedAction, *, copy: bool) -> ExecutionRecord:
        """Move or copy the target to its planned destination."""
        source = Path(action.target.path)
        destination = Path(action.destination or "")

        if os.path.lexists(destination):
            return self._failure(index, action, FailureKind.DESTINATION_EXISTS)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create %s: %s", destination.parent, e)
            return self._failure(index, action, FailureKind.PARENT_CREATE_FAILED)

        try:
            if not copy:
                shutil.move(str(source), str(destination))
            elif source.is_dir() and not source.is_symlink():
                shutil.copytree(source, destination, symlinks=True)
            else:
                shutil.copy2(source, destination, follow_symlinks=False)
        except OSError as e:
            logger.warning("%s of %s failed: %s", "Copy" if copy else "Move", source, e)
            return self._failure(index, action, classify_os_error(e))

        verb = "Copied" if copy else "Moved"
        return self._record(
            index,
            action,
            ExecutionOutcome.SUCCEEDED,
            f"{verb} to {destination}. {action.reason}",
            result_path=str(destination),
        )

    def _rename(self, index: int, action: PlannedAction) -> ExecutionRecord:
        """Rename the target in place."""
        source = Path(action.target.path)
        new_name = action.new_name or ""
        try:
            destination = source.with_name(new_name)
        except ValueError:
            return self._failure(index, action, FailureKind.INVALID_NAME, destination=new_name)

        if destination == source:
            return self._record(
                index,
                action,
                ExecutionOutcome.SKIPPED,
                "Skipped because the new name is identical to the current name.",
                destination=str(destination),
            )

        if os.path.lexists(destination):
            return self._failure(index, action, FailureKind.DESTINATION_EXISTS, destination=str(destination))

        try:
            source.rename(destination)
        except OSError as e:
            logger.warning("Rename of %s failed: %s", source, e)
            return self._failure(index, action, classify_os_error(e), destination=str(destination))

        return self._record(
            index,
            action,
            ExecutionOutcome.SUCCEEDED,
            f"Renamed to {new_name}. {action.reason}",
            destination=str(destination),
            result_path=str(destination),
        )

    def _delete(self, index: int, action: PlannedAction) -> ExecutionRecord:
        """Move the target into the trash bin."""
        source = Path(action.target.path)
        try:
            trashed = self._trash.put(source)
        except OSError as e:
            logger.warning("Trashing %s failed: %s", source, e)
            return self._failure(index, action, FailureKind.TRASH_FAILED)

        return self._record(
            index,
            action,
            ExecutionOutcome.SUCCEEDED,
            f"Moved to trash at {trashed}. {action.reason}",
            result_path=str(trashed),
        )

    def _failure(
        self,
        index: int,
        action: PlannedAction,
        kind: FailureKind,
        *,
        outcome: ExecutionOutcome = ExecutionOutcome.FAILED,
        destination: str | None = None,
    ) -> ExecutionRecord:
        destination = destination or action.destination
        return self._record(
            index,
            action,
            outcome,
            failure_reason(kind, action.target.path, destination),
            failure=kind,
            destination=destination,
        )

    def _record(
        self,
        index: int,
        action: PlannedAction,
        outcome: ExecutionOutcome,
        reason: str,
        *,
        failure: FailureKind | None = None,
        destination: str | None = None,
        result_path: str | None = None,
    ) -> ExecutionRecord:
        logger.debug("Action %d (%s) on %s: %s", index, action.kind.value, action.target.path, outcome.value)
        return ExecutionRecord(
            index=index,
            kind=action.kind,
            source=action.target.path,
            outcome=outcome,
            reason=reason,
            failure=failure,
            destination=destination or action.destination,
            result_path=result_path,
            timestamp=utc_now(),
        )
