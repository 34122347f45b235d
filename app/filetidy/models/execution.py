"""Execution and undo log models.

Logs are the audit trail of what was attempted and what happened. Each
record is self-contained so it can be persisted, displayed or reversed
without access to the plan or the rules that produced it.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from filetidy.models.plan import ActionKind


def new_log_id() -> str:
    """Generate a short unique log identifier (12 hex characters)."""
    return uuid.uuid4().hex[:12]


def utc_now() -> str:
    """Current time as an ISO 8601 string with timezone."""
    return datetime.now(UTC).isoformat()


# =============================================================================
# Execution
# =============================================================================


class ExecutionOutcome(str, Enum):
    """Terminal state of a single planned action.

    Attributes:
        SUCCEEDED: The action was applied.
        SKIPPED: The action was deliberately not applied.
        FAILED: The action was attempted and did not complete.
    """

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Enumerated cause for a skipped or failed action.

    Attributes:
        DESTINATION_EXISTS: Something already occupies the destination path.
        PERMISSION_DENIED: The operating system refused the operation.
        SOURCE_MISSING: The file is no longer where the snapshot saw it.
        PARENT_CREATE_FAILED: The destination folder could not be created.
        TRASH_FAILED: The file could not be moved to the trash.
        INVALID_NAME: A rename would produce a name that is not a plain file name.
        UNKNOWN: Any other operating system error.
    """

    DESTINATION_EXISTS = "destination_exists"
    PERMISSION_DENIED = "permission_denied"
    SOURCE_MISSING = "source_missing"
    PARENT_CREATE_FAILED = "parent_create_failed"
    TRASH_FAILED = "trash_failed"
    INVALID_NAME = "invalid_name"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ExecutionRecord:
    """What happened to one planned action.

    Attributes:
        index: Position of the action in the executed plan.
        kind: Action kind that was attempted.
        source: Path of the file when the plan was made.
        outcome: Terminal state of the action.
        reason: Human-readable explanation of the outcome.
        failure: Enumerated cause when not succeeded by choice or error.
        destination: Destination requested by the plan (move, copy, rename).
        result_path: Where the file (or copy) now lives after success.
            For deletes this is the location inside the trash.
        timestamp: When the action finished (ISO 8601).
    """

    index: int
    kind: ActionKind
    source: str
    outcome: ExecutionOutcome
    reason: str
    failure: FailureKind | None = None
    destination: str | None = None
    result_path: str | None = None
    timestamp: str = ""

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.reason:
            msg = "Execution record reason cannot be empty"
            raise ValueError(msg)

    @property
    def succeeded(self) -> bool:
        """Check if the action was applied."""
        return self.outcome == ExecutionOutcome.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the record.
        """
        return {
            "index": self.index,
            "kind": self.kind.value,
            "source": self.source,
            "outcome": self.outcome.value,
            "reason": self.reason,
            "failure": self.failure.value if self.failure else None,
            "destination": self.destination,
            "result_path": self.result_path,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutionRecord:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If an enum value is invalid.
        """
        failure = data.get("failure")
        return cls(
            index=data["index"],
            kind=ActionKind(data["kind"]),
            source=data["source"],
            outcome=ExecutionOutcome(data["outcome"]),
            reason=data["reason"],
            failure=FailureKind(failure) if failure else None,
            destination=data.get("destination"),
            result_path=data.get("result_path"),
            timestamp=data.get("timestamp", ""),
        )


@dataclass(frozen=True, slots=True)
class ExecutionLog:
    """Ordered record of one plan execution.

    Attributes:
        id: Unique identifier (12-character hex string).
        started_at: When execution began (ISO 8601).
        finished_at: When the last action finished (ISO 8601).
        records: One record per planned action, in plan order.
    """

    id: str
    started_at: str
    finished_at: str
    records: tuple[ExecutionRecord, ...] = ()

    def count(self, outcome: ExecutionOutcome) -> int:
        """Count records with a given outcome."""
        return sum(1 for record in self.records if record.outcome == outcome)

    @property
    def undoable(self) -> bool:
        """Check if any record can be reversed."""
        return any(record.succeeded for record in self.records)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "records": [record.to_dict() for record in self.records],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutionLog:
        """Deserialize from dictionary."""
        return cls(
            id=data["id"],
            started_at=data["started_at"],
            finished_at=data["finished_at"],
            records=tuple(ExecutionRecord.from_dict(item) for item in data["records"]),
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))


# =============================================================================
# Undo
# =============================================================================


class UndoOutcome(str, Enum):
    """Terminal state of a single undo attempt.

    Attributes:
        RESTORED: The original state was restored.
        SKIPPED: Nothing was done (already restored, not applicable, unsafe).
        FAILED: The reversal was attempted and did not complete.
    """

    RESTORED = "restored"
    SKIPPED = "skipped"
    FAILED = "failed"


class UndoCause(str, Enum):
    """Enumerated cause behind a skipped or failed undo.

    Attributes:
        NOT_APPLICABLE: The original action did not succeed.
        ALREADY_RESTORED: Live state already matches the pre-action state.
        SOURCE_MISSING: The file to move back is gone.
        DESTINATION_OCCUPIED: Something now occupies the original location.
        ORIGINAL_LOCATION_UNKNOWN: The log lacks the path needed to reverse.
        PERMISSION_DENIED: The operating system refused the reversal.
        UNKNOWN: Any other operating system error.
    """

    NOT_APPLICABLE = "not_applicable"
    ALREADY_RESTORED = "already_restored"
    SOURCE_MISSING = "source_missing"
    DESTINATION_OCCUPIED = "destination_occupied"
    ORIGINAL_LOCATION_UNKNOWN = "original_location_unknown"
    PERMISSION_DENIED = "permission_denied"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class UndoRecord:
    """What happened when reversing one execution record.

    Attributes:
        index: Index of the execution record this undo refers to.
        kind: Action kind of the original record.
        path: Original path of the file.
        outcome: Terminal state of the undo attempt.
        reason: Human-readable explanation.
        cause: Enumerated cause for skips and failures.
        timestamp: When the attempt finished (ISO 8601).
    """

    index: int
    kind: ActionKind
    path: str
    outcome: UndoOutcome
    reason: str
    cause: UndoCause | None = None
    timestamp: str = ""

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.reason:
            msg = "Undo record reason cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "index": self.index,
            "kind": self.kind.value,
            "path": self.path,
            "outcome": self.outcome.value,
            "reason": self.reason,
            "cause": self.cause.value if self.cause else None,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UndoRecord:
        """Deserialize from dictionary."""
        cause = data.get("cause")
        return cls(
            index=data["index"],
            kind=ActionKind(data["kind"]),
            path=data["path"],
            outcome=UndoOutcome(data["outcome"]),
            reason=data["reason"],
            cause=UndoCause(cause) if cause else None,
            timestamp=data.get("timestamp", ""),
        )


@dataclass(frozen=True, slots=True)
class UndoLog:
    """Ordered record of one undo run over an execution log.

    Attributes:
        id: Unique identifier (12-character hex string).
        execution_log_id: ID of the execution log being reversed.
        started_at: When the undo run began (ISO 8601).
        records: One record per execution record, last action first.
    """

    id: str
    execution_log_id: str
    started_at: str
    records: tuple[UndoRecord, ...] = ()

    def count(self, outcome: UndoOutcome) -> int:
        """Count records with a given outcome."""
        return sum(1 for record in self.records if record.outcome == outcome)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "execution_log_id": self.execution_log_id,
            "started_at": self.started_at,
            "records": [record.to_dict() for record in self.records],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UndoLog:
        """Deserialize from dictionary."""
        return cls(
            id=data["id"],
            execution_log_id=data["execution_log_id"],
            started_at=data["started_at"],
            records=tuple(UndoRecord.from_dict(item) for item in data["records"]),
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))
