"""History entry model for the audit trail.

Each line of the history file holds one completed execution log or undo
log, tagged with its type, so the file can be replayed by a human or a
tool without any other context.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from filetidy.models.execution import ExecutionLog, UndoLog


class HistoryEntryType(str, Enum):
    """Type of log recorded in history.

    Attributes:
        EXECUTION: A plan execution.
        UNDO: An undo run over a previous execution.
    """

    EXECUTION = "execution"
    UNDO = "undo"


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One persisted log.

    Attributes:
        entry_type: Which kind of log this entry holds.
        log: The execution or undo log.
    """

    entry_type: HistoryEntryType
    log: ExecutionLog | UndoLog

    def __post_init__(self) -> None:
        """Validate that the log matches the entry type."""
        expected = ExecutionLog if self.entry_type == HistoryEntryType.EXECUTION else UndoLog
        if not isinstance(self.log, expected):
            msg = f"{self.entry_type.value} entry requires {expected.__name__}"
            raise ValueError(msg)

    @property
    def id(self) -> str:
        """ID of the wrapped log."""
        return self.log.id

    @property
    def timestamp(self) -> str:
        """Start time of the wrapped log (ISO 8601)."""
        return self.log.started_at

    @classmethod
    def for_execution(cls, log: ExecutionLog) -> HistoryEntry:
        """Wrap an execution log."""
        return cls(entry_type=HistoryEntryType.EXECUTION, log=log)

    @classmethod
    def for_undo(cls, log: UndoLog) -> HistoryEntry:
        """Wrap an undo log."""
        return cls(entry_type=HistoryEntryType.UNDO, log=log)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {"type": self.entry_type.value, "log": self.log.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If the type or log data is invalid.
        """
        entry_type = HistoryEntryType(data["type"])
        if entry_type == HistoryEntryType.EXECUTION:
            return cls(entry_type=entry_type, log=ExecutionLog.from_dict(data["log"]))
        return cls(entry_type=entry_type, log=UndoLog.from_dict(data["log"]))

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage.

        Returns:
            Single JSON line (no trailing newline).
        """
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> HistoryEntry:
        """Deserialize from JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls.from_dict(json.loads(line.strip()))
