"""Audit history persistence.

This module provides the HistoryStore class for persisting and querying
execution and undo logs in a JSONL file.
"""

import json
import logging
from pathlib import Path

from filetidy.core.paths import ensure_state_dir, get_state_dir
from filetidy.models.execution import ExecutionLog, UndoLog
from filetidy.models.history import HistoryEntry

logger = logging.getLogger(__name__)


class HistoryStore:
    """Manages the append-only history file.

    Storage location: ~/.local/state/filetidy/history.jsonl

    Each line is a complete JSON object representing one HistoryEntry.
    Lines are only ever appended; an undo is recorded as a new entry that
    references the execution log it reverses.

    Attributes:
        state_dir: Directory containing the history file.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize HistoryStore.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/filetidy
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to history.jsonl file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record(self, entry: HistoryEntry) -> None:
        """Append an entry to the history file.

        Creates file and parent directories if they don't exist.

        Args:
            entry: The history entry to record.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        if self._state_dir == get_state_dir():
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(entry.to_json_line() + "\n")
            f.flush()

    def record_execution(self, log: ExecutionLog) -> None:
        """Append an execution log."""
        self.record(HistoryEntry.for_execution(log))

    def record_undo(self, log: UndoLog) -> None:
        """Append an undo log."""
        self.record(HistoryEntry.for_undo(log))

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        """Read history entries, newest first.

        Args:
            limit: Maximum number of entries to return.
                  If None, returns all entries.

        Returns:
            List of HistoryEntry, newest first.
            Returns empty list if file doesn't exist.
        """
        if not self.history_path.exists():
            return []

        entries: list[HistoryEntry] = []

        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    entries.append(HistoryEntry.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
                    logger.warning(
                        "Skipping corrupt history line %d: %s",
                        line_num,
                        str(e),
                    )

        entries.reverse()

        if limit is not None:
            return entries[:limit]

        return entries

    def get_execution_log(self, log_id: str) -> ExecutionLog | None:
        """Find an execution log by ID or unique ID prefix.

        Args:
            log_id: Full ID or a prefix of it (as shown by `history`).

        Returns:
            The matching ExecutionLog, or None if no single log matches.
        """
        matches = [
            entry.log
            for entry in self.get_history()
            if isinstance(entry.log, ExecutionLog) and entry.log.id.startswith(log_id)
        ]
        if len(matches) != 1:
            return None
        return matches[0]

    def get_last_undoable(self) -> ExecutionLog | None:
        """Get the most recent execution log that has not been undone.

        Only logs with at least one succeeded record qualify.

        Returns:
            Most recent undoable ExecutionLog, or None.
        """
        history = self.get_history()
        undone = self.get_undone_log_ids(history)

        for entry in history:
            log = entry.log
            if isinstance(log, ExecutionLog) and log.undoable and log.id not in undone:
                return log

        return None

    def get_undone_log_ids(self, history: list[HistoryEntry] | None = None) -> set[str]:
        """Collect IDs of execution logs referenced by undo entries.

        Args:
            history: Entries to inspect. Reads the history file if None.
        """
        if history is None:
            history = self.get_history()
        return {entry.log.execution_log_id for entry in history if isinstance(entry.log, UndoLog)}
