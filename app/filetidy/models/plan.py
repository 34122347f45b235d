"""Plan models.

A plan connects file snapshots (evidence) to concrete actions (intent).
Every evaluated snapshot yields exactly one planned action; skipping is
itself an action and always carries a reason.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from filetidy.models.snapshot import FileSnapshot


class ActionKind(str, Enum):
    """Concrete action performed on a single file.

    Attributes:
        MOVE: Move the file to ``destination``.
        COPY: Copy the file to ``destination``.
        DELETE: Move the file to the recoverable trash.
        RENAME: Rename the file in place to ``new_name``.
        SKIP: Leave the file alone.
    """

    MOVE = "move"
    COPY = "copy"
    DELETE = "delete"
    RENAME = "rename"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class PlannedAction:
    """A single intended action on a single file.

    Attributes:
        target: Snapshot of the file the action applies to.
        kind: Which action to perform.
        reason: Human-readable explanation, never empty.
        destination: Full destination path (move and copy only).
        new_name: New file name (rename only).
    """

    target: FileSnapshot
    kind: ActionKind
    reason: str
    destination: str | None = None
    new_name: str | None = None

    def __post_init__(self) -> None:
        """Validate action data after initialization."""
        if not self.reason or not self.reason.strip():
            msg = "Planned action reason cannot be empty"
            raise ValueError(msg)
        if self.kind in (ActionKind.MOVE, ActionKind.COPY) and not self.destination:
            msg = f"{self.kind.value} action requires a destination"
            raise ValueError(msg)
        if self.kind == ActionKind.RENAME and not self.new_name:
            msg = "rename action requires a new name"
            raise ValueError(msg)

    @property
    def is_skip(self) -> bool:
        """Check if this action leaves the file alone."""
        return self.kind == ActionKind.SKIP

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output.

        Returns:
            Dictionary representation of the planned action.
        """
        return {
            "target": self.target.to_dict(),
            "kind": self.kind.value,
            "reason": self.reason,
            "destination": self.destination,
            "new_name": self.new_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlannedAction:
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing action data.

        Returns:
            PlannedAction instance.
        """
        return cls(
            target=FileSnapshot.from_dict(data["target"]),
            kind=ActionKind(data["kind"]),
            reason=data["reason"],
            destination=data.get("destination"),
            new_name=data.get("new_name"),
        )


@dataclass(frozen=True, slots=True)
class ActionPlan:
    """Ordered, immutable collection of planned actions.

    A plan is reviewed and approved as a whole before execution and is
    never modified afterwards.

    Attributes:
        actions: One planned action per evaluated file, in input order.
    """

    actions: tuple[PlannedAction, ...] = ()

    def __len__(self) -> int:
        return len(self.actions)

    def count(self, kind: ActionKind) -> int:
        """Count actions of a given kind."""
        return sum(1 for action in self.actions if action.kind == kind)

    def summary_lines(self) -> list[str]:
        """Describe the plan in plain language for review.

        Returns:
            Lines suitable for display before asking for approval.
        """
        lines = [f"{len(self.actions)} item(s) were analyzed."]
        phrases = (
            (ActionKind.MOVE, "will be moved to a new location"),
            (ActionKind.COPY, "will be copied to a new location"),
            (ActionKind.RENAME, "will be renamed in place"),
            (ActionKind.DELETE, "will be moved to the filetidy trash (recoverable)"),
            (ActionKind.SKIP, "will be left alone"),
        )
        for kind, phrase in phrases:
            n = self.count(kind)
            if n:
                lines.append(f"{n} {phrase}.")
        lines.append("Nothing changes until the plan is approved.")
        return lines

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {"actions": [action.to_dict() for action in self.actions]}

    def to_json(self) -> str:
        """Serialize to a stable JSON string.

        Identical plans always produce identical text.
        """
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionPlan:
        """Deserialize from dictionary."""
        return cls(actions=tuple(PlannedAction.from_dict(item) for item in data["actions"]))
