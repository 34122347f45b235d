"""Data models for filetidy.

This package contains the immutable value types shared by the planner,
the execution and undo engines, the observer and the staleness bridge.
"""

from filetidy.models.event import (
    AdvisoryKind,
    EventKind,
    EventSource,
    NormalizedEvent,
    ObserverAdvisory,
)
from filetidy.models.execution import (
    ExecutionLog,
    ExecutionOutcome,
    ExecutionRecord,
    FailureKind,
    UndoCause,
    UndoLog,
    UndoOutcome,
    UndoRecord,
)
from filetidy.models.history import HistoryEntry, HistoryEntryType
from filetidy.models.plan import ActionKind, ActionPlan, PlannedAction
from filetidy.models.rule import (
    Condition,
    CopyOutcome,
    CreatedBefore,
    DeleteOutcome,
    ExtensionEquals,
    IsDirectory,
    ModifiedBefore,
    MoveOutcome,
    NameContains,
    Outcome,
    RenameOutcome,
    Rule,
    SizeGreaterThan,
    SkipOutcome,
)
from filetidy.models.snapshot import FileSnapshot
from filetidy.models.staleness import ScanSuggestion, StalenessLevel, StalenessState, Urgency

__all__ = [
    "ActionKind",
    "ActionPlan",
    "AdvisoryKind",
    "Condition",
    "CopyOutcome",
    "CreatedBefore",
    "DeleteOutcome",
    "EventKind",
    "EventSource",
    "ExecutionLog",
    "ExecutionOutcome",
    "ExecutionRecord",
    "ExtensionEquals",
    "FailureKind",
    "FileSnapshot",
    "HistoryEntry",
    "HistoryEntryType",
    "IsDirectory",
    "ModifiedBefore",
    "MoveOutcome",
    "NameContains",
    "NormalizedEvent",
    "ObserverAdvisory",
    "Outcome",
    "PlannedAction",
    "RenameOutcome",
    "Rule",
    "ScanSuggestion",
    "SizeGreaterThan",
    "SkipOutcome",
    "StalenessLevel",
    "StalenessState",
    "UndoCause",
    "UndoLog",
    "UndoOutcome",
    "UndoRecord",
    "Urgency",
]
