"""Filesystem change event models.

Events are hints, not facts. They may arrive late, duplicated or
coalesced, and the path they name may no longer be in the state the
event describes. Nothing downstream may treat an event as proof.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class EventKind(str, Enum):
    """Normalized kind of a change notification."""

    CREATED = "created"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"


class EventSource(str, Enum):
    """Where an event originated."""

    FILESYSTEM = "filesystem"
    SYNTHETIC = "synthetic"


@dataclass(frozen=True, slots=True)
class NormalizedEvent:
    """A single normalized change hint.

    Attributes:
        path: Path the change notification referred to.
        kind: Normalized event kind.
        timestamp: When the observer received the notification.
        source: Origin of the event.
    """

    path: str
    kind: EventKind
    timestamp: datetime
    source: EventSource = EventSource.FILESYSTEM

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "path": self.path,
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source.value,
        }


class AdvisoryKind(str, Enum):
    """Observer conditions surfaced to subscribers instead of events.

    Attributes:
        PERMISSION_DENIED: A watched root became inaccessible, moved or vanished.
        STREAM_CREATION_FAILED: The notification stream could not be started.
        STREAM_STOPPED: The notification stream ended unexpectedly.
        EVENTS_POSSIBLY_DROPPED: Notifications were coalesced or lost; a
            rescan is recommended but never started automatically.
    """

    PERMISSION_DENIED = "permission_denied"
    STREAM_CREATION_FAILED = "stream_creation_failed"
    STREAM_STOPPED = "stream_stopped"
    EVENTS_POSSIBLY_DROPPED = "events_possibly_dropped"


ADVISORY_MESSAGES: dict[AdvisoryKind, str] = {
    AdvisoryKind.PERMISSION_DENIED: "Access to a watched folder was lost, or the folder was moved or deleted.",
    AdvisoryKind.STREAM_CREATION_FAILED: "Change notifications could not be started for the watched folders.",
    AdvisoryKind.STREAM_STOPPED: "Change notifications stopped unexpectedly.",
    AdvisoryKind.EVENTS_POSSIBLY_DROPPED: "Some changes may have been missed; consider a manual rescan.",
}


@dataclass(frozen=True, slots=True)
class ObserverAdvisory:
    """An advisory error from the observer. Never fatal, never auto-recovered.

    Attributes:
        kind: Enumerated advisory condition.
        timestamp: When the condition was observed.
        path: Path involved, if any.
    """

    kind: AdvisoryKind
    timestamp: datetime
    path: str | None = None

    @property
    def message(self) -> str:
        """Human-readable explanation derived from the advisory kind."""
        return ADVISORY_MESSAGES[self.kind]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "path": self.path,
            "message": self.message,
        }
