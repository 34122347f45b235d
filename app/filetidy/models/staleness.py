"""Scan staleness models.

Staleness is a heuristic confidence level that earlier scan results may
no longer describe the filesystem. Suggestions derived from it are
advisory and never start a scan on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class StalenessLevel(str, Enum):
    """How far a root's last scan may have drifted from reality.

    Attributes:
        FRESH: No events since the last scan.
        POSSIBLY_STALE: Some events arrived; worth knowing about.
        STALE: Enough change or time that a rescan is recommended.
    """

    FRESH = "fresh"
    POSSIBLY_STALE = "possibly_stale"
    STALE = "stale"


class Urgency(str, Enum):
    """How strongly a rescan is recommended."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class StalenessState:
    """Staleness bookkeeping for one watched root.

    A root with no recorded scan starts out stale.

    Attributes:
        root: Canonical path of the watched root.
        last_scan_at: When the last scan completed, if ever.
        pending_events: Events received since the last scan.
        last_event_at: Timestamp of the most recent event, if any.
        level: Current staleness level.
    """

    root: str
    last_scan_at: datetime | None = None
    pending_events: int = 0
    last_event_at: datetime | None = None
    level: StalenessLevel = StalenessLevel.STALE

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "root": self.root,
            "last_scan_at": self.last_scan_at.isoformat() if self.last_scan_at else None,
            "pending_events": self.pending_events,
            "last_event_at": self.last_event_at.isoformat() if self.last_event_at else None,
            "level": self.level.value,
        }


@dataclass(frozen=True, slots=True)
class ScanSuggestion:
    """Advisory recommendation to rescan a root.

    Attributes:
        root: Canonical path of the root to rescan.
        reason: Deterministic human-readable explanation.
        urgency: How strongly the rescan is recommended.
        timestamp: When the suggestion was produced.
    """

    root: str
    reason: str
    urgency: Urgency
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "root": self.root,
            "reason": self.reason,
            "urgency": self.urgency.value,
            "timestamp": self.timestamp.isoformat(),
        }
