"""Staleness bridge.

Turns normalized change events into a per-root staleness level and, when
a root becomes stale, into advisory rescan suggestions. The bridge only
answers "may our last scan be out of date?". It never scans, plans or
executes anything itself.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from filetidy.core.config import StalenessSettings
from filetidy.models.event import EventKind, NormalizedEvent
from filetidy.models.staleness import ScanSuggestion, StalenessLevel, StalenessState, Urgency

logger = logging.getLogger(__name__)

NO_SCAN_REASON = "No scan has been recorded for this folder yet."

EVENT_KIND_REASONS: dict[EventKind, str] = {
    EventKind.REMOVED: "A file was deleted. Scan data may be outdated.",
    EventKind.RENAMED: "A file was renamed. Scan data may be outdated.",
    EventKind.CREATED: "New files detected. Consider rescanning.",
    EventKind.MODIFIED: "Files have been modified since last scan.",
}


class SuggestionSubscriber(ABC):
    """Receiver of rescan suggestions. Acting on them is up to the receiver."""

    @abstractmethod
    def on_suggestion(self, suggestion: ScanSuggestion) -> None:
        """Receive a rescan suggestion."""


def canonical_root(path: str) -> str:
    """Canonicalize a path for root attribution.

    Expands ``~``, makes the path absolute and strips trailing separators.
    Symlinks are not resolved, so a root is matched by the path it was
    registered under.
    """
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


def _is_within(path: str, root: str) -> bool:
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _as_aware(moment: datetime) -> datetime:
    # Naive times are taken as UTC so they subtract cleanly from the clock.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


class StalenessBridge:
    """Tracks how stale each watched root's last scan may be.

    All reads and writes of the per-root state go through one lock, so a
    caller can never observe a half-applied transition. Suggestions are
    delivered after the lock is released.

    Attributes:
        settings: Thresholds and cooldown.
    """

    def __init__(
        self,
        settings: StalenessSettings | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the bridge.

        Args:
            settings: Thresholds. Defaults to StalenessSettings().
            clock: Current time, used for all elapsed-time arithmetic.
        """
        self.settings = settings if settings is not None else StalenessSettings()
        self._clock = clock
        self._lock = threading.Lock()
        self._states: dict[str, StalenessState] = {}
        self._last_suggested_at: dict[str, datetime] = {}
        self._subscribers: list[SuggestionSubscriber] = []

    # =========================================================================
    # Subscription
    # =========================================================================

    def subscribe(self, subscriber: SuggestionSubscriber) -> None:
        """Register a suggestion subscriber. Registering twice has no effect."""
        with self._lock:
            if subscriber not in self._subscribers:
                self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: SuggestionSubscriber) -> None:
        """Remove a suggestion subscriber."""
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    # =========================================================================
    # Roots
    # =========================================================================

    def register_root(self, root: str) -> StalenessState:
        """Start tracking a root. A root with no recorded scan is stale.

        Registering an already tracked root keeps its current state.

        Returns:
            The root's current state.
        """
        key = canonical_root(root)
        with self._lock:
            if key not in self._states:
                self._states[key] = StalenessState(root=key)
                logger.debug("Registered root %s", key)
            return self._states[key]

    def unregister_root(self, root: str) -> None:
        """Stop tracking a root and forget its cooldown."""
        key = canonical_root(root)
        with self._lock:
            self._states.pop(key, None)
            self._last_suggested_at.pop(key, None)

    def roots(self) -> list[str]:
        """Registered roots, in registration order."""
        with self._lock:
            return list(self._states)

    # =========================================================================
    # Transitions
    # =========================================================================

    def handle_event(self, event: NormalizedEvent) -> ScanSuggestion | None:
        """Apply one event to the root that owns its path.

        Events outside every registered root are ignored.

        Returns:
            The suggestion emitted for this event, if any.
        """
        path = canonical_root(event.path)
        with self._lock:
            root = self._find_root(path)
            if root is None:
                logger.debug("Ignoring event outside watched roots: %s", event.path)
                return None

            now = _as_aware(self._clock())
            state = self._states[root]
            pending = state.pending_events + 1
            level = self._compute_level(state.last_scan_at, pending, event.kind, now)
            state = replace(state, pending_events=pending, last_event_at=event.timestamp, level=level)
            self._states[root] = state

            suggestion = self._maybe_suggest(state, event.kind, now)
            subscribers = list(self._subscribers) if suggestion else []

        if suggestion is not None:
            logger.info("Suggesting rescan of %s (%s)", root, suggestion.urgency.value)
            for subscriber in subscribers:
                subscriber.on_suggestion(suggestion)
        return suggestion

    def mark_scan_completed(self, root: str, at: datetime | None = None) -> StalenessState | None:
        """Reset a root after a completed scan.

        Pending events are cleared and the level becomes fresh. Unregistered
        roots are ignored.

        Args:
            root: Root that was scanned.
            at: When the scan completed. Defaults to now.

        Returns:
            The reset state, or None if the root is not registered.
        """
        key = canonical_root(root)
        with self._lock:
            state = self._states.get(key)
            if state is None:
                return None
            state = replace(
                state,
                last_scan_at=_as_aware(at if at is not None else self._clock()),
                pending_events=0,
                last_event_at=None,
                level=StalenessLevel.FRESH,
            )
            self._states[key] = state
            return state

    # =========================================================================
    # Queries
    # =========================================================================

    def staleness_of(self, root: str) -> StalenessState | None:
        """Current state of a root, or None if it is not registered."""
        with self._lock:
            return self._states.get(canonical_root(root))

    def should_suggest_rescan(self, root: str) -> bool:
        """Whether a registered root is currently stale."""
        state = self.staleness_of(root)
        return state is not None and state.level == StalenessLevel.STALE

    # =========================================================================
    # Internals (called with the lock held)
    # =========================================================================

    def _find_root(self, path: str) -> str | None:
        # Longest matching root wins when roots overlap.
        matches = [root for root in self._states if _is_within(path, root)]
        if not matches:
            return None
        return max(matches, key=len)

    def _compute_level(
        self,
        last_scan_at: datetime | None,
        pending: int,
        kind: EventKind,
        now: datetime,
    ) -> StalenessLevel:
        settings = self.settings
        if last_scan_at is None:
            return StalenessLevel.STALE
        if (now - last_scan_at).total_seconds() > settings.stale_after_seconds:
            return StalenessLevel.STALE
        if pending >= settings.event_count_threshold:
            return StalenessLevel.STALE
        if kind in (EventKind.REMOVED, EventKind.RENAMED):
            if pending >= settings.removal_escalation_count:
                return StalenessLevel.STALE
            return StalenessLevel.POSSIBLY_STALE
        if pending > 0:
            return StalenessLevel.POSSIBLY_STALE
        return StalenessLevel.FRESH

    def _maybe_suggest(self, state: StalenessState, kind: EventKind, now: datetime) -> ScanSuggestion | None:
        if state.level != StalenessLevel.STALE:
            return None

        last = self._last_suggested_at.get(state.root)
        if last is not None and (now - last).total_seconds() < self.settings.suggestion_cooldown_seconds:
            return None

        self._last_suggested_at[state.root] = now
        return ScanSuggestion(
            root=state.root,
            reason=self._build_reason(state, kind, now),
            urgency=self._urgency(state.pending_events),
            timestamp=now,
        )

    def _build_reason(self, state: StalenessState, kind: EventKind, now: datetime) -> str:
        threshold = self.settings.event_count_threshold
        if state.pending_events >= threshold:
            return f"{state.pending_events} changes detected since last scan."
        if state.last_scan_at is None:
            return NO_SCAN_REASON
        minutes = int((now - state.last_scan_at).total_seconds() // 60)
        if minutes > 5:
            return f"Last scan was {minutes} minutes ago and changes have occurred."
        return EVENT_KIND_REASONS[kind]

    def _urgency(self, pending: int) -> Urgency:
        threshold = self.settings.event_count_threshold
        if pending >= threshold * 2:
            return Urgency.HIGH
        if pending >= threshold:
            return Urgency.MEDIUM
        return Urgency.LOW
