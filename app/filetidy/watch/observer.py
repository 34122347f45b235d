"""Filesystem change observation.

The observer wraps a change source (the OS notification mechanism, or a
synthetic one in tests) and turns its raw per-path flag sets into
NormalizedEvent values or ObserverAdvisory signals for its subscribers.

Events are hints. The observer never deduplicates, never reorders and
never infers intent; unrecognized flag combinations are dropped.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Flag, auto
from typing import Any

from watchdog.events import (
    DirDeletedEvent,
    DirMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from filetidy.models.event import (
    AdvisoryKind,
    EventKind,
    EventSource,
    NormalizedEvent,
    ObserverAdvisory,
)

logger = logging.getLogger(__name__)


class ChangeFlag(Flag):
    """Raw change flags reported by a change source.

    Several flags may be set on a single change.
    """

    NONE = 0
    CREATED = auto()
    REMOVED = auto()
    RENAMED = auto()
    MODIFIED = auto()
    METADATA_MODIFIED = auto()
    MUST_RESCAN = auto()
    ROOT_CHANGED = auto()


@dataclass(frozen=True, slots=True)
class RawChange:
    """One raw change signal.

    Attributes:
        path: Path the signal refers to.
        flags: Flags set by the source.
    """

    path: str
    flags: ChangeFlag


DeliverCallback = Callable[[Sequence[RawChange]], None]
StoppedCallback = Callable[[], None]


class ChangeSourceError(Exception):
    """Raised when a change source cannot start its notification stream."""


class ChangeSource(ABC):
    """Capability interface for a raw change notification mechanism."""

    source_tag: EventSource = EventSource.FILESYSTEM

    @abstractmethod
    def begin(self, paths: Sequence[str], deliver: DeliverCallback, stopped: StoppedCallback) -> None:
        """Start delivering raw changes for ``paths``.

        Args:
            paths: Directories to watch recursively.
            deliver: Called with each batch of raw changes.
            stopped: Called if the stream ends without end() being called.

        Raises:
            ChangeSourceError: If the stream cannot be created.
        """

    @abstractmethod
    def end(self) -> None:
        """Stop the stream and release its resources. Must be idempotent."""

    def is_alive(self) -> bool:
        """Whether the stream is still running."""
        return True


class EventSubscriber(ABC):
    """Receiver of observer output.

    Both methods run on the delivery path and must return quickly.
    """

    @abstractmethod
    def on_event(self, event: NormalizedEvent) -> None:
        """Receive a normalized change event."""

    @abstractmethod
    def on_advisory(self, advisory: ObserverAdvisory) -> None:
        """Receive an advisory error."""


def normalize(
    change: RawChange,
    timestamp: datetime,
    source: EventSource = EventSource.FILESYSTEM,
) -> NormalizedEvent | ObserverAdvisory | None:
    """Map a raw change to exactly one event, an advisory, or nothing.

    Precedence: dropped-events and root-changed signals are advisories and
    are never surfaced as events. After that, created wins over removed,
    removed over renamed, and renamed over modified.

    Args:
        change: Raw change from the source.
        timestamp: Receive time to stamp on the result.
        source: Source tag for events.

    Returns:
        The normalized event or advisory, or None for unrecognized flags.
    """
    flags = change.flags
    if ChangeFlag.MUST_RESCAN in flags:
        return ObserverAdvisory(kind=AdvisoryKind.EVENTS_POSSIBLY_DROPPED, timestamp=timestamp, path=change.path)
    if ChangeFlag.ROOT_CHANGED in flags:
        return ObserverAdvisory(kind=AdvisoryKind.PERMISSION_DENIED, timestamp=timestamp, path=change.path)

    if ChangeFlag.CREATED in flags:
        kind = EventKind.CREATED
    elif ChangeFlag.REMOVED in flags:
        kind = EventKind.REMOVED
    elif ChangeFlag.RENAMED in flags:
        kind = EventKind.RENAMED
    elif flags & (ChangeFlag.MODIFIED | ChangeFlag.METADATA_MODIFIED):
        kind = EventKind.MODIFIED
    else:
        return None

    return NormalizedEvent(path=change.path, kind=kind, timestamp=timestamp, source=source)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ChangeObserver:
    """Owns one change source and fans its output out to subscribers.

    start() and stop() are idempotent. Delivery that races with stop() is
    dropped rather than dispatched.

    Example:
        >>> with ChangeObserver(WatchdogChangeSource()) as observer:
        ...     observer.subscribe(my_subscriber)
        ...     observer.start(["/home/user/Downloads"])
    """

    def __init__(self, source: ChangeSource, clock: Callable[[], datetime] = _utc_now) -> None:
        """Initialize the observer.

        Args:
            source: Raw change source to wrap.
            clock: Returns the receive timestamp for events.
        """
        self._source = source
        self._clock = clock
        self._lock = threading.RLock()
        self._observing = False
        self._subscribers: list[EventSubscriber] = []

    @property
    def is_observing(self) -> bool:
        """Whether the source stream is currently running."""
        with self._lock:
            return self._observing

    def subscribe(self, subscriber: EventSubscriber) -> None:
        """Register a subscriber. Registering twice has no effect."""
        with self._lock:
            if subscriber not in self._subscribers:
                self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: EventSubscriber) -> None:
        """Remove a subscriber. Unknown subscribers are ignored."""
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    def start(self, paths: Sequence[str]) -> bool:
        """Start observing ``paths``.

        A second start while observing, or a start with no paths, is a
        no-op. If the source cannot create its stream, subscribers get a
        stream-creation-failed advisory and the observer stays stopped.

        Returns:
            True if observation is running after the call.
        """
        with self._lock:
            if self._observing:
                return True
            if not paths:
                return False
            try:
                self._source.begin(list(paths), self._deliver, self._on_source_stopped)
            except ChangeSourceError as e:
                logger.warning("Could not start change notifications: %s", e)
                failed = True
            else:
                self._observing = True
                failed = False
                logger.info("Observing %d path(s)", len(paths))

        if failed:
            self._dispatch_advisory(ObserverAdvisory(kind=AdvisoryKind.STREAM_CREATION_FAILED, timestamp=self._clock()))
            return False
        return True

    def stop(self) -> None:
        """Stop observing and release the source. No-op when not observing."""
        with self._lock:
            if not self._observing:
                return
            self._observing = False
        # Outside the lock: ending may join a delivery thread that is
        # waiting for it.
        self._source.end()
        logger.info("Stopped observing")

    def check_source(self) -> bool:
        """Report an unexpected stream stop, if one happened.

        Returns:
            True if observation is still running.
        """
        with self._lock:
            observing = self._observing
        if observing and not self._source.is_alive():
            self._on_source_stopped()
            return False
        return observing

    def __enter__(self) -> "ChangeObserver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _deliver(self, changes: Sequence[RawChange]) -> None:
        with self._lock:
            if not self._observing:
                return
            subscribers = list(self._subscribers)

        for change in changes:
            result = normalize(change, self._clock(), self._source.source_tag)
            if result is None:
                logger.debug("Dropping unrecognized change flags %s for %s", change.flags, change.path)
            elif isinstance(result, ObserverAdvisory):
                self._dispatch_advisory(result, subscribers)
            else:
                for subscriber in subscribers:
                    self._call(subscriber.on_event, result)

    def _on_source_stopped(self) -> None:
        with self._lock:
            if not self._observing:
                return
            self._observing = False
        self._source.end()
        logger.warning("Change notification stream stopped unexpectedly")
        self._dispatch_advisory(ObserverAdvisory(kind=AdvisoryKind.STREAM_STOPPED, timestamp=self._clock()))

    def _dispatch_advisory(
        self,
        advisory: ObserverAdvisory,
        subscribers: list[EventSubscriber] | None = None,
    ) -> None:
        if subscribers is None:
            with self._lock:
                subscribers = list(self._subscribers)
        for subscriber in subscribers:
            self._call(subscriber.on_advisory, advisory)

    def _call(
        self,
        handler: Callable[[Any], None],
        value: NormalizedEvent | ObserverAdvisory,
    ) -> None:
        # A failing subscriber must not stop delivery to the others.
        try:
            handler(value)
        except Exception:
            logger.exception("Subscriber failed while handling %s", value)


# =============================================================================
# watchdog-backed source
# =============================================================================


class _WatchdogHandler(FileSystemEventHandler):
    """Translate watchdog events into raw changes."""

    def __init__(self, root: str, deliver: DeliverCallback) -> None:
        self._root = os.path.normpath(root)
        self._deliver = deliver

    def on_created(self, event: FileSystemEvent) -> None:
        self._deliver([RawChange(path=str(event.src_path), flags=ChangeFlag.CREATED)])

    def on_deleted(self, event: FileSystemEvent) -> None:
        path = str(event.src_path)
        flags = ChangeFlag.REMOVED
        if isinstance(event, DirDeletedEvent) and os.path.normpath(path) == self._root:
            flags = ChangeFlag.ROOT_CHANGED
        self._deliver([RawChange(path=path, flags=flags)])

    def on_modified(self, event: FileSystemEvent) -> None:
        # Directory modifications only echo changes to their children.
        if event.is_directory:
            return
        self._deliver([RawChange(path=str(event.src_path), flags=ChangeFlag.MODIFIED)])

    def on_moved(self, event: FileSystemEvent) -> None:
        src = str(event.src_path)
        if isinstance(event, DirMovedEvent) and os.path.normpath(src) == self._root:
            self._deliver([RawChange(path=src, flags=ChangeFlag.ROOT_CHANGED)])
            return
        changes = [RawChange(path=src, flags=ChangeFlag.RENAMED)]
        dest = getattr(event, "dest_path", "")
        if dest:
            changes.append(RawChange(path=str(dest), flags=ChangeFlag.RENAMED))
        self._deliver(changes)


class WatchdogChangeSource(ChangeSource):
    """Change source backed by a watchdog Observer thread."""

    def __init__(self, recursive: bool = True) -> None:
        self._recursive = recursive
        self._observer: BaseObserver | None = None

    def begin(self, paths: Sequence[str], deliver: DeliverCallback, stopped: StoppedCallback) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        try:
            for path in paths:
                observer.schedule(_WatchdogHandler(path, deliver), path, recursive=self._recursive)
            observer.start()
        except OSError as e:
            observer.stop()
            raise ChangeSourceError(f"Cannot watch {', '.join(paths)}: {e}") from e
        self._observer = observer

    def end(self) -> None:
        if self._observer is None:
            return
        observer = self._observer
        self._observer = None
        observer.stop()
        if observer.is_alive() and threading.current_thread() is not observer:
            observer.join(timeout=5)

    def is_alive(self) -> bool:
        return self._observer is not None and self._observer.is_alive()
