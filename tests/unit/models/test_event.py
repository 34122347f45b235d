"""Unit tests for event, advisory and staleness models."""

from datetime import UTC, datetime

from filetidy.models.event import (
    ADVISORY_MESSAGES,
    AdvisoryKind,
    EventKind,
    EventSource,
    NormalizedEvent,
    ObserverAdvisory,
)
from filetidy.models.staleness import ScanSuggestion, StalenessLevel, StalenessState, Urgency

MOMENT = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class TestNormalizedEvent:
    """Tests for NormalizedEvent."""

    def test_defaults_to_filesystem_source(self) -> None:
        """Events come from the filesystem unless stated otherwise."""
        event = NormalizedEvent(path="/a", kind=EventKind.CREATED, timestamp=MOMENT)

        assert event.source == EventSource.FILESYSTEM

    def test_to_dict(self) -> None:
        """Enums serialize to their values."""
        event = NormalizedEvent(path="/a", kind=EventKind.RENAMED, timestamp=MOMENT, source=EventSource.SYNTHETIC)

        assert event.to_dict() == {
            "path": "/a",
            "kind": "renamed",
            "timestamp": "2026-03-01T12:00:00+00:00",
            "source": "synthetic",
        }


class TestObserverAdvisory:
    """Tests for ObserverAdvisory."""

    def test_every_kind_has_a_message(self) -> None:
        """Messages are derived from the advisory kind."""
        assert set(ADVISORY_MESSAGES) == set(AdvisoryKind)

    def test_message_in_dict(self) -> None:
        """Serialized advisories include the message."""
        advisory = ObserverAdvisory(kind=AdvisoryKind.STREAM_STOPPED, timestamp=MOMENT)

        assert advisory.to_dict()["message"] == "Change notifications stopped unexpectedly."
        assert advisory.to_dict()["path"] is None


class TestStalenessModels:
    """Tests for staleness state and suggestions."""

    def test_unscanned_root_starts_stale(self) -> None:
        """A root with no recorded scan is stale."""
        state = StalenessState(root="/watched")

        assert state.level == StalenessLevel.STALE
        assert state.last_scan_at is None
        assert state.pending_events == 0

    def test_state_to_dict(self) -> None:
        """Optional timestamps serialize to None."""
        state = StalenessState(root="/watched", last_scan_at=MOMENT, level=StalenessLevel.FRESH)

        data = state.to_dict()

        assert data["last_scan_at"] == "2026-03-01T12:00:00+00:00"
        assert data["last_event_at"] is None
        assert data["level"] == "fresh"

    def test_suggestion_to_dict(self) -> None:
        """Suggestions serialize urgency by value."""
        suggestion = ScanSuggestion(root="/watched", reason="r", urgency=Urgency.HIGH, timestamp=MOMENT)

        assert suggestion.to_dict()["urgency"] == "high"
