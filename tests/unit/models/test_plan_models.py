"""Unit tests for plan models."""

import json

import pytest
from filetidy.models.plan import ActionKind, ActionPlan, PlannedAction
from filetidy.models.snapshot import FileSnapshot

SNAPSHOT = FileSnapshot(path="/home/user/Downloads/invoice.pdf", name="invoice.pdf", extension="pdf", size_bytes=500)


class TestPlannedAction:
    """Tests for PlannedAction validation."""

    def test_reason_required(self) -> None:
        """Blank reasons are rejected."""
        with pytest.raises(ValueError, match="reason cannot be empty"):
            PlannedAction(target=SNAPSHOT, kind=ActionKind.SKIP, reason="  ")

    @pytest.mark.parametrize("kind", [ActionKind.MOVE, ActionKind.COPY])
    def test_transfer_requires_destination(self, kind: ActionKind) -> None:
        """Move and copy need a destination."""
        with pytest.raises(ValueError, match="requires a destination"):
            PlannedAction(target=SNAPSHOT, kind=kind, reason="r")

    def test_rename_requires_new_name(self) -> None:
        """Rename needs a new name."""
        with pytest.raises(ValueError, match="requires a new name"):
            PlannedAction(target=SNAPSHOT, kind=ActionKind.RENAME, reason="r")

    def test_dict_roundtrip(self) -> None:
        """Actions survive serialization."""
        action = PlannedAction(
            target=SNAPSHOT, kind=ActionKind.MOVE, reason="Matched rule: 'A'", destination="/Archive/invoice.pdf"
        )

        assert PlannedAction.from_dict(action.to_dict()) == action
        assert action.is_skip is False


class TestActionPlan:
    """Tests for ActionPlan."""

    @pytest.fixture
    def sample_plan(self) -> ActionPlan:
        """Plan with one action of several kinds."""
        return ActionPlan(
            actions=(
                PlannedAction(target=SNAPSHOT, kind=ActionKind.MOVE, reason="r", destination="/A/invoice.pdf"),
                PlannedAction(target=SNAPSHOT, kind=ActionKind.DELETE, reason="r"),
                PlannedAction(target=SNAPSHOT, kind=ActionKind.SKIP, reason="r"),
                PlannedAction(target=SNAPSHOT, kind=ActionKind.SKIP, reason="r"),
            )
        )

    def test_count(self, sample_plan: ActionPlan) -> None:
        """Counts are per kind."""
        assert len(sample_plan) == 4
        assert sample_plan.count(ActionKind.SKIP) == 2
        assert sample_plan.count(ActionKind.RENAME) == 0

    def test_summary_lines(self, sample_plan: ActionPlan) -> None:
        """The summary only mentions kinds that occur."""
        lines = sample_plan.summary_lines()

        assert lines[0] == "4 item(s) were analyzed."
        assert "1 will be moved to a new location." in lines
        assert "1 will be moved to the filetidy trash (recoverable)." in lines
        assert "2 will be left alone." in lines
        assert not any("renamed" in line for line in lines)
        assert lines[-1] == "Nothing changes until the plan is approved."

    def test_to_json_is_stable(self, sample_plan: ActionPlan) -> None:
        """JSON output is deterministic and parseable."""
        text = sample_plan.to_json()

        assert text == ActionPlan(actions=sample_plan.actions).to_json()
        assert len(json.loads(text)["actions"]) == 4

    def test_dict_roundtrip(self, sample_plan: ActionPlan) -> None:
        """Plans survive serialization."""
        assert ActionPlan.from_dict(sample_plan.to_dict()) == sample_plan
