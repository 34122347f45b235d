"""Rule evaluation and conflict resolution.

Pure business logic for turning file snapshots and rules into an action
plan. No filesystem access, no clock, no randomness: planning the same
inputs twice yields identical plans.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import PurePath

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

NO_MATCH_REASON = "No rules matched this file."


@dataclass(frozen=True, slots=True)
class RuleMatch:
    """A rule that matched a file, paired with its outcome."""

    rule: Rule
    outcome: Outcome


def plan(files: Iterable[FileSnapshot], rules: Sequence[Rule]) -> ActionPlan:
    """Evaluate every file against every enabled rule.

    Args:
        files: Snapshots produced by the scanner, in the order to plan them.
        rules: Rule set, in priority/display order.

    Returns:
        ActionPlan with exactly one PlannedAction per input snapshot.
    """
    enabled = [rule for rule in rules if rule.enabled]
    actions = [resolve(snapshot, evaluate(snapshot, enabled)) for snapshot in files]
    return ActionPlan(actions=tuple(actions))


def evaluate(snapshot: FileSnapshot, rules: Sequence[Rule]) -> list[RuleMatch]:
    """Find all enabled rules whose conditions all hold for a snapshot.

    Args:
        snapshot: File to evaluate.
        rules: Candidate rules.

    Returns:
        Matches in rule order.
    """
    return [
        RuleMatch(rule=rule, outcome=rule.outcome)
        for rule in rules
        if rule.enabled and matches_all(snapshot, rule.conditions)
    ]


def matches_all(snapshot: FileSnapshot, conditions: Iterable[Condition]) -> bool:
    """Check whether every condition holds (an empty list always holds)."""
    return all(condition_holds(snapshot, condition) for condition in conditions)


def condition_holds(snapshot: FileSnapshot, condition: Condition) -> bool:
    """Evaluate a single condition.

    Conditions on optional metadata fail closed: missing size or
    timestamps never satisfy a condition.
    """
    if isinstance(condition, ExtensionEquals):
        return _normalize_extension(snapshot.extension) == _normalize_extension(condition.extension)
    if isinstance(condition, NameContains):
        return condition.text.casefold() in snapshot.name.casefold()
    if isinstance(condition, SizeGreaterThan):
        if snapshot.size_bytes is None:
            return False
        return snapshot.size_bytes > condition.size_bytes
    if isinstance(condition, CreatedBefore):
        if snapshot.created_at is None:
            return False
        return _as_aware(snapshot.created_at) < _as_aware(condition.moment)
    if isinstance(condition, ModifiedBefore):
        if snapshot.modified_at is None:
            return False
        return _as_aware(snapshot.modified_at) < _as_aware(condition.moment)
    if isinstance(condition, IsDirectory):
        return snapshot.is_directory
    return False


def resolve(snapshot: FileSnapshot, matches: Sequence[RuleMatch]) -> PlannedAction:
    """Decide the single action for a file from its rule matches.

    Conflicting outcomes resolve conservatively to a skip whose reason
    lists every match, so the conflict can be inspected without re-running.
    """
    if not matches:
        return PlannedAction(target=snapshot, kind=ActionKind.SKIP, reason=NO_MATCH_REASON)

    if len(matches) == 1:
        match = matches[0]
        return convert(match.outcome, snapshot, f"Matched rule: '{match.rule.name}'")

    first = matches[0].outcome
    if all(outcomes_compatible(match.outcome, first) for match in matches):
        names = ", ".join(f"'{match.rule.name}'" for match in matches)
        return convert(first, snapshot, f"Matched multiple rules: {names}")

    details = "; ".join(f"{match.rule.name} -> {describe_outcome(match.outcome)}" for match in matches)
    return PlannedAction(
        target=snapshot,
        kind=ActionKind.SKIP,
        reason=f"Conflict: multiple rules matched with different outcomes: [{details}]",
    )


def convert(outcome: Outcome, snapshot: FileSnapshot, reason: str) -> PlannedAction:
    """Turn a declarative outcome into a concrete action for one file.

    Destinations are computed, never checked: collisions are the
    execution engine's concern.
    """
    if isinstance(outcome, MoveOutcome):
        return PlannedAction(
            target=snapshot,
            kind=ActionKind.MOVE,
            reason=reason,
            destination=str(PurePath(outcome.folder) / snapshot.name),
        )
    if isinstance(outcome, CopyOutcome):
        return PlannedAction(
            target=snapshot,
            kind=ActionKind.COPY,
            reason=reason,
            destination=str(PurePath(outcome.folder) / snapshot.name),
        )
    if isinstance(outcome, DeleteOutcome):
        return PlannedAction(target=snapshot, kind=ActionKind.DELETE, reason=reason)
    if isinstance(outcome, RenameOutcome):
        new_name = f"{outcome.prefix or ''}{snapshot.name}{outcome.suffix or ''}"
        return PlannedAction(target=snapshot, kind=ActionKind.RENAME, reason=reason, new_name=new_name)
    # SkipOutcome
    return PlannedAction(
        target=snapshot,
        kind=ActionKind.SKIP,
        reason=f"{reason}. Rule logic: {outcome.reason}",
    )


def outcomes_compatible(a: Outcome, b: Outcome) -> bool:
    """Check whether two outcomes describe the same effect.

    Outcomes are compatible iff they are the same variant with equal
    payloads; dataclass equality already compares the variant type.
    """
    return a == b


def describe_outcome(outcome: Outcome) -> str:
    """Short human-readable description of an outcome."""
    if isinstance(outcome, MoveOutcome):
        return f"Move to {_folder_label(outcome.folder)}"
    if isinstance(outcome, CopyOutcome):
        return f"Copy to {_folder_label(outcome.folder)}"
    if isinstance(outcome, DeleteOutcome):
        return "Delete"
    if isinstance(outcome, RenameOutcome):
        parts = []
        if outcome.prefix:
            parts.append(f"prefix '{outcome.prefix}'")
        if outcome.suffix:
            parts.append(f"suffix '{outcome.suffix}'")
        return f"Rename ({', '.join(parts)})" if parts else "Rename"
    if isinstance(outcome, SkipOutcome):
        return f"Skip ({outcome.reason})"
    return "Unknown"


def _folder_label(folder: str) -> str:
    return PurePath(folder).name or folder


def _normalize_extension(extension: str) -> str:
    return extension.lstrip(".").casefold()


def _as_aware(moment: datetime) -> datetime:
    # Naive timestamps are treated as UTC so mixed inputs stay comparable.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment
