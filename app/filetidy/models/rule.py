"""Rule models.

Rules are pure configuration: an ordered, conjunctive list of conditions
and a single outcome. They describe intent and never perform anything.

Conditions and outcomes are tagged variants modelled as one frozen
dataclass per variant, so two outcomes describe the same effect exactly
when they compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

# =============================================================================
# Conditions
# =============================================================================


@dataclass(frozen=True, slots=True)
class ExtensionEquals:
    """Matches when the file extension equals ``extension`` (case-insensitive).

    A leading dot is ignored, so ``".PDF"`` and ``"pdf"`` are equivalent.
    """

    kind: ClassVar[str] = "extension_equals"

    extension: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "extension": self.extension}


@dataclass(frozen=True, slots=True)
class NameContains:
    """Matches when the file name contains ``text`` (case-insensitive)."""

    kind: ClassVar[str] = "name_contains"

    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "text": self.text}


@dataclass(frozen=True, slots=True)
class SizeGreaterThan:
    """Matches when the recorded size is strictly greater than ``size_bytes``.

    Fails closed: a snapshot without a recorded size never matches.
    """

    kind: ClassVar[str] = "size_greater_than"

    size_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "size_bytes": self.size_bytes}


@dataclass(frozen=True, slots=True)
class CreatedBefore:
    """Matches when the recorded creation time is before ``moment``.

    Fails closed on a missing creation time.
    """

    kind: ClassVar[str] = "created_before"

    moment: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "moment": self.moment.isoformat()}


@dataclass(frozen=True, slots=True)
class ModifiedBefore:
    """Matches when the recorded modification time is before ``moment``.

    Fails closed on a missing modification time.
    """

    kind: ClassVar[str] = "modified_before"

    moment: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "moment": self.moment.isoformat()}


@dataclass(frozen=True, slots=True)
class IsDirectory:
    """Matches directories only."""

    kind: ClassVar[str] = "is_directory"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


Condition = ExtensionEquals | NameContains | SizeGreaterThan | CreatedBefore | ModifiedBefore | IsDirectory


def condition_from_dict(data: dict[str, Any]) -> Condition:
    """Deserialize a condition from its tagged dictionary form.

    Args:
        data: Dictionary with a ``kind`` tag and the variant payload.

    Returns:
        The matching condition variant.

    Raises:
        KeyError: If the tag or a payload field is missing.
        ValueError: If the tag is unknown.
    """
    kind = data["kind"]
    if kind == ExtensionEquals.kind:
        return ExtensionEquals(extension=data["extension"])
    if kind == NameContains.kind:
        return NameContains(text=data["text"])
    if kind == SizeGreaterThan.kind:
        return SizeGreaterThan(size_bytes=int(data["size_bytes"]))
    if kind == CreatedBefore.kind:
        return CreatedBefore(moment=datetime.fromisoformat(data["moment"]))
    if kind == ModifiedBefore.kind:
        return ModifiedBefore(moment=datetime.fromisoformat(data["moment"]))
    if kind == IsDirectory.kind:
        return IsDirectory()
    msg = f"Unknown condition kind: {kind}"
    raise ValueError(msg)


# =============================================================================
# Outcomes
# =============================================================================


@dataclass(frozen=True, slots=True)
class MoveOutcome:
    """Move the file into ``folder``, keeping its name."""

    kind: ClassVar[str] = "move"

    folder: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "folder": self.folder}


@dataclass(frozen=True, slots=True)
class CopyOutcome:
    """Copy the file into ``folder``, keeping its name."""

    kind: ClassVar[str] = "copy"

    folder: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "folder": self.folder}


@dataclass(frozen=True, slots=True)
class DeleteOutcome:
    """Move the file to the recoverable trash. Never a permanent unlink."""

    kind: ClassVar[str] = "delete"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


@dataclass(frozen=True, slots=True)
class RenameOutcome:
    """Rename the file in place by adding a prefix and/or suffix."""

    kind: ClassVar[str] = "rename"

    prefix: str | None = None
    suffix: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "prefix": self.prefix, "suffix": self.suffix}


@dataclass(frozen=True, slots=True)
class SkipOutcome:
    """Explicitly leave the file alone."""

    kind: ClassVar[str] = "skip"

    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "reason": self.reason}


Outcome = MoveOutcome | CopyOutcome | DeleteOutcome | RenameOutcome | SkipOutcome


def outcome_from_dict(data: dict[str, Any]) -> Outcome:
    """Deserialize an outcome from its tagged dictionary form.

    Args:
        data: Dictionary with a ``kind`` tag and the variant payload.

    Returns:
        The matching outcome variant.

    Raises:
        KeyError: If the tag or a payload field is missing.
        ValueError: If the tag is unknown.
    """
    kind = data["kind"]
    if kind == MoveOutcome.kind:
        return MoveOutcome(folder=data["folder"])
    if kind == CopyOutcome.kind:
        return CopyOutcome(folder=data["folder"])
    if kind == DeleteOutcome.kind:
        return DeleteOutcome()
    if kind == RenameOutcome.kind:
        return RenameOutcome(prefix=data.get("prefix"), suffix=data.get("suffix"))
    if kind == SkipOutcome.kind:
        return SkipOutcome(reason=data["reason"])
    msg = f"Unknown outcome kind: {kind}"
    raise ValueError(msg)


# =============================================================================
# Rule
# =============================================================================


@dataclass(frozen=True, slots=True)
class Rule:
    """A declarative organizing rule.

    Attributes:
        name: Human-readable rule name, used in every plan reason.
        outcome: What should happen to a matching file.
        conditions: Conditions that must all hold (empty matches everything).
        description: Longer explanation of the rule's intent.
        enabled: Disabled rules are never evaluated.
        group: Optional grouping label for display.
        tags: Free-form labels.
    """

    name: str
    outcome: Outcome
    conditions: tuple[Condition, ...] = ()
    description: str = ""
    enabled: bool = True
    group: str | None = None
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate rule data after initialization."""
        if not self.name:
            msg = "Rule name cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary representation of the rule.
        """
        return {
            "name": self.name,
            "description": self.description,
            "enabled": self.enabled,
            "conditions": [condition.to_dict() for condition in self.conditions],
            "outcome": self.outcome.to_dict(),
            "group": self.group,
            "tags": sorted(self.tags),
        }
