"""Rule file I/O.

Rules are stored in TOML (~/.config/filetidy/rules.toml), validated with
Pydantic models and converted into the immutable domain Rule values the
planner consumes.

Example:
    [[rules]]
    name = "Archive PDFs"
    outcome = { kind = "move", folder = "~/Documents/Archive" }

    [[rules.conditions]]
    kind = "extension_equals"
    extension = "pdf"
"""

import os
import tomllib
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from filetidy.core.paths import get_rules_path
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

# =============================================================================
# Condition entries
# =============================================================================


class ExtensionEqualsEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["extension_equals"] = "extension_equals"
    extension: Annotated[str, Field(min_length=1, description="Extension without dot")]

    def to_condition(self) -> Condition:
        return ExtensionEquals(extension=self.extension)


class NameContainsEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["name_contains"] = "name_contains"
    text: Annotated[str, Field(min_length=1, description="Substring of the file name")]

    def to_condition(self) -> Condition:
        return NameContains(text=self.text)


class SizeGreaterThanEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["size_greater_than"] = "size_greater_than"
    size_bytes: Annotated[int, Field(ge=0, description="Size threshold in bytes")]

    def to_condition(self) -> Condition:
        return SizeGreaterThan(size_bytes=self.size_bytes)


class CreatedBeforeEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["created_before"] = "created_before"
    moment: Annotated[datetime, Field(description="Cut-off creation time")]

    def to_condition(self) -> Condition:
        return CreatedBefore(moment=self.moment)


class ModifiedBeforeEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["modified_before"] = "modified_before"
    moment: Annotated[datetime, Field(description="Cut-off modification time")]

    def to_condition(self) -> Condition:
        return ModifiedBefore(moment=self.moment)


class IsDirectoryEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["is_directory"] = "is_directory"

    def to_condition(self) -> Condition:
        return IsDirectory()


ConditionEntry = Annotated[
    ExtensionEqualsEntry
    | NameContainsEntry
    | SizeGreaterThanEntry
    | CreatedBeforeEntry
    | ModifiedBeforeEntry
    | IsDirectoryEntry,
    Field(discriminator="kind"),
]

# =============================================================================
# Outcome entries
# =============================================================================


def _expand_folder(folder: str) -> str:
    return str(Path(folder).expanduser())


class MoveEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["move"] = "move"
    folder: Annotated[str, Field(min_length=1, description="Destination folder")]

    def to_outcome(self) -> Outcome:
        return MoveOutcome(folder=_expand_folder(self.folder))


class CopyEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["copy"] = "copy"
    folder: Annotated[str, Field(min_length=1, description="Destination folder")]

    def to_outcome(self) -> Outcome:
        return CopyOutcome(folder=_expand_folder(self.folder))


class DeleteEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["delete"] = "delete"

    def to_outcome(self) -> Outcome:
        return DeleteOutcome()


class RenameEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["rename"] = "rename"
    prefix: Annotated[str | None, Field(description="Text prepended to the name")] = None
    suffix: Annotated[str | None, Field(description="Text appended to the name")] = None

    @model_validator(mode="after")
    def validate_changes_name(self) -> "RenameEntry":
        """Validate that the outcome changes the name and stays in the same folder."""
        if not self.prefix and not self.suffix:
            msg = "Rename outcome needs a prefix or a suffix"
            raise ValueError(msg)
        separators = [sep for sep in (os.sep, os.altsep) if sep]
        for text in (self.prefix or "", self.suffix or ""):
            if any(sep in text for sep in separators):
                msg = f"Rename prefix and suffix cannot contain a path separator: {text!r}"
                raise ValueError(msg)
        return self

    def to_outcome(self) -> Outcome:
        return RenameOutcome(prefix=self.prefix, suffix=self.suffix)


class SkipEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["skip"] = "skip"
    reason: Annotated[str, Field(min_length=1, description="Why matching files are left alone")]

    def to_outcome(self) -> Outcome:
        return SkipOutcome(reason=self.reason)


OutcomeEntry = Annotated[
    MoveEntry | CopyEntry | DeleteEntry | RenameEntry | SkipEntry,
    Field(discriminator="kind"),
]

# =============================================================================
# Rule file
# =============================================================================


class RuleEntry(BaseModel):
    """One rule as written in rules.toml.

    Attributes:
        name: Unique rule name.
        outcome: Tagged outcome table.
        conditions: Tagged condition tables, all of which must hold.
        description: Optional explanation.
        enabled: Disabled rules are kept but never evaluated.
        group: Optional grouping label.
        tags: Free-form labels.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Unique rule name")]
    outcome: Annotated[OutcomeEntry, Field(description="What happens to matching files")]
    conditions: Annotated[
        list[ConditionEntry],
        Field(default_factory=list, description="Conditions that must all hold"),
    ]
    description: Annotated[str, Field(description="Rule description")] = ""
    enabled: Annotated[bool, Field(description="Whether the rule is evaluated")] = True
    group: Annotated[str | None, Field(description="Grouping label")] = None
    tags: Annotated[list[str], Field(default_factory=list, description="Free-form labels")]

    def to_rule(self) -> Rule:
        """Convert to the immutable domain Rule."""
        return Rule(
            name=self.name,
            outcome=self.outcome.to_outcome(),
            conditions=tuple(entry.to_condition() for entry in self.conditions),
            description=self.description,
            enabled=self.enabled,
            group=self.group,
            tags=frozenset(self.tags),
        )


class RuleFile(BaseModel):
    """Complete contents of rules.toml.

    Attributes:
        version: Rule file schema version.
        rules: Rules in evaluation and reporting order.
    """

    model_config = ConfigDict(extra="forbid")

    version: Annotated[int, Field(ge=1, description="Rule file schema version")] = 1
    rules: Annotated[list[RuleEntry], Field(default_factory=list, description="Rules")]

    @model_validator(mode="after")
    def validate_unique_names(self) -> "RuleFile":
        """Validate that rule names are unique, since reasons cite rules by name."""
        seen: set[str] = set()
        duplicates: set[str] = set()
        for entry in self.rules:
            if entry.name in seen:
                duplicates.add(entry.name)
            seen.add(entry.name)
        if duplicates:
            msg = f"Duplicate rule names: {sorted(duplicates)}"
            raise ValueError(msg)
        return self

    def to_rules(self) -> list[Rule]:
        """Convert every entry to a domain Rule, preserving order."""
        return [entry.to_rule() for entry in self.rules]


class RulesError(Exception):
    """Base exception for rule file errors."""


class RulesNotFoundError(RulesError):
    """Raised when the rule file is not found."""


class RulesParseError(RulesError):
    """Raised when the rule file cannot be parsed."""


class RulesValidationError(RulesError):
    """Raised when the rule file content is invalid."""


def load_rule_file(path: Path | None = None) -> RuleFile:
    """Load and validate a rule file.

    Args:
        path: Path to the rule file. If None, uses the default rules path.

    Returns:
        Validated RuleFile.

    Raises:
        RulesNotFoundError: If the file doesn't exist.
        RulesParseError: If the TOML syntax is invalid.
        RulesValidationError: If the content doesn't match the schema.
    """
    rules_path = path or get_rules_path()

    if not rules_path.exists():
        raise RulesNotFoundError(f"Rule file not found: {rules_path}")

    try:
        with open(rules_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise RulesParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise RulesError(f"Failed to read rule file: {e}") from e

    try:
        return RuleFile.model_validate(data)
    except ValidationError as e:
        raise RulesValidationError(f"Invalid rule file content: {e}") from e


def load_rules(path: Path | None = None) -> list[Rule]:
    """Load a rule file and convert it to domain rules.

    Raises:
        RulesError: See load_rule_file().
    """
    return load_rule_file(path).to_rules()


def save_rules(rule_file: RuleFile, path: Path | None = None) -> Path:
    """Save a rule file as TOML.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        rule_file: The RuleFile to save.
        path: Destination. If None, uses the default rules path.

    Returns:
        Path where the rules were saved.

    Raises:
        RulesError: If the file cannot be written.
    """
    rules_path = path or get_rules_path()
    data = rule_file.model_dump(mode="python", exclude_none=True)

    tmp_path: Path | None = None
    try:
        rules_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=rules_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(rules_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise RulesError(f"Failed to write rule file: {e}") from e

    return rules_path


def starter_rules() -> RuleFile:
    """Build the rule set written by `filetidy init`.

    The starter rules only move or skip, so a first `apply` never trashes
    anything the user did not ask for.
    """
    return RuleFile(
        rules=[
            RuleEntry(
                name="Archive PDFs",
                description="Collect PDF documents in one archive folder.",
                conditions=[ExtensionEqualsEntry(extension="pdf")],
                outcome=MoveEntry(folder="~/Documents/Archive"),
                group="documents",
                tags=["pdf"],
            ),
            RuleEntry(
                name="Sort screenshots",
                description="Move screenshots out of the way.",
                conditions=[NameContainsEntry(text="screenshot"), ExtensionEqualsEntry(extension="png")],
                outcome=MoveEntry(folder="~/Pictures/Screenshots"),
                group="images",
            ),
            RuleEntry(
                name="Leave folders alone",
                conditions=[IsDirectoryEntry()],
                outcome=SkipEntry(reason="Folders are organized by hand"),
            ),
            RuleEntry(
                name="Flag large installers",
                description="Disabled example: rename big disk images so they stand out.",
                enabled=False,
                conditions=[ExtensionEqualsEntry(extension="dmg"), SizeGreaterThanEntry(size_bytes=500_000_000)],
                outcome=RenameEntry(prefix="LARGE-"),
            ),
        ]
    )


def require_rules(rules_path: Path | None = None) -> list[Rule]:
    """Load rules or exit with a helpful error message.

    This is a convenience wrapper around load_rules() that handles
    common error cases by printing user-friendly messages and exiting.

    Args:
        rules_path: Optional custom rules path.

    Returns:
        Domain rules in file order.

    Raises:
        typer.Exit: If the rules cannot be loaded.
    """
    import typer

    from filetidy.utils.formatting import print_error, print_info

    path = rules_path or get_rules_path()
    try:
        return load_rules(path)
    except RulesNotFoundError as e:
        print_error(f"Rule file not found: {path}")
        print_info("Run 'filetidy init' to create a starter rule file.")
        raise typer.Exit(code=1) from e
    except RulesError as e:
        print_error(f"Failed to load rules: {e}")
        raise typer.Exit(code=1) from e
