"""Plan command implementation.

Scans a folder and shows what the rules would do, without changing
anything.
"""

from pathlib import Path
from typing import Annotated

import typer

from filetidy.cli.display import create_plan_table, print_plan_summary
from filetidy.core.planner import plan as build_plan
from filetidy.core.rules import require_rules
from filetidy.filesystem.scanner import ScanResult, SnapshotScanner
from filetidy.models.plan import ActionPlan
from filetidy.utils.formatting import console, print_warning

RootArgument = Annotated[
    Path,
    typer.Argument(
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        help="Folder to organize.",
    ),
]

RulesOption = Annotated[
    Path | None,
    typer.Option(
        "--rules",
        "-r",
        help="Rule file to use (default: ~/.config/filetidy/rules.toml).",
    ),
]


def scan_folder(root: Path, quiet: bool = False) -> ScanResult:
    """Scan a folder and report enumeration errors as warnings."""
    result = SnapshotScanner().scan(root)
    if result.errors and not quiet:
        print_warning(f"{len(result.errors)} item(s) could not be read and were left out:")
        for error in result.errors[:5]:
            print_warning(f"  {error.path}: {error.message}")
        if len(result.errors) > 5:
            print_warning(f"  ... and {len(result.errors) - 5} more")
    return result


def build_folder_plan(root: Path, rules_path: Path | None, quiet: bool = False) -> ActionPlan:
    """Load rules, scan a folder and plan it."""
    rules = require_rules(rules_path)
    result = scan_folder(root, quiet=quiet)
    return build_plan(result.files, rules)


def plan(
    ctx: typer.Context,
    root: RootArgument,
    rules_path: RulesOption = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output the plan as JSON.",
        ),
    ] = False,
    show_skips: Annotated[
        bool,
        typer.Option(
            "--skips/--no-skips",
            help="Include files that will be left alone.",
        ),
    ] = True,
) -> None:
    """Preview what the rules would do to a folder.

    Nothing is changed. Every file gets exactly one line with a reason,
    including files that are left alone.

    Examples:
        filetidy plan ~/Downloads
        filetidy plan ~/Downloads --no-skips
        filetidy plan ~/Downloads --json
    """
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    action_plan = build_folder_plan(root, rules_path, quiet=quiet or json_output)

    if json_output:
        typer.echo(action_plan.to_json())
        return

    console.print(create_plan_table(action_plan, show_skips=show_skips))
    print_plan_summary(action_plan)
