"""Apply command implementation.

Plans a folder, asks for approval and executes the approved plan. The
execution log is appended to the history so it can be undone later.
"""

from typing import Annotated

import typer

from filetidy.cli.commands.plan import RootArgument, RulesOption, build_folder_plan
from filetidy.cli.display import (
    create_execution_table,
    create_plan_table,
    print_execution_summary,
    print_plan_summary,
)
from filetidy.core.config import require_config
from filetidy.core.executor import ExecutionEngine
from filetidy.core.state import HistoryStore
from filetidy.core.trash import TrashBin
from filetidy.models.execution import ExecutionOutcome
from filetidy.models.plan import ActionKind
from filetidy.utils.formatting import console, print_info, print_success, print_warning


def apply(
    ctx: typer.Context,
    root: RootArgument,
    rules_path: RulesOption = None,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show the plan without executing it.",
        ),
    ] = False,
) -> None:
    """Organize a folder according to the rules.

    Shows the plan first and changes nothing until it is approved.
    Deleted files go to the filetidy trash and can be restored with
    `filetidy undo`.

    Examples:
        filetidy apply ~/Downloads              # Plan, confirm, execute
        filetidy apply ~/Downloads --dry-run    # Preview only
        filetidy apply ~/Downloads -y           # Skip confirmation
    """
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    settings = require_config()
    action_plan = build_folder_plan(root, rules_path, quiet=quiet)

    if len(action_plan) == action_plan.count(ActionKind.SKIP):
        print_success("Nothing to do. Every file is left as it is.")
        return

    console.print(create_plan_table(action_plan, dry_run=dry_run, show_skips=False))
    print_plan_summary(action_plan)

    if dry_run:
        print_info("Dry run: no changes made.")
        return

    if not yes:
        confirm = typer.confirm("\nApply this plan?")
        if not confirm:
            print_info("Cancelled. Nothing was changed.")
            return

    engine = ExecutionEngine(TrashBin(settings.trash.effective_directory))
    log = engine.execute(action_plan)

    try:
        HistoryStore().record_execution(log)
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record history, this run cannot be undone with filetidy: {e}")

    console.print()
    console.print(create_execution_table(log))
    print_execution_summary(log)
    if log.undoable:
        print_info(f"Undo with: filetidy undo {log.id}")

    if log.count(ExecutionOutcome.FAILED):
        raise typer.Exit(code=1)
