"""Undo command implementation.

Reverses a recorded execution log. Undo re-checks the filesystem before
every step, never overwrites, and can safely be run more than once.
"""

from typing import Annotated

import typer

from filetidy.cli.display import create_undo_table
from filetidy.core.config import require_config
from filetidy.core.state import HistoryStore
from filetidy.core.trash import TrashBin
from filetidy.core.undo import UndoEngine
from filetidy.models.execution import ExecutionLog, UndoOutcome
from filetidy.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def undo(
    log_id: Annotated[
        str | None,
        typer.Argument(help="Execution log ID (or prefix). Defaults to the last undoable run."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be undone without executing.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Undo a previous run.

    Inverse operations:
    - move, rename -> move back to the original path
    - copy -> move the copy to the trash
    - trash -> restore to the original path

    Examples:
        filetidy undo              # Undo the last run, with confirmation
        filetidy undo 3f9c2a       # Undo a specific run
        filetidy undo --dry-run    # Preview only
    """
    settings = require_config()
    store = HistoryStore()

    if log_id is None:
        log = store.get_last_undoable()
        if log is None:
            print_info("No undoable runs in history.")
            return
    else:
        log = store.get_execution_log(log_id)
        if log is None:
            print_error(f"No single run matches ID '{log_id}'.")
            print_info("Run 'filetidy history' to list recorded runs.")
            raise typer.Exit(code=1)
        if log.id in store.get_undone_log_ids():
            print_warning(f"Run {log.id} was already undone; files already restored will be skipped.")

    _show_undo_preview(log)

    if dry_run:
        print_info("Dry run: no changes made.")
        return

    if not yes:
        confirm = typer.confirm("Do you want to undo this run?")
        if not confirm:
            print_info("Cancelled.")
            return

    undo_log = UndoEngine(TrashBin(settings.trash.effective_directory)).undo(log)

    try:
        store.record_undo(undo_log)
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record the undo in history: {e}")

    console.print(create_undo_table(undo_log))

    restored = undo_log.count(UndoOutcome.RESTORED)
    skipped = undo_log.count(UndoOutcome.SKIPPED)
    failed = undo_log.count(UndoOutcome.FAILED)
    if failed:
        print_error(f"{failed} item(s) could not be restored. See the reasons above.")
        raise typer.Exit(code=1)
    print_success(f"{restored} item(s) restored, {skipped} skipped.")


def _show_undo_preview(log: ExecutionLog) -> None:
    """Display which records of a run would be reversed."""
    succeeded = [record for record in log.records if record.succeeded]

    console.print(f"\n[bold]Undo run {log.id}[/bold]")
    console.print(f"  Date: {log.started_at}")
    console.print(f"  Applied actions ({len(succeeded)}):")
    for record in succeeded[:10]:
        console.print(f"    - {record.kind.value}: {record.source}")
    if len(succeeded) > 10:
        console.print(f"    ... and {len(succeeded) - 10} more")
    console.print()
