"""History command for viewing past runs.

This module provides the `filetidy history` command for viewing the
recorded execution and undo logs.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from filetidy.core.state import HistoryStore
from filetidy.models.execution import ExecutionLog, ExecutionOutcome, UndoLog, UndoOutcome
from filetidy.models.history import HistoryEntry
from filetidy.utils.formatting import console, print_info


def history(
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show recorded runs and undos, newest first.

    Examples:
        filetidy history            # Show last 20 entries
        filetidy history -n 50      # Show last 50 entries
        filetidy history --json     # JSON output for scripting
    """
    store = HistoryStore()
    entries = store.get_history(limit=limit)

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        typer.echo(json.dumps([entry.to_dict() for entry in entries], indent=2))
    else:
        _print_table(entries, store.get_undone_log_ids())


def _print_table(entries: list[HistoryEntry], undone: set[str]) -> None:
    """Print history as Rich table.

    Args:
        entries: History entries to display.
        undone: IDs of execution logs that have an undo entry.
    """
    table = Table(title="filetidy History")
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Summary", style="white")
    table.add_column("Undo?", style="yellow")

    for entry in entries:
        table.add_row(
            entry.id,
            _format_timestamp(entry.timestamp),
            entry.entry_type.value,
            _summarize(entry.log),
            _undo_state(entry.log, undone),
        )

    console.print(table)


def _summarize(log: ExecutionLog | UndoLog) -> str:
    if isinstance(log, ExecutionLog):
        return (
            f"{log.count(ExecutionOutcome.SUCCEEDED)} applied, "
            f"{log.count(ExecutionOutcome.SKIPPED)} skipped, "
            f"{log.count(ExecutionOutcome.FAILED)} failed"
        )
    return (
        f"undo of {log.execution_log_id}: "
        f"{log.count(UndoOutcome.RESTORED)} restored, "
        f"{log.count(UndoOutcome.SKIPPED)} skipped, "
        f"{log.count(UndoOutcome.FAILED)} failed"
    )


def _undo_state(log: ExecutionLog | UndoLog, undone: set[str]) -> str:
    if isinstance(log, UndoLog):
        return "-"
    if log.id in undone:
        return "[dim]Undone[/]"
    return "[green]Yes[/]" if log.undoable else "[red]No[/]"


def _format_timestamp(iso_timestamp: str) -> str:
    """Format ISO timestamp for display (YYYY-MM-DD HH:MM)."""
    dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    return dt.strftime("%Y-%m-%d %H:%M")
