"""Shared Rich display functions for plans and logs.

Provides reusable table builders and summary printers used by the plan,
apply and undo commands.
"""

from rich.table import Table

from filetidy.models.execution import ExecutionLog, ExecutionOutcome, UndoLog, UndoOutcome
from filetidy.models.plan import ActionKind, ActionPlan, PlannedAction
from filetidy.models.staleness import ScanSuggestion
from filetidy.utils.formatting import console, print_success

_KIND_STYLES: dict[ActionKind, str] = {
    ActionKind.MOVE: "moved",
    ActionKind.COPY: "copied",
    ActionKind.RENAME: "renamed",
    ActionKind.DELETE: "trashed",
    ActionKind.SKIP: "skipped",
}

_KIND_LABELS: dict[ActionKind, str] = {
    ActionKind.MOVE: "move",
    ActionKind.COPY: "copy",
    ActionKind.RENAME: "rename",
    ActionKind.DELETE: "trash",
    ActionKind.SKIP: "skip",
}


def _target_of(action: PlannedAction) -> str:
    if action.kind in (ActionKind.MOVE, ActionKind.COPY):
        return action.destination or ""
    if action.kind == ActionKind.RENAME:
        return action.new_name or ""
    return ""


def create_plan_table(plan: ActionPlan, dry_run: bool = False, show_skips: bool = True) -> Table:
    """Create a Rich table displaying a plan.

    Args:
        plan: Plan to display.
        dry_run: Whether this is a dry-run (changes table title).
        show_skips: Include skip actions.

    Returns:
        Rich Table configured for plan display.
    """
    title = "Planned Actions (Dry Run)" if dry_run else "Planned Actions"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=8, justify="center")
    table.add_column("File", no_wrap=True)
    table.add_column("To")
    table.add_column("Reason")

    for action in plan.actions:
        if action.is_skip and not show_skips:
            continue
        style = _KIND_STYLES[action.kind]
        table.add_row(
            f"[{style}]{_KIND_LABELS[action.kind]}[/{style}]",
            action.target.name,
            _target_of(action),
            f"[muted]{action.reason}[/muted]",
        )

    return table


def print_plan_summary(plan: ActionPlan) -> None:
    """Print the plain-language plan summary."""
    console.print()
    for line in plan.summary_lines():
        console.print(f"  {line}")


def create_execution_table(log: ExecutionLog) -> Table:
    """Create a Rich table displaying execution records.

    Args:
        log: Execution log to display.

    Returns:
        Rich Table configured for results display.
    """
    table = Table(
        title=f"Results ({log.id})",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Action", width=8)
    table.add_column("File", no_wrap=True)
    table.add_column("Reason")

    statuses = {
        ExecutionOutcome.SUCCEEDED: "[success]OK[/success]",
        ExecutionOutcome.SKIPPED: "[muted]SKIP[/muted]",
        ExecutionOutcome.FAILED: "[error]FAIL[/error]",
    }
    for record in log.records:
        table.add_row(
            statuses[record.outcome],
            _KIND_LABELS[record.kind],
            record.source,
            f"[muted]{record.reason}[/muted]",
        )

    return table


def print_execution_summary(log: ExecutionLog) -> None:
    """Print a summary of an execution log.

    Shows a success message when nothing failed, otherwise the counts.
    """
    succeeded = log.count(ExecutionOutcome.SUCCEEDED)
    skipped = log.count(ExecutionOutcome.SKIPPED)
    failed = log.count(ExecutionOutcome.FAILED)

    if failed == 0:
        print_success(f"{succeeded} action(s) applied, {skipped} skipped.")
    else:
        console.print(
            f"\n[success]{succeeded} succeeded[/success], [muted]{skipped} skipped[/muted], "
            f"[error]{failed} failed[/error]"
        )


def create_undo_table(log: UndoLog) -> Table:
    """Create a Rich table displaying undo records."""
    table = Table(
        title=f"Undo of {log.execution_log_id}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=9, justify="center")
    table.add_column("Action", width=8)
    table.add_column("File", no_wrap=True)
    table.add_column("Reason")

    statuses = {
        UndoOutcome.RESTORED: "[success]RESTORED[/success]",
        UndoOutcome.SKIPPED: "[muted]SKIP[/muted]",
        UndoOutcome.FAILED: "[error]FAIL[/error]",
    }
    for record in log.records:
        table.add_row(
            statuses[record.outcome],
            _KIND_LABELS[record.kind],
            record.path,
            f"[muted]{record.reason}[/muted]",
        )

    return table


def format_suggestion(suggestion: ScanSuggestion) -> str:
    """Format a rescan suggestion as one line of Rich markup."""
    style = f"urgency_{suggestion.urgency.value}"
    return f"[{style}]{suggestion.urgency.value.upper()}[/{style}] Rescan suggested for {suggestion.root}: {suggestion.reason}"
