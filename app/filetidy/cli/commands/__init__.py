"""CLI commands for filetidy.

This package contains all subcommand implementations.
"""

from filetidy.cli.commands import apply, history, init, plan, undo, watch

__all__ = ["apply", "history", "init", "plan", "undo", "watch"]
