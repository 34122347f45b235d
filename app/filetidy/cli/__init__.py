"""CLI package for filetidy.

This package contains the Typer application and all subcommands.
"""

from filetidy.cli.main import app

__all__ = ["app"]
