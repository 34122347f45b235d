"""filetidy command line.

Builds the Typer application, its global flags and the command table.
"""

from collections.abc import Callable
from typing import Annotated, Any

import typer

from filetidy import __version__
from filetidy.cli.commands import apply, history, init, plan, undo, watch
from filetidy.core.logging import configure_logging

app = typer.Typer(
    name="filetidy",
    help="Explainable, reversible file organization.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# (name, handler, help panel)
COMMANDS: tuple[tuple[str, Callable[..., Any], str], ...] = (
    ("init", init.init, "Setup"),
    ("plan", plan.plan, "Organize"),
    ("apply", apply.apply, "Organize"),
    ("undo", undo.undo, "Organize"),
    ("history", history.history, "Review"),
    ("watch", watch.watch, "Review"),
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"filetidy version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug details to stderr.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log errors and hide scan warnings.")] = False,
) -> None:
    """filetidy - organize files under declarative rules.

    Every change is shown before it happens, explained, recorded and
    reversible.
    """
    ctx.obj = {"verbose": verbose, "quiet": quiet}
    configure_logging(verbose=verbose, quiet=quiet)


for _name, _handler, _panel in COMMANDS:
    app.command(name=_name, rich_help_panel=_panel)(_handler)


if __name__ == "__main__":
    app()
