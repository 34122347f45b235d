"""Init command implementation.

Writes a starter rules.toml so a first `filetidy plan` has something to
evaluate.
"""

from pathlib import Path
from typing import Annotated

import typer

from filetidy.core.paths import ensure_config_dir, get_rules_path
from filetidy.core.rules import RulesError, save_rules, starter_rules
from filetidy.utils.formatting import console, print_error, print_info, print_success, print_warning


def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing rule file.",
        ),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the rule file here instead of the default location.",
        ),
    ] = None,
) -> None:
    """Create a starter rule file.

    Examples:
        filetidy init                  # ~/.config/filetidy/rules.toml
        filetidy init -o rules.toml    # Custom location
        filetidy init --force          # Replace existing rules
    """
    path = output or get_rules_path()

    if path.exists() and not force:
        print_warning(f"Rule file already exists: {path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    if output is None:
        try:
            ensure_config_dir()
        except RuntimeError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    rule_file = starter_rules()
    try:
        save_rules(rule_file, path)
    except RulesError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Rule file written: {path}")
    console.print(f"  {len(rule_file.rules)} starter rule(s):")
    for entry in rule_file.rules:
        state = "" if entry.enabled else " [muted](disabled)[/muted]"
        console.print(f"    - {entry.name}{state}")
    print_info("Edit the file, then run 'filetidy plan <folder>' to preview.")
