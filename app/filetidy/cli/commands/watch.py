"""Watch command implementation.

Observes folders and prints advisory rescan suggestions. Watching never
plans, executes or changes anything; acting on a suggestion is left to
the user.
"""

import logging
import time
from pathlib import Path
from typing import Annotated

import typer

from filetidy.cli.display import format_suggestion
from filetidy.core.config import require_config
from filetidy.filesystem.scanner import SnapshotScanner
from filetidy.models.event import NormalizedEvent, ObserverAdvisory
from filetidy.models.staleness import ScanSuggestion
from filetidy.utils.formatting import console, print_error, print_info, print_warning
from filetidy.watch.bridge import StalenessBridge, SuggestionSubscriber
from filetidy.watch.observer import ChangeObserver, EventSubscriber, WatchdogChangeSource

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 1.0


class ConsoleReporter(EventSubscriber, SuggestionSubscriber):
    """Feeds observer events into the bridge and prints what comes out."""

    def __init__(self, bridge: StalenessBridge) -> None:
        self._bridge = bridge

    def on_event(self, event: NormalizedEvent) -> None:
        logger.debug("%s %s", event.kind.value, event.path)
        self._bridge.handle_event(event)

    def on_advisory(self, advisory: ObserverAdvisory) -> None:
        suffix = f" ({advisory.path})" if advisory.path else ""
        print_warning(f"{advisory.message}{suffix}")

    def on_suggestion(self, suggestion: ScanSuggestion) -> None:
        console.print(format_suggestion(suggestion))


def watch(
    roots: Annotated[
        list[Path],
        typer.Argument(
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
            help="Folders to watch.",
        ),
    ],
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Settings file (default: ~/.config/filetidy/config.toml).",
        ),
    ] = None,
    initial_scan: Annotated[
        bool,
        typer.Option(
            "--scan/--no-scan",
            help="Scan the folders once at startup to establish a baseline.",
        ),
    ] = True,
) -> None:
    """Watch folders and suggest a rescan when results may be outdated.

    Suggestions are advisory only. Nothing is planned or changed.
    Press Ctrl+C to stop.

    Examples:
        filetidy watch ~/Downloads
        filetidy watch ~/Downloads ~/Desktop --no-scan
    """
    settings = require_config(config_path)
    bridge = StalenessBridge(settings.staleness)
    reporter = ConsoleReporter(bridge)
    bridge.subscribe(reporter)

    scanner = SnapshotScanner()
    for root in roots:
        bridge.register_root(str(root))
        if initial_scan:
            result = scanner.scan(root)
            bridge.mark_scan_completed(str(root))
            print_info(f"Baseline for {root}: {len(result.files)} item(s).")

    stopped_unexpectedly = False
    with ChangeObserver(WatchdogChangeSource()) as observer:
        observer.subscribe(reporter)
        if not observer.start([str(root) for root in roots]):
            print_error("Could not start watching.")
            raise typer.Exit(code=1)

        print_info(f"Watching {len(roots)} folder(s). Press Ctrl+C to stop.")
        try:
            while observer.check_source():
                time.sleep(POLL_INTERVAL_SECONDS)
            stopped_unexpectedly = True
        except KeyboardInterrupt:
            pass
        finally:
            observer.unsubscribe(reporter)
            bridge.unsubscribe(reporter)

    for root in roots:
        state = bridge.staleness_of(str(root))
        if state is not None:
            console.print(f"  {root}: {state.level.value} ({state.pending_events} pending change(s))")

    if stopped_unexpectedly:
        raise typer.Exit(code=1)
    print_info("Stopped watching.")
