"""Change observation and scan staleness.

The observer turns raw change notifications into normalized events; the
bridge turns events into advisory rescan suggestions.
"""

from filetidy.watch.bridge import StalenessBridge, SuggestionSubscriber, canonical_root
from filetidy.watch.observer import (
    ChangeFlag,
    ChangeObserver,
    ChangeSource,
    ChangeSourceError,
    EventSubscriber,
    RawChange,
    WatchdogChangeSource,
    normalize,
)

__all__ = [
    "ChangeFlag",
    "ChangeObserver",
    "ChangeSource",
    "ChangeSourceError",
    "EventSubscriber",
    "RawChange",
    "StalenessBridge",
    "SuggestionSubscriber",
    "WatchdogChangeSource",
    "canonical_root",
    "normalize",
]
