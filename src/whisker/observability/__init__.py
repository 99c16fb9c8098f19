"""Observability — one event model for builds, rebuilds, and the server.

Aggregates events from:
- **Pounce**: Connection lifecycle (open, request, response, disconnect, close)
- **Whisker**: Builds, skipped documents, rebuild cycles, watcher failures,
  reload fan-out

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from the event loop and the rebuild worker thread.

Quick Start:
    >>> from whisker.observability import StackCollector, EventLog
    >>> log = EventLog()
    >>> collector = StackCollector(log)
    >>> # Pass collector to Pounce as lifecycle_collector
    >>> # Whisker records its own events via collector.record_*(...)

"""

from whisker.observability.collector import StackCollector
from whisker.observability.events import (
    BuildCompleted,
    PageSkipped,
    RebuildCompleted,
    RebuildFailed,
    ReloadPublished,
    StackEvent,
    WatchFailed,
    now_ns,
)
from whisker.observability.log import EventLog

__all__ = [
    "BuildCompleted",
    "EventLog",
    "PageSkipped",
    "RebuildCompleted",
    "RebuildFailed",
    "ReloadPublished",
    "StackCollector",
    "StackEvent",
    "WatchFailed",
    "now_ns",
]
