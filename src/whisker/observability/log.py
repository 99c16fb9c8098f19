"""Event log — bounded, thread-safe record of what the server has done.

Keeps the most recent events in a ring buffer so ``/_reload/stats`` can
report on builds, rebuild failures, and reload fan-out without any
external tooling.

Thread Safety:
    All methods are protected by a ``threading.Lock``.  The rebuild worker
    thread and the event loop append concurrently.

"""

import threading
from collections import deque
from dataclasses import asdict, is_dataclass
from typing import Any

from whisker.observability.events import BuildCompleted, RebuildCompleted, RebuildFailed, StackEvent


class EventLog:
    """Bounded event store with query support.

    When the buffer is full, the oldest events are discarded automatically.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 5_000) -> None:
        self._max_events = max_events
        self._events: deque[StackEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: StackEvent) -> None:
        """Record an event in the log."""
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        path: str | None = None,
        limit: int = 100,
    ) -> list[StackEvent]:
        """Return matching events, most recent first.

        Args:
            event_type: Only return events of this type.
            path: Only return events whose ``path`` or ``trigger_path``
                contains this substring.
            limit: Maximum number of events to return.

        """
        with self._lock:
            snapshot = list(self._events)

        results: list[StackEvent] = []
        for event in reversed(snapshot):
            if len(results) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if path is not None:
                event_path = getattr(event, "path", None) or getattr(event, "trigger_path", None) or ""
                if path not in event_path:
                    continue
            results.append(event)
        return results

    def latest(self, event_type: type) -> StackEvent | None:
        """Most recent event of *event_type*, or None."""
        found = self.query(event_type=event_type, limit=1)
        return found[0] if found else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Summary counts by event type plus the latest build and rebuild outcomes."""
        with self._lock:
            events = list(self._events)

        type_counts: dict[str, int] = {}
        for event in events:
            name = type(event).__name__
            type_counts[name] = type_counts.get(name, 0) + 1

        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": type_counts,
            "last_build": _as_dict(self.latest(BuildCompleted)),
            "last_rebuild": _as_dict(self.latest(RebuildCompleted)),
            "last_failure": _as_dict(self.latest(RebuildFailed)),
        }


def _as_dict(event: object) -> dict[str, Any] | None:
    if event is None or not is_dataclass(event) or isinstance(event, type):
        return None
    return asdict(event)
