"""Unified event model for build and reload observability.

Defines event types for the build pipeline and the rebuild loop.
Pounce lifecycle events are recorded alongside them unchanged.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Content events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PageSkipped:
    """A source document could not be loaded and was left out.

    Attributes:
        path: Absolute path to the document.
        reason: Why it was skipped.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    reason: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Build events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BuildCompleted:
    """A full build finished writing the output tree.

    Attributes:
        pages: Number of posts published.
        drafts_skipped: Number of drafts left out.
        load_errors: Number of documents the loader skipped.
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    pages: int
    drafts_skipped: int
    load_errors: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Rebuild loop events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RebuildCompleted:
    """A coalesced trigger produced a successful rebuild.

    Attributes:
        trigger_path: Most recent changed file of the burst.
        category: Category of that change.
        events: Number of changes coalesced into the trigger.
        reload_queued: False if the reload signal was dropped (buffer full).
        duration_ms: Time from trigger to publish.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    trigger_path: str
    category: str
    events: int
    reload_queued: bool
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RebuildFailed:
    """A rebuild cycle was abandoned.

    Attributes:
        trigger_path: Most recent changed file of the burst.
        stage: ``"template"`` if the regeneration command failed, else ``"build"``.
        error: Error message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    trigger_path: str
    stage: Literal["template", "build"]
    error: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class WatchFailed:
    """The filesystem watcher reported an error and will resume.

    Attributes:
        error: Error message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    error: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ReloadPublished:
    """A reload signal was dispatched to connected clients.

    Attributes:
        clients_notified: Number of clients the signal was queued for.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    clients_notified: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = (
    PageSkipped
    | BuildCompleted
    | RebuildCompleted
    | RebuildFailed
    | WatchFailed
    | ReloadPublished
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
