"""Stack collector — one sink for build, rebuild, and server events.

Implements Pounce's ``LifecycleCollector`` protocol so it can be passed
directly to the Pounce server.  Also provides methods for recording the
build and rebuild-loop events Whisker produces itself.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe to use from the event loop and from the rebuild worker thread.

"""

from __future__ import annotations

from typing import Any, Literal

from whisker.observability.events import (
    BuildCompleted,
    PageSkipped,
    RebuildCompleted,
    RebuildFailed,
    ReloadPublished,
    WatchFailed,
    now_ns,
)
from whisker.observability.log import EventLog


class StackCollector:
    """Unified event collector.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Pounce LifecycleCollector protocol -----

    def record(self, event: Any) -> None:
        """Record a Pounce lifecycle event.

        Implements the ``LifecycleCollector.record()`` protocol.
        Pounce events are stored directly since they are frozen dataclasses.

        """
        self._log.append(event)

    # ----- Content and build events -----

    def record_page_skipped(self, path: str, reason: str) -> None:
        """Record a document the loader had to skip."""
        self._log.append(PageSkipped(path=path, reason=reason, timestamp_ns=now_ns()))

    def record_build(
        self,
        *,
        pages: int,
        drafts_skipped: int = 0,
        load_errors: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a completed build."""
        self._log.append(
            BuildCompleted(
                pages=pages,
                drafts_skipped=drafts_skipped,
                load_errors=load_errors,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Rebuild loop events -----

    def record_rebuild(
        self,
        trigger_path: str,
        *,
        category: str,
        events: int = 1,
        reload_queued: bool = True,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a successful rebuild cycle."""
        self._log.append(
            RebuildCompleted(
                trigger_path=trigger_path,
                category=category,
                events=events,
                reload_queued=reload_queued,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_rebuild_failed(
        self,
        trigger_path: str,
        *,
        stage: Literal["template", "build"],
        error: str,
    ) -> None:
        """Record an abandoned rebuild cycle."""
        self._log.append(
            RebuildFailed(
                trigger_path=trigger_path,
                stage=stage,
                error=error,
                timestamp_ns=now_ns(),
            )
        )

    def record_watch_failed(self, error: str) -> None:
        """Record a watcher failure."""
        self._log.append(WatchFailed(error=error, timestamp_ns=now_ns()))

    def record_reload(self, *, clients_notified: int) -> None:
        """Record a reload signal fan-out."""
        self._log.append(ReloadPublished(clients_notified=clients_notified, timestamp_ns=now_ns()))
