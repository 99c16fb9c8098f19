"""File watcher — feeds relevant source changes to the rebuild pipeline.

Watches the posts directory and the site root with watchfiles.  Only
writes (created or modified files) to posts or template sources get
through; everything else, including anything under the output directory,
is dropped here so downstream stages never see noise.

Failures reported by the underlying watch are logged and watching
resumes after a short pause; the stream ends only when ``stop()`` is
called.
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, DefaultFilter, awatch

from whisker._errors import WatchError
from whisker.observability.events import now_ns

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from whisker._types import ChangeCategory, ChangeKind
    from whisker.config import WhiskerConfig
    from whisker.observability.collector import StackCollector


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A relevant file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.
        category: What kind of source changed (decides template regeneration).
        timestamp_ns: Monotonic time the change was observed.

    """

    path: Path
    kind: ChangeKind
    category: ChangeCategory
    timestamp_ns: int = field(default_factory=now_ns, compare=False)


# Mapping from watchfiles Change enum to our kind literals.
_CHANGE_KIND_MAP: dict[Change, ChangeKind] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}

# Only writes trigger rebuilds; editors doing atomic saves show up as creates.
_WRITE_KINDS: frozenset[ChangeKind] = frozenset({"created", "modified"})


def categorize_change(path: Path, config: WhiskerConfig) -> ChangeCategory | None:
    """Classify a changed path, or return None if it is not a watched source.

    Posts are content-extension files inside the posts directory.  Template
    sources are template-extension files anywhere under the site root
    except the output directory.
    """
    output = config.output_path
    if path == output or path.is_relative_to(output):
        return None

    suffix = path.suffix.lower()
    if suffix in config.content_extensions and path.parent == config.content_path:
        return "content"
    if suffix in config.template_extensions and path.is_relative_to(config.root):
        return "template"
    return None


def to_change_event(change: Change, path_str: str, config: WhiskerConfig) -> ChangeEvent | None:
    """Turn a raw watchfiles change into a ChangeEvent, or None if irrelevant."""
    kind = _CHANGE_KIND_MAP.get(change, "modified")
    if kind not in _WRITE_KINDS:
        return None
    path = Path(path_str)
    category = categorize_change(path, config)
    if category is None:
        return None
    return ChangeEvent(path=path, kind=kind, category=category)


class ContentWatcher:
    """Watches posts and template sources for changes.

    ``changes()`` is an async iterator that runs inside the server's event
    loop.  Watching covers both the posts directory and the site root; the
    output directory is excluded at the filter level so rebuild writes
    never feed back into the watcher.

    Args:
        config: Site configuration.
        collector: Optional event collector for watcher failures.

    """

    def __init__(self, config: WhiskerConfig, collector: StackCollector | None = None) -> None:
        self._config = config
        self._collector = collector
        self._stop_event = asyncio.Event()
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether ``changes()`` is currently iterating."""
        return self._running

    def watch_paths(self) -> tuple[Path, ...]:
        """Paths handed to watchfiles, skipping any that do not exist yet."""
        candidates = (self._config.content_path, self._config.root)
        return tuple(p for p in dict.fromkeys(candidates) if p.exists())

    def stop(self) -> None:
        """Ask ``changes()`` to finish after the current batch."""
        self._stop_event.set()

    async def changes(self) -> AsyncIterator[ChangeEvent]:
        """Yield relevant ChangeEvents until ``stop()`` is called."""
        self._stop_event.clear()
        self._running = True
        try:
            while not self._stop_event.is_set():
                try:
                    async for raw_changes in awatch(
                        *self.watch_paths(),
                        watch_filter=DefaultFilter(ignore_paths=[self._config.output_path]),
                        stop_event=self._stop_event,
                        debounce=50,
                        step=25,
                    ):
                        for change, path_str in sorted(raw_changes, key=lambda c: c[1]):
                            event = to_change_event(change, path_str, self._config)
                            if event is not None:
                                yield event
                except Exception as exc:
                    self._report_failure(exc)
                    await self._pause()
                else:
                    # awatch returned without a stop request (e.g. root removed).
                    if not self._stop_event.is_set():
                        self._report_failure(WatchError("watch ended unexpectedly"))
                        await self._pause()
        finally:
            self._running = False

    def _report_failure(self, exc: BaseException) -> None:
        print(f"  Watcher error: {exc}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_watch_failed(str(exc))

    async def _pause(self) -> None:
        """Wait before re-arming the watch, waking early on stop."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._config.watch_retry_s)
        except TimeoutError:
            pass
