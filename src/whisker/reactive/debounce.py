"""Debounce coalescer — one rebuild per burst of edits.

Editors often write several files (or one file several times) per logical
save.  The Debouncer keeps a single timer: every relevant event cancels it
and arms it again, so it fires once, a quiet interval after the *last*
event of a burst.

The trigger it emits carries the category of the most recent event.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from whisker._types import ChangeCategory
    from whisker.content.watcher import ChangeEvent


@dataclass(frozen=True, slots=True)
class CoalescedTrigger:
    """A single rebuild request standing in for a burst of changes.

    Attributes:
        category: Category of the most recent event in the burst.
        path: Path of the most recent event.
        events: Number of relevant events coalesced into this trigger.

    """

    category: ChangeCategory
    path: Path
    events: int


class Debouncer:
    """Single-timer debouncer bound to the running event loop.

    Args:
        delay_s: Quiet interval in seconds.
        on_fire: Called with the CoalescedTrigger when the timer fires.

    Not thread-safe: ``push`` and ``cancel`` must be called from the loop
    that owns the timer.
    """

    __slots__ = ("_count", "_delay_s", "_handle", "_latest", "_on_fire")

    def __init__(self, delay_s: float, on_fire: Callable[[CoalescedTrigger], None]) -> None:
        self._delay_s = delay_s
        self._on_fire = on_fire
        self._latest: ChangeEvent | None = None
        self._count = 0
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """Whether a timer is currently armed."""
        return self._handle is not None

    @property
    def latest(self) -> ChangeEvent | None:
        """The most recent event of the current burst."""
        return self._latest

    def push(self, event: ChangeEvent) -> None:
        """Record *event* and restart the quiet interval from now."""
        self._latest = event
        self._count += 1
        if self._handle is not None:
            self._handle.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay_s, self._fire)

    def cancel(self) -> None:
        """Disarm the timer and forget the pending burst."""
        if self._handle is not None:
            self._handle.cancel()
        self._reset()

    def _fire(self) -> None:
        latest, count = self._latest, self._count
        self._reset()
        if latest is None:
            return
        self._on_fire(CoalescedTrigger(category=latest.category, path=latest.path, events=count))

    def _reset(self) -> None:
        self._handle = None
        self._latest = None
        self._count = 0
