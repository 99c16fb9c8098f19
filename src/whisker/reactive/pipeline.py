"""Reload pipeline — connects the watcher to rebuilds.

Orchestrates the change propagation flow:
    1. ContentWatcher yields relevant ChangeEvents
    2. Debouncer collapses each burst into one CoalescedTrigger
    3. Triggers queue up for a single worker task
    4. The worker runs RebuildTrigger, which publishes the reload

Events that arrive while a rebuild is running re-arm the debouncer as
usual; the resulting triggers wait in the queue.  When the current rebuild
finishes, everything queued is folded into a single follow-up rebuild.
Rebuilds never overlap.
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
from typing import TYPE_CHECKING

from whisker.reactive.debounce import CoalescedTrigger, Debouncer

if TYPE_CHECKING:
    from whisker.content.watcher import ChangeEvent, ContentWatcher
    from whisker.reactive.rebuild import RebuildTrigger


def merge_triggers(earlier: CoalescedTrigger, later: CoalescedTrigger) -> CoalescedTrigger:
    """Combine two queued triggers into one rebuild request.

    The later trigger names the path; a template change in either keeps the
    template command in the cycle.
    """
    category = "template" if "template" in (earlier.category, later.category) else later.category
    return CoalescedTrigger(category=category, path=later.path, events=earlier.events + later.events)


class ReloadPipeline:
    """Watcher → debounce → rebuild loop for serve mode.

    Args:
        watcher: Source of relevant change events.
        trigger: Runs a rebuild cycle per coalesced trigger.
        delay_s: Debounce quiet interval in seconds.

    """

    def __init__(self, watcher: ContentWatcher, trigger: RebuildTrigger, *, delay_s: float) -> None:
        self._watcher = watcher
        self._trigger = trigger
        self._triggers: asyncio.Queue[CoalescedTrigger] = asyncio.Queue()
        self._debouncer = Debouncer(delay_s, self._triggers.put_nowait)
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def debouncer(self) -> Debouncer:
        """The pipeline's debouncer."""
        return self._debouncer

    @property
    def pending_triggers(self) -> int:
        """Coalesced triggers waiting for the worker."""
        return self._triggers.qsize()

    def handle_change(self, event: ChangeEvent) -> None:
        """Feed one change event into the debouncer."""
        print(f"  📝 File changed: {event.path}", file=sys.stderr)
        self._debouncer.push(event)

    async def consume(self) -> None:
        """Drain the watcher into the debouncer until the watcher stops."""
        async for event in self._watcher.changes():
            self.handle_change(event)

    def _take_pending(self, trigger: CoalescedTrigger) -> tuple[CoalescedTrigger, int]:
        """Fold every trigger already queued behind *trigger* into one.

        Returns the merged trigger and how many queue items it consumed.
        """
        taken = 1
        while True:
            try:
                later = self._triggers.get_nowait()
            except asyncio.QueueEmpty:
                return trigger, taken
            trigger = merge_triggers(trigger, later)
            taken += 1

    async def work(self) -> None:
        """Single worker: one rebuild for everything queued since the last one."""
        while True:
            trigger, taken = self._take_pending(await self._triggers.get())
            try:
                await self._trigger.run(trigger)
            except Exception as exc:
                print(f"  Pipeline error: {exc}", file=sys.stderr)
            finally:
                for _ in range(taken):
                    self._triggers.task_done()

    def start(self) -> None:
        """Spawn the consumer and worker tasks on the running loop."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self.consume(), name="whisker-watch"),
            asyncio.create_task(self.work(), name="whisker-rebuild"),
        ]

    async def stop(self) -> None:
        """Stop watching, drop any pending burst, and cancel both tasks."""
        self._watcher.stop()
        self._debouncer.cancel()
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
