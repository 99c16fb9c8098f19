"""Tests for whisker.reactive.debounce — burst coalescing."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from whisker.content.watcher import ChangeEvent
from whisker.reactive.debounce import CoalescedTrigger, Debouncer

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _event(name: str, category: str = "content") -> ChangeEvent:
    return ChangeEvent(path=Path(f"/site/posts/{name}"), kind="modified", category=category)  # type: ignore[arg-type]


class _Recorder:
    """Collects fired triggers together with the loop time they fired at."""

    def __init__(self) -> None:
        self.fired: list[tuple[float, CoalescedTrigger]] = []

    def __call__(self, trigger: CoalescedTrigger) -> None:
        self.fired.append((asyncio.get_running_loop().time(), trigger))


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestDebouncer:
    """Debouncer — one fire per burst, a quiet interval after the last event."""

    @pytest.mark.asyncio
    async def test_single_event_fires_once(self) -> None:
        recorder = _Recorder()
        debouncer = Debouncer(0.05, recorder)

        debouncer.push(_event("a.md"))
        assert debouncer.pending
        await asyncio.sleep(0.15)

        assert len(recorder.fired) == 1
        assert recorder.fired[0][1].events == 1
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_burst_coalesces_after_last_event(self) -> None:
        loop = asyncio.get_running_loop()
        recorder = _Recorder()
        debouncer = Debouncer(0.1, recorder)

        start = loop.time()
        debouncer.push(_event("a.md"))
        await asyncio.sleep(0.04)
        debouncer.push(_event("b.md"))
        await asyncio.sleep(0.05)
        debouncer.push(_event("c.md"))
        await asyncio.sleep(0.3)

        assert len(recorder.fired) == 1
        fired_at, trigger = recorder.fired[0]
        # Last event at >= 90ms, so the fire is at least 190ms after the first.
        assert fired_at - start >= 0.185
        assert trigger.events == 3
        assert trigger.path.name == "c.md"

    @pytest.mark.asyncio
    async def test_latest_category_wins(self) -> None:
        recorder = _Recorder()
        debouncer = Debouncer(0.05, recorder)

        debouncer.push(_event("layout.html", "template"))
        debouncer.push(_event("a.md", "content"))
        await asyncio.sleep(0.15)

        assert recorder.fired[0][1].category == "content"

    @pytest.mark.asyncio
    async def test_separate_bursts_fire_separately(self) -> None:
        recorder = _Recorder()
        debouncer = Debouncer(0.03, recorder)

        debouncer.push(_event("a.md"))
        await asyncio.sleep(0.1)
        debouncer.push(_event("b.md", "template"))
        await asyncio.sleep(0.1)

        assert [t.path.name for _, t in recorder.fired] == ["a.md", "b.md"]
        assert [t.events for _, t in recorder.fired] == [1, 1]

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_burst(self) -> None:
        recorder = _Recorder()
        debouncer = Debouncer(0.05, recorder)

        debouncer.push(_event("a.md"))
        debouncer.cancel()
        await asyncio.sleep(0.1)

        assert recorder.fired == []
        assert debouncer.latest is None
        assert not debouncer.pending
