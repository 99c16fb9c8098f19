"""Tests for whisker.reactive.broadcaster — reload fan-out to SSE clients."""

from __future__ import annotations

import asyncio
import contextlib

import pytest

from whisker.observability import ReloadPublished, StackCollector
from whisker.reactive.broadcaster import (
    CONNECTED_MESSAGE,
    RELOAD_MESSAGE,
    ReloadBroadcaster,
    ReloadSignal,
)


@contextlib.asynccontextmanager
async def _dispatching(broadcaster: ReloadBroadcaster):
    """Run the dispatcher for the duration of the block."""
    task = asyncio.create_task(broadcaster.run())
    try:
        yield
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


class TestConnections:
    """connect / disconnect bookkeeping."""

    def test_connect_and_disconnect(self) -> None:
        broadcaster = ReloadBroadcaster()
        a = broadcaster.connect()
        b = broadcaster.connect()

        assert broadcaster.client_count == 2
        assert a.client_id != b.client_id

        broadcaster.disconnect(a)
        assert broadcaster.snapshot() == frozenset({b})

    def test_disconnect_unknown_is_noop(self) -> None:
        broadcaster = ReloadBroadcaster()
        conn = ReloadBroadcaster().connect()
        broadcaster.disconnect(conn)
        assert broadcaster.client_count == 0


class TestPublish:
    """publish / fan_out — bounded queues that drop on overflow."""

    @pytest.mark.asyncio
    async def test_publish_drops_when_full(self) -> None:
        broadcaster = ReloadBroadcaster(buffer_size=2)

        assert broadcaster.publish()
        assert broadcaster.publish()
        assert not broadcaster.publish()
        assert broadcaster.pending == 2

    @pytest.mark.asyncio
    async def test_fan_out_reaches_every_client(self) -> None:
        broadcaster = ReloadBroadcaster()
        a = broadcaster.connect()
        b = broadcaster.connect()

        delivered = broadcaster.fan_out(ReloadSignal())

        assert delivered == 2
        assert a.queue.qsize() == 1
        assert b.queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_fan_out_skips_full_client(self) -> None:
        broadcaster = ReloadBroadcaster(client_buffer=1)
        slow = broadcaster.connect()
        broadcaster.fan_out(ReloadSignal())

        fast = broadcaster.connect()
        delivered = broadcaster.fan_out(ReloadSignal())

        assert delivered == 1
        assert slow.queue.qsize() == 1
        assert fast.queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_fan_out_records_event(self) -> None:
        collector = StackCollector()
        broadcaster = ReloadBroadcaster(collector=collector)
        broadcaster.connect()

        broadcaster.fan_out(ReloadSignal())

        event = collector.log.latest(ReloadPublished)
        assert event is not None
        assert event.clients_notified == 1

    @pytest.mark.asyncio
    async def test_dispatcher_drains_shared_queue(self) -> None:
        broadcaster = ReloadBroadcaster()
        conn = broadcaster.connect()

        async with _dispatching(broadcaster):
            broadcaster.publish()
            signal = await asyncio.wait_for(conn.queue.get(), timeout=1.0)

        assert isinstance(signal, ReloadSignal)
        assert broadcaster.pending == 0


class TestClientStream:
    """client_stream — the SSE event sequence for one connection."""

    @pytest.mark.asyncio
    async def test_connected_then_reload(self) -> None:
        broadcaster = ReloadBroadcaster()
        stream = broadcaster.client_stream()

        async with _dispatching(broadcaster):
            first = await anext(stream)
            assert first.data == CONNECTED_MESSAGE
            assert broadcaster.client_count == 1

            broadcaster.publish()
            second = await asyncio.wait_for(anext(stream), timeout=1.0)
            assert second.data == RELOAD_MESSAGE

        await stream.aclose()
        assert broadcaster.client_count == 0

    @pytest.mark.asyncio
    async def test_one_reload_per_publish(self) -> None:
        broadcaster = ReloadBroadcaster()
        stream = broadcaster.client_stream()

        async with _dispatching(broadcaster):
            await anext(stream)
            for _ in range(3):
                broadcaster.publish()
            events = [await asyncio.wait_for(anext(stream), timeout=1.0) for _ in range(3)]

        await stream.aclose()
        assert [e.data for e in events] == [RELOAD_MESSAGE] * 3

    @pytest.mark.asyncio
    async def test_two_clients_both_reload(self) -> None:
        broadcaster = ReloadBroadcaster()
        first = broadcaster.client_stream()
        second = broadcaster.client_stream()

        async with _dispatching(broadcaster):
            await anext(first)
            await anext(second)
            broadcaster.publish()
            got_first = await asyncio.wait_for(anext(first), timeout=1.0)
            got_second = await asyncio.wait_for(anext(second), timeout=1.0)

        await first.aclose()
        await second.aclose()
        assert got_first.data == RELOAD_MESSAGE
        assert got_second.data == RELOAD_MESSAGE

    @pytest.mark.asyncio
    async def test_late_client_sees_no_past_reloads(self) -> None:
        broadcaster = ReloadBroadcaster()

        async with _dispatching(broadcaster):
            broadcaster.publish()
            await asyncio.sleep(0.05)

            stream = broadcaster.client_stream()
            assert (await anext(stream)).data == CONNECTED_MESSAGE
            (conn,) = broadcaster.snapshot()
            await asyncio.sleep(0.05)
            assert conn.queue.empty()

        await stream.aclose()
        assert broadcaster.client_count == 0

    @pytest.mark.asyncio
    async def test_cancelled_reader_disconnects(self) -> None:
        broadcaster = ReloadBroadcaster()

        async def reader() -> None:
            async for _ in broadcaster.client_stream():
                pass

        task = asyncio.create_task(reader())
        await asyncio.sleep(0.05)
        assert broadcaster.client_count == 1

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        assert broadcaster.client_count == 0
