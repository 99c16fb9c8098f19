"""Reload broadcaster — fans reload signals out to connected browsers.

Rebuilds publish into one shared, bounded signal queue.  A single
dispatcher task drains it and copies each signal into every connected
client's own bounded queue, which that client's SSE stream drains.

Both queues drop on overflow.  Reloading is idempotent, so a signal that
is already pending makes any extra one redundant.
"""

from __future__ import annotations

import asyncio
import itertools
import sys
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from whisker.observability.events import now_ns

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chirp import SSEEvent

    from whisker.observability.collector import StackCollector


CONNECTED_MESSAGE = "connected"
RELOAD_MESSAGE = "reload"


@dataclass(frozen=True, slots=True)
class ReloadSignal:
    """Notification that the output tree was rebuilt."""

    timestamp_ns: int = field(default_factory=now_ns)


@dataclass(frozen=True, slots=True)
class ReloadConnection:
    """A connected reload stream client.

    Attributes:
        client_id: Unique identifier for this connection.
        queue: Bounded queue of signals waiting to be sent to this client.

    """

    client_id: str
    queue: asyncio.Queue[ReloadSignal] = field(compare=False, hash=False)


class ReloadBroadcaster:
    """Shared reload channel between the rebuild trigger and SSE clients.

    Thread-safe: the connection registry is protected by a lock.  The
    signal queue belongs to the event loop that runs ``run()``.

    Args:
        buffer_size: Capacity of the shared signal queue.
        client_buffer: Capacity of each connection's queue.
        collector: Optional event collector for publish/drop accounting.

    """

    def __init__(
        self,
        buffer_size: int = 10,
        client_buffer: int = 10,
        collector: StackCollector | None = None,
    ) -> None:
        self._signals: asyncio.Queue[ReloadSignal] = asyncio.Queue(maxsize=buffer_size)
        self._client_buffer = client_buffer
        self._collector = collector
        self._connections: set[ReloadConnection] = set()
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    @property
    def client_count(self) -> int:
        """Number of currently connected clients."""
        with self._lock:
            return len(self._connections)

    @property
    def pending(self) -> int:
        """Signals published but not yet dispatched."""
        return self._signals.qsize()

    # ----- connections -----

    def connect(self) -> ReloadConnection:
        """Register a new client and return its connection."""
        conn = ReloadConnection(
            client_id=f"reload-{next(self._ids)}",
            queue=asyncio.Queue(maxsize=self._client_buffer),
        )
        with self._lock:
            self._connections.add(conn)
        return conn

    def disconnect(self, conn: ReloadConnection) -> None:
        """Remove a client; unknown connections are ignored."""
        with self._lock:
            self._connections.discard(conn)

    def snapshot(self) -> frozenset[ReloadConnection]:
        """Current connections (snapshot, no lock held on return)."""
        with self._lock:
            return frozenset(self._connections)

    # ----- signals -----

    def publish(self) -> bool:
        """Queue one reload signal without blocking.

        Returns:
            False if the buffer was full and the signal was dropped.

        """
        try:
            self._signals.put_nowait(ReloadSignal())
        except asyncio.QueueFull:
            return False
        return True

    def fan_out(self, signal: ReloadSignal) -> int:
        """Copy *signal* to every connected client.

        Returns:
            Number of clients the signal was queued for.

        """
        delivered = 0
        for conn in self.snapshot():
            try:
                conn.queue.put_nowait(signal)
                delivered += 1
            except asyncio.QueueFull:
                pass  # Client already has reloads pending
        if self._collector is not None:
            self._collector.record_reload(clients_notified=delivered)
        return delivered

    async def run(self) -> None:
        """Dispatcher loop: drain the shared queue until cancelled."""
        while True:
            signal = await self._signals.get()
            try:
                self.fan_out(signal)
            except Exception as exc:
                print(f"  Reload dispatch error: {exc}", file=sys.stderr)
            finally:
                self._signals.task_done()

    # ----- streaming -----

    async def client_stream(self, conn: ReloadConnection | None = None) -> AsyncIterator[SSEEvent]:
        """Async generator of SSE events for one connection.

        Registers a new connection on first iteration unless *conn* is given.
        Yields ``connected`` once, then one ``reload`` per signal.  Used as
        the generator for Chirp's ``EventStream``, which supplies idle
        keepalives and cancels the generator when the client goes away.

        Catches ``CancelledError`` (client disconnect / task cancellation)
        and ``GeneratorExit`` (generator cleanup) so a disconnect ends the
        stream quietly; the connection is always unregistered.

        """
        from chirp import SSEEvent

        if conn is None:
            conn = self.connect()
        try:
            yield SSEEvent(data=CONNECTED_MESSAGE)
            while True:
                await conn.queue.get()
                yield SSEEvent(data=RELOAD_MESSAGE)
        except (asyncio.CancelledError, GeneratorExit):
            return
        finally:
            self.disconnect(conn)
