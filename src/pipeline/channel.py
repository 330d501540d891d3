"""
Module: channel.py
Description: Closable FIFO channel between pipeline stages and a sink.

Producers put events and close the channel once they are done. The
single consumer iterates it; iteration ends when the channel has been
closed and every queued event has been taken.
"""

import queue
import threading
from typing import Generic, Iterator, Optional, TypeVar

from delivery.errors import ChannelClosedError

T = TypeVar("T")

_CLOSED = object()


class EventChannel(Generic[T]):
    """
    Bounded (or unbounded) single-consumer channel.

    Attributes:
        capacity: Maximum queued items, 0 for unbounded
    """

    def __init__(self, capacity: int = 0):
        """
        Initialize the channel.

        Args:
            capacity: Maximum queued items; 0 means unbounded

        Raises:
            ValueError: If capacity is negative
        """
        if capacity < 0:
            raise ValueError("capacity must be >= 0")

        self.capacity = capacity
        # one slot more than capacity so close() never blocks behind producers
        self._queue: "queue.Queue[object]" = queue.Queue(
            maxsize=capacity + 1 if capacity else 0
        )
        self._slots: Optional[threading.BoundedSemaphore] = (
            threading.BoundedSemaphore(capacity) if capacity else None
        )
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, item: T, timeout: Optional[float] = None) -> None:
        """
        Queue an item, blocking while the channel is full.

        Raises:
            ChannelClosedError: If the channel was closed
            queue.Full: If timeout expired while the channel stayed full
        """
        if self._closed:
            raise ChannelClosedError("channel is closed")
        if self._slots is not None and not self._slots.acquire(timeout=timeout):
            raise queue.Full
        with self._lock:
            if self._closed:
                if self._slots is not None:
                    self._slots.release()
                raise ChannelClosedError("channel is closed")
            self._queue.put_nowait(item)

    def close(self) -> None:
        """Mark the end of the stream. Queued items stay readable."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def get(self) -> T:
        """
        Take the next item, blocking until one is available.

        Raises:
            ChannelClosedError: Once the channel is closed and drained
        """
        item = self._queue.get()
        if item is _CLOSED:
            # keep the marker for any later reader
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosedError("channel is closed and drained")
        if self._slots is not None:
            self._slots.release()
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except ChannelClosedError:
                return

    def __len__(self) -> int:
        return max(0, self._queue.qsize() - (1 if self._closed else 0))
