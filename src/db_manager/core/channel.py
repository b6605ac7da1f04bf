"""
Bounded hand-off of events from a background producer thread to one consumer.

The producer blocks while the channel is full rather than dropping events.
Closing the consumer side abandons the producer at its next hand-off: the
producer closes its source iterator and exits quietly.
"""

import logging
import queue
import threading
from typing import Generic, Iterable, Iterator, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Marks the end of the stream
_END = object()

# Seconds between checks for a closed consumer while blocked
_POLL_INTERVAL = 0.1


class EventChannel(Generic[T]):
    """A bounded queue that knows whether its consumer has gone away."""

    def __init__(self, capacity: int = 5):
        if capacity < 1:
            raise ValueError("Channel capacity must be at least 1")
        self._queue: "queue.Queue" = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, item) -> bool:
        """
        Hand ``item`` to the consumer, blocking while the channel is full.

        Returns:
            False if the consumer closed the channel and the item was not sent
        """
        while not self._closed.is_set():
            try:
                self._queue.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def receive(self, timeout: Optional[float] = None):
        """Next item, or the end marker. Raises queue.Empty on timeout."""
        return self._queue.get(timeout=timeout)

    def close(self) -> None:
        self._closed.set()


class EventStream(Generic[T]):
    """
    Consumer side of a background task.

    Iterate to receive events until the producer finishes. Closing the
    stream (explicitly, via ``with`` or by dropping the last reference)
    cancels the producer.
    """

    def __init__(self, channel: EventChannel, thread: threading.Thread):
        self._channel = channel
        self._thread = thread
        self._finished = False

    def __iter__(self) -> Iterator[T]:
        while not self._finished and not self._channel.closed:
            try:
                item = self._channel.receive(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            if item is _END:
                self._finished = True
                return
            yield item

    def __enter__(self) -> "EventStream[T]":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __del__(self):
        self._channel.close()

    @property
    def finished(self) -> bool:
        """Whether the producer delivered its whole sequence."""
        return self._finished

    def close(self) -> None:
        """Stop receiving; the producer is abandoned at its next hand-off."""
        self._channel.close()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the producer thread to exit.

        Returns:
            True if the thread has exited
        """
        self._thread.join(timeout)
        return not self._thread.is_alive()


def _produce(source: Iterator, channel: EventChannel) -> None:
    try:
        for item in source:
            if not channel.send(item):
                logger.debug("Consumer closed the stream; abandoning producer")
                return
        channel.send(_END)
    except Exception:
        # Nothing downstream can receive this, so record it here
        logger.exception("Background producer failed")
        channel.send(_END)
    finally:
        close = getattr(source, "close", None)
        if close is not None:
            close()


def run_in_background(
    source: Iterable[T],
    capacity: int = 5,
    name: Optional[str] = None,
) -> EventStream[T]:
    """
    Drive ``source`` on a daemon thread, delivering its items through a
    bounded channel.

    Args:
        source: Lazy sequence to drain; it is closed when the consumer goes away
        capacity: Maximum number of undelivered items
        name: Thread name, for logs

    Returns:
        The consumer side of the channel
    """
    channel: EventChannel = EventChannel(capacity)
    thread = threading.Thread(
        target=_produce,
        args=(iter(source), channel),
        name=name or "background-producer",
        daemon=True,
    )
    thread.start()
    return EventStream(channel, thread)
