"""Latest-value streams for status records.

A StatusStream always holds a current value. Subscribers get that value
immediately and every later replacement; async consumers can iterate with
``watch()``. The owning component is the only writer.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

from src.hubsync.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class StatusStream(Generic[T]):
    """Single-writer, multi-reader holder of the latest status record."""

    def __init__(self, initial: T, name: str = "status") -> None:
        self._value = initial
        self._name = name
        self._listeners: list[Listener[T]] = []
        self._queues: set[asyncio.Queue[T]] = set()

    @property
    def value(self) -> T:
        """Current value (pull accessor)."""
        return self._value

    def _notify(self, listener: Listener[T], value: T) -> None:
        try:
            listener(value)
        except Exception as e:
            # A broken observer must not stop the owning loop
            logger.warning("Stream listener failed", stream=self._name, error=str(e))

    def publish(self, value: T) -> None:
        """Replace the current value and notify every subscriber."""
        self._value = value
        for listener in list(self._listeners):
            self._notify(listener, value)
        for queue in self._queues:
            queue.put_nowait(value)

    def subscribe(self, listener: Listener[T]) -> Callable[[], None]:
        """Register a listener; it is called with the current value right away.

        Returns:
            A callable that removes the listener. Calling it twice is harmless.
        """
        self._listeners.append(listener)
        self._notify(listener, self._value)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def watch(self) -> AsyncIterator[T]:
        """Yield the current value, then each published value, until the consumer stops."""
        queue: asyncio.Queue[T] = asyncio.Queue()
        queue.put_nowait(self._value)
        self._queues.add(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._queues.discard(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners) + len(self._queues)
