from __future__ import annotations

import threading
from collections import deque
from typing import Any, Generic, TypeVar

from ..errors import NatsTimeoutError

T = TypeVar("T")

HANDOFF_POOL_CAPACITY = 1024


class SingleUseHandoff(Generic[T]):
    """A one-shot value handoff between a single producer and a single consumer.

    Instances are not meant to be shared by more than one pair at a time.
    Use a `HandoffPool` to reuse them.
    """

    __slots__ = ["_event", "_value", "_has_value"]

    def __init__(self) -> None:
        self._event = threading.Event()
        self._value: T | None = None
        self._has_value = False

    def set(self, value: T) -> None:
        """Store the value and wake the waiter."""
        self._value = value
        self._has_value = True
        self._event.set()

    def get(self, timeout: float | None = None) -> T:
        """Wait for the value.

        Args:
            timeout: Maximum number of seconds to wait. `None` or a negative
                value waits forever.

        Raises:
            NatsTimeoutError: if no value was set within `timeout`.
        """
        if timeout is not None and timeout < 0:
            timeout = None
        if not self._event.wait(timeout):
            raise NatsTimeoutError()
        return self._value  # type: ignore[return-value]

    def is_set(self) -> bool:
        return self._has_value

    def reset(self) -> None:
        """Clear the value so that the handoff can be used again."""
        self._has_value = False
        self._value = None
        self._event.clear()


class HandoffPool(Generic[T]):
    """A bounded free list of `SingleUseHandoff` instances.

    Acquiring and releasing are thread safe. Released handoffs are reset
    and kept only while the pool holds less than `capacity` of them.
    """

    __slots__ = ["capacity", "_free", "_lock"]

    def __init__(self, capacity: int = HANDOFF_POOL_CAPACITY) -> None:
        self.capacity = capacity
        self._free: deque[SingleUseHandoff[T]] = deque()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._free)

    def acquire(self) -> SingleUseHandoff[T]:
        """Get an unused handoff from the pool, or create one if none are available."""
        with self._lock:
            if self._free:
                return self._free.pop()
        return SingleUseHandoff()

    def release(self, handoff: SingleUseHandoff[T]) -> None:
        """Return a handoff to the pool."""
        handoff.reset()
        with self._lock:
            if len(self._free) < self.capacity:
                self._free.append(handoff)


_pools: dict[Any, HandoffPool[Any]] = {}
_pools_lock = threading.Lock()


def handoff_pool(value_type: type[T]) -> HandoffPool[T]:
    """Return the shared pool of handoffs carrying values of `value_type`."""
    with _pools_lock:
        pool = _pools.get(value_type)
        if pool is None:
            pool = _pools[value_type] = HandoffPool()
        return pool
