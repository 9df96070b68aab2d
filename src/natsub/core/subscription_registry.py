from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .msg import Msg
    from .subscription import Subscription


class SubscriptionRegistry:
    """SubscriptionRegistry is the routing table of a connection.

    Messages are routed by subscription ID. Picking a single member
    of a queue group is done by the server, which only sends each
    message to one of the matching subscription IDs.
    """

    __slots__ = ["_subs", "_last_sid", "_lock"]

    def __init__(
        self,
    ) -> None:
        self._subs: dict[int, Subscription] = {}
        self._last_sid = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._subs)

    def __contains__(self, sid: int) -> bool:
        return sid in self._subs

    def next_sid(self) -> int:
        """Get the next available subscription ID.

        Subscription IDs start at 1 and are incremented by 1.

        Returns:
            The next subscription ID.
        """
        with self._lock:
            self._last_sid += 1
            return self._last_sid

    def add(self, sub: Subscription) -> None:
        """Add a subscription to the registry.

        Args:
            sub: Subscription to add.

        Raises:
            ValueError: if another subscription uses the same ID.
        """
        with self._lock:
            if sub.sid() in self._subs:
                raise ValueError(f"sid already exists: {sub.sid()}")
            self._subs[sub.sid()] = sub

    def get(self, sid: int) -> Subscription | None:
        return self._subs.get(sid)

    def subscriptions(self) -> list[Subscription]:
        with self._lock:
            return list(self._subs.values())

    def remove(self, sid: int) -> None:
        """Remove a subscription from the registry.

        Args:
            sid: Subscription ID to remove.
        """
        with self._lock:
            self._subs.pop(sid, None)

    def clear(self) -> None:
        """Clear the registry.

        This will remove all subscriptions from the registry
        and reset the last subscription ID to 0.
        """
        with self._lock:
            self._subs.clear()
            self._last_sid = 0

    def observe(self, msg: Msg) -> bool:
        """Observe a message.

        This will forward the message to the subscription
        which is registered for the message's subscription ID.
        A subscription refusing the message is removed from
        the registry.

        Args:
            msg: Message to observe.

        Returns:
            True if a subscription accepted the message.
        """
        sub = self._subs.get(msg.sid())
        if not sub:
            return False
        if sub.observe(msg):
            return True
        self.remove(sub.sid())
        return False

    def close_all(self) -> None:
        """Close all subscriptions after the connection is closed."""
        for sub in self.subscriptions():
            sub.close()
        self.clear()
