from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .subscription import Subscription


class Connection(metaclass=abc.ABCMeta):
    """Interface of the connection owning subscriptions.

    Subscriptions only hold a reference to their connection to send
    protocol frames and to leave the routing table. All methods are
    fire-and-forget from the subscription's point of view.
    """

    @abc.abstractmethod
    def is_closed(self) -> bool:
        """Returns True when the connection has been closed."""
        ...

    @abc.abstractmethod
    def publish(
        self,
        subject: str,
        payload: bytes = b"",
        reply: str = "",
        headers: dict[str, str] | None = None,
    ) -> None:
        """Queue a PUB or HPUB frame."""
        ...

    @abc.abstractmethod
    def send_subscription_message(self, sub: Subscription) -> None:
        """Queue a SUB frame for the subscription."""
        ...

    @abc.abstractmethod
    def send_unsubscribe_message(self, sub: Subscription, max_msgs: int = 0) -> None:
        """Queue an UNSUB frame for the subscription.

        When `max_msgs` is positive, the server removes interest
        after delivering that many messages.
        """
        ...

    @abc.abstractmethod
    def remove_subscription(self, sub: Subscription) -> None:
        """Remove the subscription from the routing table."""
        ...
