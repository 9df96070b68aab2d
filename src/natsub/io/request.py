from __future__ import annotations

import threading
import uuid
from typing import TYPE_CHECKING

from ..core.handoff import SingleUseHandoff, handoff_pool
from ..core.msg import Msg
from ..errors import NoRespondersError
from .subscription import AsyncSubscription

if TYPE_CHECKING:
    from ..core.connection import Connection
    from ..core.subscription_registry import SubscriptionRegistry


class RequestReplyInbox:
    """Correlate replies with requests using a single wildcard subscription.

    Each request publishes with a unique reply subject below the inbox
    prefix and waits on a pooled `SingleUseHandoff` until the reply is
    routed back by the inbox subscription.
    """

    def __init__(
        self,
        conn: Connection,
        registry: SubscriptionRegistry,
        inbox_prefix: str = "_INBOX",
    ) -> None:
        self.conn = conn
        self.registry = registry
        self._resp_sub_prefix = f"{inbox_prefix}.{uuid.uuid4().hex}."
        self._resp_map: dict[str, SingleUseHandoff[Msg]] = {}
        self._pool = handoff_pool(Msg)
        self._lock = threading.Lock()
        self._sub: AsyncSubscription | None = None

    def _new_subject(self) -> str:
        return self._resp_sub_prefix + uuid.uuid4().hex

    def subscription(self) -> AsyncSubscription:
        """Return the inbox subscription, creating it on first use."""
        with self._lock:
            if self._sub is not None and self._sub.is_valid():
                return self._sub
            sub = AsyncSubscription(
                self.conn, self.registry.next_sid(), self._resp_sub_prefix + "*"
            )
            self.registry.add(sub)
            try:
                sub.set_handler(self._request_sub_callback)
            except BaseException:
                self.registry.remove(sub.sid())
                raise
            self._sub = sub
            return sub

    def _request_sub_callback(self, msg: Msg) -> None:
        with self._lock:
            handoff = self._resp_map.pop(msg.subject(), None)
            if handoff is not None:
                handoff.set(msg)

    def request(
        self,
        subject: str,
        payload: bytes | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 10,
    ) -> Msg:
        """Publish a request and wait for its reply.

        Raises:
            NatsTimeoutError: if no reply arrived within `timeout` seconds.
            NoRespondersError: if nobody was subscribed to `subject`.
        """
        self.subscription()
        reply = self._new_subject()
        handoff = self._pool.acquire()
        with self._lock:
            self._resp_map[reply] = handoff
        try:
            self.conn.publish(subject, payload or b"", reply=reply, headers=headers)
            msg = handoff.get(timeout)
        finally:
            with self._lock:
                self._resp_map.pop(reply, None)
            self._pool.release(handoff)
        status = msg.status()
        if status is not None and status.is_no_responders():
            raise NoRespondersError(f"no responders available for request on {subject}")
        return msg

    def close(self) -> None:
        with self._lock:
            sub = self._sub
            self._sub = None
            self._resp_map.clear()
        if sub is not None:
            sub.unsubscribe()
