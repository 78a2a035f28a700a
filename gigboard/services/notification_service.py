from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, Protocol, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

EVENT_BID_HIRED = "bid-hired"
EVENT_BID_RECEIVED = "bid-received"


class Notifier(Protocol):
    """Keyed, best-effort push: deliver to `identity` if connected."""

    async def notify(self, identity: str, payload: Dict[str, Any]) -> None:
        ...


class ConnectionManager:
    """
    Live WebSocket connections keyed by user id. A user may hold several
    (tabs, devices); offline users simply have none.
    """

    def __init__(self) -> None:
        self._connections: Dict[str, Set[WebSocket]] = {}
        self._lock = threading.Lock()

    async def register(self, identity: str, websocket: WebSocket) -> None:
        with self._lock:
            self._connections.setdefault(identity, set()).add(websocket)
        logger.info("socket registered", extra={"user_id": identity})

    async def unregister(self, identity: str, websocket: WebSocket) -> None:
        with self._lock:
            sockets = self._connections.get(identity)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._connections[identity]
        logger.info("socket deregistered", extra={"user_id": identity})

    def connection_count(self, identity: str) -> int:
        return len(self._connections.get(identity, ()))

    async def notify(self, identity: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            targets = list(self._connections.get(identity, ()))
        if not targets:
            logger.debug("no live connection; event dropped", extra={"user_id": identity})
            return

        for ws in targets:
            try:
                await ws.send_json(payload)
            except Exception:
                # a dead socket must not block delivery to the others
                logger.info("dropping unreachable socket", extra={"user_id": identity})
                await self.unregister(identity, ws)


class NotificationDispatcher:
    """
    Builds the marketplace events and hands them to a Notifier.

    Delivery is fire-and-forget: failures are logged and never reach the
    caller, because the state change they describe is already committed.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    async def _send(self, identity: str, payload: Dict[str, Any]) -> None:
        try:
            await self.notifier.notify(identity, payload)
        except Exception:
            logger.exception(
                "notification delivery failed",
                extra={"user_id": identity, "event": payload.get("event")},
            )

    async def bid_hired(self, *, freelancer_id: str, gig_title: str, bid_id: str) -> None:
        await self._send(
            str(freelancer_id),
            {
                "event": EVENT_BID_HIRED,
                "gigTitle": gig_title,
                "bidId": str(bid_id),
                "message": f"Congratulations! You have been hired for {gig_title}",
            },
        )

    async def bid_received(
        self,
        *,
        owner_id: str,
        gig_id: str,
        gig_title: str,
        freelancer_name: Optional[str],
        bid_id: str,
    ) -> None:
        await self._send(
            str(owner_id),
            {
                "event": EVENT_BID_RECEIVED,
                "gigId": str(gig_id),
                "gigTitle": gig_title,
                "freelancerName": freelancer_name,
                "bidId": str(bid_id),
            },
        )


connection_manager = ConnectionManager()


def get_notification_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(connection_manager)
