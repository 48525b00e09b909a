"""
Event feed for live UI updates.

Services receive an ``EventPublisher`` at construction and call
``publish(topic, payload)`` after a state change. Delivery is fire-and-forget
and at-most-once with no replay: consumers treat events as refresh hints,
never as the system of record.

``EventHub`` fans events out to WebSocket clients connected to
``/api/events/ws``. ``NullEventPublisher`` drops everything and is used when
no hub is wired (tests, scripts).
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Protocol, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

# Topics
SLOT_CREATED = "slotCreated"
SLOT_UPDATED = "slotUpdated"
SLOT_DELETED = "slotDeleted"
BOOKING_CREATED = "bookingCreated"
BOOKING_CANCELLED = "bookingCancelled"
TICKET_CREATED = "ticketCreated"
DOCTOR_RATING_UPDATED = "doctorRatingUpdated"
DOCTOR_APPROVED = "doctorApproved"
DOCTOR_REJECTED = "doctorRejected"
USER_REMOVED = "userRemoved"

EVENT_TOPICS = (
    SLOT_CREATED,
    SLOT_UPDATED,
    SLOT_DELETED,
    BOOKING_CREATED,
    BOOKING_CANCELLED,
    TICKET_CREATED,
    DOCTOR_RATING_UPDATED,
    DOCTOR_APPROVED,
    DOCTOR_REJECTED,
    USER_REMOVED,
)


class EventPublisher(Protocol):
    """Anything that can publish a topic with a JSON-serializable payload."""

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        ...


class NullEventPublisher:
    """Publisher that discards every event."""

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"Dropping event {topic} (no event hub configured)")


class EventHub:
    """
    In-process WebSocket fan-out.

    The hub remembers the event loop its clients were accepted on, so
    ``publish`` can be called from request handlers running in the thread
    pool as well as from coroutines on the loop itself.
    """

    def __init__(self) -> None:
        self._connections: Set[WebSocket] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Set["asyncio.Task[None]"] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        self._connections.add(websocket)
        logger.info(f"Event feed client connected ({self.connection_count} connected)")

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.info(f"Event feed client disconnected ({self.connection_count} connected)")

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        if not self._connections or self._loop is None or self._loop.is_closed():
            return

        message = json.dumps({"event": topic, "data": payload}, default=str)
        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        if running_loop is self._loop:
            task = self._loop.create_task(self._broadcast(message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            asyncio.run_coroutine_threadsafe(self._broadcast(message), self._loop)

    async def _broadcast(self, message: str) -> None:
        for websocket in list(self._connections):
            try:
                await websocket.send_text(message)
            except Exception as e:
                logger.warning(f"Dropping event feed client after send failure: {e}")
                self.disconnect(websocket)
