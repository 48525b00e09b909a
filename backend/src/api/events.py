# pyright: reportMissingTypeStubs=false
"""
Event feed WebSocket endpoint.

Clients connect to ``/api/events/ws`` and receive ``{"event": topic, "data": payload}``
messages. Anything the client sends is ignored except ``ping``, answered with
``pong``.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from services.event_publisher import EventHub

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def event_feed(websocket: WebSocket) -> None:
    """Subscribe to live slot, booking, ticket, rating and moderation events."""
    hub: EventHub = websocket.app.state.event_hub
    await hub.connect(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(websocket)
