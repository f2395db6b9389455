"""
Real-time activity broadcast.

Clients open a WebSocket on /ws and receive every broadcast event as JSON:

    {"type": "donation", "donation": {...}, "user": {"name": ..., "avatar": ...}}

The hub is in-process only. A socket that fails to receive is dropped.
"""

import asyncio
import logging
from typing import Any

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class ConnectionHub:
    def __init__(self) -> None:
        self.connections: set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        self.connections.add(websocket)
        await websocket.accept()
        logger.info("Realtime client connected (%d open)", len(self.connections))

    def disconnect(self, websocket: WebSocket) -> None:
        self.connections.discard(websocket)
        logger.info("Realtime client disconnected (%d open)", len(self.connections))

    async def broadcast(self, event: dict[str, Any]) -> int:
        """Send event to every client. Returns how many received it."""
        if not self.connections:
            return 0

        payload = jsonable_encoder(event)
        targets = list(self.connections)
        results = await asyncio.gather(
            *(ws.send_json(payload) for ws in targets),
            return_exceptions=True,
        )

        delivered = 0
        for ws, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning("Dropping realtime client after send failure: %s", result)
                self.connections.discard(ws)
            else:
                delivered += 1
        return delivered


hub = ConnectionHub()


async def broadcast_activity(kind: str, key: str, record: dict, user: dict) -> int:
    """Broadcast a newly created record with its author's public details."""
    return await hub.broadcast({
        "type": kind,
        key: record,
        "user": {"name": user.get("name"), "avatar": user.get("avatar")},
    })
