"""
Room-based WebSocket relay.

Broadcasts the result of an edit to everyone else viewing the same diagram,
pipeline or execution. The relay does not order, merge or reconcile edits:
whatever reached the repository last is what everyone ends up seeing.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Set

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


def diagram_room(diagram_id: str) -> str:
    return f"diagram-{diagram_id}"


def pipeline_room(pipeline_id: str) -> str:
    return f"pipeline-{pipeline_id}"


def execution_room(execution_id: str) -> str:
    return f"execution-{execution_id}"


class RoomBroadcaster:
    """Manages WebSocket connections grouped into named rooms."""

    def __init__(self) -> None:
        # Only touched from the event loop, never across an await
        self.rooms: Dict[str, Set[WebSocket]] = {}

    async def join_room(self, room: str, connection: WebSocket) -> None:
        self.rooms.setdefault(room, set()).add(connection)
        logger.debug("Connection joined room %s (size %d)", room, self.room_size(room))

    async def leave_room(self, room: str, connection: WebSocket) -> None:
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self.rooms[room]
        logger.debug("Connection left room %s", room)

    def room_size(self, room: str) -> int:
        return len(self.rooms.get(room, ()))

    async def broadcast_to_others(self, room: str, event: str, payload: Any, sender: Any = None) -> int:
        """
        Send ``{"event": ..., "payload": ...}`` to every member of the room
        except ``sender``.

        Returns:
            Number of connections the message was delivered to
        """
        message = {"event": event, "payload": jsonable_encoder(payload)}
        delivered = 0
        disconnected = []
        for connection in list(self.rooms.get(room, ())):
            if connection is sender:
                continue
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception:
                logger.warning("Dropping connection from room %s after failed send", room, exc_info=True)
                disconnected.append(connection)

        # Clean up disconnected clients
        for connection in disconnected:
            await self.leave_room(room, connection)
        return delivered

    async def broadcast(self, room: str, event: str, payload: Any) -> int:
        return await self.broadcast_to_others(room, event, payload, sender=None)


# Global broadcaster shared by the hubs and HTTP routes
broadcaster = RoomBroadcaster()
