"""Ports to collaborators that live outside the core."""
from __future__ import annotations

from typing import Any, Protocol


class BroadcastChannel(Protocol):
    """Room-based fan-out of realtime events to connected viewers."""

    async def join_room(self, room: str, connection: Any) -> None:
        ...

    async def leave_room(self, room: str, connection: Any) -> None:
        ...

    async def broadcast_to_others(self, room: str, event: str, payload: Any, sender: Any = None) -> int:
        ...

    async def broadcast(self, room: str, event: str, payload: Any) -> int:
        ...

    def room_size(self, room: str) -> int:
        ...
