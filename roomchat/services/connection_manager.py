# roomchat/services/connection_manager.py

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

from roomchat.core.logging import get_logger

logger = get_logger(__name__)

# ============================================================================
# WEBSOCKET CONNECTION MANAGER
# ============================================================================

class ConnectionManager:
    """
    Manages WebSocket connections and their room-level delivery groups.

    This is the transport layer under the chat coordinator. It knows which
    sockets are attached to which rooms and how to push a JSON frame to one
    socket or to a whole room; it knows nothing about passwords, usernames
    or history.

    Data Structures:
        connections: Maps connection_id -> WebSocket
                     Example: {"c0ffee...": websocket1}

        rooms: Maps room_id -> Set of connection_ids in that room
               Example: {"CR1": {"c0ffee...", "beef..."}}

        connection_rooms: Maps connection_id -> Set of room_ids it's in
                          Example: {"c0ffee...": {"CR1"}}

    Frames:
        Every outbound frame is ``{"type": <event>, **payload}``.
    """

    def __init__(self) -> None:
        """Initialize connection manager with empty data structures."""
        self.connections: Dict[str, WebSocket] = {}
        self.rooms: Dict[str, Set[str]] = {}
        self.connection_rooms: Dict[str, Set[str]] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept a new WebSocket connection.

        Args:
            websocket: The WebSocket connection object

        Returns:
            The connection id assigned to this socket

        Note:
            The connection is not in any room until it joins one.
        """
        await websocket.accept()

        connection_id = uuid.uuid4().hex
        self.connections[connection_id] = websocket
        self.connection_rooms[connection_id] = set()

        logger.info("✓ Connection %s opened. Total: %d", connection_id, len(self.connections))
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        """
        Forget a connection and remove it from every room it was in.

        Safe to call more than once for the same connection.
        """
        if connection_id not in self.connections:
            return

        for room_id in list(self.connection_rooms.get(connection_id, ())):
            self.leave(connection_id, room_id)

        del self.connections[connection_id]
        self.connection_rooms.pop(connection_id, None)

        logger.info("✗ Connection %s closed. Total: %d", connection_id, len(self.connections))

    def join(self, connection_id: str, room_id: str) -> None:
        """Attach a connection to a room's delivery group."""
        if connection_id not in self.connections:
            return  # Connection already closed

        self.rooms.setdefault(room_id, set()).add(connection_id)
        self.connection_rooms[connection_id].add(room_id)

    def leave(self, connection_id: str, room_id: str) -> None:
        """Detach a connection from a room's delivery group."""
        if room_id in self.connection_rooms.get(connection_id, ()):
            self.connection_rooms[connection_id].discard(room_id)

        if room_id in self.rooms:
            self.rooms[room_id].discard(connection_id)
            # Clean up empty room
            if not self.rooms[room_id]:
                del self.rooms[room_id]

    def room_members(self, room_id: str) -> List[str]:
        return list(self.rooms.get(room_id, ()))

    async def send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        """
        Send one frame to a single connection.

        A failed send is logged and the socket is dropped from the delivery
        groups; the socket's own receive loop handles the disconnect.
        """
        websocket = self.connections.get(connection_id)
        if websocket is None:
            return

        try:
            await websocket.send_json({"type": event, **payload})
        except Exception as e:
            logger.error("Send error to %s: %s", connection_id, e)
            self._release(connection_id)

    async def emit_to_room(
        self,
        room_id: str,
        event: str,
        payload: Dict[str, Any],
        exclude: Optional[str] = None,
    ) -> None:
        """
        Broadcast a frame to every connection in a room.

        Args:
            room_id: Target room
            event: Event name, sent as the frame's "type"
            payload: Event fields
            exclude: Connection id to skip (usually the sender)
        """
        if room_id not in self.rooms:
            logger.debug("[routing] Skipped %s: room=%s has 0 members", event, room_id)
            return

        # Copy to avoid modification during iteration
        targets = [cid for cid in self.rooms[room_id] if cid != exclude]
        logger.debug("📨 %s to room %s: %d clients", event, room_id, len(targets))

        for connection_id in targets:
            await self.send(connection_id, event, payload)

    def _release(self, connection_id: str) -> None:
        for room_id in list(self.connection_rooms.get(connection_id, ())):
            self.leave(connection_id, room_id)

    def get_rooms_info(self) -> Dict[str, int]:
        """
        Member counts of all rooms that currently have connections.

        Used by the /metrics and /rooms endpoints.
        """
        return {room_id: len(members) for room_id, members in self.rooms.items()}
