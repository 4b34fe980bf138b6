# roomchat/services/chat_coordinator.py

from __future__ import annotations

from typing import Dict, Optional

from roomchat.core.logging import get_logger
from roomchat.models.models import ChatMessage, JoinRoomRequest, SendMessageRequest
from roomchat.models.session import ChatSession
from roomchat.services.message_store import MAX_HISTORY, MessageStore
from roomchat.services.room_locks import RoomLocks
from roomchat.services.room_registry import RoomRegistry
from roomchat.services.transport import Transport

logger = get_logger(__name__)

# Server -> client events
PASSWORD_REQUIRED = "passwordRequired"
ROOM_JOINED = "roomJoined"
USER_JOINED = "userJoined"
USER_LEFT = "userLeft"
MESSAGE = "message"

# ============================================================================
# MEMBERSHIP & BROADCAST COORDINATOR
# ============================================================================

class ChatCoordinator:
    """
    Room membership and message delivery protocol.

    Each connection has a ChatSession that is either unbound or bound to
    exactly one room:

        Unbound --join_room--> Bound(room) --leave_room/disconnect--> Unbound

    Session changes are applied synchronously, before any await, so two
    events of one connection can never race on the session's room. The
    joiner is added to the room's delivery group under the room lock,
    together with the history snapshot. Suspension points are the room
    lock, the message store and socket sends.

    Delivery rules:
        - A rejected join (wrong/missing password) is reported to the
          requester only and changes nothing.
        - Joining while bound to another room leaves that room first;
          re-joining the current room only re-sends roomJoined.
        - A message is broadcast only after it was persisted, and messages
          of one room are persisted and broadcast one at a time, so every
          member sees them in persistence order.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        store: MessageStore,
        transport: Transport,
        history_limit: int = MAX_HISTORY,
    ) -> None:
        self.registry = registry
        self.store = store
        self.transport = transport
        self.history_limit = history_limit

        self.sessions: Dict[str, ChatSession] = {}
        self._room_locks = RoomLocks()

        # Metrics
        self.messages_persisted: int = 0
        self.messages_dropped: int = 0

    def open_session(self, connection_id: str) -> ChatSession:
        session = ChatSession(connection_id=connection_id)
        self.sessions[connection_id] = session
        return session

    def get_session(self, connection_id: str) -> Optional[ChatSession]:
        return self.sessions.get(connection_id)

    async def join_room(self, connection_id: str, request: JoinRoomRequest) -> bool:
        """
        Handle a joinRoom event.

        Args:
            connection_id: The requesting connection
            request: Room id, declared username and optional password

        Returns:
            True if the connection is now bound to the room, False if the
            join was rejected.
        """
        session = self.sessions.get(connection_id)
        if session is None:
            return False

        room = self.registry.lookup(request.room)

        if not self.registry.check_password(room.id, request.password):
            logger.info("✗ Join to %s rejected for %s: bad password", room.id, connection_id)
            await self.transport.send(connection_id, PASSWORD_REQUIRED, {"room": room.id})
            return False

        previous_room = session.room
        previous_name = session.display_name
        rejoin = previous_room == room.id
        if previous_room is not None and not rejoin:
            self.transport.leave(connection_id, previous_room)

        session.room = room.id
        session.username = request.username

        logger.info("→ %s joined '%s'", session.display_name, room.name)

        if previous_room is not None and not rejoin:
            await self._notify_left(previous_room, previous_name, "left the room")

        # Holding the room lock, no message can be persisted between the
        # history snapshot and the joiner's delivery membership: every
        # message is either in roomJoined or broadcast after it.
        async with self._room_locks.hold(room.id):
            history = await self.store.load_history(room.id, self.history_limit)
            if self.sessions.get(connection_id) is not session or session.room != room.id:
                return False  # Closed while waiting for the lock
            self.transport.join(connection_id, room.id)

            if not rejoin:
                await self.transport.emit_to_room(
                    room.id,
                    USER_JOINED,
                    {"user": session.display_name, "message": f"{session.display_name} joined the room"},
                    exclude=connection_id,
                )

            await self.transport.send(
                connection_id,
                ROOM_JOINED,
                {
                    "room": room.id,
                    "username": request.username,
                    "roomName": room.name,
                    "messages": [m.model_dump(mode="json") for m in history],
                },
            )
        return True

    async def leave_room(self, connection_id: str) -> None:
        """Handle a leaveRoom event. No-op when the connection is in no room."""
        session = self.sessions.get(connection_id)
        if session is None or session.room is None:
            return

        room_id = session.room
        self.transport.leave(connection_id, room_id)
        session.room = None

        logger.info("← %s left '%s'", session.display_name, room_id)
        await self._notify_left(room_id, session.display_name, "left the room")

    async def send_message(self, connection_id: str, request: SendMessageRequest) -> Optional[ChatMessage]:
        """
        Handle a message event.

        The message is dropped unless the connection is in a room, has
        declared a username and sent some text. Returns the broadcast
        message, or None if nothing was broadcast.
        """
        session = self.sessions.get(connection_id)
        if session is None or session.room is None or not session.username:
            logger.debug("Dropped message from %s: not a room member", connection_id)
            return None
        if not request.text:
            logger.debug("Dropped empty message from %s", connection_id)
            return None

        room_id = session.room
        message = ChatMessage(
            user=request.user or session.username,
            room=room_id,
            text=request.text,
        )

        async with self._room_locks.hold(room_id):
            persisted = await self.store.append(room_id, message)
            if persisted is None:
                self.messages_dropped += 1
                logger.error(
                    "Message %s from %s not persisted; broadcast suppressed", message.id, session.username
                )
                return None

            self.messages_persisted += 1
            await self.transport.emit_to_room(room_id, MESSAGE, persisted.model_dump(mode="json"))

        return persisted

    async def disconnect(self, connection_id: str) -> None:
        """Handle a closed connection. The session is discarded."""
        session = self.sessions.pop(connection_id, None)
        if session is None or session.room is None:
            return

        room_id = session.room
        self.transport.leave(connection_id, room_id)
        session.room = None

        await self._notify_left(room_id, session.display_name, "disconnected")

    async def _notify_left(self, room_id: str, username: str, verb: str) -> None:
        await self.transport.emit_to_room(
            room_id,
            USER_LEFT,
            {"user": username, "message": f"{username} {verb}"},
        )
