# roomchat/api/websocket.py

from __future__ import annotations

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from roomchat.core import state
from roomchat.core.logging import get_logger
from roomchat.models.models import JoinRoomRequest, SendMessageRequest

logger = get_logger(__name__)

router = APIRouter()

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time room chat.

    Protocol:
    =========

    Client -> Server Actions:
    -------------------------
    Join Room:
        {"action": "joinRoom", "room": "CR3", "username": "alice", "password": "..."}
        Response: {"type": "roomJoined", "room": "CR3", "username": "alice",
                   "roomName": "Drawing", "messages": [...]}
              or: {"type": "passwordRequired", "room": "CR3"}

    Leave Room:
        {"action": "leaveRoom"}

    Send Message:
        {"action": "message", "text": "Hello!", "user": "alice"}

    Server -> Client Messages:
    -------------------------
    Chat Message (to everyone in the room, sender included):
        {"type": "message", "id": "...", "user": "alice", "room": "CR3",
         "text": "Hello!", "timestamp": "..."}

    Membership (to the other members):
        {"type": "userJoined", "user": "bob", "message": "bob joined the room"}
        {"type": "userLeft", "user": "bob", "message": "bob left the room"}

    Error:
        {"type": "error", "message": "..."}

    Lifecycle:
    ==========
    1. Client connects, gets a connection id and an unbound session
    2. Client sends "joinRoom"; history comes back with "roomJoined"
    3. Client receives messages of its current room only
    4. On disconnect, the other room members get "userLeft"

    Error Handling:
        - Invalid JSON: Sends error message
        - Unknown actions: Sends error message
        - Invalid payloads: Dropped (logged)
        - Connection errors: Cleanup and log
    """
    coordinator = state.coordinator
    connection_id = await state.connection_manager.connect(websocket)
    coordinator.open_session(connection_id)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                message = None

            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue

            action = message.pop("action", None)
            logger.debug("Websocket input from %s: Action: %s", connection_id, action)

            try:
                if action == "joinRoom":
                    await coordinator.join_room(connection_id, JoinRoomRequest(**message))

                elif action == "leaveRoom":
                    await coordinator.leave_room(connection_id)

                elif action == "message":
                    await coordinator.send_message(connection_id, SendMessageRequest(**message))

                else:
                    await websocket.send_json(
                        {
                            "type": "error",
                            "message": f"Unknown action: {action}",
                        }
                    )

            except ValidationError as e:
                logger.warning("Dropped malformed %s from %s: %s", action, connection_id, e)

    except WebSocketDisconnect:
        logger.debug("Websocket %s closed by client", connection_id)
    except Exception as e:
        logger.error("WebSocket error: %s", e)
    finally:
        state.connection_manager.disconnect(connection_id)
        await coordinator.disconnect(connection_id)
