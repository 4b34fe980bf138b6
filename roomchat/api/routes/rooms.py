# roomchat/api/routes/rooms.py

from typing import List

from fastapi import APIRouter, HTTPException

from roomchat.core import state
from roomchat.models.models import Room, RoomInfo

router = APIRouter()

# ============================================================================
# ROOM ENDPOINTS (read-only)
# ============================================================================

def _room_info(room: Room) -> RoomInfo:
    return RoomInfo(
        id=room.id,
        name=room.name,
        protected=state.room_registry.requires_password(room.id),
        member_count=len(state.connection_manager.room_members(room.id)),
    )

@router.get("/rooms", response_model=List[RoomInfo])
async def list_rooms():
    """
    List the configured rooms.

    Passwords are never exposed; "protected" tells the client whether to
    ask the user for one.

    Returns:
        List[RoomInfo]: All configured rooms with live member counts
    """
    return [_room_info(room) for room in state.room_registry.list_rooms()]

@router.get("/rooms/{room_id}", response_model=RoomInfo)
async def get_room(room_id: str):
    """
    Get details of a specific room.

    Raises:
        HTTPException: 404 if the room is not configured
    """
    room = state.room_registry.get_room(room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    return _room_info(room)
