# roomchat/api/routes/health.py

from fastapi import APIRouter

from roomchat.core import state

router = APIRouter()

@router.get("/health")
async def health():
    """
    Health check endpoint.

    Returns current system status, connection counts, and room counts.

    Returns:
        dict: Status, connection count, room count, active room count
    """
    return {
        "status": "healthy",
        "connections": len(state.connection_manager.connections),
        "rooms": len(state.room_registry),
        "active_rooms_with_members": len(state.connection_manager.rooms),
    }
