# roomchat/api/routes/metrics.py
from datetime import datetime, timezone

from fastapi import APIRouter

from roomchat.core import state

router = APIRouter()

@router.get("/metrics")
async def get_metrics():
    """
    Message and capacity metrics.

    Returns:
        dict: Message statistics (persisted, dropped because the store was
        unavailable, messages/sec), capacity (connections, active rooms with
        member counts) and the active storage backend.

    Example Response:
        {
            "messages_persisted": 1200,
            "messages_dropped": 0,
            "uptime_hours": 5.5,
            "messages_per_second": 0.06,
            "concurrent_connections": 14,
            "active_rooms": {"CR1": 9, "CR3": 5},
            "store_backend": "file"
        }
    """
    uptime_seconds = (datetime.now(timezone.utc) - state.app_start_time).total_seconds()
    coordinator = state.coordinator

    persisted = coordinator.messages_persisted if coordinator else 0
    dropped = coordinator.messages_dropped if coordinator else 0

    if uptime_seconds > 0:
        messages_per_second = persisted / uptime_seconds
    else:
        messages_per_second = 0

    return {
        # Statistics
        "messages_persisted": persisted,
        "messages_dropped": dropped,
        "uptime_hours": round(uptime_seconds / 3600, 2) if uptime_seconds > 0 else 0,
        "messages_per_second": round(messages_per_second, 2),

        # Capacity
        "concurrent_connections": len(state.connection_manager.connections),
        "total_rooms": len(state.room_registry),
        "active_rooms": state.connection_manager.get_rooms_info(),

        # Storage
        "store_backend": state.message_store.backend if state.message_store else None,
    }
