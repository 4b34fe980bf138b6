# roomchat/api/routes/root.py

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

PUBLIC_DIR = Path(__file__).resolve().parents[2] / "public"

router = APIRouter()


@router.get("/", include_in_schema=False)
async def index():
    """Serve the browser chat client."""
    return FileResponse(PUBLIC_DIR / "index.html")


@router.get("/info")
async def info():
    """
    API information.

    Returns basic info about the service and its endpoints.
    """
    return {
        "message": "Room Chat Relay",
        "version": "1.0",
        "features": ["password_rooms", "persistent_history", "join_leave_notifications"],
        "endpoints": {
            "websocket": "/ws",
            "rooms": "/rooms",
            "health": "/health",
            "metrics": "/metrics",
        },
    }
