# roomchat/main.py

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from roomchat.core import state
from roomchat.core.config import settings
from roomchat.core.logging import setup_logging, get_logger
from roomchat.services.chat_coordinator import ChatCoordinator
from roomchat.services.message_store import build_message_store
from roomchat.api.routes import root, health, metrics, rooms
from roomchat.api.routes.root import PUBLIC_DIR
from roomchat.api import websocket as websocket_module

# Configure logging first
setup_logging()
logger = get_logger(__name__)

# FastAPI app
app = FastAPI(title="Room Chat Relay")

# CORS (any origin, GET/POST only)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# REST routes
app.include_router(root.router)
app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(rooms.router)

# WebSocket routes
app.include_router(websocket_module.router)

# Static client assets
app.mount("/static", StaticFiles(directory=PUBLIC_DIR), name="static")


@app.on_event("startup")
async def startup_event():
    if state.message_store is None:
        state.message_store = build_message_store(settings)
    await state.message_store.connect()

    state.coordinator = ChatCoordinator(
        registry=state.room_registry,
        store=state.message_store,
        transport=state.connection_manager,
        history_limit=settings.HISTORY_LIMIT,
    )
    logger.info(
        "🚀 Application starting - %d rooms, %s message store",
        len(state.room_registry),
        state.message_store.backend,
    )

@app.on_event("shutdown")
async def on_shutdown():
    if state.message_store is not None:
        await state.message_store.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("roomchat.main:app", host=settings.HOST, port=settings.PORT)
