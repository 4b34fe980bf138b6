# roomchat/core/state.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from roomchat.services.chat_coordinator import ChatCoordinator
from roomchat.services.connection_manager import ConnectionManager
from roomchat.services.message_store import MessageStore
from roomchat.services.room_registry import RoomRegistry

# Global singletons for app state
room_registry = RoomRegistry.default()
connection_manager = ConnectionManager()

# Built on startup (see main.py); a store assigned before startup is kept
message_store: Optional[MessageStore] = None
coordinator: Optional[ChatCoordinator] = None

# Metrics
app_start_time: datetime = datetime.now(timezone.utc)
