# roomchat/services/message_store.py

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from roomchat.models.models import ChatMessage

MAX_HISTORY = 1000


class MessageStore(ABC):
    """
    Per-room, append-only message log with bounded retention.

    Implementations never raise for storage problems:
        - append() returns None when the message could not be persisted
        - load_history() returns an empty list when history is unavailable

    A room keeps at most ``max_messages`` messages; the oldest are evicted
    first.
    """

    backend: str = "abstract"

    def __init__(self, max_messages: int = MAX_HISTORY) -> None:
        self.max_messages = max_messages

    async def connect(self) -> None:
        """Open connections to the backing storage (if any)."""

    async def close(self) -> None:
        """Release connections to the backing storage (if any)."""

    @abstractmethod
    async def append(self, room_id: str, message: ChatMessage) -> Optional[ChatMessage]:
        """Persist one message for room_id. Returns it, or None on failure."""

    @abstractmethod
    async def load_history(self, room_id: str, limit: int = MAX_HISTORY) -> List[ChatMessage]:
        """Return the most recent ``limit`` messages of a room, oldest first."""


def build_message_store(settings) -> MessageStore:
    """
    Create the message store selected by ``settings.STORE_BACKEND``.

    Raises:
        ValueError: if the backend name is unknown
    """
    if settings.STORE_BACKEND == "file":
        from roomchat.services.file_message_store import FileMessageStore

        return FileMessageStore(settings.MESSAGES_DIR, max_messages=settings.HISTORY_LIMIT)
    if settings.STORE_BACKEND == "redis":
        from roomchat.services.redis_message_store import RedisMessageStore

        return RedisMessageStore(settings.redis_url, max_messages=settings.HISTORY_LIMIT)
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND!r}")
