# roomchat/services/redis_message_store.py
from __future__ import annotations

from typing import List, Optional

import redis.asyncio as redis
from pydantic import ValidationError

from roomchat.core.logging import get_logger
from roomchat.models.models import ChatMessage
from roomchat.services.message_store import MAX_HISTORY, MessageStore

logger = get_logger(__name__)


class RedisMessageStore(MessageStore):
    """
    Message store keeping each room's history in a Redis list.

    Key layout:
        room:{room_id}:messages -> list of JSON documents, oldest first

    An append is a single MULTI/EXEC pipeline (RPUSH + LTRIM), so concurrent
    appends to the same room cannot interleave and the list never grows
    beyond ``max_messages``.
    """

    backend = "redis"

    def __init__(self, url: str, max_messages: int = MAX_HISTORY, client=None) -> None:
        super().__init__(max_messages=max_messages)
        self.url = url
        # from_url() does not open a connection until the first command
        self.client = client if client is not None else redis.from_url(url, decode_responses=True)

    @staticmethod
    def room_key(room_id: str) -> str:
        return f"room:{room_id}:messages"

    async def connect(self):
        """Establish async connection to Redis."""
        try:
            await self.client.ping()
            logger.info("✓ Connected to Redis message store")
        except (redis.RedisError, OSError) as e:
            # Not fatal: history degrades to empty until Redis comes back
            logger.error("Redis message store unreachable at startup: %s", e)

    async def append(self, room_id: str, message: ChatMessage) -> Optional[ChatMessage]:
        key = self.room_key(room_id)
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.rpush(key, message.model_dump_json())
                pipe.ltrim(key, -self.max_messages, -1)
                await pipe.execute()
        except (redis.RedisError, OSError) as e:
            logger.error("Failed to persist message %s for room %s: %s", message.id, room_id, e)
            return None
        logger.debug("📤 Stored message %s in %s", message.id, key)
        return message

    async def load_history(self, room_id: str, limit: int = MAX_HISTORY) -> List[ChatMessage]:
        if limit <= 0:
            return []
        try:
            raw_messages = await self.client.lrange(self.room_key(room_id), -limit, -1)
        except (redis.RedisError, OSError) as e:
            logger.warning("Could not load history for room %s: %s", room_id, e)
            return []

        history: List[ChatMessage] = []
        for raw in raw_messages:
            try:
                history.append(ChatMessage.model_validate_json(raw))
            except ValidationError as e:
                logger.warning("Skipping undecodable message in room %s: %s", room_id, e)
        return history

    async def close(self):
        """Close connections."""
        await self.client.aclose()
        logger.info("Redis connection closed")
