# roomchat/services/file_message_store.py

from __future__ import annotations

import asyncio
import hashlib
import json
import os
import re
import tempfile
from typing import List, Optional

from pydantic import ValidationError

from roomchat.core.logging import get_logger
from roomchat.models.models import ChatMessage
from roomchat.services.message_store import MAX_HISTORY, MessageStore
from roomchat.services.room_locks import RoomLocks

logger = get_logger(__name__)

SAFE_ROOM_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")

# ============================================================================
# FILE-BACKED MESSAGE STORE
# ============================================================================
class FileMessageStore(MessageStore):
    """
    Message store keeping one JSON file per room.

    Storage Format (<directory>/CR1.json):
        [
            {
                "id": "0b6f...",
                "user": "alice",
                "room": "CR1",
                "text": "hello",
                "timestamp": "2025-11-30T20:00:00Z"
            }
        ]

    Every append loads the whole log, appends, trims it to ``max_messages``
    and rewrites it. Appends to the same room are serialized with a
    per-room lock, and the rewrite is done through a temporary file plus
    os.replace so a reader never sees a partial file.
    """

    backend = "file"

    def __init__(self, directory: str, max_messages: int = MAX_HISTORY) -> None:
        super().__init__(max_messages=max_messages)
        self.directory = directory
        self._locks = RoomLocks()

    def room_path(self, room_id: str) -> str:
        """
        Map a room id to its log file.

        Room ids come from clients, so anything outside [A-Za-z0-9_-] is
        hashed instead of being used as a file name.
        """
        if SAFE_ROOM_ID.fullmatch(room_id):
            filename = f"{room_id}.json"
        else:
            digest = hashlib.sha256(room_id.encode("utf-8")).hexdigest()
            filename = f"room-{digest}.json"
        return os.path.join(self.directory, filename)

    def _read(self, room_id: str) -> List[dict]:
        path = self.room_path(room_id)
        if not os.path.exists(path):
            return []
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{path} does not hold a message list")
        return data

    def _write(self, room_id: str, records: List[dict]) -> None:
        os.makedirs(self.directory, exist_ok=True)
        path = self.room_path(room_id)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _append_sync(self, room_id: str, message: ChatMessage) -> None:
        try:
            records = self._read(room_id)
        except (OSError, ValueError) as e:
            # An unreadable log is started over rather than blocking the room
            logger.error("Could not read %s, starting a new log: %s", self.room_path(room_id), e)
            records = []
        records.append(message.model_dump(mode="json"))
        if len(records) > self.max_messages:
            records = records[-self.max_messages:]
        self._write(room_id, records)

    async def append(self, room_id: str, message: ChatMessage) -> Optional[ChatMessage]:
        async with self._locks.hold(room_id):
            try:
                await asyncio.to_thread(self._append_sync, room_id, message)
            except OSError as e:
                logger.error("Failed to persist message %s for room %s: %s", message.id, room_id, e)
                return None
        return message

    async def load_history(self, room_id: str, limit: int = MAX_HISTORY) -> List[ChatMessage]:
        if limit <= 0:
            return []
        try:
            records = await asyncio.to_thread(self._read, room_id)
        except (OSError, ValueError) as e:
            logger.warning("Could not load history for room %s: %s", room_id, e)
            return []

        history: List[ChatMessage] = []
        for record in records[-limit:]:
            try:
                history.append(ChatMessage.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping undecodable message in room %s: %s", room_id, e)
        return history
