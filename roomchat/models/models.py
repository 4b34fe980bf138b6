# roomchat/models/models.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

class Room(BaseModel):
    """Static room configuration. A room without a password is public."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    password: Optional[str] = None

class RoomInfo(BaseModel):
    id: str
    name: str
    protected: bool
    member_count: int = 0

class ChatMessage(BaseModel):
    """A persisted chat message. Timestamps are assigned by the server."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user: str
    room: str
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class JoinRoomRequest(BaseModel):
    room: str = Field(min_length=1)
    username: Optional[str] = None
    password: Optional[str] = None

class SendMessageRequest(BaseModel):
    text: Optional[str] = None
    user: Optional[str] = None
