# roomchat/models/session.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ChatSession:
    """
    Live state of one connection.

    A session is bound to at most one room at a time; ``room`` is None while
    the connection is in no room. The username is whatever the client
    declared on its last join and is never verified.
    """

    connection_id: str
    room: Optional[str] = None
    username: Optional[str] = None

    @property
    def is_bound(self) -> bool:
        return self.room is not None

    @property
    def display_name(self) -> str:
        return self.username or "Anonymous"
