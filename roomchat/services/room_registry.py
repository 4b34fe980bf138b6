# roomchat/services/room_registry.py

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from roomchat.models.models import Room

# Never password-gated, even if a password gets configured for it
OPEN_ROOM_ID = "CR1"

DEFAULT_ROOMS = (
    Room(id="CR1", name="General"),
    Room(id="CR2", name="Talk"),
    Room(id="CR3", name="Drawing", password="inktober30"),
    Room(id="CR4", name="Anime", password="9taledfox"),
    Room(id="CR5", name="4B", password="26Dec"),
)

# ============================================================================
# ROOM REGISTRY
# ============================================================================
class RoomRegistry:
    """
    Read-only registry of the rooms this server knows about.

    The registry is the authoritative source of room display names and
    access policy. It is built once at startup and never mutated.

    Unknown room ids are not rejected: anyone may join them, and their
    display name is the raw id.

    Usage:
        registry = RoomRegistry.default()
        room = registry.lookup("CR3")
        registry.check_password("CR3", "inktober30")  # True
    """

    def __init__(self, rooms: Iterable[Room]) -> None:
        self._rooms: Mapping[str, Room] = MappingProxyType({room.id: room for room in rooms})

    @classmethod
    def default(cls) -> "RoomRegistry":
        """Registry with the built-in rooms CR1..CR5."""
        return cls(DEFAULT_ROOMS)

    def get_room(self, room_id: str) -> Optional[Room]:
        """Return the configured room, or None when the id is not configured."""
        return self._rooms.get(room_id)

    def lookup(self, room_id: str) -> Room:
        """
        Resolve a room id to its configuration.

        Args:
            room_id: Room identifier as sent by the client

        Returns:
            The configured Room, or a public Room named after the id
        """
        room = self._rooms.get(room_id)
        if room is None:
            return Room(id=room_id, name=room_id)
        return room

    def list_rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def requires_password(self, room_id: str) -> bool:
        if room_id == OPEN_ROOM_ID:
            return False
        return self.lookup(room_id).password is not None

    def check_password(self, room_id: str, password: Optional[str]) -> bool:
        """
        Check a join attempt against the room's password.

        Passwords are compared exactly, in plaintext. A missing password
        only passes for rooms that do not require one.
        """
        if not self.requires_password(room_id):
            return True
        return password == self.lookup(room_id).password

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
