# roomchat/services/transport.py

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class Transport(Protocol):
    """
    Room-scoped delivery capabilities the chat coordinator relies on.

    Room membership here is the delivery-level association only; the
    coordinator's sessions decide who is a member.
    """

    def join(self, connection_id: str, room_id: str) -> None: ...

    def leave(self, connection_id: str, room_id: str) -> None: ...

    async def send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None: ...

    async def emit_to_room(
        self,
        room_id: str,
        event: str,
        payload: Dict[str, Any],
        exclude: Optional[str] = None,
    ) -> None: ...
