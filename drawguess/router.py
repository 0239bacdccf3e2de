"""
Dispatch inbound client messages to room operations
"""
import json
import logging
from typing import Awaitable, Callable, Dict, Optional

from .client import Client
from .errors import MalformedMessage
from .room import Room
from .state import RoomRegistry

logger = logging.getLogger("drawguess")

Handler = Callable[[Client, dict], Awaitable[None]]


def parse_message(raw: str) -> dict:
    """Decode one text frame into a message dict with a string `type`"""
    try:
        message = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedMessage(f"invalid JSON: {e}") from e
    if not isinstance(message, dict):
        raise MalformedMessage("message must be a JSON object")
    if not isinstance(message.get("type"), str):
        raise MalformedMessage("message has no type")
    return message


def require_str(message: dict, field: str, allow_empty: bool = True) -> str:
    value = message.get(field)
    if not isinstance(value, str) or (not allow_empty and not value):
        raise MalformedMessage(f"{message.get('type')}: missing or invalid {field!r}")
    return value


class MessageRouter:
    """Route messages by their `type` field.

    Callers must dispatch one connection's messages one at a time, in order.
    Unknown types are ignored. Operations a client is not allowed to perform
    are dropped without telling it.
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry
        self.handlers: Dict[str, Handler] = {
            "join_room": self.handle_join_room,
            "leave_room": self.handle_leave_room,
            "chat": self.handle_chat,
            "draw": self.handle_draw,
            "start_game": self.handle_start_game,
            "draw_image": self.handle_draw_image,
        }

    async def dispatch(self, client: Client, message: dict) -> bool:
        """Run the handler for message. Returns False if the type is unknown."""
        handler = self.handlers.get(message.get("type"))
        if handler is None:
            logger.debug("Ignoring unknown message type %r from %s", message.get("type"), client.name)
            return False
        await handler(client, message)
        return True

    async def disconnect(self, client: Client) -> None:
        """Implicit leave for a connection that went away"""
        if await self.registry.leave(client):
            logger.info("🔌 %s dropped out of the game", client.name)

    def _room_of(self, client: Client) -> Optional[Room]:
        room = self.registry.get(client.room_code)
        if room is None:
            logger.debug("%s is not in a room", client.name)
        return room

    # ============================================================
    # HANDLERS
    # ============================================================

    async def handle_join_room(self, client: Client, message: dict) -> None:
        code = require_str(message, "roomCode", allow_empty=False)
        nickname = require_str(message, "nickname")
        if client.room_code is not None:
            logger.debug("%s is already in room %s, ignoring join", client.name, client.room_code)
            return
        client.set_nickname(nickname)
        await self.registry.join(code, client)

    async def handle_leave_room(self, client: Client, message: dict) -> None:
        await self.registry.leave(client)

    async def handle_chat(self, client: Client, message: dict) -> None:
        text = require_str(message, "message")
        room = self._room_of(client)
        if room is not None:
            await room.submit_guess(client, text)

    async def handle_draw(self, client: Client, message: dict) -> None:
        room = self._room_of(client)
        if room is not None:
            await room.drawing_stroke(client, message)

    async def handle_start_game(self, client: Client, message: dict) -> None:
        room = self._room_of(client)
        if room is not None:
            await room.start_round(client)

    async def handle_draw_image(self, client: Client, message: dict) -> None:
        if "imageData" not in message:
            raise MalformedMessage("draw_image: missing 'imageData'")
        room = self._room_of(client)
        if room is not None:
            await room.drawing_image(client, message["imageData"])
