"""
Connected participant: identity, drawer flag and outbound channel
"""
import logging
from typing import Optional

from .utils import generate_client_id

logger = logging.getLogger("drawguess")


class Client:
    """One connected player.

    `channel` is anything exposing `async send_json(dict)`; in production it
    is the aiohttp WebSocketResponse of the connection. The client only keeps
    the code of the room it is in, the Room itself is looked up through the
    registry.
    """

    def __init__(self, channel, client_id: Optional[str] = None):
        self.channel = channel
        self.client_id = client_id or generate_client_id()
        self.nickname: Optional[str] = None
        self.is_drawer = False
        self.room_code: Optional[str] = None

    @property
    def name(self) -> str:
        return self.nickname if self.nickname is not None else self.client_id

    def set_nickname(self, nickname: str) -> bool:
        """Assign the display name; only the first assignment sticks"""
        if self.nickname is not None:
            return False
        self.nickname = nickname
        return True

    async def send(self, message: dict) -> bool:
        """Send one message, returning False instead of raising on a dead channel"""
        try:
            await self.channel.send_json(message)
        except Exception as e:
            logger.debug("Failed to send %s to %s: %s", message.get("type"), self.name, e)
            return False
        return True

    def __repr__(self) -> str:
        return f"<Client {self.client_id} {self.nickname!r} room={self.room_code!r}>"
