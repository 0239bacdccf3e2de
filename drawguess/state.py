"""
In-memory state management for rooms

One RoomRegistry is created per application and handed to whoever needs it.
The registry lock only guards the code -> Room mapping; each Room has its own
lock for its membership and round state. The two are never held together.
"""
import asyncio
import logging
import random
import time
from typing import Callable, Dict, List, Optional

from .client import Client
from .errors import RoomClosed
from .room import Room
from .words import WordSupplier

logger = logging.getLogger("drawguess")


class RoomRegistry:
    def __init__(
        self,
        words: Optional[WordSupplier] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        # Room state: code -> Room
        self.rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()
        self._words = words or WordSupplier()
        self._rng = rng or random.Random()
        self._clock = clock

    def __len__(self) -> int:
        return len(self.rooms)

    def __contains__(self, code: str) -> bool:
        return code in self.rooms

    def get(self, code: Optional[str]) -> Optional[Room]:
        if code is None:
            return None
        return self.rooms.get(code)

    def codes(self) -> List[str]:
        return list(self.rooms)

    async def get_or_create(self, code: str) -> Room:
        """Return the room for code, creating it if needed.

        A room that is closed but not yet removed is replaced by a fresh one.
        """
        async with self._lock:
            room = self.rooms.get(code)
            if room is None or room.closed:
                room = Room(code, words=self._words, rng=self._rng, clock=self._clock)
                self.rooms[code] = room
                logger.info("🏠 Room created: %s", code)
            return room

    async def remove(self, code: str, room: Optional[Room] = None) -> bool:
        """Drop the mapping for code.

        With `room`, only drop it if it still points at that Room, so a late
        removal can't take out a room created since.
        """
        async with self._lock:
            current = self.rooms.get(code)
            if current is None or (room is not None and current is not room):
                return False
            del self.rooms[code]
            logger.info("🛑 Room removed: %s", code)
            return True

    async def join(self, code: str, client: Client) -> Room:
        while True:
            room = await self.get_or_create(code)
            try:
                await room.join(client)
            except RoomClosed:
                logger.debug("Room %s closed under %s, retrying", code, client.name)
                continue
            return room

    async def leave(self, client: Client) -> bool:
        """Take client out of its room, dropping the room once empty.

        Returns True if the client was in a room.
        """
        room = self.get(client.room_code)
        if room is None:
            return False
        if await room.leave(client):
            await self.remove(room.code, room)
        return True
