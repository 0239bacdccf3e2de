"""
Room state machine: membership, drawer rotation, rounds and broadcast

A room is empty, waiting (members but no word) or active (word set). Every
operation takes the room's own lock for its whole critical section, sends
included, so a broadcast always reflects the membership change that caused it.
asyncio.Lock is not re-entrant: helpers ending in `_locked` expect the caller
to hold it already.
"""
import asyncio
import logging
import random
import time
from typing import Callable, Dict, List, Optional

from .client import Client
from .errors import InvalidPayload, RoomClosed
from .utils import is_base64
from .words import WordSupplier

logger = logging.getLogger("drawguess")

STROKE_FIELDS = ("x", "y", "isDragging", "color", "lineWidth", "tool")
# Sent by the browser client for the eraser and shape tools
STROKE_EXTRA_FIELDS = ("startX", "startY")


class Room:
    def __init__(
        self,
        code: str,
        words: Optional[WordSupplier] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.code = code
        self.members: Dict[str, Client] = {}
        self.drawer: Optional[Client] = None
        self.word = ""
        self.started_at: Optional[float] = None
        self.closed = False
        self.lock = asyncio.Lock()
        self._words = words or WordSupplier()
        self._rng = rng or random.Random()
        self._clock = clock

    # ============================================================
    # VIEWS
    # ============================================================

    @property
    def state(self) -> str:
        if not self.members:
            return "empty"
        return "active" if self.word else "waiting"

    def is_member(self, client: Client) -> bool:
        return self.members.get(client.client_id) is client

    def roster(self) -> List[str]:
        return [c.name for c in self.members.values()]

    def snapshot(self) -> dict:
        return {
            "code": self.code,
            "state": self.state,
            "players": self.roster(),
            "drawer": self.drawer.name if self.drawer else None,
        }

    # ============================================================
    # MEMBERSHIP
    # ============================================================

    async def join(self, client: Client) -> List[str]:
        """Add a member; the first one becomes drawer. Returns the roster."""
        async with self.lock:
            if self.closed:
                raise RoomClosed(self.code)
            if self.is_member(client):
                return self.roster()

            self.members[client.client_id] = client
            client.room_code = self.code
            client.is_drawer = False
            if len(self.members) == 1:
                self.drawer = client
                client.is_drawer = True

            players = self.roster()
            logger.info("✅ %s joined room %s (%d players)", client.name, self.code, len(players))

            await client.send({"type": "room_joined", "roomCode": self.code, "players": players})
            if client.is_drawer:
                await client.send({"type": "you_are_drawer"})
            await self._broadcast_locked({"type": "player_joined", "players": players})
            return players

    async def leave(self, client: Client) -> bool:
        """Remove a member. Returns True when the room is left empty.

        Leaving a room one is not in does nothing. An empty room is marked
        closed; dropping it from the registry is up to the caller.
        """
        async with self.lock:
            if not self.is_member(client):
                return False

            del self.members[client.client_id]
            client.room_code = None
            was_drawer = self.drawer is client
            client.is_drawer = False
            if was_drawer:
                self.drawer = None
                self.word = ""
                self.started_at = None

            logger.info("👋 %s left room %s (%d players)", client.name, self.code, len(self.members))

            if self.members:
                if was_drawer:
                    await self._rotate_drawer_locked(exclude=client)
                await self._broadcast_locked({"type": "player_left", "players": self.roster()})
            else:
                self.closed = True

            await client.send({"type": "room_left"})
            return self.closed

    # ============================================================
    # ROUNDS
    # ============================================================

    async def start_round(self, initiator: Client) -> bool:
        async with self.lock:
            if self.drawer is None or self.drawer is not initiator:
                logger.debug("Ignoring start_game from non-drawer %s in %s", initiator.name, self.code)
                return False

            self.word = self._words.next()
            self.started_at = self._clock()
            logger.info("🎨 Round started in %s, %s is drawing", self.code, initiator.name)

            await initiator.send({"type": "word_to_draw", "word": self.word})
            await self._broadcast_locked({"type": "game_started"})
            return True

    async def submit_guess(self, client: Client, text: str) -> bool:
        """Evaluate chat text as a guess. Returns True for a correct guess.

        Text from the drawer, or sent while no round is running, is plain chat.
        """
        async with self.lock:
            if not self.is_member(client):
                logger.debug("Ignoring chat from non-member %s in %s", client.name, self.code)
                return False

            if self.word and client is not self.drawer and text == self.word:
                elapsed = max(0.0, self._clock() - self.started_at)
                word = self.word
                self.word = ""
                self.started_at = None
                logger.info("🎉 %s guessed %r in %s after %.2fs", client.name, word, self.code, elapsed)

                await self._broadcast_locked({
                    "type": "correct_guess",
                    "winner": client.name,
                    "word": word,
                    "time": elapsed,
                })
                await self._rotate_drawer_locked()
                return True

            await self._broadcast_locked({"type": "chat_message", "sender": client.name, "message": text})
            return False

    async def rotate_drawer(self, exclude: Optional[Client] = None) -> Optional[Client]:
        async with self.lock:
            return await self._rotate_drawer_locked(exclude=exclude)

    async def _rotate_drawer_locked(self, exclude: Optional[Client] = None) -> Optional[Client]:
        if not self.members:
            return None

        previous = self.drawer
        members = list(self.members.values())
        candidates = [c for c in members if c is not previous and c is not exclude]
        new_drawer = self._rng.choice(candidates or members)

        if previous is not None:
            previous.is_drawer = False
        # The new drawer has to start their own round
        self.word = ""
        self.started_at = None
        self.drawer = new_drawer
        new_drawer.is_drawer = True
        logger.info("🔄 %s is the new drawer in %s", new_drawer.name, self.code)

        await new_drawer.send({"type": "you_are_drawer"})
        await self._broadcast_locked({"type": "new_drawer", "drawer": new_drawer.name})
        return new_drawer

    # ============================================================
    # DRAWING
    # ============================================================

    async def drawing_stroke(self, client: Client, stroke: dict) -> bool:
        async with self.lock:
            if self.drawer is None or self.drawer is not client:
                logger.debug("Ignoring draw from non-drawer %s in %s", client.name, self.code)
                return False

            message = {"type": "draw"}
            message.update({field: stroke.get(field) for field in STROKE_FIELDS})
            message.update({field: stroke[field] for field in STROKE_EXTRA_FIELDS if field in stroke})
            await self._broadcast_locked(message)
            return True

    async def drawing_image(self, client: Client, image_data) -> bool:
        async with self.lock:
            if self.drawer is None or self.drawer is not client:
                logger.debug("Ignoring draw_image from non-drawer %s in %s", client.name, self.code)
                return False
            if not is_base64(image_data):
                raise InvalidPayload(f"image from {client.name} in {self.code} is not valid base64")

            await self._broadcast_locked({"type": "draw_image", "imageData": image_data})
            return True

    # ============================================================
    # BROADCAST
    # ============================================================

    async def broadcast(self, message: dict) -> int:
        async with self.lock:
            return await self._broadcast_locked(message)

    async def _broadcast_locked(self, message: dict) -> int:
        """Send to every member; a dead channel is skipped, never removed here"""
        delivered = 0
        for member in list(self.members.values()):
            if await member.send(message):
                delivered += 1
            else:
                logger.debug("Dropped %s for %s in %s", message.get("type"), member.name, self.code)
        return delivered

    def __repr__(self) -> str:
        return f"<Room {self.code} {self.state} members={len(self.members)}>"
