"""
Exceptions raised by the game core
"""


class GameError(RuntimeError):
    """Base class for errors raised while handling client messages"""


class MalformedMessage(GameError):
    """Inbound message is not valid JSON or lacks a required field"""


class InvalidPayload(GameError):
    """Message is well-formed but its payload cannot be decoded"""


class RoomClosed(GameError):
    """Room emptied and is about to be dropped from the registry"""

    def __init__(self, code: str):
        super().__init__(f"room {code!r} is closed")
        self.code = code
