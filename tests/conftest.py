from __future__ import annotations

import random

import pytest

from drawguess.client import Client
from drawguess.state import RoomRegistry
from drawguess.words import WordSupplier


class FakeChannel:
    """Stand-in for a WebSocket: records what was sent, can be made to fail"""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[dict] = []
        self.fail = fail

    async def send_json(self, message: dict) -> None:
        if self.fail:
            raise ConnectionResetError("Cannot write to closing transport")
        self.sent.append(message)

    def types(self) -> list[str]:
        return [m["type"] for m in self.sent]

    def of_type(self, msg_type: str) -> list[dict]:
        return [m for m in self.sent if m["type"] == msg_type]

    def clear(self) -> None:
        self.sent.clear()


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_client(nickname: str, fail: bool = False) -> Client:
    client = Client(FakeChannel(fail=fail), client_id=f"client_{nickname.lower()}")
    client.set_nickname(nickname)
    return client


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def words() -> WordSupplier:
    return WordSupplier(["Dragon"])


@pytest.fixture()
def registry(words: WordSupplier, clock: FakeClock) -> RoomRegistry:
    return RoomRegistry(words=words, rng=random.Random(1234), clock=clock)


@pytest.fixture()
def new_client():
    return make_client


@pytest.fixture()
def anonymous_client() -> Client:
    return Client(FakeChannel())
