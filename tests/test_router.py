from __future__ import annotations

import pytest

from drawguess.errors import InvalidPayload, MalformedMessage
from drawguess.router import MessageRouter, parse_message


@pytest.fixture()
def router(registry) -> MessageRouter:
    return MessageRouter(registry)


def test_parse_message() -> None:
    assert parse_message('{"type": "chat", "message": "hi"}') == {"type": "chat", "message": "hi"}


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '"chat"', "{}", '{"type": 3}'])
def test_parse_message_rejects_bad_frames(raw) -> None:
    with pytest.raises(MalformedMessage):
        parse_message(raw)


@pytest.mark.asyncio
async def test_unknown_type_is_ignored(router, new_client) -> None:
    a = new_client("A")

    assert await router.dispatch(a, {"type": "dance"}) is False
    assert a.channel.sent == []


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [
    {"type": "join_room", "nickname": "A"},
    {"type": "join_room", "roomCode": "", "nickname": "A"},
    {"type": "join_room", "roomCode": "ABCD"},
    {"type": "join_room", "roomCode": 12, "nickname": "A"},
    {"type": "chat"},
    {"type": "chat", "message": 5},
    {"type": "draw_image"},
])
async def test_missing_fields_are_malformed(router, new_client, message) -> None:
    with pytest.raises(MalformedMessage):
        await router.dispatch(new_client("A"), message)


@pytest.mark.asyncio
async def test_operations_outside_room_are_dropped(router, new_client) -> None:
    a = new_client("A")

    for message in (
        {"type": "leave_room"},
        {"type": "chat", "message": "hi"},
        {"type": "draw", "x": 1, "y": 1},
        {"type": "start_game"},
        {"type": "draw_image", "imageData": "aGVsbG8="},
    ):
        assert await router.dispatch(a, message) is True

    assert a.channel.sent == []
    assert len(router.registry) == 0


@pytest.mark.asyncio
async def test_nickname_is_set_once(router, registry, anonymous_client) -> None:
    a = anonymous_client
    await router.dispatch(a, {"type": "join_room", "roomCode": "ABCD", "nickname": "Alice"})
    await router.dispatch(a, {"type": "leave_room"})
    await router.dispatch(a, {"type": "join_room", "roomCode": "WXYZ", "nickname": "Mallory"})

    assert a.nickname == "Alice"
    assert registry.get("WXYZ").roster() == ["Alice"]


@pytest.mark.asyncio
async def test_second_join_while_in_room_is_dropped(router, registry, new_client) -> None:
    a = new_client("A")
    await router.dispatch(a, {"type": "join_room", "roomCode": "ABCD", "nickname": "A"})
    a.channel.clear()

    await router.dispatch(a, {"type": "join_room", "roomCode": "WXYZ", "nickname": "A"})

    assert a.room_code == "ABCD"
    assert "WXYZ" not in registry
    assert a.channel.sent == []


@pytest.mark.asyncio
async def test_two_player_round(router, registry, new_client) -> None:
    a, b = new_client("A"), new_client("B")
    await router.dispatch(a, {"type": "join_room", "roomCode": "ABCD", "nickname": "A"})
    await router.dispatch(b, {"type": "join_room", "roomCode": "ABCD", "nickname": "B"})
    assert a.is_drawer and not b.is_drawer
    a.channel.clear()
    b.channel.clear()

    await router.dispatch(a, {"type": "start_game"})
    assert a.channel.sent == [{"type": "word_to_draw", "word": "Dragon"}, {"type": "game_started"}]
    assert b.channel.sent == [{"type": "game_started"}]

    a.channel.clear()
    b.channel.clear()
    await router.dispatch(b, {"type": "chat", "message": "wrongword"})
    wrong = {"type": "chat_message", "sender": "B", "message": "wrongword"}
    assert a.channel.sent == [wrong] and b.channel.sent == [wrong]
    assert registry.get("ABCD").word == "Dragon"

    a.channel.clear()
    b.channel.clear()
    await router.dispatch(b, {"type": "chat", "message": "Dragon"})
    for client in (a, b):
        assert client.channel.of_type("correct_guess")[0]["winner"] == "B"
        assert client.channel.sent[-1] == {"type": "new_drawer", "drawer": "B"}
    assert b.is_drawer and not a.is_drawer
    assert registry.get("ABCD").word == ""


@pytest.mark.asyncio
async def test_invalid_image_propagates_and_is_not_broadcast(router, new_client) -> None:
    a, b = new_client("A"), new_client("B")
    await router.dispatch(a, {"type": "join_room", "roomCode": "ABCD", "nickname": "A"})
    await router.dispatch(b, {"type": "join_room", "roomCode": "ABCD", "nickname": "B"})
    b.channel.clear()

    with pytest.raises(InvalidPayload):
        await router.dispatch(a, {"type": "draw_image", "imageData": "%%%"})

    assert b.channel.of_type("draw_image") == []


@pytest.mark.asyncio
async def test_disconnect_leaves_room(router, registry, new_client) -> None:
    a, b = new_client("A"), new_client("B")
    await router.dispatch(a, {"type": "join_room", "roomCode": "ABCD", "nickname": "A"})
    await router.dispatch(b, {"type": "join_room", "roomCode": "ABCD", "nickname": "B"})

    await router.disconnect(a)
    assert registry.get("ABCD").roster() == ["B"]
    assert b.is_drawer

    await router.disconnect(b)
    await router.disconnect(b)
    assert "ABCD" not in registry
