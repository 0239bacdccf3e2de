"""
WebSocket endpoint for the game
Each connection runs in its own handler task and feeds the router in order.
"""
import logging
from aiohttp import web

from .client import Client
from .errors import InvalidPayload, MalformedMessage
from .router import MessageRouter, parse_message
from .state import RoomRegistry

logger = logging.getLogger("drawguess")

# The browser uploads whole image files as base64; no frame size cap
MAX_MSG_SIZE = 0

registry_key = web.AppKey("registry", RoomRegistry)
router_key = web.AppKey("router", MessageRouter)


async def ws_game(request: web.Request) -> web.WebSocketResponse:
    """One player connection: read, dispatch, and leave the room on close"""
    ws = web.WebSocketResponse(max_msg_size=MAX_MSG_SIZE)
    await ws.prepare(request)

    router = request.app[router_key]
    client = Client(ws)
    logger.info("📡 %s connected from %s", client.client_id, request.remote)

    try:
        async for msg in ws:
            if msg.type == web.WSMsgType.TEXT:
                try:
                    await router.dispatch(client, parse_message(msg.data))
                except (MalformedMessage, InvalidPayload) as e:
                    logger.warning("Dropped message from %s: %s", client.name, e)
            elif msg.type == web.WSMsgType.ERROR:
                logger.debug("WebSocket error for %s: %s", client.name, ws.exception())
            else:
                logger.debug("Ignoring %s frame from %s", msg.type, client.name)
    except Exception:
        logger.exception("Connection handler for %s failed", client.name)
    finally:
        await router.disconnect(client)
        logger.info("📡 %s disconnected", client.name)

    return ws
