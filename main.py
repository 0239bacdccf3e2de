#!/usr/bin/env python3
"""
Draw & Guess - Entry Point
WebSocket game server + static client
"""
import logging
import os
from pathlib import Path
from typing import Optional

from aiohttp import web

from drawguess.api import registry_key, router_key, ws_game
from drawguess.router import MessageRouter
from drawguess.state import RoomRegistry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("drawguess")

STATIC_DIR = Path(os.getenv('DRAWGUESS_STATIC_DIR', './static'))


def create_app(registry: Optional[RoomRegistry] = None, static_dir: Path = STATIC_DIR) -> web.Application:
    """Create and configure the aiohttp application"""
    app = web.Application()
    app[registry_key] = registry if registry is not None else RoomRegistry()
    app[router_key] = MessageRouter(app[registry_key])

    # Game socket
    app.router.add_get("/ws", ws_game)

    # Static client, when one is shipped alongside the server
    if static_dir.is_dir():
        async def index(request):
            return web.FileResponse(static_dir / 'index.html')

        app.router.add_get("/", index)
        app.router.add_static('/static', static_dir, name='static')
    else:
        logger.warning("Static directory %s not found, serving the game socket only", static_dir)

    logger.info("🎨 Draw & Guess server ready")
    return app


def main():
    app = create_app()
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("SERVER_HOST", "0.0.0.0")

    logger.info(f"🚀 Starting server on {host}:{port}")
    web.run_app(app, host=host, port=port)


if __name__ == "__main__":
    main()
