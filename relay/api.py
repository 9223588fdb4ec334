"""
HTTP API handlers for the sync relay

Liveness and health only; everything else goes over Socket.IO.
"""
import logging
from aiohttp import web

from .state import RoomRegistry

logger = logging.getLogger("sync_relay")

REGISTRY_KEY = web.AppKey("registry", RoomRegistry)


async def index(request: web.Request) -> web.Response:
    return web.Response(text="Sync relay server running")


async def health(request: web.Request) -> web.Response:
    """Report liveness and the number of live rooms"""
    registry = request.app[REGISTRY_KEY]
    return web.json_response({"status": "ok", "rooms": len(registry)})


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/", index)
    app.router.add_get("/health", health)
