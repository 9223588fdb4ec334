#!/usr/bin/env python3
"""
Sync Relay - Entry Point
Socket.IO room relay + health endpoints
"""
import logging
import os

import socketio
from aiohttp import web

from relay.api import REGISTRY_KEY, setup_routes
from relay.sessions import SyncRelay
from relay.state import RoomRegistry

logger = logging.getLogger("sync_relay")

SIO_KEY = web.AppKey("sio", socketio.AsyncServer)
RELAY_KEY = web.AppKey("relay", SyncRelay)


def configure_logging():
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def cors_origins():
    raw = os.environ.get("CORS_ORIGINS", "*").strip()
    if raw == "*":
        return "*"
    return [o.strip() for o in raw.split(",") if o.strip()]


def create_app(registry: RoomRegistry = None) -> web.Application:
    """Create and configure the aiohttp application"""
    registry = registry if registry is not None else RoomRegistry()

    sio = socketio.AsyncServer(
        async_mode="aiohttp",
        cors_allowed_origins=cors_origins(),
        ping_interval=int(os.environ.get("PING_INTERVAL", 25)),
        ping_timeout=int(os.environ.get("PING_TIMEOUT", 20)),
    )
    app = web.Application()
    sio.attach(app)

    relay = SyncRelay(sio, registry).register()
    app[REGISTRY_KEY] = registry
    app[SIO_KEY] = sio
    app[RELAY_KEY] = relay

    setup_routes(app)

    logger.info("📺 Sync relay ready")
    return app


def main():
    configure_logging()
    app = create_app()
    port = int(os.environ.get("PORT", 3000))
    host = os.environ.get("SERVER_HOST", "0.0.0.0")

    logger.info(f"🚀 Starting server on {host}:{port}")

    web.run_app(app, host=host, port=port)


if __name__ == "__main__":
    main()
