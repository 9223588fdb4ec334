"""Real Socket.IO clients against the aiohttp app."""

import asyncio

import pytest
import socketio

from main import create_app
from relay.state import RoomRegistry

TIMEOUT = 5


class Peer:
    def __init__(self):
        self.client = socketio.AsyncClient()
        self.inbox = asyncio.Queue()
        for event in ("room-update", "video-sync", "room-closed"):
            self.client.on(event, self._collector(event))

    def _collector(self, event):
        async def collect(data):
            await self.inbox.put((event, data))
        return collect

    async def next_event(self):
        return await asyncio.wait_for(self.inbox.get(), TIMEOUT)


@pytest.fixture
async def relay_server(aiohttp_server):
    registry = RoomRegistry()
    server = await aiohttp_server(create_app(registry))
    return str(server.make_url("/")), registry


@pytest.fixture
async def peers():
    created = []

    async def _peer(url):
        peer = Peer()
        await peer.client.connect(url, transports=["websocket"])
        created.append(peer)
        return peer

    yield _peer
    for peer in created:
        if peer.client.connected:
            await peer.client.disconnect()


async def test_watch_party(relay_server, peers):
    url, registry = relay_server
    a = await peers(url)
    b = await peers(url)

    created = await a.client.call("create-room", timeout=TIMEOUT)
    code = created["roomCode"]
    assert created == {"success": True, "roomCode": code, "isHost": True}

    joined = await b.client.call("join-room", code, timeout=TIMEOUT)
    assert joined == {"success": True, "roomCode": code, "isHost": False, "currentUrl": None}
    expected = ("room-update", {"count": 2, "message": "member joined"})
    assert await a.next_event() == expected
    assert await b.next_event() == expected

    await a.client.emit("sync-video", {"url": "v1", "time": 10, "paused": False})
    assert await b.next_event() == (
        "video-sync", {"type": "super-sync", "url": "v1", "time": 10, "paused": False},
    )

    await a.client.disconnect()
    assert await b.next_event() == ("room-closed", {"message": "host left, room dissolved"})
    assert code not in registry

    again = await b.client.call("join-room", code, timeout=TIMEOUT)
    assert again == {"success": False, "message": "room does not exist"}


async def test_member_leaves(relay_server, peers):
    url, registry = relay_server
    a = await peers(url)
    b = await peers(url)

    code = (await a.client.call("create-room", timeout=TIMEOUT))["roomCode"]
    await b.client.call("join-room", code, timeout=TIMEOUT)
    await a.next_event()

    await b.client.emit("leave-room")
    assert await a.next_event() == ("room-update", {"count": 1, "message": "member left"})
    assert registry.lookup(code).members == [a.client.get_sid()]
