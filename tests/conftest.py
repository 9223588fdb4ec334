import random
from collections import defaultdict

import pytest

from relay.sessions import SyncRelay
from relay.state import RoomRegistry


class FakeSocketServer:
    """Stands in for socketio.AsyncServer; records what each sid receives."""

    def __init__(self):
        self.handlers = {}
        self.rooms = defaultdict(set)
        self.received = defaultdict(list)

    def on(self, event, handler):
        self.handlers[event] = handler

    async def enter_room(self, sid, room):
        self.rooms[room].add(sid)

    async def leave_room(self, sid, room):
        self.rooms[room].discard(sid)

    async def close_room(self, room):
        self.rooms.pop(room, None)

    async def emit(self, event, data=None, to=None, room=None, skip_sid=None):
        target = to if to is not None else room
        for sid in sorted(self.rooms.get(target, ())):
            if sid != skip_sid:
                self.received[sid].append((event, data))

    def events(self, sid, name=None):
        return [(e, d) for e, d in self.received[sid] if name is None or e == name]

    def total_events(self):
        return sum(len(v) for v in self.received.values())


@pytest.fixture
def registry():
    return RoomRegistry(rng=random.Random(1234))


@pytest.fixture
def sio():
    return FakeSocketServer()


@pytest.fixture
def relay(sio, registry):
    relay = SyncRelay(sio, registry).register()
    return relay


@pytest.fixture
def connect(relay):
    async def _connect(*sids):
        for sid in sids:
            await relay.on_connect(sid, {})
    return _connect
