"""
Socket.IO session protocol for the sync relay

Each connection gets a Session; inbound events mutate the RoomRegistry and
fan out to the Socket.IO room named after the room code.
"""
import asyncio
import logging
from typing import Dict

from .exceptions import CodeSpaceExhausted, RoomNotFound
from .state import RoomRegistry, Session

logger = logging.getLogger("sync_relay")

MSG_ROOM_NOT_FOUND = "room does not exist"
MSG_ALREADY_IN_ROOM = "already in a room"
MSG_NO_CODES = "no room codes available"
MSG_MEMBER_JOINED = "member joined"
MSG_MEMBER_LEFT = "member left"
MSG_ROOM_CLOSED = "host left, room dissolved"


class SyncRelay:
    """
    Binds the relay events to a socketio.AsyncServer

    Every handler runs under one asyncio.Lock, so a registry read-modify-write
    and its broadcasts are atomic relative to other events.
    """

    def __init__(self, sio, registry: RoomRegistry):
        self.sio = sio
        self.registry = registry
        self.sessions: Dict[str, Session] = {}
        self._lock = asyncio.Lock()

    def register(self):
        self.sio.on("connect", self.on_connect)
        self.sio.on("create-room", self.on_create_room)
        self.sio.on("join-room", self.on_join_room)
        self.sio.on("sync-video", self.on_sync_video)
        self.sio.on("leave-room", self.on_leave_room)
        self.sio.on("disconnect", self.on_disconnect)
        return self

    def session(self, sid: str) -> Session:
        return self.sessions.setdefault(sid, Session(sid=sid))

    def _in_live_room(self, session: Session) -> bool:
        return session.room_code is not None and session.room_code in self.registry

    # ============================================================
    # CONNECTION LIFECYCLE
    # ============================================================

    async def on_connect(self, sid, environ, auth=None):
        self.session(sid)
        logger.info("🔌 Connected: %s", sid)

    async def on_disconnect(self, sid, reason=None):
        logger.info("🔌 Disconnected: %s (%s)", sid, reason)
        async with self._lock:
            await self.leave_room(sid)
            self.sessions.pop(sid, None)

    # ============================================================
    # ROOM EVENTS
    # ============================================================

    async def on_create_room(self, sid, *_):
        async with self._lock:
            session = self.session(sid)
            if self._in_live_room(session):
                logger.info("Rejected create-room from %s: already in %s", sid, session.room_code)
                return {"success": False, "message": MSG_ALREADY_IN_ROOM}

            try:
                code = self.registry.create(sid)
            except CodeSpaceExhausted as e:
                logger.error("Room creation failed for %s: %s", sid, e)
                return {"success": False, "message": MSG_NO_CODES}

            session.room_code = code
            session.is_host = True
            await self.sio.enter_room(sid, code)

            logger.info("🎪 Room %s created, host: %s", code, sid)
            return {"success": True, "roomCode": code, "isHost": True}

    async def on_join_room(self, sid, code=None, *_):
        async with self._lock:
            session = self.session(sid)
            if self._in_live_room(session):
                logger.info("Rejected join-room from %s: already in %s", sid, session.room_code)
                return {"success": False, "message": MSG_ALREADY_IN_ROOM}

            if not isinstance(code, str):
                logger.debug("Malformed join-room from %s: %r", sid, code)
                return {"success": False, "message": MSG_ROOM_NOT_FOUND}

            try:
                room = self.registry.join(code, sid)
            except RoomNotFound:
                logger.info("Join failed for %s: room %s does not exist", sid, code)
                return {"success": False, "message": MSG_ROOM_NOT_FOUND}

            session.room_code = code
            session.is_host = False
            await self.sio.enter_room(sid, code)

            logger.info("✅ %s joined room %s (%d members)", sid, code, len(room.members))

            await self.sio.emit(
                "room-update",
                {"count": len(room.members), "message": MSG_MEMBER_JOINED},
                to=code,
            )
            return {
                "success": True,
                "roomCode": code,
                "isHost": False,
                "currentUrl": room.current_url,
            }

    async def on_sync_video(self, sid, data=None, *_):
        async with self._lock:
            session = self.session(sid)
            if not session.room_code or not session.is_host:
                return
            if not isinstance(data, dict) or "url" not in data:
                logger.warning("Ignoring malformed sync-video from %s", sid)
                return

            code = session.room_code
            if code not in self.registry:
                return
            self.registry.update_playback(code, data["url"])
            await self.sio.emit(
                "video-sync",
                {
                    "type": "super-sync",
                    "url": data["url"],
                    "time": data.get("time"),
                    "paused": data.get("paused"),
                },
                to=code,
                skip_sid=sid,
            )

    async def on_leave_room(self, sid, *_):
        async with self._lock:
            await self.leave_room(sid)

    # ============================================================
    # TEARDOWN
    # ============================================================

    async def leave_room(self, sid: str):
        """
        Remove `sid` from its room, dissolving the room if it was the host.

        Caller must hold the lock. Safe to call repeatedly.
        """
        session = self.sessions.get(sid)
        if session is None or session.room_code is None:
            return

        code = session.room_code
        room = self.registry.lookup(code)
        if room is None:
            session.reset()
            return

        result = self.registry.remove_member(code, sid)

        if result.was_host:
            await self.sio.emit("room-closed", {"message": MSG_ROOM_CLOSED}, to=code)
            self.registry.delete(code)
            for member in room.members:
                other = self.sessions.get(member)
                if other is not None and other.room_code == code:
                    other.reset()
            await self.sio.close_room(code)
            logger.info("🛑 Room %s dissolved", code)
        else:
            await self.sio.emit(
                "room-update",
                {"count": result.remaining_count, "message": MSG_MEMBER_LEFT},
                to=code,
            )
            await self.sio.leave_room(sid, code)
            logger.info("👋 %s left room %s (%d members)", sid, code, result.remaining_count)

        session.reset()
