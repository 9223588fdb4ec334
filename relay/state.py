"""
In-memory state management for rooms and connection sessions

One RoomRegistry per process, handed to the protocol handler.
Sessions live in the handler, keyed by Socket.IO sid.
"""
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional

from .exceptions import RoomNotFound
from .utils import generate_unique_room_code

logger = logging.getLogger("sync_relay")


@dataclass
class Room:
    code: str
    host: str
    members: List[str] = field(default_factory=list)
    # Only the URL is kept; time/paused travel with each sync event
    current_url: Optional[str] = None
    created_at: float = field(default_factory=time.time)


@dataclass
class Session:
    sid: str
    room_code: Optional[str] = None
    is_host: bool = False

    def reset(self):
        self.room_code = None
        self.is_host = False


class RemovalResult(NamedTuple):
    removed: bool
    was_host: bool
    remaining_count: int


class RoomRegistry:
    """Room state: code -> Room"""

    def __init__(self, rng: Optional[random.Random] = None, max_code_attempts: int = 10000):
        self._rooms: Dict[str, Room] = {}
        self._rng = rng
        self.max_code_attempts = max_code_attempts

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code) -> bool:
        return code in self._rooms

    def codes(self) -> List[str]:
        return list(self._rooms)

    def create(self, host_sid: str) -> str:
        """Create a room hosted by `host_sid` and return its code"""
        code = generate_unique_room_code(self._rooms, self._rng, self.max_code_attempts)
        self._rooms[code] = Room(code=code, host=host_sid, members=[host_sid])
        return code

    def lookup(self, code: str) -> Optional[Room]:
        return self._rooms.get(code)

    def join(self, code: str, sid: str) -> Room:
        """
        Append `sid` to the room's members

        Raises:
            RoomNotFound: no live room with this code
        """
        room = self._rooms.get(code)
        if room is None:
            raise RoomNotFound(code)
        room.members.append(sid)
        return room

    def update_playback(self, code: str, url: Optional[str]) -> None:
        room = self._rooms.get(code)
        if room is None:
            # Torn down while the sync was in flight
            logger.debug("Dropping playback update for vanished room %s", code)
            return
        room.current_url = url

    def remove_member(self, code: str, sid: str) -> RemovalResult:
        """
        Remove `sid` from the room's members

        Never deletes the room; the caller tears it down when `was_host` is set.
        """
        room = self._rooms.get(code)
        if room is None:
            return RemovalResult(removed=False, was_host=False, remaining_count=0)

        removed = sid in room.members
        room.members = [m for m in room.members if m != sid]
        return RemovalResult(
            removed=removed,
            was_host=(room.host == sid),
            remaining_count=len(room.members),
        )

    def delete(self, code: str) -> None:
        self._rooms.pop(code, None)
