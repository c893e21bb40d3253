"""
Room registry.

Owns every live room and which room each connected player sits in. All
room mutations go through here so a room is created with its owner,
replaced only by successful engine results, and deleted as soon as its
last player leaves.
"""

import logging
import secrets
from dataclasses import dataclass

from fateboard.errors import GameError
from fateboard.game_engine import GameEngine

logger = logging.getLogger(__name__)


def generate_room_code():
    """Generate a short, human-friendly room code."""
    chars = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"  # no I/O/0/1 for clarity
    return "".join(secrets.choice(chars) for _ in range(6))


def generate_player_id():
    return f"p_{secrets.token_urlsafe(6)}"


@dataclass
class Room:
    room_id: str
    state: dict

    @property
    def player_ids(self):
        return [p["id"] for p in self.state["players"]]


class RoomRegistry:
    """
    Manages rooms and membership. Game-agnostic: every rule lives in the
    engine, the registry only swaps in the state an engine hands back.
    """

    def __init__(self, engine: GameEngine):
        self.engine = engine
        self.rooms: dict[str, Room] = {}           # room_id -> Room
        self.membership: dict[str, str] = {}       # player_id -> room_id

    # ── Lifecycle ────────────────────────────────────────────────────

    def create(self, player_id, name):
        """Create a room with the player as owner. Returns the Room."""
        code = generate_room_code()
        while code in self.rooms:
            code = generate_room_code()

        state = self.engine.new_room(code, player_id, name)
        room = Room(room_id=code, state=state)
        self.rooms[code] = room
        self.membership[player_id] = code
        logger.info("room %s created by %s", code, player_id)
        return room

    def get(self, room_id):
        room = self.rooms.get(room_id)
        if room is None:
            raise GameError("room_not_found", "Room not found")
        return room

    def room_of(self, player_id):
        room_id = self.membership.get(player_id)
        return self.rooms.get(room_id) if room_id else None

    def remove_if_empty(self, room_id):
        room = self.rooms.get(room_id)
        if room is None or room.state["players"]:
            return False
        del self.rooms[room_id]
        logger.info("room %s deleted (empty)", room_id)
        return True

    # ── Membership ───────────────────────────────────────────────────

    def join(self, room_id, player_id, name):
        """Seat a player in an existing room. Returns (room, result)."""
        room = self.get(str(room_id or "").strip().upper())
        result = self.engine.add_player(room.state, player_id, name)
        room.state = result.new_state
        self.membership[player_id] = room.room_id
        logger.info("%s joined room %s", player_id, room.room_id)
        return room, result

    def leave(self, player_id, reason="", room=None):
        """
        Remove a player from a room (by default the one they are in).
        Returns (room, result), or (None, None) if there was nothing to leave.
        The room in the return value may already be deleted.
        """
        room = room or self.room_of(player_id)
        if room is None:
            return None, None
        if self.membership.get(player_id) == room.room_id:
            del self.membership[player_id]
        if player_id not in room.player_ids:
            return None, None

        result = self.engine.remove_player(room.state, player_id, reason)
        room.state = result.new_state
        logger.info("%s left room %s%s", player_id, room.room_id, f" ({reason})" if reason else "")
        self.remove_if_empty(room.room_id)
        return room, result

    # ── Requests ─────────────────────────────────────────────────────

    def apply(self, player_id, request, payload):
        """Route a game request to the player's room. Returns (room, result)."""
        room = self.room_of(player_id)
        if room is None:
            raise GameError("not_in_room", "Not in a room")
        result = self.engine.apply_request(room.state, player_id, request, payload)
        room.state = result.new_state
        return room, result

    def is_live(self, room):
        return self.rooms.get(room.room_id) is room
