"""
Abstract game engine interface.

A game that plugs into the server implements this interface. The server
knows nothing about game-specific rules: it owns connections and rooms,
routes named requests through apply_request, and publishes the views
these methods derive after every successful mutation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class ActionResult:
    """Returned by every engine entry point to tell the server what happened."""
    new_state: dict
    # Extra fields merged into the {"ok": true} acknowledgement
    reply: dict = field(default_factory=dict)
    # System chat lines to append and broadcast
    messages: list[dict] = field(default_factory=list)
    # Read-only requests leave this False so nothing is republished
    mutated: bool = True


class GameEngine(ABC):
    """
    Pure-logic room engine. No networking, no rendering.

    State is always a plain dict (JSON-serializable). Entry points never
    modify the state they are given: they work on a copy and hand it back
    in an ActionResult, or raise ValueError and leave the caller's state
    untouched.
    """

    # Subclasses can override to restrict player counts.
    player_count_range: tuple[int, int] = (2, 6)

    @abstractmethod
    def new_room(self, room_id: str, owner_id: str, owner_name: str) -> dict:
        """Create the lobby state for a new room containing its owner."""
        ...

    @abstractmethod
    def add_player(self, state: dict, player_id: str, name: str) -> ActionResult:
        """Seat a new player in the room."""
        ...

    @abstractmethod
    def remove_player(self, state: dict, player_id: str, reason: str = "") -> ActionResult:
        """Remove a departing player and hand off any roles they held."""
        ...

    @abstractmethod
    def apply_request(self, state: dict, player_id: str, request: str, payload: dict) -> ActionResult:
        """
        Validate and apply one named request from a player.
        Raises ValueError (usually a GameError) if the request is invalid.
        """
        ...

    @abstractmethod
    def public_view(self, state: dict) -> dict:
        """Snapshot every member of the room may see."""
        ...

    @abstractmethod
    def private_view(self, state: dict, player_id: str) -> dict:
        """Snapshot only the given player may see (their own hand, etc)."""
        ...

    @abstractmethod
    def log_view(self, state: dict) -> list[dict]:
        """Human-readable projection of the action log, newest first."""
        ...
