"""
Broadcast projection for Schemes.

Pure functions over the room state. Nothing here mutates; the server calls
these after every successful request and pushes the results.
"""

from copy import deepcopy

from fateboard.schemes.actions import LOG_LIMIT, log_items
from fateboard.schemes.state import ZONES, find_player, top_card


def _counts(zones):
    return {zone: len(zones[zone]) for zone in ZONES}


def _public_player(player):
    zones = player["zones"]
    view = {
        "id": player["id"],
        "name": player["name"],
        "ready": player["ready"],
        "character_id": player["character_id"],
        "power": player["power"],
        "trust": player["trust"],
        "won": player["won"],
        "hand_visible": player["hand_visible"],
        "counts": _counts(zones),
        "discard_top": deepcopy(top_card(zones["discard"])),
        "fate_discard_top": deepcopy(top_card(zones["fate_discard"])),
        # Boards are public: both rows of every location
        "board": deepcopy(player["board"]),
    }
    if player["hand_visible"]:
        view["hand"] = deepcopy(zones["hand"])
    return view


def _public_sessions(sessions):
    out = {}
    fate = sessions["fate"]
    out["fate"] = None if fate is None else {
        "owner_id": fate["owner_id"],
        "target_id": fate["target_id"],
        "cards": deepcopy(fate["cards"]),
        "chosen_id": fate["chosen_id"],
    }
    # Peeked cards are only shown to their owner
    peek = sessions["peek"]
    out["peek"] = None if peek is None else {
        "owner_id": peek["owner_id"],
        "target_id": peek["target_id"],
        "count": len(peek["cards"]),
    }
    sift = sessions["sift"]
    out["sift"] = None if sift is None else {
        "owner_id": sift["owner_id"],
        "target_id": sift["target_id"],
        "cards": deepcopy(sift["cards"]),
    }
    return out


def public_view(state):
    return {
        "room_id": state["room_id"],
        "owner_id": state["owner_id"],
        "game": dict(state["game"]),
        "players": [_public_player(p) for p in state["players"]],
        "sessions": _public_sessions(state["sessions"]),
    }


def private_view(state, player_id):
    """Own hand and counts, plus the cards of an own open peek."""
    player = find_player(state, player_id)
    if player is None:
        return None
    peek = state["sessions"]["peek"]
    own_peek = None
    if peek is not None and peek["owner_id"] == player_id:
        own_peek = {"target_id": peek["target_id"], "cards": deepcopy(peek["cards"])}
    return {
        "room_id": state["room_id"],
        "hand": deepcopy(player["zones"]["hand"]),
        "counts": _counts(player["zones"]),
        "peek": own_peek,
    }


def log_view(state, limit=LOG_LIMIT):
    return log_items(state, limit)
