"""
Turn engine for Schemes.

Turn order is the room's player list. Players who have claimed victory
are skipped; when nobody is left to play the active pointer is cleared.
"""

from fateboard.errors import GameError


def next_active_index(players, start_idx):
    """
    Scan forward from start_idx for the next player who has not won.

    Returns (index, wrapped). index is None when no eligible player exists.
    With no previous active player (start_idx == -1) the scan starts at 0 and
    only counts as a wrap when it lands on index 0.
    """
    count = len(players)
    for step in range(1, count + 1):
        if start_idx == -1:
            idx = step - 1
        else:
            idx = (start_idx + step) % count
        if not players[idx]["won"]:
            if start_idx == -1:
                return idx, idx == 0
            return idx, idx <= start_idx
    return None, False


def advance_turn(state):
    """
    Move the active pointer to the next eligible player, bumping the turn
    counter when the scan wraps. Returns True if it wrapped.
    """
    game = state["game"]
    players = state["players"]
    start_idx = -1
    for i, p in enumerate(players):
        if p["id"] == game["active_player_id"]:
            start_idx = i
            break

    idx, wrapped = next_active_index(players, start_idx)
    if idx is None:
        game["active_player_id"] = None
        return False

    game["active_player_id"] = players[idx]["id"]
    if wrapped:
        game["turn"] += 1
    return wrapped


def require_turn(state, player_id):
    if state["game"]["active_player_id"] != player_id:
        raise GameError("not_your_turn", "Not your turn")


def end_turn(state, player_id):
    require_turn(state, player_id)
    return {"wrapped": advance_turn(state)}


def claim_win(state, player):
    """Mark a player as having won; keep the turn moving if it was theirs."""
    if player["won"]:
        raise GameError("already_won", "You have already claimed victory")
    player["won"] = True
    wrapped = False
    if state["game"]["active_player_id"] == player["id"]:
        wrapped = advance_turn(state)
    return {"wrapped": wrapped}


def first_eligible_id(state):
    for p in state["players"]:
        if not p["won"]:
            return p["id"]
    return None
