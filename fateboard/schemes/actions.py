"""
Action log and undo engine for Schemes.

Every mutating game request appends one entry to the room log. An entry's
data carries exactly what its inverse needs, so "undo my last action" is a
lookup in a table keyed by kind. Each inverse checks its precondition
before touching anything.

Kinds fall into three groups that must cover ACTION_KINDS exactly:
  - reversible: listed in UNDO_HANDLERS
  - irreversible: power changes and reshuffles, refused with a specific code
  - unsupported: everything else
"""

import time

from fateboard.errors import GameError
from fateboard.schemes.state import (
    find_on_board, find_player, index_of, new_id, top_card,
)

LOG_LIMIT = 25

ACTION_KINDS = (
    "draw", "play", "discard", "move", "remove", "retrieve", "pawn", "lock",
    "strength", "play_effect", "fate_return",
    "power", "reshuffle",
    "undo", "end_turn", "win", "trust", "reveal", "spawn",
    "fate", "peek", "sift",
)

IRREVERSIBLE = {
    "power": "cannot_undo_power",
    "reshuffle": "cannot_undo_reshuffle",
}

UNSUPPORTED = frozenset({
    "undo", "end_turn", "win", "trust", "reveal", "spawn", "fate", "peek", "sift",
})


# ── Appending ────────────────────────────────────────────────────────

def append_entry(state, actor_id, kind, data, limit=LOG_LIMIT):
    """Append an entry, keeping only the most recent `limit` entries."""
    if kind not in ACTION_KINDS:
        raise ValueError(f"Unknown action kind: {kind}")
    entry = {
        "id": new_id(),
        "ts": int(time.time() * 1000),
        "actor_id": actor_id,
        "kind": kind,
        "data": data,
        "undone": False,
    }
    log = state["log"]
    log.append(entry)
    if len(log) > limit:
        del log[:len(log) - limit]
    return entry


# ── Undo ─────────────────────────────────────────────────────────────

def undo_last(state, actor_id, limit=LOG_LIMIT):
    """Invert the room's most recent entry if it belongs to actor_id."""
    if not state["log"]:
        raise GameError("nothing_to_undo", "Nothing to undo")
    last = state["log"][-1]
    if last["actor_id"] != actor_id:
        raise GameError("not_your_last_action", "Only your last action can be undone")
    if last["undone"]:
        raise GameError("already_undone", "Already undone")

    kind = last["kind"]
    if kind in IRREVERSIBLE:
        raise GameError(IRREVERSIBLE[kind], f"{kind} cannot be undone")
    handler = UNDO_HANDLERS.get(kind)
    if handler is None:
        raise GameError("unsupported_undo", f"Cannot undo {kind.replace('_', ' ')}")

    player = find_player(state, actor_id)
    if player is None:
        raise GameError("player_not_found", "Player not found")

    handler(state, player, last["data"])
    last["undone"] = True
    append_entry(state, actor_id, "undo", {"action_id": last["id"]}, limit)
    return last


def _changed(message):
    return GameError("cannot_undo_state_changed", f"Cannot undo: {message}")


def _insert_at(cards, index, card):
    cards.insert(max(0, min(index, len(cards))), card)


def _undo_draw(state, player, data):
    zones = player["zones"]
    ids = data["card_ids"]
    if not all(index_of(zones["hand"], cid) != -1 for cid in ids):
        raise _changed("cards already moved")
    for cid in reversed(ids):
        card = zones["hand"].pop(index_of(zones["hand"], cid))
        card["face_up"] = False
        zones["deck"].append(card)


def _undo_play(state, player, data):
    loc = player["board"]["locations"][data["location_index"]]
    i = index_of(loc["bottom"], data["card_id"])
    if i == -1:
        raise _changed("card not on board anymore")
    card = loc["bottom"].pop(i)
    _insert_at(player["zones"]["hand"], data["from_index"], card)


def _undo_discard(state, player, data):
    zones = player["zones"]
    ids = data["card_ids"]
    tail = [c["id"] for c in zones["discard"][-len(ids):]] if ids else []
    if tail != ids:
        raise _changed("discard changed")
    for idx in reversed(data["from_indices"]):
        card = zones["discard"].pop()
        _insert_at(zones["hand"], idx, card)


def _undo_move(state, player, data):
    locations = player["board"]["locations"]
    dest = locations[data["to"]]["bottom"]
    i = index_of(dest, data["card_id"])
    if i == -1:
        raise _changed("card not in destination anymore")
    card = dest.pop(i)
    _insert_at(locations[data["from"]]["bottom"], data["from_index"], card)


def _undo_remove(state, player, data):
    pile = player["zones"][data["pile"]]
    top = top_card(pile)
    if top is None or top["id"] != data["card_id"]:
        raise _changed("discard changed")
    card = pile.pop()
    card["face_up"] = True
    row = player["board"]["locations"][data["from"]][data["row"]]
    _insert_at(row, data["from_index"], card)


def _undo_retrieve(state, player, data):
    zones = player["zones"]
    i = index_of(zones["hand"], data["card_id"])
    if i == -1:
        raise _changed("card moved from hand")
    card = zones["hand"].pop(i)
    _insert_at(zones["discard"], data["from_index"], card)


def _undo_pawn(state, player, data):
    player["board"]["mover_at"] = data["prev"]


def _undo_lock(state, player, data):
    loc = player["board"]["locations"][data["loc"]]
    if data["target"] == "location":
        loc["locked"] = data["prev"]
        return
    row = loc[data["row"]]
    i = index_of(row, data["card_id"])
    if i == -1:
        raise _changed("card not found")
    row[i]["locked"] = data["prev"]


def _undo_strength(state, player, data):
    found = find_on_board(player["board"], data["card_id"])
    if found is None:
        raise _changed("card not found")
    li, row, i = found
    player["board"]["locations"][li][row][i]["strength_mod"] = data["prev"]


def _undo_play_effect(state, player, data):
    zones = player["zones"]
    top = top_card(zones["discard"])
    if top is None or top["id"] != data["card_id"]:
        raise _changed("discard changed")
    card = zones["discard"].pop()
    card["face_up"] = data["face_up"]
    _insert_at(zones["hand"], data["from_index"], card)


def _undo_fate_return(state, player, data):
    target = find_player(state, data["target_id"])
    if target is None:
        raise _changed("target left the room")
    deck = target["zones"]["fate_deck"]
    i = index_of(deck, data["card_id"])
    if i == -1:
        raise _changed("card left the fate deck")
    card = deck.pop(i)
    card["face_up"] = True
    _insert_at(target["zones"]["fate_discard"], data["from_index"], card)


UNDO_HANDLERS = {
    "draw": _undo_draw,
    "play": _undo_play,
    "discard": _undo_discard,
    "move": _undo_move,
    "remove": _undo_remove,
    "retrieve": _undo_retrieve,
    "pawn": _undo_pawn,
    "lock": _undo_lock,
    "strength": _undo_strength,
    "play_effect": _undo_play_effect,
    "fate_return": _undo_fate_return,
}


def _check_kind_table():
    reversible = set(UNDO_HANDLERS)
    irreversible = set(IRREVERSIBLE)
    groups = (reversible, irreversible, set(UNSUPPORTED))
    covered = set().union(*groups)
    overlap = sum(len(g) for g in groups) != len(covered)
    if overlap or covered != set(ACTION_KINDS):
        raise RuntimeError("Undo table does not partition ACTION_KINDS")


_check_kind_table()


# ── Log Projection ───────────────────────────────────────────────────

def _plural(n, word):
    return f"{n} {word}{'' if n == 1 else 's'}"


def _describe(name, kind, data, state):
    if kind == "draw":
        return f"{name} drew {_plural(len(data['card_ids']), 'card')}"
    if kind == "play":
        return f"{name} played a card to L{data['location_index'] + 1}"
    if kind == "discard":
        return f"{name} discarded {_plural(len(data['card_ids']), 'card')}"
    if kind == "move":
        return f"{name} moved a card L{data['from'] + 1} → L{data['to'] + 1}"
    if kind == "remove":
        return f"{name} discarded a board card from L{data['from'] + 1}"
    if kind == "retrieve":
        return f"{name} took a card from discard"
    if kind == "pawn":
        return f"{name} moved pawn to L{data['next'] + 1}"
    if kind == "lock":
        verb = "locked" if data["next"] else "unlocked"
        if data["target"] == "location":
            return f"{name} {verb} L{data['loc'] + 1}"
        return f"{name} {verb} a card on L{data['loc'] + 1}"
    if kind == "strength":
        sign = "+" if data["delta"] >= 0 else "−"
        return f"{name} set a card's strength {sign}{abs(data['delta'])} ({data['prev']} → {data['next']})"
    if kind == "play_effect":
        return f"{name} played an effect"
    if kind in ("power", "trust"):
        sign = "+" if data["delta"] >= 0 else "−"
        return f"{name} {sign}{abs(data['delta'])} {kind} ({data['prev']} → {data['next']})"
    if kind == "reshuffle":
        pile = "fate deck" if data.get("pile") == "fate" else "deck"
        return f"{name} reshuffled {_plural(data['moved'], 'card')} into {pile}"
    if kind == "undo":
        return f"{name} undid their last action"
    if kind == "end_turn":
        return f"{name} ended their turn"
    if kind == "win":
        return f"{name} claimed victory"
    if kind == "reveal":
        return f"{name} {'revealed' if data['visible'] else 'hid'} their hand"
    if kind == "spawn":
        return f"{name} summoned {data['label']} to L{data['location_index'] + 1}"

    target = find_player(state, data.get("target_id"))
    target_name = target["name"] if target else "someone"
    if kind == "fate_return":
        return f"{name} returned a card to {target_name}'s fate deck"
    if kind == "fate":
        if data["outcome"] == "place":
            return f"{name} fated {target_name} at L{data['location_index'] + 1}"
        return f"{name} fated {target_name} and discarded {_plural(len(data['discarded']), 'card')}"
    if kind == "peek":
        return f"{name} looked at {_plural(data['count'], 'card')} of {target_name}'s fate deck"
    if kind == "sift":
        return f"{name} sifted {target_name}'s fate deck"
    return f"{name} did {kind}"


def log_items(state, limit=LOG_LIMIT):
    """Readable log, most recent first."""
    items = []
    for entry in state["log"][-limit:]:
        actor = find_player(state, entry["actor_id"])
        name = actor["name"] if actor else entry["actor_id"][:6]
        if entry["undone"]:
            text = f"{name} undid their last action"
            kind = "undo"
        else:
            text = _describe(name, entry["kind"], entry["data"], state)
            kind = entry["kind"]
        items.append({
            "id": entry["id"],
            "ts": entry["ts"],
            "actor_id": entry["actor_id"],
            "actor_name": name,
            "kind": kind,
            "text": text,
        })
    items.reverse()
    return items
