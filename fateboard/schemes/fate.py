"""
Fate sub-protocol for Schemes.

Three kinds of short-lived session borrow cards from a target player's fate
deck and resolve them over several requests:

  fate  draw 2, pick one to place on the target's board or discard them
  peek  look at up to 5, put them back in any order
  sift  draw 2, discard one and put the other back on top

Each room holds at most one session per kind, stored in
state["sessions"][kind] with the owning player's id. A second player
cannot open a kind that is already held; no exclusion applies across
kinds. While a session is open its cards live only in the session.

Sessions have no timeout, but they do not outlive their players: when a
player leaves, release_sessions cancels the sessions they own (cards go
back) and drops the sessions aimed at them.
"""

from fateboard.errors import GameError
from fateboard.schemes.state import (
    FATE_DRAW, MAX_PEEK,
    fate_draw, find_player, index_of, parse_location_index, return_to_fate_deck,
)

SESSION_KINDS = ("fate", "peek", "sift")


# ── Session Slots ────────────────────────────────────────────────────

def _held(state, kind, actor_id):
    """Return the actor's own open session of this kind, or None if free."""
    session = state["sessions"][kind]
    if session is None:
        return None
    if session["owner_id"] != actor_id:
        raise GameError("another_session_active", f"Another player has a {kind} session open")
    return session


def _owned(state, kind, actor_id):
    session = state["sessions"][kind]
    if session is None or session["owner_id"] != actor_id:
        raise GameError("no_active_session", f"No {kind} session open")
    return session


def _open(state, kind, actor_id, target_id, cards, **extra):
    session = {
        "owner_id": actor_id,
        "target_id": target_id,
        "cards": cards,
    }
    session.update(extra)
    state["sessions"][kind] = session
    return session


def _close(state, kind):
    state["sessions"][kind] = None


def _target(state, target_id):
    target = find_player(state, target_id)
    if target is None:
        raise GameError("player_not_found", "Target player not found")
    return target


def _session_card(session, card_id):
    i = index_of(session["cards"], card_id)
    if i == -1:
        raise GameError("card_not_found", "Card is not part of this session")
    return session["cards"][i]


def _to_fate_discard(target, cards):
    for card in cards:
        card["face_up"] = True
        target["zones"]["fate_discard"].append(card)


def _ids(cards):
    return [c["id"] for c in cards]


# ── Fate ─────────────────────────────────────────────────────────────

def fate_start(state, actor_id, target_id, rng=None):
    if _held(state, "fate", actor_id) is not None:
        raise GameError("session_already_open", "You already have a fate session open")
    target = _target(state, target_id)
    zones = target["zones"]
    if not zones["fate_deck"] and not zones["fate_discard"]:
        raise GameError("fate_deck_empty", "Fate deck is empty")

    cards = fate_draw(target, FATE_DRAW, rng)
    return _open(state, "fate", actor_id, target_id, cards, chosen_id=None, from_discard=None)


def fate_start_from_discard(state, actor_id, target_id, card_id):
    """Open a one-card session seeded from the target's fate discard, already chosen."""
    if _held(state, "fate", actor_id) is not None:
        raise GameError("session_already_open", "You already have a fate session open")
    target = _target(state, target_id)
    pile = target["zones"]["fate_discard"]
    i = index_of(pile, card_id)
    if i == -1:
        raise GameError("card_not_found", "Card is not in that fate discard")

    card = pile.pop(i)
    card["face_up"] = True
    return _open(state, "fate", actor_id, target_id, [card], chosen_id=card["id"], from_discard=i)


def fate_choose(state, actor_id, card_id):
    session = _owned(state, "fate", actor_id)
    _session_card(session, card_id)
    session["chosen_id"] = card_id
    return session


def _split_chosen(session):
    if session["chosen_id"] is None:
        raise GameError("no_selection", "Choose a card first")
    chosen = _session_card(session, session["chosen_id"])
    others = [c for c in session["cards"] if c["id"] != chosen["id"]]
    return chosen, others


def fate_place(state, actor_id, location_index):
    """Put the chosen card in the target's top row; the rest go to fate discard."""
    session = _owned(state, "fate", actor_id)
    chosen, others = _split_chosen(session)
    target = _target(state, session["target_id"])
    li = parse_location_index(location_index)
    loc = target["board"]["locations"][li]
    if loc["locked"]:
        raise GameError("location_locked", "Location is locked")
    if len(loc["top"]) >= loc["top_slots"]:
        raise GameError("location_full", "No free slot at that location")

    chosen["face_up"] = True
    loc["top"].append(chosen)
    _to_fate_discard(target, others)
    _close(state, "fate")
    return {
        "target_id": target["id"],
        "outcome": "place",
        "location_index": li,
        "card_id": chosen["id"],
        "discarded": _ids(others),
    }


def fate_discard_selected(state, actor_id):
    """Discard everything; the chosen card lands on top of the fate discard."""
    session = _owned(state, "fate", actor_id)
    chosen, others = _split_chosen(session)
    target = _target(state, session["target_id"])

    _to_fate_discard(target, others + [chosen])
    _close(state, "fate")
    return {
        "target_id": target["id"],
        "outcome": "discard",
        "card_id": chosen["id"],
        "discarded": _ids(others + [chosen]),
    }


def fate_discard_both(state, actor_id):
    session = _owned(state, "fate", actor_id)
    if len(session["cards"]) != 2:
        raise GameError("bad_count", "Exactly two fate cards are needed")
    target = _target(state, session["target_id"])

    cards = session["cards"]
    _to_fate_discard(target, cards)
    _close(state, "fate")
    return {
        "target_id": target["id"],
        "outcome": "discard_both",
        "discarded": _ids(cards),
    }


def fate_cancel(state, actor_id):
    session = _owned(state, "fate", actor_id)
    _restore(state, "fate", session)


def _restore(state, kind, session):
    """Put borrowed cards back where they came from and close the slot."""
    target = find_player(state, session["target_id"])
    if target is not None:
        from_discard = session.get("from_discard")
        if from_discard is not None:
            card = session["cards"][0]
            pile = target["zones"]["fate_discard"]
            pile.insert(min(from_discard, len(pile)), card)
        else:
            return_to_fate_deck(target, session["cards"])
    _close(state, kind)


# ── Peek ─────────────────────────────────────────────────────────────

def peek_start(state, actor_id, target_id, count):
    """Returns (session, opened). Re-entry by the owner returns the open session."""
    existing = _held(state, "peek", actor_id)
    if existing is not None:
        return existing, False
    target = _target(state, target_id)
    if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= MAX_PEEK:
        raise GameError("bad_count", f"Count must be between 1 and {MAX_PEEK}")
    if not target["zones"]["fate_deck"]:
        raise GameError("fate_deck_empty", "Fate deck is empty")

    cards = fate_draw(target, count, recycle=False)
    return _open(state, "peek", actor_id, target_id, cards), True


def peek_confirm(state, actor_id, order_ids):
    """Push the cards back so order_ids[0] becomes the new top."""
    session = _owned(state, "peek", actor_id)
    cards = session["cards"]
    if (not isinstance(order_ids, list)
            or not all(isinstance(cid, str) for cid in order_ids)
            or len(order_ids) != len(cards)
            or set(order_ids) != set(_ids(cards))):
        raise GameError("bad_order", "Order must list every peeked card once")
    target = _target(state, session["target_id"])

    by_id = {c["id"]: c for c in cards}
    return_to_fate_deck(target, [by_id[cid] for cid in order_ids])
    _close(state, "peek")
    return {"target_id": target["id"], "count": len(cards)}


def peek_cancel(state, actor_id):
    session = _owned(state, "peek", actor_id)
    _restore(state, "peek", session)


# ── Sift ─────────────────────────────────────────────────────────────

def sift_start(state, actor_id, target_id=None):
    existing = _held(state, "sift", actor_id)
    if existing is not None:
        return existing, False
    target = _target(state, target_id or actor_id)
    if not target["zones"]["fate_deck"]:
        raise GameError("fate_deck_empty", "Fate deck is empty")

    cards = fate_draw(target, FATE_DRAW, recycle=False)
    return _open(state, "sift", actor_id, target["id"], cards), True


def sift_choose(state, actor_id, discard_id):
    """Discard one card; the other goes back on top of the fate deck."""
    session = _owned(state, "sift", actor_id)
    chosen = _session_card(session, discard_id)
    target = _target(state, session["target_id"])

    others = [c for c in session["cards"] if c["id"] != discard_id]
    _to_fate_discard(target, [chosen])
    return_to_fate_deck(target, others)
    _close(state, "sift")
    return {"target_id": target["id"], "discarded": [discard_id], "kept": _ids(others)}


def sift_cancel(state, actor_id):
    session = _owned(state, "sift", actor_id)
    _restore(state, "sift", session)


# ── Departure ────────────────────────────────────────────────────────

def release_sessions(state, player_id):
    """
    Clean up after a departing player: sessions they own are cancelled,
    sessions aimed at them are dropped along with their cards.
    """
    for kind in SESSION_KINDS:
        session = state["sessions"][kind]
        if session is None:
            continue
        if session["target_id"] == player_id:
            _close(state, kind)
        elif session["owner_id"] == player_id:
            _restore(state, kind, session)
