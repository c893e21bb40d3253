"""
Constants and state helpers for Schemes.

Cards, zones, boards, player and room creation, and the deck operations
(draw, fate draw, reshuffle) every request handler builds on.
"""

import random
import secrets

from fateboard.errors import GameError

# ── Constants ────────────────────────────────────────────────────────

NUM_LOCATIONS = 4
ROWS = ("top", "bottom")
ZONES = ("deck", "hand", "discard", "fate_deck", "fate_discard")
CARD_TYPES = (
    "ally", "item", "condition", "effect",
    "hero", "guardian", "curse", "companion",
)

MAX_POWER = 50
MAX_TRUST = 50
COUNTER_STEP = 10         # max |delta| per power/trust request
STRENGTH_STEP = 5         # max |delta| per strength request
STRENGTH_LIMIT = 20       # modifier stays within [-20, 20]
MAX_DRAW = 5
FATE_DRAW = 2
MAX_PEEK = 5

ID_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789"


def new_id(length=8):
    return "".join(secrets.choice(ID_CHARS) for _ in range(length))


def clamp(value, low, high):
    return max(low, min(high, value))


# ── Cards & Boards ───────────────────────────────────────────────────

def make_card(template, face_up=False):
    """Instantiate one card from a catalog template."""
    return {
        "id": new_id(),
        "template_id": template["id"],
        "label": template["label"],
        "type": template["type"],
        "face_up": face_up,
        "locked": False,
        "cost": template.get("cost", 0),
        "strength": template.get("strength"),
        "strength_mod": 0,
    }


def expand_templates(templates):
    """Each template becomes `copies` independent card instances."""
    cards = []
    for template in templates:
        for _ in range(template.get("copies", 1)):
            cards.append(make_card(template))
    return cards


def make_location(index, template=None):
    template = template or {}
    return {
        "id": new_id(6),
        "name": template.get("name", f"Loc {index + 1}"),
        "locked": False,
        "top_slots": template.get("top_slots", 2),
        "actions": list(template.get("actions", [])),
        "top": [],
        "bottom": [],
    }


def make_board(location_templates=None):
    templates = location_templates or [None] * NUM_LOCATIONS
    return {
        "mover_at": 0,
        "locations": [make_location(i, templates[i]) for i in range(NUM_LOCATIONS)],
    }


# ── Player / Room Creation ───────────────────────────────────────────

def create_player(player_id, name):
    """Create a player as they sit down in the lobby."""
    return {
        "id": player_id,
        "name": name,
        "ready": False,
        "character_id": None,
        "zones": {zone: [] for zone in ZONES},
        "board": make_board(),
        "power": 0,
        "trust": 0,
        "won": False,
        "hand_visible": False,
    }


def create_room_state(room_id, owner_id, owner_name):
    return {
        "room_id": room_id,
        "owner_id": owner_id,
        "players": [create_player(owner_id, owner_name)],
        "game": {"phase": "lobby", "turn": 1, "active_player_id": None},
        "messages": [],
        "log": [],
        "sessions": {"fate": None, "peek": None, "sift": None},
    }


def deal_character(player, character, rng):
    """Reset a player's zones and board from their character definition."""
    zones = player["zones"]
    for zone in ZONES:
        zones[zone] = []
    zones["deck"] = expand_templates(character["deck"])
    zones["fate_deck"] = expand_templates(character["fate"])
    shuffle(zones["deck"], rng)
    shuffle(zones["fate_deck"], rng)

    player["board"] = make_board(character["locations"])
    player["power"] = 0
    player["trust"] = 0
    player["won"] = False
    player["hand_visible"] = False


# ── Lookups ──────────────────────────────────────────────────────────

def find_player(state, player_id):
    for player in state["players"]:
        if player["id"] == player_id:
            return player
    return None


def index_of(cards, card_id):
    for i, card in enumerate(cards):
        if card["id"] == card_id:
            return i
    return -1


def find_on_board(board, card_id):
    """Return (location_index, row, index) for a card on a board, or None."""
    for li, loc in enumerate(board["locations"]):
        for row in ROWS:
            i = index_of(loc[row], card_id)
            if i != -1:
                return li, row, i
    return None


def top_card(pile):
    return pile[-1] if pile else None


def parse_location_index(raw):
    if isinstance(raw, bool) or not isinstance(raw, int) or not 0 <= raw < NUM_LOCATIONS:
        raise GameError("bad_location_index", "Bad location index")
    return raw


# ── Deck Operations ──────────────────────────────────────────────────

def shuffle(cards, rng=None):
    """Uniform Fisher-Yates shuffle, in place."""
    (rng or random).shuffle(cards)


def _recycle(zones, deck_key, discard_key, rng):
    """Move a discard pile face down onto its deck and shuffle the deck."""
    moved = zones[discard_key]
    zones[discard_key] = []
    for card in moved:
        card["face_up"] = False
    zones[deck_key].extend(moved)
    shuffle(zones[deck_key], rng)
    return len(moved)


def reshuffle_discard_into_deck(player, rng=None):
    """Shuffle the whole discard pile into the deck. Returns cards moved."""
    return _recycle(player["zones"], "deck", "discard", rng)


def reshuffle_fate_discard(player, rng=None):
    return _recycle(player["zones"], "fate_deck", "fate_discard", rng)


def draw_cards(player, count, rng=None):
    """
    Draw up to `count` cards into hand, face up. When the deck runs out
    mid-draw the discard pile is shuffled in. Returns the drawn ids.
    """
    zones = player["zones"]
    drawn = []
    for _ in range(count):
        if not zones["deck"]:
            _recycle(zones, "deck", "discard", rng)
        if not zones["deck"]:
            break
        card = zones["deck"].pop()
        card["face_up"] = True
        zones["hand"].append(card)
        drawn.append(card["id"])
    return drawn


def fate_draw(player, count, rng=None, recycle=True):
    """
    Take up to `count` cards off a fate deck, revealed. Unlike draw_cards the
    cards are returned rather than placed; the caller decides where they go.
    """
    zones = player["zones"]
    taken = []
    for _ in range(count):
        if not zones["fate_deck"] and recycle:
            _recycle(zones, "fate_deck", "fate_discard", rng)
        if not zones["fate_deck"]:
            break
        card = zones["fate_deck"].pop()
        card["face_up"] = True
        taken.append(card)
    return taken


def return_to_fate_deck(player, cards):
    """Put cards back on top of the fate deck so cards[0] ends up on top."""
    for card in reversed(cards):
        card["face_up"] = False
        player["zones"]["fate_deck"].append(card)
