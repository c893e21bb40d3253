"""
Character catalog for Schemes.

Pure data: each character brings four board locations, a draw deck, a fate
deck other players draw from when they meddle with this character, and
optionally a companion token it can summon. Templates expand into `copies`
independent card instances when a game starts.

The engine never branches on a character id; it only consults a Catalog.
"""

from copy import deepcopy

# ── Location Action Hints (display only) ─────────────────────────────

ACTION_HINTS = (
    "gain_power", "play_card", "activate", "discard",
    "move_ally", "move_item", "fate", "vanquish",
)


def _loc(name, actions, top_slots=2):
    return {"name": name, "actions": list(actions), "top_slots": top_slots}


def _tpl(template_id, label, card_type, cost=0, strength=None, copies=1):
    return {
        "id": template_id,
        "label": label,
        "type": card_type,
        "cost": cost,
        "strength": strength,
        "copies": copies,
    }


# ── Characters ───────────────────────────────────────────────────────

CHARACTERS = {
    "tide_queen": {
        "name": "The Tide Queen",
        "hand_visible_allowed": False,
        "locations": [
            _loc("Sunken Grotto", ["gain_power", "play_card", "move_item", "discard"]),
            _loc("Reef Market", ["play_card", "gain_power", "activate", "fate"]),
            _loc("Lighthouse", ["vanquish", "play_card", "gain_power", "move_ally"]),
            _loc("Open Sea", ["gain_power", "fate", "play_card", "discard"], top_slots=1),
        ],
        "deck": [
            _tpl("eel_twins", "Eel Twins", "ally", cost=2, strength=2, copies=3),
            _tpl("siren", "Siren", "ally", cost=3, strength=3, copies=2),
            _tpl("trident", "Trident", "item", cost=2, copies=2),
            _tpl("whirlpool", "Whirlpool", "effect", cost=1, copies=3),
            _tpl("binding_contract", "Binding Contract", "condition", cost=0, copies=2),
            _tpl("storm_surge", "Storm Surge", "effect", cost=3, copies=2),
            _tpl("pearl_hoard", "Pearl Hoard", "item", cost=1, copies=1),
        ],
        "fate": [
            _tpl("harbor_guard", "Harbor Guard", "hero", cost=0, strength=3, copies=2),
            _tpl("young_prince", "Young Prince", "hero", cost=0, strength=4, copies=1),
            _tpl("calm_waters", "Calm Waters", "effect", copies=2),
            _tpl("anchor", "Anchor", "item", copies=1),
            _tpl("lost_compass", "Lost Compass", "curse", copies=1),
        ],
        "companion": _tpl("tide_wisp", "Tide Wisp", "companion", strength=1),
    },
    "iron_warden": {
        "name": "The Iron Warden",
        "hand_visible_allowed": True,
        "locations": [
            _loc("Gatehouse", ["play_card", "gain_power", "move_ally", "discard"]),
            _loc("Armory", ["activate", "play_card", "gain_power", "move_item"]),
            _loc("Courtyard", ["fate", "play_card", "gain_power", "vanquish"]),
            _loc("Keep", ["gain_power", "play_card", "discard", "activate"]),
        ],
        "deck": [
            _tpl("shieldbearer", "Shieldbearer", "ally", cost=2, strength=3, copies=3),
            _tpl("warhound", "Warhound", "ally", cost=1, strength=1, copies=3),
            _tpl("siege_engine", "Siege Engine", "item", cost=4, copies=1),
            _tpl("iron_decree", "Iron Decree", "effect", cost=2, copies=3),
            _tpl("curfew", "Curfew", "condition", cost=0, copies=2),
        ],
        "fate": [
            _tpl("rebel_captain", "Rebel Captain", "hero", strength=5, copies=1),
            _tpl("smuggler", "Smuggler", "hero", strength=2, copies=2),
            _tpl("rusted_lock", "Rusted Lock", "curse", copies=2),
            _tpl("riot", "Riot", "effect", copies=2),
        ],
        "companion": None,
    },
    "hollow_king": {
        "name": "The Hollow King",
        "hand_visible_allowed": False,
        "locations": [
            _loc("Crypt", ["play_card", "gain_power", "fate", "discard"]),
            _loc("Bone Throne", ["activate", "gain_power", "play_card", "move_ally"]),
            _loc("Ossuary", ["vanquish", "play_card", "move_item", "gain_power"]),
            _loc("Mist Gate", ["gain_power", "play_card", "discard", "fate"], top_slots=3),
        ],
        "deck": [
            _tpl("skeleton", "Skeleton", "ally", cost=1, strength=1, copies=4),
            _tpl("wraith", "Wraith", "ally", cost=3, strength=4, copies=2),
            _tpl("soul_lantern", "Soul Lantern", "item", cost=2, copies=2),
            _tpl("raise_dead", "Raise Dead", "effect", cost=2, copies=3),
            _tpl("withering", "Withering", "condition", cost=0, copies=2),
        ],
        "fate": [
            _tpl("paladin", "Paladin", "hero", strength=4, copies=2),
            _tpl("grave_warden", "Grave Warden", "guardian", strength=3, copies=1),
            _tpl("dawn", "Dawn", "effect", copies=2),
            _tpl("holy_relic", "Holy Relic", "item", copies=1),
        ],
        "companion": _tpl("bone_familiar", "Bone Familiar", "companion", strength=1),
    },
}


class Catalog:
    """Read-only lookup over character definitions."""

    def __init__(self, characters=None):
        self._characters = deepcopy(characters if characters is not None else CHARACTERS)

    def __contains__(self, character_id):
        return character_id in self._characters

    def get(self, character_id):
        """Return a copy of one character definition, or None."""
        character = self._characters.get(character_id)
        return deepcopy(character) if character is not None else None

    def preview(self):
        """Summary used by meta:getCharacters."""
        out = []
        for cid, c in self._characters.items():
            out.append({
                "id": cid,
                "name": c["name"],
                "locations": [loc["name"] for loc in c["locations"]],
                "deck_size": sum(t["copies"] for t in c["deck"]),
                "fate_size": sum(t["copies"] for t in c["fate"]),
                "has_companion": c.get("companion") is not None,
                "hand_visible_allowed": c.get("hand_visible_allowed", False),
            })
        return out
