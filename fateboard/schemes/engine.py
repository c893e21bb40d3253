"""
Schemes — room engine implementation.

Implements the GameEngine interface over a plain-dict room state. Every
request is a named handler in a dispatch table; handlers run against a deep
copy of the room and either return an ActionResult or raise GameError, so a
rejected request never leaves partial effects behind.

Phase machine:
  lobby (choose characters, ready up) → playing (turns, log, fate)
"""

import math
import time
from copy import deepcopy

from fateboard.errors import GameError
from fateboard.game_engine import ActionResult, GameEngine
from fateboard.schemes import fate, turns, views
from fateboard.schemes.actions import LOG_LIMIT, append_entry, undo_last
from fateboard.schemes.catalog import Catalog
from fateboard.schemes.state import (
    COUNTER_STEP, MAX_DRAW, MAX_POWER, MAX_TRUST, ROWS,
    STRENGTH_LIMIT, STRENGTH_STEP,
    clamp, create_player, create_room_state, deal_character, draw_cards,
    find_on_board, find_player, index_of, make_card, new_id,
    parse_location_index, reshuffle_discard_into_deck, reshuffle_fate_discard,
)

NAME_MAX_LEN = 40


class SchemesEngine(GameEngine):

    def __init__(self, catalog=None, rng=None, log_limit=LOG_LIMIT,
                 chat_limit=100, chat_max_len=300):
        self.catalog = catalog or Catalog()
        self.rng = rng
        self.log_limit = log_limit
        self.chat_limit = chat_limit
        self.chat_max_len = chat_max_len

        self._handlers = {
            "chat:send": self._do_chat,
            "meta:getCharacters": self._do_get_characters,
            # Lobby
            "lobby:chooseCharacter": self._do_choose_character,
            "lobby:setReady": self._do_set_ready,
            "lobby:start": self._do_start,
            # Turn & zones
            "game:endTurn": self._do_end_turn,
            "game:draw": self._do_draw,
            "game:playToLocation": self._do_play_to_location,
            "game:discard": self._do_discard,
            "game:playEffect": self._do_play_effect,
            "game:moveCard": self._do_move_card,
            "game:removeCard": self._do_remove_card,
            "game:reshuffleDeck": self._do_reshuffle_deck,
            "game:claimWin": self._do_claim_win,
            "game:spawnCompanion": self._do_spawn_companion,
            "hand:setVisible": self._do_set_hand_visible,
            "pile:getDiscard": self._do_get_discard,
            "pile:takeFromDiscard": self._do_take_from_discard,
            # Counters & board
            "power:change": self._do_power_change,
            "trust:change": self._do_trust_change,
            "pawn:set": self._do_pawn_set,
            "board:toggleLocationLock": self._do_toggle_location_lock,
            "board:toggleCardLock": self._do_toggle_card_lock,
            "card:deltaStrength": self._do_delta_strength,
            # Log
            "log:undoSelf": self._do_undo_self,
            # Fate
            "fate:start": self._do_fate_start,
            "fate:startFromDiscard": self._do_fate_start_from_discard,
            "fate:choosePlay": self._do_fate_choose_play,
            "fate:placeSelected": self._do_fate_place_selected,
            "fate:discardSelected": self._do_fate_discard_selected,
            "fate:discardBoth": self._do_fate_discard_both,
            "fate:cancel": self._do_fate_cancel,
            "fate:getDiscard": self._do_fate_get_discard,
            "fate:reshuffleDeck": self._do_fate_reshuffle_deck,
            "fate:returnFromDiscard": self._do_fate_return_from_discard,
            "fatePeek:start": self._do_peek_start,
            "fatePeek:confirm": self._do_peek_confirm,
            "fatePeek:cancel": self._do_peek_cancel,
            "fateSift:start": self._do_sift_start,
            "fateSift:choose": self._do_sift_choose,
            "fateSift:cancel": self._do_sift_cancel,
        }

    # ── Room Membership ───────────────────────────────────────────────

    def new_room(self, room_id, owner_id, owner_name):
        return create_room_state(room_id, owner_id, self._clean_name(owner_name))

    def add_player(self, state, player_id, name):
        name = self._clean_name(name)
        state = deepcopy(state)
        if find_player(state, player_id) is not None:
            return ActionResult(new_state=state, mutated=False)
        if state["game"]["phase"] != "lobby":
            raise GameError("already_started", "Game already in progress")
        if len(state["players"]) >= self.player_count_range[1]:
            raise GameError("room_full", "Room is full")

        state["players"].append(create_player(player_id, name))
        result = ActionResult(new_state=state)
        self._announce(state, result, f"{name} joined")
        return result

    def remove_player(self, state, player_id, reason=""):
        state = deepcopy(state)
        player = find_player(state, player_id)
        if player is None:
            raise GameError("not_in_room", "Not in this room")

        fate.release_sessions(state, player_id)
        state["players"] = [p for p in state["players"] if p["id"] != player_id]

        # Roles move to the new first player
        if state["owner_id"] == player_id and state["players"]:
            state["owner_id"] = state["players"][0]["id"]
        if state["game"]["active_player_id"] == player_id:
            state["game"]["active_player_id"] = turns.first_eligible_id(state)

        result = ActionResult(new_state=state)
        suffix = f" ({reason})" if reason else ""
        self._announce(state, result, f"{player['name']} disconnected{suffix}.")
        return result

    # ── Views ─────────────────────────────────────────────────────────

    def public_view(self, state):
        return views.public_view(state)

    def private_view(self, state, player_id):
        return views.private_view(state, player_id)

    def log_view(self, state):
        return views.log_view(state, self.log_limit)

    # ── Dispatch ──────────────────────────────────────────────────────

    def apply_request(self, state, player_id, request, payload):
        handler = self._handlers.get(request)
        if handler is None:
            raise GameError("unknown_request", f"Unknown request: {request}")
        if find_player(state, player_id) is None:
            raise GameError("not_in_room", "Not in this room")
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise GameError("bad_payload", "Payload must be an object")

        state = deepcopy(state)
        player = find_player(state, player_id)
        result = handler(state, player, payload)
        if result is None:
            result = ActionResult(new_state=state)
        return result

    # ── Chat & Catalog ────────────────────────────────────────────────

    def _do_chat(self, state, player, payload):
        text = str(payload.get("text") or "").strip()
        if not text:
            raise GameError("empty_message", "Empty message")
        result = ActionResult(new_state=state, mutated=False)
        result.messages.append(self._post(state, player["id"], player["name"], text))
        return result

    def _do_get_characters(self, state, player, payload):
        return ActionResult(new_state=state, reply={"characters": self.catalog.preview()}, mutated=False)

    # ── Lobby ─────────────────────────────────────────────────────────

    def _do_choose_character(self, state, player, payload):
        self._require_lobby(state)
        character_id = str(payload.get("character_id") or "").strip()[:NAME_MAX_LEN]
        if not character_id:
            raise GameError("character_required", "Character required")
        if character_id not in self.catalog:
            raise GameError("unknown_character", f"Unknown character: {character_id}")

        player["character_id"] = character_id
        result = ActionResult(new_state=state)
        character = self.catalog.get(character_id)
        self._announce(state, result, f"{player['name']} chose {character['name']}")
        return result

    def _do_set_ready(self, state, player, payload):
        self._require_lobby(state)
        player["ready"] = bool(payload.get("ready"))

    def _do_start(self, state, player, payload):
        if state["game"]["phase"] != "lobby":
            raise GameError("already_started", "Game already started")
        if state["owner_id"] != player["id"]:
            raise GameError("owner_only", "Only the owner can start the game")
        min_players = self.player_count_range[0]
        if len(state["players"]) < min_players:
            raise GameError("need_more_players", f"Need at least {min_players} players")
        if not all(p["ready"] for p in state["players"]):
            raise GameError("not_all_ready", "Not everyone is ready")
        if not all(p["character_id"] for p in state["players"]):
            raise GameError("character_required", "Everyone must choose a character")

        for p in state["players"]:
            deal_character(p, self.catalog.get(p["character_id"]), self.rng)

        state["game"] = {
            "phase": "playing",
            "turn": 1,
            "active_player_id": state["players"][0]["id"],
        }
        state["log"] = []
        state["sessions"] = {kind: None for kind in fate.SESSION_KINDS}

        result = ActionResult(new_state=state)
        self._announce(state, result, "Game started!")
        return result

    # ── Turn ──────────────────────────────────────────────────────────

    def _do_end_turn(self, state, player, payload):
        self._require_playing(state)
        outcome = turns.end_turn(state, player["id"])
        self._log(state, player, "end_turn", {"wrapped": outcome["wrapped"]})
        return self._reply(state, wrapped=outcome["wrapped"], turn=state["game"]["turn"])

    def _do_claim_win(self, state, player, payload):
        self._require_playing(state)
        outcome = turns.claim_win(state, player)
        self._log(state, player, "win", {"wrapped": outcome["wrapped"]})
        result = self._reply(state, active_player_id=state["game"]["active_player_id"])
        self._announce(state, result, f"{player['name']} claimed victory!")
        return result

    # ── Zones ─────────────────────────────────────────────────────────

    def _do_draw(self, state, player, payload):
        self._require_active(state, player)
        count = payload.get("count", 1)
        if not self._is_int(count):
            raise GameError("bad_count", "Count must be a number")
        count = clamp(count, 1, MAX_DRAW)
        zones = player["zones"]
        if not zones["deck"] and not zones["discard"]:
            raise GameError("deck_empty", "No cards left to draw")

        drawn = draw_cards(player, count, self.rng)
        self._log(state, player, "draw", {"card_ids": drawn})
        return self._reply(state, drawn=drawn)

    def _do_play_to_location(self, state, player, payload):
        self._require_active(state, player)
        li = parse_location_index(payload.get("location_index"))
        hand = player["zones"]["hand"]
        ci = self._hand_index(hand, payload.get("card_id"))
        loc = player["board"]["locations"][li]
        if loc["locked"]:
            raise GameError("location_locked", "Location is locked")

        card = hand.pop(ci)
        card["face_up"] = True
        loc["bottom"].append(card)
        self._log(state, player, "play", {
            "card_id": card["id"], "location_index": li, "from_index": ci,
        })

    def _do_discard(self, state, player, payload):
        self._require_active(state, player)
        ids = payload.get("card_ids") or []
        if not ids and payload.get("card_id"):
            ids = [payload["card_id"]]
        if not isinstance(ids, list) or not ids:
            raise GameError("card_not_found", "No cards specified")
        if not all(isinstance(cid, str) for cid in ids):
            raise GameError("card_not_found", "Card not in hand")
        ids = list(dict.fromkeys(ids))
        hand = player["zones"]["hand"]
        if any(index_of(hand, cid) == -1 for cid in ids):
            raise GameError("card_not_found", "Card not in hand")

        from_indices = []
        for cid in ids:
            ci = index_of(hand, cid)
            card = hand.pop(ci)
            card["face_up"] = True
            player["zones"]["discard"].append(card)
            from_indices.append(ci)

        self._log(state, player, "discard", {"card_ids": ids, "from_indices": from_indices})
        return self._reply(state, discarded=len(ids))

    def _do_play_effect(self, state, player, payload):
        """Play a one-shot card from hand straight onto the discard pile."""
        self._require_active(state, player)
        hand = player["zones"]["hand"]
        ci = self._hand_index(hand, payload.get("card_id"))

        card = hand.pop(ci)
        face_up = card["face_up"]
        card["face_up"] = True
        player["zones"]["discard"].append(card)
        self._log(state, player, "play_effect", {
            "card_id": card["id"], "from_index": ci, "face_up": face_up,
        })

    def _do_move_card(self, state, player, payload):
        self._require_active(state, player)
        src = parse_location_index(payload.get("from"))
        dst = parse_location_index(payload.get("to"))
        if src == dst:
            raise GameError("same_location", "Moving within the same location is not supported")

        locations = player["board"]["locations"]
        from_row = locations[src]["bottom"]
        ci = index_of(from_row, payload.get("card_id"))
        if ci == -1:
            raise GameError("card_not_found", "Card not in source location")
        if from_row[ci]["locked"]:
            raise GameError("card_locked", "Card is locked")
        if locations[dst]["locked"]:
            raise GameError("location_locked", "Destination is locked")

        card = from_row.pop(ci)
        to_row = locations[dst]["bottom"]
        to_row.append(card)
        self._log(state, player, "move", {
            "card_id": card["id"], "from": src, "to": dst,
            "from_index": ci, "to_index": len(to_row) - 1,
        })

    def _do_remove_card(self, state, player, payload):
        """Discard a card from the board: own plays to discard, top-row cards to fate discard."""
        self._require_active(state, player)
        li = parse_location_index(payload.get("from"))
        row_name = payload.get("row", "bottom")
        if row_name not in ROWS:
            raise GameError("bad_row", "Row must be 'top' or 'bottom'")
        row = player["board"]["locations"][li][row_name]
        ci = index_of(row, payload.get("card_id"))
        if ci == -1:
            raise GameError("card_not_found", "Card not at that location")
        if row[ci]["locked"]:
            raise GameError("card_locked", "Card is locked")

        pile = "discard" if row_name == "bottom" else "fate_discard"
        card = row.pop(ci)
        card["face_up"] = True
        player["zones"][pile].append(card)
        self._log(state, player, "remove", {
            "card_id": card["id"], "from": li, "row": row_name,
            "from_index": ci, "pile": pile,
        })

    def _do_reshuffle_deck(self, state, player, payload):
        self._require_active(state, player)
        if not player["zones"]["discard"]:
            raise GameError("discard_empty", "Discard is empty")

        moved = reshuffle_discard_into_deck(player, self.rng)
        self._log(state, player, "reshuffle", {
            "pile": "deck", "target_id": player["id"], "moved": moved,
        })
        return self._reply(state, moved=moved)

    def _do_spawn_companion(self, state, player, payload):
        self._require_active(state, player)
        character = self.catalog.get(player["character_id"]) or {}
        template = character.get("companion")
        if template is None:
            raise GameError("not_allowed", "Your character has no companion")
        li = parse_location_index(payload.get("location_index"))
        loc = player["board"]["locations"][li]
        if loc["locked"]:
            raise GameError("location_locked", "Location is locked")

        card = make_card(template, face_up=True)
        loc["bottom"].append(card)
        self._log(state, player, "spawn", {
            "card_id": card["id"], "label": card["label"], "location_index": li,
        })
        return self._reply(state, card_id=card["id"])

    def _do_set_hand_visible(self, state, player, payload):
        self._require_playing(state)
        character = self.catalog.get(player["character_id"]) or {}
        if not character.get("hand_visible_allowed"):
            raise GameError("not_allowed", "Your character cannot reveal their hand")
        visible = bool(payload.get("visible"))
        if visible == player["hand_visible"]:
            raise GameError("no_change", "No change")

        player["hand_visible"] = visible
        self._log(state, player, "reveal", {"visible": visible})

    def _do_get_discard(self, state, player, payload):
        target = self._target(state, payload.get("player_id"))
        cards = deepcopy(target["zones"]["discard"][::-1])
        return ActionResult(new_state=state, reply={"cards": cards}, mutated=False)

    def _do_take_from_discard(self, state, player, payload):
        self._require_active(state, player)
        discard = player["zones"]["discard"]
        ci = index_of(discard, payload.get("card_id"))
        if ci == -1:
            raise GameError("card_not_found", "Card not in your discard")

        card = discard.pop(ci)
        card["face_up"] = True
        player["zones"]["hand"].append(card)
        self._log(state, player, "retrieve", {"card_id": card["id"], "from_index": ci})

    # ── Counters & Board ──────────────────────────────────────────────

    def _do_power_change(self, state, player, payload):
        return self._change_counter(state, player, payload, "power", MAX_POWER)

    def _do_trust_change(self, state, player, payload):
        return self._change_counter(state, player, payload, "trust", MAX_TRUST)

    def _change_counter(self, state, player, payload, key, maximum):
        self._require_playing(state)
        delta = self._step(payload.get("delta"), COUNTER_STEP)
        prev = player[key]
        nxt = clamp(prev + delta, 0, maximum)
        if nxt == prev:
            raise GameError("no_change", "No change")

        player[key] = nxt
        self._log(state, player, key, {"delta": nxt - prev, "prev": prev, "next": nxt})
        return self._reply(state, **{key: nxt})

    def _do_pawn_set(self, state, player, payload):
        self._require_active(state, player)
        to = parse_location_index(payload.get("to"))
        board = player["board"]
        if board["locations"][to]["locked"]:
            raise GameError("location_locked", "Location is locked")
        prev = board["mover_at"]
        if prev == to:
            raise GameError("no_change", "No change")

        board["mover_at"] = to
        self._log(state, player, "pawn", {"prev": prev, "next": to})

    def _do_toggle_location_lock(self, state, player, payload):
        self._require_playing(state)
        li = parse_location_index(payload.get("index"))
        loc = player["board"]["locations"][li]
        prev = loc["locked"]
        nxt = self._toggle(prev, payload.get("locked"))

        loc["locked"] = nxt
        self._log(state, player, "lock", {
            "target": "location", "loc": li, "prev": prev, "next": nxt,
        })

    def _do_toggle_card_lock(self, state, player, payload):
        self._require_playing(state)
        card_id = payload.get("card_id")
        found = find_on_board(player["board"], card_id)
        if found is None:
            raise GameError("card_not_found", "Card not on your board")
        li, row, ci = found
        card = player["board"]["locations"][li][row][ci]
        prev = card["locked"]
        nxt = self._toggle(prev, payload.get("locked"))

        card["locked"] = nxt
        self._log(state, player, "lock", {
            "target": "card", "loc": li, "row": row, "card_id": card_id,
            "prev": prev, "next": nxt,
        })

    def _do_delta_strength(self, state, player, payload):
        self._require_playing(state)
        found = find_on_board(player["board"], payload.get("card_id"))
        if found is None:
            raise GameError("card_not_found", "Card not on your board")
        li, row, ci = found
        card = player["board"]["locations"][li][row][ci]
        delta = self._step(payload.get("delta"), STRENGTH_STEP)
        prev = card["strength_mod"]
        nxt = clamp(prev + delta, -STRENGTH_LIMIT, STRENGTH_LIMIT)
        if nxt == prev:
            raise GameError("no_change", "No change")

        card["strength_mod"] = nxt
        self._log(state, player, "strength", {
            "card_id": card["id"], "delta": nxt - prev, "prev": prev, "next": nxt,
        })
        return self._reply(state, strength_mod=nxt)

    # ── Undo ──────────────────────────────────────────────────────────

    def _do_undo_self(self, state, player, payload):
        self._require_playing(state)
        entry = undo_last(state, player["id"], self.log_limit)
        return self._reply(state, undone=entry["id"], kind=entry["kind"])

    # ── Fate ──────────────────────────────────────────────────────────

    def _do_fate_start(self, state, player, payload):
        self._require_active(state, player)
        session = fate.fate_start(state, player["id"], payload.get("target_id"), self.rng)
        return self._reply(state, session=deepcopy(session))

    def _do_fate_start_from_discard(self, state, player, payload):
        self._require_active(state, player)
        session = fate.fate_start_from_discard(
            state, player["id"], payload.get("target_id"), payload.get("card_id"))
        return self._reply(state, session=deepcopy(session))

    def _do_fate_choose_play(self, state, player, payload):
        self._require_playing(state)
        session = fate.fate_choose(state, player["id"], payload.get("card_id"))
        return self._reply(state, chosen_id=session["chosen_id"])

    def _do_fate_place_selected(self, state, player, payload):
        self._require_playing(state)
        data = fate.fate_place(state, player["id"], payload.get("location_index"))
        self._log(state, player, "fate", data)

    def _do_fate_discard_selected(self, state, player, payload):
        self._require_playing(state)
        data = fate.fate_discard_selected(state, player["id"])
        self._log(state, player, "fate", data)

    def _do_fate_discard_both(self, state, player, payload):
        self._require_playing(state)
        data = fate.fate_discard_both(state, player["id"])
        self._log(state, player, "fate", data)

    def _do_fate_cancel(self, state, player, payload):
        self._require_playing(state)
        fate.fate_cancel(state, player["id"])

    def _do_fate_get_discard(self, state, player, payload):
        target = self._target(state, payload.get("target_id") or player["id"])
        cards = deepcopy(target["zones"]["fate_discard"][::-1])
        return ActionResult(new_state=state, reply={"cards": cards}, mutated=False)

    def _do_fate_reshuffle_deck(self, state, player, payload):
        self._require_active(state, player)
        target = self._target(state, payload.get("target_id") or player["id"])
        if not target["zones"]["fate_discard"]:
            raise GameError("fate_discard_empty", "Fate discard is empty")

        moved = reshuffle_fate_discard(target, self.rng)
        self._log(state, player, "reshuffle", {
            "pile": "fate", "target_id": target["id"], "moved": moved,
        })
        return self._reply(state, moved=moved)

    def _do_fate_return_from_discard(self, state, player, payload):
        """Put a card from a fate discard back on top of that fate deck."""
        self._require_active(state, player)
        target = self._target(state, payload.get("target_id"))
        pile = target["zones"]["fate_discard"]
        ci = index_of(pile, payload.get("card_id"))
        if ci == -1:
            raise GameError("card_not_found", "Card not in that fate discard")

        card = pile.pop(ci)
        card["face_up"] = False
        target["zones"]["fate_deck"].append(card)
        self._log(state, player, "fate_return", {
            "target_id": target["id"], "card_id": card["id"], "from_index": ci,
        })

    # ── Peek ──────────────────────────────────────────────────────────

    def _do_peek_start(self, state, player, payload):
        self._require_active(state, player)
        session, opened = fate.peek_start(
            state, player["id"], payload.get("target_id"), payload.get("count"))
        result = self._reply(state, session=deepcopy(session), resumed=not opened)
        result.mutated = opened
        return result

    def _do_peek_confirm(self, state, player, payload):
        self._require_playing(state)
        data = fate.peek_confirm(state, player["id"], payload.get("order_ids"))
        self._log(state, player, "peek", data)

    def _do_peek_cancel(self, state, player, payload):
        self._require_playing(state)
        fate.peek_cancel(state, player["id"])

    # ── Sift ──────────────────────────────────────────────────────────

    def _do_sift_start(self, state, player, payload):
        self._require_active(state, player)
        session, opened = fate.sift_start(state, player["id"], payload.get("target_id"))
        result = self._reply(state, session=deepcopy(session), resumed=not opened)
        result.mutated = opened
        return result

    def _do_sift_choose(self, state, player, payload):
        self._require_playing(state)
        data = fate.sift_choose(state, player["id"], payload.get("discard_id"))
        self._log(state, player, "sift", data)

    def _do_sift_cancel(self, state, player, payload):
        self._require_playing(state)
        fate.sift_cancel(state, player["id"])

    # ── Helpers ───────────────────────────────────────────────────────

    def _require_lobby(self, state):
        if state["game"]["phase"] != "lobby":
            raise GameError("not_in_lobby", "Not in lobby")

    def _require_playing(self, state):
        if state["game"]["phase"] != "playing":
            raise GameError("game_not_started", "Game not started")

    def _require_active(self, state, player):
        self._require_playing(state)
        turns.require_turn(state, player["id"])

    def _target(self, state, player_id):
        target = find_player(state, player_id)
        if target is None:
            raise GameError("player_not_found", "Player not found")
        return target

    def _hand_index(self, hand, card_id):
        ci = index_of(hand, card_id)
        if ci == -1:
            raise GameError("card_not_found", "Card not in hand")
        return ci

    def _is_int(self, value):
        return isinstance(value, int) and not isinstance(value, bool)

    def _step(self, raw, limit):
        """Validate a signed delta and clamp it to ±limit per request."""
        if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw):
            raise GameError("bad_payload", "Delta must be a number")
        delta = clamp(round(raw), -limit, limit)
        if delta == 0:
            raise GameError("no_change", "No change")
        return delta

    def _toggle(self, prev, requested):
        nxt = requested if isinstance(requested, bool) else not prev
        if nxt == prev:
            raise GameError("no_change", "No change")
        return nxt

    def _clean_name(self, name):
        name = str(name or "").strip()[:NAME_MAX_LEN]
        if not name:
            raise GameError("name_required", "Name required")
        return name

    def _log(self, state, player, kind, data):
        return append_entry(state, player["id"], kind, data, self.log_limit)

    def _reply(self, state, **reply):
        return ActionResult(new_state=state, reply=reply)

    def _post(self, state, sender_id, name, text):
        msg = {
            "id": new_id(),
            "ts": int(time.time() * 1000),
            "player_id": sender_id,
            "name": name,
            "text": text[:self.chat_max_len],
        }
        messages = state["messages"]
        messages.append(msg)
        if len(messages) > self.chat_limit:
            del messages[:len(messages) - self.chat_limit]
        return msg

    def _announce(self, state, result, text):
        result.messages.append(self._post(state, "system", "System", text))
