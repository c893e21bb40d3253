"""
WebSocket session server.

Accepts connections, turns incoming JSON frames into named requests,
acknowledges each one, and after every successful mutation pushes fresh
snapshots to everyone in the room. Knows nothing about specific game
rules: rooms are handled by the registry and rules by the engine.

Frames from clients:
    {"type": "<request>", "payload": {...}, "ack": <optional id>}
Acknowledgements:
    {"type": "ack", "ack": <id>, "request": "<request>", "ok": true, ...}
    {"type": "ack", "ack": <id>, "request": "<request>", "ok": false, "error": "<code>", "message": "..."}
"""

import asyncio
import json
import logging

import websockets

from fateboard.config import Settings, settings as default_settings
from fateboard.errors import GameError, error_code
from fateboard.rooms import RoomRegistry, generate_player_id
from fateboard.schemes.engine import SchemesEngine

logger = logging.getLogger(__name__)


class GameServer:
    """
    Manages player connections and message routing.
    Each frame is handled to completion before the next one is read, and
    room state is only replaced by a successful engine result.
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry
        self.engine = registry.engine
        self.connections: dict[str, object] = {}    # player_id -> websocket

    # ── WebSocket Handler ────────────────────────────────────────────

    async def handle_connection(self, websocket):
        """Main handler for a single WebSocket connection."""
        player_id = generate_player_id()
        self.connections[player_id] = websocket
        logger.info("connected: %s", player_id)
        await self._send(websocket, {"type": "welcome", "player_id": player_id})

        try:
            async for raw in websocket:
                await self.handle_message(player_id, raw)
        except websockets.ConnectionClosed:
            pass
        finally:
            self.connections.pop(player_id, None)
            await self._leave(player_id, "disconnect")
            logger.info("disconnected: %s", player_id)

    async def handle_message(self, player_id, raw):
        websocket = self.connections.get(player_id)
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            await self._send(websocket, {"type": "ack", "ok": False, "error": "bad_json", "message": "Invalid JSON"})
            return
        if not isinstance(msg, dict):
            await self._send(websocket, {"type": "ack", "ok": False, "error": "bad_json", "message": "Expected an object"})
            return

        request = msg.get("type")
        payload = msg.get("payload") or {}
        ack = {"type": "ack", "ack": msg.get("ack"), "request": request}

        try:
            if request == "room:create":
                reply = await self._handle_create(player_id, payload)
            elif request == "room:join":
                reply = await self._handle_join(player_id, payload)
            elif request == "room:leave":
                reply = await self._leave(player_id, "left room")
            else:
                reply = await self._handle_request(player_id, request, payload)
        except ValueError as e:
            logger.debug("%s rejected for %s: %s", request, player_id, e)
            await self._send(websocket, {**ack, "ok": False, "error": error_code(e), "message": str(e)})
            return
        except Exception:
            logger.exception("%s failed for %s", request, player_id)
            await self._send(websocket, {**ack, "ok": False, "error": "internal_error", "message": "Internal error"})
            return

        await self._send(websocket, {**ack, "ok": True, **reply})

    # ── Message Handlers ─────────────────────────────────────────────

    async def _handle_create(self, player_id, payload):
        # Validate before leaving the current room
        name = str(payload.get("name") or "").strip()
        if not name:
            raise GameError("name_required", "Name required")
        await self._leave(player_id, "switching rooms")

        room = self.registry.create(player_id, name)
        await self._send_history(room, player_id)
        await self.publish(room)
        return {"room_id": room.room_id, "player_id": player_id}

    async def _handle_join(self, player_id, payload):
        previous = self.registry.room_of(player_id)
        room, result = self.registry.join(payload.get("room_id"), player_id, payload.get("name"))
        if previous is not None and previous is not room:
            await self._leave(player_id, "switching rooms", previous)

        await self._send_history(room, player_id)
        await self._broadcast_chat(room, result.messages)
        await self.publish(room)
        return {"room_id": room.room_id, "player_id": player_id}

    async def _leave(self, player_id, reason, room=None):
        room, result = self.registry.leave(player_id, reason, room)
        if room is not None and self.registry.is_live(room):
            await self._broadcast_chat(room, result.messages)
            await self.publish(room)
        return {}

    async def _handle_request(self, player_id, request, payload):
        room, result = self.registry.apply(player_id, request, payload)
        await self._broadcast_chat(room, result.messages)
        if result.mutated:
            await self.publish(room)
        return result.reply

    # ── Broadcasting ─────────────────────────────────────────────────

    async def _send(self, websocket, data):
        if websocket is None:
            return
        try:
            await websocket.send(json.dumps(data))
        except websockets.ConnectionClosed:
            pass

    async def _broadcast(self, room, data):
        """Send the same message to all connected players in a room."""
        for player_id in room.player_ids:
            await self._send(self.connections.get(player_id), data)

    async def _broadcast_chat(self, room, messages):
        for msg in messages:
            await self._broadcast(room, {"type": "chat:msg", "room_id": room.room_id, "msg": msg})

    async def _send_history(self, room, player_id):
        await self._send(self.connections.get(player_id), {
            "type": "chat:history",
            "room_id": room.room_id,
            "messages": room.state["messages"],
        })

    async def publish(self, room):
        """Project the room once and push public, private and log views."""
        state = room.state
        public = self.engine.public_view(state)
        log = self.engine.log_view(state)
        await self._broadcast(room, {"type": "room:state", **public})
        for player_id in room.player_ids:
            websocket = self.connections.get(player_id)
            if websocket is None:
                continue
            await self._send(websocket, {"type": "room:self", **self.engine.private_view(state, player_id)})
        await self._broadcast(room, {"type": "room:log", "items": log})


# ── Server Entry Point ───────────────────────────────────────────────

def build_server(config: Settings = default_settings):
    engine = SchemesEngine(
        log_limit=config.log_limit,
        chat_limit=config.chat_limit,
        chat_max_len=config.chat_max_len,
    )
    return GameServer(RoomRegistry(engine))


async def run_server(config: Settings = default_settings):
    server = build_server(config)
    logger.info("Game server starting on ws://%s:%s", config.host, config.port)

    async with websockets.serve(server.handle_connection, config.host, config.port):
        logger.info("Server running. Ctrl+C to stop.")
        await asyncio.Future()  # run forever


def main():
    logging.basicConfig(
        level=default_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
