"""WebSocket endpoint mirroring the map scene to browser clients.

Server -> client: a ``snapshot`` on connect, then every surface command and
selection change as published on the EventBus.
Client -> server: ``pointer`` events on shapes, ``select``/``deselect``
requests and ``ping``.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import Callable, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from engine.map.surface import PointerEvent, PointerKind

router = APIRouter(prefix="/ws", tags=["websocket"])


class ConnectionManager:
    """Manages WebSocket connections for scene updates."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket):
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self.active_connections.add(websocket)
        logger.info(f"Map client connected. Total connections: {len(self.active_connections)}")

    async def disconnect(self, websocket: WebSocket):
        """Remove a WebSocket connection."""
        async with self._lock:
            self.active_connections.discard(websocket)
        logger.info(f"Map client disconnected. Total connections: {len(self.active_connections)}")

    async def broadcast(self, message: dict):
        """Broadcast a message to all connected clients."""
        if not self.active_connections:
            return

        message_str = json.dumps(message)
        disconnected = set()

        async with self._lock:
            for connection in self.active_connections:
                try:
                    await connection.send_text(message_str)
                except Exception as e:
                    logger.warning(f"Failed to send to websocket: {e}")
                    disconnected.add(connection)

            self.active_connections -= disconnected

    async def send_to(self, websocket: WebSocket, message: dict):
        """Send a message to a specific client."""
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {e}")


# Global connection manager
manager = ConnectionManager()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def snapshot_message(engine) -> dict:
    """Full scene and engine state, as sent to a client on connect."""
    scene = None
    if engine is not None and hasattr(engine.surface, "snapshot"):
        scene = engine.surface.snapshot()
    return {
        "type": "snapshot",
        "timestamp": _timestamp(),
        "scene": scene,
        "state": engine.state() if engine is not None else None,
    }


async def _bridge(
    queue: asyncio.Queue,
    connections: ConnectionManager,
    event_bus,
    snapshot: Callable[[], dict] | None,
) -> None:
    while True:
        message = await queue.get()
        dropped = event_bus.take_dropped(queue)
        if dropped and snapshot is None:
            logger.warning(f"Scene bridge lost {dropped} messages")
        elif dropped:
            # Queued commands follow a gap; one snapshot replaces all of them
            stale = 1
            while not queue.empty():
                queue.get_nowait()
                stale += 1
            logger.warning(
                f"Scene bridge lost {dropped} messages, resyncing clients "
                f"with a snapshot ({stale} queued messages discarded)"
            )
            message = snapshot()
        await connections.broadcast(message)


def start_scene_bridge(
    event_bus,
    connections: ConnectionManager | None = None,
    snapshot: Callable[[], dict] | None = None,
) -> asyncio.Task:
    """Forward every EventBus message to all connected map clients.

    When the bus had to drop messages for this subscriber, whatever is still
    queued is discarded and ``snapshot()`` is broadcast in its place, so the
    clients' view of the scene converges again.

    Must be called from a running event loop.  Cancel the returned task to
    stop; the subscription is dropped when the task ends.
    """
    connections = connections or manager
    queue = event_bus.subscribe()

    async def _run():
        try:
            await _bridge(queue, connections, event_bus, snapshot)
        finally:
            event_bus.unsubscribe(queue)

    return asyncio.get_running_loop().create_task(_run())


@router.websocket("/map")
async def websocket_map(websocket: WebSocket):
    """WebSocket endpoint for the interactive map."""
    await manager.connect(websocket)
    engine = getattr(websocket.app.state, "map_engine", None)

    await manager.send_to(websocket, snapshot_message(engine))

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_to(websocket, {"type": "error", "message": "Invalid JSON"})
                continue
            await handle_client_message(websocket, engine, message)
    except WebSocketDisconnect:
        await manager.disconnect(websocket)


async def handle_client_message(websocket: WebSocket, engine, message: dict):
    """Handle messages from map clients."""
    msg_type = message.get("type") if isinstance(message, dict) else None

    if msg_type == "ping":
        await manager.send_to(websocket, {"type": "pong", "timestamp": _timestamp()})
        return

    if msg_type not in ("pointer", "select", "deselect"):
        await manager.send_to(
            websocket, {"type": "error", "message": f"Unknown message type: {msg_type}"}
        )
        return

    if engine is None or engine.closed:
        await manager.send_to(websocket, {"type": "error", "message": "Map engine not available"})
        return

    if msg_type == "pointer":
        try:
            event = PointerEvent(
                kind=PointerKind(message.get("kind")),
                shape_id=str(message["shape_id"]),
                lat=float(message.get("lat", 0.0)),
                lng=float(message.get("lng", 0.0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            await manager.send_to(websocket, {"type": "error", "message": f"Bad pointer event: {e}"})
            return
        dispatch = getattr(engine.surface, "dispatch", None)
        if dispatch is not None:
            dispatch(event)
    elif msg_type == "select":
        try:
            code = int(message["code"])
        except (KeyError, TypeError, ValueError):
            await manager.send_to(websocket, {"type": "error", "message": "select needs an integer code"})
            return
        engine.select(code)
    else:
        engine.deselect()
