"""WebSocket relay handler: one receive loop per browser connection.

The main entry point is ``websocket_relay()``, which server.py mounts at
``/`` and ``/coding``. Messages from one socket are handled strictly in
arrival order; turns from different sockets may interleave upstream.
"""

import json
import logging

from fastapi import WebSocket, WebSocketDisconnect

from .router import MessageRouter
from .socket_registry import SocketRegistry

logger = logging.getLogger(__name__)


class RelayConnection:
    """Registers a browser socket and feeds its messages to the router."""

    def __init__(self, websocket: WebSocket, *, registry: SocketRegistry, router: MessageRouter):
        self.ws = websocket
        self.registry = registry
        self.router = router
        self.socket_id = registry.add(websocket).socket_id

    async def _receive_payload(self) -> str | None:
        """Next text payload, or None once the peer has disconnected."""
        message = await self.ws.receive()
        if message["type"] == "websocket.disconnect":
            return None
        text = message.get("text")
        if text is None:
            text = (message.get("bytes") or b"").decode("utf-8", errors="replace")
        return text

    async def run(self) -> None:
        """Main message loop; a bad message never closes the socket."""
        try:
            while True:
                data = await self._receive_payload()
                if data is None:
                    break

                try:
                    msg = json.loads(data)
                except (json.JSONDecodeError, ValueError) as e:
                    logger.warning("Malformed JSON from socket %s: %s", self.socket_id, e)
                    continue

                if not isinstance(msg, dict):
                    logger.warning("Ignoring non-object message from socket %s", self.socket_id)
                    continue

                try:
                    await self.router.dispatch(self.socket_id, msg)
                except Exception:
                    logger.exception("Unexpected error handling message type=%s", msg.get("type"))
        except (WebSocketDisconnect, RuntimeError):
            pass
        except Exception:
            logger.exception("WebSocket error on socket %s", self.socket_id)

    def cleanup(self) -> None:
        """Drop the socket and its code state; the upstream session is untouched."""
        self.registry.remove(self.socket_id)


async def websocket_relay(
    websocket: WebSocket,
    *,
    registry: SocketRegistry,
    router: MessageRouter,
) -> None:
    """WebSocket endpoint handler for the browser pages."""
    await websocket.accept()
    logger.info("WebSocket client connected")

    connection = RelayConnection(websocket, registry=registry, router=router)
    try:
        await connection.run()
    finally:
        connection.cleanup()
        logger.info("WebSocket client disconnected")
