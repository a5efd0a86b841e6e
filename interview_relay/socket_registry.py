import logging
from dataclasses import dataclass
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


@dataclass
class CodeSnapshot:
    language: str
    topic: str
    code: str = ""


@dataclass
class RelaySocket:
    """One connected browser plus the per-socket state the router keeps."""

    socket_id: str
    websocket: WebSocket
    snapshot: CodeSnapshot | None = None
    last_review_payload: str | None = None
    alive: bool = True

    @property
    def is_open(self) -> bool:
        if not self.alive:
            return False
        return (
            self.websocket.client_state != WebSocketState.DISCONNECTED
            and self.websocket.application_state != WebSocketState.DISCONNECTED
        )

    async def safe_send(self, data: dict) -> bool:
        """Send JSON to the browser, return False if it is gone."""
        if not self.is_open:
            return False
        try:
            await self.websocket.send_json(data)
            return True
        except (WebSocketDisconnect, RuntimeError):
            logger.debug("Send to socket %s failed; marking closed", self.socket_id)
            self.alive = False
            return False


class SocketRegistry:
    """Tracks connected browser sockets by a stable id.

    Snapshot and last-reviewed payload live on the registry entry, so
    removing a socket discards both with it.
    """

    def __init__(self):
        self._sockets: dict[str, RelaySocket] = {}

    def __len__(self) -> int:
        return len(self._sockets)

    def __contains__(self, socket_id: str) -> bool:
        return socket_id in self._sockets

    def add(self, websocket: WebSocket, socket_id: str | None = None) -> RelaySocket:
        socket_id = socket_id or uuid4().hex
        entry = RelaySocket(socket_id=socket_id, websocket=websocket)
        self._sockets[socket_id] = entry
        logger.info("Registered socket %s (%d connected)", socket_id, len(self._sockets))
        return entry

    def remove(self, socket_id: str) -> RelaySocket | None:
        entry = self._sockets.pop(socket_id, None)
        if entry is None:
            return None
        entry.alive = False
        logger.info("Removed socket %s (%d connected)", socket_id, len(self._sockets))
        return entry

    def get(self, socket_id: str) -> RelaySocket | None:
        return self._sockets.get(socket_id)

    def open_sockets(self) -> list[RelaySocket]:
        """Currently open sockets, copied so callers may await while iterating."""
        return [entry for entry in self._sockets.values() if entry.is_open]

    # ------------------------------------------------------------------
    # Per-socket state
    # ------------------------------------------------------------------

    def get_snapshot(self, socket_id: str) -> CodeSnapshot | None:
        entry = self._sockets.get(socket_id)
        return entry.snapshot if entry else None

    def set_snapshot(self, socket_id: str, snapshot: CodeSnapshot) -> None:
        entry = self._sockets.get(socket_id)
        if entry is None:
            logger.debug("Ignoring snapshot for unknown socket %s", socket_id)
            return
        entry.snapshot = snapshot

    def get_last_review_payload(self, socket_id: str) -> str | None:
        entry = self._sockets.get(socket_id)
        return entry.last_review_payload if entry else None

    def set_last_review_payload(self, socket_id: str, payload: str) -> None:
        entry = self._sockets.get(socket_id)
        if entry is None:
            logger.debug("Ignoring review payload for unknown socket %s", socket_id)
            return
        entry.last_review_payload = payload
