"""Fan-out of upstream pushes to every open browser socket.

There is one shared upstream session, so every browser sees every
transcription and audio chunk regardless of which socket prompted it.
"""

import asyncio
import base64
import logging
import os
from typing import Any

from .socket_registry import RelaySocket, SocketRegistry
from .ws_constants import (
    MSG_TEXT_STREAM,
    MSG_AUDIO_STREAM,
    MSG_ERROR,
    LIFECYCLE_ERROR,
    LIFECYCLE_CLOSE,
    ERR_UPSTREAM_ERROR,
    ERR_UPSTREAM_CLOSED,
)

logger = logging.getLogger(__name__)

NOTIFY_UPSTREAM_ERRORS = os.environ.get("RELAY_NOTIFY_UPSTREAM_ERRORS", "").lower() in ("1", "true", "yes")
SEND_TIMEOUT = float(os.environ.get("RELAY_SEND_TIMEOUT", "5.0"))  # seconds per socket


def _as_base64(data: bytes | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(bytes(data)).decode("ascii")
    return data


class Broadcaster:
    def __init__(
        self,
        registry: SocketRegistry,
        *,
        notify_upstream_errors: bool = NOTIFY_UPSTREAM_ERRORS,
        send_timeout: float = SEND_TIMEOUT,
    ):
        self.registry = registry
        self.notify_upstream_errors = notify_upstream_errors
        self.send_timeout = send_timeout

    async def _send_one(self, entry: RelaySocket, data: dict) -> bool:
        try:
            return await asyncio.wait_for(entry.safe_send(data), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning("Send to socket %s timed out after %.1fs; marking closed",
                           entry.socket_id, self.send_timeout)
            entry.alive = False
            return False

    async def broadcast(self, data: dict) -> int:
        """Send ``data`` to all open sockets concurrently; returns how many received it.

        A socket that does not drain within ``send_timeout`` is marked closed so
        it cannot hold up later pushes.
        """
        entries = self.registry.open_sockets()
        if not entries:
            return 0
        results = await asyncio.gather(*(self._send_one(entry, data) for entry in entries))
        return sum(1 for ok in results if ok)

    async def handle_upstream_message(self, message: Any) -> None:
        server_content = getattr(message, "server_content", None)
        if server_content is None:
            return

        transcription = getattr(server_content, "output_transcription", None)
        text = getattr(transcription, "text", None) if transcription is not None else None
        if text:
            logger.debug("Output transcription: %s", text)
            await self.broadcast({"type": MSG_TEXT_STREAM, "data": text})

        model_turn = getattr(server_content, "model_turn", None)
        parts = getattr(model_turn, "parts", None) if model_turn is not None else None
        for part in parts or []:
            inline_data = getattr(part, "inline_data", None)
            if inline_data is None or not inline_data.data:
                continue
            await self.broadcast({
                "type": MSG_AUDIO_STREAM,
                "data": _as_base64(inline_data.data),
                "mimeType": inline_data.mime_type,
            })

    async def handle_lifecycle(self, event: str, detail: str | None = None) -> None:
        if event == LIFECYCLE_ERROR:
            logger.error("Live session error: %s", detail)
        else:
            logger.info("Live session lifecycle event: %s", event)

        if not self.notify_upstream_errors:
            return
        if event == LIFECYCLE_ERROR:
            await self.broadcast({
                "type": MSG_ERROR,
                "code": ERR_UPSTREAM_ERROR,
                "content": "The interviewer connection failed.",
            })
        elif event == LIFECYCLE_CLOSE:
            await self.broadcast({
                "type": MSG_ERROR,
                "code": ERR_UPSTREAM_CLOSED,
                "content": "The interviewer connection closed.",
            })
