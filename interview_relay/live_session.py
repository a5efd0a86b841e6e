"""Single shared Gemini Live session for the whole relay process.

The SDK hands back an async context manager whose ``receive()`` iterator
ends at every turn boundary. ``LiveSession`` owns one background task that
holds the connection open, re-enters ``receive()`` until the stream is
exhausted, and feeds each server message to ``on_message``. The SDK
surfaces an upstream websocket close as ``errors.APIError`` carrying the
close code; those codes end the session as a close, anything else as an
error. Lifecycle changes (open / error / close) go to ``on_lifecycle``.

Sends never raise into caller code: with no open session the turn is
dropped with a warning, and SDK failures are logged and swallowed.
"""

import asyncio
import base64
import binascii
import logging
import os
from typing import Any, Awaitable, Callable

from google import genai
from google.genai import errors, types

from .prompts import INTERVIEW_SYSTEM_PROMPT
from .ws_constants import LIFECYCLE_OPEN, LIFECYCLE_ERROR, LIFECYCLE_CLOSE

logger = logging.getLogger(__name__)

LIVE_MODEL = os.environ.get("RELAY_LIVE_MODEL", "gemini-2.5-flash-native-audio-latest")
VOICE_NAME = os.environ.get("RELAY_VOICE_NAME", "Aoede")
AUDIO_INPUT_MIME_TYPE = "audio/pcm;rate=16000"

RECONNECT_ENABLED = os.environ.get("RELAY_UPSTREAM_RECONNECT", "").lower() in ("1", "true", "yes")
RECONNECT_DELAY = float(os.environ.get("RELAY_RECONNECT_DELAY", "2.0"))  # seconds

# Websocket close codes (RFC 6455 range plus the 4xxx application range).
WS_CLOSE_NORMAL = 1000
WS_CLOSE_CODE_MIN = 1000
WS_CLOSE_CODE_MAX = 4999

MessageCallback = Callable[[Any], Awaitable[None]]
LifecycleCallback = Callable[[str, str | None], Awaitable[None]]


def build_live_config(
    system_prompt: str = INTERVIEW_SYSTEM_PROMPT,
    voice_name: str = VOICE_NAME,
) -> types.LiveConnectConfig:
    """Audio-only replies in a fixed voice, with output transcription on."""
    return types.LiveConnectConfig(
        response_modalities=[types.Modality.AUDIO],
        output_audio_transcription=types.AudioTranscriptionConfig(),
        speech_config=types.SpeechConfig(
            voice_config=types.VoiceConfig(
                prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_name),
            ),
        ),
        system_instruction=types.Content(parts=[types.Part(text=system_prompt)]),
    )


def _is_close_code(code) -> bool:
    return isinstance(code, int) and WS_CLOSE_CODE_MIN <= code <= WS_CLOSE_CODE_MAX


def _task_done_callback(task: asyncio.Task):
    """Log exceptions from the session task instead of silently swallowing."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Live session task failed: %s", exc, exc_info=exc)


class LiveSession:
    def __init__(
        self,
        *,
        api_key: str | None,
        model: str = LIVE_MODEL,
        config: types.LiveConnectConfig | None = None,
        on_message: MessageCallback | None = None,
        on_lifecycle: LifecycleCallback | None = None,
        reconnect: bool = RECONNECT_ENABLED,
        reconnect_delay: float = RECONNECT_DELAY,
        client: genai.Client | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.config = config or build_live_config()
        self.on_message = on_message
        self.on_lifecycle = on_lifecycle
        self.reconnect = reconnect
        self.reconnect_delay = reconnect_delay
        self._client = client
        self._session = None
        self._task: asyncio.Task | None = None

    @property
    def is_open(self) -> bool:
        return self._session is not None

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_turn(self, text: str, complete: bool = True) -> None:
        """Send a single-part user turn."""
        session = self._session
        if session is None:
            logger.warning("Dropping turn: live session is not open")
            return
        try:
            await session.send_client_content(
                turns=types.Content(role="user", parts=[types.Part(text=text)]),
                turn_complete=complete,
            )
        except Exception:
            logger.exception("Failed to send turn to live session")

    async def send_media(self, audio_data: str) -> None:
        """Forward a base64 PCM chunk from the browser microphone."""
        session = self._session
        if session is None:
            logger.warning("Dropping audio chunk: live session is not open")
            return
        try:
            raw = base64.b64decode(audio_data, validate=True)
        except (binascii.Error, ValueError):
            logger.warning("Dropping audio chunk: payload is not valid base64")
            return
        try:
            await session.send_realtime_input(
                audio=types.Blob(data=raw, mime_type=AUDIO_INPUT_MIME_TYPE),
            )
        except Exception:
            logger.exception("Failed to send audio to live session")

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def _emit_lifecycle(self, event: str, detail: str | None = None) -> None:
        if self.on_lifecycle is None:
            return
        try:
            await self.on_lifecycle(event, detail)
        except Exception:
            logger.exception("Lifecycle callback failed for event=%s", event)

    async def _dispatch(self, message: Any) -> None:
        if self.on_message is None:
            return
        try:
            await self.on_message(message)
        except Exception:
            logger.exception("Message callback failed")

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _connect_and_receive(self) -> None:
        client = self._get_client()
        logger.info("Connecting to Gemini Live API with model %s", self.model)
        async with client.aio.live.connect(model=self.model, config=self.config) as session:
            self._session = session
            logger.info("Live session opened")
            await self._emit_lifecycle(LIFECYCLE_OPEN)
            close_detail = None
            try:
                while True:
                    received = False
                    async for message in session.receive():
                        received = True
                        await self._dispatch(message)
                    if not received:
                        break
            except errors.APIError as e:
                # The SDK reports every websocket close, clean ones included, as APIError.
                if not _is_close_code(e.code):
                    raise
                if e.code != WS_CLOSE_NORMAL:
                    close_detail = f"{e.code} {e.details}"
            finally:
                self._session = None
        if close_detail:
            logger.warning("Live session closed: %s", close_detail)
        else:
            logger.warning("Live session closed")
        await self._emit_lifecycle(LIFECYCLE_CLOSE, close_detail)

    async def run(self) -> None:
        """Hold the upstream connection; reconnect only when enabled."""
        if not self.api_key:
            logger.error("GOOGLE_API_KEY is not set; live session will not be established")
            return
        while True:
            try:
                await self._connect_and_receive()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception("Live session error")
                await self._emit_lifecycle(LIFECYCLE_ERROR, str(e))
            if not self.reconnect:
                return
            logger.info("Reconnecting live session in %.1fs", self.reconnect_delay)
            await asyncio.sleep(self.reconnect_delay)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.ensure_future(self.run())
            self._task.add_done_callback(_task_done_callback)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._session = None
