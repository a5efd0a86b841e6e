"""Turns browser messages into prompt turns for the shared live session.

Each discriminator is handled by a ``handle_<type>`` method. Messages with
an unknown type, or whose required fields are empty after trimming, are
dropped without telling the sender.
"""

import logging

from pydantic import ValidationError

from .live_session import LiveSession
from .messages import (
    StartInterview,
    StartCodingInterview,
    CodeSnapshotUpdate,
    CodingVoiceDoubtStart,
    ContentUpdateText,
    LiveCodeUpdate,
    RealtimeInput,
    parse_inbound,
)
from .prompts import (
    build_start_interview_turn,
    build_coding_interview_turn,
    build_voice_doubt_turn,
    build_review_payload,
    build_code_review_turn,
    build_followup_turn,
    build_unchanged_review_turn,
)
from .socket_registry import CodeSnapshot, SocketRegistry
from .ws_constants import (
    MSG_START_INTERVIEW,
    MSG_START_CODING_INTERVIEW,
    MSG_CODE_SNAPSHOT,
    MSG_CODING_VOICE_DOUBT_START,
    MSG_CONTENT_UPDATE_TEXT,
    MSG_LIVE_CODE_UPDATE,
    MSG_REALTIME_INPUT,
)

logger = logging.getLogger(__name__)


class MessageRouter:
    def __init__(self, registry: SocketRegistry, live_session: LiveSession):
        self.registry = registry
        self.live_session = live_session

    # ------------------------------------------------------------------
    # Message handlers
    # ------------------------------------------------------------------

    async def handle_start_interview(self, socket_id: str, msg: StartInterview) -> None:
        target = msg.interview_target.strip()
        if not target:
            return
        await self.live_session.send_turn(build_start_interview_turn(target), complete=True)

    async def handle_start_coding_interview(self, socket_id: str, msg: StartCodingInterview) -> None:
        language = msg.language.strip()
        topic = msg.topic.strip()
        if not language or not topic:
            return
        self.registry.set_snapshot(socket_id, CodeSnapshot(language=language, topic=topic, code=""))
        await self.live_session.send_turn(build_coding_interview_turn(language, topic), complete=True)

    async def handle_code_snapshot(self, socket_id: str, msg: CodeSnapshotUpdate) -> None:
        language = msg.language.strip()
        topic = msg.topic.strip()
        code = msg.code.strip()
        if not language or not topic or not code:
            return
        self.registry.set_snapshot(socket_id, CodeSnapshot(language=language, topic=topic, code=code))

    async def handle_coding_voice_doubt_start(self, socket_id: str, msg: CodingVoiceDoubtStart) -> None:
        snapshot = self.registry.get_snapshot(socket_id)
        context = snapshot.code.strip() if snapshot else ""
        language = msg.language.strip() or (snapshot.language if snapshot else "")
        topic = msg.topic.strip() or (snapshot.topic if snapshot else "")
        if not context or not language or not topic:
            return
        # Not complete: the spoken question arrives as realtime audio next.
        await self.live_session.send_turn(
            build_voice_doubt_turn(language, topic, context), complete=False
        )

    async def handle_content_update_text(self, socket_id: str, msg: ContentUpdateText) -> None:
        if not msg.text.strip():
            return
        await self.live_session.send_turn(msg.text, complete=True)

    async def handle_live_code_update(self, socket_id: str, msg: LiveCodeUpdate) -> None:
        """Review gating: full review only when the draft actually changed."""
        if not msg.request_review:
            return

        incoming_language = msg.language.strip()
        incoming_topic = msg.topic.strip()
        incoming_code = msg.code.strip()
        snapshot = self.registry.get_snapshot(socket_id)

        language = incoming_language or (snapshot.language if snapshot else "")
        topic = incoming_topic or (snapshot.topic if snapshot else "")
        code = incoming_code or (snapshot.code if snapshot else "")

        if not language or not topic:
            return
        if not code and msg.code_changed:
            return

        if incoming_code:
            self.registry.set_snapshot(
                socket_id, CodeSnapshot(language=language, topic=topic, code=incoming_code)
            )

        payload = build_review_payload(language, topic, code) if code else None
        last_payload = self.registry.get_last_review_payload(socket_id)

        # A bare re-request on a draft that was already reviewed (or that has
        # no code yet) gets incremental guidance instead of a new review.
        if not incoming_code and not msg.code_changed and payload in (None, last_payload):
            await self.live_session.send_turn(build_followup_turn(language, topic), complete=True)
            return

        if payload == last_payload:
            await self.live_session.send_turn(
                build_unchanged_review_turn(language, topic), complete=True
            )
            return

        self.registry.set_last_review_payload(socket_id, payload)
        await self.live_session.send_turn(build_code_review_turn(payload), complete=True)

    async def handle_realtime_input(self, socket_id: str, msg: RealtimeInput) -> None:
        if not msg.audio_data:
            return
        await self.live_session.send_media(msg.audio_data)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    # Dispatch table: message type -> handler method name
    _HANDLERS = {
        MSG_START_INTERVIEW: "handle_start_interview",
        MSG_START_CODING_INTERVIEW: "handle_start_coding_interview",
        MSG_CODE_SNAPSHOT: "handle_code_snapshot",
        MSG_CODING_VOICE_DOUBT_START: "handle_coding_voice_doubt_start",
        MSG_CONTENT_UPDATE_TEXT: "handle_content_update_text",
        MSG_LIVE_CODE_UPDATE: "handle_live_code_update",
        MSG_REALTIME_INPUT: "handle_realtime_input",
    }

    async def dispatch(self, socket_id: str, msg: dict) -> None:
        msg_type = msg.get("type")
        handler_name = self._HANDLERS.get(msg_type) if isinstance(msg_type, str) else None
        if not handler_name:
            logger.debug("Ignoring message with unknown type=%r from socket %s", msg_type, socket_id)
            return

        try:
            parsed = parse_inbound(msg)
        except ValidationError as e:
            logger.warning("Invalid %s message from socket %s: %s", msg_type, socket_id, e)
            return

        await getattr(self, handler_name)(socket_id, parsed)
