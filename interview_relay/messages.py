"""Inbound browser messages, one pydantic model per ``type`` discriminator.

The browser sends loosely typed JSON: fields may be missing, ``null`` or
non-string scalars. Text fields therefore coerce falsy values to ``""`` and
stringify everything else; flags use plain truthiness. Trimming is left to
the router so that ``contentUpdateText`` can forward its text untouched.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter


def _as_text(value: Any) -> Any:
    if not value:
        return ""
    if isinstance(value, (str, dict, list)):
        # Containers are left for str validation to reject.
        return value
    return str(value)


Text = Annotated[str, BeforeValidator(_as_text)]
Flag = Annotated[bool, BeforeValidator(bool)]


class _InboundMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class StartInterview(_InboundMessage):
    type: Literal["startInterview"]
    interview_target: Text = Field("", alias="interviewTarget")


class StartCodingInterview(_InboundMessage):
    type: Literal["startCodingInterview"]
    language: Text = ""
    topic: Text = ""


class CodeSnapshotUpdate(_InboundMessage):
    type: Literal["codeSnapshot"]
    language: Text = ""
    topic: Text = ""
    code: Text = ""


class CodingVoiceDoubtStart(_InboundMessage):
    type: Literal["codingVoiceDoubtStart"]
    language: Text = ""
    topic: Text = ""


class ContentUpdateText(_InboundMessage):
    type: Literal["contentUpdateText"]
    text: Text = ""


class LiveCodeUpdate(_InboundMessage):
    type: Literal["liveCodeUpdate"]
    language: Text = ""
    topic: Text = ""
    code: Text = ""
    request_review: Flag = Field(False, alias="requestReview")
    code_changed: Flag = Field(False, alias="codeChanged")


class RealtimeInput(_InboundMessage):
    type: Literal["realtimeInput"]
    audio_data: Text = Field("", alias="audioData")


InboundMessage = Annotated[
    Union[
        StartInterview,
        StartCodingInterview,
        CodeSnapshotUpdate,
        CodingVoiceDoubtStart,
        ContentUpdateText,
        LiveCodeUpdate,
        RealtimeInput,
    ],
    Field(discriminator="type"),
]

inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(msg: dict) -> InboundMessage:
    """Validate a decoded JSON object into its message model.

    Raises ``pydantic.ValidationError`` for unknown discriminators or bodies
    that cannot be coerced.
    """
    return inbound_adapter.validate_python(msg)
