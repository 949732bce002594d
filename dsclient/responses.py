"""Response-side data structures of the chat completion API, plain and streamed."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from dsclient.models import (
    Message,
    Model,
    Role,
    ToolType,
    _as_bool,
    _as_enum,
    _as_float,
    _as_list,
    _as_str,
    _as_uint,
    _mapping,
    _optional,
    _required,
)


class FinishReason(str, Enum):
    """Why the model stopped generating."""

    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    TOOL_CALLS = "tool_calls"
    INSUFFICIENT_SYSTEM_RESOURCE = "insufficient_system_resource"


class ObjectType(str, Enum):
    """Object tag of a complete response."""

    CHAT_COMPLETION = "chat.completion"


class ChunkObjectType(str, Enum):
    """Object tag of a streamed chunk."""

    CHAT_COMPLETION_CHUNK = "chat.completion.chunk"

    @classmethod
    def _missing_(cls, value: object) -> ChunkObjectType | None:
        if value == "chatcompletionchunk":
            return cls.CHAT_COMPLETION_CHUNK
        return None


def _as_u64(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {type(value).__name__}")
    if not 0 <= value < 2**64:
        raise ValueError(f"field {key!r} is out of range: {value}")
    return value


def _nested(cls: Any) -> Any:
    return lambda value, _key: cls.from_dict(value)


@dataclass
class TopLogprob:
    """One of the most likely tokens at an output position."""

    token: str
    logprob: float
    bytes: list[int] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TopLogprob:
        data = _mapping(data, "top logprob")
        return cls(
            token=_as_str(_required(data, "token", "top logprob"), "token"),
            logprob=_as_float(_required(data, "logprob", "top logprob"), "logprob"),
            bytes=_optional(data, "bytes", _as_list(_as_uint)),
        )


@dataclass
class TokenLogprob:
    """Log probability of an output token and its most likely alternatives."""

    token: str
    logprob: float
    top_logprobs: list[TopLogprob]
    bytes: list[int] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TokenLogprob:
        data = _mapping(data, "token logprob")
        return cls(
            token=_as_str(_required(data, "token", "token logprob"), "token"),
            logprob=_as_float(_required(data, "logprob", "token logprob"), "logprob"),
            bytes=_optional(data, "bytes", _as_list(_as_uint)),
            top_logprobs=_as_list(_nested(TopLogprob))(
                _required(data, "top_logprobs", "token logprob"), "top_logprobs"
            ),
        )


@dataclass
class Logprobs:
    """Log probabilities of the content and reasoning tokens."""

    content: list[TokenLogprob] | None = None
    reasoning_content: list[TokenLogprob] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Logprobs:
        data = _mapping(data, "logprobs")
        return cls(
            content=_optional(data, "content", _as_list(_nested(TokenLogprob))),
            reasoning_content=_optional(
                data, "reasoning_content", _as_list(_nested(TokenLogprob))
            ),
        )


@dataclass
class CompletionTokensDetails:
    """Breakdown of completion tokens."""

    reasoning_tokens: int

    @classmethod
    def from_dict(cls, data: Any) -> CompletionTokensDetails:
        data = _mapping(data, "completion tokens details")
        return cls(
            reasoning_tokens=_as_uint(
                _required(data, "reasoning_tokens", "completion tokens details"),
                "reasoning_tokens",
            )
        )


@dataclass
class Usage:
    """Token usage of a request."""

    completion_tokens: int
    prompt_tokens: int
    total_tokens: int
    prompt_cache_hit_tokens: int | None = None
    prompt_cache_miss_tokens: int | None = None
    completion_tokens_details: CompletionTokensDetails | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Usage:
        data = _mapping(data, "usage")
        return cls(
            completion_tokens=_as_uint(
                _required(data, "completion_tokens", "usage"), "completion_tokens"
            ),
            prompt_tokens=_as_uint(_required(data, "prompt_tokens", "usage"), "prompt_tokens"),
            total_tokens=_as_uint(_required(data, "total_tokens", "usage"), "total_tokens"),
            prompt_cache_hit_tokens=_optional(data, "prompt_cache_hit_tokens", _as_uint),
            prompt_cache_miss_tokens=_optional(data, "prompt_cache_miss_tokens", _as_uint),
            completion_tokens_details=_optional(
                data, "completion_tokens_details", _nested(CompletionTokensDetails)
            ),
        )


@dataclass
class Choice:
    """One completion choice of a response."""

    finish_reason: FinishReason
    index: int
    message: Message
    logprobs: Logprobs | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Choice:
        data = _mapping(data, "choice")
        return cls(
            finish_reason=_as_enum(FinishReason)(
                _required(data, "finish_reason", "choice"), "finish_reason"
            ),
            index=_as_uint(_required(data, "index", "choice"), "index"),
            message=Message.from_dict(_required(data, "message", "choice")),
            logprobs=_optional(data, "logprobs", _nested(Logprobs)),
        )


@dataclass
class ChatCompletionResponse:
    """A complete, non-streamed chat completion response."""

    id: str
    choices: list[Choice]
    created: int
    model: Model
    system_fingerprint: str
    object: ObjectType
    usage: Usage

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionResponse:
        data = _mapping(data, "chat completion response")
        what = "chat completion response"
        return cls(
            id=_as_str(_required(data, "id", what), "id"),
            choices=_as_list(_nested(Choice))(_required(data, "choices", what), "choices"),
            created=_as_u64(_required(data, "created", what), "created"),
            model=_as_enum(Model)(_required(data, "model", what), "model"),
            system_fingerprint=_as_str(
                _required(data, "system_fingerprint", what), "system_fingerprint"
            ),
            object=_as_enum(ObjectType)(_required(data, "object", what), "object"),
            usage=Usage.from_dict(_required(data, "usage", what)),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> ChatCompletionResponse:
        """Parse JSON text; malformed input raises ValueError."""
        return cls.from_dict(json.loads(text))

    def content(self) -> str:
        """Text of the first choice's message."""
        if not self.choices:
            raise ValueError("response has no choices")
        text = self.choices[0].message.content
        if text is None:
            raise ValueError("first choice has no content")
        return text

    def created_at(self) -> datetime:
        """Creation time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.created, tz=timezone.utc)


@dataclass
class DeltaFunctionCall:
    """Incremental piece of a function call."""

    name: str | None = None
    arguments: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> DeltaFunctionCall:
        data = _mapping(data, "delta function call")
        return cls(
            name=_optional(data, "name", _as_str),
            arguments=_optional(data, "arguments", _as_str),
        )


@dataclass
class DeltaToolCall:
    """Incremental piece of a tool call, identified by its index."""

    index: int
    id: str | None = None
    type: ToolType | None = None
    function: DeltaFunctionCall | None = None

    @classmethod
    def from_dict(cls, data: Any) -> DeltaToolCall:
        data = _mapping(data, "delta tool call")
        return cls(
            index=_as_uint(_required(data, "index", "delta tool call"), "index"),
            id=_optional(data, "id", _as_str),
            type=_optional(data, "type", _as_enum(ToolType)),
            function=_optional(data, "function", _nested(DeltaFunctionCall)),
        )


@dataclass
class Delta:
    """Incremental message content carried by a streamed chunk."""

    content: str | None = None
    reasoning_content: str | None = None
    role: Role | None = None
    tool_calls: list[DeltaToolCall] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Delta:
        data = _mapping(data, "delta")
        return cls(
            content=_optional(data, "content", _as_str),
            reasoning_content=_optional(data, "reasoning_content", _as_str),
            role=_optional(data, "role", _as_enum(Role)),
            tool_calls=_optional(data, "tool_calls", _as_list(_nested(DeltaToolCall))),
        )


@dataclass
class ChunkChoice:
    """One choice inside a streamed chunk."""

    index: int
    delta: Delta
    finish_reason: FinishReason | None = None
    logprobs: Logprobs | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ChunkChoice:
        data = _mapping(data, "chunk choice")
        return cls(
            index=_as_uint(_required(data, "index", "chunk choice"), "index"),
            delta=Delta.from_dict(_required(data, "delta", "chunk choice")),
            finish_reason=_optional(data, "finish_reason", _as_enum(FinishReason)),
            logprobs=_optional(data, "logprobs", _nested(Logprobs)),
        )


@dataclass
class ChatCompletionChunk:
    """One event of a streamed chat completion."""

    id: str
    choices: list[ChunkChoice]
    created: int
    model: str
    system_fingerprint: str
    object: ChunkObjectType
    usage: Usage | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionChunk:
        data = _mapping(data, "chat completion chunk")
        what = "chat completion chunk"
        return cls(
            id=_as_str(_required(data, "id", what), "id"),
            choices=_as_list(_nested(ChunkChoice))(_required(data, "choices", what), "choices"),
            created=_as_u64(_required(data, "created", what), "created"),
            model=_as_str(_required(data, "model", what), "model"),
            system_fingerprint=_as_str(
                _required(data, "system_fingerprint", what), "system_fingerprint"
            ),
            object=_as_enum(ChunkObjectType)(_required(data, "object", what), "object"),
            usage=_optional(data, "usage", _nested(Usage)),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> ChatCompletionChunk:
        """Parse JSON text; malformed input raises ValueError."""
        return cls.from_dict(json.loads(text))


# Keep the bool converter reachable for callers extending these types.
_ = _as_bool