"""Request-side data structures of the chat completion API and their JSON mapping."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar, Union

_E = TypeVar("_E", bound=Enum)
_T = TypeVar("_T")


class Model(str, Enum):
    """Identifier of the model that serves a request."""

    DEEPSEEK_CHAT = "deepseek-chat"
    DEEPSEEK_REASONER = "deepseek-reasoner"


class Role(str, Enum):
    """Author of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolType(str, Enum):
    """Kind of a tool; only functions exist."""

    FUNCTION = "function"


class ResponseFormatType(str, Enum):
    """Format the model must produce."""

    TEXT = "text"
    JSON_OBJECT = "json_object"


class ThinkingType(str, Enum):
    """Switch between thinking and non-thinking mode."""

    DISABLED = "disabled"
    ENABLED = "enabled"


class ToolChoiceType(str, Enum):
    """How freely the model may call tools."""

    NONE = "none"
    AUTO = "auto"
    REQUIRED = "required"


def _mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _required(data: dict[str, Any], key: str, what: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r} in {what}") from None


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {type(value).__name__}")
    return value


def _as_uint(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {type(value).__name__}")
    if not 0 <= value < 2**32:
        raise ValueError(f"field {key!r} is out of range: {value}")
    return value


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number, got {type(value).__name__}")
    return float(value)


def _as_enum(cls: type[_E]) -> Callable[[Any, str], _E]:
    def convert(value: Any, key: str) -> _E:
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(repr(member.value) for member in cls)
            raise ValueError(
                f"field {key!r} has unknown value {value!r}; expected one of {allowed}"
            ) from None

    return convert


def _as_list(convert: Callable[[Any, str], _T]) -> Callable[[Any, str], list[_T]]:
    def convert_list(value: Any, key: str) -> list[_T]:
        if not isinstance(value, list):
            raise ValueError(f"field {key!r} must be an array, got {type(value).__name__}")
        return [convert(item, key) for item in value]

    return convert_list


def _optional(data: dict[str, Any], key: str, convert: Callable[[Any, str], _T]) -> _T | None:
    value = data.get(key)
    return None if value is None else convert(value, key)


def _put(result: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        result[key] = value


@dataclass
class FunctionCall:
    """A function invocation requested by the model; arguments are a JSON string."""

    name: str
    arguments: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}

    @classmethod
    def from_dict(cls, data: Any) -> FunctionCall:
        data = _mapping(data, "function call")
        return cls(
            name=_as_str(_required(data, "name", "function call"), "name"),
            arguments=_as_str(_required(data, "arguments", "function call"), "arguments"),
        )


@dataclass
class ToolCall:
    """A tool call, shared by requests and responses."""

    id: str
    function: FunctionCall
    type: ToolType = ToolType.FUNCTION

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type.value, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> ToolCall:
        data = _mapping(data, "tool call")
        return cls(
            id=_as_str(_required(data, "id", "tool call"), "id"),
            type=_as_enum(ToolType)(_required(data, "type", "tool call"), "type"),
            function=FunctionCall.from_dict(_required(data, "function", "tool call")),
        )


@dataclass
class Message:
    """A conversation message, used both in requests and in responses."""

    role: Role = Role.USER
    content: str | None = None
    name: str | None = None
    tool_call_id: str | None = None
    tool_calls: list[ToolCall] | None = None
    reasoning_content: str | None = None
    prefix: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"role": self.role.value}
        _put(result, "content", self.content)
        _put(result, "name", self.name)
        _put(result, "tool_call_id", self.tool_call_id)
        if self.tool_calls is not None:
            result["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        _put(result, "reasoning_content", self.reasoning_content)
        _put(result, "prefix", self.prefix)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> Message:
        data = _mapping(data, "message")
        return cls(
            role=_as_enum(Role)(_required(data, "role", "message"), "role"),
            content=_optional(data, "content", _as_str),
            name=_optional(data, "name", _as_str),
            tool_call_id=_optional(data, "tool_call_id", _as_str),
            tool_calls=_optional(
                data, "tool_calls", _as_list(lambda item, _key: ToolCall.from_dict(item))
            ),
            reasoning_content=_optional(data, "reasoning_content", _as_str),
            prefix=_optional(data, "prefix", _as_bool),
        )


@dataclass
class ResponseFormat:
    """Output format requested from the model."""

    type: ResponseFormatType

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value}

    @classmethod
    def from_dict(cls, data: Any) -> ResponseFormat:
        data = _mapping(data, "response format")
        return cls(
            type=_as_enum(ResponseFormatType)(_required(data, "type", "response format"), "type")
        )


@dataclass
class StreamOptions:
    """Options that only apply to streamed requests."""

    include_usage: bool

    def to_dict(self) -> dict[str, Any]:
        return {"include_usage": self.include_usage}

    @classmethod
    def from_dict(cls, data: Any) -> StreamOptions:
        data = _mapping(data, "stream options")
        return cls(
            include_usage=_as_bool(
                _required(data, "include_usage", "stream options"), "include_usage"
            )
        )


@dataclass
class Thinking:
    """Selects thinking or non-thinking mode."""

    type: ThinkingType

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value}

    @classmethod
    def from_dict(cls, data: Any) -> Thinking:
        data = _mapping(data, "thinking")
        return cls(type=_as_enum(ThinkingType)(_required(data, "type", "thinking"), "type"))


@dataclass
class Function:
    """A function the model may call; parameters are a JSON Schema value."""

    name: str
    parameters: Any
    description: str | None = None
    strict: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        _put(result, "description", self.description)
        result["parameters"] = self.parameters
        _put(result, "strict", self.strict)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> Function:
        data = _mapping(data, "function")
        return cls(
            name=_as_str(_required(data, "name", "function"), "name"),
            description=_optional(data, "description", _as_str),
            parameters=_required(data, "parameters", "function"),
            strict=_optional(data, "strict", _as_bool),
        )


@dataclass
class Tool:
    """A tool offered to the model."""

    function: Function
    type: ToolType = ToolType.FUNCTION

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> Tool:
        data = _mapping(data, "tool")
        return cls(
            type=_as_enum(ToolType)(_required(data, "type", "tool"), "type"),
            function=Function.from_dict(_required(data, "function", "tool")),
        )


@dataclass
class FunctionName:
    """Names the function a tool choice forces."""

    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_dict(cls, data: Any) -> FunctionName:
        data = _mapping(data, "function name")
        return cls(name=_as_str(_required(data, "name", "function name"), "name"))


@dataclass
class ToolChoiceObject:
    """Forces the model to call one specific function."""

    function: FunctionName
    type: ToolType = ToolType.FUNCTION

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> ToolChoiceObject:
        data = _mapping(data, "tool choice")
        return cls(
            type=_as_enum(ToolType)(_required(data, "type", "tool choice"), "type"),
            function=FunctionName.from_dict(_required(data, "function", "tool choice")),
        )


Stop = Union[str, list[str]]
ToolChoice = Union[ToolChoiceType, ToolChoiceObject]


def _stop_from_json(value: Any, key: str) -> Stop:
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ValueError(f"field {key!r} must be a string or an array of strings")


def _stop_to_json(stop: Stop) -> Any:
    return stop if isinstance(stop, str) else list(stop)


def _tool_choice_from_json(value: Any, key: str) -> ToolChoice:
    if isinstance(value, str):
        return _as_enum(ToolChoiceType)(value, key)
    if isinstance(value, dict):
        return ToolChoiceObject.from_dict(value)
    raise ValueError(f"field {key!r} must be a string or an object")


def _tool_choice_to_json(choice: ToolChoice) -> Any:
    if isinstance(choice, ToolChoiceType):
        return choice.value
    return choice.to_dict()


@dataclass
class ChatCompletionRequest:
    """The body of a chat completion request."""

    messages: list[Message] = field(default_factory=list)
    model: Model = Model.DEEPSEEK_CHAT
    thinking: Thinking | None = None
    frequency_penalty: float | None = None
    max_tokens: int | None = None
    presence_penalty: float | None = None
    response_format: ResponseFormat | None = None
    stop: Stop | None = None
    stream: bool | None = None
    stream_options: StreamOptions | None = None
    temperature: float | None = None
    top_p: float | None = None
    tools: list[Tool] | None = None
    tool_choice: ToolChoice | None = None
    logprobs: bool | None = None
    top_logprobs: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "messages": [message.to_dict() for message in self.messages],
            "model": self.model.value,
        }
        if self.thinking is not None:
            result["thinking"] = self.thinking.to_dict()
        _put(result, "frequency_penalty", self.frequency_penalty)
        _put(result, "max_tokens", self.max_tokens)
        _put(result, "presence_penalty", self.presence_penalty)
        if self.response_format is not None:
            result["response_format"] = self.response_format.to_dict()
        if self.stop is not None:
            result["stop"] = _stop_to_json(self.stop)
        _put(result, "stream", self.stream)
        if self.stream_options is not None:
            result["stream_options"] = self.stream_options.to_dict()
        _put(result, "temperature", self.temperature)
        _put(result, "top_p", self.top_p)
        if self.tools is not None:
            result["tools"] = [tool.to_dict() for tool in self.tools]
        if self.tool_choice is not None:
            result["tool_choice"] = _tool_choice_to_json(self.tool_choice)
        _put(result, "logprobs", self.logprobs)
        _put(result, "top_logprobs", self.top_logprobs)
        return result

    def to_json(self) -> str:
        """Serialise to compact JSON text."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionRequest:
        data = _mapping(data, "chat completion request")
        request = cls()
        if "messages" in data:
            request.messages = _as_list(lambda item, _key: Message.from_dict(item))(
                data["messages"], "messages"
            )
        if "model" in data:
            request.model = _as_enum(Model)(data["model"], "model")
        request.thinking = _optional(data, "thinking", lambda v, _k: Thinking.from_dict(v))
        request.frequency_penalty = _optional(data, "frequency_penalty", _as_float)
        request.max_tokens = _optional(data, "max_tokens", _as_uint)
        request.presence_penalty = _optional(data, "presence_penalty", _as_float)
        request.response_format = _optional(
            data, "response_format", lambda v, _k: ResponseFormat.from_dict(v)
        )
        request.stop = _optional(data, "stop", _stop_from_json)
        request.stream = _optional(data, "stream", _as_bool)
        request.stream_options = _optional(
            data, "stream_options", lambda v, _k: StreamOptions.from_dict(v)
        )
        request.temperature = _optional(data, "temperature", _as_float)
        request.top_p = _optional(data, "top_p", _as_float)
        request.tools = _optional(
            data, "tools", _as_list(lambda item, _key: Tool.from_dict(item))
        )
        request.tool_choice = _optional(data, "tool_choice", _tool_choice_from_json)
        request.logprobs = _optional(data, "logprobs", _as_bool)
        request.top_logprobs = _optional(data, "top_logprobs", _as_uint)
        return request

    @classmethod
    def from_json(cls, text: str | bytes) -> ChatCompletionRequest:
        """Parse JSON text; malformed input raises ValueError."""
        return cls.from_dict(json.loads(text))