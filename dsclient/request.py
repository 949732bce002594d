"""Fluent builder for chat completion requests and the calls that send them."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from typing import Any

import httpx

from dsclient.models import (
    ChatCompletionRequest,
    Message,
    Model,
    ResponseFormat,
    ResponseFormatType,
    Tool,
    ToolChoiceObject,
    ToolChoiceType,
)
from dsclient.responses import ChatCompletionChunk, ChatCompletionResponse

DEFAULT_URL = "https://api.deepseek.com/chat/completions"
V1_URL = "https://api.deepseek.com/v1/chat/completions"

_DONE = "[DONE]"


class ApiError(Exception):
    """The server answered a request with an unsuccessful HTTP status."""

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        super().__init__(f"HTTP error {status_code} {reason}: {body}")
        self.status_code = status_code
        self.reason = reason
        self.body = body


def _headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}


async def _sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the data of each server-sent event found in a stream of lines."""
    data: list[str] = []
    async for line in lines:
        if not line:
            if data:
                yield "\n".join(data)
                data = []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            data.append(value)


async def _chunks(response: httpx.Response) -> AsyncIterator[ChatCompletionChunk]:
    try:
        async for data in _sse_data(response.aiter_lines()):
            if data == _DONE:
                continue
            yield ChatCompletionChunk.from_json(data)
    finally:
        await response.aclose()


class Request:
    """A chat completion request, built step by step and sent to the API."""

    def __init__(self, raw: ChatCompletionRequest | None = None) -> None:
        self._raw = raw if raw is not None else ChatCompletionRequest()

    @classmethod
    def basic_query(cls, messages: Iterable[Message]) -> Request:
        """A request for the chat model with the given conversation."""
        return cls.builder().messages(messages).model(Model.DEEPSEEK_CHAT)

    @classmethod
    def basic_query_reasoner(cls, messages: Iterable[Message]) -> Request:
        """A request for the reasoner model with the given conversation."""
        return cls.builder().messages(messages).model(Model.DEEPSEEK_REASONER)

    @classmethod
    def builder(cls) -> Request:
        """An empty request with default settings."""
        return cls(ChatCompletionRequest())

    @classmethod
    def from_raw_unchecked(cls, raw: ChatCompletionRequest) -> Request:
        """Wrap a request body as is; the caller vouches for its validity."""
        return cls(raw)

    def add_message(self, message: Message) -> Request:
        self._raw.messages.append(message)
        return self

    def messages(self, messages: Iterable[Message]) -> Request:
        self._raw.messages = list(messages)
        return self

    def model(self, model: Model) -> Request:
        self._raw.model = model
        return self

    def response_format_type(self, response_format_type: ResponseFormatType) -> Request:
        self._raw.response_format = ResponseFormat(type=response_format_type)
        return self

    def json(self) -> Request:
        """Ask for a JSON object as output."""
        return self.response_format_type(ResponseFormatType.JSON_OBJECT)

    def text(self) -> Request:
        """Ask for plain text as output."""
        return self.response_format_type(ResponseFormatType.TEXT)

    def frequency_penalty(self, penalty: float) -> Request:
        """Penalty between -2 and 2 for tokens by their frequency so far."""
        self._raw.frequency_penalty = penalty
        return self

    def presence_penalty(self, penalty: float) -> Request:
        """Penalty between -2 and 2 for tokens that have already appeared."""
        self._raw.presence_penalty = penalty
        return self

    def max_tokens(self, max_tokens: int) -> Request:
        self._raw.max_tokens = max_tokens
        return self

    def temperature(self, temperature: float) -> Request:
        """Sampling temperature between 0 and 2."""
        self._raw.temperature = temperature
        return self

    def stop_vec(self, stop: Iterable[str]) -> Request:
        self._raw.stop = list(stop)
        return self

    def stop_str(self, stop: str) -> Request:
        self._raw.stop = stop
        return self

    def top_p(self, top_p: float) -> Request:
        """Nucleus sampling mass, at most 1."""
        self._raw.top_p = top_p
        return self

    def add_tool(self, tool: Tool) -> Request:
        if self._raw.tools is None:
            self._raw.tools = [tool]
        else:
            self._raw.tools.append(tool)
        return self

    def tool_choice_type(self, tool_choice: ToolChoiceType) -> Request:
        self._raw.tool_choice = tool_choice
        return self

    def tool_choice_object(self, tool_choice: ToolChoiceObject) -> Request:
        self._raw.tool_choice = tool_choice
        return self

    def logprobs(self, top_logprobs: int) -> Request:
        """Return log probabilities of the top N tokens (0 to 20) at each position."""
        self._raw.logprobs = True
        self._raw.top_logprobs = top_logprobs
        return self

    def raw(self) -> ChatCompletionRequest:
        """The underlying request body."""
        return self._raw

    def _body(self) -> bytes:
        return self._raw.to_json().encode("utf-8")

    async def execute_client_baseurl_nostreaming(
        self, client: httpx.AsyncClient, url: str, token: str
    ) -> ChatCompletionResponse:
        """Send the request to url with the given client and parse the answer."""
        response = await client.post(url, headers=_headers(token), content=self._body())
        return ChatCompletionResponse.from_json(response.content)

    async def execute_client_nostreaming(
        self, client: httpx.AsyncClient, token: str
    ) -> ChatCompletionResponse:
        return await self.execute_client_baseurl_nostreaming(client, V1_URL, token)

    async def execute_baseurl_nostreaming(
        self, base_url: str, token: str
    ) -> ChatCompletionResponse:
        async with httpx.AsyncClient(timeout=None) as client:
            return await self.execute_client_baseurl_nostreaming(client, base_url, token)

    async def execute_nostreaming(self, token: str) -> ChatCompletionResponse:
        return await self.execute_baseurl_nostreaming(DEFAULT_URL, token)

    async def execute_client_streaming(
        self, client: httpx.AsyncClient, token: str
    ) -> AsyncIterator[ChatCompletionChunk]:
        """Send the request in streaming mode and return an iterator of chunks.

        An unsuccessful status raises ApiError; a chunk that cannot be parsed
        raises ValueError while iterating.
        """
        self._raw.stream = True
        request = client.build_request(
            "POST", DEFAULT_URL, headers=_headers(token), content=self._body()
        )
        response = await client.send(request, stream=True)
        if not response.is_success:
            try:
                await response.aread()
                body: Any = response.text
            finally:
                await response.aclose()
            raise ApiError(response.status_code, response.reason_phrase, body)
        return _chunks(response)