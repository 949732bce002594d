import json

import httpx
import pytest
import respx

from dsclient.models import (
    ChatCompletionRequest,
    Function,
    FunctionName,
    Message,
    Model,
    ResponseFormatType,
    Role,
    Tool,
    ToolChoiceObject,
    ToolChoiceType,
)
from dsclient.request import DEFAULT_URL, V1_URL, ApiError, Request
from dsclient.responses import FinishReason

RESPONSE_BODY = {
    "id": "dbdd2075-d78a-494a-afc9-b9ec5dc6bb64",
    "object": "chat.completion",
    "created": 1770982234,
    "model": "deepseek-chat",
    "choices": [
        {
            "index": 0,
            "message": {
                "role": "assistant",
                "content": "Hello! How can I assist you today? 😊",
            },
            "logprobs": None,
            "finish_reason": "stop",
        }
    ],
    "usage": {
        "prompt_tokens": 10,
        "completion_tokens": 11,
        "total_tokens": 21,
        "prompt_cache_hit_tokens": 0,
        "prompt_cache_miss_tokens": 10,
    },
    "system_fingerprint": "fp_eaab8d114b_prod0820_fp8_kvcache",
}


def _chunk(content, finish_reason=None):
    return json.dumps(
        {
            "id": "chunk",
            "object": "chat.completion.chunk",
            "created": 1770982234,
            "model": "deepseek-chat",
            "system_fingerprint": "fp",
            "choices": [
                {"index": 0, "delta": {"content": content}, "finish_reason": finish_reason}
            ],
        }
    )


def test_hello_world_request():
    request = Request.basic_query([Message(role=Role.USER, content="Hello, world!")])
    assert len(request.raw().messages) == 1
    assert request.raw().messages[0].content == "Hello, world!"
    assert request.raw().model is Model.DEEPSEEK_CHAT


def test_basic_query_reasoner_selects_model():
    request = Request.basic_query_reasoner([Message(Role.USER, "Why?")])
    assert request.raw().model is Model.DEEPSEEK_REASONER
    assert request.raw().messages[0].content == "Why?"


def test_builder_chain_sets_fields():
    request = (
        Request.builder()
        .add_message(Message(Role.SYSTEM, "You are a helpful assistant."))
        .add_message(Message(Role.USER, "What is Rust?"))
        .temperature(0.7)
        .max_tokens(100)
        .top_p(0.9)
        .frequency_penalty(0.5)
        .presence_penalty(-0.5)
    )
    raw = request.raw()
    assert [m.role for m in raw.messages] == [Role.SYSTEM, Role.USER]
    assert raw.temperature == 0.7
    assert raw.max_tokens == 100
    assert raw.top_p == 0.9
    assert raw.frequency_penalty == 0.5
    assert raw.presence_penalty == -0.5


def test_builder_defaults_match_empty_request():
    assert Request.builder().raw() == ChatCompletionRequest()


def test_response_format_switches():
    request = Request.builder().json()
    assert request.raw().response_format.type is ResponseFormatType.JSON_OBJECT
    request.text()
    assert request.raw().response_format.type is ResponseFormatType.TEXT
    assert request.raw().to_dict()["response_format"] == {"type": "text"}


def test_stop_variants():
    request = Request.builder().stop_str("END")
    assert request.raw().to_dict()["stop"] == "END"
    request.stop_vec(("a", "b"))
    assert request.raw().to_dict()["stop"] == ["a", "b"]


def test_add_tool_appends():
    tool_a = Tool(function=Function(name="a", parameters={}))
    tool_b = Tool(function=Function(name="b", parameters={}))
    request = Request.builder().add_tool(tool_a).add_tool(tool_b)
    assert [t.function.name for t in request.raw().tools] == ["a", "b"]


def test_tool_choice_variants():
    request = Request.builder().tool_choice_type(ToolChoiceType.AUTO)
    assert request.raw().to_dict()["tool_choice"] == "auto"
    request.tool_choice_object(ToolChoiceObject(function=FunctionName(name="my_function")))
    assert request.raw().to_dict()["tool_choice"] == {
        "type": "function",
        "function": {"name": "my_function"},
    }


def test_logprobs_sets_both_fields():
    raw = Request.builder().logprobs(5).raw()
    assert raw.logprobs is True
    assert raw.top_logprobs == 5


def test_from_raw_unchecked_keeps_object():
    body = ChatCompletionRequest(max_tokens=3)
    request = Request.from_raw_unchecked(body)
    assert request.raw() is body


@pytest.mark.asyncio
async def test_execute_nostreaming_parses_response():
    with respx.mock:
        route = respx.post(DEFAULT_URL).mock(
            return_value=httpx.Response(200, json=RESPONSE_BODY)
        )
        response = await Request.basic_query(
            [Message(Role.USER, "Hello")]
        ).execute_nostreaming("token")
    assert response.content() == "Hello! How can I assist you today? 😊"
    assert response.choices[0].finish_reason is FinishReason.STOP
    sent = route.calls.last.request
    assert sent.headers["Authorization"] == "Bearer token"
    body = json.loads(sent.content)
    assert body["model"] == "deepseek-chat"
    assert body["messages"] == [{"role": "user", "content": "Hello"}]


@pytest.mark.asyncio
async def test_execute_client_nostreaming_uses_v1_url():
    with respx.mock:
        route = respx.post(V1_URL).mock(return_value=httpx.Response(200, json=RESPONSE_BODY))
        async with httpx.AsyncClient() as client:
            response = await Request.basic_query(
                [Message(Role.USER, "Hi")]
            ).execute_client_nostreaming(client, "token")
    assert route.called
    assert response.usage.total_tokens == 21


@pytest.mark.asyncio
async def test_execute_nostreaming_bad_body_raises():
    with respx.mock:
        respx.post(DEFAULT_URL).mock(return_value=httpx.Response(401, text="unauthorized"))
        with pytest.raises(ValueError):
            await Request.basic_query([Message(Role.USER, "Hi")]).execute_nostreaming("token")


@pytest.mark.asyncio
async def test_streaming_yields_chunks_and_skips_done():
    sse = (
        f": keep-alive\n\ndata: {_chunk('Hel')}\n\n"
        f"data: {_chunk('lo', 'stop')}\n\ndata: [DONE]\n\n"
    )
    with respx.mock:
        route = respx.post(DEFAULT_URL).mock(
            return_value=httpx.Response(200, content=sse.encode())
        )
        async with httpx.AsyncClient() as client:
            request = Request.basic_query([Message(Role.USER, "Tell me a story.")])
            stream = await request.execute_client_streaming(client, "token")
            chunks = [chunk async for chunk in stream]
    assert "".join(c.choices[0].delta.content for c in chunks) == "Hello"
    assert chunks[-1].choices[0].finish_reason is FinishReason.STOP
    assert request.raw().stream is True
    assert json.loads(route.calls.last.request.content)["stream"] is True


@pytest.mark.asyncio
async def test_streaming_http_error_raises_api_error():
    with respx.mock:
        respx.post(DEFAULT_URL).mock(return_value=httpx.Response(402, text="no balance"))
        async with httpx.AsyncClient() as client:
            with pytest.raises(ApiError) as info:
                await Request.basic_query([Message(Role.USER, "x")]).execute_client_streaming(
                    client, "token"
                )
    assert info.value.status_code == 402
    assert info.value.body == "no balance"
    assert "no balance" in str(info.value)


@pytest.mark.asyncio
async def test_streaming_bad_chunk_raises_value_error():
    sse = f"data: {_chunk('ok')}\n\ndata: {{not json}}\n\n"
    collected = []
    with respx.mock:
        respx.post(DEFAULT_URL).mock(
            return_value=httpx.Response(200, content=sse.encode())
        )
        async with httpx.AsyncClient() as client:
            stream = await Request.basic_query(
                [Message(Role.USER, "x")]
            ).execute_client_streaming(client, "token")
            with pytest.raises(ValueError):
                async for chunk in stream:
                    collected.append(chunk.choices[0].delta.content)
    assert collected == ["ok"]