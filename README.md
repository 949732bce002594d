# dsclient

A small asynchronous client for the DeepSeek chat completions API.

It consists of:

- `dsclient.models` — request models that map onto the JSON the API accepts:
  `ChatCompletionRequest`, `Message`, `Model`, `Role`, `Tool`, `Function`,
  `ToolChoiceType`, `ToolChoiceObject`, `ResponseFormat`, `Thinking`,
  `StreamOptions` and friends;
- `dsclient.responses` — models for complete responses
  (`ChatCompletionResponse`) and for streamed chunks (`ChatCompletionChunk`);
- `dsclient.request` — the fluent `Request` builder, which sends requests with
  `httpx`, either waiting for the whole answer or streaming it as
  server-sent events, and the `ApiError` exception;
- `dsclient.cli` — a one-question command line program.

## Installation

```
pip install dsclient
```

Python 3.10 or newer is required. The only runtime dependency is `httpx`.

## Quick start

```python
import asyncio

from dsclient.models import Message, Role
from dsclient.request import Request


async def main() -> None:
    response = await Request.basic_query(
        [
            Message(Role.SYSTEM, "You are a helpful assistant."),
            Message(Role.USER, "What is the capital of France?"),
        ]
    ).execute_nostreaming("token")

    print(response.content())      # text of the first choice
    print(response.created_at())   # aware UTC datetime


asyncio.run(main())
```

Replace `"token"` with your API key.

## Building requests

`Request.builder()` starts an empty request on the default `deepseek-chat`
model. Every setter changes the request in place and returns it, so calls can
be chained:

```python
from dsclient.models import Message, Role
from dsclient.request import Request

request = (
    Request.builder()
    .add_message(Message(Role.SYSTEM, "You are a helpful assistant."))
    .add_message(Message(Role.USER, "What is Rust?"))
    .temperature(0.7)
    .max_tokens(100)
)

print(request.raw().to_json())
```

The setters:

- `messages(...)`, `add_message(...)`, `model(...)`;
- `json()`, `text()`, `response_format_type(...)` — output format;
- `frequency_penalty(...)`, `presence_penalty(...)`, `temperature(...)`,
  `top_p(...)`, `max_tokens(...)`;
- `stop_str(...)` for one stop sequence, `stop_vec(...)` for several;
- `add_tool(...)`, `tool_choice_type(...)`, `tool_choice_object(...)` for
  function calling;
- `logprobs(top_logprobs)` — turns `logprobs` on and sets `top_logprobs`.

`Request.basic_query_reasoner(messages)` builds a request for the
`deepseek-reasoner` model. An existing `ChatCompletionRequest` can be wrapped
as is with `Request.from_raw_unchecked(raw)`; `raw()` returns the body behind
any `Request`. The setters do not check their values.

## Sending requests

All sending methods are coroutines.

- `execute_nostreaming(token)` posts to
  `https://api.deepseek.com/chat/completions` and returns a
  `ChatCompletionResponse`.
- `execute_baseurl_nostreaming(url, token)` posts to another URL.
- `execute_client_baseurl_nostreaming(client, url, token)` uses an
  `httpx.AsyncClient` you manage; `execute_client_nostreaming(client, token)`
  does the same against `https://api.deepseek.com/v1/chat/completions`.
- `execute_client_streaming(client, token)` sets `stream` to true and returns
  an async iterator of `ChatCompletionChunk` objects; the closing `[DONE]`
  event is skipped.

```python
import httpx

from dsclient.models import Message, Role
from dsclient.request import Request


async def stream() -> None:
    async with httpx.AsyncClient() as client:
        chunks = await Request.basic_query(
            [Message(Role.USER, "Tell me a story.")]
        ).execute_client_streaming(client, "token")
        async for chunk in chunks:
            if chunk.choices and chunk.choices[0].delta.content:
                print(chunk.choices[0].delta.content, end="")
```

Errors: the streaming call raises `ApiError` (with `status_code`, `reason`
and `body`) when the server answers with an unsuccessful status, and
`ValueError` while iterating if a chunk cannot be parsed. The non-streaming
calls do not look at the HTTP status; they parse the body, and a body that is
not a valid response raises `ValueError`. Network failures surface as `httpx`
exceptions.

## Working with the models

Request models convert to the API's JSON and back:

```python
from dsclient.models import ChatCompletionRequest, Message, Role

request = ChatCompletionRequest(messages=[Message(Role.USER, "Hello")])
text = request.to_json()
again = ChatCompletionRequest.from_json(text)
```

Every model has `from_dict`; the request models also have `to_dict`. Optional
fields that are unset are left out of the JSON. A stop value is either a
string or a list of strings; a tool choice is either a `ToolChoiceType` or a
`ToolChoiceObject`. Responses are read with `ChatCompletionResponse.from_json`
and chunks with `ChatCompletionChunk.from_json`; missing required fields,
wrong types and unknown enum values raise `ValueError`.

## Command line

The `dsclient` command asks for an API key on standard input, sends the fixed
question "What is the capital of France?" and prints the answer:

```
dsclient
```

It exits with status 1 and prints the error on standard error if the request
fails.

## What it does not do

There is no interactive chat session: the package keeps no conversation
history for you, and the command sends a single fixed question. There is no
retrying, rate limiting or built-in timeout configuration beyond what your own
`httpx.AsyncClient` provides.

## Running the tests

```
pip install "dsclient[test]"
pytest
```