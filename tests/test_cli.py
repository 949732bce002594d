import io
import json

import httpx
import respx

from dsclient import cli
from dsclient.request import DEFAULT_URL


def _response(content):
    return {
        "id": "id-1",
        "object": "chat.completion",
        "created": 1770982234,
        "model": "deepseek-chat",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 11, "total_tokens": 21},
        "system_fingerprint": "fp",
    }


def test_main_prints_answer(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("token\n"))
    with respx.mock:
        route = respx.post(DEFAULT_URL).mock(
            return_value=httpx.Response(200, json=_response("Paris"))
        )
        code = cli.main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "Please input your API token:" in out
    assert "Response :Paris" in out
    sent = route.calls.last.request
    assert sent.headers["Authorization"] == "Bearer token"
    body = json.loads(sent.content)
    assert body["messages"] == [
        {"role": "system", "content": "You are a helpful assistant."},
        {"role": "user", "content": "What is the capital of France?"},
    ]


def test_main_reports_failure(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("token\n"))
    with respx.mock:
        respx.post(DEFAULT_URL).mock(return_value=httpx.Response(500, text="boom"))
        code = cli.main([])
    captured = capsys.readouterr()
    assert code == 1
    assert "Response :" not in captured.out
    assert "Error:" in captured.err