"""Ask a single question from the command line and print the answer."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

import httpx

from dsclient.models import Message, Role
from dsclient.request import Request

SYSTEM_PROMPT = "You are a helpful assistant."
QUESTION = "What is the capital of France?"


async def _ask(token: str) -> str:
    request = Request.basic_query(
        [Message(Role.SYSTEM, SYSTEM_PROMPT), Message(Role.USER, QUESTION)]
    )
    response = await request.execute_nostreaming(token)
    return response.content()


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dsclient", description="Send one question to the chat API."
    )
    parser.parse_args(argv)

    print("Please input your API token:")
    token = sys.stdin.readline().strip()
    try:
        content = asyncio.run(_ask(token))
    except (httpx.HTTPError, ValueError) as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    print(f"Response :{content}")
    return 0


if __name__ == "__main__":
    sys.exit(main())