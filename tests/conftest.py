import contextlib
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import anyio
import httpx
import pytest
import sse_starlette
from packaging import version
from starlette.types import ASGIApp, Message, Scope

from hubspot_mcp.hubspot import HubSpotClient

TEST_TOKEN = "test-token"


@pytest.fixture
def anyio_backend():
    return "asyncio"


SSE_STARLETTE_VERSION = version.parse(sse_starlette.__version__)
NEEDS_RESET = SSE_STARLETTE_VERSION < version.parse("3.0.0")


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """Reset sse-starlette's global AppStatus singleton before each test.

    AppStatus.should_exit_event is a global asyncio.Event that gets bound to
    an event loop; each test needs a fresh one. Only sse-starlette < 3.0.0
    keeps this state at module level.
    """
    if not NEEDS_RESET:
        yield
        return

    # lazy import to avoid import errors
    from sse_starlette.sse import AppStatus

    AppStatus.should_exit_event = anyio.Event()  # type: ignore[attr-defined]

    yield

    AppStatus.should_exit_event = anyio.Event()  # type: ignore[attr-defined]


Reply = httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]


class FakeHubSpot:
    """Records outbound HubSpot calls and answers them from a queue of canned replies.

    With the queue empty every call gets ``200 {"results": []}``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.replies: list[Reply] = []

    def respond(self, status_code: int = 200, json_body: Any = None, *, text: str | None = None) -> None:
        if text is not None:
            self.replies.append(httpx.Response(status_code, text=text))
        else:
            self.replies.append(httpx.Response(status_code, json=json_body if json_body is not None else {}))

    def respond_with(self, reply: Reply) -> None:
        self.replies.append(reply)

    def bodies(self) -> list[Any]:
        return [json.loads(request.content) for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            return httpx.Response(200, json={"results": []})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return reply(request)


@pytest.fixture
def fake_hubspot() -> FakeHubSpot:
    return FakeHubSpot()


@pytest.fixture
async def hubspot(fake_hubspot: FakeHubSpot) -> AsyncIterator[HubSpotClient]:
    client = HubSpotClient.from_token(TEST_TOKEN, transport=httpx.MockTransport(fake_hubspot.handler))
    async with client:
        yield client


def parse_events(body: bytes) -> list[dict[str, str]]:
    events = []
    for block in body.decode().replace("\r\n", "\n").split("\n\n"):
        fields: dict[str, str] = {}
        for line in block.split("\n"):
            if not line or line.startswith(":"):
                continue
            key, _, value = line.partition(":")
            fields[key] = value[1:] if value.startswith(" ") else value
        if fields:
            events.append(fields)
    return events


class SseStream:
    """One client connection to an SSE endpoint, driven with hand-written ASGI callables.

    ``receive`` blocks until ``disconnect()`` is called, so the test decides
    when the client goes away.
    """

    def __init__(self, path: str = "/sse", root_path: str = "") -> None:
        self.scope: Scope = {
            "type": "http",
            "method": "GET",
            "path": path,
            "root_path": root_path,
            "query_string": b"",
            "headers": [],
        }
        self.status: int | None = None
        self.headers: dict[str, str] = {}
        self._disconnected = anyio.Event()
        self._writer, self._events = anyio.create_memory_object_stream[dict[str, str]](100)

    async def receive(self) -> Message:
        await self._disconnected.wait()
        return {"type": "http.disconnect"}

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
            self.headers = {key.decode(): value.decode() for key, value in message["headers"]}
        elif message["type"] == "http.response.body":
            for event in parse_events(message.get("body", b"")):
                await self._writer.send(event)

    async def next_event(self) -> dict[str, str]:
        with anyio.fail_after(5):
            return await self._events.receive()

    async def assert_no_event(self, wait: float = 0.1) -> None:
        with anyio.move_on_after(wait):
            event = await self._events.receive()
            pytest.fail(f"unexpected event {event}")

    def disconnect(self) -> None:
        self._disconnected.set()


@contextlib.asynccontextmanager
async def _open_sse(app: ASGIApp, *, path: str = "/sse", root_path: str = "") -> AsyncIterator[tuple[SseStream, str]]:
    stream = SseStream(path, root_path)
    async with anyio.create_task_group() as tg:
        tg.start_soon(app, stream.scope, stream.receive, stream.send)
        endpoint = await stream.next_event()
        assert endpoint["event"] == "endpoint"
        try:
            yield stream, endpoint["data"]
        finally:
            stream.disconnect()


@pytest.fixture
def open_sse() -> Callable[..., contextlib.AbstractAsyncContextManager[tuple[SseStream, str]]]:
    """Open an SSE stream against an ASGI app; yields the stream and the announced endpoint."""
    return _open_sse
