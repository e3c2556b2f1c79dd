"""RequestContext and the ResponseSink protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from hubspot_mcp.session import SessionInfo
from hubspot_mcp.types import JSONRPCResponse, RequestId


@runtime_checkable
class ResponseSink(Protocol):
    """Where the response to a request goes.

    For the SSE transport this is the session itself: the response is pushed
    down the session's stream, never returned on the HTTP request that
    carried the message.
    """

    async def send_result(self, response: JSONRPCResponse) -> None: ...


@dataclass
class RequestContext:
    """What handlers receive alongside the request."""

    session: SessionInfo | None
    request_id: RequestId | None
