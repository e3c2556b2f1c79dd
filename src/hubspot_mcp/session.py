"""Sessions and the registry that maps session ids to them.

A session is one open SSE stream. The router creates it when the stream
opens, registers it, and removes it when the stream ends; nothing else holds a
reference. Responses produced for a session are written to its own outbound
stream, and are silently dropped once the session is closed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

import anyio
from anyio.streams.memory import MemoryObjectSendStream

from hubspot_mcp.types import ClientCapabilities, Implementation, JSONRPCMessage

logger = logging.getLogger(__name__)

ServerSentEvent = dict[str, str]


class SessionState(Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class SessionInfo:
    """Protocol-level state agreed during the ``initialize`` handshake."""

    client_info: Implementation
    client_capabilities: ClientCapabilities
    protocol_version: str


def new_session_id() -> str:
    return uuid4().hex


@dataclass(eq=False)
class Session:
    """One open stream and the queue of messages posted for it.

    ``outbound`` carries server-sent events to the client; ``inbound`` feeds
    the session's handler task. Both are closed exactly once, when the session
    moves to ``CLOSED``. There is no way back to ``OPEN``.
    """

    outbound: MemoryObjectSendStream[ServerSentEvent]
    inbound: MemoryObjectSendStream[JSONRPCMessage]
    session_id: str = field(default_factory=new_session_id)
    state: SessionState = SessionState.OPEN
    info: SessionInfo | None = None

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    async def send_event(self, event: str, data: str) -> bool:
        """Push one event down the stream. Returns False if it could not be delivered."""
        if not self.is_open:
            logger.debug("Dropping %s event for closed session %s", event, self.session_id)
            return False
        try:
            await self.outbound.send({"event": event, "data": data})
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            logger.info("Stream for session %s is gone, closing it", self.session_id)
            self.close()
            return False
        return True

    async def send_message(self, message: JSONRPCMessage) -> bool:
        return await self.send_event("message", message.model_dump_json(by_alias=True, exclude_none=True))

    async def send_result(self, response: JSONRPCMessage) -> None:
        await self.send_message(response)

    def close(self) -> None:
        if not self.is_open:
            return
        self.state = SessionState.CLOSED
        self.inbound.close()
        self.outbound.close()


class SessionRegistry:
    """Session id to ``Session`` mapping.

    All methods are synchronous, so a lookup and the mutation or read that
    follows it can never be separated by another task on the event loop.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def insert(self, session: Session) -> None:
        if session.session_id in self._sessions:
            raise ValueError(f"Session {session.session_id} is already registered")
        self._sessions[session.session_id] = session

    def lookup(self, session_id: str) -> Session | None:
        """Return the open session registered under ``session_id``, if any."""
        session = self._sessions.get(session_id)
        if session is None or not session.is_open:
            return None
        return session

    def remove(self, session_id: str) -> Session | None:
        return self._sessions.pop(session_id, None)

    def clear(self) -> list[Session]:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        return sessions
