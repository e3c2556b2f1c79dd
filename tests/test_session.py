import anyio
import pytest
from anyio.streams.memory import MemoryObjectReceiveStream

from hubspot_mcp.session import Session, SessionRegistry, SessionState, new_session_id
from hubspot_mcp.types import JSONRPCMessage, JSONRPCResultResponse


def _make_session() -> tuple[Session, MemoryObjectReceiveStream[dict[str, str]]]:
    outbound_writer, outbound_reader = anyio.create_memory_object_stream[dict[str, str]](8)
    inbound_writer, _inbound_reader = anyio.create_memory_object_stream[JSONRPCMessage](8)
    return Session(outbound=outbound_writer, inbound=inbound_writer), outbound_reader


def test_session_ids_are_distinct():
    ids = {new_session_id() for _ in range(1000)}
    assert len(ids) == 1000


@pytest.mark.anyio
async def test_send_message_writes_event():
    session, reader = _make_session()
    delivered = await session.send_message(JSONRPCResultResponse(id=1, result={}))

    assert delivered is True
    event = reader.receive_nowait()
    assert event == {"event": "message", "data": '{"jsonrpc":"2.0","id":1,"result":{}}'}


@pytest.mark.anyio
async def test_closed_session_drops_events():
    session, reader = _make_session()
    session.close()

    assert session.state is SessionState.CLOSED
    assert await session.send_event("message", "{}") is False


@pytest.mark.anyio
async def test_close_is_idempotent():
    session, _ = _make_session()
    session.close()
    session.close()
    assert not session.is_open


@pytest.mark.anyio
async def test_send_after_reader_gone_closes_session():
    session, reader = _make_session()
    await reader.aclose()

    assert await session.send_event("message", "{}") is False
    assert session.state is SessionState.CLOSED


def test_registry_insert_lookup_remove():
    registry = SessionRegistry()
    session, _ = _make_session()

    registry.insert(session)
    assert session.session_id in registry
    assert len(registry) == 1
    assert registry.lookup(session.session_id) is session

    assert registry.remove(session.session_id) is session
    assert registry.lookup(session.session_id) is None
    assert registry.remove(session.session_id) is None


def test_registry_rejects_duplicate_id():
    registry = SessionRegistry()
    first, _ = _make_session()
    second, _ = _make_session()
    second.session_id = first.session_id

    registry.insert(first)
    with pytest.raises(ValueError):
        registry.insert(second)
    assert registry.lookup(first.session_id) is first


def test_registry_lookup_ignores_closed_sessions():
    registry = SessionRegistry()
    session, _ = _make_session()
    registry.insert(session)
    session.close()

    assert registry.lookup(session.session_id) is None


def test_registry_clear_returns_everything():
    registry = SessionRegistry()
    sessions = [_make_session()[0] for _ in range(3)]
    for session in sessions:
        registry.insert(session)

    assert registry.clear() == sessions
    assert len(registry) == 0
