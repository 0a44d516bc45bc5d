import socket
import time

import pytest

from annokit.net.protocol import (
    MAX_PLAYERS,
    MAX_SEND_BUFFER,
    MessageHeader,
    MessageId,
    NetMessage,
)
from annokit.net.session import (
    Chat,
    Disconnected,
    GameData,
    PauseChanged,
    PlayerJoined,
    PlayerLeft,
    SessionEnded,
)
from annokit.net.transport import NetClient, NetHost

LOCALHOST = ("127.0.0.1", 0)


def _wait_for(endpoint, kind, timeout=5.0, others=()):
    """Poll ``endpoint`` (and ``others``) until an event of ``kind`` arrives."""
    collected = []
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        for other in others:
            other.poll()
        collected.extend(endpoint.poll())
        if any(isinstance(e, kind) for e in collected):
            return collected
        time.sleep(0.01)
    raise AssertionError(f"no {kind.__name__} event within {timeout}s: {collected}")


def _first(events, kind):
    return next(e for e in events if isinstance(e, kind))


@pytest.fixture
def host():
    with NetHost.bind(LOCALHOST, "Test Game") as h:
        yield h


@pytest.fixture
def joined(host):
    client = NetClient.connect(host.address(), "Guest")
    _wait_for(host, PlayerJoined)
    yield host, client
    client.close()


def test_bind_creates_host_session(host):
    session = host.session()
    assert session.is_host
    assert session.active
    assert session.name == "Test Game"
    assert session.player_count == 1
    assert session.players[0].long_name == "Host"
    assert session.players[0].short_name == "H"
    assert session.local_player_idx == 0


def test_client_join_emits_player_joined(host):
    with NetClient.connect(host.address(), "Guest") as client:
        events = _wait_for(host, PlayerJoined)
        assert _first(events, PlayerJoined) == PlayerJoined(1, 1, "Player1")
        assert host.session().player_count == 2
        assert host.session().has_enough_players()
        assert not client.session().is_host
        assert client.session().name == "Remote"


def test_game_data_reaches_host(joined):
    host, client = joined
    client.send(NetMessage.game_data(b"\x01\x02\x03\x04"))
    events = _wait_for(host, GameData)
    assert _first(events, GameData) == GameData(1, b"\x01\x02\x03\x04")


def test_chat_reaches_host_without_terminator(joined):
    host, client = joined
    client.send(NetMessage.chat("hello"))
    events = _wait_for(host, Chat)
    assert _first(events, Chat) == Chat(1, "hello")


def test_pause_and_resume_are_tracked_and_broadcast(joined):
    host, client = joined
    client.send(NetMessage.pause())
    events = _wait_for(host, PauseChanged)
    paused = _first(events, PauseChanged)
    assert paused.paused
    assert paused.pause_mask == 1 << 1
    assert host.session().is_paused()

    client_events = _wait_for(client, PauseChanged)
    assert _first(client_events, PauseChanged) == PauseChanged(True, 0)

    client.send(NetMessage.resume())
    events = _wait_for(host, PauseChanged)
    assert _first(events, PauseChanged) == PauseChanged(False, 0)
    assert not host.session().is_paused()

    client_events = _wait_for(client, PauseChanged)
    assert _first(client_events, PauseChanged) == PauseChanged(False, 0)


def test_host_send_to_all_reaches_client(joined):
    host, client = joined
    host.send_to_all(NetMessage.game_data(b"world"))
    events = _wait_for(client, GameData)
    assert _first(events, GameData) == GameData(0, b"world")


def test_host_send_to_specific_player(joined):
    host, client = joined
    host.send_to(1, NetMessage.chat("direct"))
    events = _wait_for(client, Chat)
    assert _first(events, Chat) == Chat(0, "direct")


def test_game_data_is_relayed_to_other_clients(host):
    with NetClient.connect(host.address(), "A") as first, NetClient.connect(
        host.address(), "B"
    ) as second:
        deadline = time.monotonic() + 5.0
        while host.session().player_count < 3 and time.monotonic() < deadline:
            host.poll()
            time.sleep(0.01)
        assert host.session().player_count == 3

        first.send(NetMessage.game_data(b"relay"))
        events = _wait_for(second, GameData, others=(host,))
        assert _first(events, GameData) == GameData(0, b"relay")


def test_client_disconnect_ends_session(joined):
    host, client = joined
    client.close()
    events = _wait_for(host, PlayerLeft)
    assert _first(events, PlayerLeft) == PlayerLeft(1, 1)
    assert any(isinstance(e, SessionEnded) for e in events)
    assert host.session().player_count == 1


def test_player_disconnect_message_removes_player(joined):
    host, client = joined
    client.send(NetMessage.player_disconnect(0, 1))
    events = _wait_for(host, PlayerLeft)
    assert _first(events, PlayerLeft) == PlayerLeft(1, 1)
    assert host.session().find_player(1) is None
    client_events = _wait_for(client, SessionEnded)
    assert any(isinstance(e, SessionEnded) for e in client_events)


def test_session_full_rejects_extra_client(host):
    clients = [
        NetClient.connect(host.address(), f"P{i}") for i in range(MAX_PLAYERS - 1)
    ]
    try:
        deadline = time.monotonic() + 5.0
        while host.session().player_count < MAX_PLAYERS and time.monotonic() < deadline:
            host.poll()
            time.sleep(0.01)
        assert host.session().player_count == MAX_PLAYERS

        with NetClient.connect(host.address(), "Extra") as extra:
            events = _wait_for(extra, Disconnected, others=(host,))
            assert _first(events, Disconnected) == Disconnected("Connection lost")
        assert host.session().player_count == MAX_PLAYERS
    finally:
        for client in clients:
            client.close()


def _recv_exactly(sock, size, timeout=5.0):
    sock.settimeout(timeout)
    data = bytearray()
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data.extend(chunk)
    return bytes(data)


def test_large_message_is_fragmented_on_the_wire(host):
    raw = socket.create_connection(host.address())
    try:
        _wait_for(host, PlayerJoined)
        encoded = NetMessage.game_data(bytes(range(256)) * 80).encode()
        host.send_to_all(NetMessage.game_data(bytes(range(256)) * 80))

        rest = len(encoded) - MAX_SEND_BUFFER
        assert rest < MAX_SEND_BUFFER - MessageHeader.SIZE
        wire = _recv_exactly(raw, len(encoded) + MessageHeader.SIZE)

        assert wire[:MAX_SEND_BUFFER] == encoded[:MAX_SEND_BUFFER]
        decoded = NetMessage.decode(wire[MAX_SEND_BUFFER:])
        assert decoded is not None
        fragment, consumed = decoded
        assert fragment.header.command_id == MessageId.FRAG_CONTINUATION
        assert fragment.header.total_size == MessageHeader.SIZE + rest
        assert fragment.payload == encoded[MAX_SEND_BUFFER:]
        assert consumed == len(wire) - MAX_SEND_BUFFER
    finally:
        raw.close()


def test_small_message_is_sent_unchanged(host):
    raw = socket.create_connection(host.address())
    try:
        _wait_for(host, PlayerJoined)
        host.send_to_all(NetMessage.pause())
        wire = _recv_exactly(raw, MessageHeader.SIZE)
        assert wire == b"\xd1\x07\x00\x00\x08\x00\x00\x00"
    finally:
        raw.close()