"""TCP transport for multiplayer sessions.

The host listens for connections and relays messages between clients.
Clients connect to the host. Both sides use the wire format from
:mod:`annokit.net.protocol` and never block while polling.
"""

from __future__ import annotations

import select
import socket
from typing import List, Optional, Tuple

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
    Session,
    SessionEnded,
    SessionEvent,
    SessionFullError,
)

DEFAULT_PORT = 2300
"""Default port for multiplayer sessions."""

_READ_CHUNK = 4096
_SEND_TIMEOUT_SECONDS = 15.0

Address = Tuple[str, int]


def _send_all(sock: socket.socket, data: bytes) -> None:
    """Send all of ``data`` on a non-blocking socket, waiting while it is full."""
    view = memoryview(data)
    while view:
        try:
            sent = sock.send(view)
        except BlockingIOError:
            _, writable, _ = select.select([], [sock], [], _SEND_TIMEOUT_SECONDS)
            if not writable:
                raise TimeoutError("timed out waiting to send") from None
            continue
        view = view[sent:]


def _chat_text(payload: bytes) -> str:
    return payload.decode("utf-8", errors="replace").rstrip("\0")


class _PeerConnection:
    """A non-blocking connection to one remote peer."""

    def __init__(self, sock: socket.socket, player_id: int) -> None:
        sock.setblocking(False)
        self.sock = sock
        self.player_id = player_id
        self.recv_buffer = bytearray()

    def read_available(self) -> int:
        """Read whatever has arrived; raise ConnectionResetError on EOF."""
        try:
            chunk = self.sock.recv(_READ_CHUNK)
        except BlockingIOError:
            return 0
        if not chunk:
            raise ConnectionResetError("peer disconnected")
        self.recv_buffer.extend(chunk)
        return len(chunk)

    def drain_messages(self) -> List[NetMessage]:
        """Remove and return every complete message in the receive buffer."""
        messages = []
        while (decoded := NetMessage.decode(self.recv_buffer)) is not None:
            message, consumed = decoded
            del self.recv_buffer[:consumed]
            messages.append(message)
        return messages

    def send(self, msg: NetMessage) -> None:
        """Send a message, splitting it into continuation fragments if too large."""
        data = msg.encode()
        if len(data) <= MAX_SEND_BUFFER:
            _send_all(self.sock, data)
            return
        _send_all(self.sock, data[:MAX_SEND_BUFFER])
        chunk_limit = MAX_SEND_BUFFER - MessageHeader.SIZE
        for offset in range(MAX_SEND_BUFFER, len(data), chunk_limit):
            fragment = NetMessage.build(
                MessageId.FRAG_CONTINUATION, data[offset : offset + chunk_limit]
            )
            _send_all(self.sock, fragment.encode())

    def close(self) -> None:
        self.sock.close()


class NetHost:
    """Host side of a session: accepts players and relays their messages."""

    def __init__(self, listener: socket.socket, session: Session) -> None:
        self._listener = listener
        self._peers: List[_PeerConnection] = []
        self._session = session
        self._next_player_id = 1
        self._events: List[SessionEvent] = []

    @classmethod
    def bind(cls, addr: Address, session_name: str) -> "NetHost":
        """Listen on ``addr`` and open a session with the host in slot 0."""
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind(addr)
            listener.listen()
            listener.setblocking(False)
        except OSError:
            listener.close()
            raise

        session = Session(session_name, is_host=True, active=True)
        session.add_player(0, "Host", "H")
        session.local_player_idx = 0
        return cls(listener, session)

    def poll(self) -> List[SessionEvent]:
        """Accept new players, read incoming messages and return the events."""
        self._events = []
        self._accept_connections()
        self._receive_messages()
        events, self._events = self._events, []
        return events

    def _accept_connections(self) -> None:
        while True:
            try:
                sock, _ = self._listener.accept()
            except OSError:
                break
            if len(self._peers) >= MAX_PLAYERS - 1:
                sock.close()
                continue
            player_id = self._next_player_id
            self._next_player_id += 1
            try:
                peer = _PeerConnection(sock, player_id)
            except OSError:
                sock.close()
                continue
            name = f"Player{player_id}"
            try:
                slot = self._session.add_player(player_id, name, f"P{player_id}")
            except SessionFullError:
                pass
            else:
                self._events.append(PlayerJoined(slot, player_id, name))
            self._peers.append(peer)

    def _receive_messages(self) -> None:
        disconnected = []
        for peer in list(self._peers):
            try:
                peer.read_available()
                messages = peer.drain_messages()
            except (OSError, ValueError):
                disconnected.append(peer)
                continue
            for msg in messages:
                self._dispatch_message(peer.player_id, msg)

        for peer in reversed(disconnected):
            self._peers.remove(peer)
            peer.close()
            slot = self._session.remove_player(peer.player_id)
            if slot is not None:
                self._events.append(PlayerLeft(slot, peer.player_id))
            if not self._session.has_enough_players():
                self._events.append(SessionEnded())

    def _dispatch_message(self, from_player: int, msg: NetMessage) -> None:
        kind = msg.message_id
        if kind is MessageId.GAME_DATA:
            self._events.append(GameData(from_player, msg.payload))
            self._broadcast_except(msg, from_player)
        elif kind is MessageId.PAUSE:
            slot = self._session.find_player(from_player)
            if slot is not None:
                self._session.set_pause(slot)
                self._events.append(PauseChanged(True, self._session.pause_mask))
                self._broadcast(msg)
        elif kind is MessageId.RESUME:
            slot = self._session.find_player(from_player)
            if slot is not None:
                self._session.clear_pause(slot)
                self._events.append(
                    PauseChanged(self._session.is_paused(), self._session.pause_mask)
                )
                self._broadcast(msg)
        elif kind is MessageId.CHAT_MESSAGE:
            self._events.append(Chat(from_player, _chat_text(msg.payload)))
            self._broadcast_except(msg, from_player)
        elif kind is MessageId.PLAYER_DISCONNECT:
            slot = self._session.remove_player(from_player)
            if slot is not None:
                self._events.append(PlayerLeft(slot, from_player))
                self._broadcast(msg)

    def _broadcast(self, msg: NetMessage) -> None:
        for peer in self._peers:
            try:
                peer.send(msg)
            except OSError:
                pass

    def _broadcast_except(self, msg: NetMessage, except_player: int) -> None:
        for peer in self._peers:
            if peer.player_id != except_player:
                try:
                    peer.send(msg)
                except OSError:
                    pass

    def send_to_all(self, msg: NetMessage) -> None:
        """Send a message from the host to every connected player."""
        self._broadcast(msg)

    def send_to(self, player_id: int, msg: NetMessage) -> None:
        """Send a message to one player; unknown ids are ignored."""
        peer = next((p for p in self._peers if p.player_id == player_id), None)
        if peer is not None:
            try:
                peer.send(msg)
            except OSError:
                pass

    def session(self) -> Session:
        return self._session

    def address(self) -> Address:
        """The address the host is listening on."""
        host, port = self._listener.getsockname()[:2]
        return host, port

    def close(self) -> None:
        for peer in self._peers:
            peer.close()
        self._peers.clear()
        self._listener.close()

    def __enter__(self) -> "NetHost":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class NetClient:
    """Client side of a session: a single connection to the host."""

    def __init__(self, connection: _PeerConnection, session: Session) -> None:
        self._connection = connection
        self._session = session
        self._events: List[SessionEvent] = []

    @classmethod
    def connect(cls, addr: Address, player_name: str) -> "NetClient":
        """Connect to the host at ``addr``; the host assigns the player id."""
        sock = socket.create_connection(addr)
        try:
            connection = _PeerConnection(sock, 0)
        except OSError:
            sock.close()
            raise
        return cls(connection, Session("Remote", is_host=False))

    def poll(self) -> List[SessionEvent]:
        """Read incoming messages and return the events they produce."""
        self._events = []
        try:
            self._connection.read_available()
            messages = self._connection.drain_messages()
        except (OSError, ValueError):
            self._events.append(Disconnected("Connection lost"))
        else:
            for msg in messages:
                self._dispatch_message(msg)
        events, self._events = self._events, []
        return events

    def _dispatch_message(self, msg: NetMessage) -> None:
        kind = msg.message_id
        if kind is MessageId.GAME_DATA:
            self._events.append(GameData(0, msg.payload))
        elif kind is MessageId.PAUSE:
            self._events.append(PauseChanged(True, 0))
        elif kind is MessageId.RESUME:
            self._events.append(PauseChanged(False, 0))
        elif kind is MessageId.CHAT_MESSAGE:
            self._events.append(Chat(0, _chat_text(msg.payload)))
        elif kind is MessageId.PLAYER_DISCONNECT:
            self._events.append(SessionEnded())

    def send(self, msg: NetMessage) -> None:
        """Send a message to the host; raises OSError on failure."""
        self._connection.send(msg)

    def session(self) -> Session:
        return self._session

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "NetClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()


__all__ = ["DEFAULT_PORT", "NetHost", "NetClient"]