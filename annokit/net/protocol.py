"""Wire protocol for multiplayer sessions.

Every message on the wire starts with an eight-byte little-endian header,
``[command_id: u32][total_size: u32]``, followed by the payload.
``total_size`` counts the header as well as the payload.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Tuple

MAX_PLAYERS = 4
"""Number of player slots in a session."""

NET_GROUP_STRUCT_SIZE = 0x1BC
"""Size in bytes of the shared session state block."""

MAX_SEND_BUFFER = 0x4000
"""Largest chunk sent in one piece; bigger messages are fragmented."""

PLAYER_SLOT_SIZE = 0x54
"""Size in bytes of one player slot entry."""

LONG_NAME_LEN = 0x34
"""Maximum length of a player's long name."""

SHORT_NAME_LEN = 0x20
"""Maximum length of a player's short name."""

CONFIRM_FLAG = 0x80000000
"""High bit set on the command id of a send that expects acknowledgement."""

CONFIRM_TIMEOUT_SECONDS = 15.0
"""How long a confirmed send waits for its acknowledgements."""

_HEADER = struct.Struct("<II")
_PAIR = struct.Struct("<II")


class MessageId(IntEnum):
    """Command identifiers understood by the receive handler."""

    GAME_DATA = 0x7D0
    PAUSE = 0x7D1
    RESUME = 0x7D2
    ACK = 0x7D7
    PLAYER_SYNC = 0x7D8
    SESSION_INFO = 0x7D9
    CHAT_MESSAGE = 0x7DB
    FRAG_CONTINUATION = 0x7DC
    PLAYER_DISCONNECT = 0x7DD

    @classmethod
    def from_int(cls, value: int) -> Optional["MessageId"]:
        """Return the id for ``value``, or None if it is not a known command."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class MessageHeader:
    """The fixed header in front of every message."""

    command_id: int
    total_size: int

    SIZE = _HEADER.size

    def encode(self) -> bytes:
        return _HEADER.pack(self.command_id, self.total_size)

    @classmethod
    def decode(cls, data: bytes) -> "MessageHeader":
        """Decode the header at the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(
                f"message header needs {cls.SIZE} bytes, got {len(data)}"
            )
        command_id, total_size = _HEADER.unpack_from(data)
        return cls(command_id, total_size)


@dataclass(frozen=True)
class NetMessage:
    """A complete message: header plus payload."""

    header: MessageHeader
    payload: bytes = b""

    @classmethod
    def build(cls, command_id: MessageId, payload: bytes = b"") -> "NetMessage":
        """Create a message whose header matches ``payload``."""
        payload = bytes(payload)
        header = MessageHeader(int(command_id), MessageHeader.SIZE + len(payload))
        return cls(header, payload)

    @classmethod
    def game_data(cls, payload: bytes) -> "NetMessage":
        return cls.build(MessageId.GAME_DATA, payload)

    @classmethod
    def pause(cls) -> "NetMessage":
        return cls.build(MessageId.PAUSE)

    @classmethod
    def resume(cls) -> "NetMessage":
        return cls.build(MessageId.RESUME)

    @classmethod
    def player_disconnect(cls, player_ready_state: int, player_id: int) -> "NetMessage":
        """Create a disconnect notice carrying the player's ready state and id."""
        return cls.build(
            MessageId.PLAYER_DISCONNECT, _PAIR.pack(player_ready_state, player_id)
        )

    @classmethod
    def chat(cls, text: str) -> "NetMessage":
        """Create a chat message; the text is sent NUL-terminated."""
        return cls.build(MessageId.CHAT_MESSAGE, text.encode("utf-8") + b"\0")

    @property
    def message_id(self) -> Optional[MessageId]:
        return MessageId.from_int(self.header.command_id)

    def encode(self) -> bytes:
        return self.header.encode() + self.payload

    @classmethod
    def decode(cls, data: bytes) -> Optional[Tuple["NetMessage", int]]:
        """Decode one message from the front of ``data``.

        Returns ``(message, bytes_consumed)``, or None when ``data`` does not
        yet hold a whole message. A header claiming a size smaller than the
        header itself raises ValueError.
        """
        if len(data) < MessageHeader.SIZE:
            return None
        header = MessageHeader.decode(data)
        total = header.total_size
        if total < MessageHeader.SIZE:
            raise ValueError(f"message size {total} is smaller than its header")
        if len(data) < total:
            return None
        return cls(header, bytes(data[MessageHeader.SIZE:total])), total


@dataclass
class ConfirmState:
    """Acknowledgement tracking for confirmed sends."""

    expected_acks: int = 0
    received_acks: int = 0
    confirm_required: bool = False

    def is_confirmed(self) -> bool:
        return self.received_acks >= self.expected_acks


def _empty_players() -> Tuple[Tuple[int, int], ...]:
    return tuple((0, 0) for _ in range(MAX_PLAYERS))


@dataclass(frozen=True)
class PlayerSyncData:
    """Per-slot ``(ready_state, player_id)`` pairs broadcast to all players."""

    players: Tuple[Tuple[int, int], ...] = field(default_factory=_empty_players)

    ENCODED_SIZE = _PAIR.size * MAX_PLAYERS

    def __post_init__(self) -> None:
        if len(self.players) != MAX_PLAYERS:
            raise ValueError(
                f"player sync data needs {MAX_PLAYERS} entries, got {len(self.players)}"
            )
        object.__setattr__(
            self, "players", tuple((int(r), int(i)) for r, i in self.players)
        )

    def encode(self) -> bytes:
        return b"".join(_PAIR.pack(ready, pid) for ready, pid in self.players)

    @classmethod
    def decode(cls, data: bytes) -> "PlayerSyncData":
        if len(data) < cls.ENCODED_SIZE:
            raise ValueError(
                f"player sync data needs {cls.ENCODED_SIZE} bytes, got {len(data)}"
            )
        players = tuple(_PAIR.iter_unpack(bytes(data[: cls.ENCODED_SIZE])))
        return cls(players)