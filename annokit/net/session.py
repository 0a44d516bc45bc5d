"""Multiplayer session state and the events a session reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from annokit.net.protocol import MAX_PLAYERS


class SessionFullError(Exception):
    """Raised when a player is added to a session with no free slot."""


@dataclass
class PlayerInfo:
    """One player slot."""

    player_id: int = -1
    player_num: int = -1
    long_name: str = ""
    short_name: str = ""
    ready_state: int = 0
    active: bool = False

    @classmethod
    def empty(cls) -> "PlayerInfo":
        return cls()


def _empty_slots() -> List[PlayerInfo]:
    return [PlayerInfo.empty() for _ in range(MAX_PLAYERS)]


@dataclass
class Session:
    """Shared session state: player slots, pause mask and host flags."""

    name: str
    session_id: int = 0
    host_player: int = 0
    max_players: int = MAX_PLAYERS
    player_count: int = 0
    players: List[PlayerInfo] = field(default_factory=_empty_slots)
    pause_mask: int = 0
    active: bool = False
    is_host: bool = False
    local_player_idx: Optional[int] = None

    def add_player(self, player_id: int, long_name: str, short_name: str) -> int:
        """Put a player in the first free slot and return the slot index."""
        for slot, info in enumerate(self.players):
            if not info.active:
                self.players[slot] = PlayerInfo(
                    player_id=player_id,
                    player_num=slot,
                    long_name=long_name,
                    short_name=short_name,
                    active=True,
                )
                self.player_count += 1
                return slot
        raise SessionFullError(f"session {self.name!r} has no free player slot")

    def remove_player(self, player_id: int) -> Optional[int]:
        """Free the slot of ``player_id`` and return its index, or None if absent."""
        slot = self.find_player(player_id)
        if slot is None:
            return None
        self.players[slot] = PlayerInfo.empty()
        self.player_count = max(0, self.player_count - 1)
        self.pause_mask &= ~(1 << slot)
        return slot

    def find_player(self, player_id: int) -> Optional[int]:
        return next(
            (
                slot
                for slot, info in enumerate(self.players)
                if info.active and info.player_id == player_id
            ),
            None,
        )

    def set_pause(self, player_idx: int) -> None:
        if 0 <= player_idx < MAX_PLAYERS:
            self.pause_mask |= 1 << player_idx

    def clear_pause(self, player_idx: int) -> None:
        if 0 <= player_idx < MAX_PLAYERS:
            self.pause_mask &= ~(1 << player_idx)

    def is_paused(self) -> bool:
        return self.pause_mask != 0

    def has_enough_players(self) -> bool:
        return self.player_count >= 2


@dataclass(frozen=True)
class PlayerJoined:
    slot: int
    player_id: int
    name: str


@dataclass(frozen=True)
class PlayerLeft:
    slot: int
    player_id: int


@dataclass(frozen=True)
class GameData:
    from_player: int
    data: bytes


@dataclass(frozen=True)
class PauseChanged:
    paused: bool
    pause_mask: int


@dataclass(frozen=True)
class Chat:
    from_player: int
    text: str


@dataclass(frozen=True)
class SessionEnded:
    """The host left or too few players remain."""


@dataclass(frozen=True)
class Disconnected:
    reason: str


SessionEvent = Union[
    PlayerJoined, PlayerLeft, GameData, PauseChanged, Chat, SessionEnded, Disconnected
]