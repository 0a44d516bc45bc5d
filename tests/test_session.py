import pytest

from annokit.net.protocol import MAX_PLAYERS
from annokit.net.session import (
    PlayerInfo,
    PlayerJoined,
    Session,
    SessionFullError,
)


def test_session_add_remove_players():
    session = Session("Test Game")
    assert session.player_count == 0

    assert session.add_player(100, "Player1", "P1") == 0
    assert session.player_count == 1

    assert session.add_player(200, "Player2", "P2") == 1
    assert session.player_count == 2
    assert session.has_enough_players()

    session.remove_player(100)
    assert session.player_count == 1
    assert not session.has_enough_players()


def test_session_max_players():
    session = Session("Full Game")
    for i in range(MAX_PLAYERS):
        assert session.add_player(i, f"P{i}", f"p{i}") == i
    with pytest.raises(SessionFullError):
        session.add_player(99, "Extra", "E")


def test_pause_bitmask():
    session = Session("Test")
    session.add_player(1, "P1", "p1")
    session.add_player(2, "P2", "p2")

    assert not session.is_paused()
    session.set_pause(0)
    assert session.is_paused()
    assert session.pause_mask == 1

    session.set_pause(1)
    assert session.pause_mask == 3

    session.clear_pause(0)
    assert session.pause_mask == 2
    assert session.is_paused()

    session.clear_pause(1)
    assert not session.is_paused()


def test_pause_out_of_range_ignored():
    session = Session("Test")
    session.set_pause(MAX_PLAYERS)
    assert session.pause_mask == 0


def test_remove_unknown_player_returns_none():
    session = Session("Test")
    session.add_player(5, "Five", "F")
    assert session.remove_player(6) is None
    assert session.player_count == 1


def test_remove_player_frees_slot_and_pause_bit():
    session = Session("Test")
    session.add_player(1, "A", "a")
    session.add_player(2, "B", "b")
    session.set_pause(0)
    session.set_pause(1)
    assert session.remove_player(1) == 0
    assert session.pause_mask == 2
    assert session.players[0] == PlayerInfo.empty()
    assert session.add_player(3, "C", "c") == 0


def test_find_player():
    session = Session("Test")
    session.add_player(10, "Ten", "T")
    session.add_player(20, "Twenty", "W")
    assert session.find_player(20) == 1
    assert session.find_player(30) is None


def test_added_player_fields():
    session = Session("Test")
    session.add_player(7, "Seven", "S")
    info = session.players[0]
    assert (info.player_id, info.player_num, info.long_name, info.short_name) == (
        7,
        0,
        "Seven",
        "S",
    )
    assert info.active is True


def test_empty_player_info():
    info = PlayerInfo.empty()
    assert info.player_id == -1
    assert info.player_num == -1
    assert info.active is False


def test_event_equality():
    assert PlayerJoined(1, 2, "x") == PlayerJoined(1, 2, "x")
    assert PlayerJoined(1, 2, "x") != PlayerJoined(1, 3, "x")