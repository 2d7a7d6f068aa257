"""Tests for bye counting."""

from rrdoubles.byes import count_byes, players_in_round
from rrdoubles.models import Match, Player


def make_players(n):
    return [Player(id=f"p{i}", name=f"Player{i}") for i in range(1, n + 1)]


def make_match(id, round, ps):
    return Match(id=id, round=round, team1=(ps[0], ps[1]), team2=(ps[2], ps[3]))


def test_no_matches_gives_zero_byes():
    players = make_players(5)
    assert count_byes(players, []) == {p.id: 0 for p in players}


def test_partial_participation():
    """5 players, one match per round: the odd one out gets a bye."""
    p = make_players(5)
    matches = [
        make_match("m1", 1, [p[0], p[1], p[2], p[3]]),
        make_match("m2", 2, [p[4], p[1], p[2], p[3]]),
    ]

    byes = count_byes(p, matches)

    assert byes == {"p1": 1, "p2": 0, "p3": 0, "p4": 0, "p5": 1}


def test_rounds_counted_once_regardless_of_match_order():
    p = make_players(9)
    matches = [
        make_match("m3", 2, p[0:4]),
        make_match("m1", 1, p[0:4]),
        make_match("m2", 1, p[4:8]),
        make_match("m4", 2, [p[8], p[5], p[6], p[7]]),
    ]

    byes = count_byes(p, matches)

    # Round 1: p9 sits out. Round 2: p5 sits out.
    assert byes["p9"] == 1
    assert byes["p5"] == 1
    assert sum(byes.values()) == 2


def test_player_added_later_is_credited_missed_rounds():
    p = make_players(5)
    matches = [
        make_match("m1", 1, p[0:4]),
        make_match("m2", 2, p[0:4]),
    ]
    late = Player(id="late", name="Late")

    byes = count_byes(p + [late], matches)

    assert byes["late"] == 2


def test_players_in_round():
    p = make_players(8)
    matches = [make_match("m1", 1, p[0:4]), make_match("m2", 2, p[4:8])]

    assert players_in_round(matches, 1) == {"p1", "p2", "p3", "p4"}
    assert players_in_round(matches, 3) == set()
