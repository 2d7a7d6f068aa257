"""Tests for domain models and their dict round-trip."""

import pytest

from rrdoubles.models import Match, Player, PlayerStanding, TournamentState


def make_match(score1=None, score2=None, completed=False):
    a, b, c, d = (Player(id=x, name=x.upper()) for x in "abcd")
    return Match(id="m1", round=2, team1=(a, b), team2=(c, d),
                 score1=score1, score2=score2, completed=completed)


def test_winning_team():
    assert make_match().winning_team is None
    assert make_match(11, 4, True).winning_team == 1
    assert make_match(4, 11, True).winning_team == 2
    assert make_match(8, 8, True).winning_team is None


def test_team_of():
    match = make_match()
    assert match.team_of("a") == 1
    assert match.team_of("d") == 2
    assert match.team_of("z") is None


def test_has_result_requires_scores():
    assert make_match(11, 4, True).has_result
    assert not make_match(11, 4, False).has_result
    assert not make_match(None, None, True).has_result


def test_point_diff():
    s = PlayerStanding(player=Player(id="a", name="A"), points_for=30, points_against=41)
    assert s.point_diff == -11
    assert s.to_dict()["pointDiff"] == -11


def test_state_dict_round_trip():
    state = TournamentState(
        players=[Player(id=x, name=x.upper()) for x in "abcde"],
        matches=[make_match(11, 9, True), make_match()],
        tournament_started=True,
    )
    state.matches[1].id = "m2"

    data = state.to_dict()
    restored = TournamentState.from_dict(data)

    assert restored == state
    assert data["tournamentStarted"] is True
    assert "score1" not in data["matches"][1]
    assert data["matches"][0]["team1"] == [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}]


def test_current_round():
    assert TournamentState().current_round == 0
    state = TournamentState(matches=[make_match()])
    assert state.current_round == 2


def test_match_from_dict_rejects_wrong_team_size():
    data = make_match().to_dict()
    data["team2"] = data["team2"][:1]

    with pytest.raises(ValueError):
        Match.from_dict(data)


def test_match_from_dict_rejects_repeated_player():
    data = make_match().to_dict()
    data["team2"][0] = data["team1"][0]

    with pytest.raises(ValueError):
        Match.from_dict(data)


def test_match_from_dict_rejects_completed_without_scores():
    data = make_match().to_dict()
    data["completed"] = True

    with pytest.raises(ValueError):
        Match.from_dict(data)


def test_match_from_dict_rejects_negative_score():
    data = make_match(11, 4, True).to_dict()
    data["score2"] = -4

    with pytest.raises(ValueError):
        Match.from_dict(data)
