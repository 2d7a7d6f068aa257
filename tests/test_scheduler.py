"""Tests for round generation (bye fairness and partnership rotation)."""

import copy
import random

import pytest

from rrdoubles.byes import count_byes
from rrdoubles.ids import sequential_ids
from rrdoubles.models import Match, Player
from rrdoubles.partnerships import team_key, used_partnerships
from rrdoubles.scheduler import (
    find_best_match,
    generate_initial_schedule,
    generate_next_round,
    generate_round,
    next_round_number,
    order_by_byes,
    team_splits,
)


def make_players(n):
    return [Player(id=f"p{i}", name=f"Player{i}") for i in range(1, n + 1)]


def assert_valid_round(matches, round_number):
    seen = set()
    for match in matches:
        assert match.round == round_number
        assert match.completed is False
        assert match.score1 is None and match.score2 is None
        ids = [p.id for p in match.players]
        assert len(set(ids)) == 4, "players within a match must be distinct"
        assert seen.isdisjoint(ids), "a player cannot play twice in a round"
        seen.update(ids)


# ============================================================================
# Initial schedule
# ============================================================================


@pytest.mark.parametrize("n", [4, 5, 6, 7, 8, 9, 10, 11, 13, 14, 15])
def test_initial_schedule_size(n):
    players = make_players(n)

    matches = generate_initial_schedule(players, rng=random.Random(n))

    assert len(matches) == n // 4
    assert_valid_round(matches, 1)


@pytest.mark.parametrize("n", [0, 1, 2, 3])
def test_initial_schedule_too_few_players(n):
    assert generate_initial_schedule(make_players(n)) == []


def test_four_players_single_match():
    players = make_players(4)

    matches = generate_initial_schedule(players, rng=random.Random(1))

    assert len(matches) == 1
    match = matches[0]
    assert match.round == 1
    assert match.completed is False
    assert len(match.team1) == 2 and len(match.team2) == 2
    assert match.player_ids == {"p1", "p2", "p3", "p4"}


def test_match_ids_come_from_factory():
    matches = generate_initial_schedule(
        make_players(8), rng=random.Random(3), id_factory=sequential_ids("m")
    )

    assert [m.id for m in matches] == ["m1", "m2"]


def test_default_ids_are_unique():
    players = make_players(12)
    matches = generate_initial_schedule(players)
    matches += generate_next_round(players, matches)

    assert len({m.id for m in matches}) == len(matches)


# ============================================================================
# Next round
# ============================================================================


def test_next_round_number():
    assert next_round_number([]) == 1
    p = make_players(4)
    matches = [
        Match(id="a", round=1, team1=(p[0], p[1]), team2=(p[2], p[3])),
        Match(id="b", round=3, team1=(p[0], p[2]), team2=(p[1], p[3])),
    ]
    assert next_round_number(matches) == 4

    new = generate_next_round(p, matches, rng=random.Random(0))
    assert_valid_round(new, 4)


def test_next_round_does_not_mutate_inputs():
    players = make_players(9)
    rng = random.Random(5)
    history = generate_initial_schedule(players, rng=rng)
    players_before = list(players)
    history_before = copy.deepcopy(history)

    generate_next_round(players, history, rng=rng)

    assert players == players_before
    assert history == history_before


def test_eight_players_two_rounds_no_repeated_partnerships():
    players = make_players(8)
    rng = random.Random(42)

    round1 = generate_initial_schedule(players, rng=rng)
    round2 = generate_next_round(players, round1, rng=rng)

    assert_valid_round(round2, 2)
    assert used_partnerships(round1).isdisjoint(used_partnerships(round2))
    assert set(count_byes(players, round1 + round2).values()) == {0}


@pytest.mark.parametrize("seed", range(5))
def test_no_repeated_partnership_within_a_round(seed):
    players = make_players(12)
    rng = random.Random(seed)
    history = []
    for _ in range(3):
        new = generate_next_round(players, history, rng=rng)
        keys = [team_key(t) for m in new for t in (m.team1, m.team2)]
        assert len(keys) == len(set(keys))
        history += new


@pytest.mark.parametrize("n", [5, 6, 7, 9, 10, 11, 13])
def test_byes_stay_balanced(n):
    """Nobody gets a second bye while someone else still has none."""
    players = make_players(n)
    rng = random.Random(n)
    history = []

    for round_number in range(1, 2 * n + 1):
        new = generate_next_round(players, history, rng=rng)
        assert len(new) == n // 4
        assert_valid_round(new, round_number)
        history += new

        byes = count_byes(players, history)
        assert max(byes.values()) - min(byes.values()) <= 1


def test_five_players_everyone_sits_once_in_five_rounds():
    players = make_players(5)
    rng = random.Random(11)
    history = []
    for _ in range(5):
        history += generate_next_round(players, history, rng=rng)

    assert set(count_byes(players, history).values()) == {1}


def test_late_player_plays_next_round():
    players = make_players(4)
    rng = random.Random(2)
    history = generate_initial_schedule(players, rng=rng)
    history += generate_next_round(players, history, rng=rng)

    late = Player(id="late", name="Late")
    new = generate_next_round(players + [late], history, rng=rng)

    assert len(new) == 1
    assert "late" in new[0].player_ids


# ============================================================================
# Search helpers
# ============================================================================


def test_team_splits_are_the_three_pairings():
    a, b, c, d = make_players(4)
    splits = team_splits((a, b, c, d))

    assert len(splits) == 3
    keys = {frozenset((team_key(t1), team_key(t2))) for t1, t2 in splits}
    assert len(keys) == 3
    for t1, t2 in splits:
        assert {p.id for p in (*t1, *t2)} == {a.id, b.id, c.id, d.id}


def test_find_best_match_prefers_new_partnerships():
    a, b, c, d = make_players(4)
    used = {team_key((a, b)), team_key((c, d))}

    for seed in range(10):
        team1, team2 = find_best_match([a, b, c, d], used, random.Random(seed))
        assert team_key(team1) not in used
        assert team_key(team2) not in used


def test_find_best_match_needs_four_players():
    assert find_best_match(make_players(3), set(), random.Random(0)) is None


def test_order_by_byes_puts_most_byes_first():
    players = make_players(6)
    byes = {"p1": 0, "p2": 2, "p3": 0, "p4": 1, "p5": 2, "p6": 0}

    ordered = order_by_byes(players, byes, random.Random(7))

    counts = [byes[p.id] for p in ordered]
    assert counts == sorted(counts, reverse=True)
    assert {p.id for p in ordered[:2]} == {"p2", "p5"}


def test_order_by_byes_shuffles_ties():
    players = make_players(8)
    byes = {p.id: 0 for p in players}

    orders = {tuple(p.id for p in order_by_byes(players, byes, random.Random(s))) for s in range(10)}

    assert len(orders) > 1


def test_generate_round_with_explicit_round_number():
    matches = generate_round(make_players(8), [], 7, rng=random.Random(0))
    assert_valid_round(matches, 7)
    assert len(matches) == 2
