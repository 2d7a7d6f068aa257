"""Standings calculator with tie-breaking rules."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from functools import cmp_to_key
from typing import NamedTuple

from rrdoubles.models import Match, Player, PlayerStanding

logger = logging.getLogger(__name__)


class HeadToHead(NamedTuple):
    """Direct meetings between two players (on opposing teams)."""

    wins_a: int
    wins_b: int
    # Sum of (A's team score - B's team score) over their meetings
    point_diff_a: int


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero (0.125 -> 0.13, 2.5 -> 3).

    Python's round() rounds half to even, which would show 12 for a
    12.5% win rate.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def compute_apd(point_diff: int, games_played: int) -> float:
    """Average point differential per game, 2 decimals (0 if no games)."""
    if games_played == 0:
        return 0.0
    return round_half_up(point_diff / games_played, 2)


def compute_win_pct(wins: int, games_played: int) -> int:
    """Win percentage as a whole number (0 if no games)."""
    if games_played == 0:
        return 0
    return int(round_half_up(100 * wins / games_played))


def head_to_head(player_a_id: str, player_b_id: str, matches: list[Match]) -> HeadToHead:
    """Compute direct-meeting results between two players.

    Only completed matches where the two players were on opposing teams
    count; matches where they were partners, or where only one of them
    played, are ignored.
    """
    wins_a = 0
    wins_b = 0
    point_diff_a = 0

    for match in matches:
        if not match.has_result:
            continue

        team_a = match.team_of(player_a_id)
        team_b = match.team_of(player_b_id)
        if team_a is None or team_b is None or team_a == team_b:
            continue

        if team_a == 1:
            score_a, score_b = match.score1, match.score2
        else:
            score_a, score_b = match.score2, match.score1

        point_diff_a += score_a - score_b
        if score_a > score_b:
            wins_a += 1
        elif score_b > score_a:
            wins_b += 1

    return HeadToHead(wins_a, wins_b, point_diff_a)


def compare_standings(a: PlayerStanding, b: PlayerStanding, matches: list[Match]) -> int:
    """Comparator for sorting standings best-first.

    Tie-breaking criteria, in order:
    1. Wins
    2. Head-to-head wins between the two players
    3. Total point differential
    4. Head-to-head point differential
    5. Points for

    Head-to-head is recomputed on every comparison, so with a 3-way cycle
    (A beat B, B beat C, C beat A) the final order depends on the order
    in which the sort compares players.

    Returns:
        Negative if ``a`` ranks higher, positive if ``b`` does, 0 if tied
    """
    if a.wins != b.wins:
        return b.wins - a.wins

    h2h = head_to_head(a.player.id, b.player.id, matches)
    if h2h.wins_a != h2h.wins_b:
        logger.debug(
            "[TIE-BREAK] %s vs %s decided on head-to-head wins (%d-%d)",
            a.player.name, b.player.name, h2h.wins_a, h2h.wins_b,
        )
        return h2h.wins_b - h2h.wins_a

    if a.point_diff != b.point_diff:
        return b.point_diff - a.point_diff

    if h2h.point_diff_a != 0:
        logger.debug(
            "[TIE-BREAK] %s vs %s decided on head-to-head point diff (%+d)",
            a.player.name, b.player.name, h2h.point_diff_a,
        )
        return -h2h.point_diff_a

    return b.points_for - a.points_for


def calculate_standings(players: list[Player], matches: list[Match]) -> list[PlayerStanding]:
    """Calculate ranked standings from match results.

    Scoring:
    - A strictly higher score is a win for both players of that team and a
      loss for both opponents
    - Equal scores are neither a win nor a loss, but the game and its
      points still count

    Args:
        players: Roster; exactly one standing is returned per player
        matches: Match history; only completed matches are counted and
            players not on the roster are ignored

    Returns:
        List of PlayerStanding objects sorted best first
    """
    standings = {p.id: PlayerStanding(player=p) for p in players}

    for match in matches:
        if not match.has_result:
            continue

        for team, own, opp in (
            (match.team1, match.score1, match.score2),
            (match.team2, match.score2, match.score1),
        ):
            for player in team:
                standing = standings.get(player.id)
                if standing is None:
                    continue
                standing.games_played += 1
                standing.points_for += own
                standing.points_against += opp
                if own > opp:
                    standing.wins += 1
                elif opp > own:
                    standing.losses += 1

    for standing in standings.values():
        standing.apd = compute_apd(standing.point_diff, standing.games_played)
        standing.win_pct = compute_win_pct(standing.wins, standing.games_played)

    return sorted(
        standings.values(),
        key=cmp_to_key(lambda a, b: compare_standings(a, b, matches)),
    )
