"""Round generation with bye fairness and partnership rotation.

Each round:
1. Players who have sat out the most rounds are picked to play first
   (ties broken randomly), so byes are spread evenly.
2. The players picked to play are split into 2v2 matches one court at a
   time. For every court, all 4-player subsets of the still unassigned
   players and all 3 ways to split each subset into two teams are scored;
   new partnerships score higher and a small random jitter keeps repeated
   schedules from looking alike. The best split is taken and the next
   court is filled from whoever is left.

The search is greedy per court: it does not backtrack across courts or
rounds, so it gives good partnership variety but no optimality guarantee.
"""

import logging
import random
from itertools import combinations
from typing import Optional

from rrdoubles.byes import count_byes
from rrdoubles.ids import IdFactory, generate_id
from rrdoubles.models import Match, Player, Team
from rrdoubles.partnerships import team_key, used_partnerships

logger = logging.getLogger(__name__)

PLAYERS_PER_MATCH = 4
# Score for each team in a candidate split that has never played together
NOVEL_PARTNERSHIP_SCORE = 2.0
# Upper bound (exclusive) of the random tie-breaking jitter
RANDOM_JITTER = 0.5


def team_splits(four: tuple[Player, Player, Player, Player]) -> list[tuple[Team, Team]]:
    """Return the 3 ways to split 4 players into two unordered teams of 2."""
    a, b, c, d = four
    return [
        ((a, b), (c, d)),
        ((a, c), (b, d)),
        ((a, d), (b, c)),
    ]


def score_split(team1: Team, team2: Team, used: set[str], rng: random.Random) -> float:
    """Score a candidate split: novel partnerships first, jitter second."""
    score = 0.0
    if team_key(team1) not in used:
        score += NOVEL_PARTNERSHIP_SCORE
    if team_key(team2) not in used:
        score += NOVEL_PARTNERSHIP_SCORE
    return score + rng.random() * RANDOM_JITTER


def find_best_match(
    available: list[Player],
    used: set[str],
    rng: random.Random,
) -> Optional[tuple[Team, Team]]:
    """Find the best-scoring pair of teams among the available players.

    Exhaustively enumerates every 4-subset and each of its 3 splits.

    Args:
        available: Players not yet assigned in this round
        used: Partnership keys already used (history plus this round)
        rng: Random source for the tie-breaking jitter

    Returns:
        (team1, team2), or None when fewer than 4 players are available
    """
    if len(available) < PLAYERS_PER_MATCH:
        return None

    best = None
    best_score = -1.0
    for four in combinations(available, PLAYERS_PER_MATCH):
        for team1, team2 in team_splits(four):
            score = score_split(team1, team2, used, rng)
            if score > best_score:
                best_score = score
                best = (team1, team2)

    return best


def order_by_byes(
    players: list[Player],
    bye_counts: dict[str, int],
    rng: random.Random,
) -> list[Player]:
    """Order players most-byes-first, shuffling players with equal counts."""
    ordered = list(players)
    rng.shuffle(ordered)
    # Stable sort keeps the shuffled order among equal bye counts
    ordered.sort(key=lambda p: bye_counts.get(p.id, 0), reverse=True)
    return ordered


def generate_round(
    players: list[Player],
    existing_matches: list[Match],
    round_number: int,
    rng: Optional[random.Random] = None,
    id_factory: Optional[IdFactory] = None,
) -> list[Match]:
    """Generate the matches of one round.

    Args:
        players: Current roster
        existing_matches: Match history used for bye counts and partnerships
        round_number: Round number stamped on the new matches
        rng: Random source (a fresh unseeded one if not given)
        id_factory: Callable returning a new match id

    Returns:
        New uncompleted matches, floor(len(players) / 4) of them; empty when
        fewer than 4 players are given. Inputs are not modified.
    """
    n = len(players)
    if n < PLAYERS_PER_MATCH:
        return []

    rng = rng or random.Random()
    id_factory = id_factory or generate_id

    used = used_partnerships(existing_matches)
    bye_counts = count_byes(players, existing_matches)

    matches_per_round = n // PLAYERS_PER_MATCH
    ordered = order_by_byes(players, bye_counts, rng)
    playing = ordered[: matches_per_round * PLAYERS_PER_MATCH]
    sitting_out = ordered[matches_per_round * PLAYERS_PER_MATCH :]

    round_matches = []
    assigned = set()
    for _ in range(matches_per_round):
        available = [p for p in playing if p.id not in assigned]
        if len(available) < PLAYERS_PER_MATCH:
            break

        best = find_best_match(available, used, rng)
        if best is None:
            continue

        team1, team2 = best
        match = Match(id=id_factory(), round=round_number, team1=team1, team2=team2)
        round_matches.append(match)
        assigned.update(match.player_ids)
        used.add(team_key(team1))
        used.add(team_key(team2))
        logger.debug("Round %d: %s", round_number, match)

    logger.info(
        "Generated round %d: %d matches, bye: %s",
        round_number,
        len(round_matches),
        ", ".join(p.name for p in sitting_out) or "none",
    )
    return round_matches


def generate_initial_schedule(
    players: list[Player],
    rng: Optional[random.Random] = None,
    id_factory: Optional[IdFactory] = None,
) -> list[Match]:
    """Generate round 1 for a fresh tournament."""
    return generate_round(players, [], 1, rng=rng, id_factory=id_factory)


def next_round_number(matches: list[Match]) -> int:
    """Round number that follows the highest round in the history."""
    return max((m.round for m in matches), default=0) + 1


def generate_next_round(
    players: list[Player],
    existing_matches: list[Match],
    rng: Optional[random.Random] = None,
    id_factory: Optional[IdFactory] = None,
) -> list[Match]:
    """Generate exactly one more round after the existing history."""
    return generate_round(
        players,
        existing_matches,
        next_round_number(existing_matches),
        rng=rng,
        id_factory=id_factory,
    )
