"""Tournament actions applied to a TournamentState.

These are the caller-side merges behind every button in the web panel and
every CLI command: the scheduler and standings code only return new
values, and the functions here fold them into the state.
"""

import logging
import random
from collections import defaultdict
from typing import Optional

from rrdoubles.byes import players_in_round
from rrdoubles.ids import IdFactory, generate_id
from rrdoubles.models import Match, Player, TournamentState
from rrdoubles.scheduler import PLAYERS_PER_MATCH, generate_initial_schedule, generate_next_round
from rrdoubles.validation import ValidationError, parse_score, validate_player_name

logger = logging.getLogger(__name__)

MIN_PLAYERS = PLAYERS_PER_MATCH


class TournamentError(Exception):
    """Raised when an action is not allowed in the current state."""

    pass


# ============================================================================
# Lookups
# ============================================================================


def find_player(state: TournamentState, player_id: str) -> Optional[Player]:
    return next((p for p in state.players if p.id == player_id), None)


def find_match(state: TournamentState, match_id: str) -> Optional[Match]:
    return next((m for m in state.matches if m.id == match_id), None)


def matches_by_round(matches: list[Match]) -> dict[int, list[Match]]:
    """Group matches by round number, rounds in ascending order."""
    grouped = defaultdict(list)
    for match in matches:
        grouped[match.round].append(match)
    return dict(sorted(grouped.items()))


def players_on_bye(players: list[Player], matches: list[Match], round_number: int) -> list[Player]:
    """Roster players who did not play in the given round."""
    playing = players_in_round(matches, round_number)
    return [p for p in players if p.id not in playing]


# ============================================================================
# Roster
# ============================================================================


def add_player(
    state: TournamentState, name: str, id_factory: Optional[IdFactory] = None
) -> Player:
    """Add a player to the roster.

    Players may join after the start; they are credited a bye for every
    round already played, so they are picked to play next.

    Raises:
        TournamentError: If the name is invalid or already taken
    """
    is_valid, error = validate_player_name(name, [p.name for p in state.players])
    if not is_valid:
        raise TournamentError(error)

    player = Player(id=(id_factory or generate_id)(), name=name.strip())
    state.players.append(player)
    logger.info("Added player %s (%s)", player.name, player.id)
    return player


def remove_player(state: TournamentState, player_id: str) -> Player:
    """Remove a player from the roster (only before the start).

    Raises:
        TournamentError: If the tournament started or the player is unknown
    """
    if state.tournament_started:
        raise TournamentError("Players cannot be removed after the tournament has started")

    player = find_player(state, player_id)
    if player is None:
        raise TournamentError(f"Player not found: {player_id}")

    state.players = [p for p in state.players if p.id != player_id]
    logger.info("Removed player %s (%s)", player.name, player.id)
    return player


# ============================================================================
# Rounds and results
# ============================================================================


def start_tournament(
    state: TournamentState,
    rng: Optional[random.Random] = None,
    id_factory: Optional[IdFactory] = None,
) -> list[Match]:
    """Generate round 1 and mark the tournament as started.

    Raises:
        TournamentError: If already started or fewer than MIN_PLAYERS players
    """
    if state.tournament_started:
        raise TournamentError("Tournament has already started")

    if len(state.players) < MIN_PLAYERS:
        raise TournamentError(
            f"At least {MIN_PLAYERS} players are needed to start (currently {len(state.players)})"
        )

    matches = generate_initial_schedule(state.players, rng=rng, id_factory=id_factory)
    state.matches = matches
    state.tournament_started = True
    return matches


def add_round(
    state: TournamentState,
    rng: Optional[random.Random] = None,
    id_factory: Optional[IdFactory] = None,
) -> list[Match]:
    """Append one more round to the schedule.

    Returns:
        The new matches (empty, and nothing appended, if none could be made)

    Raises:
        TournamentError: If the tournament has not started
    """
    if not state.tournament_started:
        raise TournamentError("Start the tournament before adding rounds")

    new_matches = generate_next_round(state.players, state.matches, rng=rng, id_factory=id_factory)
    if new_matches:
        state.matches.extend(new_matches)
    return new_matches


def record_score(state: TournamentState, match_id: str, score1, score2) -> Match:
    """Record (or correct) the result of a match.

    Args:
        state: Tournament state; the match is updated in place
        match_id: ID of the match
        score1: Team 1 score (int or numeric string)
        score2: Team 2 score (int or numeric string)

    Raises:
        TournamentError: If the match is unknown or a score is invalid
    """
    match = find_match(state, match_id)
    if match is None:
        raise TournamentError(f"Match not found: {match_id}")

    try:
        s1 = parse_score(score1)
        s2 = parse_score(score2)
    except ValidationError as e:
        raise TournamentError(str(e))

    match.score1 = s1
    match.score2 = s2
    match.completed = True
    logger.info("Recorded %s", match)
    return match


def reset_tournament(state: TournamentState) -> None:
    """Clear roster, matches and the started flag."""
    state.players = []
    state.matches = []
    state.tournament_started = False
    logger.info("Tournament reset")
