"""Display helpers for templates.

Templates receive plain view objects built here instead of reaching into
the domain models, so formatting rules (APD sign, leader badge, per-round
progress) live in one place.
"""

from dataclasses import dataclass, field
from typing import Optional

from rrdoubles.models import Match, Player, PlayerStanding, TournamentState
from rrdoubles.tournament import matches_by_round, players_on_bye


@dataclass
class MatchDisplay:
    """One match row on the Matches tab."""

    id: str
    team1_names: str
    team2_names: str
    score1: Optional[int]
    score2: Optional[int]
    completed: bool
    # 1 or 2 when a team won, None when tied or unplayed
    winner: Optional[int] = None

    @classmethod
    def from_match(cls, match: Match) -> "MatchDisplay":
        return cls(
            id=match.id,
            team1_names=" & ".join(p.name for p in match.team1),
            team2_names=" & ".join(p.name for p in match.team2),
            score1=match.score1,
            score2=match.score2,
            completed=match.completed,
            winner=match.winning_team,
        )


@dataclass
class RoundDisplay:
    """A round card: its matches, progress and who sits out."""

    number: int
    matches: list[MatchDisplay] = field(default_factory=list)
    bye_names: list[str] = field(default_factory=list)

    @property
    def completed_count(self) -> int:
        return sum(1 for m in self.matches if m.completed)

    @property
    def total_count(self) -> int:
        return len(self.matches)


def build_rounds(players: list[Player], matches: list[Match]) -> list[RoundDisplay]:
    """Rounds in ascending order, ready for the Matches tab."""
    rounds = []
    for number, round_matches in matches_by_round(matches).items():
        rounds.append(
            RoundDisplay(
                number=number,
                matches=[MatchDisplay.from_match(m) for m in round_matches],
                bye_names=[p.name for p in players_on_bye(players, matches, number)],
            )
        )
    return rounds


@dataclass
class StandingDisplay:
    """One row of the Standings tab."""

    rank: int
    name: str
    initial: str
    record: str
    apd: str
    apd_sign: int
    win_pct: int
    games_played: int
    is_leader: bool

    @classmethod
    def from_standing(cls, rank: int, standing: PlayerStanding) -> "StandingDisplay":
        apd = standing.apd
        return cls(
            rank=rank,
            name=standing.player.name,
            initial=standing.player.name[:1].upper(),
            record=f"{standing.wins}-{standing.losses}",
            apd=f"{apd:+.2f}" if apd != 0 else "0.00",
            apd_sign=(apd > 0) - (apd < 0),
            win_pct=standing.win_pct,
            games_played=standing.games_played,
            is_leader=rank == 1 and standing.wins > 0,
        )


def build_standings(standings: list[PlayerStanding]) -> list[StandingDisplay]:
    return [StandingDisplay.from_standing(rank, s) for rank, s in enumerate(standings, start=1)]


def roster_summary(state: TournamentState) -> dict:
    """Numbers shown on the Players tab before the start."""
    count = len(state.players)
    return {
        "count": count,
        "games_per_round": count // 4,
        "on_bye": count % 4,
        "can_start": count >= 4 and not state.tournament_started,
    }
