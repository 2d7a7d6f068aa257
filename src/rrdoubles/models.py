"""Data models for rrdoubles.

Domain model hierarchy:
- TournamentState contains the Player roster and the Match history
- Match contains two teams of two Players and, once played, both scores
- PlayerStanding is derived from the roster and the history, never stored
"""

from dataclasses import dataclass, field
from typing import Any, Optional


# ============================================================================
# Core Domain Models
# ============================================================================


@dataclass(frozen=True)
class Player:
    """Player in the tournament.

    The id is stable for the whole tournament; players are only ever
    added or (before the start) removed, never edited.
    """

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        return cls(id=str(data["id"]), name=str(data["name"]))

    def __str__(self) -> str:
        """String representation."""
        return self.name


Team = tuple[Player, Player]


@dataclass
class Match:
    """A 2v2 match inside a round.

    Created uncompleted by the scheduler. Recording a score sets both
    scores and flips ``completed``.
    """

    id: str
    round: int
    team1: Team
    team2: Team
    score1: Optional[int] = None
    score2: Optional[int] = None
    completed: bool = False

    @property
    def players(self) -> list[Player]:
        """All four players, team1 first."""
        return [*self.team1, *self.team2]

    @property
    def player_ids(self) -> set[str]:
        return {p.id for p in self.players}

    @property
    def has_result(self) -> bool:
        """True when the match counts towards standings."""
        return self.completed and self.score1 is not None and self.score2 is not None

    @property
    def winning_team(self) -> Optional[int]:
        """Return 1 or 2 for the winning team, None if tied or unplayed."""
        if not self.has_result:
            return None
        if self.score1 > self.score2:
            return 1
        elif self.score2 > self.score1:
            return 2
        return None

    def team_of(self, player_id: str) -> Optional[int]:
        """Return 1 or 2 for the team the player is on, None if absent."""
        if any(p.id == player_id for p in self.team1):
            return 1
        if any(p.id == player_id for p in self.team2):
            return 2
        return None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "round": self.round,
            "team1": [p.to_dict() for p in self.team1],
            "team2": [p.to_dict() for p in self.team2],
            "completed": self.completed,
        }
        if self.score1 is not None:
            data["score1"] = self.score1
        if self.score2 is not None:
            data["score2"] = self.score2
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Match":
        team1 = [Player.from_dict(p) for p in data["team1"]]
        team2 = [Player.from_dict(p) for p in data["team2"]]
        if len(team1) != 2 or len(team2) != 2:
            raise ValueError(f"Match {data.get('id')} must have two players per team")
        if len({p.id for p in team1 + team2}) != 4:
            raise ValueError(f"Match {data.get('id')} does not have four distinct players")
        score1 = data.get("score1")
        score2 = data.get("score2")
        completed = bool(data.get("completed", False))
        if completed and (score1 is None or score2 is None):
            raise ValueError(f"Match {data.get('id')} is completed but has no score")
        if any(s is not None and int(s) < 0 for s in (score1, score2)):
            raise ValueError(f"Match {data.get('id')} has a negative score")
        return cls(
            id=str(data["id"]),
            round=int(data["round"]),
            team1=(team1[0], team1[1]),
            team2=(team2[0], team2[1]),
            score1=int(score1) if score1 is not None else None,
            score2=int(score2) if score2 is not None else None,
            completed=completed,
        )

    def __str__(self) -> str:
        """String representation."""
        t1 = " & ".join(p.name for p in self.team1)
        t2 = " & ".join(p.name for p in self.team2)
        score = f"{self.score1}-{self.score2}" if self.completed else "vs"
        return f"R{self.round} {t1} {score} {t2}"


# ============================================================================
# Result Models
# ============================================================================


@dataclass
class PlayerStanding:
    """Standing for a player across all completed matches.

    Tracks all metrics needed for tie-breaking. Recomputed from scratch
    on every request.
    """

    player: Player
    wins: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0
    games_played: int = 0
    # Average point differential, rounded to 2 decimals
    apd: float = 0.0
    # Win percentage, rounded to a whole number
    win_pct: int = 0

    @property
    def point_diff(self) -> int:
        return self.points_for - self.points_against

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player.to_dict(),
            "wins": self.wins,
            "losses": self.losses,
            "pointsFor": self.points_for,
            "pointsAgainst": self.points_against,
            "pointDiff": self.point_diff,
            "gamesPlayed": self.games_played,
            "apd": self.apd,
            "winPct": self.win_pct,
        }

    def __str__(self) -> str:
        """String representation."""
        return f"{self.player.name}: {self.wins}W-{self.losses}L {self.point_diff:+d}"


# ============================================================================
# Tournament State
# ============================================================================


@dataclass
class TournamentState:
    """Everything the application persists between actions."""

    players: list[Player] = field(default_factory=list)
    matches: list[Match] = field(default_factory=list)
    tournament_started: bool = False

    @property
    def current_round(self) -> int:
        """Highest round number generated so far (0 before the start)."""
        return max((m.round for m in self.matches), default=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": [p.to_dict() for p in self.players],
            "matches": [m.to_dict() for m in self.matches],
            "tournamentStarted": self.tournament_started,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TournamentState":
        return cls(
            players=[Player.from_dict(p) for p in data.get("players", [])],
            matches=[Match.from_dict(m) for m in data.get("matches", [])],
            tournament_started=bool(data.get("tournamentStarted", False)),
        )
