"""SQLite storage layer for rrdoubles.

Provides ORM models and a repository that round-trips the whole
TournamentState under a fixed key, plus JSON export/import of the same
state.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import NullPool

from rrdoubles.config_loader import DEFAULT_STATE_KEY
from rrdoubles.models import Match, Player, TournamentState

logger = logging.getLogger(__name__)

Base = declarative_base()


class StorageError(Exception):
    """Raised when stored or imported state cannot be read or written."""

    pass


# ============================================================================
# ORM Models
# ============================================================================


class TournamentStateORM(Base):
    """Tournament state table.

    One row per state key; the application uses a single fixed key.
    """

    __tablename__ = "tournament_states"

    key = Column(String(100), primary_key=True)
    tournament_started = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    players = relationship(
        "PlayerORM",
        back_populates="state",
        cascade="all, delete-orphan",
        order_by="PlayerORM.position",
    )
    matches = relationship(
        "MatchORM",
        back_populates="state",
        cascade="all, delete-orphan",
        order_by="MatchORM.position",
    )


class PlayerORM(Base):
    """Player table.

    - id: Database primary key (auto-generated)
    - player_id: Stable id used by matches and standings
    - position: Order in the roster
    """

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    state_key = Column(String(100), ForeignKey("tournament_states.key"), nullable=False)
    player_id = Column(String(64), nullable=False)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    state = relationship("TournamentStateORM", back_populates="players")


class MatchORM(Base):
    """Match table."""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    state_key = Column(String(100), ForeignKey("tournament_states.key"), nullable=False)
    match_id = Column(String(64), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    round = Column(Integer, nullable=False)
    # Store teams as JSON: [{"id": "a1b2c3d4", "name": "Ana"}, {...}]
    team1_json = Column(Text, nullable=False, default="[]")
    team2_json = Column(Text, nullable=False, default="[]")
    score1 = Column(Integer, nullable=True)
    score2 = Column(Integer, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)

    state = relationship("TournamentStateORM", back_populates="matches")

    @property
    def team1(self) -> list[dict]:
        """Get team 1 from JSON."""
        return json.loads(self.team1_json)

    @team1.setter
    def team1(self, value: list[dict]):
        """Set team 1 as JSON."""
        self.team1_json = json.dumps(value)

    @property
    def team2(self) -> list[dict]:
        """Get team 2 from JSON."""
        return json.loads(self.team2_json)

    @team2.setter
    def team2(self, value: list[dict]):
        """Set team 2 as JSON."""
        self.team2_json = json.dumps(value)


# ============================================================================
# Database Manager
# ============================================================================


class DatabaseManager:
    """Manages SQLite database connection and session."""

    def __init__(self, db_path: Union[str, Path]):
        """Initialize database manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Use NullPool for SQLite to avoid connection pool issues
        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )
        self.SessionLocal = sessionmaker(bind=self.engine)

    def create_tables(self):
        """Create all tables in the database."""
        Base.metadata.create_all(self.engine)

    def get_session(self):
        """Get a new database session."""
        return self.SessionLocal()


# ============================================================================
# Repository
# ============================================================================


def match_from_orm(match_orm: MatchORM) -> Match:
    """Convert a stored match row to the domain model.

    Raises:
        ValueError: If the row does not hold two teams of four distinct players
    """
    return Match.from_dict(
        {
            "id": match_orm.match_id,
            "round": match_orm.round,
            "team1": match_orm.team1,
            "team2": match_orm.team2,
            "score1": match_orm.score1,
            "score2": match_orm.score2,
            "completed": match_orm.completed,
        }
    )


class StateRepository:
    """Repository for the persisted TournamentState."""

    def __init__(self, session, key: str = DEFAULT_STATE_KEY):
        self.session = session
        self.key = key

    def _get_row(self) -> Optional[TournamentStateORM]:
        return self.session.get(TournamentStateORM, self.key)

    def load(self) -> TournamentState:
        """Load the stored state.

        Returns:
            The stored state, or an empty one if nothing was saved yet.
            Match rows that cannot be decoded are skipped.
        """
        row = self._get_row()
        if row is None:
            return TournamentState()

        players = [Player(id=p.player_id, name=p.name) for p in row.players]

        matches = []
        for match_orm in row.matches:
            try:
                matches.append(match_from_orm(match_orm))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping malformed match %s: %s", match_orm.match_id, e)

        return TournamentState(
            players=players,
            matches=matches,
            tournament_started=bool(row.tournament_started),
        )

    def save(self, state: TournamentState) -> None:
        """Replace the stored state with ``state``."""
        row = self._get_row()
        if row is None:
            row = TournamentStateORM(key=self.key)
            self.session.add(row)

        row.tournament_started = state.tournament_started
        row.players = [
            PlayerORM(player_id=p.id, name=p.name, position=idx)
            for idx, p in enumerate(state.players)
        ]

        match_rows = []
        for idx, match in enumerate(state.matches):
            match_orm = MatchORM(
                match_id=match.id,
                position=idx,
                round=match.round,
                score1=match.score1,
                score2=match.score2,
                completed=match.completed,
            )
            match_orm.team1 = [p.to_dict() for p in match.team1]
            match_orm.team2 = [p.to_dict() for p in match.team2]
            match_rows.append(match_orm)
        row.matches = match_rows

        self.session.commit()
        logger.debug(
            "Saved state '%s': %d players, %d matches",
            self.key, len(state.players), len(state.matches),
        )

    def clear(self) -> bool:
        """Delete the stored state. Returns True if something was deleted."""
        row = self._get_row()
        if row:
            self.session.delete(row)
            self.session.commit()
            return True
        return False


# ============================================================================
# JSON export / import
# ============================================================================


def export_state(state: TournamentState, path: Union[str, Path]) -> Path:
    """Write the state to a JSON file."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(state.to_dict(), f, indent=2, ensure_ascii=False)
    return out_path


def import_state(path: Union[str, Path]) -> TournamentState:
    """Read a state previously written by export_state.

    Raises:
        StorageError: If the file is missing or not a valid state
    """
    in_path = Path(path)
    if not in_path.exists():
        raise StorageError(f"File not found: {path}")

    try:
        with open(in_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return TournamentState.from_dict(data)
    except json.JSONDecodeError as e:
        raise StorageError(f"Invalid JSON in {path}: {e}")
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StorageError(f"Invalid tournament state in {path}: {e}")
