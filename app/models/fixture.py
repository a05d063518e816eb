"""
Fixture model - one scheduled match and its terminal result snapshot
"""
from typing import Optional, List
from sqlalchemy import String, Integer, Float, ForeignKey, Enum, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from app.database import Base


class FixtureStatus(enum.Enum):
    SCHEDULED = "Scheduled"
    LIVE = "Live"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class FixtureStage(enum.Enum):
    LEAGUE = "League"
    QUALIFIER_1 = "Qualifier 1"
    ELIMINATOR = "Eliminator"
    QUALIFIER_2 = "Qualifier 2"
    FINAL = "Final"


class TossDecision(enum.Enum):
    BAT = "Bat"
    BOWL = "Bowl"


class Fixture(Base):
    __tablename__ = "fixtures"
    __table_args__ = (
        CheckConstraint(
            "team1_id IS NULL OR team2_id IS NULL OR team1_id != team2_id",
            name="ck_fixture_distinct_teams",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"))
    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="fixtures")

    match_order: Mapped[int] = mapped_column(Integer, default=0)
    stage: Mapped[FixtureStage] = mapped_column(Enum(FixtureStage), default=FixtureStage.LEAGUE)

    # Teams (null until the bracket resolves them)
    team1_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    team2_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    team1: Mapped[Optional["Team"]] = relationship("Team", foreign_keys=[team1_id])
    team2: Mapped[Optional["Team"]] = relationship("Team", foreign_keys=[team2_id])

    # Schedule
    match_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    venue: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Status
    status: Mapped[FixtureStatus] = mapped_column(Enum(FixtureStatus), default=FixtureStatus.SCHEDULED)

    # Toss
    toss_winner_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    toss_decision: Mapped[Optional[TossDecision]] = mapped_column(Enum(TossDecision), nullable=True)

    # Match state: 0 not started, 1 or 2 (cache of the ledger)
    current_innings: Mapped[int] = mapped_column(Integer, default=0)
    total_overs: Mapped[int] = mapped_column(Integer, default=20)

    # Result
    result_description: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    winning_team_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    player_of_match_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)

    # Score snapshot, written once at completion (overs as 19.4 notation)
    team1_runs: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    team1_wickets: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    team1_overs: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    team2_runs: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    team2_wickets: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    team2_overs: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    balls: Mapped[List["BallEvent"]] = relationship(
        "BallEvent",
        back_populates="fixture",
        order_by="BallEvent.sequence",
        cascade="all, delete-orphan",
    )

    @property
    def is_knockout(self) -> bool:
        return self.stage != FixtureStage.LEAGUE

    @property
    def has_snapshot(self) -> bool:
        return self.team1_runs is not None and self.team2_runs is not None

    def opponent_of(self, team_id: Optional[int]) -> Optional[int]:
        if team_id == self.team1_id:
            return self.team2_id
        if team_id == self.team2_id:
            return self.team1_id
        return None

    def snapshot_for(self, team_id: int) -> Optional[tuple[int, int, float]]:
        """(runs, wickets, overs) recorded for a team at completion"""
        if team_id == self.team1_id and self.team1_runs is not None:
            return self.team1_runs, self.team1_wickets or 0, self.team1_overs or 0.0
        if team_id == self.team2_id and self.team2_runs is not None:
            return self.team2_runs, self.team2_wickets or 0, self.team2_overs or 0.0
        return None

    def __repr__(self):
        return f"<Fixture #{self.match_order} {self.stage.value}: {self.team1_id or '?'} vs {self.team2_id or '?'}>"
