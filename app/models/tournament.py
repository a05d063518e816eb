"""
Tournament model - owns teams, fixtures and standings
"""
from typing import Optional, List
from sqlalchemy import String, Integer, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from app.database import Base


class Tournament(Base):
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    venue: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Default match length for new fixtures
    total_overs: Mapped[int] = mapped_column(Integer, default=20)

    # Set when the Final is decided
    champion_team_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("teams.id", use_alter=True, name="fk_tournament_champion"), nullable=True
    )
    runner_up_team_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("teams.id", use_alter=True, name="fk_tournament_runner_up"), nullable=True
    )

    # Relationships
    teams: Mapped[List["Team"]] = relationship(
        "Team", back_populates="tournament", foreign_keys="Team.tournament_id", order_by="Team.id"
    )
    fixtures: Mapped[List["Fixture"]] = relationship(
        "Fixture", back_populates="tournament", order_by="Fixture.match_order"
    )

    def __repr__(self):
        return f"<Tournament '{self.name}'>"
