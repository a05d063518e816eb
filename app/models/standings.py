from sqlalchemy import Integer, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base


class StandingsRow(Base):
    """
    One team's cumulative league aggregate within a tournament.
    Rewritten wholesale on every recompute.
    """
    __tablename__ = "standings"
    __table_args__ = (
        UniqueConstraint("tournament_id", "team_id", name="uq_standings_tournament_team"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"))
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    team: Mapped["Team"] = relationship("Team")

    # League standings
    played: Mapped[int] = mapped_column(Integer, default=0)
    won: Mapped[int] = mapped_column(Integer, default=0)
    lost: Mapped[int] = mapped_column(Integer, default=0)
    tied: Mapped[int] = mapped_column(Integer, default=0)
    no_result: Mapped[int] = mapped_column(Integer, default=0)
    points: Mapped[int] = mapped_column(Integer, default=0)

    # Net Run Rate components, in legal balls
    runs_for: Mapped[int] = mapped_column(Integer, default=0)
    balls_for: Mapped[int] = mapped_column(Integer, default=0)
    runs_against: Mapped[int] = mapped_column(Integer, default=0)
    balls_against: Mapped[int] = mapped_column(Integer, default=0)
    nrr: Mapped[float] = mapped_column(Float, default=0.0)

    def __repr__(self):
        return f"<StandingsRow team={self.team_id}: {self.won}W {self.lost}L, NRR: {self.nrr:+.3f}>"
