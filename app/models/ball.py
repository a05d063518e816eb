from typing import Optional
from sqlalchemy import String, Integer, ForeignKey, Enum, Text, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from app.database import Base


class ExtraType(enum.Enum):
    NONE = "None"
    WIDE = "Wide"
    NO_BALL = "NoBall"
    BYE = "Bye"
    LEG_BYE = "LegBye"


# Deliveries that do not count toward the six-ball over
ILLEGAL_EXTRAS = (ExtraType.WIDE, ExtraType.NO_BALL)


def is_run_out(wicket_type: Optional[str]) -> bool:
    """Accepts "Run Out", "RunOut", "run_out" spellings"""
    if not wicket_type:
        return False
    return wicket_type.replace(" ", "").replace("_", "").lower() == "runout"


class BallEvent(Base):
    __tablename__ = "ball_events"
    __table_args__ = (
        UniqueConstraint("fixture_id", "sequence", name="uq_ball_fixture_sequence"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    fixture_id: Mapped[int] = mapped_column(ForeignKey("fixtures.id", ondelete="CASCADE"), index=True)
    fixture: Mapped["Fixture"] = relationship("Fixture", back_populates="balls")

    # Per-fixture insertion order, the ledger's source of truth for "latest"
    sequence: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    innings: Mapped[int] = mapped_column(Integer)  # 1 or 2
    over_number: Mapped[int] = mapped_column(Integer)  # 0, 1, 2...
    ball_number: Mapped[int] = mapped_column(Integer)  # legal balls in the over

    # Players involved
    striker_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    non_striker_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bowler_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)

    # Outcome
    runs_scored: Mapped[int] = mapped_column(Integer, default=0)  # off the bat

    # Extras
    extras: Mapped[int] = mapped_column(Integer, default=0)
    extra_type: Mapped[ExtraType] = mapped_column(Enum(ExtraType), default=ExtraType.NONE)

    # Wicket
    is_wicket: Mapped[bool] = mapped_column(default=False)
    wicket_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # Bowled, Caught, Run Out...
    player_out_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    fielder_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)

    # Commentary
    commentary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_legal(self) -> bool:
        return self.extra_type not in ILLEGAL_EXTRAS

    @property
    def total_runs(self) -> int:
        return (self.runs_scored or 0) + (self.extras or 0)

    @property
    def bowler_credited(self) -> bool:
        return bool(self.is_wicket) and not is_run_out(self.wicket_type)

    def __repr__(self):
        return f"<Ball {self.innings}:{self.over_number}.{self.ball_number}: {self.total_runs} runs>"
