from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(100))
    short_name: Mapped[str] = mapped_column(String(5))  # e.g., "MI", "CSK"

    # Relationships
    tournament: Mapped["Tournament"] = relationship(
        "Tournament", back_populates="teams", foreign_keys=[tournament_id]
    )
    players: Mapped[list["Player"]] = relationship(
        "Player", back_populates="team", order_by="Player.id"
    )

    @property
    def squad_size(self) -> int:
        return len(self.players)

    def __repr__(self):
        return f"<Team {self.name} ({self.short_name})>"
