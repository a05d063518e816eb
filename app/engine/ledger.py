"""
Ball Ledger - append-only delivery log per fixture
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationFailure
from app.models.ball import BallEvent, ExtraType
from app.models.fixture import Fixture, FixtureStatus

logger = logging.getLogger(__name__)


@dataclass
class BallInput:
    """One delivery as supplied by a scorer (or the simulator)"""
    innings: int
    over_number: int
    ball_number: int
    striker_id: Optional[int] = None
    non_striker_id: Optional[int] = None
    bowler_id: Optional[int] = None
    runs_scored: int = 0
    extras: int = 0
    extra_type: ExtraType = ExtraType.NONE
    is_wicket: bool = False
    wicket_type: Optional[str] = None
    player_out_id: Optional[int] = None
    fielder_id: Optional[int] = None
    commentary: Optional[str] = None


class BallLedger:
    """
    Records and removes deliveries for fixtures.

    Sequencing (over/ball numbers, who is on strike) is trusted from the
    caller; only the payload shape is checked.
    """

    def __init__(self, session: Session):
        self.session = session

    def _get_fixture(self, fixture_id: int) -> Fixture:
        fixture = self.session.get(Fixture, fixture_id)
        if not fixture:
            raise NotFoundError(f"Fixture {fixture_id} not found")
        return fixture

    @staticmethod
    def validate(ball: BallInput) -> None:
        errors = []
        if ball.innings not in (1, 2):
            errors.append(f"innings must be 1 or 2, got {ball.innings}")
        if ball.over_number < 0 or ball.ball_number < 0:
            errors.append("over_number and ball_number must be non-negative")
        if ball.runs_scored < 0 or ball.extras < 0:
            errors.append("runs_scored and extras must be non-negative")
        if not isinstance(ball.extra_type, ExtraType):
            try:
                ExtraType(ball.extra_type)
            except ValueError:
                errors.append(f"unknown extra_type {ball.extra_type!r}")
        if ball.is_wicket and not ball.wicket_type:
            errors.append("wicket_type is required when is_wicket is set")
        if errors:
            raise ValidationFailure("; ".join(errors))

    def _next_sequence(self, fixture_id: int) -> int:
        current = (
            self.session.query(func.max(BallEvent.sequence))
            .filter(BallEvent.fixture_id == fixture_id)
            .scalar()
        )
        return (current or 0) + 1

    def balls(self, fixture_id: int, innings: Optional[int] = None) -> list[BallEvent]:
        """All deliveries in ledger order"""
        query = self.session.query(BallEvent).filter(BallEvent.fixture_id == fixture_id)
        if innings is not None:
            query = query.filter(BallEvent.innings == innings)
        return query.order_by(BallEvent.sequence).all()

    def last_ball(self, fixture_id: int) -> Optional[BallEvent]:
        return (
            self.session.query(BallEvent)
            .filter(BallEvent.fixture_id == fixture_id)
            .order_by(BallEvent.sequence.desc())
            .first()
        )

    def record_ball(self, fixture_id: int, ball: BallInput, commit: bool = True) -> BallEvent:
        """Append one delivery and refresh the fixture's cached match state"""
        fixture = self._get_fixture(fixture_id)
        self.validate(ball)

        event = BallEvent(
            fixture_id=fixture.id,
            sequence=self._next_sequence(fixture.id),
            innings=ball.innings,
            over_number=ball.over_number,
            ball_number=ball.ball_number,
            striker_id=ball.striker_id,
            non_striker_id=ball.non_striker_id,
            bowler_id=ball.bowler_id,
            runs_scored=ball.runs_scored,
            extras=ball.extras,
            extra_type=ExtraType(ball.extra_type),
            is_wicket=ball.is_wicket,
            wicket_type=ball.wicket_type,
            player_out_id=ball.player_out_id,
            fielder_id=ball.fielder_id,
            commentary=ball.commentary,
        )
        self.session.add(event)

        fixture.current_innings = ball.innings
        if fixture.status == FixtureStatus.SCHEDULED:
            fixture.status = FixtureStatus.LIVE

        if commit:
            self.session.commit()
        else:
            self.session.flush()
        return event

    def undo_last(self, fixture_id: int) -> BallEvent:
        """Delete the most recently recorded delivery"""
        fixture = self._get_fixture(fixture_id)
        last = self.last_ball(fixture.id)
        if not last:
            raise NotFoundError("No balls to undo")

        self.session.delete(last)
        self.session.flush()

        previous = self.last_ball(fixture.id)
        fixture.current_innings = previous.innings if previous else 0
        self.session.commit()

        logger.info(
            "Undid ball %s (innings %s, %s.%s) on fixture %s",
            last.sequence, last.innings, last.over_number, last.ball_number, fixture.id,
        )
        return last
