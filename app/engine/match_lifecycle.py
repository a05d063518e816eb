"""
Match Lifecycle - live state reads, state updates and completion side effects
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session

from app.engine.bracket_engine import BracketEngine
from app.engine.innings import InningsScore, WinProbability, calculate_innings, overs_to_decimal, win_probability
from app.engine.ledger import BallLedger
from app.engine.result import Resolution, TeamRef, batting_first, player_of_match, resolve
from app.engine.standings_engine import StandingsEngine
from app.errors import InvalidState, NotFoundError, ValidationFailure
from app.models.ball import BallEvent
from app.models.fixture import Fixture, FixtureStage, FixtureStatus, TossDecision
from app.models.team import Team

logger = logging.getLogger(__name__)


@dataclass
class MatchState:
    """Everything a scoreboard needs for one fixture"""
    fixture: Fixture
    balls: list[BallEvent]
    innings1: InningsScore
    innings2: InningsScore
    batting_first_id: Optional[int]
    current_innings: int
    win_probability: Optional[WinProbability] = None

    @property
    def chasing_id(self) -> Optional[int]:
        return self.fixture.opponent_of(self.batting_first_id)

    def win_probability_by_team(self) -> Optional[dict[int, int]]:
        if not self.win_probability or self.batting_first_id is None:
            return None
        return {
            self.batting_first_id: self.win_probability.batting_first,
            self.chasing_id: self.win_probability.chasing,
        }


class MatchLifecycle:
    """
    Coordinates the ball ledger, result resolver, standings and bracket for
    a single fixture.
    """

    def __init__(self, session: Session):
        self.session = session
        self.ledger = BallLedger(session)

    def get_fixture(self, fixture_id: int) -> Fixture:
        fixture = self.session.get(Fixture, fixture_id)
        if not fixture:
            raise NotFoundError(f"Fixture {fixture_id} not found")
        return fixture

    def _team_ref(self, team_id: Optional[int]) -> TeamRef:
        team = self.session.get(Team, team_id) if team_id else None
        if not team:
            raise InvalidState("Both teams must be set before a result can be decided")
        return TeamRef(id=team.id, name=team.name)

    def get_match_state(self, fixture_id: int) -> MatchState:
        fixture = self.get_fixture(fixture_id)
        balls = self.ledger.balls(fixture.id)

        innings1 = calculate_innings(b for b in balls if b.innings == 1)
        innings2 = calculate_innings(b for b in balls if b.innings == 2)

        # The ledger, not the cached pointer, says which innings is live
        current_innings = balls[-1].innings if balls else fixture.current_innings

        probability = None
        if current_innings == 2:
            probability = win_probability(innings1, innings2, fixture.total_overs)

        return MatchState(
            fixture=fixture,
            balls=balls,
            innings1=innings1,
            innings2=innings2,
            batting_first_id=batting_first(
                fixture.toss_winner_id, fixture.toss_decision, fixture.team1_id, fixture.team2_id
            ),
            current_innings=current_innings,
            win_probability=probability,
        )

    def update_match_state(
        self,
        fixture_id: int,
        status: Optional[FixtureStatus] = None,
        toss_winner_id: Optional[int] = None,
        toss_decision: Optional[TossDecision] = None,
        current_innings: Optional[int] = None,
        total_overs: Optional[int] = None,
    ) -> Fixture:
        """Apply scorer-side state changes; Completed triggers the result pipeline"""
        fixture = self.get_fixture(fixture_id)

        if toss_winner_id is not None:
            if toss_winner_id not in (fixture.team1_id, fixture.team2_id):
                raise ValidationFailure(f"Team {toss_winner_id} is not playing fixture {fixture_id}")
            fixture.toss_winner_id = toss_winner_id
        if toss_decision is not None:
            fixture.toss_decision = TossDecision(toss_decision)
        if current_innings is not None:
            if current_innings not in (0, 1, 2):
                raise ValidationFailure("current_innings must be 0, 1 or 2")
            fixture.current_innings = current_innings
        if total_overs is not None:
            if total_overs <= 0:
                raise ValidationFailure("total_overs must be positive")
            fixture.total_overs = total_overs

        if status is not None:
            status = FixtureStatus(status)
            if status == FixtureStatus.COMPLETED:
                return self.complete_fixture(fixture)
            fixture.status = status

        self.session.commit()
        return fixture

    def resolve_fixture(self, fixture: Fixture) -> tuple[Resolution, InningsScore, InningsScore]:
        balls = self.ledger.balls(fixture.id)
        innings1 = calculate_innings(b for b in balls if b.innings == 1)
        innings2 = calculate_innings(b for b in balls if b.innings == 2)

        first_id = batting_first(
            fixture.toss_winner_id, fixture.toss_decision, fixture.team1_id, fixture.team2_id
        )
        first = self._team_ref(first_id)
        second = self._team_ref(fixture.opponent_of(first_id))
        return resolve(innings1, innings2, first, second), innings1, innings2

    def _write_snapshot(self, fixture: Fixture, first_id: int, innings1: InningsScore, innings2: InningsScore) -> None:
        by_team = {
            first_id: innings1,
            fixture.opponent_of(first_id): innings2,
        }
        score1 = by_team[fixture.team1_id]
        score2 = by_team[fixture.team2_id]

        fixture.team1_runs = score1.runs
        fixture.team1_wickets = score1.wickets
        fixture.team1_overs = overs_to_decimal(score1.legal_balls)
        fixture.team2_runs = score2.runs
        fixture.team2_wickets = score2.wickets
        fixture.team2_overs = overs_to_decimal(score2.legal_balls)

    def complete_fixture(self, fixture: Fixture) -> Fixture:
        """
        Decide the result, snapshot both innings, pick the player of the
        match and fill the bracket in one commit, then refresh standings.
        """
        bracket = BracketEngine(self.session, fixture.tournament)
        if fixture.is_knockout:
            bracket.ensure_downstream_open(fixture)

        resolution, innings1, innings2 = self.resolve_fixture(fixture)
        first_id = batting_first(
            fixture.toss_winner_id, fixture.toss_decision, fixture.team1_id, fixture.team2_id
        )

        fixture.status = FixtureStatus.COMPLETED
        fixture.result_description = resolution.result_text
        fixture.winning_team_id = resolution.winning_team_id
        self._write_snapshot(fixture, first_id, innings1, innings2)

        if not fixture.player_of_match_id:
            fixture.player_of_match_id = player_of_match(self.ledger.balls(fixture.id))

        if fixture.stage == FixtureStage.FINAL and resolution.winning_team_id:
            bracket.complete_tournament(resolution.winning_team_id, resolution.losing_team_id)
        elif fixture.is_knockout:
            bracket.advance(fixture, commit=False)

        self.session.commit()
        logger.info("Fixture %s completed: %s", fixture.id, resolution.result_text)

        self._refresh_standings(fixture)

        return fixture

    def _refresh_standings(self, fixture: Fixture) -> None:
        # Scoring must not be blocked by the standings side effect
        try:
            StandingsEngine(self.session, fixture.tournament).recompute()
        except Exception:
            self.session.rollback()
            logger.exception("Standings recompute failed after fixture %s", fixture.id)
