"""
Bracket Engine - knockout generation and progression

IPL format with four or more teams:
- Qualifier 1: 1st vs 2nd
- Eliminator: 3rd vs 4th
- Qualifier 2: Loser of Q1 vs Winner of Eliminator
- Final: Winner of Q1 vs Winner of Q2
Two or three teams go straight to a Final between 1st and 2nd.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from app.engine.standings_engine import StandingsEngine
from app.errors import InvalidState, NotFoundError, ValidationFailure
from app.models.fixture import Fixture, FixtureStage, FixtureStatus
from app.models.tournament import Tournament

logger = logging.getLogger(__name__)

MANUAL_AWARD = "Match Awarded Manually"

# Knockout fixtures whose slots are filled from each stage's result
DOWNSTREAM = {
    FixtureStage.QUALIFIER_1: (FixtureStage.QUALIFIER_2, FixtureStage.FINAL),
    FixtureStage.ELIMINATOR: (FixtureStage.QUALIFIER_2,),
    FixtureStage.QUALIFIER_2: (FixtureStage.FINAL,),
    FixtureStage.FINAL: (),
}

QUALIFIER_1_ORDER = 100
ELIMINATOR_ORDER = 101
QUALIFIER_2_ORDER = 102
FINAL_ORDER = 103
FINAL_ONLY_ORDER = 200


class BracketEngine:
    """
    Seeds knockout fixtures from the standings and fills later slots as
    earlier knockout results arrive.
    """

    def __init__(self, session: Session, tournament: Tournament):
        self.session = session
        self.tournament = tournament

    def _knockout_fixtures(self) -> list[Fixture]:
        return (
            self.session.query(Fixture)
            .filter(
                Fixture.tournament_id == self.tournament.id,
                Fixture.stage != FixtureStage.LEAGUE,
            )
            .order_by(Fixture.match_order)
            .all()
        )

    def _stage_fixture(self, stage: FixtureStage) -> Optional[Fixture]:
        return (
            self.session.query(Fixture)
            .filter_by(tournament_id=self.tournament.id, stage=stage)
            .first()
        )

    def _new_fixture(
        self,
        stage: FixtureStage,
        match_order: int,
        match_date: datetime,
        team1_id: Optional[int] = None,
        team2_id: Optional[int] = None,
    ) -> Fixture:
        fixture = Fixture(
            tournament_id=self.tournament.id,
            stage=stage,
            match_order=match_order,
            team1_id=team1_id,
            team2_id=team2_id,
            venue=self.tournament.venue or "TBD",
            match_date=match_date,
            status=FixtureStatus.SCHEDULED,
            total_overs=self.tournament.total_overs,
        )
        self.session.add(fixture)
        return fixture

    def clear_knockouts(self) -> int:
        """Delete every non-league fixture (and its balls)"""
        existing = self._knockout_fixtures()
        for fixture in existing:
            self.session.delete(fixture)
        self.tournament.champion_team_id = None
        self.tournament.runner_up_team_id = None
        self.session.flush()
        return len(existing)

    def generate_knockouts(self) -> list[Fixture]:
        """(Re)seed the bracket from fresh standings"""
        standings = StandingsEngine(self.session, self.tournament).recompute()
        if len(standings) < 2:
            raise InvalidState("Not enough teams for knockouts")

        removed = self.clear_knockouts()
        if removed:
            logger.info("Removed %d existing knockout fixtures for tournament %s", removed, self.tournament.id)

        seeds = [s.team.id for s in standings]
        start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        fixtures = []

        if len(seeds) >= 4:
            fixtures.append(self._new_fixture(
                FixtureStage.QUALIFIER_1, QUALIFIER_1_ORDER, start + timedelta(days=1), seeds[0], seeds[1]
            ))
            fixtures.append(self._new_fixture(
                FixtureStage.ELIMINATOR, ELIMINATOR_ORDER, start + timedelta(days=2), seeds[2], seeds[3]
            ))
            fixtures.append(self._new_fixture(
                FixtureStage.QUALIFIER_2, QUALIFIER_2_ORDER, start + timedelta(days=4)
            ))
            fixtures.append(self._new_fixture(
                FixtureStage.FINAL, FINAL_ORDER, start + timedelta(days=6)
            ))
        else:
            fixtures.append(self._new_fixture(
                FixtureStage.FINAL, FINAL_ONLY_ORDER, start + timedelta(days=1), seeds[0], seeds[1]
            ))

        self.session.commit()
        logger.info(
            "Generated %d knockout fixtures for tournament %s", len(fixtures), self.tournament.id
        )
        return fixtures

    def get_bracket(self) -> list[Fixture]:
        return self._knockout_fixtures()

    def complete_tournament(self, champion_id: int, runner_up_id: Optional[int]) -> None:
        self.tournament.champion_team_id = champion_id
        self.tournament.runner_up_team_id = runner_up_id
        logger.info(
            "Tournament %s complete: champion %s, runner-up %s",
            self.tournament.id, champion_id, runner_up_id,
        )

    def ensure_downstream_open(self, fixture: Fixture) -> None:
        """A knockout result cannot change once a fixture fed by it is decided"""
        for stage in DOWNSTREAM.get(fixture.stage, ()):
            dependent = self._stage_fixture(stage)
            if dependent and dependent.status == FixtureStatus.COMPLETED:
                raise InvalidState(
                    f"{stage.value} is already completed; regenerate the bracket to change the {fixture.stage.value} result"
                )

    def advance(self, fixture: Fixture, commit: bool = True) -> None:
        """
        Push a decided knockout fixture's winner (and loser, for Q1) into
        the slots that depend on it.
        """
        if not fixture.is_knockout:
            return

        winner_id = fixture.winning_team_id
        if winner_id is None:
            logger.warning("Knockout fixture %s has no winner; bracket not advanced", fixture.id)
            return
        loser_id = fixture.opponent_of(winner_id)

        if fixture.stage == FixtureStage.QUALIFIER_1:
            final = self._stage_fixture(FixtureStage.FINAL)
            q2 = self._stage_fixture(FixtureStage.QUALIFIER_2)
            if final:
                final.team1_id = winner_id
            if q2:
                q2.team1_id = loser_id
        elif fixture.stage == FixtureStage.ELIMINATOR:
            q2 = self._stage_fixture(FixtureStage.QUALIFIER_2)
            if q2:
                q2.team2_id = winner_id
        elif fixture.stage == FixtureStage.QUALIFIER_2:
            final = self._stage_fixture(FixtureStage.FINAL)
            if final:
                final.team2_id = winner_id
        elif fixture.stage == FixtureStage.FINAL:
            self.complete_tournament(winner_id, loser_id)

        logger.info("Advanced %s winner %s (fixture %s)", fixture.stage.value, winner_id, fixture.id)
        if commit:
            self.session.commit()

    def mark_winner(self, fixture_id: int, winning_team_id: int) -> Fixture:
        """Award a knockout fixture without a scored result"""
        fixture = (
            self.session.query(Fixture)
            .filter_by(id=fixture_id, tournament_id=self.tournament.id)
            .first()
        )
        if not fixture:
            raise NotFoundError(f"Fixture {fixture_id} not found")
        if not fixture.is_knockout:
            raise InvalidState("Only knockout fixtures can be awarded manually")
        if winning_team_id not in (fixture.team1_id, fixture.team2_id):
            raise ValidationFailure(f"Team {winning_team_id} is not playing fixture {fixture_id}")

        self.ensure_downstream_open(fixture)

        # award and slot filling land in the same commit
        fixture.winning_team_id = winning_team_id
        fixture.status = FixtureStatus.COMPLETED
        fixture.result_description = MANUAL_AWARD
        self.advance(fixture)
        return fixture
