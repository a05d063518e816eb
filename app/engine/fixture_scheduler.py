"""
Fixture Scheduler - league round robin and one-off fixtures
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import InvalidState, NotFoundError, ValidationFailure
from app.models.fixture import Fixture, FixtureStage, FixtureStatus
from app.models.team import Team
from app.models.tournament import Tournament

logger = logging.getLogger(__name__)


def round_robin_pairings(team_ids: list[int]) -> list[list[tuple[int, int]]]:
    """
    Circle method: one list of pairings per round.

    The first entry stays fixed while the rest rotate. An odd field gets a
    bye slot, and pairings against it are dropped.
    """
    slots: list[Optional[int]] = list(team_ids)
    if len(slots) % 2:
        slots.append(None)

    rounds = []
    half = len(slots) // 2
    for _ in range(len(slots) - 1):
        pairings = []
        for i in range(half):
            home, away = slots[i], slots[-1 - i]
            if home is not None and away is not None:
                pairings.append((home, away))
        rounds.append(pairings)
        slots.insert(1, slots.pop())
    return rounds


class FixtureScheduler:
    """Creates league fixtures for a tournament"""

    def __init__(self, session: Session, tournament: Tournament):
        self.session = session
        self.tournament = tournament

    def _teams(self) -> list[Team]:
        return (
            self.session.query(Team)
            .filter_by(tournament_id=self.tournament.id)
            .order_by(Team.id)
            .all()
        )

    def _next_match_order(self) -> int:
        current = (
            self.session.query(func.max(Fixture.match_order))
            .filter(
                Fixture.tournament_id == self.tournament.id,
                Fixture.stage == FixtureStage.LEAGUE,
            )
            .scalar()
        )
        return (current or 0) + 1

    def generate_league(self, venue: Optional[str] = None, start: Optional[datetime] = None) -> list[Fixture]:
        """
        Every team plays every other team once.
        With a start date, each round is scheduled one day after the last.
        """
        existing = self.session.query(Fixture).filter_by(tournament_id=self.tournament.id).count()
        if existing:
            raise InvalidState("Fixtures already exist. Clear them first.")

        teams = self._teams()
        if len(teams) < 2:
            raise InvalidState("Need at least 2 teams to generate fixtures")

        fixtures = []
        match_order = 1
        for round_no, pairings in enumerate(round_robin_pairings([t.id for t in teams])):
            match_date = start + timedelta(days=round_no) if start else None
            for team1_id, team2_id in pairings:
                fixture = Fixture(
                    tournament_id=self.tournament.id,
                    stage=FixtureStage.LEAGUE,
                    match_order=match_order,
                    team1_id=team1_id,
                    team2_id=team2_id,
                    venue=venue or self.tournament.venue or "TBD",
                    match_date=match_date,
                    status=FixtureStatus.SCHEDULED,
                    total_overs=self.tournament.total_overs,
                )
                self.session.add(fixture)
                fixtures.append(fixture)
                match_order += 1

        self.session.commit()
        logger.info("Generated %d league fixtures for tournament %s", len(fixtures), self.tournament.id)
        return fixtures

    def create_fixture(
        self,
        team1_id: int,
        team2_id: int,
        match_date: Optional[datetime] = None,
        venue: Optional[str] = None,
        total_overs: Optional[int] = None,
    ) -> Fixture:
        if team1_id == team2_id:
            raise ValidationFailure("Cannot schedule a match between the same team")

        for team_id in (team1_id, team2_id):
            team = self.session.get(Team, team_id)
            if not team or team.tournament_id != self.tournament.id:
                raise NotFoundError(f"Team {team_id} not found in tournament {self.tournament.id}")

        fixture = Fixture(
            tournament_id=self.tournament.id,
            stage=FixtureStage.LEAGUE,
            match_order=self._next_match_order(),
            team1_id=team1_id,
            team2_id=team2_id,
            venue=venue or self.tournament.venue or "TBD",
            match_date=match_date,
            status=FixtureStatus.SCHEDULED,
            total_overs=total_overs or self.tournament.total_overs,
        )
        self.session.add(fixture)
        self.session.commit()
        return fixture
