"""
Shared fixtures: in-memory database and small tournaments to score against.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from app.database import Base
from app.models import (
    Fixture, FixtureStage, FixtureStatus, Player, Team, TossDecision, Tournament,
)


@pytest.fixture
def test_db():
    """Create an in-memory test database."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = Session(engine)
    yield session
    session.close()


@pytest.fixture
def make_tournament(test_db):
    """Factory: tournament with `teams` teams of `squad_size` players each."""

    def _make(teams: int = 4, squad_size: int = 11, total_overs: int = 20, name: str = "Test Cup") -> Tournament:
        tournament = Tournament(name=name, venue="Test Stadium", total_overs=total_overs)
        test_db.add(tournament)
        test_db.flush()
        for i in range(teams):
            team = Team(tournament_id=tournament.id, name=f"Team {i + 1}", short_name=f"T{i + 1}")
            test_db.add(team)
            test_db.flush()
            for j in range(squad_size):
                test_db.add(Player(name=f"T{i + 1} Player {j + 1}", role="Batter", team_id=team.id))
        test_db.commit()
        return tournament

    return _make


@pytest.fixture
def make_fixture(test_db):
    """Factory: fixture between two teams, toss optional."""

    def _make(
        tournament: Tournament,
        team1: Team,
        team2: Team,
        stage: FixtureStage = FixtureStage.LEAGUE,
        match_order: int = 1,
        toss_winner: Team = None,
        toss_decision: TossDecision = TossDecision.BAT,
    ) -> Fixture:
        fixture = Fixture(
            tournament_id=tournament.id,
            stage=stage,
            match_order=match_order,
            team1_id=team1.id,
            team2_id=team2.id,
            status=FixtureStatus.SCHEDULED,
            total_overs=tournament.total_overs,
            toss_winner_id=toss_winner.id if toss_winner else None,
            toss_decision=toss_decision if toss_winner else None,
        )
        test_db.add(fixture)
        test_db.commit()
        return fixture

    return _make


@pytest.fixture
def completed_league_fixture(test_db, make_fixture):
    """
    Factory: completed league fixture with a stored score snapshot,
    as written at completion time.
    """

    def _make(tournament, team1, team2, team1_score, team2_score, winner=None, match_order=1) -> Fixture:
        fixture = make_fixture(tournament, team1, team2, match_order=match_order)
        fixture.status = FixtureStatus.COMPLETED
        fixture.team1_runs, fixture.team1_wickets, fixture.team1_overs = team1_score
        fixture.team2_runs, fixture.team2_wickets, fixture.team2_overs = team2_score
        fixture.winning_team_id = winner.id if winner else None
        test_db.commit()
        return fixture

    return _make
