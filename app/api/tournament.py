"""
Tournament API endpoints - registration, fixtures, standings, knockouts
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.engine.bracket_engine import BracketEngine
from app.engine.fixture_scheduler import FixtureScheduler
from app.engine.result import mvp_leaderboard
from app.engine.standings_engine import LeagueStanding, StandingsEngine
from app.models.ball import BallEvent
from app.models.fixture import Fixture
from app.models.player import Player
from app.models.team import Team
from app.models.tournament import Tournament
from app.api.schemas import (
    BracketResponse, FixtureCountResponse, FixtureCreate, FixtureGenerateRequest,
    FixtureResponse, KnockoutWinnerRequest, MVPEntry, PlayerCreate, PlayerResponse,
    StandingResponse, TeamCreate, TeamResponse, TournamentCreate, TournamentResponse,
)

router = APIRouter(prefix="/tournaments", tags=["Tournament"])


def get_tournament(tournament_id: int, db: Session) -> Tournament:
    tournament = db.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


def _standing_response(standing: LeagueStanding) -> StandingResponse:
    row = standing.row
    return StandingResponse(
        position=standing.position,
        team_id=standing.team.id,
        team_name=standing.team.name,
        team_short_name=standing.team.short_name,
        played=row.played,
        won=row.won,
        lost=row.lost,
        tied=row.tied,
        no_result=row.no_result,
        points=row.points,
        runs_for=row.runs_for,
        balls_for=row.balls_for,
        runs_against=row.runs_against,
        balls_against=row.balls_against,
        nrr=row.nrr,
    )


@router.post("/", response_model=TournamentResponse, status_code=201)
def create_tournament(
    request: TournamentCreate,
    db: Session = Depends(get_db)
):
    """Create a new tournament"""
    tournament = Tournament(name=request.name, venue=request.venue, total_overs=request.total_overs)
    db.add(tournament)
    db.commit()
    return TournamentResponse.model_validate(tournament)


@router.get("/{tournament_id}", response_model=TournamentResponse)
def get_tournament_info(
    tournament_id: int,
    db: Session = Depends(get_db)
):
    return TournamentResponse.model_validate(get_tournament(tournament_id, db))


@router.post("/{tournament_id}/teams", response_model=TeamResponse, status_code=201)
def add_team(
    tournament_id: int,
    request: TeamCreate,
    db: Session = Depends(get_db)
):
    """Register a team in the tournament"""
    tournament = get_tournament(tournament_id, db)
    team = Team(tournament_id=tournament.id, name=request.name, short_name=request.short_name)
    db.add(team)
    db.commit()
    return TeamResponse.model_validate(team)


@router.post("/teams/{team_id}/players", response_model=PlayerResponse, status_code=201)
def add_player(
    team_id: int,
    request: PlayerCreate,
    db: Session = Depends(get_db)
):
    """Add a player to a team's roster"""
    team = db.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    player = Player(name=request.name, role=request.role, team_id=team.id)
    db.add(player)
    db.commit()
    return PlayerResponse.model_validate(player)


@router.post("/{tournament_id}/fixtures/generate", response_model=FixtureCountResponse)
def generate_fixtures(
    tournament_id: int,
    request: FixtureGenerateRequest,
    db: Session = Depends(get_db)
):
    """Round-robin league fixtures for every registered team"""
    tournament = get_tournament(tournament_id, db)
    fixtures = FixtureScheduler(db, tournament).generate_league(
        venue=request.venue, start=request.start_date
    )
    return FixtureCountResponse(message="Fixtures generated successfully", count=len(fixtures))


@router.post("/{tournament_id}/fixtures", response_model=FixtureResponse, status_code=201)
def create_fixture(
    tournament_id: int,
    request: FixtureCreate,
    db: Session = Depends(get_db)
):
    """Schedule a single league fixture"""
    tournament = get_tournament(tournament_id, db)
    fixture = FixtureScheduler(db, tournament).create_fixture(
        request.team1_id,
        request.team2_id,
        match_date=request.match_date,
        venue=request.venue,
        total_overs=request.total_overs,
    )
    return FixtureResponse.from_fixture(fixture)


@router.get("/{tournament_id}/fixtures", response_model=List[FixtureResponse])
def get_fixtures(
    tournament_id: int,
    db: Session = Depends(get_db)
):
    """All fixtures in match order"""
    tournament = get_tournament(tournament_id, db)
    fixtures = (
        db.query(Fixture)
        .filter_by(tournament_id=tournament.id)
        .order_by(Fixture.match_order, Fixture.id)
        .all()
    )
    return [FixtureResponse.from_fixture(f) for f in fixtures]


@router.get("/{tournament_id}/standings", response_model=List[StandingResponse])
def get_standings(
    tournament_id: int,
    db: Session = Depends(get_db)
):
    """Current league standings"""
    tournament = get_tournament(tournament_id, db)
    standings = StandingsEngine(db, tournament).get_league_standings()
    return [_standing_response(s) for s in standings]


@router.post("/{tournament_id}/standings/recompute", response_model=List[StandingResponse])
def recompute_standings(
    tournament_id: int,
    db: Session = Depends(get_db)
):
    """Rebuild the points table from completed league fixtures"""
    tournament = get_tournament(tournament_id, db)
    standings = StandingsEngine(db, tournament).recompute()
    return [_standing_response(s) for s in standings]


@router.post("/{tournament_id}/knockouts", response_model=List[FixtureResponse])
def generate_knockouts(
    tournament_id: int,
    db: Session = Depends(get_db)
):
    """Seed (or re-seed) the playoff bracket from the standings"""
    tournament = get_tournament(tournament_id, db)
    fixtures = BracketEngine(db, tournament).generate_knockouts()
    return [FixtureResponse.from_fixture(f) for f in fixtures]


@router.get("/{tournament_id}/bracket", response_model=BracketResponse)
def get_bracket(
    tournament_id: int,
    db: Session = Depends(get_db)
):
    tournament = get_tournament(tournament_id, db)
    fixtures = BracketEngine(db, tournament).get_bracket()
    return BracketResponse(
        tournament_id=tournament.id,
        champion_team_id=tournament.champion_team_id,
        runner_up_team_id=tournament.runner_up_team_id,
        fixtures=[FixtureResponse.from_fixture(f) for f in fixtures],
    )


@router.post("/knockouts/{fixture_id}/winner", response_model=FixtureResponse)
def mark_knockout_winner(
    fixture_id: int,
    request: KnockoutWinnerRequest,
    db: Session = Depends(get_db)
):
    """Award a knockout fixture and push the winner through the bracket"""
    fixture = db.get(Fixture, fixture_id)
    if not fixture:
        raise HTTPException(status_code=404, detail="Fixture not found")
    fixture = BracketEngine(db, fixture.tournament).mark_winner(fixture_id, request.winning_team_id)
    return FixtureResponse.from_fixture(fixture)


@router.get("/{tournament_id}/mvp", response_model=List[MVPEntry])
def get_mvp_leaderboard(
    tournament_id: int,
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Tournament-long MVP points across every recorded ball"""
    tournament = get_tournament(tournament_id, db)
    balls = (
        db.query(BallEvent)
        .join(Fixture, BallEvent.fixture_id == Fixture.id)
        .filter(Fixture.tournament_id == tournament.id)
        .order_by(Fixture.match_order, Fixture.id, BallEvent.sequence)
        .all()
    )

    entries = []
    for rank, (player_id, points) in enumerate(mvp_leaderboard(balls, limit=limit), 1):
        player = db.get(Player, player_id)
        entries.append(MVPEntry(
            rank=rank,
            player_id=player_id,
            player_name=player.name if player else "Unknown",
            team_id=player.team_id if player else None,
            points=points,
        ))
    return entries
