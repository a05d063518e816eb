"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.models.ball import ExtraType
from app.models.fixture import Fixture, FixtureStage, FixtureStatus, TossDecision


# Tournament Schemas
class TournamentCreate(BaseModel):
    name: str
    venue: Optional[str] = None
    total_overs: int = Field(default=20, gt=0)


class TournamentResponse(BaseModel):
    id: int
    name: str
    venue: Optional[str] = None
    total_overs: int
    created_at: datetime
    champion_team_id: Optional[int] = None
    runner_up_team_id: Optional[int] = None

    class Config:
        from_attributes = True


# Team Schemas
class TeamCreate(BaseModel):
    name: str
    short_name: str = Field(max_length=5)


class TeamResponse(TeamCreate):
    id: int
    tournament_id: int

    class Config:
        from_attributes = True


# Player Schemas
class PlayerCreate(BaseModel):
    name: str
    role: Optional[str] = None


class PlayerResponse(PlayerCreate):
    id: int
    team_id: Optional[int] = None

    class Config:
        from_attributes = True


# Fixture Schemas
class FixtureGenerateRequest(BaseModel):
    venue: Optional[str] = None
    start_date: Optional[datetime] = None


class FixtureCreate(BaseModel):
    team1_id: int
    team2_id: int
    match_date: Optional[datetime] = None
    venue: Optional[str] = None
    total_overs: Optional[int] = Field(default=None, gt=0)


class FixtureResponse(BaseModel):
    id: int
    tournament_id: int
    match_order: int
    stage: FixtureStage
    team1_id: Optional[int] = None
    team1_name: Optional[str] = None
    team2_id: Optional[int] = None
    team2_name: Optional[str] = None
    match_date: Optional[datetime] = None
    venue: Optional[str] = None
    status: FixtureStatus
    toss_winner_id: Optional[int] = None
    toss_decision: Optional[TossDecision] = None
    current_innings: int
    total_overs: int
    result_description: Optional[str] = None
    winning_team_id: Optional[int] = None
    player_of_match_id: Optional[int] = None
    team1_runs: Optional[int] = None
    team1_wickets: Optional[int] = None
    team1_overs: Optional[float] = None
    team2_runs: Optional[int] = None
    team2_wickets: Optional[int] = None
    team2_overs: Optional[float] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_fixture(cls, fixture: Fixture) -> "FixtureResponse":
        response = cls.model_validate(fixture)
        response.team1_name = fixture.team1.name if fixture.team1 else None
        response.team2_name = fixture.team2.name if fixture.team2 else None
        return response


class FixtureCountResponse(BaseModel):
    message: str
    count: int


# Ball Schemas
class BallCreate(BaseModel):
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


class BallResponse(BallCreate):
    id: int
    fixture_id: int
    sequence: int

    class Config:
        from_attributes = True


# Match state Schemas
class InningsScoreResponse(BaseModel):
    runs: int
    wickets: int
    legal_balls: int
    overs: str
    run_rate: float


class WinProbabilityResponse(BaseModel):
    batting_first: int
    chasing: int
    required_run_rate: Optional[float] = None
    by_team: dict[int, int]


class MatchStateResponse(BaseModel):
    fixture: FixtureResponse
    balls: list[BallResponse]
    innings1: InningsScoreResponse
    innings2: InningsScoreResponse
    batting_first_id: Optional[int] = None
    current_innings: int
    win_probability: Optional[WinProbabilityResponse] = None


class MatchStateUpdate(BaseModel):
    status: Optional[FixtureStatus] = None
    toss_winner_id: Optional[int] = None
    toss_decision: Optional[TossDecision] = None
    current_innings: Optional[int] = None
    total_overs: Optional[int] = None


class SimulateRequest(BaseModel):
    forced_winner_id: Optional[int] = None
    target_score: Optional[int] = Field(default=None, gt=0)


class SimulateResponse(BaseModel):
    balls_simulated: int
    fixture: FixtureResponse


class DLSResponse(BaseModel):
    fixture_id: int
    match_format: str
    overs_lost: float
    first_innings_runs: int
    resources_before: float
    resources_after: float
    resources_lost: float
    revised_target: int
    par_score: int


# Standings / Bracket Schemas
class StandingResponse(BaseModel):
    position: int
    team_id: int
    team_name: str
    team_short_name: str
    played: int
    won: int
    lost: int
    tied: int
    no_result: int
    points: int
    runs_for: int
    balls_for: int
    runs_against: int
    balls_against: int
    nrr: float


class KnockoutWinnerRequest(BaseModel):
    winning_team_id: int


class BracketResponse(BaseModel):
    tournament_id: int
    champion_team_id: Optional[int] = None
    runner_up_team_id: Optional[int] = None
    fixtures: list[FixtureResponse]


class MVPEntry(BaseModel):
    rank: int
    player_id: int
    player_name: str
    team_id: Optional[int] = None
    points: int


class MessageResponse(BaseModel):
    message: str
