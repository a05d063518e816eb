"""
Scoring API endpoints - ball ledger, live match state, simulation, DLS
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.engine.dls import chase_target
from app.engine.innings import InningsScore
from app.engine.ledger import BallInput, BallLedger
from app.engine.match_lifecycle import MatchLifecycle
from app.engine.simulator import MatchSimulator
from app.api.schemas import (
    BallCreate, BallResponse, DLSResponse, FixtureResponse, InningsScoreResponse,
    MatchStateResponse, MatchStateUpdate, MessageResponse, SimulateRequest,
    SimulateResponse, WinProbabilityResponse,
)

router = APIRouter(prefix="/matches", tags=["Scoring"])


def _innings_response(score: InningsScore) -> InningsScoreResponse:
    return InningsScoreResponse(**score.as_dict())


@router.post("/{fixture_id}/balls", response_model=BallResponse, status_code=201)
def record_ball(
    fixture_id: int,
    request: BallCreate,
    db: Session = Depends(get_db)
):
    """Append one delivery to the fixture's ledger"""
    event = BallLedger(db).record_ball(fixture_id, BallInput(**request.model_dump()))
    return BallResponse.model_validate(event)


@router.delete("/{fixture_id}/balls/last", response_model=MessageResponse)
def undo_last_ball(
    fixture_id: int,
    db: Session = Depends(get_db)
):
    """Remove the most recent delivery"""
    event = BallLedger(db).undo_last(fixture_id)
    return MessageResponse(
        message=f"Removed ball {event.over_number}.{event.ball_number} of innings {event.innings}"
    )


@router.get("/{fixture_id}", response_model=MatchStateResponse)
def get_match_state(
    fixture_id: int,
    db: Session = Depends(get_db)
):
    """Fixture, every ball, both innings and the live win probability"""
    state = MatchLifecycle(db).get_match_state(fixture_id)

    probability = None
    if state.win_probability:
        probability = WinProbabilityResponse(
            batting_first=state.win_probability.batting_first,
            chasing=state.win_probability.chasing,
            required_run_rate=state.win_probability.required_run_rate,
            by_team=state.win_probability_by_team() or {},
        )

    return MatchStateResponse(
        fixture=FixtureResponse.from_fixture(state.fixture),
        balls=[BallResponse.model_validate(b) for b in state.balls],
        innings1=_innings_response(state.innings1),
        innings2=_innings_response(state.innings2),
        batting_first_id=state.batting_first_id,
        current_innings=state.current_innings,
        win_probability=probability,
    )


@router.patch("/{fixture_id}", response_model=FixtureResponse)
def update_match_state(
    fixture_id: int,
    request: MatchStateUpdate,
    db: Session = Depends(get_db)
):
    """Toss, innings pointer, overs or status; Completed decides the result"""
    fixture = MatchLifecycle(db).update_match_state(
        fixture_id,
        status=request.status,
        toss_winner_id=request.toss_winner_id,
        toss_decision=request.toss_decision,
        current_innings=request.current_innings,
        total_overs=request.total_overs,
    )
    return FixtureResponse.from_fixture(fixture)


@router.post("/{fixture_id}/simulate", response_model=SimulateResponse)
def simulate_match(
    fixture_id: int,
    request: SimulateRequest,
    db: Session = Depends(get_db)
):
    """Play out the rest of the fixture with synthesized balls"""
    result = MatchSimulator(db).simulate(
        fixture_id,
        forced_winner_id=request.forced_winner_id,
        target_score=request.target_score,
    )
    return SimulateResponse(
        balls_simulated=result.balls_simulated,
        fixture=FixtureResponse.from_fixture(result.fixture),
    )


@router.get("/{fixture_id}/dls", response_model=DLSResponse)
def get_dls_target(
    fixture_id: int,
    overs_lost: float = Query(..., ge=0),
    match_format: str = Query("T20", alias="format", pattern="^(T20|ODI)$"),
    db: Session = Depends(get_db)
):
    """Revised chase target if the second innings loses overs now"""
    state = MatchLifecycle(db).get_match_state(fixture_id)

    target, resources = chase_target(
        first_innings_runs=state.innings1.runs,
        total_overs=state.fixture.total_overs,
        legal_balls_bowled=state.innings2.legal_balls,
        wickets_lost=state.innings2.wickets,
        overs_lost=overs_lost,
        match_format=match_format,
    )
    return DLSResponse(
        fixture_id=fixture_id,
        match_format=match_format,
        overs_lost=overs_lost,
        first_innings_runs=state.innings1.runs,
        resources_before=resources.before,
        resources_after=resources.after,
        resources_lost=resources.lost,
        revised_target=target.target,
        par_score=target.par_score,
    )
