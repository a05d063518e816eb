from app.engine.ledger import BallLedger, BallInput
from app.engine.match_lifecycle import MatchLifecycle
from app.engine.standings_engine import StandingsEngine
from app.engine.bracket_engine import BracketEngine
from app.engine.simulator import MatchSimulator
from app.engine.fixture_scheduler import FixtureScheduler

__all__ = [
    "BallLedger",
    "BallInput",
    "MatchLifecycle",
    "StandingsEngine",
    "BracketEngine",
    "MatchSimulator",
    "FixtureScheduler",
]
