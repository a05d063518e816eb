from app.models.tournament import Tournament
from app.models.team import Team
from app.models.player import Player
from app.models.fixture import Fixture, FixtureStatus, FixtureStage, TossDecision
from app.models.ball import BallEvent, ExtraType
from app.models.standings import StandingsRow

__all__ = [
    "Tournament",
    "Team",
    "Player",
    "Fixture",
    "FixtureStatus",
    "FixtureStage",
    "TossDecision",
    "BallEvent",
    "ExtraType",
    "StandingsRow",
]
