"""
Match Simulator - synthesizes ball events to fast-forward a fixture

Outcomes come from a weighted draw over run values plus an independent
wicket roll. Every synthesized ball goes through the ball ledger, so the
scoreboard, result and standings treat it exactly like a scored ball.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Optional
from sqlalchemy.orm import Session

from app.config import settings
from app.engine.innings import BALLS_PER_OVER, calculate_innings
from app.engine.ledger import BallInput, BallLedger
from app.engine.match_lifecycle import MatchLifecycle
from app.engine.result import batting_first
from app.errors import InvalidState, ValidationFailure
from app.models.ball import BallEvent
from app.models.fixture import Fixture, FixtureStatus, TossDecision
from app.models.player import Player

logger = logging.getLogger(__name__)

RUN_VALUES = (0, 1, 2, 3, 4, 6)

# (run weights for 0/1/2/3/4/6, wicket probability)
BALANCED = ((35, 35, 10, 2, 12, 6), 0.05)
FAVOURED_BATTING = ((25, 33, 10, 2, 20, 10), 0.02)
FAVOURED_BOWLING = ((50, 32, 8, 2, 6, 2), 0.10)

WICKET_TYPES = ("Bowled", "Caught", "LBW", "Run Out", "Stumped")
FIELDER_WICKETS = ("Caught", "Run Out", "Stumped")

MAX_BOWLERS = 5
BOWLING_ROLES = ("bowler", "allrounder")
MAX_WICKETS = 10


def bowling_attack(roster: list[Player]) -> list[Player]:
    """
    Up to five Bowlers and All-Rounders in roster order. A roster with
    neither falls back to its first five players.
    """
    specialists = [
        p for p in roster
        if (p.role or "").lower().replace("-", "").replace(" ", "").replace("_", "") in BOWLING_ROLES
    ]
    return (specialists or roster)[:MAX_BOWLERS]


@dataclass
class SimulationResult:
    balls_simulated: int
    fixture: Fixture


@dataclass
class InningsProgress:
    """Live batting state for one innings, seeded from the ledger"""
    number: int
    batting_team_id: int
    batters: list[Player]
    bowlers: list[Player]
    fielders: list[Player]
    runs: int = 0
    wickets: int = 0
    legal_balls: int = 0
    striker: Optional[Player] = None
    non_striker: Optional[Player] = None
    used: set[int] = field(default_factory=set)

    @property
    def wicket_limit(self) -> int:
        return min(MAX_WICKETS, len(self.batters) - 1)

    def next_batter(self) -> Optional[Player]:
        for player in self.batters:
            if player.id not in self.used:
                self.used.add(player.id)
                return player
        return None

    def bowler_for_over(self, over_number: int) -> Player:
        return self.bowlers[over_number % len(self.bowlers)]


class MatchSimulator:
    """
    Plays out the remainder of a fixture from whatever the ledger holds.

    Policies:
    - balanced: default weights for both sides
    - forced winner: that side bats with fewer wickets and more boundaries,
      and bowls the opposite way
    - target score: the innings in progress when simulation starts stops
      once it reaches the target
    """

    def __init__(self, session: Session, rng: Optional[random.Random] = None, max_deliveries: Optional[int] = None):
        self.session = session
        self.rng = rng or random.Random(settings.SIMULATION_SEED)
        self.max_deliveries = max_deliveries or settings.SIMULATION_MAX_DELIVERIES
        self.ledger = BallLedger(session)
        self.lifecycle = MatchLifecycle(session)

    def _roster(self, team_id: int) -> list[Player]:
        return (
            self.session.query(Player)
            .filter_by(team_id=team_id)
            .order_by(Player.id)
            .all()
        )

    def _ensure_toss(self, fixture: Fixture) -> None:
        if fixture.toss_winner_id is not None:
            return
        fixture.toss_winner_id = self.rng.choice([fixture.team1_id, fixture.team2_id])
        fixture.toss_decision = self.rng.choice([TossDecision.BAT, TossDecision.BOWL])
        if fixture.status == FixtureStatus.SCHEDULED:
            fixture.status = FixtureStatus.LIVE
        self.session.flush()
        logger.info(
            "Simulated toss for fixture %s: team %s elected to %s",
            fixture.id, fixture.toss_winner_id, fixture.toss_decision.value,
        )

    def _load_innings(self, fixture: Fixture, number: int, batting_id: int, rosters: dict[int, list[Player]]) -> InningsProgress:
        bowling_id = fixture.opponent_of(batting_id)
        bowling_roster = rosters[bowling_id]
        progress = InningsProgress(
            number=number,
            batting_team_id=batting_id,
            batters=rosters[batting_id],
            bowlers=bowling_attack(bowling_roster),
            fielders=bowling_roster,
        )

        balls = self.ledger.balls(fixture.id, innings=number)
        score = calculate_innings(balls)
        progress.runs = score.runs
        progress.wickets = score.wickets
        progress.legal_balls = score.legal_balls

        by_id = {p.id: p for p in progress.batters}
        for ball in balls:
            progress.used.update(pid for pid in (ball.striker_id, ball.non_striker_id) if pid)

        if not balls:
            progress.striker = progress.next_batter()
            progress.non_striker = progress.next_batter()
            return progress

        last = balls[-1]
        striker = by_id.get(last.striker_id)
        non_striker = by_id.get(last.non_striker_id)
        if last.is_wicket:
            out_id = last.player_out_id or last.striker_id
            survivor = non_striker if striker and striker.id == out_id else striker
            progress.striker = survivor
            progress.non_striker = progress.next_batter()
        else:
            progress.striker = striker or progress.next_batter()
            progress.non_striker = non_striker
        return progress

    def _policy(self, batting_team_id: int, forced_winner_id: Optional[int]) -> tuple[tuple[int, ...], float]:
        if forced_winner_id is None:
            return BALANCED
        if batting_team_id == forced_winner_id:
            return FAVOURED_BATTING
        return FAVOURED_BOWLING

    def _innings_over(self, progress: InningsProgress, total_overs: int, target: Optional[int]) -> bool:
        if progress.legal_balls >= total_overs * BALLS_PER_OVER:
            return True
        if progress.wickets >= progress.wicket_limit:
            return True
        if progress.striker is None:
            return True
        return target is not None and progress.runs >= target

    def _bowl(self, fixture: Fixture, progress: InningsProgress, forced_winner_id: Optional[int]) -> BallEvent:
        weights, wicket_probability = self._policy(progress.batting_team_id, forced_winner_id)
        over_number = progress.legal_balls // BALLS_PER_OVER
        bowler = progress.bowler_for_over(over_number)
        striker = progress.striker
        non_striker = progress.non_striker

        ball = BallInput(
            innings=progress.number,
            over_number=over_number,
            ball_number=progress.legal_balls % BALLS_PER_OVER + 1,
            striker_id=striker.id,
            non_striker_id=non_striker.id if non_striker else None,
            bowler_id=bowler.id,
        )

        if self.rng.random() < wicket_probability:
            ball.is_wicket = True
            ball.wicket_type = self.rng.choice(WICKET_TYPES)
            ball.player_out_id = striker.id
            if ball.wicket_type in FIELDER_WICKETS:
                candidates = [p for p in progress.fielders if p.id != bowler.id] or progress.fielders
                ball.fielder_id = self.rng.choice(candidates).id
            ball.commentary = f"{bowler.name} to {striker.name}, OUT ({ball.wicket_type})"
        else:
            ball.runs_scored = self.rng.choices(RUN_VALUES, weights=weights)[0]
            ball.commentary = f"{bowler.name} to {striker.name}, {ball.runs_scored} run(s)"

        event = self.ledger.record_ball(fixture.id, ball, commit=False)

        progress.legal_balls += 1
        progress.runs += ball.runs_scored
        if ball.is_wicket:
            progress.wickets += 1
            progress.striker = non_striker
            progress.non_striker = progress.next_batter()
        return event

    def simulate(
        self,
        fixture_id: int,
        forced_winner_id: Optional[int] = None,
        target_score: Optional[int] = None,
    ) -> SimulationResult:
        fixture = self.lifecycle.get_fixture(fixture_id)
        if fixture.status == FixtureStatus.COMPLETED:
            raise InvalidState("Match already completed")
        if not fixture.team1_id or not fixture.team2_id:
            raise InvalidState("Both teams must be set before simulating")
        if forced_winner_id is not None and forced_winner_id not in (fixture.team1_id, fixture.team2_id):
            raise ValidationFailure(f"Team {forced_winner_id} is not playing fixture {fixture_id}")

        rosters = {team_id: self._roster(team_id) for team_id in (fixture.team1_id, fixture.team2_id)}
        for team_id, roster in rosters.items():
            if not roster:
                raise InvalidState(f"Team {team_id} has no players")

        self._ensure_toss(fixture)
        first_id = batting_first(
            fixture.toss_winner_id, fixture.toss_decision, fixture.team1_id, fixture.team2_id
        )
        batting_order = {1: first_id, 2: fixture.opponent_of(first_id)}

        last = self.ledger.last_ball(fixture.id)
        start_innings = last.innings if last else 1
        total_overs = fixture.total_overs or fixture.tournament.total_overs

        delivered = 0
        capped = False
        first_innings_runs = None
        for number in range(start_innings, 3):
            progress = self._load_innings(fixture, number, batting_order[number], rosters)

            target = target_score if number == start_innings else None
            if number == 2:
                if first_innings_runs is None:
                    first_innings_runs = calculate_innings(self.ledger.balls(fixture.id, innings=1)).runs
                chase = first_innings_runs + 1
                target = min(target, chase) if target is not None else chase

            while not self._innings_over(progress, total_overs, target):
                if delivered >= self.max_deliveries:
                    capped = True
                    break
                self._bowl(fixture, progress, forced_winner_id)
                delivered += 1

            if capped:
                logger.warning(
                    "Simulation of fixture %s hit the %d delivery cap", fixture.id, self.max_deliveries
                )
                break
            if number == 1:
                first_innings_runs = progress.runs

        logger.info("Simulated %d deliveries for fixture %s", delivered, fixture.id)
        fixture = self.lifecycle.complete_fixture(fixture)
        return SimulationResult(balls_simulated=delivered, fixture=fixture)
