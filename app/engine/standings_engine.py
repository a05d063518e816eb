"""
Standings Engine - league points table with net run rate
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session

from app.engine.innings import BALLS_PER_OVER, balls_from_overs, calculate_innings
from app.engine.ledger import BallLedger
from app.engine.result import batting_first
from app.models.team import Team
from app.models.tournament import Tournament
from app.models.fixture import Fixture, FixtureStage, FixtureStatus
from app.models.standings import StandingsRow

logger = logging.getLogger(__name__)

POINTS_FOR_WIN = 2
POINTS_FOR_SHARED = 1
ALL_OUT_WICKETS = 10


@dataclass
class TeamAggregate:
    """
    Working totals for one team during a recompute.
    Overs are kept as legal BALLS to avoid notation mistakes.
    """
    team_id: int
    played: int = 0
    won: int = 0
    lost: int = 0
    tied: int = 0
    no_result: int = 0
    points: int = 0
    runs_for: int = 0
    balls_for: int = 0
    runs_against: int = 0
    balls_against: int = 0

    @property
    def nrr(self) -> float:
        return net_run_rate(self.runs_for, self.balls_for, self.runs_against, self.balls_against)


@dataclass
class InningsLine:
    """One innings as it feeds NRR"""
    batting_team_id: int
    runs: int
    wickets: int
    balls: int


@dataclass
class LeagueStanding:
    """Team standing in league table"""
    position: int
    team: Team
    row: StandingsRow


def run_rate(runs: int, balls: int) -> float:
    if balls <= 0:
        return 0.0
    return runs / (balls / BALLS_PER_OVER)


def net_run_rate(runs_for: int, balls_for: int, runs_against: int, balls_against: int) -> float:
    """NRR = scoring rate - conceding rate, each side zero-guarded"""
    return round(run_rate(runs_for, balls_for) - run_rate(runs_against, balls_against), 3)


def nrr_denominator(balls: int, wickets: int, total_overs: int) -> int:
    """All-out innings count as the full quota of overs"""
    if wickets >= ALL_OUT_WICKETS:
        return total_overs * BALLS_PER_OVER
    return balls


class StandingsEngine:
    """
    Rebuilds a tournament's points table from its completed league fixtures.
    """

    def __init__(self, session: Session, tournament: Tournament):
        self.session = session
        self.tournament = tournament
        self._ledger = BallLedger(session)

    def _teams(self) -> list[Team]:
        return (
            self.session.query(Team)
            .filter_by(tournament_id=self.tournament.id)
            .order_by(Team.id)
            .all()
        )

    def _completed_league_fixtures(self) -> list[Fixture]:
        return (
            self.session.query(Fixture)
            .filter_by(
                tournament_id=self.tournament.id,
                stage=FixtureStage.LEAGUE,
                status=FixtureStatus.COMPLETED,
            )
            .order_by(Fixture.match_order, Fixture.id)
            .all()
        )

    def innings_lines(self, fixture: Fixture) -> list[InningsLine]:
        """
        Both innings of a fixture, from the completion snapshot when present,
        otherwise derived from the ball ledger.
        """
        if fixture.has_snapshot:
            lines = []
            for team_id in (fixture.team1_id, fixture.team2_id):
                runs, wickets, overs = fixture.snapshot_for(team_id)
                lines.append(InningsLine(team_id, runs, wickets, balls_from_overs(overs)))
            return lines

        first = batting_first(
            fixture.toss_winner_id, fixture.toss_decision, fixture.team1_id, fixture.team2_id
        )
        second = fixture.opponent_of(first)
        lines = []
        for innings_no, team_id in ((1, first), (2, second)):
            score = calculate_innings(self._ledger.balls(fixture.id, innings=innings_no))
            lines.append(InningsLine(team_id, score.runs, score.wickets, score.legal_balls))
        return lines

    def _apply_fixture(self, fixture: Fixture, tallies: dict[int, TeamAggregate]) -> None:
        t1 = tallies[fixture.team1_id]
        t2 = tallies[fixture.team2_id]
        lines = self.innings_lines(fixture)
        has_data = any(line.balls > 0 for line in lines)

        t1.played += 1
        t2.played += 1

        if fixture.winning_team_id == t1.team_id:
            t1.won += 1
            t1.points += POINTS_FOR_WIN
            t2.lost += 1
        elif fixture.winning_team_id == t2.team_id:
            t2.won += 1
            t2.points += POINTS_FOR_WIN
            t1.lost += 1
        else:
            # Tie or no result
            for tally in (t1, t2):
                tally.points += POINTS_FOR_SHARED
                if has_data:
                    tally.tied += 1
                else:
                    tally.no_result += 1

        total_overs = fixture.total_overs or self.tournament.total_overs
        for line in lines:
            if line.balls <= 0:
                continue
            batting = tallies[line.batting_team_id]
            bowling = t2 if batting is t1 else t1
            balls = nrr_denominator(line.balls, line.wickets, total_overs)

            batting.runs_for += line.runs
            batting.balls_for += balls
            bowling.runs_against += line.runs
            bowling.balls_against += balls

    def recompute(self) -> list[LeagueStanding]:
        """
        Fold every completed league fixture into fresh rows and upsert them
        keyed by (tournament, team).
        """
        teams = self._teams()
        tallies = {team.id: TeamAggregate(team_id=team.id) for team in teams}

        for fixture in self._completed_league_fixtures():
            if fixture.team1_id not in tallies or fixture.team2_id not in tallies:
                logger.warning("Skipping fixture %s: team not in tournament %s", fixture.id, self.tournament.id)
                continue
            self._apply_fixture(fixture, tallies)

        existing = {
            row.team_id: row
            for row in self.session.query(StandingsRow).filter_by(tournament_id=self.tournament.id).all()
        }
        for team_id, row in existing.items():
            if team_id not in tallies:
                self.session.delete(row)

        for team in teams:
            tally = tallies[team.id]
            row = existing.get(team.id)
            if row is None:
                row = StandingsRow(tournament_id=self.tournament.id, team_id=team.id)
                self.session.add(row)

            row.played = tally.played
            row.won = tally.won
            row.lost = tally.lost
            row.tied = tally.tied
            row.no_result = tally.no_result
            row.points = tally.points
            row.runs_for = tally.runs_for
            row.balls_for = tally.balls_for
            row.runs_against = tally.runs_against
            row.balls_against = tally.balls_against
            row.nrr = tally.nrr

        self.session.commit()
        logger.info("Recomputed standings for tournament %s (%d teams)", self.tournament.id, len(teams))
        return self.get_league_standings()

    def get_league_standings(self) -> list[LeagueStanding]:
        """Stored standings sorted by points, then NRR"""
        rows = (
            self.session.query(StandingsRow)
            .filter_by(tournament_id=self.tournament.id)
            .order_by(StandingsRow.points.desc(), StandingsRow.nrr.desc(), StandingsRow.id)
            .all()
        )
        return [
            LeagueStanding(position=pos, team=row.team, row=row)
            for pos, row in enumerate(rows, 1)
        ]

    def get_row(self, team_id: int) -> Optional[StandingsRow]:
        return (
            self.session.query(StandingsRow)
            .filter_by(tournament_id=self.tournament.id, team_id=team_id)
            .first()
        )
