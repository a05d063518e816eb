"""
Match Result Resolver - winner/margin, batting order and MVP points
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from app.engine.innings import InningsScore
from app.models.ball import is_run_out
from app.models.fixture import TossDecision


# MVP weights
POINTS_PER_RUN = 1
FOUR_BONUS = 1
SIX_BONUS = 2
POINTS_PER_WICKET = 25
POINTS_PER_DOT = 1
POINTS_PER_DISMISSAL_INVOLVEMENT = 10

MATCH_TIED = "Match Tied"
WICKETS_PER_INNINGS = 10


@dataclass
class TeamRef:
    """Minimal team identity used in result text"""
    id: int
    name: str


@dataclass
class Resolution:
    """Outcome of a completed match"""
    result_text: str
    winning_team_id: Optional[int]
    losing_team_id: Optional[int] = None

    @property
    def is_tie(self) -> bool:
        return self.winning_team_id is None


def batting_first(
    toss_winner_id: Optional[int],
    toss_decision,
    team1_id: Optional[int],
    team2_id: Optional[int],
) -> Optional[int]:
    """
    Team that bats in innings 1.

    Toss winner if they elected to bat, otherwise the other side. With no
    toss recorded team1 is taken to bat first.
    """
    if isinstance(toss_decision, str):
        toss_decision = TossDecision(toss_decision)
    if toss_winner_id is None or toss_winner_id not in (team1_id, team2_id):
        return team1_id
    if toss_decision == TossDecision.BAT:
        return toss_winner_id
    return team2_id if toss_winner_id == team1_id else team1_id


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def resolve(
    innings1: InningsScore,
    innings2: InningsScore,
    first: TeamRef,
    second: TeamRef,
) -> Resolution:
    """
    Decide the match from both innings.

    `first` batted in innings 1. Chasing side wins by wickets in hand,
    defending side by the run difference, level scores are a tie.
    """
    if innings2.runs > innings1.runs:
        wickets_in_hand = WICKETS_PER_INNINGS - innings2.wickets
        return Resolution(
            result_text=f"{second.name} won by {_plural(wickets_in_hand, 'wicket')}",
            winning_team_id=second.id,
            losing_team_id=first.id,
        )
    if innings1.runs > innings2.runs:
        margin = innings1.runs - innings2.runs
        return Resolution(
            result_text=f"{first.name} won by {_plural(margin, 'run')}",
            winning_team_id=first.id,
            losing_team_id=second.id,
        )
    return Resolution(result_text=MATCH_TIED, winning_team_id=None)


def score_players(events: Iterable) -> dict[int, int]:
    """
    MVP points per player id, in first-encountered ball order.

    Batting: 1 per run, +1 per four, +2 per six.
    Bowling: 25 per wicket (not run outs), 1 per dot ball.
    Fielding: 10 per dismissal involvement.
    """
    points: dict[int, int] = {}

    for ball in events:
        runs = ball.runs_scored or 0
        extras = ball.extras or 0

        if ball.striker_id:
            points.setdefault(ball.striker_id, 0)
            points[ball.striker_id] += runs * POINTS_PER_RUN
            if runs == 4:
                points[ball.striker_id] += FOUR_BONUS
            if runs == 6:
                points[ball.striker_id] += SIX_BONUS

        if ball.bowler_id:
            points.setdefault(ball.bowler_id, 0)
            if ball.is_wicket and not is_run_out(ball.wicket_type):
                points[ball.bowler_id] += POINTS_PER_WICKET
            if runs == 0 and not extras:
                points[ball.bowler_id] += POINTS_PER_DOT

        if ball.fielder_id:
            points.setdefault(ball.fielder_id, 0)
            points[ball.fielder_id] += POINTS_PER_DISMISSAL_INVOLVEMENT

    return points


def player_of_match(events: Iterable) -> Optional[int]:
    """Highest MVP total; ties go to whoever appeared first in the ledger"""
    best_id = None
    best_points = -1
    for player_id, total in score_players(events).items():
        if total > best_points:
            best_points = total
            best_id = player_id
    return best_id


def mvp_leaderboard(events: Iterable, limit: int = 10) -> list[tuple[int, int]]:
    """[(player_id, points)] sorted by points, stable on first appearance"""
    ranked = sorted(score_players(events).items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]
