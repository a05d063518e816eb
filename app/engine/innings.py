"""
Innings Calculator - pure score derivation from ball events
"""
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from app.models.ball import ExtraType, ILLEGAL_EXTRAS, is_run_out


BALLS_PER_OVER = 6


@dataclass
class InningsScore:
    """Derived score for one innings"""
    runs: int = 0
    wickets: int = 0
    legal_balls: int = 0
    bowler_wickets: int = 0  # excludes run outs
    extras: int = 0

    @property
    def overs_display(self) -> str:
        return overs_display(self.legal_balls)

    @property
    def overs(self) -> float:
        return overs_to_decimal(self.legal_balls)

    @property
    def run_rate(self) -> float:
        if self.legal_balls == 0:
            return 0.0
        return (self.runs / self.legal_balls) * BALLS_PER_OVER

    def as_dict(self) -> dict:
        return {
            "runs": self.runs,
            "wickets": self.wickets,
            "legal_balls": self.legal_balls,
            "overs": self.overs_display,
            "run_rate": round(self.run_rate, 2),
        }

    def __str__(self):
        return f"{self.runs}/{self.wickets} ({self.overs_display})"


@dataclass
class WinProbability:
    """Live win split during a chase, in percent"""
    batting_first: int
    chasing: int
    required_run_rate: Optional[float] = None


def overs_display(legal_balls: int) -> str:
    """118 balls -> "19.4" """
    return f"{legal_balls // BALLS_PER_OVER}.{legal_balls % BALLS_PER_OVER}"


def overs_to_decimal(legal_balls: int) -> float:
    """118 balls -> 19.4 (overs notation, not a true fraction)"""
    return float(overs_display(legal_balls))


def balls_from_overs(overs: Optional[float]) -> int:
    """
    Convert stored overs notation back to legal balls.

    The digit after the point is a ball count within the partial over,
    so 19.4 means 19 overs and 4 balls = 118 balls.
    """
    if not overs:
        return 0
    whole = math.floor(overs)
    return int(whole * BALLS_PER_OVER + round((overs - whole) * 10))


def _extra_type(event) -> ExtraType:
    value = event.extra_type
    if value is None:
        return ExtraType.NONE
    if isinstance(value, ExtraType):
        return value
    return ExtraType(value)


def calculate_innings(events: Iterable) -> InningsScore:
    """
    Derive runs / wickets / legal balls from the ball events of one innings.

    Works on BallEvent rows or any object exposing the same attributes.
    """
    score = InningsScore()
    for event in events:
        runs_off_bat = event.runs_scored or 0
        extras = event.extras or 0
        score.runs += runs_off_bat + extras
        score.extras += extras
        if event.is_wicket:
            score.wickets += 1
            if not is_run_out(event.wicket_type):
                score.bowler_wickets += 1
        if _extra_type(event) not in ILLEGAL_EXTRAS:
            score.legal_balls += 1
    return score


def _band_for_required_rate(required_rate: float) -> int:
    if required_rate > 12:
        return 10
    if required_rate > 10:
        return 20
    if required_rate > 8:
        return 35
    if required_rate > 6:
        return 60
    return 80


def win_probability(
    innings1: InningsScore,
    innings2: InningsScore,
    total_overs: int,
) -> WinProbability:
    """
    Banded chase heuristic, not a statistical model.

    Required run rate picks a base win % for the chasing side, which is then
    reduced for wickets lost (30 at eight down, 15 at six down).
    """
    target = innings1.runs + 1
    runs_needed = target - innings2.runs
    balls_remaining = total_overs * BALLS_PER_OVER - innings2.legal_balls

    if runs_needed <= 0:
        return WinProbability(batting_first=0, chasing=100)
    if balls_remaining <= 0 or innings2.wickets >= 10:
        return WinProbability(batting_first=100, chasing=0)

    required_rate = runs_needed / (balls_remaining / BALLS_PER_OVER)
    chasing = _band_for_required_rate(required_rate)

    if innings2.wickets >= 8:
        chasing -= 30
    elif innings2.wickets >= 6:
        chasing -= 15

    chasing = max(0, min(100, chasing))
    return WinProbability(
        batting_first=100 - chasing,
        chasing=chasing,
        required_run_rate=round(required_rate, 2),
    )
