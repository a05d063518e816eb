"""
DLS helper - simplified Duckworth-Lewis resources and revised targets

Resource table is the public-domain 20 over approximation; the professional
(Stern) edition is not reproduced.
"""
import math
from dataclasses import dataclass

# Overs left -> resource % remaining by wickets lost (0-9)
RESOURCE_TABLE_T20: dict[int, tuple[float, ...]] = {
    20: (100.0, 93.4, 85.1, 74.9, 62.7, 49.0, 34.9, 22.0, 11.9, 4.7),
    19: (96.1, 90.2, 82.7, 73.2, 61.6, 48.4, 34.6, 21.9, 11.9, 4.7),
    18: (92.2, 86.9, 80.1, 71.3, 60.5, 47.7, 34.3, 21.8, 11.9, 4.7),
    17: (88.2, 83.5, 77.4, 69.3, 59.2, 46.9, 33.9, 21.7, 11.9, 4.7),
    16: (84.1, 80.0, 74.5, 67.1, 57.7, 46.1, 33.5, 21.5, 11.8, 4.7),
    15: (79.9, 76.4, 71.5, 64.8, 56.1, 45.1, 33.0, 21.3, 11.8, 4.7),
    14: (75.7, 72.6, 68.4, 62.3, 54.4, 44.0, 32.5, 21.1, 11.7, 4.7),
    13: (71.4, 68.8, 65.1, 59.7, 52.5, 42.8, 31.8, 20.9, 11.7, 4.7),
    12: (67.0, 64.9, 61.7, 56.9, 50.4, 41.5, 31.1, 20.6, 11.6, 4.7),
    11: (62.5, 60.8, 58.1, 54.0, 48.2, 40.0, 30.3, 20.2, 11.5, 4.7),
    10: (57.9, 56.6, 54.4, 50.8, 45.8, 38.4, 29.4, 19.8, 11.4, 4.7),
    9: (53.2, 52.3, 50.5, 47.5, 43.2, 36.6, 28.3, 19.3, 11.3, 4.7),
    8: (48.4, 47.8, 46.4, 44.0, 40.4, 34.6, 27.1, 18.7, 11.1, 4.7),
    7: (43.5, 43.1, 42.1, 40.2, 37.3, 32.4, 25.7, 18.0, 10.9, 4.7),
    6: (38.5, 38.3, 37.6, 36.2, 33.9, 29.9, 24.1, 17.2, 10.6, 4.7),
    5: (33.3, 33.2, 32.9, 31.9, 30.2, 27.1, 22.2, 16.2, 10.3, 4.7),
    4: (27.9, 27.9, 27.8, 27.2, 26.1, 23.9, 19.9, 15.0, 9.8, 4.7),
    3: (22.3, 22.3, 22.3, 22.0, 21.5, 20.0, 17.2, 13.4, 9.1, 4.7),
    2: (16.5, 16.5, 16.5, 16.4, 16.2, 15.5, 13.7, 11.1, 8.0, 4.6),
    1: (10.2, 10.2, 10.2, 10.2, 10.2, 10.0, 9.2, 7.9, 6.2, 3.9),
    0: (0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0),
}

MAX_TABLE_OVERS = 20

# Average first-innings score used when the chasing side has more resources
G50_T20 = 160
G50_ODI = 245


@dataclass
class RevisedTarget:
    target: int
    par_score: int  # scores level at this total


@dataclass
class InterruptionResources:
    before: float
    after: float

    @property
    def lost(self) -> float:
        return max(0.0, round(self.before - self.after, 1))


def resource_percentage(overs_left: float, wickets_lost: int) -> float:
    """Resources remaining; partial overs round up to the next table row"""
    if wickets_lost >= 10:
        return 0.0
    over_index = math.ceil(overs_left)
    if over_index > MAX_TABLE_OVERS:
        return 100.0
    if over_index <= 0:
        return 0.0
    return RESOURCE_TABLE_T20[over_index][max(0, wickets_lost)]


def g50_for(match_format: str) -> int:
    return G50_ODI if match_format.upper() == "ODI" else G50_T20


def revised_target(
    team1_score: int,
    team1_resources: float = 100.0,
    team2_resources: float = 100.0,
    match_format: str = "T20",
) -> RevisedTarget:
    """
    Target for the side batting second.

    Fewer resources scale the first innings score down; more resources
    add G50 * (R2 - R1) / 100 on top of it.
    """
    if team1_resources <= 0:
        raise ValueError("team1_resources must be positive")

    if team2_resources < team1_resources:
        par = math.floor(team1_score * (team2_resources / team1_resources))
    else:
        par = math.floor(team1_score + g50_for(match_format) * (team2_resources - team1_resources) / 100)

    return RevisedTarget(target=par + 1, par_score=par)


def resources_after_interruption(
    total_overs: float,
    overs_bowled: float,
    wickets_lost: int,
    overs_lost: float,
) -> InterruptionResources:
    remaining_before = total_overs - overs_bowled
    return InterruptionResources(
        before=resource_percentage(remaining_before, wickets_lost),
        after=resource_percentage(remaining_before - overs_lost, wickets_lost),
    )


def chase_target(
    first_innings_runs: int,
    total_overs: int,
    legal_balls_bowled: int,
    wickets_lost: int,
    overs_lost: float,
    match_format: str = "T20",
) -> tuple[RevisedTarget, InterruptionResources]:
    """
    Revised target for a chase cut short by `overs_lost` at its current
    position. The first innings is assumed to have had full resources.
    """
    overs_bowled = legal_balls_bowled / 6
    resources = resources_after_interruption(total_overs, overs_bowled, wickets_lost, overs_lost)
    team2_resources = 100.0 - resources.lost
    return revised_target(first_innings_runs, 100.0, team2_resources, match_format), resources
