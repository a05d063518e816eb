#!/usr/bin/env python3
"""
Check that the simulator produces believable scores and that a forced
winner actually wins most of the time.

Run with: python scripts/check_simulation_bias.py

Success Criteria:
- Unforced: avg first-innings score 100-220, neither side wins > 70%
- Forced: the favoured team wins >= 85% of matches
"""

import random
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from app.database import Base
from app.engine.result import batting_first
from app.engine.simulator import MatchSimulator
from app.generators.player_generator import PlayerGenerator
from app.models import Fixture, FixtureStage, FixtureStatus, Team, Tournament

NUM_MATCHES = 50


def build_tournament(session: Session) -> Tournament:
    tournament = Tournament(name="Bias Check", total_overs=20)
    session.add(tournament)
    session.flush()
    for name, short in (("Home XI", "HOM"), ("Away XI", "AWY")):
        team = Team(tournament_id=tournament.id, name=name, short_name=short)
        session.add(team)
        session.flush()
        session.add_all(PlayerGenerator.generate_squad(team_id=team.id, rng=random.Random(team.id)))
    session.commit()
    return tournament


def run_scenario(session: Session, tournament: Tournament, forced: bool, offset: int) -> dict:
    """Simulate NUM_MATCHES fixtures and collect results"""
    home, away = tournament.teams
    first_innings = []
    away_wins = 0

    for i in range(NUM_MATCHES):
        fixture = Fixture(
            tournament_id=tournament.id,
            stage=FixtureStage.LEAGUE,
            match_order=offset + i + 1,
            team1_id=home.id,
            team2_id=away.id,
            status=FixtureStatus.SCHEDULED,
            total_overs=tournament.total_overs,
        )
        session.add(fixture)
        session.commit()

        simulator = MatchSimulator(session, rng=random.Random(offset + i))
        result = simulator.simulate(fixture.id, forced_winner_id=away.id if forced else None)

        completed = result.fixture
        # snapshot is keyed by team, not innings
        first_id = batting_first(
            completed.toss_winner_id, completed.toss_decision, completed.team1_id, completed.team2_id
        )
        runs = completed.team1_runs if first_id == home.id else completed.team2_runs
        first_innings.append(runs or 0)

        if completed.winning_team_id == away.id:
            away_wins += 1

    return {
        "avg_score": sum(first_innings) / len(first_innings),
        "min_score": min(first_innings),
        "max_score": max(first_innings),
        "away_win_rate": away_wins / NUM_MATCHES * 100,
    }


def main():
    print("=" * 60)
    print("Match Simulator Bias Check")
    print(f"Running {NUM_MATCHES} matches per scenario")
    print("=" * 60)

    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = Session(engine)
    tournament = build_tournament(session)

    all_passed = True
    for offset, (name, forced) in enumerate((("unforced", False), ("forced_away", True))):
        print(f"\nRunning scenario: {name}...")
        stats = run_scenario(session, tournament, forced, offset * NUM_MATCHES)

        issues = []
        if forced:
            if stats["away_win_rate"] < 85:
                issues.append(f"Forced winner won only {stats['away_win_rate']:.1f}%")
        else:
            if not 100 <= stats["avg_score"] <= 220:
                issues.append(f"Avg first-innings score {stats['avg_score']:.1f} outside 100-220")
            if not 30 <= stats["away_win_rate"] <= 70:
                issues.append(f"Away win rate {stats['away_win_rate']:.1f}% outside 30-70%")

        passed = not issues
        all_passed = all_passed and passed
        print(f"  [{'PASS' if passed else 'FAIL'}] {name}")
        print(f"    First Innings: {stats['min_score']}-{stats['max_score']} (avg: {stats['avg_score']:.1f})")
        print(f"    Away Win Rate: {stats['away_win_rate']:.1f}%")
        for issue in issues:
            print(f"    ! {issue}")

    session.close()
    print("\n" + "=" * 60)
    print("OVERALL: ALL SCENARIOS PASSED" if all_passed else "OVERALL: SOME SCENARIOS FAILED")
    print("=" * 60)
    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
