"""
Tests for the match simulator.
"""
import random

import pytest

from app.engine.innings import calculate_innings
from app.engine.ledger import BallInput, BallLedger
from app.engine.simulator import MatchSimulator, bowling_attack
from app.errors import InvalidState, ValidationFailure
from app.generators.player_generator import PlayerGenerator
from app.models import FixtureStage, FixtureStatus, Player, TossDecision


@pytest.fixture
def league_fixture(make_tournament, make_fixture):
    def _make(squad_size=11, total_overs=20):
        tournament = make_tournament(teams=2, squad_size=squad_size, total_overs=total_overs)
        team1, team2 = tournament.teams
        return make_fixture(tournament, team1, team2)
    return _make


def innings_scores(session, fixture_id):
    ledger = BallLedger(session)
    return (
        calculate_innings(ledger.balls(fixture_id, innings=1)),
        calculate_innings(ledger.balls(fixture_id, innings=2)),
    )


class TestSimulate:

    def test_completes_fixture(self, test_db, league_fixture):
        fixture = league_fixture()
        result = MatchSimulator(test_db, rng=random.Random(7)).simulate(fixture.id)

        assert result.fixture.status == FixtureStatus.COMPLETED
        assert result.fixture.result_description
        assert result.fixture.toss_winner_id in (fixture.team1_id, fixture.team2_id)
        assert result.balls_simulated == len(BallLedger(test_db).balls(fixture.id))

        innings1, innings2 = innings_scores(test_db, fixture.id)
        for score in (innings1, innings2):
            assert score.legal_balls <= 120
            assert score.wickets <= 10
        # chase stops as soon as the target is passed
        assert innings2.runs <= innings1.runs + 6

    def test_same_seed_same_match(self, test_db, make_tournament, make_fixture):
        tournament = make_tournament(teams=2)
        team1, team2 = tournament.teams
        first = make_fixture(tournament, team1, team2, match_order=1)
        second = make_fixture(tournament, team1, team2, match_order=2)

        MatchSimulator(test_db, rng=random.Random(3)).simulate(first.id)
        MatchSimulator(test_db, rng=random.Random(3)).simulate(second.id)

        assert first.result_description == second.result_description
        assert (first.team1_runs, first.team2_runs) == (second.team1_runs, second.team2_runs)

    def test_wicket_limit_follows_roster(self, test_db, league_fixture):
        fixture = league_fixture(squad_size=3)
        MatchSimulator(test_db, rng=random.Random(11)).simulate(fixture.id)

        for score in innings_scores(test_db, fixture.id):
            assert score.wickets <= 2

    def test_target_score_stops_current_innings(self, test_db, league_fixture):
        fixture = league_fixture()
        MatchSimulator(test_db, rng=random.Random(5)).simulate(fixture.id, target_score=30)

        innings1, _ = innings_scores(test_db, fixture.id)
        assert innings1.runs <= 35
        assert fixture.status == FixtureStatus.COMPLETED

    def test_delivery_cap(self, test_db, league_fixture):
        fixture = league_fixture()
        result = MatchSimulator(test_db, rng=random.Random(1), max_deliveries=10).simulate(fixture.id)

        assert result.balls_simulated == 10
        assert result.fixture.status == FixtureStatus.COMPLETED

    def test_resumes_from_ledger(self, test_db, league_fixture):
        fixture = league_fixture()
        fixture.toss_winner_id = fixture.team1_id
        fixture.toss_decision = TossDecision.BAT
        test_db.commit()
        batters = fixture.team1.players
        bowler = fixture.team2.players[0]
        ledger = BallLedger(test_db)
        ledger.record_ball(fixture.id, BallInput(
            innings=1, over_number=0, ball_number=1,
            striker_id=batters[0].id, non_striker_id=batters[1].id, bowler_id=bowler.id,
            is_wicket=True, wicket_type="Bowled", player_out_id=batters[0].id,
        ))

        MatchSimulator(test_db, rng=random.Random(2)).simulate(fixture.id)

        balls = ledger.balls(fixture.id)
        assert balls[0].is_wicket
        # survivor takes strike, the next unused batter comes in
        assert balls[1].striker_id == batters[1].id
        assert balls[1].non_striker_id == batters[2].id

    def test_bowlers_rotate_through_specialists(self, test_db, league_fixture):
        fixture = league_fixture()
        fixture.toss_winner_id = fixture.team1_id
        fixture.toss_decision = TossDecision.BAT
        squad = fixture.team2.players
        for player, role in zip(squad, PlayerGenerator.SQUAD_ROLES):
            player.role = role
        test_db.commit()

        MatchSimulator(test_db, rng=random.Random(9)).simulate(fixture.id)

        # all-rounders and bowlers sit at 6-11 in the batting order
        attack = [p.id for p in squad[5:10]]
        assert [p.role for p in squad[5:10]] == ["All-Rounder", "All-Rounder", "Bowler", "Bowler", "Bowler"]
        for b in BallLedger(test_db).balls(fixture.id, innings=1):
            assert b.bowler_id == attack[b.over_number % 5]


class TestBowlingAttack:

    def test_prefers_bowlers_and_all_rounders(self):
        roster = [Player(id=i, name=f"P{i}", role=role) for i, role in enumerate(PlayerGenerator.SQUAD_ROLES, 1)]
        assert [p.id for p in bowling_attack(roster)] == [6, 7, 8, 9, 10]

    def test_role_spelling_is_loose(self):
        roster = [
            Player(id=1, name="A", role="Batter"),
            Player(id=2, name="B", role="all rounder"),
            Player(id=3, name="C", role="BOWLER"),
        ]
        assert [p.id for p in bowling_attack(roster)] == [2, 3]

    def test_no_specialists_uses_top_of_roster(self):
        roster = [Player(id=i, name=f"P{i}", role="Batter") for i in range(1, 8)]
        assert [p.id for p in bowling_attack(roster)] == [1, 2, 3, 4, 5]


class TestSimulateRejections:

    def test_completed_fixture(self, test_db, league_fixture):
        fixture = league_fixture()
        fixture.status = FixtureStatus.COMPLETED
        test_db.commit()
        with pytest.raises(InvalidState):
            MatchSimulator(test_db).simulate(fixture.id)

    def test_missing_team(self, test_db, make_tournament, make_fixture):
        tournament = make_tournament(teams=2)
        team1, team2 = tournament.teams
        fixture = make_fixture(tournament, team1, team2, stage=FixtureStage.FINAL)
        fixture.team2_id = None
        test_db.commit()
        with pytest.raises(InvalidState):
            MatchSimulator(test_db).simulate(fixture.id)

    def test_empty_roster(self, test_db, league_fixture):
        fixture = league_fixture(squad_size=0)
        with pytest.raises(InvalidState):
            MatchSimulator(test_db).simulate(fixture.id)
        assert BallLedger(test_db).balls(fixture.id) == []

    def test_forced_winner_must_be_playing(self, test_db, league_fixture):
        fixture = league_fixture()
        with pytest.raises(ValidationFailure):
            MatchSimulator(test_db).simulate(fixture.id, forced_winner_id=9999)


class TestForcedWinner:

    def test_forced_winner_wins_large_majority(self, test_db, make_tournament, make_fixture):
        tournament = make_tournament(teams=2, total_overs=5)
        team1, team2 = tournament.teams
        wins = 0
        for seed in range(20):
            fixture = make_fixture(tournament, team1, team2, match_order=seed + 1)
            result = MatchSimulator(test_db, rng=random.Random(seed)).simulate(
                fixture.id, forced_winner_id=team2.id, target_score=60
            )
            if result.fixture.winning_team_id == team2.id:
                wins += 1
        assert wins >= 18
