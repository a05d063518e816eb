"""
Tests for league fixture generation.
"""
from datetime import datetime
from itertools import combinations

import pytest

from app.engine.fixture_scheduler import FixtureScheduler, round_robin_pairings
from app.errors import InvalidState, NotFoundError, ValidationFailure
from app.models import FixtureStage, FixtureStatus


class TestRoundRobinPairings:

    @pytest.mark.parametrize("team_count", [2, 3, 4, 5, 8])
    def test_every_pair_meets_once(self, team_count):
        teams = list(range(1, team_count + 1))
        rounds = round_robin_pairings(teams)
        pairs = [frozenset(p) for r in rounds for p in r]

        assert len(pairs) == team_count * (team_count - 1) // 2
        assert set(pairs) == {frozenset(c) for c in combinations(teams, 2)}
        assert all(len(p) == 2 for p in pairs)

    def test_no_team_plays_twice_in_a_round(self):
        for pairings in round_robin_pairings([1, 2, 3, 4, 5, 6]):
            seen = [team for pair in pairings for team in pair]
            assert len(seen) == len(set(seen))

    def test_odd_field_gets_a_bye_each_round(self):
        rounds = round_robin_pairings([1, 2, 3, 4, 5])
        assert len(rounds) == 5
        assert all(len(r) == 2 for r in rounds)


class TestGenerateLeague:

    def test_generates_full_league(self, test_db, make_tournament):
        tournament = make_tournament(teams=4)
        fixtures = FixtureScheduler(test_db, tournament).generate_league(venue="Eden Gardens")

        assert len(fixtures) == 6
        assert [f.match_order for f in fixtures] == [1, 2, 3, 4, 5, 6]
        for f in fixtures:
            assert f.team1_id != f.team2_id
            assert f.stage == FixtureStage.LEAGUE
            assert f.status == FixtureStatus.SCHEDULED
            assert f.venue == "Eden Gardens"
            assert f.total_overs == tournament.total_overs

    def test_rounds_are_a_day_apart(self, test_db, make_tournament):
        tournament = make_tournament(teams=4)
        start = datetime(2025, 4, 1, 19, 30)
        fixtures = FixtureScheduler(test_db, tournament).generate_league(start=start)

        dates = sorted({f.match_date for f in fixtures})
        assert len(dates) == 3
        assert dates[0] == start
        assert (dates[-1] - dates[0]).days == 2

    def test_defaults_to_tournament_venue(self, test_db, make_tournament):
        tournament = make_tournament(teams=2)
        fixtures = FixtureScheduler(test_db, tournament).generate_league()
        assert fixtures[0].venue == "Test Stadium"

    def test_refuses_when_fixtures_exist(self, test_db, make_tournament):
        tournament = make_tournament(teams=4)
        scheduler = FixtureScheduler(test_db, tournament)
        scheduler.generate_league()
        with pytest.raises(InvalidState):
            scheduler.generate_league()

    def test_needs_two_teams(self, test_db, make_tournament):
        tournament = make_tournament(teams=1)
        with pytest.raises(InvalidState):
            FixtureScheduler(test_db, tournament).generate_league()


class TestCreateFixture:

    def test_appends_after_existing(self, test_db, make_tournament):
        tournament = make_tournament(teams=3)
        a, b, c = tournament.teams
        scheduler = FixtureScheduler(test_db, tournament)
        scheduler.generate_league()

        fixture = scheduler.create_fixture(a.id, c.id, venue="Neutral Ground")

        assert fixture.match_order == 4
        assert fixture.venue == "Neutral Ground"

    def test_same_team_rejected(self, test_db, make_tournament):
        tournament = make_tournament(teams=2)
        a, _ = tournament.teams
        with pytest.raises(ValidationFailure):
            FixtureScheduler(test_db, tournament).create_fixture(a.id, a.id)

    def test_unknown_team(self, test_db, make_tournament):
        tournament = make_tournament(teams=2)
        a, _ = tournament.teams
        with pytest.raises(NotFoundError):
            FixtureScheduler(test_db, tournament).create_fixture(a.id, 999)

    def test_team_from_other_tournament(self, test_db, make_tournament):
        home = make_tournament(teams=2, name="Home Cup")
        away = make_tournament(teams=2, name="Away Cup")
        with pytest.raises(NotFoundError):
            FixtureScheduler(test_db, home).create_fixture(home.teams[0].id, away.teams[0].id)
