"""
Tests for knockout generation and bracket progression.
"""
import pytest

from app.engine.bracket_engine import MANUAL_AWARD, BracketEngine
from app.engine.ledger import BallInput, BallLedger
from app.engine.match_lifecycle import MatchLifecycle
from app.errors import InvalidState, NotFoundError, ValidationFailure
from app.models import Fixture, FixtureStage, FixtureStatus


@pytest.fixture
def seeded_tournament(make_tournament, completed_league_fixture):
    """Four teams whose league table finishes A, B, C, D."""
    tournament = make_tournament(teams=4)
    a, b, c, d = tournament.teams
    results = [(a, b, a), (a, c, a), (a, d, a), (b, c, b), (b, d, b), (c, d, c)]
    for order, (home, away, winner) in enumerate(results, 1):
        loser_score = (120, 8, 20.0)
        winner_score = (150, 4, 20.0)
        home_score, away_score = (winner_score, loser_score) if winner is home else (loser_score, winner_score)
        completed_league_fixture(tournament, home, away, home_score, away_score, winner=winner, match_order=order)
    return tournament


def stage(fixtures, wanted):
    return next(f for f in fixtures if f.stage == wanted)


class TestGenerateKnockouts:

    def test_four_team_bracket(self, test_db, seeded_tournament):
        a, b, c, d = seeded_tournament.teams
        fixtures = BracketEngine(test_db, seeded_tournament).generate_knockouts()

        assert [f.stage for f in fixtures] == [
            FixtureStage.QUALIFIER_1, FixtureStage.ELIMINATOR,
            FixtureStage.QUALIFIER_2, FixtureStage.FINAL,
        ]
        q1 = stage(fixtures, FixtureStage.QUALIFIER_1)
        elim = stage(fixtures, FixtureStage.ELIMINATOR)
        assert (q1.team1_id, q1.team2_id) == (a.id, b.id)
        assert (elim.team1_id, elim.team2_id) == (c.id, d.id)
        assert stage(fixtures, FixtureStage.QUALIFIER_2).team1_id is None
        assert stage(fixtures, FixtureStage.FINAL).team2_id is None

    def test_two_teams_go_straight_to_final(self, test_db, make_tournament):
        tournament = make_tournament(teams=2)
        fixtures = BracketEngine(test_db, tournament).generate_knockouts()
        assert len(fixtures) == 1
        assert fixtures[0].stage == FixtureStage.FINAL
        assert fixtures[0].team1_id and fixtures[0].team2_id

    def test_three_teams_go_straight_to_final(self, test_db, make_tournament):
        tournament = make_tournament(teams=3)
        fixtures = BracketEngine(test_db, tournament).generate_knockouts()
        assert [f.stage for f in fixtures] == [FixtureStage.FINAL]

    def test_needs_two_teams(self, test_db, make_tournament):
        tournament = make_tournament(teams=1)
        with pytest.raises(InvalidState):
            BracketEngine(test_db, tournament).generate_knockouts()

    def test_regenerate_replaces_bracket(self, test_db, seeded_tournament):
        engine = BracketEngine(test_db, seeded_tournament)
        first = engine.generate_knockouts()
        engine.mark_winner(first[0].id, first[0].team1_id)

        engine.generate_knockouts()

        knockouts = test_db.query(Fixture).filter(
            Fixture.tournament_id == seeded_tournament.id,
            Fixture.stage != FixtureStage.LEAGUE,
        ).all()
        assert len(knockouts) == 4
        assert all(f.status == FixtureStatus.SCHEDULED for f in knockouts)
        assert seeded_tournament.champion_team_id is None


class TestProgression:

    def test_manual_awards_fill_bracket(self, test_db, seeded_tournament):
        a, b, c, d = seeded_tournament.teams
        engine = BracketEngine(test_db, seeded_tournament)
        fixtures = engine.generate_knockouts()
        q1 = stage(fixtures, FixtureStage.QUALIFIER_1)
        elim = stage(fixtures, FixtureStage.ELIMINATOR)
        q2 = stage(fixtures, FixtureStage.QUALIFIER_2)
        final = stage(fixtures, FixtureStage.FINAL)

        engine.mark_winner(q1.id, a.id)
        engine.mark_winner(elim.id, c.id)
        assert (q2.team1_id, q2.team2_id) == (b.id, c.id)
        assert final.team1_id == a.id

        engine.mark_winner(q2.id, c.id)
        assert (final.team1_id, final.team2_id) == (a.id, c.id)

        awarded = engine.mark_winner(final.id, a.id)
        assert awarded.result_description == MANUAL_AWARD
        assert awarded.status == FixtureStatus.COMPLETED
        assert seeded_tournament.champion_team_id == a.id
        assert seeded_tournament.runner_up_team_id == c.id

    def test_scored_completion_advances_like_manual_award(self, test_db, seeded_tournament):
        a, b, c, d = seeded_tournament.teams
        fixtures = BracketEngine(test_db, seeded_tournament).generate_knockouts()
        q1 = stage(fixtures, FixtureStage.QUALIFIER_1)

        # No toss recorded: team1 (A) bats first and defends
        ledger = BallLedger(test_db)
        for i in range(6):
            ledger.record_ball(q1.id, BallInput(innings=1, over_number=0, ball_number=i + 1, runs_scored=4))
        for i in range(6):
            ledger.record_ball(q1.id, BallInput(innings=2, over_number=0, ball_number=i + 1, runs_scored=1))

        MatchLifecycle(test_db).complete_fixture(q1)

        assert q1.winning_team_id == a.id
        assert q1.result_description == "Team 1 won by 18 runs"
        assert stage(fixtures, FixtureStage.FINAL).team1_id == a.id
        assert stage(fixtures, FixtureStage.QUALIFIER_2).team1_id == b.id

    def test_scored_final_crowns_champion(self, test_db, make_tournament):
        tournament = make_tournament(teams=2)
        final = BracketEngine(test_db, tournament).generate_knockouts()[0]
        ledger = BallLedger(test_db)
        ledger.record_ball(final.id, BallInput(innings=1, over_number=0, ball_number=1, runs_scored=1))
        ledger.record_ball(final.id, BallInput(innings=2, over_number=0, ball_number=1, runs_scored=6))

        MatchLifecycle(test_db).complete_fixture(final)

        assert tournament.champion_team_id == final.team2_id
        assert tournament.runner_up_team_id == final.team1_id

    def test_tied_knockout_does_not_advance(self, test_db, seeded_tournament):
        fixtures = BracketEngine(test_db, seeded_tournament).generate_knockouts()
        q1 = stage(fixtures, FixtureStage.QUALIFIER_1)

        MatchLifecycle(test_db).complete_fixture(q1)

        assert q1.winning_team_id is None
        assert stage(fixtures, FixtureStage.FINAL).team1_id is None


class TestMarkWinner:

    def test_unknown_fixture(self, test_db, seeded_tournament):
        with pytest.raises(NotFoundError):
            BracketEngine(test_db, seeded_tournament).mark_winner(9999, 1)

    def test_league_fixture_rejected(self, test_db, seeded_tournament):
        league = seeded_tournament.fixtures[0]
        with pytest.raises(InvalidState):
            BracketEngine(test_db, seeded_tournament).mark_winner(league.id, league.team1_id)

    def test_reaward_after_downstream_decided_is_rejected(self, test_db, seeded_tournament):
        a, b, c, d = seeded_tournament.teams
        engine = BracketEngine(test_db, seeded_tournament)
        fixtures = engine.generate_knockouts()
        q1 = stage(fixtures, FixtureStage.QUALIFIER_1)
        elim = stage(fixtures, FixtureStage.ELIMINATOR)
        q2 = stage(fixtures, FixtureStage.QUALIFIER_2)
        final = stage(fixtures, FixtureStage.FINAL)
        engine.mark_winner(q1.id, a.id)
        engine.mark_winner(elim.id, c.id)
        engine.mark_winner(q2.id, b.id)

        with pytest.raises(InvalidState):
            engine.mark_winner(q1.id, b.id)

        # nothing was half-written
        test_db.expire_all()
        assert q1.winning_team_id == a.id
        assert (q2.team1_id, q2.team2_id) == (b.id, c.id)
        assert (final.team1_id, final.team2_id) == (a.id, b.id)

    def test_reaward_while_downstream_open_refills_slots(self, test_db, seeded_tournament):
        a, b, c, d = seeded_tournament.teams
        engine = BracketEngine(test_db, seeded_tournament)
        fixtures = engine.generate_knockouts()
        q1 = stage(fixtures, FixtureStage.QUALIFIER_1)
        q2 = stage(fixtures, FixtureStage.QUALIFIER_2)
        final = stage(fixtures, FixtureStage.FINAL)
        engine.mark_winner(q1.id, a.id)

        engine.mark_winner(q1.id, b.id)

        assert final.team1_id == b.id
        assert q2.team1_id == a.id

    def test_rescoring_after_downstream_decided_is_rejected(self, test_db, seeded_tournament):
        a, b, c, d = seeded_tournament.teams
        engine = BracketEngine(test_db, seeded_tournament)
        fixtures = engine.generate_knockouts()
        q1 = stage(fixtures, FixtureStage.QUALIFIER_1)
        elim = stage(fixtures, FixtureStage.ELIMINATOR)
        q2 = stage(fixtures, FixtureStage.QUALIFIER_2)
        engine.mark_winner(q1.id, a.id)
        engine.mark_winner(elim.id, c.id)
        engine.mark_winner(q2.id, c.id)

        with pytest.raises(InvalidState):
            MatchLifecycle(test_db).complete_fixture(elim)
        test_db.expire_all()
        assert elim.winning_team_id == c.id

    def test_winner_must_be_playing(self, test_db, seeded_tournament):
        a, b, c, d = seeded_tournament.teams
        fixtures = BracketEngine(test_db, seeded_tournament).generate_knockouts()
        q1 = stage(fixtures, FixtureStage.QUALIFIER_1)
        with pytest.raises(ValidationFailure):
            BracketEngine(test_db, seeded_tournament).mark_winner(q1.id, d.id)
