#!/usr/bin/env python3
"""
CLI for running demo tournaments through the match engine
"""
import logging
import random
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import track

from app.config import settings
from app.database import init_db, get_session
from app.engine import BracketEngine, FixtureScheduler, MatchLifecycle, MatchSimulator, StandingsEngine
from app.errors import EngineError
from app.generators.player_generator import PlayerGenerator
from app.generators.team_generator import TeamGenerator
from app.models import Fixture, FixtureStage, FixtureStatus, Tournament

console = Console()


def _load_tournament(session, tournament_id: int) -> Optional[Tournament]:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        console.print(f"[red]Tournament {tournament_id} not found.[/red]")
    return tournament


def _rng(seed: Optional[int]) -> random.Random:
    return random.Random(seed if seed is not None else settings.SIMULATION_SEED)


def _print_standings(standings) -> None:
    table = Table(title="Points Table")
    table.add_column("#", justify="right")
    table.add_column("Team", style="cyan")
    table.add_column("P", justify="right")
    table.add_column("W", justify="right")
    table.add_column("L", justify="right")
    table.add_column("T", justify="right")
    table.add_column("NR", justify="right")
    table.add_column("Pts", justify="right", style="green")
    table.add_column("NRR", justify="right")

    for s in standings:
        row = s.row
        table.add_row(
            str(s.position),
            s.team.name,
            str(row.played),
            str(row.won),
            str(row.lost),
            str(row.tied),
            str(row.no_result),
            str(row.points),
            f"{row.nrr:+.3f}",
        )
    console.print(table)


def _print_bracket(tournament: Tournament, fixtures: list[Fixture]) -> None:
    table = Table(title=f"{tournament.name} - Playoffs")
    table.add_column("Stage", style="magenta")
    table.add_column("Team 1", style="cyan")
    table.add_column("Team 2", style="cyan")
    table.add_column("Status")
    table.add_column("Result")

    for f in fixtures:
        table.add_row(
            f.stage.value,
            f.team1.name if f.team1 else "TBD",
            f.team2.name if f.team2 else "TBD",
            f.status.value,
            f.result_description or "",
        )
    console.print(table)

    if tournament.champion_team_id:
        champion = next(t for t in tournament.teams if t.id == tournament.champion_team_id)
        console.print(Panel(f"[bold green]Champion: {champion.name}[/bold green]"))


@click.group()
@click.option("--verbose", is_flag=True, help="Show engine logs")
def cli(verbose: bool):
    """Tournament Match Engine - scoring, standings and playoffs"""
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.option("--name", default="Demo Premier League", help="Tournament name")
@click.option("--teams", default=4, help="Number of teams (2-8)")
@click.option("--squad-size", default=11, help="Players per team")
@click.option("--overs", default=None, type=int, help="Overs per innings")
@click.option("--seed", default=None, type=int, help="Random seed")
def seed_demo(name: str, teams: int, squad_size: int, overs: Optional[int], seed: Optional[int]):
    """Create a tournament with generated teams, squads and league fixtures"""
    init_db()
    rng = _rng(seed)
    session = get_session()
    try:
        tournament = Tournament(
            name=name,
            venue="Wankhede Stadium",
            total_overs=overs or settings.DEFAULT_TOTAL_OVERS,
        )
        session.add(tournament)
        session.flush()

        for team in TeamGenerator.create_teams(tournament.id, teams):
            session.add(team)
            session.flush()
            session.add_all(PlayerGenerator.generate_squad(team.id, size=squad_size, rng=rng))
        session.commit()

        fixtures = FixtureScheduler(session, tournament).generate_league()
        console.print(
            f"[green]Created tournament {tournament.id} '{tournament.name}' with "
            f"{teams} teams and {len(fixtures)} league fixtures.[/green]"
        )
    except (EngineError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
    finally:
        session.close()


@cli.command()
@click.argument("tournament_id", type=int)
@click.option("--seed", default=None, type=int, help="Random seed")
def simulate_league(tournament_id: int, seed: Optional[int]):
    """Simulate every unplayed league fixture"""
    session = get_session()
    try:
        tournament = _load_tournament(session, tournament_id)
        if not tournament:
            return

        pending = (
            session.query(Fixture)
            .filter(
                Fixture.tournament_id == tournament.id,
                Fixture.stage == FixtureStage.LEAGUE,
                Fixture.status != FixtureStatus.COMPLETED,
            )
            .order_by(Fixture.match_order)
            .all()
        )
        if not pending:
            console.print("[yellow]No league fixtures left to play.[/yellow]")
            return

        simulator = MatchSimulator(session, rng=_rng(seed))
        for fixture in track(pending, description="Simulating..."):
            simulator.simulate(fixture.id)

        _print_standings(StandingsEngine(session, tournament).get_league_standings())
    finally:
        session.close()


@cli.command()
@click.argument("tournament_id", type=int)
@click.option("--recompute", is_flag=True, help="Rebuild from completed fixtures first")
def standings(tournament_id: int, recompute: bool):
    """Show the points table"""
    session = get_session()
    try:
        tournament = _load_tournament(session, tournament_id)
        if not tournament:
            return
        engine = StandingsEngine(session, tournament)
        _print_standings(engine.recompute() if recompute else engine.get_league_standings())
    finally:
        session.close()


@cli.command()
@click.argument("tournament_id", type=int)
def knockouts(tournament_id: int):
    """Seed the playoff bracket from the standings"""
    session = get_session()
    try:
        tournament = _load_tournament(session, tournament_id)
        if not tournament:
            return
        engine = BracketEngine(session, tournament)
        engine.generate_knockouts()
        _print_bracket(tournament, engine.get_bracket())
    except EngineError as e:
        console.print(f"[red]{e}[/red]")
    finally:
        session.close()


@cli.command()
@click.argument("tournament_id", type=int)
def bracket(tournament_id: int):
    """Show the playoff bracket"""
    session = get_session()
    try:
        tournament = _load_tournament(session, tournament_id)
        if not tournament:
            return
        _print_bracket(tournament, BracketEngine(session, tournament).get_bracket())
    finally:
        session.close()


@cli.command()
@click.argument("tournament_id", type=int)
@click.option("--seed", default=None, type=int, help="Random seed")
def play_knockouts(tournament_id: int, seed: Optional[int]):
    """Simulate playoff fixtures in order until a champion is crowned"""
    session = get_session()
    try:
        tournament = _load_tournament(session, tournament_id)
        if not tournament:
            return
        engine = BracketEngine(session, tournament)
        simulator = MatchSimulator(session, rng=_rng(seed))

        for fixture in engine.get_bracket():
            if fixture.status == FixtureStatus.COMPLETED:
                continue
            if not fixture.team1_id or not fixture.team2_id:
                console.print(f"[yellow]{fixture.stage.value} is waiting on earlier results.[/yellow]")
                break
            result = simulator.simulate(fixture.id)
            console.print(f"{fixture.stage.value}: {result.fixture.result_description}")

        session.refresh(tournament)
        _print_bracket(tournament, engine.get_bracket())
    except EngineError as e:
        console.print(f"[red]{e}[/red]")
    finally:
        session.close()


@cli.command()
@click.argument("fixture_id", type=int)
def scorecard(fixture_id: int):
    """Show the live state of a fixture"""
    session = get_session()
    try:
        state = MatchLifecycle(session).get_match_state(fixture_id)
    except EngineError as e:
        console.print(f"[red]{e}[/red]")
        session.close()
        return

    fixture = state.fixture
    console.print(Panel(
        f"[bold]{fixture.team1.name if fixture.team1 else 'TBD'} vs "
        f"{fixture.team2.name if fixture.team2 else 'TBD'}[/bold] ({fixture.stage.value})"
    ))
    console.print(f"[cyan]Innings 1:[/cyan] {state.innings1} - RR: {state.innings1.run_rate:.2f}")
    console.print(f"[magenta]Innings 2:[/magenta] {state.innings2} - RR: {state.innings2.run_rate:.2f}")
    if state.win_probability:
        console.print(
            f"Win probability: batting first {state.win_probability.batting_first}%, "
            f"chasing {state.win_probability.chasing}%"
        )
    if fixture.result_description:
        console.print(f"\n[bold green]{fixture.result_description}[/bold green]")
    session.close()


if __name__ == "__main__":
    cli()
