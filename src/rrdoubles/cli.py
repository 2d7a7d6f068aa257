"""Command-line interface for rrdoubles."""

import logging
import random

import click

from rrdoubles.config_loader import ConfigError, load_and_validate_config


def _make_rng(cfg: dict):
    """Seeded random source when the config pins a seed, else unseeded."""
    return random.Random(cfg["random_seed"]) if cfg["random_seed"] is not None else random.Random()


def _open_repo(ctx: click.Context):
    """Open the state repository for the configured database."""
    from rrdoubles.paths import get_default_db_path
    from rrdoubles.storage import DatabaseManager, StateRepository

    cfg = ctx.obj["config"]
    db_path = ctx.obj["db"] or cfg["db_path"] or get_default_db_path()
    db = DatabaseManager(db_path)
    db.create_tables()
    session = db.get_session()
    ctx.call_on_close(session.close)
    return StateRepository(session, key=cfg["state_key"])


def _fail(message: str):
    click.echo(f"[ERROR] {message}", err=True)
    raise click.Abort()


def _echo_match(match):
    team1 = " & ".join(p.name for p in match.team1)
    team2 = " & ".join(p.name for p in match.team2)
    score = f"{match.score1:>3} - {match.score2:<3}" if match.completed else "   vs    "
    click.echo(f"  [{match.id}] {team1:<30} {score} {team2}")


@click.group()
@click.version_option(version="0.1.0")
@click.option("--config", "config_path", required=False, help="Path to config YAML file")
@click.option("--db", required=False, help="Path to SQLite database (overrides config)")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str, db: str, verbose: bool):
    """Round Robin Doubles - rotating-partner 2v2 tournament manager."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        cfg = load_and_validate_config(config_path)
    except ConfigError as e:
        _fail(f"Configuration Error: {e}")

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    ctx.obj["db"] = db


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def add_player(ctx: click.Context, names: tuple[str, ...]):
    """Add one or more players to the roster.

    Example:
        rrdoubles add-player Ana Ben "Cara Diaz" Dev
    """
    from rrdoubles.tournament import TournamentError, add_player as add

    repo = _open_repo(ctx)
    state = repo.load()

    added = 0
    for name in names:
        try:
            player = add(state, name)
            click.echo(f"[SUCCESS] Added {player.name} ({player.id})")
            added += 1
        except TournamentError as e:
            click.echo(f"[ERROR] {name}: {e}", err=True)

    repo.save(state)
    click.echo(f"[INFO] {len(state.players)} players in the roster")
    if added < len(names):
        raise click.Abort()


@cli.command()
@click.argument("player_id")
@click.pass_context
def remove_player(ctx: click.Context, player_id: str):
    """Remove a player before the tournament starts."""
    from rrdoubles.tournament import TournamentError, remove_player as remove

    repo = _open_repo(ctx)
    state = repo.load()
    try:
        player = remove(state, player_id)
    except TournamentError as e:
        _fail(str(e))

    repo.save(state)
    click.echo(f"[SUCCESS] Removed {player.name}")


@cli.command()
@click.pass_context
def players(ctx: click.Context):
    """List the roster."""
    repo = _open_repo(ctx)
    state = repo.load()

    if not state.players:
        click.echo("[INFO] No players yet. Run 'rrdoubles add-player' first")
        return

    click.echo(f"Players ({len(state.players)}):")
    for player in state.players:
        click.echo(f"  [{player.id}] {player.name}")

    per_round = len(state.players) // 4
    on_bye = len(state.players) % 4
    click.echo(f"\n{per_round} game{'s' if per_round != 1 else ''} per round")
    if on_bye:
        click.echo(f"{on_bye} player{'s' if on_bye != 1 else ''} on bye each round (rotating)")


@cli.command()
@click.pass_context
def start(ctx: click.Context):
    """Start the tournament and generate round 1."""
    from rrdoubles.tournament import TournamentError, start_tournament

    repo = _open_repo(ctx)
    state = repo.load()
    try:
        matches = start_tournament(state, rng=_make_rng(ctx.obj["config"]))
    except TournamentError as e:
        _fail(str(e))

    repo.save(state)
    click.echo(f"[SUCCESS] Tournament started: round 1 with {len(matches)} matches")
    for match in matches:
        _echo_match(match)


@cli.command()
@click.pass_context
def next_round(ctx: click.Context):
    """Generate one more round."""
    from rrdoubles.tournament import TournamentError, add_round

    repo = _open_repo(ctx)
    state = repo.load()
    try:
        matches = add_round(state, rng=_make_rng(ctx.obj["config"]))
    except TournamentError as e:
        _fail(str(e))

    if not matches:
        click.echo("[WARNING] No matches could be generated")
        return

    repo.save(state)
    click.echo(f"[SUCCESS] Round {matches[0].round}: {len(matches)} matches")
    for match in matches:
        _echo_match(match)


@cli.command()
@click.pass_context
def schedule(ctx: click.Context):
    """Show all rounds with results and players on bye."""
    from rrdoubles.tournament import matches_by_round, players_on_bye

    repo = _open_repo(ctx)
    state = repo.load()

    if not state.matches:
        click.echo("[INFO] No matches yet. Run 'rrdoubles start' first")
        return

    completed = sum(1 for m in state.matches if m.completed)
    click.echo(
        f"Round {state.current_round} - matches: {completed}/{len(state.matches)} completed"
    )
    for round_number, matches in matches_by_round(state.matches).items():
        done = sum(1 for m in matches if m.completed)
        click.echo(f"\nRound {round_number} ({done}/{len(matches)})")
        bye = players_on_bye(state.players, state.matches, round_number)
        if bye:
            click.echo(f"  Sitting out: {', '.join(p.name for p in bye)}")
        for match in matches:
            _echo_match(match)


@cli.command()
@click.argument("match_id")
@click.argument("score1")
@click.argument("score2")
@click.pass_context
def score(ctx: click.Context, match_id: str, score1: str, score2: str):
    """Record the score of a match.

    Example:
        rrdoubles score a1b2c3d4 11 7
    """
    from rrdoubles.tournament import TournamentError, record_score
    from rrdoubles.validation import validate_score

    is_valid, error = validate_score(score1, score2)
    if not is_valid:
        _fail(error)

    repo = _open_repo(ctx)
    state = repo.load()
    try:
        match = record_score(state, match_id, score1, score2)
    except TournamentError as e:
        _fail(str(e))

    repo.save(state)
    click.echo(f"[SUCCESS] {match}")


@cli.command()
@click.pass_context
def standings(ctx: click.Context):
    """Show the ranked standings."""
    from rrdoubles.standings import calculate_standings

    repo = _open_repo(ctx)
    state = repo.load()

    if not state.players:
        click.echo("[INFO] No players yet")
        return

    rows = calculate_standings(state.players, state.matches)
    click.echo(f"{'#':>3}  {'Player':<20} {'W':>3} {'L':>3} {'PF':>5} {'PA':>5} {'+/-':>5} {'APD':>7} {'WIN%':>5}")
    for position, s in enumerate(rows, start=1):
        click.echo(
            f"{position:>3}. {s.player.name:<20} {s.wins:>3} {s.losses:>3} "
            f"{s.points_for:>5} {s.points_against:>5} {s.point_diff:>+5d} "
            f"{s.apd:>+7.2f} {s.win_pct:>5}"
        )
    if any(s.games_played for s in rows):
        click.echo("\nRanked by: Wins -> Head-to-head -> Point Diff -> H2H Point Diff -> Points For")


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset(ctx: click.Context, yes: bool):
    """Reset the tournament. All players and scores are lost."""
    if not yes:
        click.confirm("Reset tournament? All scores will be lost.", abort=True)

    repo = _open_repo(ctx)
    repo.clear()
    click.echo("[SUCCESS] Tournament reset")


@cli.command()
@click.option("--out", required=True, help="Output JSON file")
@click.pass_context
def export(ctx: click.Context, out: str):
    """Export the tournament state to a JSON file."""
    from rrdoubles.storage import export_state

    repo = _open_repo(ctx)
    path = export_state(repo.load(), out)
    click.echo(f"[SUCCESS] Exported to {path}")


@cli.command(name="import")
@click.option("--input", "input_path", required=True, help="JSON file written by 'export'")
@click.pass_context
def import_(ctx: click.Context, input_path: str):
    """Replace the tournament state with one from a JSON file."""
    from rrdoubles.storage import StorageError, import_state

    try:
        state = import_state(input_path)
    except StorageError as e:
        _fail(str(e))

    repo = _open_repo(ctx)
    repo.save(state)
    click.echo(
        f"[SUCCESS] Imported {len(state.players)} players and {len(state.matches)} matches"
    )


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int):
    """Launch the web panel.

    Example:
        rrdoubles serve --host 0.0.0.0 --port 8080
    """
    import uvicorn
    from rrdoubles.webapp.app import create_app

    app = create_app(db_path=ctx.obj["db"], config=ctx.obj["config"])

    click.echo(f"[INFO] Starting web panel at http://{host}:{port}")
    click.echo("[INFO] Press CTRL+C to stop")

    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    except KeyboardInterrupt:
        click.echo("\n[INFO] Shutting down...")


if __name__ == "__main__":
    cli()
