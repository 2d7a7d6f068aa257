"""FastAPI web panel for Round Robin Doubles."""

import random
from contextlib import contextmanager
from typing import Any, Optional

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from rrdoubles.config_loader import load_and_validate_config
from rrdoubles.paths import get_default_db_path, get_static_dir, get_templates_dir
from rrdoubles.standings import calculate_standings
from rrdoubles.storage import DatabaseManager, StateRepository
from rrdoubles.tournament import (
    TournamentError,
    add_player,
    add_round,
    find_match,
    record_score,
    remove_player,
    start_tournament,
)
from rrdoubles.webapp.helpers import build_rounds, build_standings, roster_summary


def flash(request: Request, message: str, category: str = "info"):
    """Queue a message for the next rendered page."""
    request.session.setdefault("flash", []).append({"message": message, "category": category})


def pop_flashes(request: Request) -> list[dict]:
    return request.session.pop("flash", [])


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def create_app(db_path: Optional[str] = None, config: Optional[dict[str, Any]] = None) -> FastAPI:
    """Build the web panel application.

    Args:
        db_path: SQLite database file (overrides config)
        config: Validated configuration; defaults are used when None

    Returns:
        Configured FastAPI application
    """
    cfg = config or load_and_validate_config()
    db_manager = DatabaseManager(db_path or cfg["db_path"] or get_default_db_path())
    db_manager.create_tables()  # Ensure tables exist

    rng = random.Random(cfg["random_seed"]) if cfg["random_seed"] is not None else random.Random()

    app = FastAPI(title="Round Robin Doubles")
    app.state.db_manager = db_manager
    app.state.config = cfg

    # Session middleware for flash messages
    app.add_middleware(SessionMiddleware, secret_key=cfg["secret_key"])

    templates = Jinja2Templates(directory=str(get_templates_dir()))

    static_dir = get_static_dir()
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    @contextmanager
    def open_repo():
        session = db_manager.get_session()
        try:
            yield StateRepository(session, key=cfg["state_key"])
        finally:
            session.close()

    def render(request: Request, template: str, tab: str, **context) -> HTMLResponse:
        context.update({"tab": tab, "flashes": pop_flashes(request)})
        return templates.TemplateResponse(request, template, context)

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        with open_repo() as repo:
            state = repo.load()
        return render(
            request,
            "players.html",
            "players",
            state=state,
            summary=roster_summary(state),
        )

    @app.post("/players")
    async def create_player(request: Request, name: str = Form("")):
        with open_repo() as repo:
            state = repo.load()
            try:
                player = add_player(state, name)
            except TournamentError as e:
                flash(request, str(e), "error")
                return redirect("/")
            repo.save(state)
        flash(request, f"Added {player.name}", "success")
        return redirect("/")

    @app.post("/players/{player_id}/delete")
    async def delete_player(request: Request, player_id: str):
        with open_repo() as repo:
            state = repo.load()
            try:
                remove_player(state, player_id)
            except TournamentError as e:
                flash(request, str(e), "error")
                return redirect("/")
            repo.save(state)
        return redirect("/")

    @app.post("/start")
    async def start(request: Request):
        with open_repo() as repo:
            state = repo.load()
            try:
                start_tournament(state, rng=rng)
            except TournamentError as e:
                flash(request, str(e), "error")
                return redirect("/")
            repo.save(state)
        return redirect("/matches")

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    @app.get("/matches", response_class=HTMLResponse)
    async def matches_view(request: Request):
        with open_repo() as repo:
            state = repo.load()
        return render(
            request,
            "matches.html",
            "matches",
            state=state,
            rounds=build_rounds(state.players, state.matches),
            completed=sum(1 for m in state.matches if m.completed),
            total=len(state.matches),
        )

    @app.post("/rounds")
    async def create_round(request: Request):
        with open_repo() as repo:
            state = repo.load()
            try:
                new_matches = add_round(state, rng=rng)
            except TournamentError as e:
                flash(request, str(e), "error")
                return redirect("/")
            if not new_matches:
                flash(request, "No matches could be generated", "warning")
                return redirect("/matches")
            repo.save(state)
        flash(request, f"Round {new_matches[0].round} added", "success")
        return redirect("/matches")

    @app.get("/matches/{match_id}/score", response_class=HTMLResponse)
    async def score_form(request: Request, match_id: str):
        with open_repo() as repo:
            state = repo.load()
        match = find_match(state, match_id)
        if match is None:
            return HTMLResponse("Match not found", status_code=404)
        return render(request, "score.html", "matches", state=state, match=match)

    @app.post("/matches/{match_id}/score")
    async def save_score(
        request: Request,
        match_id: str,
        score1: str = Form(""),
        score2: str = Form(""),
    ):
        with open_repo() as repo:
            state = repo.load()
            try:
                record_score(state, match_id, score1, score2)
            except TournamentError as e:
                flash(request, str(e), "error")
                if find_match(state, match_id) is None:
                    return redirect("/matches")
                return redirect(f"/matches/{match_id}/score")
            repo.save(state)
        return redirect("/matches")

    # ------------------------------------------------------------------
    # Standings and reset
    # ------------------------------------------------------------------

    @app.get("/standings", response_class=HTMLResponse)
    async def standings_view(request: Request):
        with open_repo() as repo:
            state = repo.load()
        rows = calculate_standings(state.players, state.matches)
        return render(
            request,
            "standings.html",
            "standings",
            state=state,
            rows=build_standings(rows),
            has_games=any(s.games_played for s in rows),
        )

    @app.get("/api/standings")
    async def standings_api():
        with open_repo() as repo:
            state = repo.load()
        rows = calculate_standings(state.players, state.matches)
        return JSONResponse([s.to_dict() for s in rows])

    @app.post("/reset")
    async def reset(request: Request):
        with open_repo() as repo:
            repo.clear()
        flash(request, "Tournament reset", "success")
        return redirect("/")

    return app
