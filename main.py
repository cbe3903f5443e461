"""Entry point for the record-label period engine.

Usage:
    python main.py --new --game-id demo --demo     # Start a game with a demo roster
    python main.py --game-id demo                  # Advance one period
    python main.py --game-id demo --periods 4      # Advance several periods
    python main.py --game-id demo --actions a.json # Advance with player actions
    python main.py --list                          # List stored games
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from engine.config import load_config
from engine.content import ContentProvider
from engine.core import CampaignCompletedError, GameEngine, TurnResult
from engine.setup import new_game, sign_artist, start_project
from engine.storage import GameDB, GameNotFoundError
from label.models import Artist

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s — %(name)s — %(levelname)s — %(message)s"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=fmt, handlers=handlers)

    # Quiet down noisy libraries
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def _db_path(cfg: dict, override: str | None) -> Path:
    if override:
        return Path(override)
    env_path = cfg.get("_env", {}).get("game_db")
    if env_path:
        return Path(env_path)
    root = Path(__file__).resolve().parent
    return root / cfg.get("storage", {}).get("game_db", "data/label.db")


def _load_actions(path: str | None) -> list[dict]:
    if not path:
        return []
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise click.BadParameter("actions file must contain a JSON list", param_hint="--actions")
    return data


async def _seed_demo(db: GameDB, content: ContentProvider, game_id: str) -> None:
    state = await db.get_game(game_id)
    artist = Artist(
        id=f"{game_id}-artist-1",
        game_id=game_id,
        name="Nova Reyes",
        talent=72,
        work_ethic=65,
        popularity=20,
        mood=55,
        genre="pop",
    )
    await sign_artist(db, state, artist, signing_fee=5000)
    await start_project(db, content, state, artist.id, "First Light", project_type="single")


def _report(result: TurnResult, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    summary = result.summary
    click.echo(f"\n  Period {summary.period}: {summary.financial_breakdown}")
    for change in summary.changes:
        amount = f" ({change.amount:+,})" if change.amount else ""
        click.echo(f"    [{change.type}] {change.description}{amount}")
    if result.campaign_results:
        cr = result.campaign_results
        click.echo(f"\n  {cr.victory_type} - score {cr.final_score}")
        click.echo(f"  {cr.summary}")
        for achievement in cr.achievements:
            click.echo(f"    * {achievement}")


async def _run(
    content: ContentProvider,
    db_path: Path,
    game_id: str,
    new: bool,
    demo: bool,
    actions: list[dict],
    periods: int,
    as_json: bool,
) -> None:
    async with GameDB(db_path) as db:
        if new:
            await new_game(db, content, game_id)
            if demo:
                await _seed_demo(db, content, game_id)
            await db.commit()
            click.echo(f"Started game {game_id}.")

        engine = GameEngine(db, content, game_id)
        for i in range(periods):
            try:
                result = await engine.advance(actions if i == 0 else [])
            except Exception:
                await db.rollback()
                raise
            await db.commit()
            _report(result, as_json)
            if result.campaign_results:
                break


async def _list_games(db_path: Path) -> None:
    async with GameDB(db_path) as db:
        games = await db.list_games()
    if not games:
        click.echo("No games stored.")
    for game in games:
        click.echo(f"  {game['id']}: period {game['period']}, ${game['money']:,}")


@click.command()
@click.option("--game-id", default="default", show_default=True, help="Game to advance")
@click.option("--new", is_flag=True, help="Create the game before advancing")
@click.option("--demo", is_flag=True, help="With --new, sign a demo artist and start a single")
@click.option("--actions", "actions_path", type=click.Path(exists=True), default=None, help="JSON list of actions")
@click.option("--periods", type=click.IntRange(min=0), default=1, show_default=True, help="Periods to advance")
@click.option("--db", "db_override", type=click.Path(), default=None, help="Game database path")
@click.option("--list", "list_games", is_flag=True, help="List stored games and exit")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--config-dir", type=click.Path(), default=None, help="Config directory")
def main(
    game_id: str,
    new: bool,
    demo: bool,
    actions_path: str | None,
    periods: int,
    db_override: str | None,
    list_games: bool,
    as_json: bool,
    verbose: bool,
    config_dir: str | None,
) -> None:
    """Advance a record-label game one period at a time."""

    cfg = load_config(config_dir)

    log_file = cfg.get("_env", {}).get("log_file") or cfg.get("engine", {}).get("log_file")
    _setup_logging(verbose=verbose, log_file=log_file or None)

    db_path = _db_path(cfg, db_override)
    if list_games:
        asyncio.run(_list_games(db_path))
        return

    content = ContentProvider(cfg)
    actions = _load_actions(actions_path)
    try:
        asyncio.run(_run(content, db_path, game_id, new, demo, actions, periods, as_json))
    except GameNotFoundError as e:
        click.echo(f"{e}. Use --new to create it.")
        sys.exit(1)
    except CampaignCompletedError as e:
        click.echo(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
