"""
DecodeQuest CLI - terminal front end for the adaptive content engine.

Usage:
    decodequest games                                   # List game types
    decodequest mission --minutes 10 --profile p.json   # Plan today's mission
    decodequest select blend_builder --content bank.json --difficulty 2
    decodequest score --hints 1 --time-ms 12000 --difficulty 3

Profile and content paths fall back to DECODEQUEST_PROFILE_PATH /
DECODEQUEST_CONTENT_PATH.
"""

from __future__ import annotations

import random
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from decodequest.adaptive.item_selector import ITEMS_PER_GAME_ROUND, rank_items, select_items
from decodequest.adaptive.mission_builder import build_mission, estimate_total_rounds
from decodequest.config import get_settings
from decodequest.content.bank import load_content_bank
from decodequest.content.messages import GAME_DESCRIPTIONS, GAME_DISPLAY_NAMES
from decodequest.core.errors import DecodeQuestError
from decodequest.core.models import GameType, ItemAttempt
from decodequest.core.profile import LearnerProfile, load_profile, resolve_policy
from decodequest.learning.mastery import calculate_xp, score_attempt
from decodequest.learning.progress import create_default_progress, create_default_settings

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="decodequest",
    help="DecodeQuest - adaptive reading-decoding practice engine",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Route loguru output to stderr (and optionally a file)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name} - {message}",
    )
    if log_file is not None:
        logger.add(log_file, level="DEBUG", rotation="1 MB", retention=3)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show engine debug logging")
    ] = False,
) -> None:
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


def _load_profile(path: Path | None) -> LearnerProfile | None:
    path = path or get_settings().profile_path
    if path is None:
        logger.info("No learner profile supplied - using neutral weights")
        return None
    return load_profile(path)


def _rng(seed: int | None) -> random.Random:
    seed = seed if seed is not None else get_settings().random_seed
    return random.Random(seed)


def _fail(error: DecodeQuestError) -> None:
    console.print(f"[red]Error:[/] {escape(str(error))}")
    raise typer.Exit(code=1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def games() -> None:
    """List the four game types."""
    table = Table(title="Games")
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    for game in GameType:
        table.add_row(game.value, GAME_DISPLAY_NAMES[game], GAME_DESCRIPTIONS[game])
    console.print(table)


@app.command()
def mission(
    minutes: Annotated[
        int | None, typer.Option("--minutes", "-m", help="Session length in minutes")
    ] = None,
    profile_path: Annotated[
        Path | None, typer.Option("--profile", "-p", help="Learner profile JSON")
    ] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Shuffle seed")] = None,
) -> None:
    """Plan today's mission: one game type per round."""
    try:
        profile = _load_profile(profile_path)
        if minutes is None:
            minutes = create_default_settings(profile).session_minutes
        rounds = build_mission(profile, create_default_progress(), minutes, rng=_rng(seed))
    except DecodeQuestError as e:
        _fail(e)
        return

    table = Table(title=f"Today's Mission ({minutes} min, {estimate_total_rounds(minutes)} rounds)")
    table.add_column("#", justify="right")
    table.add_column("Game", style="cyan")
    for i, game in enumerate(rounds, 1):
        table.add_row(str(i), GAME_DISPLAY_NAMES[game])
    console.print(table)


@app.command()
def select(
    game: Annotated[str, typer.Argument(help="Game type, e.g. blend_builder")],
    content_path: Annotated[
        Path | None, typer.Option("--content", "-c", help="Content bank JSON")
    ] = None,
    difficulty: Annotated[int, typer.Option("--difficulty", "-d", help="Target difficulty 1-5")] = 1,
    count: Annotated[
        int, typer.Option("--count", "-n", help="Items per round")
    ] = ITEMS_PER_GAME_ROUND,
    profile_path: Annotated[
        Path | None, typer.Option("--profile", "-p", help="Learner profile JSON")
    ] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Shuffle seed")] = None,
) -> None:
    """Select items for one round of a game."""
    try:
        game_type = GameType.parse(game)
        path = content_path or get_settings().content_path
        if path is None:
            console.print("[red]Error:[/] no content bank given (use --content)")
            raise typer.Exit(code=1)
        items = load_content_bank(path)
        policy = resolve_policy(_load_profile(profile_path))
        now = datetime.now(UTC)
        ranked = rank_items(items, game_type, difficulty, [], [], policy, now=now)
        chosen = select_items(
            items, game_type, difficulty, [], [], policy, count=count, rng=_rng(seed), now=now
        )
    except DecodeQuestError as e:
        _fail(e)
        return

    if not chosen:
        console.print(f"[yellow]No {GAME_DISPLAY_NAMES[game_type]} items in the content bank.[/]")
        return

    priorities = {s.item.id: s.priority for s in ranked}
    table = Table(title=f"{GAME_DISPLAY_NAMES[game_type]} round (difficulty {difficulty})")
    table.add_column("Item", style="cyan")
    table.add_column("Skill")
    table.add_column("Pattern")
    table.add_column("Difficulty", justify="right")
    table.add_column("Priority", justify="right")
    for item in chosen:
        table.add_row(
            item.id, item.skill, item.pattern, str(item.difficulty), f"{priorities[item.id]:.1f}"
        )
    console.print(table)


@app.command()
def score(
    wrong: Annotated[bool, typer.Option("--wrong", help="Score an incorrect answer")] = False,
    hints: Annotated[int, typer.Option("--hints", help="Hints used")] = 0,
    time_ms: Annotated[int, typer.Option("--time-ms", help="Response time in ms")] = 5000,
    difficulty: Annotated[int, typer.Option("--difficulty", "-d", help="Difficulty 1-5")] = 1,
    profile_path: Annotated[
        Path | None, typer.Option("--profile", "-p", help="Learner profile JSON")
    ] = None,
) -> None:
    """Score a hypothetical attempt and show the XP it earns."""
    try:
        policy = resolve_policy(_load_profile(profile_path))
        attempt = ItemAttempt(
            item_id="cli",
            game_type=GameType.SOUND_SNAP,
            timestamp=datetime.now(UTC),
            correct=not wrong,
            hints_used=hints,
            time_ms=time_ms,
        )
        attempt_score = score_attempt(attempt, policy)
        xp = calculate_xp(attempt, difficulty, attempt_score)
    except DecodeQuestError as e:
        _fail(e)
        return

    weights = policy.weights
    console.print(
        Panel(
            f"[bold]Score:[/] {attempt_score}/100\n"
            f"[bold]XP:[/] {xp}\n"
            f"Weights: accuracy {weights.accuracy:.2f}, hints {weights.hints:.2f}, "
            f"time {weights.time:.2f}",
            title="Attempt",
            border_style="cyan",
        )
    )


def run() -> None:
    """Entry point for the console script."""
    app()


if __name__ == "__main__":
    run()
