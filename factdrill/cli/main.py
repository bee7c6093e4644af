"""
factdrill CLI - times-table practice from the terminal.

Usage:
    factdrill init-db                      # Create tables
    factdrill generate --tables 3,4,8      # Print a weighted question list
    factdrill session alice --mode adaptive
    factdrill answer alice 7 8 --answer 56 # Log an answer and reschedule the fact
    factdrill weak alice                   # Weakest facts
    factdrill due alice                    # Facts due for review today
    factdrill status alice
"""

from __future__ import annotations

import random
import sys
from dataclasses import replace
from typing import Annotated, NoReturn

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from factdrill.core.errors import PracticeEngineError
from factdrill.core.facts import Fact, Operation, Question
from factdrill.core.scoring import time_for_question
from factdrill.core.session_config import DIFFICULTY_PRESETS, SessionConfig, get_preset

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="factdrill",
    help="Adaptive times-table practice: weighted questions, weak facts and spaced review",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

SEVERITY_COLORS = {"critical": "red", "struggling": "yellow", "ok": "green"}


def configure_logging() -> None:
    """Send loguru output to stderr at the configured level, plus an optional file."""
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB", retention=5)


def _get_practice_service(seed: int | None = None):
    """Lazy load the practice service so --help works without a database."""
    from factdrill.generation.question_generator import WeightedQuestionGenerator
    from factdrill.study.practice_service import PracticeService

    rng = random.Random(seed) if seed is not None else None
    return PracticeService(generator=WeightedQuestionGenerator(rng=rng))


def _parse_ints(raw: str | None) -> list[int] | None:
    if raw is None:
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise typer.BadParameter(f"Expected comma-separated numbers, got {raw!r}") from None


def _parse_operations(raw: str) -> list[Operation]:
    try:
        return [Operation.parse(part) for part in raw.split(",") if part.strip()]
    except PracticeEngineError as e:
        raise typer.BadParameter(str(e)) from None


def _build_config(
    preset: str | None,
    tables: str | None,
    operations: str,
    count: int | None,
) -> SessionConfig:
    if preset:
        config = get_preset(preset)
        return replace(
            config,
            allowed_tables=tuple(_parse_ints(tables)) if tables is not None else config.allowed_tables,
            question_count=count if count is not None else config.question_count,
            operations=frozenset(_parse_operations(operations)),
        )
    return SessionConfig.from_settings(
        tables=_parse_ints(tables),
        operations=_parse_operations(operations),
        question_count=count,
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


def _questions_table(questions: list[Question], config: SessionConfig, title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Question", style="cyan")
    table.add_column("Answer", justify="right", style="green")
    table.add_column("Seconds", justify="right", style="dim")
    for index, question in enumerate(questions):
        seconds = time_for_question(index, config.time_per_question, config.decrease_time)
        table.add_row(str(index + 1), f"{question.fact} = ?", str(question.answer), f"{seconds:g}")
    return table


# =============================================================================
# Commands
# =============================================================================

@app.command("init-db")
def init_db_command() -> None:
    """Create the attempt log and mastery tables."""
    from factdrill.db.database import init_db

    try:
        init_db()
    except SQLAlchemyError as e:
        _fail(f"Could not initialize database: {e}")
    console.print("[green]✓[/green] Database initialized")


@app.command()
def presets() -> None:
    """List the built-in game modes."""
    table = Table(title="Presets")
    table.add_column("Name", style="cyan")
    table.add_column("Tables")
    table.add_column("Questions", justify="right")
    table.add_column("Seconds", justify="right")
    table.add_column("Description", style="dim")
    for preset in DIFFICULTY_PRESETS.values():
        cfg = preset.config
        table.add_row(
            preset.name,
            ",".join(str(t) for t in cfg.allowed_tables),
            str(cfg.question_count),
            f"{cfg.time_per_question:g}{' ↓' if cfg.decrease_time else ''}",
            preset.description,
        )
    console.print(table)


@app.command()
def generate(
    tables: Annotated[
        str | None, typer.Option("--tables", "-t", help="Comma-separated tables, e.g. 3,4,8")
    ] = None,
    operations: Annotated[
        str, typer.Option("--ops", "-o", help="Comma-separated operations, e.g. multiply,divide")
    ] = "multiply",
    count: Annotated[
        int | None, typer.Option("--count", "-n", help="Number of questions")
    ] = None,
    preset: Annotated[
        str | None, typer.Option("--preset", "-p", help="Start from a preset (child, parent)")
    ] = None,
    seed: Annotated[
        int | None, typer.Option("--seed", help="Random seed for a reproducible list")
    ] = None,
) -> None:
    """Print a weighted question list without touching the database."""
    from factdrill.generation.question_generator import WeightedQuestionGenerator

    try:
        config = _build_config(preset, tables, operations, count)
        config.validate(get_settings().max_question_count)
        rng = random.Random(seed) if seed is not None else None
        questions = WeightedQuestionGenerator(rng=rng).questions_for_config(config)
    except PracticeEngineError as e:
        _fail(str(e))

    console.print(_questions_table(questions, config, f"{len(questions)} questions"))


@app.command()
def session(
    user_id: Annotated[str, typer.Argument(help="Learner identifier")],
    mode: Annotated[
        str, typer.Option("--mode", "-m", help="plain, adaptive or due")
    ] = "adaptive",
    tables: Annotated[
        str | None, typer.Option("--tables", "-t", help="Comma-separated tables")
    ] = None,
    operations: Annotated[
        str, typer.Option("--ops", "-o", help="Comma-separated operations, e.g. multiply,divide")
    ] = "multiply",
    count: Annotated[
        int | None, typer.Option("--count", "-n", help="Number of questions")
    ] = None,
    preset: Annotated[
        str | None, typer.Option("--preset", "-p", help="Start from a preset (child, parent)")
    ] = None,
    seed: Annotated[
        int | None, typer.Option("--seed", help="Random seed")
    ] = None,
) -> None:
    """Compose a practice session for a learner."""
    if mode not in ("plain", "adaptive", "due"):
        _fail(f"Unknown mode {mode!r} (use plain, adaptive or due)")

    try:
        config = _build_config(preset, tables, operations, count)
        service = _get_practice_service(seed)
        if mode == "adaptive":
            result = service.adaptive_session(user_id, config)
        elif mode == "due":
            result = service.due_session(user_id, config)
        else:
            result = service.plain_session(config)
    except (PracticeEngineError, SQLAlchemyError) as e:
        _fail(str(e))

    if result.is_fallback:
        console.print(
            f"[yellow]{result.requested_mode} session unavailable "
            f"({result.fallback_reason}); using plain practice[/yellow]"
        )
    if not result.questions:
        console.print("[green]Nothing due today - all caught up![/green]")
        return
    console.print(_questions_table(result.questions, config, f"{result.mode} session for {user_id}"))


@app.command()
def answer(
    user_id: Annotated[str, typer.Argument(help="Learner identifier")],
    num1: Annotated[int, typer.Argument(help="First operand (multiplier, or product for division)")],
    num2: Annotated[int, typer.Argument(help="Second operand (the table)")],
    operation: Annotated[
        str, typer.Option("--op", help="multiply or divide")
    ] = "multiply",
    given: Annotated[
        int | None, typer.Option("--answer", "-a", help="The learner's answer")
    ] = None,
    correct: Annotated[
        bool, typer.Option("--correct", help="Record a correct answer without the value")
    ] = False,
    wrong: Annotated[
        bool, typer.Option("--wrong", help="Record a wrong answer without the value")
    ] = False,
    latency: Annotated[
        float | None, typer.Option("--latency", "-l", help="Seconds taken")
    ] = None,
) -> None:
    """Log one answer and move the fact on the review ladder."""
    if correct and wrong:
        _fail("--correct and --wrong are mutually exclusive")
    outcome_flag = True if correct else False if wrong else None
    if given is None and outcome_flag is None:
        _fail("Pass --answer N, --correct or --wrong")

    try:
        fact = Fact(num1, num2, Operation.parse(operation))
        outcome = _get_practice_service().record_answer(
            user_id, fact, user_answer=given, is_correct=outcome_flag, latency=latency
        )
    except (PracticeEngineError, SQLAlchemyError) as e:
        _fail(str(e))

    verdict = "[green]correct[/green]" if outcome.is_correct else f"[red]wrong[/red] (answer: {fact.answer})"
    console.print(f"{fact} → {verdict}")
    console.print(
        f"[dim]Next review in {outcome.mastery.interval_days} day(s) on "
        f"{outcome.mastery.next_review_date.isoformat()} "
        f"(streak {outcome.mastery.repetitions})[/dim]"
    )


@app.command()
def weak(
    user_id: Annotated[str, typer.Argument(help="Learner identifier")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Facts to show")] = 10,
) -> None:
    """Show a learner's weakest facts."""
    try:
        service = _get_practice_service()
        facts = service.aggregator.get_weak_facts(user_id, limit)
    except SQLAlchemyError as e:
        _fail(str(e))

    if not facts:
        console.print("[yellow]Not enough practice history yet.[/yellow]")
        return

    table = Table(title=f"Weak facts for {user_id}")
    table.add_column("Fact", style="cyan")
    table.add_column("Seen", justify="right")
    table.add_column("Wrong", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Avg s", justify="right", style="dim")
    for summary in facts:
        color = SEVERITY_COLORS[summary.severity]
        table.add_row(
            str(summary.fact),
            str(summary.times_seen),
            str(summary.times_incorrect),
            f"[{color}]{summary.accuracy_rate:.0%}[/{color}]",
            f"{summary.avg_latency:.1f}" if summary.avg_latency is not None else "-",
        )
    console.print(table)


@app.command()
def due(
    user_id: Annotated[str, typer.Argument(help="Learner identifier")],
) -> None:
    """Show facts due for review today."""
    try:
        scheduler = _get_practice_service().scheduler
        facts = scheduler.get_due_facts(user_id)
    except SQLAlchemyError as e:
        _fail(str(e))

    if not facts:
        console.print("[green]Nothing due today - all caught up![/green]")
        return
    console.print(f"[bold]{len(facts)}[/bold] fact(s) due:")
    for fact in facts:
        console.print(f"  • {fact}")


@app.command()
def status(
    user_id: Annotated[str, typer.Argument(help="Learner identifier")],
) -> None:
    """Summarize what a learner should practice today."""
    try:
        info = _get_practice_service().learning_status(user_id)
    except SQLAlchemyError as e:
        _fail(str(e))

    lines = [
        f"[DATE] {info.date.isoformat()}",
        f"[REVIEW] Due facts: {info.due_count}" + ("" if info.learning_needed else " - all caught up!"),
        f"[WEAK] Ranked facts: {info.weak_fact_count}",
        "[ADAPTIVE] " + ("available" if info.has_enough_data else "needs more practice history"),
    ]
    console.print(Panel("\n".join(lines), title=f"[bold]{user_id}[/bold]", border_style="blue"))


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
