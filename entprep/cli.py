"""
Typer CLI for entprep.

Commands:
    entprep health                      - Probe the backend
    entprep tests                       - List available tests
    entprep quiz --track math --cap 3   - Assemble an exam-layout quiz
    entprep generate physics --count 5  - Generate a free-form quiz
    entprep chat "Как решать задачи?"   - Ask the assistant
    entprep version                     - Show version information

Every command reports whether the backend or the local fallback served it.
"""

from __future__ import annotations

import asyncio
import random
import sys
from typing import Awaitable, Callable, Optional, TypeVar

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from entprep import __version__
from entprep.config import get_settings
from entprep.core.errors import EntPrepError
from entprep.core.models import Question
from entprep.core.protocol import Served
from entprep.service import ContentService

T = TypeVar("T")

app = typer.Typer(help="entprep: ENT practice quizzes with an offline fallback")
console = Console()


def _run(action: Callable[[ContentService], Awaitable[T]], seed: Optional[int] = None) -> T:
    """Run one service call on a fresh event loop, reporting domain errors cleanly."""

    async def runner() -> T:
        rng = random.Random(seed) if seed is not None else None
        async with ContentService.from_settings(rng=rng) as service:
            return await action(service)

    try:
        return asyncio.run(runner())
    except EntPrepError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)


def _served_line(served: Served) -> str:
    if served.demo:
        return f"[yellow]local fallback[/yellow] ({served.failure})"
    return "[green]backend[/green]"


def _question_table(title: str, questions: list[Question]) -> Table:
    table = Table(title=title, show_header=True, show_lines=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Subject", style="cyan")
    table.add_column("Question")
    table.add_column("Options")
    table.add_column("Answer", style="green")

    for i, q in enumerate(questions, 1):
        options = "\n".join(f"{n}. {opt}" for n, opt in enumerate(q.options))
        table.add_row(str(i), q.subject or "-", q.question, options, str(q.correct_answer))
    return table


@app.command("health")
def health() -> None:
    """Check whether the backend answers its health endpoint."""

    async def probe(service: ContentService) -> bool:
        return await service.remote.health_check()

    base_url = get_settings().api.base_url
    if _run(probe):
        rprint(f"[green]✓[/green] Backend reachable at {base_url}")
    else:
        rprint(f"[yellow]⚠[/yellow] Backend unreachable at {base_url}; local fallback in use")


@app.command("tests")
def list_tests() -> None:
    """List the tests the service offers."""
    served = _run(lambda service: service.get_tests())

    table = Table(title=f"Tests ({len(served.data)})", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Subject")
    table.add_column("Difficulty")
    table.add_column("Questions", justify="right", style="green")

    for test in served.data:
        table.add_row(
            test.id, test.title, test.subject, test.difficulty.value, str(len(test.questions))
        )

    console.print(table)
    rprint(f"Served by: {_served_line(served)}")


@app.command("quiz")
def track_quiz(
    track: str = typer.Option("math", "--track", "-t", help="Exam track: math or physics"),
    cap: Optional[int] = typer.Option(
        None, "--cap", help="Maximum questions per section (default: full exam layout)"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible generation"),
) -> None:
    """
    Assemble an exam-layout quiz for a track.

    Examples:
        entprep quiz --track physics
        entprep quiz --track math --cap 2 --seed 42
    """
    served = _run(lambda service: service.generate_track_quiz(track, cap), seed=seed)

    console.print(_question_table(f"{track} track ({len(served.data)} questions)", served.data))
    rprint(f"Served by: {_served_line(served)}")


@app.command("generate")
def generate(
    subject: str = typer.Argument(..., help="Subject, e.g. math, physics, history"),
    difficulty: str = typer.Option("medium", "--difficulty", "-d", help="easy, medium or hard"),
    count: int = typer.Option(5, "--count", "-n", min=1, help="Number of questions"),
) -> None:
    """Generate a free-form quiz on one subject."""
    served = _run(lambda service: service.generate_quiz(subject, difficulty, count))

    console.print(_question_table(f"{subject} ({difficulty})", served.data))
    rprint(f"Served by: {_served_line(served)}")


@app.command("chat")
def chat(
    message: str = typer.Argument(..., help="Message for the assistant"),
    language: Optional[str] = typer.Option(
        None, "--language", "-l", help="Reply language: ru or kz (default: detect)"
    ),
) -> None:
    """Ask the study assistant a question."""
    if language not in (None, "ru", "kz"):
        rprint(f"[red]✗[/red] Unsupported language '{language}'. Use ru or kz.")
        raise typer.Exit(code=1)

    served = _run(lambda service: service.send_message(message, language=language))

    rprint(served.data)
    rprint(f"\nServed by: {_served_line(served)}")


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint(f"[bold]entprep[/bold] v{__version__}")
    rprint("  ENT practice quizzes, results and progress")


def main() -> None:
    """Entry point for the CLI."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level.upper(),
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
