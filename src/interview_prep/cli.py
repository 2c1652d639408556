"""Click CLI entry point for interview-prep."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from interview_prep.backends.openrouter import OpenRouterClient
from interview_prep.companies import PRODUCT_BASED, SERVICE_BASED, STARTUP
from interview_prep.config import load_config
from interview_prep.db import (
    compute_analytics,
    compute_progress,
    get_conn,
    get_session,
    init_db,
    list_coding_questions,
    list_questions,
)
from interview_prep.errors import InterviewPrepError
from interview_prep.models import DIFFICULTIES, QUESTION_TYPES
from interview_prep.pipeline import JobDetails, prepare_session, submit_answer, suggest_answer
from interview_prep.report import build_report

console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _get_db(cfg: Any) -> Path:
    init_db(cfg.db_path)
    return cfg.db_path


def _with_client(cfg: Any, action: Callable[[OpenRouterClient], Awaitable[Any]]) -> Any:
    """Run *action* with a configured OpenRouter client, exiting 1 on failure."""

    async def _run() -> Any:
        async with OpenRouterClient.from_config(cfg.openrouter) as client:
            return await action(client)

    try:
        return asyncio.run(_run())
    except (InterviewPrepError, LookupError) as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)


def _require_session(conn: Any, session_id: str) -> Any:
    session = get_session(conn, session_id)
    if session is None:
        console.print(f"[red]Session {session_id!r} not found.[/red]")
        sys.exit(1)
    return session


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config.yaml")
@click.option("--env", "env_path", default=None, help="Path to .env file")
@click.option("--verbose", is_flag=True, default=False)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: str | None,
    env_path: str | None,
    verbose: bool,
) -> None:
    """Interview Prep: AI-generated interview questions, answers and feedback."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    cfg = load_config(
        config_path=Path(config_path) if config_path else None,
        env_path=Path(env_path) if env_path else None,
    )
    ctx.obj["cfg"] = cfg


# ── prepare ────────────────────────────────────────────────────────────────


@main.command("prepare")
@click.option("--job-title", required=True, help="Role being interviewed for")
@click.option("--company", required=True, help="Company name")
@click.option("--description", default="", help="Job description text")
@click.option("--requirements", default="", help="Key skills / requirements")
@click.option(
    "--resume", "resume_path", type=click.Path(exists=True, dir_okay=False),
    default=None, help="Plain-text resume file",
)
@click.option(
    "--company-type", type=click.Choice([PRODUCT_BASED, SERVICE_BASED, STARTUP]),
    default=None, help="Override the detected company archetype",
)
@click.pass_context
def prepare(
    ctx: click.Context,
    job_title: str,
    company: str,
    description: str,
    requirements: str,
    resume_path: str | None,
    company_type: str | None,
) -> None:
    """Generate interview questions and coding problems for a new session."""
    cfg = ctx.obj["cfg"]
    db_path = _get_db(cfg)
    job = JobDetails(
        job_title=job_title,
        company=company,
        description=description,
        requirements=requirements,
        resume=Path(resume_path).read_text() if resume_path else "",
        company_type=company_type,
    )

    with console.status("Generating questions and coding problems..."):
        session_id = _with_client(
            cfg, lambda client: prepare_session(job, client, db_path, cfg.classifier)
        )
    console.print(f"[green]Created session {session_id}[/green]")


# ── questions / coding ─────────────────────────────────────────────────────


@main.command("questions")
@click.argument("session_id")
@click.option("--type", "question_type", type=click.Choice(QUESTION_TYPES), default=None)
@click.option("--difficulty", type=click.Choice(DIFFICULTIES), default=None)
@click.option("--category", default=None, help="Only questions in this category")
@click.pass_context
def show_questions(
    ctx: click.Context,
    session_id: str,
    question_type: str | None,
    difficulty: str | None,
    category: str | None,
) -> None:
    """List the interview questions of a session."""
    cfg = ctx.obj["cfg"]
    db_path = _get_db(cfg)

    with get_conn(db_path) as conn:
        _require_session(conn, session_id)
        questions = list_questions(
            conn, session_id, type=question_type, difficulty=difficulty, category=category
        )

    table = Table(title="Interview Questions")
    table.add_column("ID")
    table.add_column("Type")
    table.add_column("Difficulty")
    table.add_column("Category")
    table.add_column("Question")
    table.add_column("Answered")
    table.add_column("Score", justify="right")

    for q in questions:
        table.add_row(
            q.id,
            q.type,
            q.difficulty,
            q.category,
            q.question[:80],
            "✓" if q.answered else "",
            str(q.feedback.score) if q.feedback else "",
        )
    console.print(table)


@main.command("coding")
@click.argument("session_id")
@click.pass_context
def show_coding(ctx: click.Context, session_id: str) -> None:
    """List the coding problems of a session."""
    cfg = ctx.obj["cfg"]
    db_path = _get_db(cfg)

    with get_conn(db_path) as conn:
        _require_session(conn, session_id)
        problems = list_coding_questions(conn, session_id)

    table = Table(title="Coding Problems")
    table.add_column("Title")
    table.add_column("Difficulty")
    table.add_column("Category")
    table.add_column("Platform")
    table.add_column("URL")

    for p in problems:
        table.add_row(p.title, p.difficulty, p.category, p.platform, p.url)
    console.print(table)


# ── suggest / submit ───────────────────────────────────────────────────────


@main.command("suggest")
@click.argument("session_id")
@click.argument("question_id")
@click.pass_context
def suggest(ctx: click.Context, session_id: str, question_id: str) -> None:
    """Generate and store a suggested answer for a question."""
    cfg = ctx.obj["cfg"]
    db_path = _get_db(cfg)

    with console.status("Generating answer..."):
        answer = _with_client(
            cfg, lambda client: suggest_answer(db_path, session_id, question_id, client)
        )
    console.print(Markdown(answer))


@main.command("submit")
@click.argument("session_id")
@click.argument("question_id")
@click.argument("answer", required=False)
@click.option(
    "--answer-file", type=click.Path(exists=True, dir_okay=False), default=None,
    help="Read the answer from a text file",
)
@click.pass_context
def submit(
    ctx: click.Context,
    session_id: str,
    question_id: str,
    answer: str | None,
    answer_file: str | None,
) -> None:
    """Submit an answer and show the AI feedback."""
    cfg = ctx.obj["cfg"]
    db_path = _get_db(cfg)

    if answer_file:
        answer = Path(answer_file).read_text()
    if not answer or not answer.strip():
        console.print("[red]Provide an answer or --answer-file.[/red]")
        sys.exit(1)

    with console.status("Analyzing answer..."):
        feedback = _with_client(
            cfg,
            lambda client: submit_answer(db_path, session_id, question_id, answer, client),
        )

    console.print(f"\n[bold]Score:[/bold] {feedback.score}/10\n")
    console.print("[bold green]Strengths[/bold green]")
    for s in feedback.strengths:
        console.print(f"  • {s}")
    console.print("[bold yellow]Improvements[/bold yellow]")
    for s in feedback.improvements:
        console.print(f"  • {s}")
    console.print("\n[bold]Improved answer[/bold]")
    console.print(Markdown(feedback.improved_answer))


# ── progress / report ──────────────────────────────────────────────────────


@main.command("progress")
@click.argument("session_id")
@click.pass_context
def progress(ctx: click.Context, session_id: str) -> None:
    """Show answered/total progress and score analytics for a session."""
    cfg = ctx.obj["cfg"]
    db_path = _get_db(cfg)

    with get_conn(db_path) as conn:
        _require_session(conn, session_id)
        records = list_questions(conn, session_id)

    prog = compute_progress(records)
    analytics = compute_analytics(records)
    console.print(
        f"Answered {prog.answered_questions}/{prog.total_questions} "
        f"([bold]{prog.progress_percentage}%[/bold])"
    )
    if analytics.questions_with_feedback:
        console.print(
            f"Average score {analytics.average_score}/10 "
            f"over {analytics.questions_with_feedback} answers"
        )


@main.command("report")
@click.argument("session_id")
@click.option("--output", type=click.Path(dir_okay=False), default=None, help="Save Markdown here")
@click.pass_context
def report(ctx: click.Context, session_id: str, output: str | None) -> None:
    """Print (and optionally save) a Markdown report for a session."""
    cfg = ctx.obj["cfg"]
    db_path = _get_db(cfg)

    with get_conn(db_path) as conn:
        session = _require_session(conn, session_id)
        questions = list_questions(conn, session_id)
        problems = list_coding_questions(conn, session_id)

    analytics = compute_analytics(questions)
    report_md = build_report(session, questions, problems, analytics)
    console.print(Markdown(report_md))

    if output:
        Path(output).write_text(report_md)
        console.print(f"[bold green]Report saved to: {output}[/bold green]")
