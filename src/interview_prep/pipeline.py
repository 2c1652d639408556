"""Session workflow: prepare → suggest answers → submit answers for feedback."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

from interview_prep.companies import CompanyClassifier, KeywordClassifier
from interview_prep.db import (
    get_conn,
    get_question,
    get_session,
    init_db,
    insert_coding_questions,
    insert_questions,
    insert_session,
    update_question,
)
from interview_prep.errors import ParseError, TransportError
from interview_prep.generator import (
    Transport,
    analyze_answer,
    generate_answer,
    generate_coding_questions,
    generate_interview_questions,
)
from interview_prep.models import Feedback

logger = logging.getLogger(__name__)

# Submitting an answer re-runs analysis up to this many times, waiting
# 2s, then 4s, between attempts.
ANALYSIS_ATTEMPTS = 3
ANALYSIS_RETRY_STEP = 2.0


@dataclass
class JobDetails:
    job_title: str
    company: str
    description: str = ""
    requirements: str = ""
    resume: str = ""
    company_type: str | None = None


async def prepare_session(
    job: JobDetails,
    transport: Transport,
    db_path: Path,
    classifier: CompanyClassifier | None = None,
) -> str:
    """
    Generate interview questions and coding problems for *job* and store them
    as a new session.

    Both generations run concurrently. Returns the new session id.
    """
    classifier = classifier or KeywordClassifier()
    company_type = job.company_type or classifier.classify(job.company, job.description)
    logger.info("Preparing session for %s at %s (%s)", job.job_title, job.company, company_type)

    questions, problems = await asyncio.gather(
        generate_interview_questions(
            job.job_title,
            job.company,
            job.description,
            job.requirements,
            job.resume,
            transport,
            classifier=classifier,
            company_type=company_type,
        ),
        generate_coding_questions(job.job_title, job.company, company_type, transport),
    )

    init_db(db_path)
    with get_conn(db_path) as conn:
        session_id = insert_session(
            conn,
            {
                "job_title": job.job_title,
                "company": job.company,
                "company_type": company_type,
                "description": job.description,
                "requirements": job.requirements,
                "resume": job.resume,
            },
        )
        insert_questions(conn, session_id, questions)
        insert_coding_questions(conn, session_id, problems)

    logger.info(
        "Session %s: %d questions, %d coding problems", session_id, len(questions), len(problems)
    )
    return session_id


def _load_context(db_path: Path, session_id: str, question_id: str) -> tuple[Any, Any]:
    with get_conn(db_path) as conn:
        session = get_session(conn, session_id)
        if session is None:
            raise LookupError(f"Session not found: {session_id}")
        question = get_question(conn, session_id, question_id)
        if question is None:
            raise LookupError(f"Question not found: {question_id}")
    return session, question


async def suggest_answer(
    db_path: Path, session_id: str, question_id: str, transport: Transport
) -> str:
    """Generate a model answer for a stored question and save it."""
    session, question = _load_context(db_path, session_id, question_id)
    answer = await generate_answer(
        question.question, session["job_title"], session["resume"] or "", question.type, transport
    )
    with get_conn(db_path) as conn:
        update_question(conn, session_id, question_id, suggested_answer=answer)
    return answer


async def submit_answer(
    db_path: Path,
    session_id: str,
    question_id: str,
    answer: str,
    transport: Transport,
    attempts: int = ANALYSIS_ATTEMPTS,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Feedback:
    """
    Save *answer*, analyse it and save the resulting feedback.

    The answer is stored before analysis so it survives a failed analysis.
    Analysis is retried on TransportError/ParseError; the last error is
    re-raised once *attempts* are used up.
    """
    session, question = _load_context(db_path, session_id, question_id)
    with get_conn(db_path) as conn:
        update_question(conn, session_id, question_id, user_answer=answer)

    def _log_retry(retry_state: Any) -> None:
        logger.warning(
            "Failed to analyze answer. Retrying... (%d/%d)", retry_state.attempt_number, attempts
        )

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_incrementing(start=ANALYSIS_RETRY_STEP, increment=ANALYSIS_RETRY_STEP),
        retry=retry_if_exception_type((TransportError, ParseError)),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    ):
        with attempt:
            feedback = await analyze_answer(
                question.question, answer, session["job_title"], transport
            )

    with get_conn(db_path) as conn:
        update_question(conn, session_id, question_id, feedback=feedback)
    logger.info("Question %s scored %d/10", question_id, feedback.score)
    return feedback
