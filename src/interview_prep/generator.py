"""LLM generation orchestration: prompt → transport → parser."""

from __future__ import annotations

import logging
from typing import Protocol

from interview_prep.companies import CompanyClassifier
from interview_prep.models import CodingQuestion, Conversation, Feedback, InterviewQuestion
from interview_prep.parsing import parse_coding_batch, parse_feedback, parse_question_batch
from interview_prep.prompts import (
    build_analysis_prompt,
    build_answer_prompt,
    build_coding_prompt,
    build_question_generation_prompt,
)

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, conversation: Conversation, max_retries: int | None = None) -> str: ...


async def generate_interview_questions(
    job_title: str,
    company: str,
    description: str,
    requirements: str,
    resume: str,
    transport: Transport,
    classifier: CompanyClassifier | None = None,
    company_type: str | None = None,
) -> list[InterviewQuestion]:
    conversation = build_question_generation_prompt(
        job_title,
        company,
        description,
        requirements,
        resume,
        classifier=classifier,
        company_type=company_type,
    )
    raw = await transport.send(conversation)
    questions = parse_question_batch(raw)
    logger.info("Generated %d valid questions for %s at %s", len(questions), job_title, company)
    return questions


async def generate_coding_questions(
    job_title: str,
    company: str,
    company_type: str,
    transport: Transport,
) -> list[CodingQuestion]:
    raw = await transport.send(build_coding_prompt(job_title, company, company_type))
    problems = parse_coding_batch(raw)
    logger.info("Generated %d coding questions", len(problems))
    return problems


async def generate_answer(
    question: str,
    job_title: str,
    resume: str,
    question_type: str,
    transport: Transport,
) -> str:
    """Return a suggested answer as free-form prose (no JSON parsing)."""
    raw = await transport.send(build_answer_prompt(question, job_title, resume, question_type))
    return raw.strip()


async def analyze_answer(
    question: str,
    answer: str,
    job_title: str,
    transport: Transport,
) -> Feedback:
    raw = await transport.send(build_analysis_prompt(question, answer, job_title))
    return parse_feedback(raw)
