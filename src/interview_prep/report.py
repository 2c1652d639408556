"""Markdown report assembly for a practice session."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

from interview_prep.models import CodingQuestion, QuestionRecord, SessionAnalytics


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items]


def _question_section(index: int, q: QuestionRecord) -> list[str]:
    lines = [f"### {index}. {q.question}", f"`{q.type}` · `{q.difficulty}` · {q.category}\n"]
    if q.user_answer:
        lines.append(f"**Your answer:** {q.user_answer}\n")
    if q.feedback:
        fb = q.feedback
        lines.append(f"**Score:** {fb.score}/10\n")
        lines.append("**Strengths:**")
        lines.extend(_bullets(fb.strengths))
        lines.append("\n**Improvements:**")
        lines.extend(_bullets(fb.improvements))
        lines.append(f"\n**Improved answer:** {fb.improved_answer}\n")
    elif q.suggested_answer:
        lines.append(f"**Suggested answer:** {q.suggested_answer}\n")
    lines.append("---\n")
    return lines


def build_report(
    session: sqlite3.Row,
    questions: list[QuestionRecord],
    problems: list[CodingQuestion],
    analytics: SessionAnalytics,
) -> str:
    """
    Build a Markdown report for one session.

    Only answered questions get a detailed section; unanswered ones are counted.
    """
    lines: list[str] = []
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

    lines.append(f"# Interview Prep: {session['job_title']}")
    if session["company"]:
        lines.append(f"*{session['company']} ({session['company_type'] or 'Unknown type'})*  ")
    lines.append(f"*Progress: {session['progress']}%*  ")
    lines.append(f"\n*Generated: {now}*\n")

    lines.append("## Summary\n")
    lines.append(
        f"- Questions: {analytics.total_questions} "
        f"({analytics.technical_questions} technical, {analytics.behavioral_questions} behavioral)"
    )
    lines.append(
        f"- Difficulty: {analytics.easy_questions} easy, {analytics.medium_questions} medium, "
        f"{analytics.hard_questions} hard"
    )
    lines.append(f"- Answered: {analytics.answered_questions}")
    lines.append(f"- With feedback: {analytics.questions_with_feedback}")
    if analytics.questions_with_feedback:
        lines.append(f"- Average score: {analytics.average_score}/10")
    lines.append("")

    answered = [q for q in questions if q.answered]
    if answered:
        lines.append(f"## Answered Questions ({len(answered)})\n")
        for idx, q in enumerate(answered, 1):
            lines.extend(_question_section(idx, q))
    else:
        lines.append("## No questions answered yet.\n")

    if problems:
        lines.append(f"## Coding Practice ({len(problems)})\n")
        for p in problems:
            title = f"[{p.title}]({p.url})" if p.url else p.title
            tags = f" · {', '.join(p.tags)}" if p.tags else ""
            lines.append(f"- {title} `{p.difficulty}` {p.category}{tags}")
        lines.append("")

    return "\n".join(lines)
