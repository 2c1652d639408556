"""SQLite session store: generated questions, answers and feedback."""

from __future__ import annotations

import json
import math
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

from interview_prep.models import (
    CodingQuestion,
    Feedback,
    InterviewQuestion,
    QuestionRecord,
    SessionAnalytics,
    SessionProgress,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _generate_id() -> str:
    return uuid.uuid4().hex[:8]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def init_db(db_path: Path) -> None:
    """Initialise the database, creating tables if they don't exist."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.executescript(
            """
            PRAGMA journal_mode=WAL;
            PRAGMA foreign_keys=ON;

            CREATE TABLE IF NOT EXISTS sessions (
                id              TEXT PRIMARY KEY,
                job_title       TEXT NOT NULL,
                company         TEXT,
                company_type    TEXT,
                description     TEXT,
                requirements    TEXT,
                resume          TEXT,
                progress        INTEGER NOT NULL DEFAULT 0,
                created_at      TEXT NOT NULL,
                last_updated    TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS questions (
                id                  TEXT PRIMARY KEY,
                session_id          TEXT NOT NULL REFERENCES sessions(id),
                position            INTEGER NOT NULL,
                question            TEXT NOT NULL,
                type                TEXT,
                difficulty          TEXT,
                category            TEXT,
                user_answer         TEXT,
                suggested_answer    TEXT,
                feedback            TEXT
            );

            CREATE TABLE IF NOT EXISTS coding_questions (
                id              TEXT PRIMARY KEY,
                session_id      TEXT NOT NULL REFERENCES sessions(id),
                position        INTEGER NOT NULL,
                title           TEXT NOT NULL,
                difficulty      TEXT,
                category        TEXT,
                description     TEXT,
                platform        TEXT,
                url             TEXT,
                tags            TEXT
            );
            """
        )


@contextmanager
def get_conn(db_path: Path) -> Generator[sqlite3.Connection, None, None]:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


# ── sessions ───────────────────────────────────────────────────────────────


def insert_session(conn: sqlite3.Connection, session: dict[str, Any]) -> str:
    session_id = _generate_id()
    now = _now()
    conn.execute(
        """
        INSERT INTO sessions
            (id, job_title, company, company_type, description, requirements, resume,
             progress, created_at, last_updated)
        VALUES
            (:id, :job_title, :company, :company_type, :description, :requirements, :resume,
             0, :now, :now)
        """,
        {
            "id": session_id,
            "job_title": session.get("job_title", ""),
            "company": session.get("company"),
            "company_type": session.get("company_type"),
            "description": session.get("description"),
            "requirements": session.get("requirements"),
            "resume": session.get("resume"),
            "now": now,
        },
    )
    return session_id


def get_session(conn: sqlite3.Connection, session_id: str) -> sqlite3.Row | None:
    return conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()


# ── questions ──────────────────────────────────────────────────────────────


def insert_questions(
    conn: sqlite3.Connection, session_id: str, questions: list[InterviewQuestion]
) -> list[str]:
    ids: list[str] = []
    for position, q in enumerate(questions):
        question_id = _generate_id()
        conn.execute(
            """
            INSERT INTO questions (id, session_id, position, question, type, difficulty, category)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (question_id, session_id, position, q.question, q.type, q.difficulty, q.category),
        )
        ids.append(question_id)
    return ids


def _row_to_record(row: sqlite3.Row) -> QuestionRecord:
    feedback = Feedback.from_dict(json.loads(row["feedback"])) if row["feedback"] else None
    return QuestionRecord(
        id=row["id"],
        question=row["question"],
        type=row["type"],
        difficulty=row["difficulty"],
        category=row["category"],
        user_answer=row["user_answer"],
        suggested_answer=row["suggested_answer"],
        feedback=feedback,
    )


def list_questions(
    conn: sqlite3.Connection,
    session_id: str,
    *,
    type: str | None = None,
    difficulty: str | None = None,
    category: str | None = None,
) -> list[QuestionRecord]:
    """Questions of a session in generation order, optionally filtered.

    Filters match exactly; *category* ignores case.
    """
    sql = "SELECT * FROM questions WHERE session_id = ?"
    params: list[Any] = [session_id]
    if type:
        sql += " AND type = ?"
        params.append(type)
    if difficulty:
        sql += " AND difficulty = ?"
        params.append(difficulty)
    if category:
        sql += " AND category = ? COLLATE NOCASE"
        params.append(category)
    rows = conn.execute(sql + " ORDER BY position", params).fetchall()
    return [_row_to_record(r) for r in rows]


def get_question(
    conn: sqlite3.Connection, session_id: str, question_id: str
) -> QuestionRecord | None:
    row = conn.execute(
        "SELECT * FROM questions WHERE session_id = ? AND id = ?", (session_id, question_id)
    ).fetchone()
    return _row_to_record(row) if row else None


def update_question(
    conn: sqlite3.Connection,
    session_id: str,
    question_id: str,
    *,
    user_answer: str | None = None,
    suggested_answer: str | None = None,
    feedback: Feedback | None = None,
) -> SessionProgress:
    """
    Apply the given updates to one question and refresh the session progress.

    A new *feedback* replaces any earlier one. Raises LookupError if the
    session or question does not exist.
    """
    if get_session(conn, session_id) is None:
        raise LookupError(f"Session not found: {session_id}")
    if get_question(conn, session_id, question_id) is None:
        raise LookupError(f"Question not found: {question_id}")

    updates: dict[str, Any] = {}
    if user_answer is not None:
        updates["user_answer"] = user_answer
    if suggested_answer is not None:
        updates["suggested_answer"] = suggested_answer
    if feedback is not None:
        updates["feedback"] = json.dumps(feedback.to_dict())

    if updates:
        assignments = ", ".join(f"{column} = :{column}" for column in updates)
        conn.execute(
            f"UPDATE questions SET {assignments} WHERE session_id = :session_id AND id = :id",
            {**updates, "session_id": session_id, "id": question_id},
        )

    progress = compute_progress(list_questions(conn, session_id))
    conn.execute(
        "UPDATE sessions SET progress = ?, last_updated = ? WHERE id = ?",
        (progress.progress_percentage, _now(), session_id),
    )
    return progress


# ── coding questions ───────────────────────────────────────────────────────


def insert_coding_questions(
    conn: sqlite3.Connection, session_id: str, problems: list[CodingQuestion]
) -> list[str]:
    ids: list[str] = []
    for position, p in enumerate(problems):
        problem_id = _generate_id()
        conn.execute(
            """
            INSERT INTO coding_questions
                (id, session_id, position, title, difficulty, category, description,
                 platform, url, tags)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                problem_id,
                session_id,
                position,
                p.title,
                p.difficulty,
                p.category,
                p.description,
                p.platform,
                p.url,
                json.dumps(p.tags),
            ),
        )
        ids.append(problem_id)
    return ids


def list_coding_questions(conn: sqlite3.Connection, session_id: str) -> list[CodingQuestion]:
    rows = conn.execute(
        "SELECT * FROM coding_questions WHERE session_id = ? ORDER BY position", (session_id,)
    ).fetchall()
    return [
        CodingQuestion(
            title=r["title"],
            difficulty=r["difficulty"],
            category=r["category"],
            description=r["description"],
            platform=r["platform"] or "",
            url=r["url"] or "",
            tags=json.loads(r["tags"] or "[]"),
        )
        for r in rows
    ]


# ── progress & analytics ───────────────────────────────────────────────────


def compute_progress(questions: list[QuestionRecord]) -> SessionProgress:
    total = len(questions)
    answered = sum(1 for q in questions if q.answered)
    percentage = _round_half_up(answered / total * 100) if total else 0
    return SessionProgress(total, answered, percentage)


def compute_analytics(questions: list[QuestionRecord]) -> SessionAnalytics:
    scores = [q.feedback.score for q in questions if q.feedback]
    average = math.floor(sum(scores) / len(scores) * 10 + 0.5) / 10 if scores else 0.0
    return SessionAnalytics(
        total_questions=len(questions),
        answered_questions=sum(1 for q in questions if q.answered),
        questions_with_feedback=len(scores),
        average_score=average,
        technical_questions=sum(1 for q in questions if q.type == "technical"),
        behavioral_questions=sum(1 for q in questions if q.type == "behavioral"),
        easy_questions=sum(1 for q in questions if q.difficulty == "Easy"),
        medium_questions=sum(1 for q in questions if q.difficulty == "Medium"),
        hard_questions=sum(1 for q in questions if q.difficulty == "Hard"),
    )


def get_session_progress(conn: sqlite3.Connection, session_id: str) -> SessionProgress | None:
    if get_session(conn, session_id) is None:
        return None
    return compute_progress(list_questions(conn, session_id))


def get_session_analytics(conn: sqlite3.Connection, session_id: str) -> SessionAnalytics | None:
    if get_session(conn, session_id) is None:
        return None
    return compute_analytics(list_questions(conn, session_id))
