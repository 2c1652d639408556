"""Value types exchanged with the completion endpoint and the session store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

QUESTION_TYPES = ("technical", "behavioral")
DIFFICULTIES = ("Easy", "Medium", "Hard")
PLATFORMS = ("leetcode", "geeksforgeeks")


@dataclass
class Message:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


Conversation = list[Message]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass
class InterviewQuestion:
    question: str
    type: str
    difficulty: str
    category: str

    REQUIRED = ("question", "type", "difficulty", "category")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InterviewQuestion:
        return cls(
            question=_text(data.get("question")),
            type=_text(data.get("type")),
            difficulty=_text(data.get("difficulty")),
            category=_text(data.get("category")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "type": self.type,
            "difficulty": self.difficulty,
            "category": self.category,
        }


@dataclass
class CodingQuestion:
    title: str
    difficulty: str
    category: str
    description: str
    platform: str = ""
    url: str = ""
    tags: list[str] = field(default_factory=list)

    REQUIRED = ("title", "difficulty", "category", "description")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CodingQuestion:
        tags = data.get("tags") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",")]
        return cls(
            title=_text(data.get("title")),
            difficulty=_text(data.get("difficulty")),
            category=_text(data.get("category")),
            description=_text(data.get("description")),
            platform=_text(data.get("platform")),
            url=_text(data.get("url")),
            tags=[_text(t) for t in tags if _text(t)],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "difficulty": self.difficulty,
            "category": self.category,
            "description": self.description,
            "platform": self.platform,
            "url": self.url,
            "tags": list(self.tags),
        }


@dataclass
class Feedback:
    score: int
    strengths: list[str]
    improvements: list[str]
    improved_answer: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Feedback:
        """Build from the wire form; raises ValueError/TypeError on a bad score."""
        score = int(float(data["score"]))
        return cls(
            score=max(1, min(10, score)),
            strengths=[_text(s) for s in data.get("strengths") or [] if _text(s)],
            improvements=[_text(s) for s in data.get("improvements") or [] if _text(s)],
            improved_answer=_text(data.get("improvedAnswer")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "improvedAnswer": self.improved_answer,
        }


@dataclass
class QuestionRecord:
    """An interview question as stored in a practice session."""

    id: str
    question: str
    type: str
    difficulty: str
    category: str
    user_answer: str | None = None
    suggested_answer: str | None = None
    feedback: Feedback | None = None

    @property
    def answered(self) -> bool:
        return bool(self.user_answer)


@dataclass
class SessionProgress:
    total_questions: int
    answered_questions: int
    progress_percentage: int


@dataclass
class SessionAnalytics:
    total_questions: int = 0
    answered_questions: int = 0
    questions_with_feedback: int = 0
    average_score: float = 0.0
    technical_questions: int = 0
    behavioral_questions: int = 0
    easy_questions: int = 0
    medium_questions: int = 0
    hard_questions: int = 0
