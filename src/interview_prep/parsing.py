"""Extraction of typed results from free-form model output.

Each parser walks a series of recovery tiers, from a straight ``json.loads``
of the (de-fenced) text down to regex salvage, and only raises
:class:`~interview_prep.errors.ParseError` when all of them come up empty.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator, TypeVar

from interview_prep.errors import ParseError
from interview_prep.models import CodingQuestion, Feedback, InterviewQuestion
from interview_prep.sanitizer import sanitize

logger = logging.getLogger(__name__)

T = TypeVar("T", InterviewQuestion, CodingQuestion)

# Regex salvage must recover more than this many objects to be worth using.
MIN_RECOVERED = 10

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_OPEN_FENCE = re.compile(r"^```(?:json)?\s*")
_FLAT_OBJECT = re.compile(r"\{[^{}]*\}")
_ARRAY_SPAN = re.compile(r"\[[\s\S]*\]")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")

_SCORE = re.compile(r'"score"\s*:\s*"?(\d+)')
_STRENGTHS = re.compile(r'"strengths"\s*:\s*\[([^\]]*)\]')
_IMPROVEMENTS = re.compile(r'"improvements"\s*:\s*\[([^\]]*)\]')
_IMPROVED_ANSWER = re.compile(r'"improvedAnswer"\s*:\s*"((?:[^"\\]|\\.)*)"')

DEFAULT_SCORE = 5
DEFAULT_STRENGTHS = ["Good attempt", "Relevant experience"]
DEFAULT_IMPROVEMENTS = ["Could be more structured", "Add more specific examples"]
DEFAULT_IMPROVED_ANSWER = (
    "The candidate could improve their answer by providing more specific examples "
    "and structuring their response more clearly."
)


def strip_code_fence(raw: str) -> str:
    """Return the body of the first fenced block, or the trimmed text."""
    match = _FENCED_BLOCK.search(raw)
    if match:
        return match.group(1).strip()
    # opening fence with no closing one
    return _OPEN_FENCE.sub("", raw.strip())


def _has_required(item: Any, required: tuple[str, ...]) -> bool:
    if not isinstance(item, dict):
        return False
    return all(str(item.get(key) or "").strip() for key in required)


def _valid_items(data: Any, model: type[T]) -> list[T]:
    if isinstance(data, dict):
        if _has_required(data, model.REQUIRED):
            data = [data]
        else:
            # {"questions": [...]} style wrappers
            lists = [v for v in data.values() if isinstance(v, list)]
            data = lists[0] if len(lists) == 1 else [data]
    if not isinstance(data, list):
        return []
    return [model.from_dict(item) for item in data if _has_required(item, model.REQUIRED)]


def _salvage_objects(raw: str, model: type[T]) -> list[T]:
    """Parse every flat ``{...}`` span that names all required keys."""
    recovered: list[T] = []
    for span in _FLAT_OBJECT.findall(raw):
        if not all(f'"{key}"' in span for key in model.REQUIRED):
            continue
        try:
            item = json.loads(span)
        except json.JSONDecodeError:
            continue
        if _has_required(item, model.REQUIRED):
            recovered.append(model.from_dict(item))
    return recovered


def _close_truncated_array(text: str) -> str | None:
    """Cut a truncated array back to its last complete object and close it."""
    start = text.find("[")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return re.sub(r",\s*$", "", text[start : end + 1]) + "]"


def _repair_candidates(text: str) -> Iterator[str]:
    sanitized = sanitize(text)
    yield sanitized
    match = _ARRAY_SPAN.search(sanitized)
    if match:
        yield match.group(0)
    closed = _close_truncated_array(text)
    if closed:
        yield closed
    match = _OBJECT_SPAN.search(sanitized)
    if match:
        yield match.group(0)


def _parse_batch(raw: str, model: type[T], failure: str) -> list[T]:
    text = strip_code_fence(raw)

    # Tier 1: the document is valid JSON.
    try:
        items = _valid_items(json.loads(text), model)
        if items:
            logger.info("Parsed %d %s objects", len(items), model.__name__)
            return items
        logger.warning("Response held no valid %s objects", model.__name__)
    except json.JSONDecodeError as exc:
        logger.warning("JSON parsing failed (%s); raw length %d", exc, len(raw))

    # Tier 2: pick individual objects out of a broken document.
    recovered = _salvage_objects(raw, model)
    if len(recovered) > MIN_RECOVERED:
        logger.warning(
            "Using %d recovered %s objects from partial response",
            len(recovered),
            model.__name__,
        )
        return recovered
    logger.debug("Object salvage found only %d items", len(recovered))

    # Tier 3: repair the text and try again on progressively smaller spans.
    for snippet in _repair_candidates(text):
        try:
            items = _valid_items(json.loads(snippet), model)
        except json.JSONDecodeError as exc:
            logger.debug("Repaired candidate failed to parse: %s", exc)
            continue
        if items:
            logger.warning("Recovered %d %s objects after repair", len(items), model.__name__)
            return items

    logger.error("All recovery strategies failed: %s", raw[:200])
    raise ParseError(failure)


def parse_question_batch(raw: str) -> list[InterviewQuestion]:
    return _parse_batch(raw, InterviewQuestion, "Failed to generate questions. Please try again.")


def parse_coding_batch(raw: str) -> list[CodingQuestion]:
    return _parse_batch(
        raw, CodingQuestion, "Failed to generate coding questions. Please try again."
    )


# ── feedback ───────────────────────────────────────────────────────────────


def _feedback_from(data: Any) -> Feedback | None:
    if not isinstance(data, dict) or "score" not in data:
        return None
    try:
        feedback = Feedback.from_dict(data)
    except (TypeError, ValueError) as exc:
        logger.debug("Unusable feedback object: %s", exc)
        return None
    if not (feedback.strengths and feedback.improvements and feedback.improved_answer):
        return None
    return feedback


def _split_list(body: str) -> list[str]:
    parts = (part.replace('"', "").strip() for part in body.split(","))
    return [part for part in parts if part]


def _unescape(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value


def extract_feedback_fields(text: str) -> Feedback | None:
    """Build Feedback from whichever fields can be found, defaulting the rest.

    Returns None when not a single field is present.
    """
    score_match = _SCORE.search(text)
    strengths_match = _STRENGTHS.search(text)
    improvements_match = _IMPROVEMENTS.search(text)
    answer_match = _IMPROVED_ANSWER.search(text)
    if not any((score_match, strengths_match, improvements_match, answer_match)):
        return None

    score = int(score_match.group(1)) if score_match else DEFAULT_SCORE
    strengths = _split_list(strengths_match.group(1)) if strengths_match else []
    improvements = _split_list(improvements_match.group(1)) if improvements_match else []
    improved_answer = _unescape(answer_match.group(1)).strip() if answer_match else ""

    return Feedback(
        score=max(1, min(10, score)),
        strengths=strengths or list(DEFAULT_STRENGTHS),
        improvements=improvements or list(DEFAULT_IMPROVEMENTS),
        improved_answer=improved_answer or DEFAULT_IMPROVED_ANSWER,
    )


def parse_feedback(raw: str) -> Feedback:
    text = strip_code_fence(raw)

    # Tier 1
    try:
        feedback = _feedback_from(json.loads(text))
        if feedback:
            return feedback
    except json.JSONDecodeError as exc:
        logger.warning("Feedback JSON parsing failed: %s", exc)

    # Tier 3
    sanitized = sanitize(text)
    candidates = [sanitized]
    match = _OBJECT_SPAN.search(sanitized)
    if match:
        candidates.append(match.group(0))
    for candidate in candidates:
        try:
            feedback = _feedback_from(json.loads(candidate))
        except json.JSONDecodeError as exc:
            logger.debug("Sanitized feedback failed to parse: %s", exc)
            continue
        if feedback:
            logger.warning("Recovered feedback after sanitizing response")
            return feedback

    # Tier 4
    feedback = extract_feedback_fields(sanitized)
    if feedback:
        logger.warning("Built feedback field-by-field from malformed response")
        return feedback

    logger.error("Could not extract feedback: %s", raw[:200])
    raise ParseError("Failed to analyze answer. Please try again.")
