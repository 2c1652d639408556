"""Tests for model-output parsing and its recovery tiers."""

import json

import pytest

from interview_prep.errors import ParseError
from interview_prep.parsing import (
    DEFAULT_IMPROVED_ANSWER,
    DEFAULT_IMPROVEMENTS,
    DEFAULT_STRENGTHS,
    parse_coding_batch,
    parse_feedback,
    parse_question_batch,
    strip_code_fence,
)


def _questions(n):
    return [
        {
            "question": f"Question {i}?",
            "type": "technical" if i % 3 else "behavioral",
            "difficulty": ["Easy", "Medium", "Hard"][i % 3],
            "category": "Python",
        }
        for i in range(n)
    ]


def _coding(n):
    return [
        {
            "title": f"Problem {i}",
            "difficulty": "Medium",
            "category": "Array",
            "description": "Do the thing",
            "platform": "leetcode",
            "url": f"https://leetcode.com/problems/problem-{i}/",
            "tags": ["array", "hash-table"],
        }
        for i in range(n)
    ]


def test_strip_code_fence():
    assert strip_code_fence('```json\n[1, 2]\n```') == "[1, 2]"
    assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('  [1]  ') == "[1]"


def test_strip_unclosed_fence():
    assert strip_code_fence('```json\n[{"a": 1},') == '[{"a": 1},'


# ── question batches ───────────────────────────────────────────────────────


@pytest.mark.parametrize("fenced", [False, True])
def test_question_round_trip(fenced):
    original = _questions(5)
    raw = json.dumps(original)
    if fenced:
        raw = f"```json\n{raw}\n```"
    parsed = parse_question_batch(raw)
    assert [q.to_dict() for q in parsed] == original


def test_prose_around_fence_is_ignored():
    raw = "Sure! Here are your questions:\n```json\n" + json.dumps(_questions(2)) + "\n```\nGood luck!"
    assert len(parse_question_batch(raw)) == 2


def test_invalid_elements_filtered():
    items = _questions(3)
    items[1]["category"] = ""
    items.append("not an object")
    parsed = parse_question_batch(json.dumps(items))
    assert [q.question for q in parsed] == ["Question 0?", "Question 2?"]


def test_wrapped_array_accepted():
    raw = json.dumps({"questions": _questions(4)})
    assert len(parse_question_batch(raw)) == 4


def test_partial_recovery_from_concatenated_objects():
    raw = "\n".join(json.dumps(q) for q in _questions(12))
    parsed = parse_question_batch(raw)
    assert len(parsed) >= 10
    assert parsed[0].question == "Question 0?"


def test_few_concatenated_objects_repaired_by_sanitizer():
    raw = "[" + "".join(json.dumps(q) for q in _questions(3)) + "]"
    parsed = parse_question_batch(raw)
    assert len(parsed) == 3


def test_question_garbage_raises():
    with pytest.raises(ParseError, match="Failed to generate questions"):
        parse_question_batch("I cannot help with that request.")


def test_question_empty_array_raises():
    with pytest.raises(ParseError):
        parse_question_batch("[]")


# ── coding batches ─────────────────────────────────────────────────────────


def test_coding_batch_parses_fenced_array():
    raw = "```json\n" + json.dumps(_coding(30)) + "\n```"
    parsed = parse_coding_batch(raw)
    assert len(parsed) == 30
    assert parsed[0].tags == ["array", "hash-table"]
    assert parsed[0].url.startswith("https://leetcode.com/")


def test_truncated_coding_array_keeps_complete_objects():
    complete = ", ".join(json.dumps(p) for p in _coding(2))
    raw = '```json\n[' + complete + ', {"title": "Three", "diff'
    parsed = parse_coding_batch(raw)
    assert [p.title for p in parsed] == ["Problem 0", "Problem 1"]


def test_single_coding_object_is_not_unwrapped_to_its_tags():
    raw = json.dumps(_coding(1)[0])
    parsed = parse_coding_batch(raw)
    assert [p.title for p in parsed] == ["Problem 0"]
    assert parsed[0].tags == ["array", "hash-table"]


def test_coding_garbage_raises():
    with pytest.raises(ParseError, match="coding questions"):
        parse_coding_batch("no json here")


# ── feedback ───────────────────────────────────────────────────────────────


def _feedback(**overrides):
    data = {
        "score": 7,
        "strengths": ["Clear structure", "Good example"],
        "improvements": ["Add metrics", "Be concise"],
        "improvedAnswer": "A better answer.",
    }
    data.update(overrides)
    return data


def test_feedback_direct_parse():
    fb = parse_feedback("```json\n" + json.dumps(_feedback()) + "\n```")
    assert fb.score == 7
    assert fb.strengths == ["Clear structure", "Good example"]
    assert fb.improved_answer == "A better answer."
    assert fb.to_dict() == _feedback()


def test_feedback_score_clamped():
    assert parse_feedback(json.dumps(_feedback(score=12))).score == 10
    assert parse_feedback(json.dumps(_feedback(score=0))).score == 1


def test_feedback_repaired_by_sanitizer():
    raw = (
        '{"score": 6, "strengths": ["Clear", "Concise"], '
        '"improvements": ["More depth"], "improvedAnswer": "Use STAR'
    )
    fb = parse_feedback(raw)
    assert fb.score == 6
    assert fb.strengths == ["Clear", "Concise"]
    assert fb.improvements == ["More depth"]
    assert fb.improved_answer == "Use STAR"


def test_feedback_bare_keys_repaired():
    raw = '{score: 9, strengths: ["A", "B"], improvements: ["C", "D"], improvedAnswer: "E",}'
    fb = parse_feedback(raw)
    assert fb.score == 9
    assert fb.improvements == ["C", "D"]


def test_feedback_fallback_defaults():
    raw = 'Overall solid. "score": 8, "strengths": none given, "improvedAnswer": null'
    fb = parse_feedback(raw)
    assert fb.score == 8
    assert fb.strengths == DEFAULT_STRENGTHS
    assert fb.improvements == DEFAULT_IMPROVEMENTS
    assert fb.improved_answer == DEFAULT_IMPROVED_ANSWER


def test_feedback_missing_answer_filled_field_by_field():
    raw = json.dumps({"score": 7, "strengths": ["a", "b"], "improvements": ["c", "d"]})
    fb = parse_feedback(raw)
    assert fb.score == 7
    assert fb.strengths == ["a", "b"]
    assert fb.improvements == ["c", "d"]
    assert fb.improved_answer == DEFAULT_IMPROVED_ANSWER


def test_feedback_without_any_field_raises():
    with pytest.raises(ParseError, match="Failed to analyze answer"):
        parse_feedback("The model refused to answer.")
