"""Heuristics for spotting model output that was cut off mid-structure.

Only unambiguous truncation is flagged; anything subtler is left to the
recovery tiers in :mod:`interview_prep.parsing`.
"""

from __future__ import annotations

_OPEN_FENCE = "```json"
_FENCE = "```"
_SHORT_ARRAY_LIMIT = 500


def unterminated_fence(text: str) -> bool:
    """An opening ```json fence with no closing fence after it."""
    start = text.find(_OPEN_FENCE)
    if start == -1:
        return False
    return _FENCE not in text[start + len(_OPEN_FENCE):]


def dangling_question_comma(text: str) -> bool:
    return '"question":' in text and text.rstrip().endswith(",")


def unclosed_short_array(text: str) -> bool:
    return text.strip().startswith("[") and "]" not in text and len(text) < _SHORT_ARRAY_LIMIT


CHECKS = (unterminated_fence, dangling_question_comma, unclosed_short_array)


def looks_truncated(text: str) -> bool:
    return any(check(text) for check in CHECKS)
