"""Best-effort repair of malformed JSON emitted by the model.

The transforms run in the order listed in :data:`TRANSFORMS`; each one
assumes the previous ones already ran. The result is not guaranteed to be
valid JSON.
"""

from __future__ import annotations

import re
from typing import Callable

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z0-9_]+)(\s*:)")
_ADJACENT_STRINGS = re.compile(r'"\s*"\s*"')
_ADJACENT_OBJECTS = re.compile(r'"\s*}\s*{')
_TRAILING_COMMA = re.compile(r",\s*([}\]])")

_CLOSERS = {"{": "}", "[": "]"}


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)


def balance_quotes(text: str) -> str:
    if text.count('"') % 2:
        return text + '"'
    return text


def quote_bare_keys(text: str) -> str:
    return _BARE_KEY.sub(r'\1"\2"\3', text)


def join_adjacent_strings(text: str) -> str:
    return _ADJACENT_STRINGS.sub('","', text)


def join_adjacent_objects(text: str) -> str:
    return _ADJACENT_OBJECTS.sub('"},{', text)


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def close_open_containers(text: str) -> str:
    """Append the closing ``}``/``]`` characters still owed at end of input.

    Braces inside string literals are ignored; surplus closers are left as-is.
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif stack and ch == stack[-1]:
            stack.pop()
    return text + "".join(reversed(stack))


TRANSFORMS: tuple[Callable[[str], str], ...] = (
    strip_control_chars,
    balance_quotes,
    quote_bare_keys,
    join_adjacent_strings,
    join_adjacent_objects,
    strip_trailing_commas,
    close_open_containers,
)


def sanitize(text: str) -> str:
    if not text or not isinstance(text, str):
        return "{}"
    for transform in TRANSFORMS:
        text = transform(text)
    return text
