"""Offset-aware walk over a JSON document.

``json`` gives values but not positions; this scanner yields every string
value with its key path and the offsets of its text between the quotes.
The document is validated with ``json.loads`` first, so the walk can
assume well-formed input.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, NamedTuple, Tuple

_WS = re.compile(r"[ \t\r\n]*")
_STRING = re.compile(r'"(?:[^"\\]|\\.)*"', re.S)
_SCALAR = re.compile(r"-?[0-9][0-9.eE+\-]*|true|false|null")


class StringLeaf(NamedTuple):
    path: Tuple[str, ...]
    start: int  # first character after the opening quote
    end: int    # offset of the closing quote
    text: str   # raw text between the quotes


def load(text: str) -> Any:
    """json.loads wrapper kept here so readers validate and walk in one place."""
    return json.loads(text.lstrip("\ufeff"))


def _skip_ws(text: str, pos: int) -> int:
    return _WS.match(text, pos).end()


def _walk(text: str, pos: int, path: Tuple[str, ...], out: List[StringLeaf]) -> int:
    pos = _skip_ws(text, pos)
    char = text[pos]
    if char == "{":
        pos = _skip_ws(text, pos + 1)
        if text[pos] == "}":
            return pos + 1
        while True:
            key_match = _STRING.match(text, pos)
            key = json.loads(key_match.group(0))
            pos = _skip_ws(text, key_match.end())
            pos = _walk(text, pos + 1, path + (key,), out)  # skip ':'
            pos = _skip_ws(text, pos)
            if text[pos] == ",":
                pos = _skip_ws(text, pos + 1)
                continue
            return pos + 1  # '}'
    if char == "[":
        pos = _skip_ws(text, pos + 1)
        if text[pos] == "]":
            return pos + 1
        index = 0
        while True:
            pos = _walk(text, pos, path + (str(index),), out)
            index += 1
            pos = _skip_ws(text, pos)
            if text[pos] == ",":
                pos += 1
                continue
            return pos + 1  # ']'
    if char == '"':
        match = _STRING.match(text, pos)
        out.append(StringLeaf(path, match.start() + 1, match.end() - 1, match.group(0)[1:-1]))
        return match.end()
    return _SCALAR.match(text, pos).end()


def string_leaves(text: str) -> List[StringLeaf]:
    """Return every string value of a well-formed JSON document, in document order."""
    out: List[StringLeaf] = []
    start = 1 if text.startswith("\ufeff") else 0
    _walk(text, start, (), out)
    return out
