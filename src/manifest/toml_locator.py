"""Offset-aware walk over a TOML document.

``tomllib`` parses TOML but drops positions. This scanner covers the subset
of TOML found in manifests (tables, array tables, dotted and quoted keys,
strings, arrays, inline tables, scalars, comments) and yields every
single-line string value with its full key path and the offsets of its text
between the quotes. Documents are validated with ``tomllib`` first.
"""

from __future__ import annotations

import json
import re
import sys
from typing import Any, Dict, List, NamedTuple, Tuple

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

_BARE_KEY = re.compile(r"[A-Za-z0-9_\-]+")
_BASIC = re.compile(r'"(?:[^"\\\n]|\\.)*"')
_LITERAL = re.compile(r"'[^'\n]*'")
# A quote run inside a multi-line basic string may be escaped or shorter than three
_MULTI_BASIC = re.compile(r'"""(?:\\.|[^"\\]|"(?!""))*"""(?:"{1,2})?', re.S)
_SCALAR = re.compile(
    r"\d{4}-\d{2}-\d{2}(?:[Tt ]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})?)?"
    r"|[^\s,\]\}#]+"
)
_INLINE_WS = re.compile(r"[ \t]*")


class StringLeaf(NamedTuple):
    path: Tuple[str, ...]
    start: int
    end: int
    text: str


def load(text: str) -> Dict[str, Any]:
    """Validate and parse with tomllib; raises tomllib.TOMLDecodeError."""
    return tomllib.loads(text)


TOMLDecodeError = tomllib.TOMLDecodeError


class _Scanner:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.leaves: List[StringLeaf] = []
        self.array_tables: Dict[Tuple[str, ...], int] = {}

    def fail(self, message: str):
        raise ValueError(f"{message} at offset {self.pos}")

    def peek(self, literal: str) -> bool:
        return self.text.startswith(literal, self.pos)

    def skip_inline_ws(self) -> None:
        self.pos = _INLINE_WS.match(self.text, self.pos).end()

    def skip_trivia(self) -> None:
        """Skip whitespace, newlines and comments."""
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char in " \t\r\n":
                self.pos += 1
            elif char == "#":
                newline = text.find("\n", self.pos)
                self.pos = len(text) if newline < 0 else newline
            else:
                break

    def key(self) -> Tuple[str, ...]:
        parts = []
        while True:
            self.skip_inline_ws()
            if self.peek('"'):
                match = _BASIC.match(self.text, self.pos)
                parts.append(json.loads(match.group(0)))
            elif self.peek("'"):
                match = _LITERAL.match(self.text, self.pos)
                parts.append(match.group(0)[1:-1])
            else:
                match = _BARE_KEY.match(self.text, self.pos)
                if match is None:
                    self.fail("expected a key")
                parts.append(match.group(0))
            self.pos = match.end()
            self.skip_inline_ws()
            if self.peek("."):
                self.pos += 1
                continue
            return tuple(parts)

    def value(self, path: Tuple[str, ...]) -> None:
        text = self.text
        if self.peek('"""'):
            match = _MULTI_BASIC.match(text, self.pos)
            if match is None:
                self.fail("unterminated multi-line string")
            self.pos = match.end()
        elif self.peek("'''"):
            close = text.find("'''", self.pos + 3)
            if close < 0:
                self.fail("unterminated multi-line string")
            self.pos = close + 3
            while self.peek("'"):
                self.pos += 1
        elif self.peek('"') or self.peek("'"):
            pattern = _BASIC if self.peek('"') else _LITERAL
            match = pattern.match(text, self.pos)
            if match is None:
                self.fail("unterminated string")
            self.leaves.append(StringLeaf(path, match.start() + 1, match.end() - 1, match.group(0)[1:-1]))
            self.pos = match.end()
        elif self.peek("["):
            self.pos += 1
            index = 0
            while True:
                self.skip_trivia()
                if self.peek("]"):
                    self.pos += 1
                    return
                self.value(path + (str(index),))
                index += 1
                self.skip_trivia()
                if self.peek(","):
                    self.pos += 1
        elif self.peek("{"):
            self.pos += 1
            while True:
                self.skip_inline_ws()
                if self.peek("}"):
                    self.pos += 1
                    return
                key = self.key()
                if not self.peek("="):
                    self.fail("expected '='")
                self.pos += 1
                self.skip_inline_ws()
                self.value(path + key)
                self.skip_inline_ws()
                if self.peek(","):
                    self.pos += 1
        else:
            match = _SCALAR.match(text, self.pos)
            if match is None:
                self.fail("expected a value")
            self.pos = match.end()

    def run(self) -> List[StringLeaf]:
        table: Tuple[str, ...] = ()
        while True:
            self.skip_trivia()
            if self.pos >= len(self.text):
                return self.leaves
            if self.peek("[["):
                self.pos += 2
                header = self.key()
                self.pos += 2  # ']]'
                index = self.array_tables.get(header, 0)
                self.array_tables[header] = index + 1
                table = header + (str(index),)
            elif self.peek("["):
                self.pos += 1
                table = self.key()
                self.pos += 1  # ']'
            else:
                key = self.key()
                if not self.peek("="):
                    self.fail("expected '='")
                self.pos += 1
                self.skip_inline_ws()
                self.value(table + key)


def string_leaves(text: str) -> List[StringLeaf]:
    """Return every single-line string value with its full key path, in document order."""
    return _Scanner(text).run()
