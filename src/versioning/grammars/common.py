"""Clause scanning shared by the ecosystem grammars.

A grammar is described by an operator table, the operator implied by a bare
version, and the separator between compound clauses. Scanning records the
offsets of every clause so formatting can copy untouched text verbatim.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Pattern

from common.errors import ParseError
from policy import pins
from versioning.models import ConstraintTerm, Ecosystem, Operator, VersionSpec
from versioning.semver import SemVer, parse_version

VERSION_TOKEN = re.compile(r"\d[0-9A-Za-z.+\-_]*")
_BEST_EFFORT = re.compile(r"\d+(?:\.\d+)*")
_SPACES = re.compile(r"\s*")


@dataclass(frozen=True)
class Clause:
    operator: Operator
    version: SemVer
    start: int
    version_start: int
    version_end: int


@dataclass(frozen=True)
class GrammarRules:
    """Declarative description of one ecosystem's specifier syntax."""
    ecosystem: Ecosystem
    operators: Mapping[str, Operator]
    bare: Operator
    separator: Optional[Pattern[str]] = None
    max_clauses: int = 2


def _match_operator(raw: str, pos: int, rules: GrammarRules):
    for text in sorted(rules.operators, key=len, reverse=True):
        if text and raw.startswith(text, pos):
            return text, rules.operators[text]
    return "", rules.bare


def scan_clauses(raw: str, rules: GrammarRules) -> List[Clause]:
    """Split raw into operator/version clauses.

    Raises:
        ParseError: On text that is not an operator, a version or a separator.
    """
    clauses: List[Clause] = []
    pos = _SPACES.match(raw, 0).end()
    if pos == len(raw):
        raise ParseError(raw, "empty specifier")

    while True:
        start = pos
        op_text, operator = _match_operator(raw, pos, rules)
        pos = _SPACES.match(raw, pos + len(op_text)).end()
        token = VERSION_TOKEN.match(raw, pos)
        if token is None:
            raise ParseError(raw, f"expected a version at offset {pos}")
        try:
            version = parse_version(token.group(0), rules.ecosystem)
        except ValueError as exc:
            raise ParseError(raw, str(exc)) from exc
        clauses.append(Clause(operator, version, start, token.start(), token.end()))
        pos = token.end()

        if _SPACES.match(raw, pos).end() == len(raw):
            break
        sep = rules.separator.match(raw, pos) if rules.separator is not None else None
        if sep is None or sep.end() == pos:
            raise ParseError(raw, f"unexpected text '{raw[pos:]}'")
        pos = sep.end()
        if len(clauses) >= rules.max_clauses:
            raise ParseError(raw, "too many clauses")
    return clauses


def build_spec(raw: str, rules: GrammarRules) -> VersionSpec:
    """Parse raw into a VersionSpec with a lower term and an optional upper term."""
    clauses = scan_clauses(raw, rules)
    lower = clauses[0]
    if lower.operator.is_upper_bound:
        raise ParseError(raw, "constraint has no lower bound")

    upper = None
    if len(clauses) == 2:
        second = clauses[1]
        if not second.operator.is_upper_bound:
            raise ParseError(raw, "second clause is not an upper bound")
        upper = ConstraintTerm(second.operator, second.version, (second.start, second.version_end))

    display_prefix = raw[:lower.version_start]
    return VersionSpec(
        raw_text=raw,
        ecosystem=rules.ecosystem,
        lower=ConstraintTerm(lower.operator, lower.version, (lower.start, lower.version_end)),
        upper=upper,
        display_prefix=display_prefix,
        is_pinned=pins.is_pinned(rules.ecosystem, display_prefix),
        version_span=(lower.version_start, lower.version_end),
    )


def degraded_spec(raw: str, ecosystem: Ecosystem, error: ParseError) -> VersionSpec:
    """Fallback for unrecognized syntax: pinned, Exact, best-effort version.

    Raises:
        ParseError: When not even a version number can be found in raw.
    """
    for match in _BEST_EFFORT.finditer(raw):
        try:
            version = parse_version(match.group(0), ecosystem)
        except ValueError:
            continue
        return VersionSpec(
            raw_text=raw,
            ecosystem=ecosystem,
            lower=ConstraintTerm(Operator.EXACT, version, (0, len(raw))),
            upper=None,
            display_prefix="",
            is_pinned=True,
            version_span=(match.start(), match.end()),
            degraded=True,
        )
    raise error

