"""npm specifier grammar.

Accepts exact (``1.2.3``, ``=1.2.3``), caret, tilde and comparison forms,
optionally followed by a space-separated ``<``/``<=`` upper-bound clause
(``>=1.2.3 <2.0.0``). Unions, hyphen ranges and x-ranges are not modeled.
"""

from __future__ import annotations

import re

from versioning.formatter import render_spec
from versioning.grammars.common import GrammarRules, build_spec
from versioning.models import Ecosystem, Operator, VersionSpec
from versioning.semver import SemVer

RULES = GrammarRules(
    ecosystem=Ecosystem.NODE,
    operators={
        "^": Operator.CARET,
        "~": Operator.TILDE,
        ">=": Operator.GREATER_EQ,
        ">": Operator.GREATER,
        "<=": Operator.LESS_EQ,
        "<": Operator.LESS_THAN,
        "=": Operator.EXACT,
    },
    bare=Operator.EXACT,
    separator=re.compile(r"\s+"),
)


def parse(raw_text: str) -> VersionSpec:
    return build_spec(raw_text, RULES)


def format_spec(spec: VersionSpec, version: SemVer) -> str:
    return render_spec(spec, version)
