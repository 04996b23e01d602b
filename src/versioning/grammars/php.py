"""Composer constraint grammar.

Exact, ``^`` and ``~`` (Composer's tilde is pessimistic: ``~1.2`` allows
anything below 2.0) plus comparisons; compound clauses are separated by a
comma or whitespace. ``||`` alternatives are not modeled.
"""

from __future__ import annotations

import re

from versioning.formatter import render_spec
from versioning.grammars.common import GrammarRules, build_spec
from versioning.models import Ecosystem, Operator, VersionSpec
from versioning.semver import SemVer

RULES = GrammarRules(
    ecosystem=Ecosystem.PHP,
    operators={
        "^": Operator.CARET,
        "~": Operator.COMPATIBLE,
        ">=": Operator.GREATER_EQ,
        ">": Operator.GREATER,
        "<=": Operator.LESS_EQ,
        "<": Operator.LESS_THAN,
        "==": Operator.EXACT,
        "=": Operator.EXACT,
    },
    bare=Operator.EXACT,
    separator=re.compile(r"\s*,\s*|\s+"),
)


def parse(raw_text: str) -> VersionSpec:
    return build_spec(raw_text, RULES)


def format_spec(spec: VersionSpec, version: SemVer) -> str:
    return render_spec(spec, version)
