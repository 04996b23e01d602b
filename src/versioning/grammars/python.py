"""Python specifier grammar (PEP 440 and Poetry conventions).

PEP 440 operators ``==``, ``===``, ``~=``, ``>=``, ``>`` with a comma
compound upper bound (``>=3.5.0,<4.0.0``); Poetry adds ``^``, ``~`` and a
bare version meaning an exact pin. ``!=`` exclusions and ``.*`` wildcards
are not modeled.
"""

from __future__ import annotations

import re

from versioning.formatter import render_spec
from versioning.grammars.common import GrammarRules, build_spec
from versioning.models import Ecosystem, Operator, VersionSpec
from versioning.semver import SemVer

RULES = GrammarRules(
    ecosystem=Ecosystem.PYTHON,
    operators={
        "===": Operator.EXACT,
        "==": Operator.EXACT,
        "~=": Operator.COMPATIBLE,
        ">=": Operator.GREATER_EQ,
        ">": Operator.GREATER,
        "<=": Operator.LESS_EQ,
        "<": Operator.LESS_THAN,
        "^": Operator.CARET,
        "~": Operator.TILDE,
    },
    bare=Operator.EXACT,
    separator=re.compile(r"\s*,\s*"),
)


def parse(raw_text: str) -> VersionSpec:
    return build_spec(raw_text, RULES)


def format_spec(spec: VersionSpec, version: SemVer) -> str:
    return render_spec(spec, version)
