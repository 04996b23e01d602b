"""Cargo specifier grammar: a bare version is a caret requirement."""

from __future__ import annotations

import re

from versioning.formatter import render_spec
from versioning.grammars.common import GrammarRules, build_spec
from versioning.models import Ecosystem, Operator, VersionSpec
from versioning.semver import SemVer

RULES = GrammarRules(
    ecosystem=Ecosystem.RUST,
    operators={
        "^": Operator.CARET,
        "~": Operator.TILDE,
        "=": Operator.EXACT,
        ">=": Operator.GREATER_EQ,
        ">": Operator.GREATER,
        "<=": Operator.LESS_EQ,
        "<": Operator.LESS_THAN,
    },
    bare=Operator.CARET,
    separator=re.compile(r"\s*,\s*"),
)


def parse(raw_text: str) -> VersionSpec:
    return build_spec(raw_text, RULES)


def format_spec(spec: VersionSpec, version: SemVer) -> str:
    return render_spec(spec, version)
