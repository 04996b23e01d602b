"""Gradle coordinate version grammar.

The version token of ``group:artifact:version`` is taken as-is; exact
strings are the normal form and are never treated as pins. Maven ranges and
dynamic ``+`` versions are rejected.
"""

from __future__ import annotations

from versioning.formatter import render_spec
from versioning.grammars.common import GrammarRules, build_spec
from versioning.models import Ecosystem, Operator, VersionSpec
from versioning.semver import SemVer

RULES = GrammarRules(
    ecosystem=Ecosystem.JAVA,
    operators={},
    bare=Operator.EXACT,
    max_clauses=1,
)


def parse(raw_text: str) -> VersionSpec:
    return build_spec(raw_text, RULES)


def format_spec(spec: VersionSpec, version: SemVer) -> str:
    return render_spec(spec, version)
