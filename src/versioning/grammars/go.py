"""go.mod module version grammar.

Versions are always exact (``v1.2.3``, ``v2.0.0+incompatible``); the
leading ``v`` is kept in the display prefix. A trailing ``// pinned``
comment is handled by the go.mod reader and never reaches this grammar.
"""

from __future__ import annotations

from versioning.formatter import render_spec
from versioning.grammars.common import GrammarRules, build_spec
from versioning.models import Ecosystem, Operator, VersionSpec
from versioning.semver import SemVer

RULES = GrammarRules(
    ecosystem=Ecosystem.GO,
    operators={"v": Operator.EXACT},
    bare=Operator.EXACT,
    max_clauses=1,
)


def parse(raw_text: str) -> VersionSpec:
    return build_spec(raw_text, RULES)


def format_spec(spec: VersionSpec, version: SemVer) -> str:
    return render_spec(spec, version)
