"""RubyGems requirement grammar.

``= X``, bare ``X``, pessimistic ``~> X`` and comparisons. A compound
requirement spans several Gemfile arguments (``'>= 1.0', '< 2.0'``); the
Gemfile reader hands over the text from the first requirement to the last,
so the quote-comma-quote separator is part of the raw text.
"""

from __future__ import annotations

import re

from versioning.formatter import render_spec
from versioning.grammars.common import GrammarRules, build_spec
from versioning.models import Ecosystem, Operator, VersionSpec
from versioning.semver import SemVer

RULES = GrammarRules(
    ecosystem=Ecosystem.RUBY,
    operators={
        "~>": Operator.COMPATIBLE,
        ">=": Operator.GREATER_EQ,
        ">": Operator.GREATER,
        "<=": Operator.LESS_EQ,
        "<": Operator.LESS_THAN,
        "=": Operator.EXACT,
    },
    bare=Operator.EXACT,
    separator=re.compile(r"""\s*['"]\s*,\s*['"]\s*|\s*,\s*"""),
)


def parse(raw_text: str) -> VersionSpec:
    return build_spec(raw_text, RULES)


def format_spec(spec: VersionSpec, version: SemVer) -> str:
    return render_spec(spec, version)
