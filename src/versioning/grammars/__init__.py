"""Ecosystem grammars registered in a capability table.

Each grammar is a pair of plain functions, ``parse(raw_text)`` and
``format_spec(spec, version)``, looked up by Ecosystem.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, NamedTuple

from common.errors import ParseError
from common.logging_utils import extra_context, is_debug_enabled
from versioning.grammars import go, java, node, php, python, ruby, rust
from versioning.grammars.common import degraded_spec
from versioning.models import Ecosystem, VersionSpec
from versioning.semver import SemVer

logger = logging.getLogger(__name__)


class Grammar(NamedTuple):
    parse: Callable[[str], VersionSpec]
    format_spec: Callable[[VersionSpec, SemVer], str]


GRAMMARS: Dict[Ecosystem, Grammar] = {
    Ecosystem.NODE: Grammar(node.parse, node.format_spec),
    Ecosystem.PYTHON: Grammar(python.parse, python.format_spec),
    Ecosystem.RUST: Grammar(rust.parse, rust.format_spec),
    Ecosystem.GO: Grammar(go.parse, go.format_spec),
    Ecosystem.RUBY: Grammar(ruby.parse, ruby.format_spec),
    Ecosystem.PHP: Grammar(php.parse, php.format_spec),
    Ecosystem.JAVA: Grammar(java.parse, java.format_spec),
}


def parse_spec(raw_text: str, ecosystem: Ecosystem) -> VersionSpec:
    """Parse raw_text with the ecosystem's grammar.

    Unrecognized syntax degrades to a pinned Exact spec holding a best-effort
    version so the dependency is skipped rather than corrupted.

    Args:
        raw_text: Specifier exactly as written in the manifest.
        ecosystem: Grammar to use.

    Returns:
        VersionSpec

    Raises:
        ParseError: When no version at all can be recovered from raw_text.
    """
    grammar = GRAMMARS[ecosystem]
    try:
        return grammar.parse(raw_text)
    except ParseError as exc:
        spec = degraded_spec(raw_text, ecosystem, exc)
        logger.warning("%s; treating '%s' as pinned", exc, raw_text)
        if is_debug_enabled(logger):
            logger.debug(
                "Specifier degraded",
                extra=extra_context(
                    event="parse",
                    component="grammars",
                    action="parse_spec",
                    outcome="degraded",
                    ecosystem=ecosystem.value,
                    reason=exc.reason,
                )
            )
        return spec


def format_spec(spec: VersionSpec, version: SemVer) -> str:
    """Render spec with version through the ecosystem's grammar."""
    return GRAMMARS[spec.ecosystem].format_spec(spec, version)


__all__ = ["GRAMMARS", "Grammar", "parse_spec", "format_spec"]
