"""Pin classification table.

A specifier is pinned when its display prefix (operator text before the
version, whitespace ignored) is one of the ecosystem's exact-match prefixes.
Go and Java are always updatable: go.mod has no range operators and exact
Gradle coordinates are the normal, intentionally-updatable form.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from versioning.models import Ecosystem

PIN_PREFIXES: Dict[Ecosystem, FrozenSet[str]] = {
    Ecosystem.NODE: frozenset({"", "="}),
    Ecosystem.PYTHON: frozenset({"", "==", "==="}),
    Ecosystem.RUST: frozenset({"="}),
    Ecosystem.RUBY: frozenset({"", "="}),
    Ecosystem.PHP: frozenset({"", "=", "=="}),
    Ecosystem.GO: frozenset(),
    Ecosystem.JAVA: frozenset(),
}

ALWAYS_UPDATABLE: FrozenSet[Ecosystem] = frozenset({Ecosystem.GO, Ecosystem.JAVA})


def normalize_prefix(prefix: str) -> str:
    """Drop whitespace and a loose 'v' marker from an operator prefix."""
    return "".join(prefix.split()).rstrip("vV")


def is_always_updatable(ecosystem: Ecosystem) -> bool:
    return ecosystem in ALWAYS_UPDATABLE


def is_pinned(ecosystem: Ecosystem, display_prefix: str) -> bool:
    """Return True when display_prefix marks an exact pin in ecosystem."""
    if is_always_updatable(ecosystem):
        return False
    return normalize_prefix(display_prefix) in PIN_PREFIXES.get(ecosystem, frozenset())
