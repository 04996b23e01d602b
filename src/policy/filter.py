"""User-selected narrowing of a run: languages, package names and pin override."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List

from versioning.models import Ecosystem


def split_names(values: Iterable[str]) -> List[str]:
    """Flatten repeated and comma-separated name lists, dropping blanks."""
    names = []
    for value in values or []:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names


@dataclass(frozen=True)
class UpdateFilter:
    """Which manifests and dependencies a run evaluates.

    An empty ``languages`` set means every ecosystem. A non-empty ``only``
    list wins over ``exclude``.
    """
    languages: FrozenSet[Ecosystem] = field(default_factory=frozenset)
    only: FrozenSet[str] = field(default_factory=frozenset)
    exclude: FrozenSet[str] = field(default_factory=frozenset)
    include_pinned: bool = False

    def should_process_language(self, ecosystem: Ecosystem) -> bool:
        return not self.languages or ecosystem in self.languages

    def should_process_package(self, name: str) -> bool:
        if self.only:
            return name in self.only
        return name not in self.exclude
