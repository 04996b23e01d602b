"""Turn update decisions into located byte-range edits and splice them into a manifest.

Edits are anchored by ``(name, section)`` on a fresh read of the manifest
text, never by searching for the old specifier string, so an unrelated
occurrence of the same text elsewhere in the file is never touched.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from common.errors import PatchAnchorAmbiguous
from common.logging_utils import extra_context, is_debug_enabled
from manifest import READERS
from versioning.models import (
    Dependency,
    DependencyResult,
    Ecosystem,
    ManifestPatch,
    PatchEdit,
)

logger = logging.getLogger(__name__)

_EXTRACTORS = {reader.ecosystem: reader.extract for reader in READERS.values()}


def locate(dependencies: Iterable[Dependency], name: str, section: Tuple[str, ...]) -> Dependency:
    """Return the single dependency matching (name, section).

    Raises:
        PatchAnchorAmbiguous: When zero or more than one entry matches.
    """
    matches = [d for d in dependencies if d.name == name and d.section == section]
    if len(matches) != 1:
        raise PatchAnchorAmbiguous(name, section, len(matches))
    return matches[0]


def _byte_offset(text: str, index: int) -> int:
    return len(text[:index].encode("utf-8"))


def build_patch(
    path: str,
    ecosystem: Ecosystem,
    text: str,
    updates: Sequence[DependencyResult],
) -> Tuple[ManifestPatch, List[PatchAnchorAmbiguous]]:
    """Locate every update in text and return the patch plus per-dependency failures.

    A failure affects only its own dependency; all other edits are kept.
    Several updates resolving to one span (Gradle variables shared by
    several artifacts) collapse into one edit when they agree and fail
    together when they do not.

    Args:
        path: Manifest path recorded on the patch.
        ecosystem: Ecosystem of the manifest, selects the reader.
        text: Current manifest text.
        updates: Results whose decision is an update.

    Returns:
        (ManifestPatch, failures)
    """
    located = _EXTRACTORS[ecosystem](text)
    failures: List[PatchAnchorAmbiguous] = []
    by_span: Dict[Tuple[int, int], List[Tuple[DependencyResult, str]]] = defaultdict(list)

    for result in updates:
        if not result.decision.is_update:
            continue
        dep = result.dependency
        try:
            anchor = locate(located, dep.name, dep.section)
        except PatchAnchorAmbiguous as exc:
            logger.warning("%s: %s", path, exc)
            failures.append(exc)
            continue
        by_span[anchor.value_span].append((result, result.decision.new_spec_text))

    edits: List[PatchEdit] = []
    for (start, end), entries in sorted(by_span.items()):
        replacements = {replacement for _, replacement in entries}
        if len(replacements) > 1:
            for result, _ in entries:
                exc = PatchAnchorAmbiguous(result.dependency.name, result.dependency.section, len(entries))
                logger.warning("%s: conflicting updates for a shared version: %s", path, exc)
                failures.append(exc)
            continue
        edits.append(PatchEdit(_byte_offset(text, start), _byte_offset(text, end), replacements.pop()))

    if is_debug_enabled(logger):
        logger.debug(
            "Patch built",
            extra=extra_context(
                event="patch",
                component="patcher",
                action="build_patch",
                outcome="success" if not failures else "partial",
                target=path,
                edits=len(edits),
                failures=len(failures),
            )
        )
    return ManifestPatch(path=path, ecosystem=ecosystem, edits=edits), failures


def apply_patch(text: str, patch: ManifestPatch) -> str:
    """Splice the patch's edits into text; bytes outside the edited ranges are unchanged."""
    if patch.is_empty:
        return text
    data = text.encode("utf-8")
    for edit in sorted(patch.edits, key=lambda e: e.start, reverse=True):
        data = data[:edit.start] + edit.replacement.encode("utf-8") + data[edit.end:]
    return data.decode("utf-8")
