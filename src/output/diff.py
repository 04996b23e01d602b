"""Unified-style diff of the specifier lines a run changes.

Hunks are headed by the manifest section (``@@ dependencies @@``) instead of
line numbers and show the full old and new manifest lines.
"""

from __future__ import annotations

from typing import List, Set, Tuple

from versioning.models import DependencyResult, ManifestResult


def _line_bounds(text: str, start: int, end: int) -> Tuple[int, int]:
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    if line_end < 0:
        line_end = len(text)
    if line_end > line_start and text[line_end - 1] == "\r":
        line_end -= 1
    return line_start, line_end


def changed_lines(text: str, result: DependencyResult) -> Tuple[str, str]:
    """Return (old line, new line) for one update applied to text."""
    start, end = result.dependency.value_span
    line_start, line_end = _line_bounds(text, start, end)
    old = text[line_start:line_end]
    new = old[:start - line_start] + result.decision.new_spec_text + old[end - line_start:]
    return old, new


def _manifest_diff(manifest: ManifestResult) -> List[str]:
    text = manifest.original_text
    written = [r for r in manifest.updates if not r.patch_error]
    if not written or text is None:
        return []
    lines = [f"--- a/{manifest.path}", f"+++ b/{manifest.path}"]
    seen: Set[Tuple[int, int]] = set()
    for result in sorted(written, key=lambda r: r.dependency.value_span):
        span = result.dependency.value_span
        if span in seen:
            continue
        seen.add(span)
        old, new = changed_lines(text, result)
        lines.append(f"@@ {result.dependency.section_label} @@")
        lines.append(f"-{old}")
        lines.append(f"+{new}")
    return lines


def render_diff(run_result) -> str:
    """Render every manifest that has written updates; empty string when nothing changes."""
    blocks = [_manifest_diff(m) for m in run_result.manifests]
    return "".join("\n".join(block) + "\n" for block in blocks if block)
