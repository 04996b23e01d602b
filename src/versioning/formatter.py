"""Range formatter: re-serializes a selected version in the spec's own form."""

from __future__ import annotations

from versioning.models import VersionSpec
from versioning.semver import SemVer


def render_spec(spec: VersionSpec, version: SemVer) -> str:
    """Re-emit spec with version in place of its lower-bound version token.

    The display prefix (operator, spacing, Go's ``v``) and everything after
    the token (upper-bound clause, separators, quotes) are copied verbatim
    from the raw text, so formatting with the unchanged version reproduces
    ``spec.raw_text`` exactly. A degraded spec always renders unchanged.
    """
    if spec.degraded:
        return spec.raw_text
    return spec.display_prefix + version.text + spec.suffix
