"""Semantic version value shared by every ecosystem grammar.

Ordering and equality compare every numeric release component, then the
prerelease; build metadata is carried but never compared. Python versions
are ordered by PEP 440. The text of the version exactly as written is kept
so that formatting reproduces it.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

import semantic_version
from packaging import version as pep440

from constants import Constants
from versioning.models import Ecosystem

_LEADING_V = re.compile(r"^[vV](?=\d)")
_RELEASE = re.compile(r"^\d+(?:\.\d+)*")
_X_RANGE = re.compile(r"^\d+(?:\.\d+)*\.(?:[xX*])(?:$|[.\-+])")
# Ruby "1.0.0.beta1" and Maven "1.0.0.RC1" put the label after a dot
_DOTTED_LABEL = re.compile(r"^(\d+(?:\.\d+)*)\.(?=[A-Za-z])")

STRICT_PRERELEASE = frozenset({Ecosystem.NODE, Ecosystem.RUST, Ecosystem.PHP})


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A parsed version.

    Attributes:
        major, minor, patch: Numeric release components (missing ones are 0).
        prerelease: Dot-separated prerelease identifiers.
        build: Build metadata identifiers (ignored for ordering/equality).
        text: The version exactly as written, without a leading 'v'.
        precision: Number of numeric release components written.
        extra: Release components past the third, then a PEP 440 post number.
        strict_prerelease: Every prerelease part marks a prerelease (npm,
            Cargo and Composer semantics).
        pep440_value: The PEP 440 value for Python versions; two such versions
            compare with PEP 440 rules.
    """

    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = ()
    build: Tuple[str, ...] = ()
    text: str = ""
    precision: int = 3
    extra: Tuple[int, ...] = ()
    strict_prerelease: bool = False
    pep440_value: Optional[pep440.Version] = field(default=None, repr=False)

    def precedence(self) -> semantic_version.Version:
        """Return the semver value of the first three components and the prerelease."""
        return semantic_version.Version(
            major=self.major,
            minor=self.minor,
            patch=self.patch,
            prerelease=self.prerelease,
            build=(),
        )

    @property
    def release(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def numeric(self) -> Tuple[int, ...]:
        """All numeric components, trailing zeros dropped (1.2 and 1.2.0.0 agree)."""
        parts = list(self.release + self.extra)
        while parts and parts[-1] == 0:
            parts.pop()
        return tuple(parts)

    @property
    def is_prerelease(self) -> bool:
        """True when the prerelease part names a known prerelease channel.

        Qualifiers that are not prerelease channels (Guava's ``-jre``) do not
        count; purely numeric prerelease parts do. Under strict semantics any
        prerelease part counts.
        """
        if not self.prerelease:
            return False
        if self.strict_prerelease:
            return True
        labels = []
        for ident in self.prerelease:
            for part in re.split(r"[-_]", ident):
                label = part.strip("0123456789").lower()
                if label:
                    labels.append(label)
        if not labels:
            return True
        return any(label in Constants.PRERELEASE_IDENTIFIERS for label in labels)

    @property
    def qualifier(self) -> str:
        """Variant suffix that is not a prerelease (``jre``, ``android``), lower-cased."""
        if not self.prerelease or self.is_prerelease:
            return ""
        return ".".join(self.prerelease).lower()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        if self.pep440_value is not None and other.pep440_value is not None:
            return self.pep440_value == other.pep440_value
        return self.numeric == other.numeric and self.precedence() == other.precedence()

    def __lt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        if self.pep440_value is not None and other.pep440_value is not None:
            return self.pep440_value < other.pep440_value
        if self.numeric != other.numeric:
            return self.numeric < other.numeric
        return self.precedence() < other.precedence()

    def __hash__(self) -> int:
        return hash((self.numeric, self.prerelease))

    def __str__(self) -> str:
        return self.text or str(self.precedence())


def _precision(text: str) -> int:
    match = _RELEASE.match(text)
    return match.group(0).count(".") + 1 if match else 0


def _from_pep440(text: str) -> Optional[SemVer]:
    try:
        parsed = pep440.Version(text)
    except pep440.InvalidVersion:
        return None
    release = list(parsed.release) + [0, 0]
    prerelease: Tuple[str, ...] = ()
    if parsed.pre is not None:
        prerelease = (parsed.pre[0], str(parsed.pre[1]))
    if parsed.dev is not None:
        prerelease = prerelease + ("dev", str(parsed.dev))
    extra = tuple(parsed.release[3:])
    if parsed.post is not None:
        extra = extra + (parsed.post,)
    build: Tuple[str, ...] = ()
    if parsed.local:
        build = tuple(re.split(r"[._-]", parsed.local))
    return SemVer(
        major=release[0],
        minor=release[1],
        patch=release[2],
        prerelease=prerelease,
        build=build,
        text=text,
        precision=len(parsed.release),
        extra=extra,
        pep440_value=parsed,
    )


def parse_version(text: str, ecosystem: Optional[Ecosystem] = None) -> SemVer:
    """Parse a version string into a SemVer.

    Python versions go through PEP 440 first; every other ecosystem is parsed
    as strict semver and then coerced (``1.2`` -> 1.2.0, ``2.0-M1`` ->
    2.0.0-M1). Components past the third (``2.13.4.1``) take part in ordering.

    Args:
        text: Version text; a leading 'v' is dropped.
        ecosystem: Ecosystem the text comes from.

    Returns:
        SemVer

    Raises:
        ValueError: If the text is not a version.
    """
    cleaned = _LEADING_V.sub("", (text or "").strip())
    if not cleaned or not cleaned[0].isdigit():
        raise ValueError(f"Not a version: '{text}'")
    if _X_RANGE.match(cleaned):
        raise ValueError(f"Wildcard is not a version: '{text}'")

    if ecosystem == Ecosystem.PYTHON:
        parsed = _from_pep440(cleaned)
        if parsed is not None:
            return parsed

    normalized = _DOTTED_LABEL.sub(r"\1-", cleaned)
    try:
        value = semantic_version.Version(normalized)
    except ValueError:
        value = semantic_version.Version.coerce(normalized)

    extra = tuple(int(part) for part in _RELEASE.match(cleaned).group(0).split(".")[3:])
    build = tuple(value.build)
    # coerce() stores components past the third as build metadata
    if extra and build[:len(extra)] == tuple(str(part) for part in extra):
        build = build[len(extra):]
    return SemVer(
        major=value.major,
        minor=value.minor,
        patch=value.patch,
        prerelease=tuple(value.prerelease),
        build=build,
        text=cleaned,
        precision=_precision(cleaned),
        extra=extra,
        strict_prerelease=ecosystem in STRICT_PRERELEASE,
    )


def try_parse_version(text: str, ecosystem: Optional[Ecosystem] = None) -> Optional[SemVer]:
    """parse_version that returns None instead of raising."""
    try:
        return parse_version(text, ecosystem)
    except ValueError:
        return None


def bump(version: SemVer, index: int) -> SemVer:
    """Return the exclusive ceiling obtained by incrementing one release component."""
    if index <= 0:
        parts = (version.major + 1, 0, 0)
    elif index == 1:
        parts = (version.major, version.minor + 1, 0)
    else:
        parts = (version.major, version.minor, version.patch + 1)
    return SemVer(*parts, text=".".join(str(p) for p in parts))
