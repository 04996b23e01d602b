"""Data models for version constraints, update decisions and manifest patches."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from versioning.semver import SemVer


class Ecosystem(Enum):
    """Enum for supported ecosystems."""
    NODE = "node"
    PYTHON = "python"
    RUST = "rust"
    GO = "go"
    RUBY = "ruby"
    PHP = "php"
    JAVA = "java"


class Operator(Enum):
    """Constraint operator of a single clause."""
    EXACT = "exact"
    CARET = "caret"
    TILDE = "tilde"
    COMPATIBLE = "compatible"  # pessimistic: ~=, ~>, composer ~
    GREATER_EQ = "greater_eq"
    GREATER = "greater"
    LESS_THAN = "less_than"
    LESS_EQ = "less_eq"

    @property
    def is_upper_bound(self) -> bool:
        return self in (Operator.LESS_THAN, Operator.LESS_EQ)


@dataclass(frozen=True)
class ConstraintTerm:
    """One operator/version clause with its (start, end) offsets in the raw text."""
    operator: Operator
    version: "SemVer"
    span: Tuple[int, int]


@dataclass(frozen=True)
class VersionSpec:
    """Structural form of a version specifier as written in a manifest.

    ``display_prefix`` is everything before the lower-bound version token and
    ``version_span`` locates that token inside ``raw_text``; the text after it
    (upper-bound clause, separators, quotes) is reused verbatim on format.
    """
    raw_text: str
    ecosystem: Ecosystem
    lower: ConstraintTerm
    upper: Optional[ConstraintTerm]
    display_prefix: str
    is_pinned: bool
    version_span: Tuple[int, int]
    degraded: bool = False

    @property
    def version(self) -> "SemVer":
        """Version the spec currently names."""
        return self.lower.version

    @property
    def suffix(self) -> str:
        return self.raw_text[self.version_span[1]:]


@dataclass(frozen=True)
class Candidate:
    """A published version and its release time (None when the registry has none)."""
    version: "SemVer"
    released_at: Optional[datetime]


class AgeSource(Enum):
    """Where the effective minimum release age came from."""
    CLI = "cli"
    NPMRC = "npmrc"
    PNPM_WORKSPACE = "pnpm_workspace"
    PACKAGE_JSON = "package_json"
    NONE = "none"


@dataclass(frozen=True)
class AgePolicy:
    """Effective minimum release age; source is kept for diagnostics only."""
    min_age: Optional[timedelta] = None
    source: AgeSource = AgeSource.NONE


class DecisionKind(Enum):
    NO_CHANGE = "no_change"
    UPDATE = "update"
    SKIPPED = "skipped"


class SkipReason(Enum):
    """Why a dependency was not evaluated or not updated."""
    PINNED = "pinned"
    BELOW_AGE = "below_age"
    NO_ELIGIBLE_CANDIDATE = "no_eligible_candidate"
    REGISTRY_ERROR = "registry_error"
    EXCLUDED_BY_FILTER = "excluded_by_filter"


class ChangeKind(Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


@dataclass(frozen=True)
class UpdateDecision:
    """Outcome for one dependency: no change, an update, or a skip with a reason."""
    kind: DecisionKind
    new_version: Optional["SemVer"] = None
    new_spec_text: Optional[str] = None
    change_kind: Optional[ChangeKind] = None
    released_at: Optional[datetime] = None
    reason: Optional[SkipReason] = None
    detail: Optional[str] = None

    @classmethod
    def no_change(cls) -> "UpdateDecision":
        return cls(kind=DecisionKind.NO_CHANGE)

    @classmethod
    def update(
        cls,
        new_version: "SemVer",
        new_spec_text: str,
        change_kind: ChangeKind,
        released_at: Optional[datetime] = None,
    ) -> "UpdateDecision":
        return cls(
            kind=DecisionKind.UPDATE,
            new_version=new_version,
            new_spec_text=new_spec_text,
            change_kind=change_kind,
            released_at=released_at,
        )

    @classmethod
    def skipped(cls, reason: SkipReason, detail: Optional[str] = None) -> "UpdateDecision":
        return cls(kind=DecisionKind.SKIPPED, reason=reason, detail=detail)

    @property
    def is_update(self) -> bool:
        return self.kind == DecisionKind.UPDATE

    @property
    def is_skipped(self) -> bool:
        return self.kind == DecisionKind.SKIPPED


@dataclass(frozen=True)
class Dependency:
    """A dependency entry read from a manifest.

    Attributes:
        name: Package name as the registry knows it.
        section: Structural path of the table/object holding the entry.
        spec: Parsed version specifier.
        value_span: (start, end) character offsets of the specifier text in
            the manifest (quotes excluded).
        is_dev: Development-only dependency.
        comment: Trailing annotation kept for display (go.mod ``// pinned``).
    """
    name: str
    section: Tuple[str, ...]
    spec: VersionSpec
    value_span: Tuple[int, int]
    is_dev: bool = False
    comment: Optional[str] = None

    @property
    def section_label(self) -> str:
        return ".".join(self.section)


@dataclass(frozen=True)
class PatchEdit:
    """Replace bytes [start, end) of the manifest with replacement."""
    start: int
    end: int
    replacement: str


@dataclass
class ManifestPatch:
    """Located edits for one manifest, UTF-8 byte offsets, ascending."""
    path: str
    ecosystem: Ecosystem
    edits: List[PatchEdit] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.edits


@dataclass
class DependencyResult:
    """A dependency paired with the decision computed for it."""
    dependency: Dependency
    decision: UpdateDecision
    patch_error: Optional[str] = None

    @property
    def sort_key(self) -> Tuple[str, str]:
        return (self.dependency.name, self.dependency.section_label)


@dataclass
class ManifestResult:
    """Everything computed for one manifest during a run."""
    path: str
    ecosystem: Ecosystem
    results: List[DependencyResult] = field(default_factory=list)
    patch: Optional[ManifestPatch] = None
    errors: List[str] = field(default_factory=list)
    original_text: Optional[str] = None

    @property
    def updates(self) -> List[DependencyResult]:
        return [r for r in self.results if r.decision.is_update]

    @property
    def skips(self) -> List[DependencyResult]:
        return [r for r in self.results if r.decision.is_skipped]

    @property
    def has_updates(self) -> bool:
        return bool(self.updates)
