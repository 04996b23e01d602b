"""Candidate selection: decide whether and to which version a dependency moves.

The selector is a pure function of one VersionSpec, its registry candidates
and the run's read-only policies. It performs no I/O and is safe to call from
worker threads.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from common.logging_utils import extra_context, is_debug_enabled
from common.timestamps import age_of, utc_now
from policy import pins
from versioning import grammars
from versioning.models import (
    AgePolicy,
    Candidate,
    ChangeKind,
    ConstraintTerm,
    Operator,
    SkipReason,
    UpdateDecision,
    VersionSpec,
)
from versioning.semver import SemVer, bump

logger = logging.getLogger(__name__)


def implied_ceiling(term: ConstraintTerm) -> Optional[SemVer]:
    """Exclusive upper limit implied by a caret, tilde or pessimistic term."""
    version = term.version
    precision = version.precision
    if term.operator == Operator.CARET:
        if version.major > 0 or precision == 1:
            return bump(version, 0)
        if version.minor > 0 or precision == 2:
            return bump(version, 1)
        return bump(version, 2)
    if term.operator == Operator.TILDE:
        return bump(version, 0 if precision == 1 else 1)
    if term.operator == Operator.COMPATIBLE:
        return bump(version, 0 if precision <= 2 else min(precision - 2, 2))
    return None


def satisfies(spec: VersionSpec, version: SemVer) -> bool:
    """Return True when version is admitted by spec.

    An Exact lower term admits the pinned version and everything above it:
    evaluation of a pinned spec only happens when pins are overridden or the
    ecosystem is always updatable. Any upper bound is exclusive.
    """
    lower = spec.lower
    if lower.operator == Operator.GREATER:
        if not version > lower.version:
            return False
    elif version < lower.version:
        return False

    ceiling = implied_ceiling(lower)
    if ceiling is not None and not version < ceiling:
        return False
    if spec.upper is not None and not version < spec.upper.version:
        return False
    return True


def classify_change(current: SemVer, selected: SemVer) -> ChangeKind:
    """Most significant differing component; prerelease-only moves are patches."""
    if selected.major != current.major:
        return ChangeKind.MAJOR
    if selected.minor != current.minor:
        return ChangeKind.MINOR
    return ChangeKind.PATCH


def _age_eligible(candidate: Candidate, policy: AgePolicy, now: datetime) -> bool:
    if not policy.min_age:
        return True
    if candidate.released_at is None:
        return False
    return age_of(candidate.released_at, now) >= policy.min_age


def _preference(candidate: Candidate):
    version = candidate.version
    return (version, not version.is_prerelease, not version.build, version.text)


def select_update(
    spec: VersionSpec,
    candidates: Iterable[Candidate],
    age_policy: Optional[AgePolicy] = None,
    *,
    include_pinned: bool = False,
    now: Optional[datetime] = None,
) -> UpdateDecision:
    """Compute the update decision for one dependency.

    Args:
        spec: Parsed specifier of the dependency.
        candidates: Published versions, in any order.
        age_policy: Effective minimum release age (None means no filtering).
        include_pinned: Evaluate pinned specs instead of skipping them.
        now: Reference time for the age filter (defaults to current UTC time).

    Returns:
        UpdateDecision: NoChange, Update or Skipped.
    """
    policy = age_policy or AgePolicy()
    now = now or utc_now()

    if spec.degraded:
        return UpdateDecision.skipped(SkipReason.PINNED, "unrecognized version specifier")
    if spec.is_pinned and not include_pinned and not pins.is_always_updatable(spec.ecosystem):
        return UpdateDecision.skipped(SkipReason.PINNED)

    current = spec.version
    allow_prerelease = current.is_prerelease
    in_range: List[Candidate] = [
        c for c in candidates
        if satisfies(spec, c.version)
        and (allow_prerelease or not c.version.is_prerelease)
        and c.version.qualifier == current.qualifier
    ]
    eligible = [c for c in in_range if _age_eligible(c, policy, now)]

    if is_debug_enabled(logger):
        logger.debug(
            "Candidates filtered",
            extra=extra_context(
                event="select",
                component="selector",
                action="filter",
                ecosystem=spec.ecosystem.value,
                spec=spec.raw_text,
                in_range=len(in_range),
                eligible=len(eligible),
            )
        )

    if not eligible:
        if satisfies(spec, current):
            return UpdateDecision.no_change()
        if in_range:
            return UpdateDecision.skipped(SkipReason.BELOW_AGE)
        return UpdateDecision.skipped(SkipReason.NO_ELIGIBLE_CANDIDATE)

    best = max(eligible, key=_preference)
    if best.version == current:
        return UpdateDecision.no_change()

    return UpdateDecision.update(
        new_version=best.version,
        new_spec_text=grammars.format_spec(spec, best.version),
        change_kind=classify_change(current, best.version),
        released_at=best.released_at,
    )
