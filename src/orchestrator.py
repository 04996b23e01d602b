"""Run pipeline: discover manifests, look up versions, decide, patch and write.

Registry lookups fan out over a thread pool and fan back in by key; every
failure becomes a value on its own dependency, so one bad package or one
unreadable manifest never stops the others. Results are ordered by manifest
path, then dependency name and section, whatever the completion order.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple, Union

from constants import Constants
from common.errors import ManifestError, NetworkError, RegistryError
from common.logging_utils import Timer, extra_context, is_debug_enabled
from manifest import reader_for
from manifest.discovery import discover_manifests
from manifest.patcher import build_patch
from manifest.writer import read_manifest, write_patch
from output.progress import LookupProgress
from package_manager import InstallResult, run_install
from policy import pins
from policy.age import resolve_age_policy
from policy.filter import UpdateFilter
from policy.sources import default_sources
from registry.client import RegistryClient
from versioning.models import (
    AgePolicy,
    Candidate,
    Dependency,
    DependencyResult,
    Ecosystem,
    ManifestResult,
    SkipReason,
    UpdateDecision,
)
from versioning.selector import select_update

logger = logging.getLogger(__name__)

LookupKey = Tuple[Ecosystem, str]
LookupOutcome = Union[List[Candidate], RegistryError]


@dataclass
class RunResult:
    """Everything a run produced, ready for rendering."""

    manifests: List[ManifestResult] = field(default_factory=list)
    dry_run: bool = False
    age_policy: AgePolicy = field(default_factory=AgePolicy)
    installs: List[InstallResult] = field(default_factory=list)
    registry_unreachable: bool = False

    @property
    def update_count(self) -> int:
        return sum(len(m.updates) for m in self.manifests)

    @property
    def skip_count(self) -> int:
        return sum(len(m.skips) for m in self.manifests)

    @property
    def has_warnings(self) -> bool:
        """True when a lookup, a manifest, a patch or an install failed."""
        for manifest in self.manifests:
            if manifest.errors:
                return True
            for result in manifest.results:
                if result.patch_error or result.decision.reason == SkipReason.REGISTRY_ERROR:
                    return True
        return any(not i.success for i in self.installs)


def _needs_lookup(dep: Dependency, update_filter: UpdateFilter) -> bool:
    spec = dep.spec
    if spec.degraded:
        return False
    if spec.is_pinned and not update_filter.include_pinned:
        return pins.is_always_updatable(spec.ecosystem)
    return True


def _lookup(client: RegistryClient, key: LookupKey) -> LookupOutcome:
    ecosystem, name = key
    try:
        return client.list_versions(name, ecosystem)
    except RegistryError as exc:
        logger.warning("Lookup failed: %s", exc)
        return exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.warning("Lookup failed: %s: unexpected error: %s", name, exc)
        return NetworkError(name, ecosystem.value, f"unexpected error: {exc}")


def fetch_all(
    client: RegistryClient,
    keys: List[LookupKey],
    progress: Optional[LookupProgress] = None,
) -> Dict[LookupKey, LookupOutcome]:
    """Look up every key once, concurrently; failures come back as values."""
    unique = sorted(set(keys), key=lambda k: (k[0].value, k[1]))
    if not unique:
        return {}
    progress = progress or LookupProgress(enabled=False)
    workers = max(1, min(Constants.MAX_CONCURRENT_LOOKUPS, len(unique)))
    with progress, ThreadPoolExecutor(max_workers=workers) as executor:
        progress.start(len(unique))
        futures = {}
        for key in unique:
            future = executor.submit(_lookup, client, key)
            future.add_done_callback(lambda _, name=key[1]: progress.advance(name))
            futures[key] = future
        return {key: future.result() for key, future in futures.items()}


def _read(path: str, ecosystem: Ecosystem) -> Tuple[ManifestResult, List[Dependency]]:
    result = ManifestResult(path=path, ecosystem=ecosystem)
    reader = reader_for(path)
    try:
        text = read_manifest(path)
        dependencies = reader.extract(text)
    except ManifestError as exc:
        logger.error("%s: %s", path, exc.reason)
        result.errors.append(exc.reason)
        return result, []
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.error("%s: unexpected error while reading: %s", path, exc)
        result.errors.append(f"unexpected error while reading: {exc}")
        return result, []
    result.original_text = text
    return result, dependencies


def _decide(
    dep: Dependency,
    update_filter: UpdateFilter,
    lookups: Dict[LookupKey, LookupOutcome],
    age_policy: AgePolicy,
    now: Optional[datetime],
) -> UpdateDecision:
    if not update_filter.should_process_package(dep.name):
        return UpdateDecision.skipped(SkipReason.EXCLUDED_BY_FILTER)
    outcome = lookups.get((dep.spec.ecosystem, dep.name), [])
    if isinstance(outcome, RegistryError):
        return UpdateDecision.skipped(SkipReason.REGISTRY_ERROR, str(outcome))
    return select_update(
        dep.spec,
        outcome,
        age_policy,
        include_pinned=update_filter.include_pinned,
        now=now,
    )


def _patch(result: ManifestResult) -> None:
    updates = result.updates
    if not updates:
        return
    patch, failures = build_patch(result.path, result.ecosystem, result.original_text, updates)
    by_anchor = {(f.name, tuple(f.section)): str(f) for f in failures}
    for item in updates:
        message = by_anchor.get((item.dependency.name, item.dependency.section))
        if message:
            item.patch_error = message
            result.errors.append(message)
    result.patch = patch


def run(
    root: str,
    update_filter: Optional[UpdateFilter] = None,
    *,
    dry_run: bool = False,
    cli_age: Optional[timedelta] = None,
    install: bool = False,
    client: Optional[RegistryClient] = None,
    now: Optional[datetime] = None,
    progress: Optional[LookupProgress] = None,
) -> RunResult:
    """Evaluate and (unless dry_run) update every manifest under root.

    Args:
        root: Project directory.
        update_filter: Language/name narrowing and pin override.
        dry_run: Compute everything but leave files untouched.
        cli_age: Minimum release age given on the command line.
        install: Run the package manager's install step for rewritten manifests.
        client: Registry client (a default one is built when None).
        now: Reference time for the age filter.
        progress: Lookup progress display (none when None).

    Returns:
        RunResult
    """
    update_filter = update_filter or UpdateFilter()
    client = client or RegistryClient()
    age_policy = resolve_age_policy(default_sources(root, cli_age))
    outcome = RunResult(dry_run=dry_run, age_policy=age_policy)

    manifests = [
        (path, ecosystem)
        for path, ecosystem in discover_manifests(root)
        if update_filter.should_process_language(ecosystem)
    ]
    read: List[Tuple[ManifestResult, List[Dependency]]] = [_read(p, e) for p, e in manifests]

    keys = [
        (dep.spec.ecosystem, dep.name)
        for _, deps in read
        for dep in deps
        if update_filter.should_process_package(dep.name) and _needs_lookup(dep, update_filter)
    ]
    with Timer() as timer:
        lookups = fetch_all(client, keys, progress)
    outcome.registry_unreachable = bool(lookups) and all(
        isinstance(value, NetworkError) for value in lookups.values()
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Registry lookups finished",
            extra=extra_context(
                event="lookup",
                component="orchestrator",
                action="fetch_all",
                outcome="success",
                count=len(lookups),
                duration_ms=timer.duration_ms(),
            )
        )

    for manifest, deps in read:
        manifest.results = sorted(
            (DependencyResult(dep, _decide(dep, update_filter, lookups, age_policy, now)) for dep in deps),
            key=lambda r: r.sort_key,
        )
        _patch(manifest)
        if not dry_run and manifest.patch is not None:
            try:
                written = write_patch(manifest.patch)
            except ManifestError as exc:
                logger.error("%s", exc)
                manifest.errors.append(str(exc))
                written = False
            if written and install:
                outcome.installs.append(run_install(manifest.ecosystem, os.path.dirname(manifest.path) or "."))
        outcome.manifests.append(manifest)

    outcome.manifests.sort(key=lambda m: m.path)
    return outcome
