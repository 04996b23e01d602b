"""Plain text report."""

from __future__ import annotations

from typing import List

from constants import Constants
from versioning.models import DependencyResult, ManifestResult, SkipReason

SKIP_REASON_TEXT = {
    SkipReason.PINNED: "pinned version",
    SkipReason.BELOW_AGE: "below minimum release age",
    SkipReason.NO_ELIGIBLE_CANDIDATE: "no suitable version",
    SkipReason.REGISTRY_ERROR: "fetch failed",
    SkipReason.EXCLUDED_BY_FILTER: "excluded by filter",
}


def describe_skip(result: DependencyResult) -> str:
    decision = result.decision
    text = SKIP_REASON_TEXT[decision.reason]
    return f"{text}: {decision.detail}" if decision.detail else text


def _update_line(result: DependencyResult) -> str:
    dep = result.dependency
    decision = result.decision
    line = f"  {dep.name} {dep.spec.raw_text} -> {decision.new_spec_text} ({decision.change_kind.value})"
    if result.patch_error:
        line += f" [not written: {result.patch_error}]"
    return line


def _manifest_lines(manifest: ManifestResult, prefix: str, verbose: bool) -> List[str]:
    if not (manifest.has_updates or manifest.errors or verbose):
        return []
    lines = [f"{prefix}{manifest.path}"]
    lines.extend(_update_line(r) for r in manifest.updates)
    if verbose:
        lines.extend(f"  {r.dependency.name} (skipped: {describe_skip(r)})" for r in manifest.skips)
    lines.extend(f"  error: {message}" for message in manifest.errors if not _is_patch_error(manifest, message))
    return lines


def _is_patch_error(manifest: ManifestResult, message: str) -> bool:
    return any(r.patch_error == message for r in manifest.results)


def render_text(run_result, verbose: bool = False, quiet: bool = False) -> str:
    """Render a RunResult as the human-readable report.

    Args:
        run_result: Outcome of orchestrator.run.
        verbose: Also list skipped dependencies with their reasons.
        quiet: Only print the one-line summary.

    Returns:
        str: Report text ending with a newline.
    """
    prefix = Constants.DRY_RUN_PREFIX if run_result.dry_run else ""
    updates = run_result.update_count

    if quiet:
        return f"{prefix}{updates} updated\n" if updates else f"{prefix}No updates\n"

    lines: List[str] = []
    for manifest in run_result.manifests:
        block = _manifest_lines(manifest, prefix, verbose)
        if block:
            lines.extend(block)
            lines.append("")

    for install in run_result.installs:
        if install.skipped:
            continue
        status = "ok" if install.success else "failed"
        lines.append(f"install ({install.directory}): {install.command} [{status}]")
        if not install.success and install.stderr.strip():
            lines.append(f"  {install.stderr.strip().splitlines()[-1]}")
    if run_result.installs:
        lines.append("")

    lines.append(f"{prefix}Summary:")
    lines.append(f"  {updates} package(s) updated")
    lines.append(f"  {run_result.skip_count} package(s) skipped")
    if verbose and run_result.age_policy.min_age is not None:
        days = run_result.age_policy.min_age.days
        lines.append(f"  minimum release age: {days} day(s) (from {run_result.age_policy.source.value})")
    return "\n".join(lines) + "\n"
