"""Locate the manifests of a project root, its Tauri crate and its pnpm workspace packages."""

from __future__ import annotations

import logging
import os
from typing import List, Tuple

import yaml

from constants import ManifestFiles
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import Ecosystem

logger = logging.getLogger(__name__)

ROOT_MANIFESTS: Tuple[Tuple[str, Ecosystem], ...] = (
    (ManifestFiles.PACKAGE_JSON, Ecosystem.NODE),
    (ManifestFiles.PYPROJECT_TOML, Ecosystem.PYTHON),
    (ManifestFiles.CARGO_TOML, Ecosystem.RUST),
    (ManifestFiles.GO_MOD, Ecosystem.GO),
    (ManifestFiles.GEMFILE, Ecosystem.RUBY),
    (ManifestFiles.COMPOSER_JSON, Ecosystem.PHP),
    (ManifestFiles.BUILD_GRADLE_KTS, Ecosystem.JAVA),
    (ManifestFiles.BUILD_GRADLE, Ecosystem.JAVA),
)


def _root_manifests(root: str) -> List[Tuple[str, Ecosystem]]:
    found = []
    for filename, ecosystem in ROOT_MANIFESTS:
        # build.gradle is only read when there is no Kotlin build script
        if filename == ManifestFiles.BUILD_GRADLE and any(e == Ecosystem.JAVA for _, e in found):
            continue
        path = os.path.join(root, filename)
        if os.path.isfile(path):
            found.append((path, ecosystem))
    return found


def _subdirectories(base: str, recursive: bool) -> List[str]:
    if not os.path.isdir(base):
        return []
    if not recursive:
        return [entry.path for entry in os.scandir(base) if entry.is_dir()]
    found = []
    for dirpath, dirnames, _ in os.walk(base):
        dirnames[:] = [d for d in dirnames if d != "node_modules" and not d.startswith(".")]
        found.extend(os.path.join(dirpath, d) for d in dirnames)
    return found


def _expand(root: str, pattern: str) -> List[str]:
    pattern = pattern.strip().rstrip("/")
    if pattern.endswith("/**"):
        return _subdirectories(os.path.join(root, pattern[:-3]), recursive=True)
    if pattern.endswith("/*"):
        return _subdirectories(os.path.join(root, pattern[:-2]), recursive=False)
    if "*" in pattern:
        logger.warning("Unsupported workspace pattern '%s' ignored", pattern)
        return []
    path = os.path.join(root, pattern)
    return [path] if os.path.isdir(path) else []


def workspace_packages(root: str) -> List[str]:
    """Package directories listed by ``packages`` in pnpm-workspace.yaml.

    Supports ``dir/*``, ``dir/**`` and direct paths; patterns starting with
    ``!`` remove matching directories.
    """
    path = os.path.join(root, ManifestFiles.PNPM_WORKSPACE)
    if not os.path.isfile(path):
        return []
    with open(path, encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            logger.warning("Could not read %s: %s", ManifestFiles.PNPM_WORKSPACE, exc)
            return []
    patterns = data.get("packages") if isinstance(data, dict) else None
    if not isinstance(patterns, list):
        return []

    included: List[str] = []
    excluded = set()
    for pattern in patterns:
        if not isinstance(pattern, str):
            continue
        if pattern.startswith("!"):
            excluded.update(os.path.normpath(p) for p in _expand(root, pattern[1:]))
        else:
            included.extend(_expand(root, pattern))
    return [p for p in included if os.path.normpath(p) not in excluded]


def discover_manifests(root: str) -> List[Tuple[str, Ecosystem]]:
    """Return (path, ecosystem) for every manifest under root, ordered by path."""
    manifests = _root_manifests(root)

    tauri_cargo = os.path.join(root, ManifestFiles.TAURI_DIR, ManifestFiles.CARGO_TOML)
    if os.path.isfile(tauri_cargo):
        manifests.append((tauri_cargo, Ecosystem.RUST))

    for package_dir in workspace_packages(root):
        package_json = os.path.join(package_dir, ManifestFiles.PACKAGE_JSON)
        if os.path.isfile(package_json):
            manifests.append((package_json, Ecosystem.NODE))

    unique = {}
    for path, ecosystem in manifests:
        unique.setdefault(os.path.normpath(path), ecosystem)
    ordered = sorted(unique.items())

    if is_debug_enabled(logger):
        logger.debug(
            "Manifests discovered",
            extra=extra_context(
                event="discover",
                component="discovery",
                action="discover_manifests",
                outcome="success",
                count=len(ordered),
            )
        )
    return ordered
