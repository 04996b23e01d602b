"""Cargo.toml reader."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from common.errors import ManifestError
from manifest import toml_locator
from manifest.common import make_dependency
from versioning.models import Dependency, Ecosystem

SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


def _split(path: Tuple[str, ...]) -> Optional[Tuple[Tuple[str, ...], str, Tuple[str, ...]]]:
    """Split a leaf path into (section, crate key, remainder)."""
    if len(path) >= 2 and path[0] in SECTIONS:
        return path[:1], path[1], path[2:]
    if len(path) >= 4 and path[0] == "target" and path[2] in SECTIONS:
        return path[:3], path[3], path[4:]
    return None


def extract(text: str) -> List[Dependency]:
    """Return the crates.io dependencies of a Cargo.toml document.

    Handles ``name = "1.0"``, inline tables ``name = { version = "1.0" }``,
    ``[dependencies.name]`` tables, ``target.<cfg>`` tables and renamed
    dependencies (``package = "real-name"``).

    Raises:
        ManifestError: If the document is not valid TOML.
    """
    try:
        toml_locator.load(text)
    except toml_locator.TOMLDecodeError as exc:
        raise ManifestError("Cargo.toml", f"invalid TOML: {exc}") from exc

    try:
        leaves = toml_locator.string_leaves(text)
    except ValueError as exc:
        raise ManifestError("Cargo.toml", f"cannot locate values: {exc}") from exc

    renamed: Dict[Tuple[Tuple[str, ...], str], str] = {}
    versions = []
    for leaf in leaves:
        parts = _split(leaf.path)
        if parts is None:
            continue
        section, key, rest = parts
        if rest == ("package",):
            renamed[(section, key)] = leaf.text
        elif rest in ((), ("version",)):
            versions.append((section, key, leaf))

    dependencies: List[Dependency] = []
    for section, key, leaf in versions:
        name = renamed.get((section, key), key)
        dep = make_dependency(
            name, section, leaf.text, leaf.start, Ecosystem.RUST,
            is_dev=section[-1] == "dev-dependencies",
        )
        if dep is not None:
            dependencies.append(dep)
    return dependencies
