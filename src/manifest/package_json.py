"""package.json reader."""

from __future__ import annotations

import json
from typing import List

from common.errors import ManifestError
from manifest import json_locator
from manifest.common import make_dependency
from versioning.models import Dependency, Ecosystem

SECTIONS = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")
DEV_SECTIONS = ("devDependencies",)

# Values that point somewhere other than the registry
_NON_REGISTRY_PREFIXES = (
    "workspace:", "file:", "link:", "portal:", "patch:", "npm:", "git", "github:",
    "http:", "https:", "catalog:",
)


def is_registry_spec(value: str) -> bool:
    value = value.strip()
    if not value or value.startswith(_NON_REGISTRY_PREFIXES):
        return False
    # "user/repo" GitHub shorthand
    return "/" not in value


def extract(text: str) -> List[Dependency]:
    """Return the registry dependencies declared in a package.json document.

    Raises:
        ManifestError: If the document is not valid JSON.
    """
    try:
        json_locator.load(text)
    except json.JSONDecodeError as exc:
        raise ManifestError("package.json", f"invalid JSON: {exc}") from exc

    dependencies: List[Dependency] = []
    for leaf in json_locator.string_leaves(text):
        if len(leaf.path) != 2 or leaf.path[0] not in SECTIONS:
            continue
        if not is_registry_spec(leaf.text):
            continue
        section, name = leaf.path
        dep = make_dependency(
            name, (section,), leaf.text, leaf.start, Ecosystem.NODE,
            is_dev=section in DEV_SECTIONS,
        )
        if dep is not None:
            dependencies.append(dep)
    return dependencies
