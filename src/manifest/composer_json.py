"""composer.json reader."""

from __future__ import annotations

import json
from typing import List

from common.errors import ManifestError
from manifest import json_locator
from manifest.common import make_dependency
from versioning.models import Dependency, Ecosystem

SECTIONS = ("require", "require-dev")

_PLATFORM_NAMES = frozenset({"php", "composer", "composer-plugin-api", "composer-runtime-api"})
_PLATFORM_PREFIXES = ("php-", "ext-", "lib-")


def is_platform_package(name: str) -> bool:
    """PHP itself, extensions and system libraries are not Packagist packages."""
    lowered = name.lower()
    return lowered in _PLATFORM_NAMES or lowered.startswith(_PLATFORM_PREFIXES) or "/" not in lowered


def extract(text: str) -> List[Dependency]:
    """Return the Packagist dependencies of a composer.json document.

    Raises:
        ManifestError: If the document is not valid JSON.
    """
    try:
        json_locator.load(text)
    except json.JSONDecodeError as exc:
        raise ManifestError("composer.json", f"invalid JSON: {exc}") from exc

    dependencies: List[Dependency] = []
    for leaf in json_locator.string_leaves(text):
        if len(leaf.path) != 2 or leaf.path[0] not in SECTIONS:
            continue
        section, name = leaf.path
        if is_platform_package(name):
            continue
        dep = make_dependency(
            name, (section,), leaf.text, leaf.start, Ecosystem.PHP,
            is_dev=section == "require-dev",
        )
        if dep is not None:
            dependencies.append(dep)
    return dependencies
