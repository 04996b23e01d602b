"""pyproject.toml reader (PEP 621 and Poetry)."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from packaging.requirements import InvalidRequirement, Requirement

from common.errors import ManifestError
from manifest import toml_locator
from manifest.common import make_dependency
from versioning.models import Dependency, Ecosystem

logger = logging.getLogger(__name__)

_PEP508_HEAD = re.compile(r"\s*([A-Za-z0-9][A-Za-z0-9._\-]*)\s*(?:\[[^\]]*\])?\s*")
_POETRY_DEV_SECTIONS = (("tool", "poetry", "dev-dependencies"),)


def pep508_specifier_span(requirement: str) -> Optional[Tuple[int, int]]:
    """Locate the version specifier inside a PEP 508 string.

    Returns (start, end) relative to the string, or None when the requirement
    has no specifier or points at a URL.
    """
    head = _PEP508_HEAD.match(requirement)
    if head is None:
        return None
    start = head.end()
    rest = requirement[start:]
    if not rest or rest.startswith(("@", ";")):
        return None
    end = len(requirement)
    if rest.startswith("("):
        start += 1
        close = requirement.find(")", start)
        end = close if close >= 0 else end
    else:
        marker = requirement.find(";", start)
        end = marker if marker >= 0 else end
    while end > start and requirement[end - 1].isspace():
        end -= 1
    while start < end and requirement[start].isspace():
        start += 1
    if start >= end:
        return None
    return start, end


def _pep621(leaf: toml_locator.StringLeaf, section: Tuple[str, ...], is_dev: bool) -> Optional[Dependency]:
    try:
        requirement = Requirement(leaf.text)
    except InvalidRequirement:
        logger.warning("Skipping invalid requirement '%s' in [%s]", leaf.text, ".".join(section))
        return None
    span = pep508_specifier_span(leaf.text)
    if span is None:
        return None
    raw = leaf.text[span[0]:span[1]]
    return make_dependency(
        requirement.name, section, raw, leaf.start + span[0], Ecosystem.PYTHON, is_dev=is_dev,
    )


def _poetry_section(path: Tuple[str, ...]) -> Optional[Tuple[Tuple[str, ...], str, bool]]:
    """Map a leaf path to (section, name, is_dev) for Poetry dependency tables."""
    if path[:3] == ("tool", "poetry", "dependencies") or path[:3] == ("tool", "poetry", "dev-dependencies"):
        section, rest = path[:3], path[3:]
    elif len(path) > 5 and path[:3] == ("tool", "poetry", "group") and path[4] == "dependencies":
        section, rest = path[:5], path[5:]
    else:
        return None
    if len(rest) == 1 or (len(rest) == 2 and rest[1] == "version"):
        name = rest[0]
        is_dev = section in _POETRY_DEV_SECTIONS or (section[2] == "group" and section[3] != "main")
        return section, name, is_dev
    return None


def extract(text: str) -> List[Dependency]:
    """Return the dependencies declared in a pyproject.toml document.

    Raises:
        ManifestError: If the document is not valid TOML.
    """
    try:
        toml_locator.load(text)
    except toml_locator.TOMLDecodeError as exc:
        raise ManifestError("pyproject.toml", f"invalid TOML: {exc}") from exc

    try:
        leaves = toml_locator.string_leaves(text)
    except ValueError as exc:
        raise ManifestError("pyproject.toml", f"cannot locate values: {exc}") from exc

    dependencies: List[Dependency] = []
    for leaf in leaves:
        path = leaf.path
        dep = None
        if len(path) == 3 and path[:2] == ("project", "dependencies"):
            dep = _pep621(leaf, ("project", "dependencies"), is_dev=False)
        elif len(path) == 4 and path[:2] == ("project", "optional-dependencies"):
            dep = _pep621(leaf, path[:3], is_dev=False)
        elif len(path) == 3 and path[0] == "dependency-groups":
            # PEP 735 groups hold plain strings or include-group tables
            dep = _pep621(leaf, path[:2], is_dev=True)
        else:
            mapped = _poetry_section(path)
            if mapped is not None:
                section, name, is_dev = mapped
                if name.lower() == "python":
                    continue
                dep = make_dependency(name, section, leaf.text, leaf.start, Ecosystem.PYTHON, is_dev=is_dev)
        if dep is not None:
            dependencies.append(dep)
    return dependencies
