"""go.mod reader.

Reads ``require`` directives in single-line and block form. ``replace``,
``exclude`` and ``retract`` directives are ignored. A ``// indirect``
comment marks a dependency as dev; a ``// pinned`` comment is recorded on
the dependency for display but does not suppress updates, since go.mod has
no range operators and Go versions are always evaluated.
"""

from __future__ import annotations

import re
from typing import List, Optional

from manifest.common import make_dependency
from versioning.models import Dependency, Ecosystem

SECTION = ("require",)

_REQUIRE_LINE = re.compile(r"^\s*require\s+(?!\()(\S+)\s+(v\S+)")
_REQUIRE_BLOCK = re.compile(r"^\s*require\s*\(\s*(?://.*)?$")
_BLOCK_ENTRY = re.compile(r"^\s*(\S+)\s+(v\S+)")
_OTHER_BLOCK = re.compile(r"^\s*(?:replace|exclude|retract|tool|godebug)\s*\(\s*(?://.*)?$")


def _comment(line: str) -> Optional[str]:
    index = line.find("//")
    return line[index + 2:].strip() if index >= 0 else None


def _entry(match: "re.Match[str]", line_start: int, line: str) -> Optional[Dependency]:
    comment = _comment(line)
    markers = comment.lower().split() if comment else []
    return make_dependency(
        match.group(1),
        SECTION,
        match.group(2),
        line_start + match.start(2),
        Ecosystem.GO,
        is_dev="indirect" in markers,
        comment=comment,
    )


def extract(text: str) -> List[Dependency]:
    """Return the module requirements of a go.mod document."""
    dependencies: List[Dependency] = []
    block = None
    offset = 0
    for line in text.splitlines(keepends=True):
        line_start = offset
        offset += len(line)
        content = line.rstrip("\r\n")
        stripped = content.strip()
        if not stripped or stripped.startswith("//"):
            continue

        if block is not None:
            if stripped.startswith(")"):
                block = None
                continue
            if block == "require":
                match = _BLOCK_ENTRY.match(content)
                if match:
                    dep = _entry(match, line_start, content)
                    if dep is not None:
                        dependencies.append(dep)
            continue

        if _REQUIRE_BLOCK.match(content):
            block = "require"
        elif _OTHER_BLOCK.match(content):
            block = "other"
        else:
            match = _REQUIRE_LINE.match(content)
            if match:
                dep = _entry(match, line_start, content)
                if dep is not None:
                    dependencies.append(dep)
    return dependencies
