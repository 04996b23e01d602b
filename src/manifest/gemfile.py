"""Gemfile reader.

``gem 'name', 'req'[, 'req2'][, options]``. The requirement handed to the
Ruby grammar runs from the inside of the first requirement string to the
inside of the last one, so multi-argument compounds keep their separators.
Gems inside ``group :development`` / ``group :test`` blocks, or declared
with a ``group:``/``groups:`` option naming them, are dev dependencies.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from manifest.common import make_dependency
from versioning.models import Dependency, Ecosystem

_GEM = re.compile(r"""^\s*gem\s*\(?\s*(['"])(?P<name>[^'"]+)\1""")
_STRING_ARG = re.compile(r"""\s*,\s*(['"])(?P<value>[^'"]*)\1""")
_BLOCK_OPEN = re.compile(r"\bdo\s*(?:\|[^|]*\|)?\s*(?:#.*)?$")
_GROUP = re.compile(r"^\s*group\s*\(?\s*(?P<groups>[^)]*?)\)?\s+do\b")
_SYMBOL = re.compile(r""":(\w+)|['"](\w+)['"]""")
_GROUP_OPTION = re.compile(r"""\bgroups?\s*:\s*(?P<value>\[[^\]]*\]|:\w+|['"]\w+['"])|:groups?\s*=>\s*(?P<old>\[[^\]]*\]|:\w+)""")
_END = re.compile(r"^\s*end\b")
_KEYWORD_OPEN = re.compile(r"^\s*(?:if|unless|case|begin|while|until)\b")
_REQUIREMENT = re.compile(r"^\s*(?:[~<>=!]|\d)")

DEV_GROUPS = frozenset({"development", "test"})


def _symbols(text: str) -> Tuple[str, ...]:
    return tuple(a or b for a, b in _SYMBOL.findall(text))


def extract(text: str) -> List[Dependency]:
    """Return the gems with version requirements declared in a Gemfile."""
    dependencies: List[Dependency] = []
    blocks: List[Tuple[str, ...]] = []  # group names per open block, () for non-group blocks
    offset = 0
    for line in text.splitlines(keepends=True):
        line_start = offset
        offset += len(line)
        content = line.rstrip("\r\n")
        stripped = content.strip()
        if not stripped or stripped.startswith("#"):
            continue

        group = _GROUP.match(content)
        if group:
            blocks.append(_symbols(group.group("groups")))
            continue
        if _END.match(content):
            if blocks:
                blocks.pop()
            continue

        gem = _GEM.match(content)
        if gem is None:
            if _BLOCK_OPEN.search(content) or _KEYWORD_OPEN.match(content):
                blocks.append(())
            continue

        requirements = []
        pos = gem.end()
        while True:
            arg = _STRING_ARG.match(content, pos)
            if arg is None or not _REQUIREMENT.match(arg.group("value")):
                break
            requirements.append(arg)
            pos = arg.end()
        if not requirements:
            continue

        groups = tuple(name for names in blocks for name in names)
        option = _GROUP_OPTION.search(content, pos)
        if option:
            groups += _symbols(option.group("value") or option.group("old"))
        section = ("group",) + groups if groups else ("dependencies",)

        start = requirements[0].start("value")
        end = requirements[-1].end("value")
        dep = make_dependency(
            gem.group("name"),
            section,
            content[start:end],
            line_start + start,
            Ecosystem.RUBY,
            is_dev=bool(DEV_GROUPS.intersection(groups)),
        )
        if dep is not None:
            dependencies.append(dep)
    return dependencies
