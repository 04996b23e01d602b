"""build.gradle / build.gradle.kts reader.

Supports string notation (``implementation 'g:a:v'``,
``implementation("g:a:v")``), map notation (``implementation group: 'g',
name: 'a', version: 'v'``) and versions held in ``def``/``val``/``ext``
variables (``"g:a:$ver"``, ``"g:a:${ver}"``, ``version: ver``). A
variable-backed dependency is located on the variable's definition, which
is where its version text lives.
"""

from __future__ import annotations

import re
from typing import Dict, List, NamedTuple, Optional

from manifest.common import make_dependency
from versioning.models import Dependency, Ecosystem

DEV_CONFIGURATIONS = frozenset({
    "testImplementation",
    "testCompileOnly",
    "testRuntimeOnly",
    "testApi",
    "androidTestImplementation",
    "debugImplementation",
})

_VAR_DEF = re.compile(r"""^\s*(?:(?:def|val|var)\s+|ext\.)(?P<name>\w+)\s*(?::\s*String\s*)?=\s*(?P<q>['"])(?P<value>[^'"$]+)(?P=q)""")
_EXT_ASSIGN = re.compile(r"""^\s*(?:set\(\s*)?(?P<q0>['"]?)(?P<name>\w+)(?P=q0)\s*(?:=|,)\s*(?P<q>['"])(?P<value>[^'"$]+)(?P=q)""")
_EXT_OPEN = re.compile(r"^\s*ext\s*\{")
_CONFIG = r"^\s*(?P<config>\w+)\s*\(?\s*(?:(?:platform|enforcedPlatform)\s*\(\s*)?"
_STRING_DEP = re.compile(
    _CONFIG + r"""(?P<q>['"])(?P<group>[^:'"\s]+):(?P<artifact>[^:'"\s]+):(?P<version>[^:'"@\s]+)(?::[^'"@]*)?(?:@[^'"]*)?(?P=q)"""
)
_MAP_DEP = re.compile(
    _CONFIG + r"""group\s*[:=]\s*['"](?P<group>[^'"]+)['"]\s*,\s*name\s*[:=]\s*['"](?P<artifact>[^'"]+)['"]\s*,\s*version\s*[:=]\s*"""
    r"""(?:(?P<q>['"])(?P<version>[^'"]+)(?P=q)|(?P<bare>\w+))"""
)
_VAR_REF = re.compile(r"^\$\{?(?P<name>[\w.]+)\}?$")
_NON_VARIABLES = frozenset({"sourceCompatibility", "targetCompatibility", "encoding", "group", "version"})


class _Variable(NamedTuple):
    value: str
    start: int


def _variables(text: str) -> Dict[str, _Variable]:
    variables: Dict[str, _Variable] = {}
    depth = 0
    offset = 0
    for line in text.splitlines(keepends=True):
        line_start = offset
        offset += len(line)
        content = line.rstrip("\r\n")
        stripped = content.strip()
        if not stripped or stripped.startswith("//"):
            continue
        if depth == 0 and _EXT_OPEN.match(content):
            depth = 1 + content.count("{", content.index("{") + 1) - content.count("}")
            continue
        match = _VAR_DEF.match(content)
        if match is None and depth > 0:
            match = _EXT_ASSIGN.match(content)
        if match and match.group("name") not in _NON_VARIABLES:
            variables[match.group("name")] = _Variable(match.group("value"), line_start + match.start("value"))
        if depth > 0:
            depth += content.count("{") - content.count("}")
            depth = max(depth, 0)
    return variables


def _resolve(version: str, bare: Optional[str], variables: Dict[str, _Variable]):
    """Return (raw_text, absolute start) of the version text, or None when unresolvable."""
    if bare:
        name = bare
    else:
        ref = _VAR_REF.match(version)
        if ref is None:
            return None
        name = ref.group("name")
        name = name[4:] if name.startswith("ext.") else name
    var = variables.get(name)
    if var is None:
        return None
    return var.value, var.start


def extract(text: str) -> List[Dependency]:
    """Return the Maven dependencies declared in a Gradle build script."""
    variables = _variables(text)
    dependencies: List[Dependency] = []
    offset = 0
    for line in text.splitlines(keepends=True):
        line_start = offset
        offset += len(line)
        content = line.rstrip("\r\n")
        stripped = content.strip()
        if not stripped or stripped.startswith("//"):
            continue

        match = _MAP_DEP.match(content) or _STRING_DEP.match(content)
        if match is None:
            continue
        config = match.group("config")
        name = f"{match.group('group')}:{match.group('artifact')}"
        bare = match.groupdict().get("bare")
        version = match.group("version") or ""

        if bare or version.startswith("$"):
            resolved = _resolve(version, bare, variables)
            if resolved is None:
                continue
            raw_text, start = resolved
        else:
            raw_text, start = version, line_start + match.start("version")

        dep = make_dependency(
            name, (config,), raw_text, start, Ecosystem.JAVA,
            is_dev=config in DEV_CONFIGURATIONS,
        )
        if dep is not None:
            dependencies.append(dep)
    return dependencies
