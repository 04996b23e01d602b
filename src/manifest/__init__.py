"""Manifest readers keyed by file name.

Every reader is a plain ``extract(text) -> List[Dependency]`` function; the
table below maps a manifest file name to its ecosystem and reader.
"""

from __future__ import annotations

import os
from typing import Callable, Dict, List, NamedTuple, Optional

from constants import ManifestFiles
from manifest import cargo_toml, composer_json, gemfile, go_mod, gradle, package_json, pyproject_toml
from versioning.models import Dependency, Ecosystem


class Reader(NamedTuple):
    ecosystem: Ecosystem
    extract: Callable[[str], List[Dependency]]


READERS: Dict[str, Reader] = {
    ManifestFiles.PACKAGE_JSON: Reader(Ecosystem.NODE, package_json.extract),
    ManifestFiles.PYPROJECT_TOML: Reader(Ecosystem.PYTHON, pyproject_toml.extract),
    ManifestFiles.CARGO_TOML: Reader(Ecosystem.RUST, cargo_toml.extract),
    ManifestFiles.GO_MOD: Reader(Ecosystem.GO, go_mod.extract),
    ManifestFiles.GEMFILE: Reader(Ecosystem.RUBY, gemfile.extract),
    ManifestFiles.COMPOSER_JSON: Reader(Ecosystem.PHP, composer_json.extract),
    ManifestFiles.BUILD_GRADLE_KTS: Reader(Ecosystem.JAVA, gradle.extract),
    ManifestFiles.BUILD_GRADLE: Reader(Ecosystem.JAVA, gradle.extract),
}


def reader_for(path: str) -> Optional[Reader]:
    """Return the reader registered for the file name of path, if any."""
    return READERS.get(os.path.basename(path))


__all__ = ["READERS", "Reader", "reader_for"]
