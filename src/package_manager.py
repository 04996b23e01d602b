"""Install step: detect each manifest's package manager and run its install command.

Detection looks at lockfiles in the manifest's directory. Every supported
manager maps to a fixed argv; failures are reported in the returned
InstallResult, never raised.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from versioning.models import Ecosystem

logger = logging.getLogger(__name__)

# First matching lockfile wins; the last entry is the fallback marker file.
DETECTION: Dict[Ecosystem, Tuple[Tuple[str, str], ...]] = {
    Ecosystem.NODE: (
        ("pnpm-lock.yaml", "pnpm"),
        ("yarn.lock", "yarn"),
        ("bun.lockb", "bun"),
        ("bun.lock", "bun"),
        ("package-lock.json", "npm"),
        ("package.json", "npm"),
    ),
    Ecosystem.PYTHON: (
        ("uv.lock", "uv"),
        ("poetry.lock", "poetry"),
        ("requirements.lock", "rye"),
        ("Pipfile.lock", "pipenv"),
        ("pyproject.toml", "pip"),
    ),
    Ecosystem.RUST: (("Cargo.toml", "cargo"),),
    Ecosystem.GO: (("go.mod", "go"),),
    Ecosystem.RUBY: (("Gemfile", "bundle"),),
    Ecosystem.PHP: (("composer.json", "composer"),),
    Ecosystem.JAVA: (
        ("gradlew", "gradlew"),
        ("build.gradle.kts", "gradle"),
        ("build.gradle", "gradle"),
    ),
}

INSTALL_COMMANDS: Dict[str, List[str]] = {
    "npm": ["npm", "install"],
    "pnpm": ["pnpm", "install"],
    "yarn": ["yarn", "install"],
    "bun": ["bun", "install"],
    "uv": ["uv", "sync"],
    "poetry": ["poetry", "install"],
    "rye": ["rye", "sync"],
    "pipenv": ["pipenv", "install"],
    "pip": ["pip", "install", "-e", "."],
    "cargo": ["cargo", "build"],
    "go": ["go", "mod", "download"],
    "bundle": ["bundle", "install"],
    "composer": ["composer", "install"],
    "gradlew": ["./gradlew", "dependencies"],
    "gradle": ["gradle", "dependencies"],
}


@dataclass
class InstallResult:
    """Outcome of one install command."""

    ecosystem: Ecosystem
    directory: str
    command: str = ""
    success: bool = True
    stdout: str = ""
    stderr: str = ""

    @property
    def skipped(self) -> bool:
        return not self.command


def detect_manager(ecosystem: Ecosystem, directory: str) -> Optional[str]:
    """Return the package manager for ecosystem in directory, or None."""
    for filename, manager in DETECTION.get(ecosystem, ()):
        if os.path.isfile(os.path.join(directory, filename)):
            return manager
    return None


def run_install(ecosystem: Ecosystem, directory: str) -> InstallResult:
    """Run the detected install command in directory and capture its output."""
    manager = detect_manager(ecosystem, directory)
    if manager is None:
        logger.info("No package manager detected for %s in %s", ecosystem.value, directory)
        return InstallResult(ecosystem, directory)

    argv = INSTALL_COMMANDS[manager]
    command = " ".join(argv)
    logger.info("Running: %s (in %s)", command, directory)
    try:
        completed = subprocess.run(  # noqa: S603
            argv,
            cwd=directory,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.error("Failed to execute %s: %s", command, exc)
        return InstallResult(ecosystem, directory, command, False, "", f"Failed to execute command: {exc}")

    success = completed.returncode == 0
    if not success:
        logger.error("%s exited with status %d", command, completed.returncode)
    return InstallResult(ecosystem, directory, command, success, completed.stdout, completed.stderr)
