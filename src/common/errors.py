"""Exception taxonomy for depup.

Every failure below is isolated to a single dependency entry or a single
manifest by its caller; none of them halts processing of siblings.
"""

from __future__ import annotations

from typing import Optional


class DepupError(Exception):
    """Base class for depup errors."""


class ParseError(DepupError, ValueError):
    """Raised when a version specifier cannot be mapped to a known operator form."""

    def __init__(self, raw_text: str, reason: str):
        super().__init__(f"Cannot parse version specifier '{raw_text}': {reason}")
        self.raw_text = raw_text
        self.reason = reason


class ConfigError(DepupError, ValueError):
    """Raised when an age-policy source holds a malformed value."""

    def __init__(self, source: str, value: str, reason: Optional[str] = None):
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid value '{value}' in {source}{detail}")
        self.source = source
        self.value = value


class RegistryError(DepupError):
    """Raised when a registry lookup fails."""

    def __init__(self, package: str, registry: str, message: str):
        super().__init__(f"{registry}: {package}: {message}")
        self.package = package
        self.registry = registry
        self.message = message


class NotFound(RegistryError):
    """The registry does not know the package."""

    def __init__(self, package: str, registry: str):
        super().__init__(package, registry, "package not found")


class NetworkError(RegistryError):
    """Transport failure, non-success status or undecodable payload."""


class PatchAnchorAmbiguous(DepupError, LookupError):
    """Raised when a (name, section) anchor does not resolve to exactly one location."""

    def __init__(self, name: str, section: tuple, matches: int):
        where = ".".join(section)
        super().__init__(
            f"Dependency '{name}' in [{where}] matched {matches} locations; expected exactly one"
        )
        self.name = name
        self.section = section
        self.matches = matches


class ManifestError(DepupError):
    """Raised when a manifest file cannot be read or is not a valid document."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
