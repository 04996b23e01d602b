"""Readers for the minimum-release-age settings of a project root.

Each reader returns None when its file or key is absent and raises
ConfigError when the value is present but malformed.
"""

from __future__ import annotations

import json
import os
from datetime import timedelta
from typing import List, Optional, Tuple

import yaml

from common.errors import ConfigError
from constants import ManifestFiles
from policy.age import AgeProducer, parse_duration
from versioning.models import AgeSource

NPMRC_KEY = "minimum-release-age"
PNPM_KEY = "minimumReleaseAge"


def _read_text(path: str) -> Optional[str]:
    if not os.path.isfile(path):
        return None
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1].strip()
    return value


def read_npmrc(root: str) -> Optional[timedelta]:
    """``minimum-release-age=<duration>`` from <root>/.npmrc."""
    text = _read_text(os.path.join(root, ManifestFiles.NPMRC))
    if text is None:
        return None
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(("#", ";")):
            continue
        key, sep, value = line.partition("=")
        if sep and key.strip() == NPMRC_KEY:
            return parse_duration(_strip_quotes(value), ManifestFiles.NPMRC)
    return None


def read_pnpm_workspace(root: str) -> Optional[timedelta]:
    """``minimumReleaseAge`` from pnpm-workspace.yaml: integer minutes or a duration string."""
    text = _read_text(os.path.join(root, ManifestFiles.PNPM_WORKSPACE))
    if text is None:
        return None
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(ManifestFiles.PNPM_WORKSPACE, "<document>", str(exc)) from exc
    if not isinstance(data, dict) or PNPM_KEY not in data:
        return None
    value = data[PNPM_KEY]
    if isinstance(value, bool):
        raise ConfigError(ManifestFiles.PNPM_WORKSPACE, str(value), "expected minutes")
    if isinstance(value, int):
        if value < 0:
            raise ConfigError(ManifestFiles.PNPM_WORKSPACE, str(value), "negative minutes")
        return timedelta(minutes=value)
    if isinstance(value, str):
        text_value = value.strip()
        if text_value.isdigit():
            return timedelta(minutes=int(text_value))
        return parse_duration(text_value, ManifestFiles.PNPM_WORKSPACE)
    raise ConfigError(ManifestFiles.PNPM_WORKSPACE, str(value), "expected minutes or a duration")


def read_package_json(root: str) -> Optional[timedelta]:
    """``pnpm.settings.minimumReleaseAge`` (duration string) from package.json."""
    text = _read_text(os.path.join(root, ManifestFiles.PACKAGE_JSON))
    if text is None:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(ManifestFiles.PACKAGE_JSON, "<document>", str(exc)) from exc
    value = data
    for key in ("pnpm", "settings", PNPM_KEY):
        value = value.get(key) if isinstance(value, dict) else None
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(ManifestFiles.PACKAGE_JSON, str(value), "expected a duration string")
    return parse_duration(value, ManifestFiles.PACKAGE_JSON)


def default_sources(root: str, cli_age: Optional[timedelta] = None) -> List[Tuple[AgeSource, AgeProducer]]:
    """The four sources in priority order: CLI, .npmrc, pnpm-workspace.yaml, package.json."""
    return [
        (AgeSource.CLI, lambda: cli_age),
        (AgeSource.NPMRC, lambda: read_npmrc(root)),
        (AgeSource.PNPM_WORKSPACE, lambda: read_pnpm_workspace(root)),
        (AgeSource.PACKAGE_JSON, lambda: read_package_json(root)),
    ]
