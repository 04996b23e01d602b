"""Packagist (Composer v2 metadata) client."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from constants import Constants
from common.http_client import get_json, raise_for_lookup
from common.timestamps import parse_iso8601
from versioning.models import Candidate, Ecosystem
from versioning.semver import try_parse_version

logger = logging.getLogger(__name__)

REGISTRY = "packagist"

_UNSET = "__unset"


def expand_minified(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Expand ``composer/2.0`` minified metadata.

    Each entry only lists the keys that differ from the previous one; a value
    of ``"__unset"`` removes a key.
    """
    expanded = []
    current: Dict[str, Any] = {}
    for entry in entries:
        current = dict(current)
        for key, value in entry.items():
            if value == _UNSET:
                current.pop(key, None)
            else:
                current[key] = value
        expanded.append(current)
    return expanded


def list_versions(name: str, url: str = Constants.REGISTRY_URL_PACKAGIST) -> List[Candidate]:
    """Return the tagged releases of a Composer package (dev branches excluded)."""
    status, _, payload = get_json(f"{url}{name}.json", headers={"Accept": "application/json"})
    raise_for_lookup(status, payload, package=name, registry=REGISTRY)

    entries = (payload.get("packages") or {}).get(name) or []
    if payload.get("minified") == "composer/2.0":
        entries = expand_minified(entries)

    candidates = []
    for entry in entries:
        text = str(entry.get("version", ""))
        if text.startswith("dev-") or text.endswith("-dev"):
            continue
        version = try_parse_version(text, Ecosystem.PHP)
        if version is None:
            continue
        candidates.append(Candidate(version, parse_iso8601(entry.get("time"))))
    return candidates
