"""RubyGems.org versions API client."""

from __future__ import annotations

from typing import List

from constants import Constants
from common.http_client import get_json, raise_for_lookup
from common.timestamps import parse_iso8601
from versioning.models import Candidate, Ecosystem
from versioning.semver import try_parse_version

REGISTRY = "rubygems"


def list_versions(name: str, url: str = Constants.REGISTRY_URL_RUBYGEMS) -> List[Candidate]:
    """Return the versions of a gem (platform builds collapse onto one version)."""
    status, _, payload = get_json(f"{url}{name}.json", headers={"Accept": "application/json"})
    raise_for_lookup(status, payload, package=name, registry=REGISTRY, expected=list)

    seen = {}
    for entry in payload:
        if not isinstance(entry, dict) or entry.get("yanked"):
            continue
        version = try_parse_version(str(entry.get("number", "")), Ecosystem.RUBY)
        if version is None or version.text in seen:
            continue
        seen[version.text] = Candidate(version, parse_iso8601(entry.get("created_at")))
    return list(seen.values())
