"""crates.io API client."""

from __future__ import annotations

import logging
from typing import List

from constants import Constants
from common.http_client import get_json, raise_for_lookup
from common.timestamps import parse_iso8601
from versioning.models import Candidate, Ecosystem
from versioning.semver import try_parse_version

logger = logging.getLogger(__name__)

REGISTRY = "crates.io"


def list_versions(name: str, url: str = Constants.REGISTRY_URL_CRATES) -> List[Candidate]:
    """Return the non-yanked versions of a crate.

    Raises:
        NotFound: Unknown crate.
        NetworkError: Transport failure or unusable payload.
    """
    status, _, payload = get_json(url + name, headers={"Accept": "application/json"})
    raise_for_lookup(status, payload, package=name, registry=REGISTRY)

    candidates = []
    for entry in payload.get("versions") or []:
        if not isinstance(entry, dict) or entry.get("yanked"):
            continue
        version = try_parse_version(entry.get("num", ""), Ecosystem.RUST)
        if version is None:
            continue
        candidates.append(Candidate(version, parse_iso8601(entry.get("created_at"))))
    return candidates
