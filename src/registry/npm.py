"""npm registry client."""

from __future__ import annotations

import logging
from typing import List
from urllib.parse import quote

from constants import Constants
from common.http_client import get_json, raise_for_lookup
from common.timestamps import parse_iso8601
from versioning.models import Candidate, Ecosystem
from versioning.semver import try_parse_version

logger = logging.getLogger(__name__)

REGISTRY = "npm"


def list_versions(name: str, url: str = Constants.REGISTRY_URL_NPM) -> List[Candidate]:
    """Return every published version of an npm package.

    Versions come from the packument ``versions`` keys; release times from
    ``time[<version>]``.

    Raises:
        NotFound: Unknown package.
        NetworkError: Transport failure or unusable payload.
    """
    status, _, packument = get_json(url + quote(name, safe="@"), headers={"Accept": "application/json"})
    raise_for_lookup(status, packument, package=name, registry=REGISTRY)

    times = packument.get("time") or {}
    candidates = []
    for text in packument.get("versions") or {}:
        version = try_parse_version(text, Ecosystem.NODE)
        if version is None:
            logger.debug("Ignoring unparseable npm version %s@%s", name, text)
            continue
        candidates.append(Candidate(version, parse_iso8601(times.get(text))))
    return candidates
