"""Maven Central search client."""

from __future__ import annotations

import logging
from typing import List

from constants import Constants
from common.http_client import get_json, raise_for_lookup
from common.errors import NotFound
from common.timestamps import from_epoch_ms
from versioning.models import Candidate, Ecosystem
from versioning.semver import try_parse_version

logger = logging.getLogger(__name__)

REGISTRY = "maven-central"


def split_coordinates(name: str):
    """Split 'group:artifact' into its parts; raises ValueError otherwise."""
    group, sep, artifact = name.partition(":")
    if not sep or not group or not artifact or ":" in artifact:
        raise ValueError(f"Not a Maven coordinate: '{name}'")
    return group, artifact


def list_versions(name: str, url: str = Constants.REGISTRY_URL_MAVEN) -> List[Candidate]:
    """Return the versions of a Maven artifact from the ``gav`` search core.

    Args:
        name: ``group:artifact``.
        url: Search endpoint.

    Raises:
        NotFound: Unknown artifact or malformed coordinate.
        NetworkError: Transport failure or unusable payload.
    """
    try:
        group, artifact = split_coordinates(name)
    except ValueError as exc:
        raise NotFound(name, REGISTRY) from exc

    params = {
        "q": f'g:"{group}" AND a:"{artifact}"',
        "core": "gav",
        "rows": Constants.MAVEN_MAX_VERSIONS,
        "wt": "json",
    }
    status, _, payload = get_json(url, params=params, headers={"Accept": "application/json"})
    raise_for_lookup(status, payload, package=name, registry=REGISTRY)

    docs = (payload.get("response") or {}).get("docs") or []
    if not docs:
        raise NotFound(name, REGISTRY)

    candidates = []
    for doc in docs:
        version = try_parse_version(str(doc.get("v", "")), Ecosystem.JAVA)
        if version is None:
            continue
        candidates.append(Candidate(version, from_epoch_ms(doc.get("timestamp"))))
    return candidates
