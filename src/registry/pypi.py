"""PyPI JSON API client."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from constants import Constants
from common.http_client import get_json, raise_for_lookup
from common.timestamps import parse_iso8601
from versioning.models import Candidate, Ecosystem
from versioning.semver import try_parse_version

logger = logging.getLogger(__name__)

REGISTRY = "pypi"


def _released_at(files: list) -> Optional[datetime]:
    """Earliest upload time among the non-yanked files of a release."""
    times = [
        parse_iso8601(f.get("upload_time_iso_8601"))
        for f in files
        if isinstance(f, dict) and not f.get("yanked")
    ]
    times = [t for t in times if t is not None]
    return min(times) if times else None


def list_versions(name: str, url: str = Constants.REGISTRY_URL_PYPI) -> List[Candidate]:
    """Return the releases of a PyPI project.

    Releases whose files are all yanked are dropped; releases without any
    file are kept with an unknown release time.

    Raises:
        NotFound: Unknown project.
        NetworkError: Transport failure or unusable payload.
    """
    status, _, payload = get_json(f"{url}{name}/json", headers={"Accept": "application/json"})
    raise_for_lookup(status, payload, package=name, registry=REGISTRY)

    candidates = []
    for text, files in (payload.get("releases") or {}).items():
        files = files or []
        if files and all(isinstance(f, dict) and f.get("yanked") for f in files):
            continue
        version = try_parse_version(text, Ecosystem.PYTHON)
        if version is None:
            logger.debug("Ignoring unparseable PyPI version %s==%s", name, text)
            continue
        candidates.append(Candidate(version, _released_at(files)))
    return candidates
