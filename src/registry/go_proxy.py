"""Go module proxy client (GOPROXY protocol)."""

from __future__ import annotations

import logging
import re
from typing import List

from constants import Constants
from common.errors import RegistryError
from common.http_client import get_json, raise_for_lookup, robust_get
from common.timestamps import parse_iso8601
from versioning.models import Candidate, Ecosystem
from versioning.semver import try_parse_version

logger = logging.getLogger(__name__)

REGISTRY = "proxy.golang.org"

_UPPER = re.compile(r"[A-Z]")


def escape_module_path(path: str) -> str:
    """Escape upper-case letters as '!' + lower-case, as the proxy protocol requires."""
    return _UPPER.sub(lambda m: "!" + m.group(0).lower(), path)


def list_versions(name: str, url: str = Constants.REGISTRY_URL_GO_PROXY) -> List[Candidate]:
    """Return the tagged versions of a module with their commit times.

    ``@v/list`` gives the versions; each one's time comes from
    ``@v/<version>.info``. A version whose info cannot be fetched is kept
    with an unknown release time.

    Raises:
        NotFound: Unknown module.
        NetworkError: Transport failure.
    """
    base = f"{url}{escape_module_path(name)}/@v/"
    status, _, text = robust_get(base + "list")
    raise_for_lookup(status, text, package=name, registry=REGISTRY, expected=str)

    candidates = []
    for line in text.splitlines():
        tag = line.strip()
        if not tag:
            continue
        version = try_parse_version(tag, Ecosystem.GO)
        if version is None:
            continue
        info_status, _, info = get_json(f"{base}{escape_module_path(tag)}.info")
        try:
            raise_for_lookup(info_status, info, package=f"{name}@{tag}", registry=REGISTRY)
        except RegistryError as exc:
            logger.debug("No release time for %s@%s: %s", name, tag, exc)
            info = {}
        candidates.append(Candidate(version, parse_iso8601(info.get("Time"))))
    return candidates
