"""Registry dispatch by ecosystem.

``RegistryClient.list_versions`` routes a lookup to the ecosystem's client
function through a plain table. crates.io asks API users for at most one
request per second, so its lookups pass through a shared rate limiter.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled
from registry import crates_io, go_proxy, maven, npm, packagist, pypi, rubygems
from versioning.models import Candidate, Ecosystem

logger = logging.getLogger(__name__)

Lookup = Callable[[str], List[Candidate]]

LOOKUPS: Dict[Ecosystem, Lookup] = {
    Ecosystem.NODE: npm.list_versions,
    Ecosystem.PYTHON: pypi.list_versions,
    Ecosystem.RUST: crates_io.list_versions,
    Ecosystem.GO: go_proxy.list_versions,
    Ecosystem.RUBY: rubygems.list_versions,
    Ecosystem.PHP: packagist.list_versions,
    Ecosystem.JAVA: maven.list_versions,
}


class RateLimiter:
    """Space calls at least min_interval seconds apart across threads."""

    def __init__(self, min_interval: float):
        self.min_interval = min_interval
        self._lock = threading.Lock()
        self._last = 0.0

    def wait(self) -> None:
        with self._lock:
            delay = self._last + self.min_interval - time.monotonic()
            if delay > 0:
                time.sleep(delay)
            self._last = time.monotonic()


class RegistryClient:
    """Entry point for version lookups, safe to share between worker threads."""

    def __init__(self, lookups: Optional[Dict[Ecosystem, Lookup]] = None):
        self.lookups = dict(LOOKUPS if lookups is None else lookups)
        self._limiters = {Ecosystem.RUST: RateLimiter(Constants.CRATES_IO_MIN_INTERVAL_SEC)}

    def list_versions(self, name: str, ecosystem: Ecosystem) -> List[Candidate]:
        """Return every published version of name in ecosystem's registry.

        Raises:
            NotFound: The registry does not know the package.
            NetworkError: The lookup failed.
        """
        limiter = self._limiters.get(ecosystem)
        if limiter is not None:
            limiter.wait()
        with Timer() as timer:
            candidates = self.lookups[ecosystem](name)
        if is_debug_enabled(logger):
            logger.debug(
                "Versions listed",
                extra=extra_context(
                    event="lookup",
                    component="registry",
                    action="list_versions",
                    outcome="success",
                    ecosystem=ecosystem.value,
                    dependency=name,
                    count=len(candidates),
                    duration_ms=timer.duration_ms(),
                )
            )
        return candidates
