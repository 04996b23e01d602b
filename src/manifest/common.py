"""Helpers shared by the manifest readers."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from common.errors import ParseError
from common.logging_utils import extra_context, is_debug_enabled
from versioning.grammars import parse_spec
from versioning.models import Dependency, Ecosystem

logger = logging.getLogger(__name__)


def make_dependency(
    name: str,
    section: Tuple[str, ...],
    raw_text: str,
    start: int,
    ecosystem: Ecosystem,
    *,
    is_dev: bool = False,
    comment: Optional[str] = None,
) -> Optional[Dependency]:
    """Build a Dependency for a specifier found at offset start.

    Returns None (and logs at DEBUG) when the specifier carries no version at
    all, e.g. ``*`` or ``latest``.
    """
    try:
        spec = parse_spec(raw_text, ecosystem)
    except ParseError as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "Skipping dependency without a version",
                extra=extra_context(
                    event="manifest_entry",
                    component="manifest",
                    action="extract",
                    outcome="skipped",
                    dependency=name,
                    reason=exc.reason,
                )
            )
        return None
    return Dependency(
        name=name,
        section=section,
        spec=spec,
        value_span=(start, start + len(raw_text)),
        is_dev=is_dev,
        comment=comment,
    )
