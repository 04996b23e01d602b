"""Minimum release age: duration parsing and the source cascade.

The cascade is an ordered list of ``(AgeSource, producer)`` pairs. Each
producer returns an optional duration; the first present value wins
outright and values are never merged across sources.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Callable, Optional, Sequence, Tuple

from common.errors import ConfigError
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import AgePolicy, AgeSource

logger = logging.getLogger(__name__)

AgeProducer = Callable[[], Optional[timedelta]]

_DURATION = re.compile(r"^(\d+)\s*([dwm])$")
_UNIT_DAYS = {
    "d": 1,
    "w": 7,
    "m": 30,  # months are approximated as 30 days
}


def parse_duration(value: str, source: str = "duration") -> timedelta:
    """Parse '<int>d', '<int>w' or '<int>m' into a timedelta.

    Args:
        value: Duration text, e.g. "10d".
        source: Label used in the error message.

    Returns:
        timedelta

    Raises:
        ConfigError: If value is not a duration.
    """
    text = (value or "").strip()
    match = _DURATION.match(text)
    if match is None:
        raise ConfigError(source, text, "expected <number>d, <number>w or <number>m")
    return timedelta(days=int(match.group(1)) * _UNIT_DAYS[match.group(2)])


def resolve_age_policy(sources: Sequence[Tuple[AgeSource, AgeProducer]]) -> AgePolicy:
    """Return the first present value of sources, in order.

    A producer raising ConfigError is reported and skipped; the cascade then
    continues with the next source.
    """
    for source, producer in sources:
        try:
            value = producer()
        except ConfigError as exc:
            logger.warning("Ignoring minimum release age from %s: %s", source.value, exc)
            continue
        if value is None:
            continue
        if is_debug_enabled(logger):
            logger.debug(
                "Minimum release age resolved",
                extra=extra_context(
                    event="config",
                    component="age_policy",
                    action="resolve",
                    outcome="found",
                    source=source.value,
                    seconds=int(value.total_seconds()),
                )
            )
        return AgePolicy(min_age=value, source=source)
    return AgePolicy()
