# src/regstack/core/duration.py
"""Duration literals such as ``24h``, ``1h30m`` or ``300ms``.

The grammar is Go's time.ParseDuration: an optional sign followed by one or
more decimal numbers, each with a unit. Valid units are ns, us (or µs/μs),
ms, s, m and h. A bare ``0`` needs no unit.

Sub-microsecond precision is truncated because timedelta cannot hold it.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal

from regstack.contracts.errors import DurationParseError

_NANOS_PER_UNIT: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

# int64 nanosecond bounds; the negative side reaches one further
_MAX_NANOS = 2**63 - 1
_MAX_NEGATIVE_NANOS = 2**63

_SEGMENT_PATTERN = re.compile(r"(?P<number>\d+(?:\.\d*)?|\.\d+)(?P<unit>[^\d.]*)")


def parse_duration(literal: str) -> timedelta:
    """Parse a duration literal into a timedelta.

    Args:
        literal: e.g. ``"24h"``, ``"-1.5h"``, ``"2h45m30s"``

    Returns:
        The parsed duration

    Raises:
        DurationParseError: On empty input, missing or unknown units, or overflow
    """
    text = literal
    negative = False
    if text[:1] in ("-", "+"):
        negative = text[0] == "-"
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise DurationParseError(literal, f"invalid duration {literal!r}")

    limit = _MAX_NEGATIVE_NANOS if negative else _MAX_NANOS
    total = Decimal(0)
    pos = 0
    while pos < len(text):
        match = _SEGMENT_PATTERN.match(text, pos)
        if match is None:
            raise DurationParseError(literal, f"invalid duration {literal!r}")
        unit = match.group("unit")
        if not unit:
            raise DurationParseError(literal, f"missing unit in duration {literal!r}")
        if unit not in _NANOS_PER_UNIT:
            raise DurationParseError(literal, f"unknown unit {unit!r} in duration {literal!r}")
        total += Decimal(match.group("number")) * _NANOS_PER_UNIT[unit]
        if total > limit:
            raise DurationParseError(literal, f"invalid duration {literal!r}")
        pos = match.end()

    micros = int(total // 1_000)
    return timedelta(microseconds=-micros if negative else micros)
