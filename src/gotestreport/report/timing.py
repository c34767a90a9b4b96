"""Elapsed-time normalization and display formatting.

Runner durations arrive as float seconds. Values of one second or less are
shown in whole milliseconds, anything longer in seconds:

    normalize(0.5)  -> ElapsedTime(500, "ms")
    normalize(2.0)  -> ElapsedTime(2.0, "s")

The whole-run duration uses a separate format: fractional seconds under a
minute, otherwise truncated ``{m}m:{s}s``.
"""
from __future__ import annotations

import math
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import NamedTuple

UNIT_SECONDS = "s"
UNIT_MILLISECONDS = "ms"

# The runner trims trailing zeros and goes down to nanoseconds; datetime wants
# exactly six fractional digits on older interpreters
_FRACTION_RE = re.compile(r"\.(\d+)")


class ElapsedTime(NamedTuple):
    """A duration paired with its display unit."""

    value: float
    unit: str

    @property
    def display(self) -> str:
        if self.unit == UNIT_MILLISECONDS:
            return f"{int(self.value)}ms"
        return f"{self.value:.2f}s"


def normalize(seconds: float) -> ElapsedTime:
    """Pick a display unit for a duration in seconds.

    Sub-second values are reinterpreted through their shortest decimal form
    before converting, so 0.29 becomes 290ms rather than 289ms. Values that
    cannot be converted (NaN, infinities) yield ``(0, "ms")``.
    """
    if seconds > 1:
        return ElapsedTime(seconds, UNIT_SECONDS)
    try:
        millis = int(Decimal(repr(float(seconds))) * 1000)
    except (InvalidOperation, ValueError, OverflowError):
        return ElapsedTime(0, UNIT_MILLISECONDS)
    return ElapsedTime(millis, UNIT_MILLISECONDS)


def format_total_time(seconds: float) -> str:
    """Format the whole-run duration.

    >>> format_total_time(12.5)
    '12.500000 s'
    >>> format_total_time(75.0)
    '1m:15s'
    """
    if seconds < 60:
        return f"{seconds:f} s"
    minutes = math.trunc(seconds / 60)
    secs = math.trunc(seconds - minutes * 60)
    return f"{minutes}m:{secs}s"


def format_run_date(timestamp: datetime) -> str:
    """Format a timestamp in RFC 850 layout, e.g. ``Monday, 01-May-23 10:00:00 UTC``."""
    text = timestamp.strftime("%A, %d-%b-%y %H:%M:%S")
    offset = timestamp.utcoffset()
    if offset is None:
        return text
    if not offset:
        return f"{text} UTC"
    return f"{text} {timestamp.strftime('%z')}"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 runner timestamp.

    Accepts a trailing ``Z`` and fractional seconds of any length. The
    offset is mandatory, as in RFC 3339.

    Raises:
        ValueError: If the value is not a string, not ISO-8601, or has no
            UTC offset.
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    timestamp = datetime.fromisoformat(text)
    # Run durations subtract timestamps, so every one must carry an offset
    if timestamp.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no UTC offset")
    return timestamp
