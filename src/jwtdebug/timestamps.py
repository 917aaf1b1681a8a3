"""Detection of claim values that look like points in time.

Claims arrive as whatever JSON the issuer chose: integer seconds, floats,
numeric strings or formatted dates. ``try_parse_timestamp`` accepts all of
these and then applies a plausibility window so that small unrelated numbers
(counts, versions, ids) are not shown as dates.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

MIN_TIMESTAMP = int(datetime(2000, 1, 1, tzinfo=timezone.utc).timestamp())
MAX_TIMESTAMP = int(datetime(2100, 1, 1, tzinfo=timezone.utc).timestamp())

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1

_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
_ZONE_ABBREVIATION_RE = re.compile(r"[A-Z]{3,5}")

# (strptime format, trailing zone abbreviation expected). Order matters:
# the first format that parses wins.
TIMESTAMP_FORMATS: Tuple[Tuple[str, bool], ...] = (
    ("%Y-%m-%dT%H:%M:%S%z", False),          # RFC 3339
    ("%Y-%m-%dT%H:%M:%S.%f%z", False),       # RFC 3339 with fractional seconds
    ("%Y-%m-%dT%H:%M:%S", False),            # ISO without offset
    ("%Y-%m-%d %H:%M:%S", False),
    ("%Y-%m-%d", False),
    ("%a, %d %b %Y %H:%M:%S", True),         # RFC 1123
    ("%a, %d %b %Y %H:%M:%S %z", False),     # RFC 1123 with numeric zone
    ("%d %b %y %H:%M", True),                # RFC 822
    ("%d %b %y %H:%M %z", False),            # RFC 822 with numeric zone
    ("%A, %d-%b-%y %H:%M:%S", True),         # RFC 850
)


def to_epoch_seconds(value: Any) -> Optional[int]:
    """Coerce a numeric claim value to integer epoch seconds.

    Floats are truncated. Booleans, non-finite floats and floats outside the
    signed 64-bit range are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value >= 2.0 ** 63 or value < -(2.0 ** 63):
            return None
        return int(value)
    return None


def _parse_with_format(value: str, fmt: str, zone_abbreviation: bool) -> Optional[datetime]:
    if zone_abbreviation:
        head, sep, zone = value.rpartition(" ")
        if not sep or not _ZONE_ABBREVIATION_RE.fullmatch(zone):
            return None
        value = head
    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        # No offset, or a zone abbreviation we cannot resolve: read as UTC
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_string(value: str) -> Optional[datetime]:
    for fmt, zone_abbreviation in TIMESTAMP_FORMATS:
        parsed = _parse_with_format(value, fmt, zone_abbreviation)
        if parsed is not None:
            return parsed

    # Epoch seconds stored as a string
    if not _DECIMAL_RE.fullmatch(value):
        return None
    seconds = int(value)
    if seconds < _INT64_MIN or seconds > _INT64_MAX:
        return None
    return _from_epoch(seconds)


def _from_epoch(seconds: int) -> Optional[datetime]:
    if seconds < MIN_TIMESTAMP or seconds > MAX_TIMESTAMP:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def try_parse_timestamp(value: Any) -> Optional[datetime]:
    """Interpret a claim value as a point in time.

    Args:
        value: Any decoded JSON value

    Returns:
        A UTC datetime within [2000-01-01, 2100-01-01], or None when the value
        is not a plausible timestamp. Never raises.
    """
    if isinstance(value, str):
        parsed = _parse_string(value)
        if parsed is None:
            return None
        instant = parsed.timestamp()
        if instant < MIN_TIMESTAMP or instant > MAX_TIMESTAMP:
            return None
        return parsed.astimezone(timezone.utc)

    seconds = to_epoch_seconds(value)
    if seconds is None:
        return None
    return _from_epoch(seconds)


def format_instant(moment: datetime) -> str:
    """RFC 3339 rendering in UTC, e.g. ``2023-11-14T22:13:20Z``."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
