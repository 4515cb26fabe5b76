"""
Timestamp helpers shared by the normalizer and the CSV exporter.

Accepted inputs:
- extended ISO 8601 strings: "YYYY-MM-DD[(T| )HH:MM[:SS[.fff]]][Z|+HH[:MM]]"
- date-only strings ("2024-01-15", read as UTC midnight)
- numbers, read as epoch milliseconds

Compact forms such as "20240115T100000" are rejected.

Values without an offset are read as UTC so the output never depends on the
machine's local timezone.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

# Rows older than this are placeholder/legacy data and are exported verbatim.
MIN_SPREADSHEET_YEAR = 1980

_ISO_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})"
    r"(?:[Tt ](\d{2}):(\d{2})(?::(\d{2})(?:[.,](\d+))?)?)?"
    r"(Z|z|[+-]\d{2}(?::?\d{2})?)?\Z"
)


def _parse_zone(zone: Optional[str]) -> timezone:
    """
    "Z" / None -> UTC, "+01:00" / "-0130" / "+02" -> fixed offset.
    """
    if not zone or zone in ("Z", "z"):
        return timezone.utc
    sign = -1 if zone[0] == "-" else 1
    digits = zone[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:] or 0)
    # raises ValueError for offsets of 24h or more
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a raw timestamp into an aware UTC datetime.

    Returns None if the value cannot be read as a point in time.
    """
    # bool is an int subclass, but True is not a timestamp
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    m = _ISO_RE.match(value.strip())
    if not m:
        return None

    year, month, day, hour, minute, second, frac, zone = m.groups()
    micro = int((frac or "0")[:6].ljust(6, "0"))

    try:
        dt = datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0), micro,
            tzinfo=_parse_zone(zone),
        )
        # edge-of-range values with an offset overflow here
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def to_iso_utc(dt: datetime) -> str:
    """
    Format as 'YYYY-MM-DDTHH:MM:SS.sssZ' (millisecond precision, UTC).
    """
    dt = dt.astimezone(timezone.utc)
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}.{dt.microsecond // 1000:03d}Z"
    )


def format_for_spreadsheet(value: Any) -> str:
    """
    Convert an ISO timestamp into 'YYYY-MM-DD HH:MM:SS' (UTC), a format
    spreadsheet applications recognize as date + time.

    - non-string or empty -> ''
    - unparseable or earlier than MIN_SPREADSHEET_YEAR -> original string
    """
    if not value or not isinstance(value, str):
        return ""

    dt = parse_timestamp(value)
    if dt is None or dt.year < MIN_SPREADSHEET_YEAR:
        return value

    return dt.strftime("%Y-%m-%d %H:%M:%S")
