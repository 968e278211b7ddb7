"""
Local wall-clock to UTC conversion.

This module is the only platform-dependent boundary in field validation.
A form supplies expiry as a local date/time string (the HTML
``datetime-local`` shape, ``YYYY-MM-DDTHH:MM``); everything downstream
works on aware UTC datetimes.

Interpretation rules:
- naive input is read in the caller-supplied ``tzinfo``, or in the
  platform's local zone when none is given
- input carrying an explicit UTC offset is honoured as-is
- DST ambiguity is resolved by the platform (``fold=0``); there is no
  further contract

All UTC values leaving this module are truncated to millisecond
precision, the precision of the wire format.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

LOCAL_INPUT_FORMAT = "%Y-%m-%dT%H:%M"


def truncate_to_millis(value: datetime) -> datetime:
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def local_to_utc(local: str, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Convert a local date/time string to an aware UTC datetime.

    Returns None when the string does not parse to a valid calendar
    date/time.
    """
    candidate = local.strip()
    if not candidate:
        return None

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        if tz is not None:
            parsed = parsed.replace(tzinfo=tz)
        else:
            # Naive astimezone() reads the value as platform local time.
            parsed = parsed.astimezone()

    return truncate_to_millis(parsed.astimezone(timezone.utc))


def format_iso_utc(value: datetime) -> str:
    """
    Format an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.
    """
    if value.tzinfo is None:
        raise ValueError("format_iso_utc requires an aware datetime")
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_expiry_local(
    now: datetime,
    hours: int = 24,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Suggested expiry for a fresh form: ``now + hours`` as a local
    ``datetime-local`` string.
    """
    target = now + timedelta(hours=hours)
    local = target.astimezone(tz) if tz is not None else target.astimezone()
    return local.strftime(LOCAL_INPUT_FORMAT)
