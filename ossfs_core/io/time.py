from __future__ import annotations

import math
from datetime import date, datetime
from email.utils import parsedate_to_datetime

import pytz


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value


def to_timestamp(value: object) -> int | None:
    """
    Convert a last-modified value to integer seconds since the epoch.

    Supported inputs:
    - datetime objects (naive values are taken as UTC)
    - date objects (midnight UTC)
    - int/float epoch values
    - RFC 1123 strings (e.g., "Wed, 12 Oct 2022 17:50:00 GMT")
    - ISO-8601 strings (e.g., "2022-10-12T17:50:00.000Z")

    Returns ``None`` for missing or unparseable values instead of raising.

    Examples:
        >>> to_timestamp("Thu, 01 Jan 1970 00:01:00 GMT")
        60
        >>> to_timestamp("1970-01-01T00:01:00.000Z")
        60
        >>> to_timestamp("not a date") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return int(_aware(value).timestamp())

    if isinstance(value, date):
        return int(_aware(datetime(value.year, value.month, value.day)).timestamp())

    if isinstance(value, float) and not math.isfinite(value):
        return None

    if isinstance(value, (int, float)):
        return int(value)

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if text.isdigit():
        return int(text)

    try:
        return int(_aware(parsedate_to_datetime(text)).timestamp())
    except (TypeError, ValueError, IndexError):
        pass

    iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return int(_aware(datetime.fromisoformat(iso_text)).timestamp())
    except ValueError:
        return None
