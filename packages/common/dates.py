"""Date formatting and validation helpers.

Supports four fixed layouts (case-insensitive):
    MM/DD/YYYY, MM-DD-YYYY, YYYY-MM-DD, YYYY/MM/DD

Unknown layouts fall back to MM/DD/YYYY when formatting.
"""

import logging
import math
import re
from datetime import UTC, date, datetime, timedelta
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "MM/DD/YYYY"

_FORMAT_PATTERNS: dict[str, re.Pattern[str]] = {
    "MM/DD/YYYY": re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"),
    "MM-DD-YYYY": re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"),
    "YYYY-MM-DD": re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"),
    "YYYY/MM/DD": re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"),
}

SUPPORTED_FORMATS: tuple[str, ...] = tuple(_FORMAT_PATTERNS)

MIN_YEAR = 1900


def format_date(value: date, fmt: str) -> str:
    """Format a calendar date using one of the supported layouts.

    Args:
        value: Date (or datetime) to format.
        fmt: Layout name, case-insensitive. Unknown layouts use MM/DD/YYYY.

    Returns:
        str: Formatted date with zero-padded month and day.

    Example:
        >>> format_date(date(2025, 8, 17), "yyyy-mm-dd")
        '2025-08-17'
    """
    year = str(value.year)
    month = f"{value.month:02d}"
    day = f"{value.day:02d}"

    match fmt.upper():
        case "MM-DD-YYYY":
            return f"{month}-{day}-{year}"
        case "YYYY-MM-DD":
            return f"{year}-{month}-{day}"
        case "YYYY/MM/DD":
            return f"{year}/{month}/{day}"
        case _:
            return f"{month}/{day}/{year}"


def today(fmt: str = DEFAULT_FORMAT) -> str:
    """Return today's local date in the given layout."""
    return format_date(date.today(), fmt)


def is_valid_date_format(value: Any, fmt: str) -> bool:
    """Check whether a string is a real calendar date in the given layout.

    Month and day may be one or two digits; the year must be exactly four.
    The parsed parts are turned back into a calendar date and must survive
    the round trip unchanged, which rejects dates like 02/29/2023 or 04/31/2024.

    Args:
        value: Candidate date string. Non-strings and empty strings are invalid.
        fmt: Layout name, case-insensitive.

    Returns:
        bool: True if value is a valid date in fmt.
    """
    if not value or not isinstance(value, str):
        return False

    layout = fmt.upper()
    pattern = _FORMAT_PATTERNS.get(layout)
    if pattern is None:
        logger.warning(f"Unsupported date format: {fmt}")
        return False

    match = pattern.match(value.strip())
    if not match:
        return False

    first, second, third = (int(group) for group in match.groups())
    if layout.startswith("MM"):
        month, day, year = first, second, third
    else:
        year, month, day = first, second, third

    if not 1 <= month <= 12 or not 1 <= day <= 31 or year < MIN_YEAR:
        return False

    try:
        parsed = date(year, month, day)
    except ValueError:
        return False

    return (parsed.year, parsed.month, parsed.day) == (year, month, day)


def parse_creation_date(value: Any) -> datetime | None:
    """Convert a flag creation date to an aware UTC datetime.

    LaunchDarkly reports creation dates as epoch milliseconds. Numeric strings
    and ISO-8601 strings are accepted as well.

    Args:
        value: Raw creationDate value from the API.

    Returns:
        datetime | None: UTC datetime, or None if missing or unparseable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)

    if not isinstance(value, int | float):
        return None
    if not math.isfinite(value) or value == 0:
        return None

    try:
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def add_days(moment: datetime, days: int) -> date:
    """Return the local calendar date of moment shifted by whole days."""
    local_date = moment.astimezone().date()
    return local_date + timedelta(days=days)


__all__ = [
    "DEFAULT_FORMAT",
    "SUPPORTED_FORMATS",
    "add_days",
    "format_date",
    "is_valid_date_format",
    "parse_creation_date",
    "today",
]
