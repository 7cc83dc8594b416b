"""Lenient parsing of the string-typed values served by the upstream API.

Every field of a sale record arrives as a string. Weights and prices may be
empty or carry trailing text, and dates come in several shapes depending on
which client registered the bale: ISO timestamps, ``M/D/YYYY`` slash dates
and JavaScript ``Date.toString()`` output such as
``Thu Jul 31 2025 06:57:49 GMT+0200 (Central Africa Time)``.
"""

import datetime
import re
from typing import Optional, Union

from ..core import config

_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})")
_JS_DATE = re.compile(r"^(?:[A-Za-z]{3},?\s+)?([A-Za-z]{3})\s+(\d{1,2}),?\s+(\d{4})")

DateLike = Union[str, datetime.date, datetime.datetime, None]


def parse_number(value: Union[str, int, float, None], default: float = 0.0) -> float:
    """Parse the leading number of ``value``.

    ``"12.5"`` and ``"12.5kg"`` both give ``12.5``; empty or non-numeric
    input gives ``default``.
    """
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER_PREFIX.match(value)
    if not match:
        return default
    return float(match.group(1))


def parse_date(value: DateLike, day_first: Optional[bool] = None) -> Optional[datetime.date]:
    """Return the calendar day of ``value`` or ``None`` when it can't be read.

    Timestamps keep the day written in the string, the time and offset are
    dropped. Slash dates are month-first unless ``day_first`` (or the
    ``SLASH_DATES_DAY_FIRST`` setting) says otherwise.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value

    text = value.strip()
    if not text:
        return None
    if day_first is None:
        day_first = config.SLASH_DATES_DAY_FIRST

    try:
        match = _ISO_DATE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return datetime.date(year, month, day)

        match = _SLASH_DATE.match(text)
        if match:
            first, second, year = (int(part) for part in match.groups())
            if day_first:
                return datetime.date(year, second, first)
            return datetime.date(year, first, second)

        match = _JS_DATE.match(text)
        if match:
            month_name, day, year = match.groups()
            return datetime.datetime.strptime(f"{month_name} {day} {year}", "%b %d %Y").date()
    except ValueError:
        return None
    return None


def in_date_range(
    value: DateLike, date_from: Optional[datetime.date], date_to: Optional[datetime.date]
) -> bool:
    """Inclusive, day-granular range check. Open bounds are ignored."""
    if date_from is None and date_to is None:
        return True
    day = parse_date(value)
    if day is None:
        return False
    if date_from is not None and day < date_from:
        return False
    if date_to is not None and day > date_to:
        return False
    return True


def format_amount(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}"


def format_grouped(value: float) -> str:
    """Whole number with thousands separators, e.g. ``12,345``."""
    return f"{value:,.0f}"


def format_display_date(value: datetime.date) -> str:
    """en-GB display form, ``31/07/2025``."""
    return value.strftime("%d/%m/%Y")


def format_timestamp(value: datetime.datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M:%S")
