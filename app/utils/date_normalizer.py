"""Tolerant date normalization for spreadsheet cells.

Every input is either converted to a canonical ``YYYY-MM-DD`` string or to
the empty string ("date unknown"). Nothing here raises.

Digit triples separated by dots, slashes or dashes are read day-first
(``03/04/2025`` is 3 April), matching the Norwegian source tables. A bare
year maps to January 1 of that year; callers that need to tell year-only
precision apart have to check for day == month == 1 themselves.

Month names are accepted in English and Norwegian. Relative phrases such as
"today" or "2 days ago" are never resolved against the clock.
"""

from __future__ import annotations

import logging
import re
from datetime import date

import dateparser

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DOTTED_DMY = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_SLASHED_DMY = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DASHED_DMY = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_ISO_DATETIME_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})[T ]")
_BARE_YEAR = re.compile(r"^(\d{4})$")
_MONTH_DAY_YEAR = re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})$")
_DAY_MONTH_YEAR = re.compile(r"^(\d{1,2})\.?\s+([A-Za-z]+)\.?,?\s+(\d{4})$")
_MONTH_YEAR = re.compile(r"^([A-Za-z]+)\.?\s+(\d{4})$")

_MONTHS = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}
_NORWEGIAN_MONTHS = {
    "januar": 1,
    "februar": 2,
    "mars": 3,
    "mai": 5,
    "juni": 6,
    "juli": 7,
    "oktober": 10,
    "desember": 12,
}
_MONTH_ALIASES = {
    **_MONTHS,
    **_NORWEGIAN_MONTHS,
    **{name[:3]: number for name, number in (_MONTHS | _NORWEGIAN_MONTHS).items()},
    "sept": 9,
}

_DATEPARSER_SETTINGS = {
    "DATE_ORDER": "DMY",
    "STRICT_PARSING": True,
    "PREFER_DAY_OF_MONTH": "first",
    # Relative phrases ("today", "2 days ago") are not dates in a sheet cell.
    "PARSERS": ["custom-formats", "absolute-time"],
    "RETURN_AS_TIMEZONE_AWARE": False,
}


def _to_iso(year: int, month: int, day: int) -> str:
    """Build the canonical string, raising ValueError for impossible dates."""
    return date(year, month, day).isoformat()


def _month_number(name: str) -> int | None:
    return _MONTH_ALIASES.get(name.lower())


def _parse_known_formats(value: str) -> str | None:
    """Try the explicit formats in priority order.

    Returns:
        Canonical date string, or None when no pattern matched.

    Raises:
        ValueError: If a pattern matched but the date does not exist.
    """
    for pattern in (_DOTTED_DMY, _SLASHED_DMY, _DASHED_DMY):
        match = pattern.match(value)
        if match:
            day, month, year = (int(part) for part in match.groups())
            return _to_iso(year, month, day)

    match = _ISO_DATETIME_PREFIX.match(value)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _to_iso(year, month, day)

    match = _BARE_YEAR.match(value)
    if match:
        return _to_iso(int(match.group(1)), 1, 1)

    # Unrecognised month words fall through to the dateparser fallback.
    match = _MONTH_DAY_YEAR.match(value)
    if match and _month_number(match.group(1)):
        month_name, day, year = match.groups()
        return _to_iso(int(year), _month_number(month_name), int(day))

    match = _DAY_MONTH_YEAR.match(value)
    if match and _month_number(match.group(2)):
        day, month_name, year = match.groups()
        return _to_iso(int(year), _month_number(month_name), int(day))

    match = _MONTH_YEAR.match(value)
    if match and _month_number(match.group(1)):
        month_name, year = match.groups()
        return _to_iso(int(year), _month_number(month_name), 1)

    return None


def _parse_fallback(value: str) -> str:
    parsed = dateparser.parse(value, languages=["en", "nb"], settings=_DATEPARSER_SETTINGS)
    if parsed is None:
        return ""
    return parsed.date().isoformat()


def normalize_date(raw: str | None) -> str:
    """Normalize an assorted date string to ``YYYY-MM-DD``.

    Args:
        raw: Cell value as read from the spreadsheet.

    Returns:
        Canonical date string, or "" when the value cannot be parsed or does
        not denote a real calendar date.

    Examples:
        >>> normalize_date("22.06.2025")
        '2025-06-22'
        >>> normalize_date("Oct 6, 2025")
        '2025-10-06'
        >>> normalize_date("2025")
        '2025-01-01'
        >>> normalize_date("not a date")
        ''
    """
    if raw is None:
        return ""

    value = raw.strip()
    if not value:
        return ""

    try:
        match = _ISO_DATE.match(value)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return _to_iso(year, month, day)

        parsed = _parse_known_formats(value)
        if parsed is not None:
            return parsed

        return _parse_fallback(value)
    except (ValueError, OverflowError):
        logger.debug("date.invalid", extra={"raw_date": value[:64]})
        return ""
    except Exception as exc:  # dateparser internals
        logger.warning(
            "date.parser_error",
            extra={"raw_date": value[:64], "error_type": type(exc).__name__},
        )
        return ""
