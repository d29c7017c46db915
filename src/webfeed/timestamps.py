"""Timestamp resolution for RSS and Atom date fields.

RSS does not pin down a date format, so RSS dates are tried against a fixed,
ordered list of layouts seen in the wild; the first layout that matches the
whole string wins. Atom dates are RFC 3339 and are parsed directly.
"""

from __future__ import annotations

import datetime
import logging
import re
from typing import Optional

from dateutil import parser as dateutil_parser

from .errors import BadTimestamp

logger = logging.getLogger(__name__)

_UTC = datetime.timezone.utc

_MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)
_MONTHS_RFC822: dict[str, int] = {
    name[:3]: number for number, name in enumerate(_MONTH_NAMES, start=1)
}
_MONTHS_LONG: dict[str, int] = {
    name: number for number, name in enumerate(_MONTH_NAMES, start=1)
}
_WEEKDAYS_RFC822 = frozenset({"mon", "tue", "wed", "thu", "fri", "sat", "sun"})

_RFC1123_PREFIX = (
    r"(?P<weekday>[A-Za-z]{3}), (?P<day>\d{1,2}) (?P<month>[A-Za-z]{3}) "
)
_CLOCK = r"(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})"

# Mon, 2 Jan 2006 15:04:05 -0700
_RE_RFC1123Z = re.compile(
    _RFC1123_PREFIX + r"(?P<year>\d{4}) " + _CLOCK + r" (?P<offset>[+-]\d{4})"
)
# Mon, 2 Jan 2006 15:04:05 MST
_RE_RFC1123 = re.compile(
    _RFC1123_PREFIX + r"(?P<year>\d{4}) " + _CLOCK + r" (?P<zone>[A-Z]{3,5})"
)
# Mon, 2 Jan 06 15:04:05 -0700
_RE_RFC822Z = re.compile(
    _RFC1123_PREFIX + r"(?P<year>\d{2}) " + _CLOCK + r" (?P<offset>[+-]\d{4})"
)
# 02 January 2006
_RE_BARE_DATE = re.compile(r"(?P<day>\d{2}) (?P<month>[A-Za-z]+) (?P<year>\d{4})")

# Order matters: the first layout that matches is used.
_RSS_LAYOUTS: tuple[tuple[re.Pattern[str], dict[str, int]], ...] = (
    (_RE_RFC1123Z, _MONTHS_RFC822),
    (_RE_RFC1123, _MONTHS_RFC822),
    (_RE_RFC822Z, _MONTHS_RFC822),
    (_RE_BARE_DATE, _MONTHS_LONG),
)

# Zone abbreviations that show up in RSS dates, as UTC offsets in seconds.
_custom_tzinfos: dict[str, int] = {
    "UTC": 0,
    "UT": 0,
    "GMT": 0,
    "WET": 0,
    "WEST": 3600,
    "BST": 3600,
    "CET": 3600,
    "CEST": 7200,
    "EET": 7200,
    "EEST": 10800,
    "MSK": 10800,
    "IST": 19800,
    "PST": -28800,
    "PDT": -25200,
    "MST": -25200,
    "MDT": -21600,
    "CST": -21600,
    "CDT": -18000,
    "EST": -18000,
    "EDT": -14400,
    "AKST": -32400,
    "AKDT": -28800,
    "HST": -36000,
    "AEST": 36000,
    "AEDT": 39600,
    "ACST": 34200,
    "ACDT": 37800,
    "AWST": 28800,
    "NZST": 43200,
    "NZDT": 46800,
    "JST": 32400,
    "KST": 32400,
    "SGT": 28800,
}


def _layout_tzinfo(fields: dict[str, Optional[str]]) -> Optional[datetime.tzinfo]:
    offset = fields.get("offset")
    if offset is not None:
        seconds = (int(offset[1:3]) * 3600 + int(offset[3:5]) * 60) * (
            1 if offset[0] == "+" else -1
        )
        # Python requires offset strictly between -24h and +24h
        if not (-86400 < seconds < 86400):
            return None
        return datetime.timezone(datetime.timedelta(seconds=seconds))

    zone = fields.get("zone")
    if zone is not None:
        # Unknown abbreviations keep their name at a zero offset.
        seconds = _custom_tzinfos.get(zone, 0)
        return datetime.timezone(datetime.timedelta(seconds=seconds), zone)

    return _UTC


def _layout_datetime(
    match: re.Match[str], months: dict[str, int]
) -> Optional[datetime.datetime]:
    fields = match.groupdict()

    weekday = fields.get("weekday")
    if weekday is not None and weekday.lower() not in _WEEKDAYS_RFC822:
        return None

    month = months.get(fields["month"].lower())
    if month is None:
        return None

    year = int(fields["year"])
    if len(fields["year"]) == 2:
        year += 1900 if year >= 69 else 2000

    tzinfo = _layout_tzinfo(fields)
    if tzinfo is None:
        return None

    try:
        return datetime.datetime(
            year,
            month,
            int(fields["day"]),
            int(fields.get("hour") or 0),
            int(fields.get("minute") or 0),
            int(fields.get("second") or 0),
            tzinfo=tzinfo,
        )
    except ValueError:
        return None


def parse_rss_timestamp(value: str) -> Optional[datetime.datetime]:
    """Resolve an RSS date string against the known layouts.

    Args:
        value: Date string from ``pubDate`` or ``lastBuildDate``.

    Returns:
        An aware datetime keeping the source's offset, or None when
        ``value`` is empty (the date is absent, which is not an error).

    Raises:
        BadTimestamp: If ``value`` is non-empty and no layout matches it.
    """
    if not value:
        return None

    for pattern, months in _RSS_LAYOUTS:
        match = pattern.fullmatch(value)
        if match is None:
            continue
        parsed = _layout_datetime(match, months)
        if parsed is not None:
            return parsed

    logger.debug("Unparsable RSS timestamp: %r", value)
    raise BadTimestamp(value)


def parse_atom_timestamp(value: str) -> Optional[datetime.datetime]:
    """Parse an RFC 3339 Atom timestamp; naive values are taken as UTC."""
    if not value:
        return None

    try:
        parsed = dateutil_parser.isoparse(value)
    except (ValueError, OverflowError):
        logger.debug("Unparsable Atom timestamp: %r", value)
        raise BadTimestamp(value) from None

    return parsed.replace(tzinfo=_UTC) if parsed.tzinfo is None else parsed
