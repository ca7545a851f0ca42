"""
VaultMerkle Field Normalizer.

Canonical text and timestamp forms for hashed fields. Cosmetic
differences between exports (spacing, Unicode composition, timestamp
layout) must not change a row's hash.
Requires Python 3.11+.
"""

import re
import unicodedata
import warnings
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

import pandas as pd
from dateutil import parser as dateutil_parser

from normalizer.fields import (
    WHITESPACE_CHARS,
    CanonicalField,
    HeaderBinding,
)
from utils.config import get_settings

# Canonical field name -> normalized value
NormalizedRow = dict[CanonicalField, str]

_WHITESPACE_RUN = re.compile(f"[{re.escape(WHITESPACE_CHARS)}]+")

_ISO_LIKE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:[ T](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,3}))?)?)?"
    r"(?: ?(Z|[+-]\d{2}:\d{2}))?$",
    re.IGNORECASE | re.ASCII,
)

# Free-form parsing would resolve these against the clock
_RELATIVE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})

# Missing date parts are filled from the current date; a text whose year
# differs between these defaults never stated one
_YEAR_PROBES = (datetime(2000, 1, 1), datetime(2001, 1, 1))


def normalize_text(value: object) -> str:
    """
    Trim, collapse whitespace runs to one space, then NFC-compose.

    None and empty input yield an empty string.
    """
    if value is None:
        return ""
    text = str(value).strip(WHITESPACE_CHARS)
    if not text:
        return ""
    return unicodedata.normalize("NFC", _WHITESPACE_RUN.sub(" ", text))


@lru_cache(maxsize=8)
def _zone(name: str) -> tzinfo:
    return ZoneInfo(name)


def _default_local_tz() -> tzinfo | None:
    name = get_settings().normalizer.local_timezone
    return _zone(name) if name else None


def _to_utc(moment: datetime, local_tz: tzinfo | None) -> datetime:
    if moment.tzinfo is None and local_tz is not None:
        moment = moment.replace(tzinfo=local_tz)
    # astimezone reads a still-naive datetime as process local time
    return moment.astimezone(timezone.utc)


def _parse_iso_like(text: str, local_tz: tzinfo | None) -> datetime | None:
    match = _ISO_LIKE.match(text)
    if match is None:
        return None

    year, month, day, hour, minute, second, fraction, zone = match.groups()
    millis = int(fraction.ljust(3, "0")[:3]) if fraction else 0
    try:
        moment = datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            millis * 1000,
        )
        if zone is None:
            return _to_utc(moment, local_tz)
        if zone.upper() == "Z":
            offset = timezone.utc
        else:
            sign = -1 if zone[0] == "-" else 1
            offset = timezone(
                sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
            )
        return moment.replace(tzinfo=offset).astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def _has_explicit_year(text: str) -> bool:
    """Whether the text names its own year rather than borrowing one."""
    try:
        first = dateutil_parser.parse(text, default=_YEAR_PROBES[0])
        second = dateutil_parser.parse(text, default=_YEAR_PROBES[1])
    except (ValueError, OverflowError):
        return False
    return first.year == second.year


def _parse_free_form(text: str, local_tz: tzinfo | None) -> datetime | None:
    if text.lower() in _RELATIVE_WORDS or not _has_explicit_year(text):
        return None
    with warnings.catch_warnings():
        # Format-inference and nanosecond-truncation notices
        warnings.simplefilter("ignore")
        try:
            stamp = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
        if stamp is None or pd.isna(stamp):
            return None
        try:
            return _to_utc(stamp.to_pydatetime(), local_tz)
        except (ValueError, OverflowError):
            return None


def parse_flexible_date(
    value: str, local_tz: tzinfo | None = None
) -> datetime | None:
    """
    Parse a timestamp from an export.

    ISO-like ``YYYY-MM-DD[ HH:MM[:SS[.fff]]][Z|+HH:MM]`` values are read
    strictly; values without an offset are wall-clock time in
    ``local_tz`` (the configured zone, else the process local zone).
    Anything else goes through the pandas free-form parser.

    Args:
        value: Normalized text of the cell
        local_tz: Zone for timestamps without an offset

    Returns:
        Aware UTC datetime, or None if unparseable
    """
    if local_tz is None:
        local_tz = _default_local_tz()
    parsed = _parse_iso_like(value, local_tz)
    if parsed is None:
        parsed = _parse_free_form(value, local_tz)
    return parsed


def format_utc_iso(moment: datetime) -> str:
    """Render as ``YYYY-MM-DDTHH:MM:SS[.fff]Z``; zero milliseconds are omitted."""
    moment = moment.astimezone(timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    millis = moment.microsecond // 1000
    if millis:
        text += f".{millis:03d}"
    return text + "Z"


def normalize_date(value: object, local_tz: tzinfo | None = None) -> str:
    """Normalize a timestamp cell; unparseable values become empty."""
    text = normalize_text(value)
    if not text:
        return ""
    parsed = parse_flexible_date(text, local_tz)
    if parsed is None:
        return ""
    return format_utc_iso(parsed)


def normalize_field(
    canonical: CanonicalField | str,
    raw_value: object,
    local_tz: tzinfo | None = None,
) -> str:
    """
    Normalize one raw cell according to its field kind.

    Args:
        canonical: Field the value belongs to
        raw_value: Raw cell value (may be None)
        local_tz: Zone for unzoned timestamps

    Returns:
        Canonical string form, never raises
    """
    if CanonicalField.parse(canonical) is CanonicalField.LAST_MODIFIED:
        return normalize_date(raw_value, local_tz)
    return normalize_text(raw_value)


def normalize_row(
    raw_row: Mapping[str, str],
    bindings: Iterable[HeaderBinding],
    local_tz: tzinfo | None = None,
) -> NormalizedRow:
    """
    Normalize the bound fields of a raw row.

    Args:
        raw_row: Header -> raw cell mapping
        bindings: Selected, bound fields
        local_tz: Zone for unzoned timestamps

    Returns:
        Canonical field -> normalized value
    """
    normalized: NormalizedRow = {}
    for binding in bindings:
        if binding.header_name is None:
            continue
        normalized[binding.canonical] = normalize_field(
            binding.canonical, raw_row.get(binding.header_name), local_tz
        )
    return normalized
