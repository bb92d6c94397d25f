"""Report date normalization.

Report dates are typed by people or read off scanned sheets, so they arrive as
"01 Jan 2024", "15-Jan-24", "2024-01-15", "17/10/2026" and so on. Everything
that orders or windows records goes through this module.

Two-digit years are read as 20YY unconditionally; archival data from before
2000 (or after 2099) would be misdated.
"""

import logging
import re
from datetime import datetime

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                       "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
MONTHS = {abbr.lower(): i for i, abbr in enumerate(MONTH_ABBREVIATIONS, start=1)}

NATIVE_FORMATS = (
    "%d %b %Y",
    "%d %B %Y",
    "%d-%b-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d/%m/%Y",  # what the RFT editor writes (en-GB)
    "%Y/%m/%d",
)

_DELIMITERS = re.compile(r"[- ]")
_LEADING_INT = re.compile(r"^\s*(\d+)")


class DateParseError(ValueError):
    def __init__(self, text):
        super().__init__(f"Unrecognised report date: {text!r}")
        self.text = text


def _leading_int(token: str):
    match = _LEADING_INT.match(token)
    return int(match.group(1)) if match else None


def _parse_native(text: str):
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
    if parsed is not None:
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    for fmt in NATIVE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _parse_tokens(text: str):
    parts = _DELIMITERS.split(text)
    if len(parts) < 3:
        return None

    day = _leading_int(parts[0])
    month = MONTHS.get(parts[1].lower()[:3])
    year = _leading_int(parts[2])
    if day is None or month is None or year is None:
        return None
    if len(parts[2]) == 2:
        year += 2000

    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def parse_report_date(text) -> datetime:
    """Parse a report date, raising DateParseError when no strategy resolves it."""
    if text is None:
        raise DateParseError(text)
    cleaned = str(text).strip()
    if not cleaned:
        raise DateParseError(text)

    parsed = _parse_native(cleaned)
    if parsed is None:
        parsed = _parse_tokens(cleaned)
    if parsed is None:
        raise DateParseError(text)
    return parsed


def normalize_date(text, fallback: datetime = None) -> datetime:
    """Parse a report date, never raising.

    Unparseable text yields ``fallback``, or the current moment when no
    fallback is given. The failure is logged; a record dated "now" this way
    sorts as the newest one, so callers that care should use
    ``parse_report_date`` instead.
    """
    try:
        return parse_report_date(text)
    except DateParseError:
        logger.warning("Could not parse report date %r, using fallback", text)
        return fallback if fallback is not None else datetime.now()


def date_sort_key(record) -> datetime:
    return normalize_date(record.date)


def format_display_date(text, upper: bool = False) -> str:
    """Render a report date as "DD Mon YYYY" ("DD MON YYYY" when upper)."""
    try:
        d = parse_report_date(text)
    except DateParseError:
        return text
    month = MONTH_ABBREVIATIONS[d.month - 1]
    if upper:
        month = month.upper()
    return f"{d.day:02d} {month} {d.year}"
