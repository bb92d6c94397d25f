"""Search and date-range filtering for production and RFT record lists."""

from datetime import date, datetime, time
from typing import Iterable, List, Optional, Union

from dates import date_sort_key, format_display_date, normalize_date, parse_report_date

DateBound = Union[date, datetime, str, None]


def _bound_day(value: DateBound) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_report_date(value).date()


def sort_by_date(records: Iterable, newest_first: bool = True) -> List:
    return sorted(records, key=date_sort_key, reverse=newest_first)


def filter_records(
    records: Iterable,
    search_text: Optional[str] = None,
    start_date: DateBound = None,
    end_date: DateBound = None,
    newest_first: bool = True,
) -> List:
    """Filter records by raw date text and an inclusive day range, then sort by date.

    The text filter matches the stored date string, not its meaning:
    "15 Jan" finds "15 Jan 2024" but not "2024-01-15".
    """
    needle = (search_text or "").lower()
    start_day = _bound_day(start_date)
    end_day = _bound_day(end_date)
    start_at = datetime.combine(start_day, time.min) if start_day else None
    end_at = datetime.combine(end_day, time.max) if end_day else None

    matched = []
    for r in records:
        if needle and needle not in r.date.lower():
            continue
        if start_at or end_at:
            when = normalize_date(r.date)
            if start_at and when < start_at:
                continue
            if end_at and when > end_at:
                continue
        matched.append(r)

    return sort_by_date(matched, newest_first=newest_first)


def filter_by_month(
    records: Iterable,
    month: int,
    year: int,
    search_text: Optional[str] = None,
) -> List:
    """Records of one calendar month (1-12), newest first.

    The search text matches either the raw date or its "DD MON YYYY" rendering.
    """
    needle = (search_text or "").lower()
    matched = []
    for r in records:
        d = normalize_date(r.date)
        if d.month != month or d.year != year:
            continue
        if needle and needle not in r.date.lower() and needle not in format_display_date(r.date, upper=True).lower():
            continue
        matched.append(r)
    return sort_by_date(matched)
