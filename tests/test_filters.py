from datetime import date

import pytest

from dates import DateParseError
from factories import production_record, rft_record
from filters import filter_by_month, filter_records, sort_by_date


def _dates(records):
    return [r.date for r in records]


def test_search_matches_literal_date_text_case_insensitively():
    records = [
        production_record("15 Jan 2024"),
        production_record("15 jan 2023"),
        production_record("2024-01-15"),
        production_record("16 Jan 2024"),
    ]
    result = filter_records(records, search_text="15 Jan")
    assert sorted(_dates(result)) == ["15 Jan 2024", "15 jan 2023"]


def test_range_is_inclusive_of_whole_end_day():
    records = [
        production_record("14 Jan 2024"),
        production_record("15 Jan 2024"),
        production_record("2024-01-31T18:30:00"),
        production_record("01 Feb 2024"),
    ]
    result = filter_records(records, start_date=date(2024, 1, 15), end_date="2024-01-31")
    assert _dates(result) == ["2024-01-31T18:30:00", "15 Jan 2024"]


def test_open_bounds_impose_no_constraint():
    records = [production_record("01 Jan 2024"), production_record("01 Jan 2025")]
    assert len(filter_records(records, start_date="2024-06-01")) == 1
    assert len(filter_records(records, end_date="2024-06-01")) == 1
    assert len(filter_records(records)) == 2


def test_ordering_newest_first_by_default_and_ascending_on_request():
    records = [
        production_record("02 Jan 2024"),
        production_record("10 Jan 2024"),
        production_record("01 Jan 2024"),
    ]
    assert _dates(filter_records(records)) == ["10 Jan 2024", "02 Jan 2024", "01 Jan 2024"]
    assert _dates(filter_records(records, newest_first=False)) == ["01 Jan 2024", "02 Jan 2024", "10 Jan 2024"]
    assert _dates(sort_by_date(records, newest_first=False))[0] == "01 Jan 2024"


def test_unparseable_bound_raises():
    with pytest.raises(DateParseError):
        filter_records([production_record("01 Jan 2024")], start_date="someday")


def test_filter_by_month_matches_raw_or_formatted_text():
    records = [
        rft_record("2024-01-05"),
        rft_record("20/01/2024"),
        rft_record("05 Feb 2024"),
    ]
    january = filter_by_month(records, 1, 2024)
    assert _dates(january) == ["20/01/2024", "2024-01-05"]

    assert _dates(filter_by_month(records, 1, 2024, search_text="05 JAN")) == ["2024-01-05"]
    assert _dates(filter_by_month(records, 1, 2024, search_text="20/01")) == ["20/01/2024"]
    assert filter_by_month(records, 3, 2024) == []
