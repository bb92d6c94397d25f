import csv
import io
import random
from datetime import date

from aggregation import COLOR_GROUP_NAMES
from export import clipboard_report, export_filename, production_csv, record_insight_csv, shift_csv
from factories import production_record
from shift_simulation import simulate_shift_performance


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def test_export_filename():
    assert export_filename("production", today=date(2024, 3, 9)) == "production_report_2024-03-09.csv"


def test_combined_production_csv():
    records = [production_record("2024-01-05", lantabur=1000, taqwa=500.5, sub_contract=100)]
    rows = _rows(production_csv(records))
    assert rows[0] == ["Date", "Total Weight", "Inhouse", "Sub Contract", "Lantabur Total", "Taqwa Total"]
    assert rows[1] == ["05 Jan 2024", "1500.5", "1400.5", "100", "1000", "500.5"]


def test_per_unit_production_csv_has_color_group_columns():
    records = [production_record("01 Jan 2024", taqwa=800, taqwa_groups={"Black": 500, "Double Part": 300})]
    rows = _rows(production_csv(records, industry="taqwa"))
    assert rows[0][4:] == COLOR_GROUP_NAMES
    values = dict(zip(rows[0], rows[1]))
    assert values["Total Weight"] == "800"
    assert values["Black"] == "500"
    assert values["DOUBLE PART"] == "300"
    assert values["White"] == "0"


def test_dates_with_commas_are_quoted():
    text = production_csv([production_record("unparsed, maybe")])
    assert '"unparsed, maybe"' in text
    assert _rows(text)[1][0] == "unparsed, maybe"


def test_record_insight_csv():
    record = production_record("01 Jan 2024", lantabur=1000, taqwa=500, lantabur_groups={"Black": 700})
    rows = _rows(record_insight_csv(record))
    assert rows[0] == ["Category", "Value"]
    assert rows[1] == ["Total", "1500"]
    assert ["Black", "700"] in rows

    lantabur_only = dict(_rows(record_insight_csv(record, industry="lantabur"))[1:])
    assert lantabur_only["Total"] == "1000"
    assert lantabur_only["Inhouse"] == "1000"


def test_shift_csv_rounds_to_whole_kg():
    view = simulate_shift_performance([production_record("01 Jan 2024", lantabur=1001, taqwa=0)], rng=random.Random(3))
    rows = _rows(shift_csv(view))
    assert rows[0] == [
        "Date", "Shift A Output", "Shift A Repro", "Shift B Output", "Shift B Repro",
        "Shift C Output", "Shift C Repro", "Daily Total",
    ]
    assert rows[1][0] == "01 Jan 2024"
    assert rows[1][1] == "450"
    assert rows[1][-1] == "1001"
    assert _rows(shift_csv(None)) == [rows[0]]


def test_clipboard_report_for_one_unit():
    records = [
        production_record("01 Jan 2024", lantabur=1000),
        production_record(
            "02 Jan 2024", lantabur=2000, sub_contract=500,
            lantabur_groups={"Black": 1000, "Average": 500, "Double Part": 400, "White": 100},
        ),
    ]
    text = clipboard_report(records[1], records, kind="lantabur")
    lines = text.splitlines()

    assert lines[0] == "Date: 02 Jan 2024"
    assert lines[1] == "----------------------------"
    assert lines[2] == "╰─> Lantabur Data:"
    assert "Total = 2,000 kg" in lines
    assert "Black: 1,000 kg (50.00%)" in lines
    assert "Double Part: 400 kg (20.00%)" in lines
    assert "Sub Contract: 500 kg (25.00%)" in lines
    assert "Total this month: 3,000 kg" in lines
    assert "Avg/day: 1,500 kg" in lines
    assert not any(line.startswith("Royal") for line in lines)
    assert "Taqwa" not in text


def test_clipboard_report_combined_lists_both_units():
    record = production_record("01 Jan 2024", loading_cap=87.5)
    text = clipboard_report(record, [record])
    assert "╰─> Lantabur Data:" in text
    assert "╰─> Taqwa Data:" in text
    assert "Loading cap: 87.5%" in text
