from datetime import date, datetime

import pytest

from aggregation import (
    derive_shift_totals,
    operator_breakdown,
    refresh_rft_percentages,
    rft_entry_totals,
    rft_insight,
    rft_percentages,
    rft_summary,
)
from factories import rft_entry, rft_record
from schemas import RFTBatchEntry, RFTReportRecord, ShadeStatus


def test_bulk_and_lab_rft():
    entries = [
        rft_entry("B/D CARD", ok=True),
        rft_entry("B/D CARD", ok=False),
        rft_entry("LAB", ok=True),
    ]
    perf = rft_percentages(entries)
    assert perf["bulk_rft"] == 50
    assert perf["lab_rft"] == 100
    assert perf["bulk_total"] == 2
    assert perf["lab_total"] == 1


def test_empty_partitions_are_zero_not_nan():
    assert rft_percentages([]) == {"bulk_rft": 0, "lab_rft": 0, "bulk_total": 0, "lab_total": 0}
    perf = rft_percentages([rft_entry("LAB", ok=False)])
    assert perf["bulk_rft"] == 0
    assert perf["lab_rft"] == 0


def test_dyeing_type_match_is_case_insensitive_substring():
    perf = rft_percentages([rft_entry("b/d card (re)", ok=True), rft_entry("Lab dip", ok=True)])
    assert perf["bulk_total"] == 1
    assert perf["lab_total"] == 1


def test_pending_shade_does_not_count_as_ok():
    pending = RFTBatchEntry(dyeing_type="B/D CARD")
    assert pending.shade == ShadeStatus.PENDING
    assert rft_percentages([pending, rft_entry(ok=True)])["bulk_rft"] == 50


def test_refresh_rounds_to_two_decimals():
    record = rft_record("01 Jan 2024", entries=[
        rft_entry(ok=True), rft_entry(ok=True), rft_entry(ok=False),
    ], bulk=12.0)
    refreshed = refresh_rft_percentages(record)
    assert refreshed.bulk_rft_percent == 66.67
    assert refreshed.lab_rft_percent == 0
    assert record.bulk_rft_percent == 12.0


@pytest.mark.parametrize("payload,expected", [
    ({"shadeOk": True, "shadeNotOk": False}, ShadeStatus.OK),
    ({"shadeOk": True, "shadeNotOk": True}, ShadeStatus.OK),
    ({"shadeOk": False, "shadeNotOk": True}, ShadeStatus.NOT_OK),
    ({"shadeOk": False, "shadeNotOk": False}, ShadeStatus.PENDING),
    ({}, ShadeStatus.PENDING),
    ({"shade": "not_ok", "shadeOk": True}, ShadeStatus.NOT_OK),
    ({"shadeOk": "false", "shadeNotOk": "false"}, ShadeStatus.PENDING),
    ({"shadeOk": "false", "shadeNotOk": "TRUE"}, ShadeStatus.NOT_OK),
    ({"shadeOk": "true"}, ShadeStatus.OK),
    ({"shadeOk": "yes"}, ShadeStatus.PENDING),
])
def test_legacy_shade_flags_become_a_single_status(payload, expected):
    assert RFTBatchEntry.model_validate(payload).shade == expected


def test_entry_nulls_are_tolerated():
    entry = RFTBatchEntry.model_validate({"fQty": None, "batchNo": 1234, "colorGroup": None})
    assert entry.f_qty == 0
    assert entry.batch_no == "1234"
    assert entry.color_group == ""


def test_operator_breakdown_groups_and_sorts():
    entries = [
        rft_entry(shift="Yousuf", group="Black", qty=300),
        rft_entry(shift="YOUSUF (A)", group="White", qty=100),
        rft_entry(shift="yousuf", group="Black", qty=200),
        rft_entry(shift="YOUSUF", group="", qty=50),
        rft_entry(shift="HUMAYUN", group="Black", qty=999),
    ]
    rows = operator_breakdown(entries, "yousuf", operator_total=1000)
    assert [r["group"] for r in rows] == ["Black", "White", "Misc"]
    assert rows[0]["qty"] == 500
    assert rows[0]["count"] == 2
    assert rows[0]["share"] == 50.0
    assert rows[2]["share"] == 5.0


def test_operator_breakdown_without_total_uses_own_sum():
    entries = [rft_entry(shift="HUMAYUN", qty=1), rft_entry(shift="HUMAYUN", group="Dark", qty=2)]
    rows = operator_breakdown(entries, "humayun")
    assert rows[0] == {"group": "Dark", "qty": 2, "count": 1, "share": 66.7}
    assert operator_breakdown([], "humayun") == []


def test_derive_shift_totals():
    entries = [
        rft_entry(shift="YOUSUF", qty=100),
        rft_entry(shift="YOUSUF", qty=50),
        rft_entry(shift="HUMAYUN", qty=70),
        rft_entry(shift="DAY", qty=500),
    ]
    derived = derive_shift_totals(entries)
    assert derived["shift_performance"] == {"yousuf": 150, "humayun": 70}
    assert derived["shift_count"] == {"yousuf": 2, "humayun": 1}


def test_rft_entry_totals():
    entries = [
        rft_entry(ok=True, qty=100, load=80),
        rft_entry(ok=False, qty=50, load=60),
        RFTBatchEntry(f_qty=10, load_cap_percent=100),
    ]
    totals = rft_entry_totals(entries)
    assert totals["batch_count"] == 3
    assert totals["total_qty"] == 160
    assert totals["avg_load"] == 80
    assert (totals["ok_count"], totals["not_ok_count"], totals["pending_count"]) == (1, 1, 1)
    assert rft_entry_totals([])["avg_load"] == 0


def test_rft_summary_periods_anchor_on_latest_record():
    records = [
        rft_record("10 Mar 2021", bulk=80, lab=100, entries=[rft_entry()]),
        rft_record("20 Mar 2021", bulk=90, lab=50, entries=[rft_entry(), rft_entry()]),
        rft_record("01 Jan 2021", bulk=70, lab=0),
        rft_record("31 Dec 2020", bulk=10, lab=10),
    ]
    summary = rft_summary(records)

    assert summary["anchor"] == "2021-03-20"
    assert summary["today"] == {"bulk": 90, "lab": 50, "batches": 2, "date": "20 Mar 2021"}
    assert summary["this_month"] == {"bulk": 85, "lab": 75, "batches": 3, "days": 2}
    assert summary["this_year"]["days"] == 3
    assert summary["this_year"]["bulk"] == pytest.approx(80)
    assert summary["total"]["days"] == 4
    assert summary["total"]["bulk"] == pytest.approx(62.5)


def test_rft_summary_with_explicit_anchor_and_empty_input():
    records = [rft_record("20 Mar 2021", bulk=90), rft_record("05 Feb 2021", bulk=40)]
    summary = rft_summary(records, anchor=datetime(2021, 2, 15))
    assert summary["this_month"]["bulk"] == 40
    assert summary["today"]["bulk"] == 90
    assert rft_summary([]) is None


def test_rft_insight_uses_reported_shift_totals():
    report = RFTReportRecord.model_validate({
        "date": "01 Jan 2024",
        "entries": [
            {"dyeingType": "B/D CARD", "shadeOk": True, "shiftUnload": "YOUSUF", "colorGroup": "Black", "fQty": 400},
            {"dyeingType": "LAB", "shadeNotOk": True, "shiftUnload": "HUMAYUN", "fQty": 10},
        ],
        "shiftPerformance": {"yousuf": 800, "humayun": 10},
        "shiftCount": {"yousuf": 3, "humayun": 1},
    })
    insight = rft_insight(report)
    assert insight["bulk_rft"] == 100
    assert insight["lab_rft"] == 0
    assert insight["operators"]["yousuf"]["qty"] == 800
    assert insight["operators"]["yousuf"]["color_groups"][0]["share"] == 50.0
    assert insight["operators"]["humayun"]["color_groups"][0]["group"] == "Misc"
    assert insight["totals"]["batch_count"] == 2


def test_rft_summary_accepts_a_plain_date_anchor():
    records = [rft_record("20 Mar 2021", bulk=90), rft_record("05 Feb 2021", bulk=40)]
    summary = rft_summary(records, anchor=date(2021, 2, 15))
    assert summary["anchor"] == "2021-02-15"
    assert summary["this_month"]["bulk"] == 40
