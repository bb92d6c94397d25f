"""Aggregation engine: record lists in, dashboard numbers out.

Every function here is pure. "Current" periods are anchored on the most recent
record's date rather than the wall clock, so a dataset that lags the calendar
still shows a populated month/week. Empty input gives None (summaries) or
zeros (totals); divisions go through utils.safe_div.
"""

import calendar
from datetime import date, datetime, time, timedelta

from dates import normalize_date
from utils import percent, round2, safe_div, to_number

# Fixed per-kg rates
RATE_LANTABUR = 1.25   # USD
RATE_TAQWA = 1.18      # USD
WATER_PER_KG = 45      # litres
CO2_PER_KG = 2.3       # kg CO2
DAILY_TARGET = 60000   # kg, both units combined

INDUSTRIES = ("lantabur", "taqwa")

COLOR_GROUP_NAMES = [
    "100% Polyester", "Average", "Black", "Dark", "Extra Dark",
    "DOUBLE PART", "Light", "Medium", "N/wash", "Royal", "White",
]
DOUBLE_PART = "DOUBLE PART"
DOUBLE_PART_SOURCES = ("Double Part", "Double Part -Black")

OPERATORS = ("yousuf", "humayun")
BULK_DYEING = "B/D CARD"
LAB_DYEING = "LAB"
MISC_GROUP = "Misc"


def _dated(records):
    """(normalized date, record) pairs, newest first, each date parsed once."""
    pairs = [(normalize_date(r.date), r) for r in records]
    pairs.sort(key=lambda pair: pair[0], reverse=True)
    return pairs


def _week_start(ref):
    """Midnight of the Sunday on or before ref."""
    days_since_sunday = (ref.weekday() + 1) % 7
    start = ref - timedelta(days=days_since_sunday)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


# ---------------- PRODUCTION ----------------

def get_group_value(groups, name: str) -> float:
    """Weight of one colour group; "DOUBLE PART" merges its two source labels."""
    if name == DOUBLE_PART:
        return sum(get_group_value(groups, source) for source in DOUBLE_PART_SOURCES)
    for g in groups:
        if g.group_name == name:
            return to_number(g.weight)
    return 0.0


def growth_rate(latest: float, previous) -> float:
    """Percent change versus the previous value.

    The denominator is floored at 1, so growth from 0 to 100 reads 10000%
    rather than failing. No previous value means no growth.
    """
    if previous is None:
        return 0.0
    return (latest - previous) / max(1, previous) * 100


def revenue(record) -> float:
    return (to_number(record.lantabur.total) * RATE_LANTABUR
            + to_number(record.taqwa.total) * RATE_TAQWA)


def environmental_impact(total_weight: float) -> dict:
    return {
        "water": total_weight * WATER_PER_KG,
        "co2": total_weight * CO2_PER_KG,
    }


def dashboard_summary(records):
    """Headline numbers for the dashboard, or None when there are no records."""
    if not records:
        return None

    dated = _dated(records)
    ref, latest = dated[0]
    previous = dated[1][1] if len(dated) > 1 else None
    week_start = _week_start(ref)

    brand_stats = {
        name: {
            "today": to_number(latest.industry(name).total),
            "week": 0.0,
            "month": 0.0,
            "year": 0.0,
            "lifetime": 0.0,
            "avg_day": 0.0,
            "month_count": 0,
        }
        for name in INDUSTRIES
    }
    week_weight = month_weight = year_weight = total_weight = 0.0
    month_count = 0

    for d, r in dated:
        weight = to_number(r.total_production)
        in_week = week_start <= d <= ref
        in_year = d.year == ref.year
        in_month = in_year and d.month == ref.month

        total_weight += weight
        if in_week:
            week_weight += weight
        if in_month:
            month_weight += weight
            month_count += 1
        if in_year:
            year_weight += weight

        for name in INDUSTRIES:
            value = to_number(r.industry(name).total)
            stats = brand_stats[name]
            stats["lifetime"] += value
            if in_week:
                stats["week"] += value
            if in_month:
                stats["month"] += value
                stats["month_count"] += 1
            if in_year:
                stats["year"] += value

    for stats in brand_stats.values():
        stats["avg_day"] = safe_div(stats["month"], stats["month_count"])

    latest_total = to_number(latest.total_production)
    latest_revenue = revenue(latest)
    if previous is not None:
        growth_weight = growth_rate(latest_total, to_number(previous.total_production))
        growth_revenue = growth_rate(latest_revenue, revenue(previous))
    else:
        growth_weight = growth_revenue = 0.0

    impact = environmental_impact(total_weight)

    return {
        "latest_id": latest.id,
        "latest_date": latest.date,
        "reference_date": ref.date().isoformat(),
        "record_count": len(dated),
        "latest_total": latest_total,
        "latest_revenue": latest_revenue,
        "growth_weight": growth_weight,
        "growth_revenue": growth_revenue,
        "week_weight": week_weight,
        "month_weight": month_weight,
        "year_weight": year_weight,
        "total_weight": total_weight,
        "month_count": month_count,
        "avg_day": safe_div(month_weight, month_count),
        "month_name": calendar.month_name[ref.month],
        "ref_year": ref.year,
        "brand_stats": brand_stats,
        "total_water": impact["water"],
        "total_co2": impact["co2"],
        "daily_target": DAILY_TARGET,
        "target_progress": min(100.0, percent(latest_total, DAILY_TARGET)),
        "shortfall": max(0.0, DAILY_TARGET - latest_total),
        "lantabur_share": percent(to_number(latest.lantabur.total), latest_total),
        "taqwa_share": percent(to_number(latest.taqwa.total), latest_total),
    }


def production_totals(records, industry: str = None) -> dict:
    """Summed figures over an already-filtered record list.

    With no industry the colour groups and inhouse/sub-contract figures cover
    both units; otherwise only the named unit.
    """
    stats = {
        "lantabur_total": 0.0,
        "taqwa_total": 0.0,
        "combined_total": 0.0,
        "industry_total": 0.0,
        "inhouse": 0.0,
        "sub_contract": 0.0,
        "color_groups": {name: 0.0 for name in COLOR_GROUP_NAMES},
        "record_count": 0,
    }

    for r in records:
        stats["record_count"] += 1
        stats["lantabur_total"] += to_number(r.lantabur.total)
        stats["taqwa_total"] += to_number(r.taqwa.total)
        stats["combined_total"] += to_number(r.total_production)

        units = [r.industry(industry)] if industry else [r.lantabur, r.taqwa]
        for ind in units:
            if industry:
                stats["industry_total"] += to_number(ind.total)
            stats["inhouse"] += to_number(ind.inhouse)
            stats["sub_contract"] += to_number(ind.sub_contract)
            for name in COLOR_GROUP_NAMES:
                stats["color_groups"][name] += get_group_value(ind.color_groups, name)

    stats["avg_per_record"] = safe_div(stats["combined_total"], stats["record_count"])
    return stats


def monthly_stats(records, reference_date: str, industry: str) -> dict:
    """Month total and per-day average of one unit, for the month of reference_date."""
    target = normalize_date(reference_date)
    total_month = 0.0
    day_count = 0
    for r in records:
        d = normalize_date(r.date)
        if d.year == target.year and d.month == target.month:
            total_month += to_number(r.industry(industry).total)
            day_count += 1
    return {
        "total_month": total_month,
        "avg_day": safe_div(total_month, day_count),
        "day_count": day_count,
    }


def color_group_breakdown(record, industry: str = None) -> dict:
    """One day's colour groups (non-zero only), heaviest first, with share of the day."""
    if industry:
        ind = record.industry(industry)
        total = to_number(ind.total)
        inhouse = to_number(ind.inhouse)
        sub_contract = to_number(ind.sub_contract)
        values = {name: get_group_value(ind.color_groups, name) for name in COLOR_GROUP_NAMES}
    else:
        total = to_number(record.total_production)
        inhouse = to_number(record.lantabur.inhouse) + to_number(record.taqwa.inhouse)
        sub_contract = to_number(record.lantabur.sub_contract) + to_number(record.taqwa.sub_contract)
        values = {
            name: get_group_value(record.lantabur.color_groups, name)
            + get_group_value(record.taqwa.color_groups, name)
            for name in COLOR_GROUP_NAMES
        }

    groups = [
        {"group": name, "weight": weight, "share": round2(percent(weight, total))}
        for name, weight in values.items()
        if weight > 0
    ]
    groups.sort(key=lambda g: g["weight"], reverse=True)

    return {
        "date": record.date,
        "industry": industry or "combined",
        "total": total,
        "inhouse": inhouse,
        "sub_contract": sub_contract,
        "groups": groups,
    }


def production_trend(records, limit: int = 30) -> list:
    """Oldest-first chart feed of the most recent `limit` records."""
    ordered = [r for _d, r in reversed(_dated(records))]
    if limit and limit > 0:
        ordered = ordered[-limit:]
    return [
        {
            "date": r.date,
            "lantabur": to_number(r.lantabur.total),
            "taqwa": to_number(r.taqwa.total),
            "total": to_number(r.total_production),
        }
        for r in ordered
    ]


# ---------------- RFT ----------------

def rft_percentages(entries) -> dict:
    """Right-first-time percentages of a day's batches, split bulk vs lab."""
    bulk = [e for e in entries if BULK_DYEING in (e.dyeing_type or "").upper()]
    lab = [e for e in entries if LAB_DYEING in (e.dyeing_type or "").upper()]
    return {
        "bulk_rft": percent(sum(1 for e in bulk if e.shade_ok), len(bulk)),
        "lab_rft": percent(sum(1 for e in lab if e.shade_ok), len(lab)),
        "bulk_total": len(bulk),
        "lab_total": len(lab),
    }


def refresh_rft_percentages(report):
    """Copy of the report with its cached RFT percentages recomputed from entries."""
    perf = rft_percentages(report.entries)
    return report.model_copy(update={
        "bulk_rft_percent": round2(perf["bulk_rft"]),
        "lab_rft_percent": round2(perf["lab_rft"]),
    })


def _operator_entries(entries, operator: str):
    needle = operator.upper()
    return [e for e in entries if needle in (e.shift_unload or "").upper()]


def operator_breakdown(entries, operator: str, operator_total: float = None) -> list:
    """Colour-group qty and batch count for one operator's unloads, heaviest first.

    Shares are relative to operator_total (the reported shift qty) when given,
    otherwise to the sum of the operator's batches.
    """
    groups = {}
    for e in _operator_entries(entries, operator):
        name = e.color_group or MISC_GROUP
        bucket = groups.setdefault(name, {"group": name, "qty": 0.0, "count": 0})
        bucket["qty"] += to_number(e.f_qty)
        bucket["count"] += 1

    rows = sorted(groups.values(), key=lambda g: g["qty"], reverse=True)
    if operator_total is None:
        whole = sum(g["qty"] for g in rows)
    else:
        whole = max(1, to_number(operator_total))
    for g in rows:
        g["share"] = round(percent(g["qty"], whole), 1)
    return rows


def derive_shift_totals(entries) -> dict:
    """Per-operator qty and batch count computed from the entries themselves."""
    performance = {}
    count = {}
    for op in OPERATORS:
        matched = _operator_entries(entries, op)
        performance[op] = sum(to_number(e.f_qty) for e in matched)
        count[op] = len(matched)
    return {"shift_performance": performance, "shift_count": count}


def rft_entry_totals(entries) -> dict:
    entries = list(entries)
    return {
        "batch_count": len(entries),
        "total_qty": sum(to_number(e.f_qty) for e in entries),
        "avg_load": safe_div(sum(to_number(e.load_cap_percent) for e in entries), len(entries)),
        "ok_count": sum(1 for e in entries if e.shade_ok),
        "not_ok_count": sum(1 for e in entries if e.shade_not_ok),
        "pending_count": sum(1 for e in entries if not e.shade_ok and not e.shade_not_ok),
    }


def _rft_period(records) -> dict:
    if not records:
        return {"bulk": 0.0, "lab": 0.0, "batches": 0, "days": 0}
    return {
        "bulk": safe_div(sum(to_number(r.bulk_rft_percent) for r in records), len(records)),
        "lab": safe_div(sum(to_number(r.lab_rft_percent) for r in records), len(records)),
        "batches": sum(len(r.entries) for r in records),
        "days": len(records),
    }


def rft_summary(records, anchor: date = None):
    """Today / month / year / lifetime RFT averages, or None without records.

    Periods are anchored on the latest record's date, like the production
    dashboard, unless an explicit anchor date or datetime is given.
    """
    if not records:
        return None

    dated = _dated(records)
    latest_at, latest = dated[0]
    ref = anchor or latest_at
    if not isinstance(ref, datetime):
        ref = datetime.combine(ref, time.min)

    this_month = [r for d, r in dated if d.year == ref.year and d.month == ref.month]
    this_year = [r for d, r in dated if d.year == ref.year]

    return {
        "anchor": ref.date().isoformat(),
        "today": {
            "bulk": to_number(latest.bulk_rft_percent),
            "lab": to_number(latest.lab_rft_percent),
            "batches": len(latest.entries),
            "date": latest.date,
        },
        "this_month": _rft_period(this_month),
        "this_year": _rft_period(this_year),
        "total": _rft_period([r for _d, r in dated]),
    }


def rft_insight(report) -> dict:
    """Everything the single-report view shows below the batch table."""
    perf = rft_percentages(report.entries)
    return {
        "id": report.id,
        "date": report.date,
        "totals": rft_entry_totals(report.entries),
        "bulk_rft": round2(perf["bulk_rft"]),
        "lab_rft": round2(perf["lab_rft"]),
        "bulk_total": perf["bulk_total"],
        "lab_total": perf["lab_total"],
        "shift_source": report.shift_source,
        "operators": {
            op: {
                "qty": to_number(getattr(report.shift_performance, op)),
                "batches": to_number(getattr(report.shift_count, op)),
                "color_groups": operator_breakdown(
                    report.entries, op, getattr(report.shift_performance, op)
                ),
            }
            for op in OPERATORS
        },
    }
