"""CSV and clipboard renderings of the aggregation outputs."""

import csv
import io
from datetime import date

from aggregation import COLOR_GROUP_NAMES, get_group_value, monthly_stats
from dates import format_display_date
from shift_simulation import SHIFTS
from utils import format_number, percent, to_number


def _to_csv(headers, rows) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buf.getvalue()


def _num(value):
    number = to_number(value)
    return int(number) if number.is_integer() else number


def export_filename(prefix: str, today: date = None) -> str:
    today = today or date.today()
    return f"{prefix}_report_{today.isoformat()}.csv"


def production_csv(records, industry: str = None) -> str:
    """One row per record; per-unit exports add a column per colour group."""
    headers = ["Date", "Total Weight", "Inhouse", "Sub Contract"]
    if industry:
        headers += COLOR_GROUP_NAMES
    else:
        headers += ["Lantabur Total", "Taqwa Total"]

    rows = []
    for r in records:
        base = [format_display_date(r.date)]
        if industry:
            ind = r.industry(industry)
            rows.append(base + [
                _num(ind.total), _num(ind.inhouse), _num(ind.sub_contract),
                *[_num(get_group_value(ind.color_groups, name)) for name in COLOR_GROUP_NAMES],
            ])
        else:
            rows.append(base + [
                _num(r.total_production),
                _num(to_number(r.lantabur.inhouse) + to_number(r.taqwa.inhouse)),
                _num(to_number(r.lantabur.sub_contract) + to_number(r.taqwa.sub_contract)),
                _num(r.lantabur.total),
                _num(r.taqwa.total),
            ])
    return _to_csv(headers, rows)


def record_insight_csv(record, industry: str = None) -> str:
    """Category,Value breakdown of a single day."""
    units = [record.industry(industry)] if industry else [record.lantabur, record.taqwa]
    total = to_number(units[0].total) if industry else to_number(record.total_production)
    inhouse = sum(to_number(ind.inhouse) for ind in units)
    subcon = sum(to_number(ind.sub_contract) for ind in units)

    rows = [["Total", _num(total)], ["Inhouse", _num(inhouse)], ["Subcon", _num(subcon)]]
    for name in COLOR_GROUP_NAMES:
        rows.append([name, _num(sum(get_group_value(ind.color_groups, name) for ind in units))])
    return _to_csv(["Category", "Value"], rows)


def shift_csv(simulation) -> str:
    """The estimated shift table; figures rounded to whole kg."""
    headers = ["Date"]
    for key in SHIFTS:
        letter = key[-1].upper()
        headers += [f"Shift {letter} Output", f"Shift {letter} Repro"]
    headers.append("Daily Total")

    rows = []
    for h in (simulation or {}).get("rows", []):
        row = [h["date"]]
        for key in SHIFTS:
            row += [f"{h[key]['output']:.0f}", f"{h[key]['repro']:.0f}"]
        row.append(f"{h['total']:.0f}")
        rows.append(row)
    return _to_csv(headers, rows)


def _industry_block(record, records, industry: str) -> str:
    data = record.industry(industry)
    total = to_number(data.total)
    month = monthly_stats(records, record.date, industry)

    def share(val):
        return f"{percent(val, max(1, total)):.2f}"

    black = get_group_value(data.color_groups, "Black")
    average = get_group_value(data.color_groups, "Average")
    double_part = get_group_value(data.color_groups, "DOUBLE PART")
    white = get_group_value(data.color_groups, "White")
    royal = get_group_value(data.color_groups, "Royal")
    inhouse = to_number(data.inhouse)
    subcon = to_number(data.sub_contract)

    lines = [f"╰─> {industry.capitalize()} Data:", f"Total = {format_number(total)} kg"]
    if data.loading_cap:
        lines.append(f"Loading cap: {format_number(data.loading_cap)}%")
    lines += [
        f"Black: {format_number(black)} kg ({share(black)}%)",
        f"Average: {format_number(average)} kg ({share(average)}%)",
        f"Double Part: {format_number(double_part)} kg ({share(double_part)}%)",
    ]
    if royal > 0:
        lines.append(f"Royal: {format_number(royal)} kg ({share(royal)}%)")
    lines += [
        f"White: {format_number(white)} kg ({share(white)}%)",
        "",
        f"Inhouse: {format_number(inhouse)} kg ({share(inhouse)}%)",
        f"Sub Contract: {format_number(subcon)} kg ({share(subcon)}%)",
        "",
        f"Total this month: {format_number(month['total_month'])} kg",
        f"Avg/day: {format_number(month['avg_day'])} kg",
    ]
    return "\n".join(lines)


def clipboard_report(record, records, kind: str = "combined") -> str:
    """Plain-text day report for pasting into chat: 'lantabur', 'taqwa' or 'combined'."""
    text = f"Date: {format_display_date(record.date)}\n----------------------------\n"
    if kind == "combined":
        return text + _industry_block(record, records, "lantabur") + "\n\n" + _industry_block(record, records, "taqwa")
    return text + _industry_block(record, records, kind)
