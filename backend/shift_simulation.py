"""Estimated shift performance.

There is no per-shift telemetry: each day's total is split across three shifts
in fixed proportions and a rework rate is sampled per shift band. Nothing here
is measured data, and every object it returns says so (``simulated: True``).
This is the only randomized part of the reporting code; pass a seeded
``random.Random`` for repeatable output.
"""

import random

from filters import sort_by_date
from utils import percent, to_number

MODEL_NAME = "fixed-split-45-35-20"
SHIFT_TARGET = 20000  # kg per shift

# shift key -> (label, share of the day, rework rate range)
SHIFTS = {
    "shift_a": ("Shift A (06:00 - 14:00)", 0.45, (0.02, 0.04)),
    "shift_b": ("Shift B (14:00 - 22:00)", 0.35, (0.03, 0.06)),
    "shift_c": ("Shift C (22:00 - 06:00)", 0.20, (0.05, 0.10)),
}


def simulate_day(record, rng: random.Random) -> dict:
    total = to_number(record.total_production)
    row = {"id": record.id, "date": record.date, "total": total, "simulated": True}
    for key, (_label, share, (low, high)) in SHIFTS.items():
        output = total * share
        row[key] = {
            "output": output,
            "repro": output * rng.uniform(low, high),
            "eff": percent(output, SHIFT_TARGET),
        }
    return row


def simulate_shift_performance(records, search_text: str = None, rng: random.Random = None):
    """Estimated shift table for the shift performance view, or None without records."""
    if not records:
        return None
    rng = rng or random.Random()

    ordered = sort_by_date(records, newest_first=False)
    history = [simulate_day(r, rng) for r in ordered]

    needle = (search_text or "").lower()
    filtered = [h for h in reversed(history) if needle in h["date"].lower()]
    latest = filtered[0] if filtered else history[-1]

    totals = {}
    for key in SHIFTS:
        totals[key] = {
            "output": sum(h[key]["output"] for h in filtered),
            "repro": sum(h[key]["repro"] for h in filtered),
        }

    return {
        "simulated": True,
        "model": MODEL_NAME,
        "shift_target": SHIFT_TARGET,
        "shifts": {key: label for key, (label, _share, _range) in SHIFTS.items()},
        "history": [
            {"date": h["date"], **{key: h[key]["output"] for key in SHIFTS}}
            for h in history[-30:]
        ],
        "rows": filtered,
        "latest": latest,
        "totals": totals,
    }
