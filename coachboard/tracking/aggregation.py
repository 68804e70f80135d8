# -*- coding: utf-8 -*-
"""Tracking — day-filled step / water series, stats and bar scaling."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..formatting import format_chart_label, parse_date, round_half_up

STEPS_FIELD = "step_count"
WATER_FIELD = "amount_ml"

DEFAULT_WATER_GOAL_ML = 2500
# Water bars never scale below one litre so small days stay readable.
WATER_CHART_FLOOR_ML = 1000
CHART_HEIGHT = 200
RECENT_DAYS = 7


def recent_range(ref: date, days: int = RECENT_DAYS) -> Tuple[date, date]:
    """The `days` most recent days ending at `ref` (overview cards)."""
    return ref - timedelta(days=days - 1), ref


def fill_days(entries: Sequence[Dict[str, Any]], start: date, end: date, field: str) -> List[Dict[str, Any]]:
    """One row per day in [start, end], newest first; days without an entry read 0."""
    by_day: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        key = str(entry.get("date") or "")[:10]
        if key and key not in by_day:
            by_day[key] = entry

    out: List[Dict[str, Any]] = []
    cur = end
    while cur >= start:
        key = cur.isoformat()
        entry = by_day.get(key)
        out.append(
            {
                "id": str(entry["id"]) if entry and entry.get("id") is not None else None,
                "date": key,
                "value": float((entry or {}).get(field) or 0),
                "placeholder": entry is None,
            }
        )
        cur -= timedelta(days=1)
    return out


def tracking_stats(days: Sequence[Dict[str, Any]], goal: Optional[float]) -> Dict[str, Any]:
    """Average / max / total over days with a non-zero reading."""
    tracked = [d["value"] for d in days if d["value"] > 0]
    total = sum(tracked)
    return {
        "average": round_half_up(total / len(tracked)) if tracked else 0,
        "max": max(tracked) if tracked else 0.0,
        "total": total,
        "days_tracked": len(tracked),
        "days_goal_met": len([v for v in tracked if v >= goal]) if goal else 0,
    }


def goal_bars(
    days: Sequence[Dict[str, Any]],
    goal: Optional[float],
    *,
    floor: float = 0,
    chart_height: int = CHART_HEIGHT,
) -> Dict[str, Any]:
    """Oldest-first bars scaled to the largest of the readings, the goal and `floor`."""
    ordered = sorted(days, key=lambda d: parse_date(d["date"]))
    max_value = max([d["value"] for d in ordered] + [float(goal or 0), float(floor)]) if ordered else 0.0

    bars: List[Dict[str, Any]] = []
    for day in ordered:
        height = day["value"] / max_value * chart_height if max_value > 0 else 0.0
        bars.append(
            {
                "date": day["date"],
                "label": format_chart_label(day["date"]),
                "value": day["value"],
                "height_px": round_half_up(height, 1),
                "met_goal": bool(goal) and day["value"] >= float(goal),
            }
        )

    offset = None
    if goal and max_value > 0:
        offset = round_half_up(chart_height - float(goal) / max_value * chart_height, 1)
    return {
        "chart_height": chart_height,
        "max_value": max_value,
        "goal": float(goal) if goal else None,
        "goal_offset_px": offset,
        "bars": bars,
    }


def litres_text(amount_ml: float) -> str:
    """`1500 -> "1.5L"`, `0 -> "0L"`."""
    if not amount_ml:
        return "0L"
    return f"{round_half_up(amount_ml / 100) / 10:g}L"
