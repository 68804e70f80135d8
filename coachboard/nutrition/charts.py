# -*- coding: utf-8 -*-
"""Nutrition — chart geometry (macro donut, calorie bars, progress rings).

Everything here is pure: SVG-ready numbers computed from aggregated days.
The donut uses the usual r=15.9155 circle, whose circumference is 100, so
a dasharray of "p, 100" draws exactly p percent.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

from ..formatting import parse_date, round_half_up

DONUT_RADIUS = 15.9155
DONUT_PATH = (
    "M18 2.0845 "
    "a 15.9155 15.9155 0 0 1 0 31.831 "
    "a 15.9155 15.9155 0 0 1 0 -31.831"
)

MACRO_COLORS = {
    "protein": "#ef4444",
    "carbs": "#eab308",
    "fat": "#3b82f6",
}
MACRO_LABELS = {
    "protein": "Protein",
    "carbs": "Carbs",
    "fat": "Fat",
}

CHART_HEIGHT = 200


def _wedge_path(start_pct: float, end_pct: float, cx: float = 50, cy: float = 50, r: float = 40) -> str:
    """Pie wedge from the 12 o'clock position, clockwise."""
    start = math.radians(start_pct * 3.6 - 90)
    end = math.radians(end_pct * 3.6 - 90)
    x1, y1 = cx + r * math.cos(start), cy + r * math.sin(start)
    x2, y2 = cx + r * math.cos(end), cy + r * math.sin(end)
    large_arc = 1 if end_pct - start_pct > 50 else 0
    return (
        f"M {cx} {cy} L {x1:.3f} {y1:.3f} "
        f"A {r} {r} 0 {large_arc} 1 {x2:.3f} {y2:.3f} Z"
    )


def macro_breakdown(protein: float, carbs: float, fat: float) -> Optional[Dict[str, Any]]:
    """Gram shares of each macro as donut segments; None when nothing was logged."""
    total = (protein or 0) + (carbs or 0) + (fat or 0)
    if total <= 0:
        return None

    grams = {"protein": protein or 0, "carbs": carbs or 0, "fat": fat or 0}
    pcts = {k: round_half_up(v / total * 100) for k, v in grams.items()}

    slices: List[Dict[str, Any]] = []
    offset = 0
    for key in ("protein", "carbs", "fat"):
        pct = pcts[key]
        slices.append(
            {
                "key": key,
                "label": MACRO_LABELS[key],
                "grams": round_half_up(grams[key], 1),
                "percentage": pct,
                "color": MACRO_COLORS[key],
                "dasharray": f"{pct}, 100",
                "dashoffset": float(-offset),
                "path": _wedge_path(offset, offset + pct) if pct else None,
            }
        )
        offset += pct
    return {"total": round_half_up(total, 1), "slices": slices}


def progress_ring(percentage: float, size: int = 120, stroke: int = 8) -> Dict[str, float]:
    pct = min(max(percentage or 0, 0), 100)
    radius = (size - stroke) / 2
    circumference = 2 * math.pi * radius
    return {
        "size": size,
        "stroke": stroke,
        "radius": radius,
        "circumference": circumference,
        "dash": pct * circumference / 100,
        "dashoffset": circumference - pct / 100 * circumference,
    }


def calorie_bars(
    days: Sequence[Dict[str, Any]],
    target: Optional[float] = None,
    *,
    chart_height: int = CHART_HEIGHT,
) -> Dict[str, Any]:
    """Bar heights scaled to the larger of the biggest day and the target."""
    calories = [float(d.get("total_calories") or 0) for d in days]
    max_calories = max(calories + [float(target or 0)]) if (calories or target) else 0.0

    bars: List[Dict[str, Any]] = []
    for day, cal in zip(days, calories):
        height = cal / max_calories * chart_height if max_calories > 0 else 0.0
        bars.append(
            {
                "date": day["date"],
                "label": parse_date(day["date"]).strftime("%a %d"),
                "calories": round_half_up(cal),
                "height_px": round_half_up(height, 1),
                "met_target": bool(target) and cal >= float(target),
            }
        )

    offset = None
    if target and max_calories > 0:
        offset = round_half_up(chart_height - float(target) / max_calories * chart_height, 1)

    return {
        "chart_height": chart_height,
        "max_calories": max_calories,
        "target_calories": float(target) if target else None,
        "target_offset_px": offset,
        "bars": bars,
    }
