# -*- coding: utf-8 -*-
"""Check-ins — in-memory aggregation (stats, series, comparison, labels)."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..formatting import days_between, format_delta, format_short_date, parse_date

NOTES_PREVIEW_CHARS = 30

ADHERENCE_COLORS: Dict[str, str] = {
    "Perfect": "#22C55E",
    "Good": "#84CC16",
    "Average": "#F59E0B",
    "Poor": "#F97316",
    "Off Track": "#EF4444",
}
DEFAULT_ADHERENCE_COLOR = "#6B7280"

# (key, label, unit, lower_is_better)
BODY_ROWS: Tuple[Tuple[str, str, str, bool], ...] = (
    ("weight_kg", "Weight", "kg", False),
    ("body_fat_percentage", "Body Fat %", "%", True),
    ("waist_cm", "Waist", "cm", False),
    ("hip_cm", "Hip", "cm", False),
    ("chest_cm", "Chest", "cm", False),
    ("left_arm_cm", "Left Arm", "cm", False),
    ("right_arm_cm", "Right Arm", "cm", False),
    ("left_thigh_cm", "Left Thigh", "cm", False),
    ("right_thigh_cm", "Right Thigh", "cm", False),
)

WELLNESS_ROWS: Tuple[Tuple[str, str, str, bool], ...] = (
    ("sleep_hours", "Sleep Hours", "hrs", False),
    ("sleep_quality", "Sleep Quality", "/5", False),
    ("stress_level", "Stress Level", "/5", True),
    ("fatigue_level", "Fatigue Level", "/5", True),
    ("motivation_level", "Motivation Level", "/5", False),
)


def first_or_none(value: Any) -> Optional[Dict[str, Any]]:
    """Embedded one-to-one relations arrive as a list, an object or null."""
    if isinstance(value, list):
        return dict(value[0]) if value else None
    if isinstance(value, dict):
        return dict(value)
    return None


def normalize_check_in(row: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(row)
    out["photos"] = [p for p in (row.get("photos") or []) if p]
    out["body_metrics"] = first_or_none(row.get("body_metrics"))
    out["wellness_metrics"] = first_or_none(row.get("wellness_metrics"))
    return out


def period_range(timeframe: str, ref: date) -> Tuple[Optional[date], Optional[date]]:
    """Inclusive date window for a check-in timeframe; `all` is unbounded."""
    if timeframe == "week":
        # The check-in "week" view covers the last 30 days.
        return ref - timedelta(days=30), ref
    if timeframe == "month":
        last = calendar.monthrange(ref.year, ref.month)[1]
        return ref.replace(day=1), ref.replace(day=last)
    if timeframe == "year":
        return date(ref.year, 1, 1), date(ref.year, 12, 31)
    return None, None


def _metric(check_in: Dict[str, Any], key: str) -> Optional[float]:
    metrics = check_in.get("body_metrics") or {}
    value = metrics.get(key)
    return float(value) if value is not None else None


def compute_stats(check_ins: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Stats over check-ins ordered newest first."""
    if not check_ins:
        return {
            "total_check_ins": 0,
            "average_weight": 0.0,
            "weight_change": 0.0,
            "body_fat_change": 0.0,
            "weight_change_text": "0.0 kg",
            "body_fat_change_text": "0.0%",
        }

    weights = [w for w in (_metric(c, "weight_kg") for c in check_ins) if w is not None]
    body_fats = [b for b in (_metric(c, "body_fat_percentage") for c in check_ins) if b is not None]

    average_weight = sum(weights) / len(weights) if weights else 0.0
    weight_change = weights[0] - weights[-1] if len(weights) >= 2 else 0.0
    body_fat_change = body_fats[0] - body_fats[-1] if len(body_fats) >= 2 else 0.0

    return {
        "total_check_ins": len(check_ins),
        "average_weight": round(average_weight, 1),
        "weight_change": round(weight_change, 1),
        "body_fat_change": round(body_fat_change, 1),
        "weight_change_text": format_delta(weight_change, "kg"),
        "body_fat_change_text": f"{format_delta(body_fat_change)}%",
    }


def measurement_series(check_ins: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Chart points from check-ins that carry a weight or a body-fat reading."""
    out: List[Dict[str, Any]] = []
    for c in check_ins:
        metrics = c.get("body_metrics")
        if not metrics:
            continue
        if metrics.get("weight_kg") is None and metrics.get("body_fat_percentage") is None:
            continue
        weight = float(metrics.get("weight_kg") or 0)
        body_fat = float(metrics.get("body_fat_percentage") or 0)
        lean_mass = None
        fat_mass = None
        if weight > 0 and body_fat > 0:
            fat_mass = weight * (body_fat / 100)
            lean_mass = weight - fat_mass
        point = {
            "measurement_date": c.get("check_in_date"),
            "weight_kg": weight,
            "body_fat_percentage": body_fat,
            "lean_body_mass_kg": lean_mass,
            "fat_mass_kg": fat_mass,
        }
        for key, _label, _unit, _lower in BODY_ROWS[2:]:
            point[key] = metrics.get(key) or None
        out.append(point)
    return out


def weight_text(check_in: Dict[str, Any]) -> str:
    weight = (check_in.get("body_metrics") or {}).get("weight_kg")
    if weight is None:
        return "No weight recorded"
    return f"Weight: {weight} kg"


def notes_preview(notes: Optional[str], limit: int = NOTES_PREVIEW_CHARS) -> str:
    if not notes:
        return "No notes"
    if len(notes) > limit:
        return f"{notes[:limit]}..."
    return notes


def review_item(check_in: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": check_in["id"],
        "check_in_date": check_in["check_in_date"],
        "display_date": format_short_date(check_in["check_in_date"]),
        "weight_text": weight_text(check_in),
        "notes_preview": notes_preview(check_in.get("notes")),
    }


def adherence_label(value: Optional[str]) -> str:
    return value or "Not recorded"


def adherence_color(value: Optional[str]) -> str:
    return ADHERENCE_COLORS.get(value or "", DEFAULT_ADHERENCE_COLOR)


def adherence_views(check_in: Dict[str, Any]) -> List[Dict[str, Any]]:
    out = []
    for key, label in (("diet_adherence", "Diet"), ("training_adherence", "Training"), ("steps_adherence", "Steps")):
        value = check_in.get(key)
        out.append({"value": value, "label": f"{label}: {adherence_label(value)}", "color": adherence_color(value)})
    return out


def _present(value: Any) -> Optional[float]:
    # Zero readings are treated as not recorded.
    if value is None or value == 0:
        return None
    return float(value)


def comparison_row(
    key: str,
    label: str,
    unit: str,
    older: Any,
    newer: Any,
    *,
    lower_is_better: bool = False,
) -> Optional[Dict[str, Any]]:
    """One metric row; None when neither check-in recorded the metric."""
    a = _present(older)
    b = _present(newer)
    if a is None and b is None:
        return None
    change = round(b - a, 2) if (a is not None and b is not None) else None
    if change is None or change == 0:
        direction = "none"
        improved = None
    else:
        direction = "up" if change > 0 else "down"
        improved = change < 0 if lower_is_better else change > 0
    return {
        "key": key,
        "label": label,
        "unit": unit,
        "older": a,
        "newer": b,
        "change": change,
        "change_text": format_delta(change, unit) if change is not None else None,
        "direction": direction,
        "improved": improved,
    }


def order_pair(first: Dict[str, Any], second: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """(older, newer) by check-in date."""
    if parse_date(first["check_in_date"]) <= parse_date(second["check_in_date"]):
        return first, second
    return second, first


def compare_check_ins(first: Dict[str, Any], second: Dict[str, Any]) -> Dict[str, Any]:
    older, newer = order_pair(first, second)
    body_older = older.get("body_metrics") or {}
    body_newer = newer.get("body_metrics") or {}
    well_older = older.get("wellness_metrics") or {}
    well_newer = newer.get("wellness_metrics") or {}

    body_rows = []
    for key, label, unit, lower in BODY_ROWS:
        row = comparison_row(key, label, unit, body_older.get(key), body_newer.get(key), lower_is_better=lower)
        if row:
            body_rows.append(row)

    wellness_rows = []
    for key, label, unit, lower in WELLNESS_ROWS:
        row = comparison_row(key, label, unit, well_older.get(key), well_newer.get(key), lower_is_better=lower)
        if row:
            wellness_rows.append(row)

    return {
        "older": older,
        "newer": newer,
        "days_between": days_between(older["check_in_date"], newer["check_in_date"]),
        "body": body_rows,
        "wellness": wellness_rows,
    }


def days_since(check_in_date: Optional[str], *, today: Optional[date] = None) -> Optional[int]:
    if not check_in_date:
        return None
    return ((today or date.today()) - parse_date(check_in_date)).days
