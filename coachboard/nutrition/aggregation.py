# -*- coding: utf-8 -*-
"""Nutrition domain — meal-log normalization and day-bucketed aggregation."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import settings
from ..formatting import format_display_date, format_time_12h, parse_date, round_half_up


def period_range(timeframe: str, ref: date) -> Tuple[date, date]:
    """`week` is the 7 days before `ref` through `ref`; `month` the calendar month."""
    if timeframe == "month":
        last = calendar.monthrange(ref.year, ref.month)[1]
        return ref.replace(day=1), ref.replace(day=last)
    return ref - timedelta(days=7), ref


def _iter_days(start: date, end: date) -> List[str]:
    days: List[str] = []
    cur = start
    while cur <= end:
        days.append(cur.isoformat())
        cur = cur + timedelta(days=1)
    return days


def normalize_food_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """A meal_food_items / extra_meal_food_items row (with embedded `food_item`) -> flat per-100g item."""
    food = item.get("food_item") or {}
    return {
        "id": str(item["id"]) if item.get("id") is not None else None,
        "name": food.get("food_name") or food.get("name"),
        "calories": float(food.get("calories_per_100g") or 0),
        "protein_grams": float(food.get("protein_per_100g") or 0),
        "carbohydrate_grams": float(food.get("carbs_per_100g") or 0),
        "fat_grams": float(food.get("fat_per_100g") or 0),
        "serving_size": float(food.get("serving_size") or 100),
        "serving_unit": food.get("serving_size_unit") or "g",
        "quantity": float(item.get("quantity") or 1),
    }


def attach_food_items(logs: Sequence[Dict[str, Any]], extra_items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Planned meals take items from `meal.food_items`; extra meals from the separately fetched rows."""
    by_log: Dict[str, List[Dict[str, Any]]] = {}
    for item in extra_items:
        by_log.setdefault(str(item.get("meal_log_id")), []).append(item)

    out: List[Dict[str, Any]] = []
    for log in logs:
        if log.get("is_extra_meal"):
            raw = by_log.get(str(log.get("id")), [])
        else:
            raw = (log.get("meal") or {}).get("food_items") or []
        row = {k: v for k, v in log.items() if k != "meal"}
        row["food_items"] = [normalize_food_item(i) for i in raw]
        out.append(row)
    return out


def log_totals(food_items: Iterable[Dict[str, Any]]) -> Dict[str, float]:
    """Sum of per-100g values scaled by quantity (grams) / 100."""
    calories = protein = carbs = fat = 0.0
    for food in food_items:
        multiplier = float(food.get("quantity") or 0) / 100
        calories += float(food.get("calories") or 0) * multiplier
        protein += float(food.get("protein_grams") or 0) * multiplier
        carbs += float(food.get("carbohydrate_grams") or 0) * multiplier
        fat += float(food.get("fat_grams") or 0) * multiplier
    return {"calories": calories, "protein": protein, "carbs": carbs, "fat": fat}


def log_day(log: Dict[str, Any]) -> str:
    if log.get("date"):
        return str(log["date"])[:10]
    return str(log.get("created_at") or "")[:10]


@dataclass
class _DayAgg:
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    meal_count: int = 0


def completion_rate(meal_count: int, expected: Optional[int] = None) -> int:
    expected = expected or settings.expected_meals_per_day
    return min(100, round_half_up(meal_count / expected * 100))


def daily_nutrition(
    logs: Sequence[Dict[str, Any]],
    start: date,
    end: date,
    *,
    expected_meals: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """One row per day in [start, end] plus any day a log falls on; oldest first."""
    aggs: Dict[str, _DayAgg] = {d: _DayAgg() for d in _iter_days(start, end)}

    for log in logs:
        key = log_day(log)
        if not key:
            continue
        agg = aggs.setdefault(key, _DayAgg())
        agg.meal_count += 1
        totals = log_totals(log.get("food_items") or [])
        agg.calories += totals["calories"]
        agg.protein += totals["protein"]
        agg.carbs += totals["carbs"]
        agg.fat += totals["fat"]

    out: List[Dict[str, Any]] = []
    for key in sorted(aggs, key=parse_date):
        agg = aggs[key]
        out.append(
            {
                "date": key,
                "total_calories": agg.calories,
                "total_protein": agg.protein,
                "total_carbs": agg.carbs,
                "total_fat": agg.fat,
                "meal_count": agg.meal_count,
                "completion_rate": completion_rate(agg.meal_count, expected_meals) if agg.meal_count else 0,
            }
        )
    return out


def nutrition_stats(days: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Stats over tracked days (calories > 0)."""
    tracked = [d for d in days if d["total_calories"] > 0]
    if not tracked:
        return {
            "average_calories": 0,
            "max_calories": 0,
            "completion_rate": 0,
            "total_protein": 0,
            "total_carbs": 0,
            "total_fat": 0,
            "days_tracked": 0,
        }
    total_calories = sum(d["total_calories"] for d in tracked)
    return {
        "average_calories": round_half_up(total_calories / len(tracked)),
        "max_calories": max(d["total_calories"] for d in tracked),
        "completion_rate": round_half_up(sum(d["completion_rate"] for d in tracked) / len(tracked)),
        "total_protein": round_half_up(sum(d["total_protein"] for d in tracked)),
        "total_carbs": round_half_up(sum(d["total_carbs"] for d in tracked)),
        "total_fat": round_half_up(sum(d["total_fat"] for d in tracked)),
        "days_tracked": len(tracked),
    }


def _time_display(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return format_time_12h(value)
    except ValueError:
        return value


def group_logs_by_day(logs: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Logs grouped per day, newest day first, each with its totals and a joined food list."""
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for log in logs:
        key = log_day(log)
        if key:
            groups.setdefault(key, []).append(log)

    out: List[Dict[str, Any]] = []
    for key in sorted(groups, key=parse_date, reverse=True):
        entries = []
        for log in groups[key]:
            items = log.get("food_items") or []
            totals = log_totals(items)
            entries.append(
                {
                    "id": str(log.get("id")),
                    "name": log.get("name"),
                    "date": key,
                    "time": log.get("time"),
                    "time_display": _time_display(log.get("time")),
                    "day_type": log.get("day_type"),
                    "is_extra_meal": bool(log.get("is_extra_meal")),
                    "foods": ", ".join(i["name"] for i in items if i.get("name")) or "-",
                    "totals": {k: round_half_up(v) for k, v in totals.items()},
                    "food_items": items,
                }
            )
        out.append({"date": key, "display_date": format_display_date(key), "logs": entries})
    return out


def calculate_total_nutrition(meals: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """Rounded totals across meals carrying `total_calories` / `total_protein` / ..."""
    calories = protein = carbs = fat = 0.0
    for meal in meals:
        calories += float(meal.get("total_calories") or 0)
        protein += float(meal.get("total_protein") or 0)
        carbs += float(meal.get("total_carbs") or 0)
        fat += float(meal.get("total_fat") or 0)
    return {
        "total_calories": round_half_up(calories),
        "total_protein": round_half_up(protein),
        "total_carbs": round_half_up(carbs),
        "total_fat": round_half_up(fat),
    }


def calculate_percentage(consumed: float, target: Optional[float]) -> float:
    """Share of target reached, clamped to 0..100; 0 for a missing/non-positive target."""
    if not target or target <= 0:
        return 0.0
    return min(max(consumed / target * 100, 0.0), 100.0)


def format_nutrition_value(value: Optional[float], digits: int = 0) -> str:
    if value is None:
        return "0"
    return f"{float(value):.{digits}f}"


def target_progress(stats: Dict[str, Any], plan: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Average tracked day vs the plan's daily targets."""
    if not plan:
        return []
    days = stats.get("days_tracked") or 0
    avg = (lambda total: total / days if days else 0.0)
    pairs = (
        ("calories", float(stats.get("average_calories") or 0), plan.get("total_calories")),
        ("protein", avg(float(stats.get("total_protein") or 0)), plan.get("protein_grams")),
        ("carbs", avg(float(stats.get("total_carbs") or 0)), plan.get("carbohydrate_grams")),
        ("fat", avg(float(stats.get("total_fat") or 0)), plan.get("fat_grams")),
    )
    return [
        {
            "key": key,
            "consumed": round_half_up(consumed, 1),
            "target": float(target or 0),
            "percentage": round_half_up(calculate_percentage(consumed, target), 1),
        }
        for key, consumed, target in pairs
    ]
