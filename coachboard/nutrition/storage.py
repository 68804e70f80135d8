# -*- coding: utf-8 -*-
"""Nutrition — assigned plans and meal logs."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from supabase import Client

from ..baas import BAAS_ERRORS, first_row
from .aggregation import attach_food_items

logger = logging.getLogger(__name__)

ASSIGNMENT_TABLE = "assigned_plans"
MEAL_LOG_TABLE = "meal_logs"
EXTRA_ITEMS_TABLE = "extra_meal_food_items"

ASSIGNED_PLAN_COLUMNS = """
    id,
    nutrition_plan_id,
    start_date,
    assigned_at,
    nutrition_plan:nutrition_plans!nutrition_plan_id(
        id, name, description, total_calories, protein_grams,
        carbohydrate_grams, fat_grams, created_at, updated_at
    )
"""

MEAL_LOG_COLUMNS = """
    id,
    user_id,
    meal_id,
    nutrition_plan_id,
    name,
    date,
    time,
    day_type,
    is_extra_meal,
    created_at,
    updated_at,
    meal:meals(
        *,
        food_items:meal_food_items(
            *,
            food_item:food_items(*)
        )
    )
"""


def get_assigned_plan(client: Client, athlete_id: str) -> Optional[Dict[str, Any]]:
    """Latest nutrition-only assignment for the athlete profile.

    A missing plan is not an error for the nutrition view, so lookup failures
    are logged and reported as "no plan".
    """
    try:
        row = first_row(
            client.table(ASSIGNMENT_TABLE)
            .select(ASSIGNED_PLAN_COLUMNS)
            .eq("athlete_id", athlete_id)
            .is_("program_template_id", "null")
            .not_.is_("nutrition_plan_id", "null")
            .order("created_at", desc=True)
        )
    except BAAS_ERRORS as exc:
        logger.warning("Nutrition plan lookup for %s failed: %s", athlete_id, exc)
        return None

    plan = (row or {}).get("nutrition_plan")
    if not plan:
        return None
    return {
        "id": str(plan["id"]),
        "name": plan.get("name"),
        "description": plan.get("description"),
        "total_calories": float(plan.get("total_calories") or 0),
        "protein_grams": float(plan.get("protein_grams") or 0),
        "carbohydrate_grams": float(plan.get("carbohydrate_grams") or 0),
        "fat_grams": float(plan.get("fat_grams") or 0),
        "start_date": row.get("start_date"),
        "assigned_at": row.get("assigned_at"),
    }


def list_meal_logs(client: Client, user_id: str, start: date, end: date) -> List[Dict[str, Any]]:
    """Meal logs in [start, end], newest first, each with normalized `food_items`."""
    logs = (
        client.table(MEAL_LOG_TABLE)
        .select(MEAL_LOG_COLUMNS)
        .eq("user_id", user_id)
        .gte("date", start.isoformat())
        .lte("date", end.isoformat())
        .order("created_at", desc=True)
        .execute()
        .data
    ) or []

    extra_ids = [log["id"] for log in logs if log.get("is_extra_meal")]
    extra_items: List[Dict[str, Any]] = []
    if extra_ids:
        extra_items = (
            client.table(EXTRA_ITEMS_TABLE)
            .select("*, food_item:food_items(*)")
            .in_("meal_log_id", extra_ids)
            .execute()
            .data
        ) or []
    return attach_food_items(logs, extra_items)
