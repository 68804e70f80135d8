# -*- coding: utf-8 -*-
"""Nutrition — API endpoint (coach view of an athlete's intake)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from ..auth.roles import require_coach
from ..baas.deps import get_baas
from ..banners import banner_on_error
from ..checkins.api import parse_ref_or_400
from ..profiles.storage import get_coach_athlete
from .aggregation import daily_nutrition, group_logs_by_day, nutrition_stats, period_range, target_progress
from .charts import calorie_bars, macro_breakdown, progress_ring
from .models import AthleteNutritionResponse, NutritionTimeframe
from .storage import get_assigned_plan, list_meal_logs

router = APIRouter(prefix="/api/admin", tags=["Nutrition"])


@router.get(
    "/athletes/{athlete_id}/nutrition",
    response_model=AthleteNutritionResponse,
    summary="Athlete nutrition overview for a week or month",
)
def athlete_nutrition(
    athlete_id: str,
    timeframe: NutritionTimeframe = Query(default=NutritionTimeframe.week),
    ref: Optional[str] = Query(default=None, description="YYYY-MM-DD reference date"),
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    ref_date = parse_ref_or_400(ref)
    with banner_on_error("Failed to load athlete.", not_found="Athlete not found."):
        athlete = get_coach_athlete(client, coach["id"], athlete_id)
    if not athlete.get("user_id"):
        raise HTTPException(status_code=404, detail="Athlete has no linked account.")

    start, end = period_range(timeframe.value, ref_date)
    plan = get_assigned_plan(client, athlete_id)
    with banner_on_error("Failed to load nutrition data"):
        logs = list_meal_logs(client, athlete["user_id"], start, end)

    days = daily_nutrition(logs, start, end)
    stats = nutrition_stats(days)
    target = plan["total_calories"] if plan and plan["total_calories"] > 0 else None

    return AthleteNutritionResponse(
        athlete_id=athlete_id,
        timeframe=timeframe,
        start=start.isoformat(),
        end=end.isoformat(),
        plan=plan,
        days=days,
        stats=stats,
        macros=macro_breakdown(stats["total_protein"], stats["total_carbs"], stats["total_fat"]),
        bars=calorie_bars(days, target),
        targets=[dict(t, ring=progress_ring(t["percentage"])) for t in target_progress(stats, plan)],
        log_days=group_logs_by_day(logs),
    )
