# -*- coding: utf-8 -*-
"""Tracking — API endpoints (coach view of an athlete's steps and water)."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from ..auth.roles import require_coach
from ..baas.deps import get_baas
from ..banners import banner_on_error
from ..checkins.api import parse_ref_or_400
from ..nutrition.aggregation import period_range
from ..nutrition.models import NutritionTimeframe
from ..profiles.storage import get_coach_athlete
from .aggregation import (
    DEFAULT_WATER_GOAL_ML,
    STEPS_FIELD,
    WATER_CHART_FLOOR_ML,
    WATER_FIELD,
    fill_days,
    goal_bars,
    litres_text,
    tracking_stats,
)
from .models import (
    AthleteStepsResponse,
    AthleteWaterResponse,
    StepGoal,
    StepGoalRequest,
    WaterGoal,
    WaterGoalRequest,
)
from .storage import get_step_goal, get_water_goal, list_step_entries, list_water_entries, set_step_goal, set_water_goal

router = APIRouter(prefix="/api/admin", tags=["Tracking"])


def _linked_athlete(client: Client, coach_id: str, athlete_id: str) -> Dict[str, Any]:
    with banner_on_error("Failed to load athlete.", not_found="Athlete not found."):
        athlete = get_coach_athlete(client, coach_id, athlete_id)
    if not athlete.get("user_id"):
        raise HTTPException(status_code=404, detail="Athlete has no linked account.")
    return athlete


def _window(timeframe: NutritionTimeframe, ref: Optional[str]) -> Tuple[date, date]:
    return period_range(timeframe.value, parse_ref_or_400(ref))


def step_goal_model(row: Optional[Dict[str, Any]]) -> Optional[StepGoal]:
    if not row:
        return None
    return StepGoal(
        id=str(row["id"]) if row.get("id") is not None else None,
        daily_steps=int(row.get("daily_steps") or 0),
        is_active=bool(row.get("is_active", True)),
        assigned_at=row.get("assigned_at"),
    )


def water_goal_model(row: Optional[Dict[str, Any]]) -> Optional[WaterGoal]:
    if not row:
        return None
    return WaterGoal(
        id=str(row["id"]) if row.get("id") is not None else None,
        water_goal_ml=int(row.get("water_goal_ml") or 0),
    )


@router.get(
    "/athletes/{athlete_id}/steps",
    response_model=AthleteStepsResponse,
    summary="Athlete step entries for a week or month",
)
def athlete_steps(
    athlete_id: str,
    timeframe: NutritionTimeframe = Query(default=NutritionTimeframe.week),
    ref: Optional[str] = Query(default=None, description="YYYY-MM-DD reference date"),
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    start, end = _window(timeframe, ref)
    athlete = _linked_athlete(client, coach["id"], athlete_id)

    goal = step_goal_model(get_step_goal(client, athlete_id))
    with banner_on_error("Failed to load step data"):
        entries = list_step_entries(client, athlete["user_id"], start, end)

    target = goal.daily_steps if goal and goal.daily_steps > 0 else None
    days = fill_days(entries, start, end, STEPS_FIELD)
    return AthleteStepsResponse(
        athlete_id=athlete_id,
        timeframe=timeframe,
        start=start.isoformat(),
        end=end.isoformat(),
        goal=goal,
        days=days,
        stats=tracking_stats(days, target),
        bars=goal_bars(days, target),
    )


@router.put("/athletes/{athlete_id}/steps/goal", response_model=StepGoal, summary="Set the athlete's daily step goal")
def put_step_goal(
    athlete_id: str,
    request: StepGoalRequest,
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    if request.daily_steps < 0:
        raise HTTPException(status_code=400, detail="Please enter a valid non-negative number for the step goal.")
    with banner_on_error("Failed to load athlete.", not_found="Athlete not found."):
        get_coach_athlete(client, coach["id"], athlete_id)
    with banner_on_error("Failed to update step goal."):
        row = set_step_goal(client, athlete_id, request.daily_steps)
    return step_goal_model(row)


@router.get(
    "/athletes/{athlete_id}/water",
    response_model=AthleteWaterResponse,
    summary="Athlete water intake for a week or month",
)
def athlete_water(
    athlete_id: str,
    timeframe: NutritionTimeframe = Query(default=NutritionTimeframe.week),
    ref: Optional[str] = Query(default=None, description="YYYY-MM-DD reference date"),
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    start, end = _window(timeframe, ref)
    athlete = _linked_athlete(client, coach["id"], athlete_id)

    goal = water_goal_model(get_water_goal(client, athlete["user_id"]))
    is_default = goal is None
    if goal is None:
        goal = WaterGoal(water_goal_ml=DEFAULT_WATER_GOAL_ML)
    with banner_on_error("Failed to load water data"):
        entries = list_water_entries(client, athlete["user_id"], start, end)

    days = fill_days(entries, start, end, WATER_FIELD)
    stats = tracking_stats(days, goal.water_goal_ml)
    return AthleteWaterResponse(
        athlete_id=athlete_id,
        timeframe=timeframe,
        start=start.isoformat(),
        end=end.isoformat(),
        goal=goal,
        goal_is_default=is_default,
        days=days,
        stats=stats,
        average_text=litres_text(stats["average"]),
        bars=goal_bars(days, goal.water_goal_ml, floor=WATER_CHART_FLOOR_ML),
    )


@router.put("/athletes/{athlete_id}/water/goal", response_model=WaterGoal, summary="Set the athlete's daily water goal")
def put_water_goal(
    athlete_id: str,
    request: WaterGoalRequest,
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    if request.water_goal_ml < 0:
        raise HTTPException(status_code=400, detail="Please enter a valid number for the water goal.")
    athlete = _linked_athlete(client, coach["id"], athlete_id)
    with banner_on_error("Failed to update water goal."):
        row = set_water_goal(client, athlete["user_id"], request.water_goal_ml)
    return water_goal_model(row)
