# -*- coding: utf-8 -*-
"""Profiles — API endpoints (own profile + coach athlete views)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from ..auth.roles import get_current_profile, require_coach
from ..auth.security import get_current_user
from ..baas import BAAS_ERRORS
from ..baas.deps import get_baas
from ..banners import banner_on_error
from ..checkins.api import parse_ref_or_400
from ..checkins.progress import days_since
from ..checkins.storage import list_recent_check_ins
from ..nutrition.storage import get_assigned_plan
from ..tracking.aggregation import DEFAULT_WATER_GOAL_ML, STEPS_FIELD, WATER_FIELD, fill_days, recent_range
from ..tracking.api import step_goal_model, water_goal_model
from ..tracking.models import WaterGoal
from ..tracking.storage import get_step_goal, get_water_goal, list_step_entries, list_water_entries
from .models import (
    AthleteDetail,
    AthleteListItem,
    AthleteListResponse,
    AthleteOverview,
    CoachDashboardStats,
    Profile,
    ProfileUpdateRequest,
)
from .storage import (
    count_dashboard,
    display_name,
    get_assigned_program,
    get_coach_athlete,
    list_coach_athletes,
    update_profile,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Profiles"])


@router.get("/api/profile", response_model=Profile, summary="Get own profile")
def read_profile(profile: dict = Depends(get_current_profile)):
    return Profile.model_validate(profile)


@router.patch("/api/profile", response_model=Profile, summary="Update own profile")
def patch_profile(
    request: ProfileUpdateRequest,
    user: dict = Depends(get_current_user),
    client: Client = Depends(get_baas),
):
    changes = request.model_dump(exclude_unset=True, mode="json")
    with banner_on_error("Failed to update profile.", not_found="Profile not found."):
        row = update_profile(client, user["id"], changes)
    return Profile.model_validate(row)


@router.get("/api/admin/athletes", response_model=AthleteListResponse, summary="List the coach's athletes")
def list_athletes(
    q: Optional[str] = Query(default=None, description="Search username or email"),
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    with banner_on_error("Failed to load athletes."):
        rows = list_coach_athletes(client, coach["id"], query=q)
    items = [AthleteListItem.model_validate(r) for r in rows]
    return AthleteListResponse(count=len(items), items=items)


@router.get("/api/admin/athletes/{athlete_id}", response_model=AthleteDetail, summary="Get one athlete")
def read_athlete(athlete_id: str, coach: dict = Depends(require_coach), client: Client = Depends(get_baas)):
    with banner_on_error("Failed to load athlete.", not_found="Athlete not found."):
        row = get_coach_athlete(client, coach["id"], athlete_id)
    return AthleteDetail.model_validate(dict(row, display_name=display_name(row)))


@router.get(
    "/api/admin/athletes/{athlete_id}/overview",
    response_model=AthleteOverview,
    summary="Athlete detail page: plans, goals, last 7 days and latest check-ins",
)
def athlete_overview(
    athlete_id: str,
    ref: Optional[str] = Query(default=None, description="YYYY-MM-DD reference date"),
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    """Everything below the profile is best-effort: a failing section is logged and left empty."""
    ref_date = parse_ref_or_400(ref)
    with banner_on_error("Failed to load athlete.", not_found="Athlete not found."):
        row = get_coach_athlete(client, coach["id"], athlete_id)

    user_id = row.get("user_id")
    water_goal = water_goal_model(get_water_goal(client, user_id)) if user_id else None
    steps: List[Dict[str, Any]] = []
    water: List[Dict[str, Any]] = []
    recent: List[Dict[str, Any]] = []
    if user_id:
        start, end = recent_range(ref_date)
        try:
            steps = fill_days(list_step_entries(client, user_id, start, end), start, end, STEPS_FIELD)
        except BAAS_ERRORS as exc:
            logger.warning("Step entries for %s unavailable: %s", athlete_id, exc)
        try:
            water = fill_days(list_water_entries(client, user_id, start, end), start, end, WATER_FIELD)
        except BAAS_ERRORS as exc:
            logger.warning("Water entries for %s unavailable: %s", athlete_id, exc)
        try:
            recent = list_recent_check_ins(client, user_id)
        except BAAS_ERRORS as exc:
            logger.warning("Recent check-ins for %s unavailable: %s", athlete_id, exc)

    return AthleteOverview(
        athlete=AthleteDetail.model_validate(dict(row, display_name=display_name(row))),
        program=get_assigned_program(client, athlete_id),
        nutrition_plan=get_assigned_plan(client, athlete_id),
        step_goal=step_goal_model(get_step_goal(client, athlete_id)),
        water_goal=water_goal or WaterGoal(water_goal_ml=DEFAULT_WATER_GOAL_ML),
        water_goal_is_default=water_goal is None,
        steps=steps,
        water=water,
        recent_check_ins=recent,
        days_since_check_in=days_since(recent[0]["check_in_date"], today=ref_date) if recent else None,
    )


@router.get("/api/admin/dashboard", response_model=CoachDashboardStats, summary="Coach dashboard counters")
def dashboard(coach: dict = Depends(require_coach), client: Client = Depends(get_baas)):
    with banner_on_error("Failed to load dashboard stats."):
        counts = count_dashboard(client, coach["id"])
    return CoachDashboardStats(**counts)
