# -*- coding: utf-8 -*-
"""Profiles — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..checkins.models import CheckIn
from ..nutrition.models import NutritionPlan
from ..tracking.models import StepGoal, TrackedDay, WaterGoal


class Gender(str, Enum):
    male = "male"
    female = "female"


class Profile(BaseModel):
    id: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str = "athlete"
    coach_id: Optional[str] = None
    onboarding_complete: Optional[bool] = False
    gender: Optional[str] = None
    age: Optional[int] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    goal_type: Optional[str] = None
    goal_target_fat_loss_kg: Optional[float] = None
    goal_target_muscle_gain_kg: Optional[float] = None
    goal_timeframe_weeks: Optional[int] = None
    goal_target_weight_kg: Optional[float] = None
    goal_physique_details: Optional[str] = None
    invitation_status: Optional[str] = None
    invited_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    gender: Optional[Gender] = None
    age: Optional[int] = Field(None, gt=0, le=120)
    height_cm: Optional[float] = Field(None, gt=0)
    weight_kg: Optional[float] = Field(None, gt=0)
    body_fat_percentage: Optional[float] = Field(None, ge=0, le=100)
    goal_type: Optional[str] = Field(None, max_length=64)
    goal_target_fat_loss_kg: Optional[float] = Field(None, ge=0)
    goal_target_muscle_gain_kg: Optional[float] = Field(None, ge=0)
    goal_timeframe_weeks: Optional[int] = Field(None, gt=0)
    goal_target_weight_kg: Optional[float] = Field(None, gt=0)
    goal_physique_details: Optional[str] = Field(None, max_length=2000)


class AthleteListItem(BaseModel):
    id: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: str
    gender: Optional[str] = None
    onboarding_complete: Optional[bool] = False
    invitation_status: Optional[str] = None
    created_at: Optional[str] = None


class AthleteListResponse(BaseModel):
    count: int
    items: List[AthleteListItem]


class CoachDashboardStats(BaseModel):
    athletes: int = Field(0, ge=0)
    programs: int = Field(0, ge=0)
    nutrition_plans: int = Field(0, ge=0)


class AthleteDetail(Profile):
    display_name: str


class AssignedProgram(BaseModel):
    id: str
    program_template_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[int] = None
    start_date: Optional[str] = None
    assigned_at: Optional[str] = None


class AthleteOverview(BaseModel):
    athlete: AthleteDetail
    program: Optional[AssignedProgram] = None
    nutrition_plan: Optional[NutritionPlan] = None
    step_goal: Optional[StepGoal] = None
    steps: List[TrackedDay] = Field(default_factory=list)
    water_goal: WaterGoal
    water_goal_is_default: bool = False
    water: List[TrackedDay] = Field(default_factory=list)
    recent_check_ins: List[CheckIn] = Field(default_factory=list)
    days_since_check_in: Optional[int] = None
