# -*- coding: utf-8 -*-
"""Tracking domain — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..nutrition.models import NutritionTimeframe


class TrackedDay(BaseModel):
    id: Optional[str] = None
    date: str = Field(..., description="YYYY-MM-DD")
    value: float = 0
    placeholder: bool = False


class TrackingStats(BaseModel):
    average: int = 0
    max: float = 0
    total: float = 0
    days_tracked: int = 0
    days_goal_met: int = 0


class GoalBar(BaseModel):
    date: str
    label: str
    value: float
    height_px: float
    met_goal: bool


class GoalBarChart(BaseModel):
    chart_height: int
    max_value: float
    goal: Optional[float] = None
    goal_offset_px: Optional[float] = None
    bars: List[GoalBar]


class StepGoal(BaseModel):
    id: Optional[str] = None
    daily_steps: int
    is_active: bool = True
    assigned_at: Optional[str] = None


class WaterGoal(BaseModel):
    id: Optional[str] = None
    water_goal_ml: int


class StepGoalRequest(BaseModel):
    daily_steps: int


class WaterGoalRequest(BaseModel):
    water_goal_ml: int


class AthleteStepsResponse(BaseModel):
    athlete_id: str
    timeframe: NutritionTimeframe
    start: str
    end: str
    goal: Optional[StepGoal] = None
    days: List[TrackedDay]
    stats: TrackingStats
    bars: GoalBarChart


class AthleteWaterResponse(BaseModel):
    athlete_id: str
    timeframe: NutritionTimeframe
    start: str
    end: str
    goal: WaterGoal
    goal_is_default: bool = False
    days: List[TrackedDay]
    stats: TrackingStats
    average_text: str
    bars: GoalBarChart
