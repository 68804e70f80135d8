# -*- coding: utf-8 -*-
"""Nutrition domain — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NutritionTimeframe(str, Enum):
    week = "week"
    month = "month"


class NutritionPlan(BaseModel):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    total_calories: float = 0
    protein_grams: float = 0
    carbohydrate_grams: float = 0
    fat_grams: float = 0
    start_date: Optional[str] = None
    assigned_at: Optional[str] = None


class FoodItem(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    calories: float = 0
    protein_grams: float = 0
    carbohydrate_grams: float = 0
    fat_grams: float = 0
    serving_size: float = 100
    serving_unit: str = "g"
    quantity: float = 1


class NutritionTotals(BaseModel):
    calories: float = Field(0.0, ge=0)
    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)


class DailyNutrition(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    total_calories: float = 0
    total_protein: float = 0
    total_carbs: float = 0
    total_fat: float = 0
    meal_count: int = Field(0, ge=0)
    completion_rate: int = Field(0, ge=0, le=100)


class NutritionStats(BaseModel):
    average_calories: int = 0
    max_calories: float = 0
    completion_rate: int = 0
    total_protein: int = 0
    total_carbs: int = 0
    total_fat: int = 0
    days_tracked: int = 0


class MacroSlice(BaseModel):
    key: str
    label: str
    grams: float
    percentage: int
    color: str
    dasharray: str
    dashoffset: float
    path: Optional[str] = None


class MacroBreakdown(BaseModel):
    total: float
    slices: List[MacroSlice]


class CalorieBar(BaseModel):
    date: str
    label: str
    calories: float
    height_px: float
    met_target: bool


class CalorieBarChart(BaseModel):
    chart_height: int
    max_calories: float
    target_calories: Optional[float] = None
    target_offset_px: Optional[float] = None
    bars: List[CalorieBar]


class LoggedMeal(BaseModel):
    id: str
    name: Optional[str] = None
    date: str
    time: Optional[str] = None
    time_display: Optional[str] = None
    day_type: Optional[str] = None
    is_extra_meal: bool = False
    foods: str
    totals: NutritionTotals
    food_items: List[FoodItem] = Field(default_factory=list)


class LogDay(BaseModel):
    date: str
    display_date: str
    logs: List[LoggedMeal]


class ProgressRing(BaseModel):
    size: int
    stroke: int
    radius: float
    circumference: float
    dash: float
    dashoffset: float


class TargetProgress(BaseModel):
    key: str
    consumed: float
    target: float
    percentage: float
    ring: Optional[ProgressRing] = None


class AthleteNutritionResponse(BaseModel):
    athlete_id: str
    timeframe: NutritionTimeframe
    start: str
    end: str
    plan: Optional[NutritionPlan] = None
    days: List[DailyNutrition]
    stats: NutritionStats
    macros: Optional[MacroBreakdown] = None
    bars: CalorieBarChart
    targets: List[TargetProgress] = Field(default_factory=list)
    log_days: List[LogDay]
