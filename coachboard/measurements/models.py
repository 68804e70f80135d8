# -*- coding: utf-8 -*-
"""Measurements — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..profiles.models import Gender
from .formulas import BodyFatMethod, Goal


class SkinfoldSites(BaseModel):
    chest_mm: Optional[float] = Field(None, ge=0)
    abdominal_mm: Optional[float] = Field(None, ge=0)
    thigh_mm: Optional[float] = Field(None, ge=0)
    tricep_mm: Optional[float] = Field(None, ge=0)
    subscapular_mm: Optional[float] = Field(None, ge=0)
    suprailiac_mm: Optional[float] = Field(None, ge=0)
    midaxillary_mm: Optional[float] = Field(None, ge=0)
    bicep_mm: Optional[float] = Field(None, ge=0)
    lower_back_mm: Optional[float] = Field(None, ge=0)
    calf_mm: Optional[float] = Field(None, ge=0)


class TapeSites(BaseModel):
    waist_cm: Optional[float] = Field(None, gt=0)
    neck_cm: Optional[float] = Field(None, gt=0)
    hips_cm: Optional[float] = Field(None, gt=0)


class Measurement(SkinfoldSites, TapeSites):
    id: Optional[str] = None
    user_id: str
    measurement_date: str
    weight_kg: Optional[float] = None
    weight_change_kg: Optional[float] = None
    chest_cm: Optional[float] = None
    abdominal_cm: Optional[float] = None
    thigh_cm: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    body_fat_override: Optional[float] = None
    lean_body_mass_kg: Optional[float] = None
    fat_mass_kg: Optional[float] = None
    basal_metabolic_rate: Optional[float] = None
    calculation_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None


class MeasurementCreateRequest(SkinfoldSites, TapeSites):
    measurement_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    weight_kg: Optional[float] = Field(None, gt=0)
    calculation_method: Optional[BodyFatMethod] = None
    body_fat_override: Optional[float] = Field(None, gt=0, le=100)
    notes: Optional[str] = Field(None, max_length=2000)


class MeasurementListResponse(BaseModel):
    athlete_id: str
    count: int
    measurements: List[Measurement]


class MeasurementSummary(BaseModel):
    latest: Optional[Measurement] = None
    oldest: Optional[Measurement] = None
    weight_change: Optional[float] = None
    body_fat_change: Optional[float] = None
    lean_mass_change: Optional[float] = None
    fat_mass_change: Optional[float] = None
    days: int = 0
    weeks: int = 0
    months: int = 0


class BodyFatCalculatorRequest(SkinfoldSites, TapeSites):
    method: BodyFatMethod
    gender: Gender
    age: int = Field(..., gt=0, le=120)
    height_cm: Optional[float] = Field(None, gt=0)
    weight_kg: Optional[float] = Field(None, gt=0)


class BodyFatCalculatorResponse(BaseModel):
    method: BodyFatMethod
    body_fat_percentage: float
    lean_body_mass_kg: Optional[float] = None
    fat_mass_kg: Optional[float] = None


class BMRCalculatorRequest(BaseModel):
    gender: Gender
    age: int = Field(..., gt=0, le=120)
    height_cm: float = Field(..., gt=0)
    weight_kg: float = Field(..., gt=0)
    activity_factor: float = Field(1.2, ge=1.0, le=2.5)
    goal: Goal = Goal.maintenance
    protein_g_per_kg: Optional[float] = Field(None, ge=0, le=5)
    fat_g_per_kg: Optional[float] = Field(None, ge=0, le=5)


class BMRCalculatorResponse(BaseModel):
    bmr: int
    tdee: int
    calorie_target: int
    protein_g: float
    fat_g: float
    carb_g: float
    protein_g_per_kg: float
    fat_g_per_kg: float
    carb_g_per_kg: float
