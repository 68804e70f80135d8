# -*- coding: utf-8 -*-
"""Check-ins — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Timeframe(str, Enum):
    week = "week"
    month = "month"
    year = "year"
    all = "all"


class Adherence(str, Enum):
    perfect = "Perfect"
    good = "Good"
    average = "Average"
    poor = "Poor"
    off_track = "Off Track"


class PhotoPosition(str, Enum):
    front = "front"
    side = "side"
    back = "back"


class BodyMetrics(BaseModel):
    weight_kg: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    waist_cm: Optional[float] = None
    hip_cm: Optional[float] = None
    chest_cm: Optional[float] = None
    left_arm_cm: Optional[float] = None
    right_arm_cm: Optional[float] = None
    left_thigh_cm: Optional[float] = None
    right_thigh_cm: Optional[float] = None


class WellnessMetrics(BaseModel):
    sleep_hours: Optional[float] = None
    sleep_quality: Optional[int] = None
    stress_level: Optional[int] = None
    fatigue_level: Optional[int] = None
    motivation_level: Optional[int] = None
    digestion: Optional[str] = None
    menstrual_cycle_notes: Optional[str] = None


class AdherenceView(BaseModel):
    value: Optional[str] = None
    label: str
    color: str


class SignedPhoto(BaseModel):
    path: str
    url: str


class CheckIn(BaseModel):
    id: str
    user_id: str
    check_in_date: str
    photos: List[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    diet_adherence: Optional[str] = None
    training_adherence: Optional[str] = None
    steps_adherence: Optional[str] = None
    notes: Optional[str] = None
    coach_feedback: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    body_metrics: Optional[BodyMetrics] = None
    wellness_metrics: Optional[WellnessMetrics] = None


class CheckInStats(BaseModel):
    total_check_ins: int = 0
    average_weight: float = 0.0
    weight_change: float = 0.0
    body_fat_change: float = 0.0
    weight_change_text: str = "0.0 kg"
    body_fat_change_text: str = "0.0%"


class MeasurementPoint(BaseModel):
    measurement_date: str
    weight_kg: float
    body_fat_percentage: float
    lean_body_mass_kg: Optional[float] = None
    fat_mass_kg: Optional[float] = None
    waist_cm: Optional[float] = None
    hip_cm: Optional[float] = None
    chest_cm: Optional[float] = None
    left_arm_cm: Optional[float] = None
    right_arm_cm: Optional[float] = None
    left_thigh_cm: Optional[float] = None
    right_thigh_cm: Optional[float] = None


class CheckInListResponse(BaseModel):
    athlete_id: str
    timeframe: Timeframe
    start: Optional[str] = None
    end: Optional[str] = None
    count: int
    stats: CheckInStats
    check_ins: List[CheckIn]
    measurements: List[MeasurementPoint]


class ReviewItem(BaseModel):
    id: str
    check_in_date: str
    display_date: str
    weight_text: str
    notes_preview: str


class ReviewListResponse(BaseModel):
    athlete_id: str
    count: int
    items: List[ReviewItem]


class AthleteSummary(BaseModel):
    id: str
    user_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None


class CheckInDetail(CheckIn):
    display_date: str
    athlete: Optional[AthleteSummary] = None
    photo_urls: List[SignedPhoto] = Field(default_factory=list)
    video_signed_url: Optional[str] = None
    adherence: List[AdherenceView] = Field(default_factory=list)


class FeedbackRequest(BaseModel):
    coach_feedback: str = Field(..., max_length=5000)


class FeedbackResponse(BaseModel):
    id: str
    coach_feedback: Optional[str] = None
    updated_at: Optional[str] = None


class ComparisonRow(BaseModel):
    key: str
    label: str
    unit: str
    older: Optional[float] = None
    newer: Optional[float] = None
    change: Optional[float] = None
    change_text: Optional[str] = None
    direction: str = "none"
    improved: Optional[bool] = None


class ComparedCheckIn(BaseModel):
    id: str
    check_in_date: str
    display_date: str
    photos: List[SignedPhoto] = Field(default_factory=list)


class CheckInComparison(BaseModel):
    athlete_id: str
    older: ComparedCheckIn
    newer: ComparedCheckIn
    days_between: int
    body: List[ComparisonRow]
    wellness: List[ComparisonRow]


class CheckInSubmitRequest(BaseModel):
    check_in_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    photos: List[str] = Field(default_factory=list, max_length=10)
    video_url: Optional[str] = None
    weight_kg: Optional[float] = Field(None, gt=0)
    body_fat_percentage: Optional[float] = Field(None, ge=0, le=100)
    waist_cm: Optional[float] = Field(None, gt=0)
    hip_cm: Optional[float] = Field(None, gt=0)
    chest_cm: Optional[float] = Field(None, gt=0)
    left_arm_cm: Optional[float] = Field(None, gt=0)
    right_arm_cm: Optional[float] = Field(None, gt=0)
    left_thigh_cm: Optional[float] = Field(None, gt=0)
    right_thigh_cm: Optional[float] = Field(None, gt=0)
    sleep_hours: Optional[float] = Field(None, ge=0, le=24)
    sleep_quality: Optional[int] = Field(None, ge=1, le=5)
    stress_level: Optional[int] = Field(None, ge=1, le=5)
    fatigue_level: Optional[int] = Field(None, ge=1, le=5)
    motivation_level: Optional[int] = Field(None, ge=1, le=5)
    digestion: Optional[str] = Field(None, max_length=500)
    menstrual_cycle_notes: Optional[str] = Field(None, max_length=500)
    diet_adherence: Optional[Adherence] = None
    training_adherence: Optional[Adherence] = None
    steps_adherence: Optional[Adherence] = None
    notes: Optional[str] = Field(None, max_length=5000)


class LatestCheckInResponse(BaseModel):
    check_in: Optional[CheckIn] = None
    days_since: Optional[int] = None


class PhotoUploadResponse(BaseModel):
    path: str
    url: Optional[str] = None


class PhotoUploadRequest(BaseModel):
    position: PhotoPosition
    image_base64: str = Field(..., min_length=1)
    image_mime: str = Field("image/jpeg", pattern=r"^image/(jpeg|png|webp)$")
