# -*- coding: utf-8 -*-
"""Measurements — API endpoints (history, summary, calculators)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from ..auth.roles import require_coach
from ..baas.deps import get_baas
from ..banners import banner_on_error
from ..profiles.storage import get_coach_athlete
from .formulas import MissingInputError, body_composition, compute_body_fat, energy_targets, mifflin_st_jeor
from .models import (
    BMRCalculatorRequest,
    BMRCalculatorResponse,
    BodyFatCalculatorRequest,
    BodyFatCalculatorResponse,
    Measurement,
    MeasurementCreateRequest,
    MeasurementListResponse,
    MeasurementSummary,
)
from .storage import (
    SITE_FIELDS,
    build_measurement_row,
    delete_measurement,
    get_latest_measurement,
    list_measurements,
    save_measurement,
    summarize_measurements,
)

router = APIRouter(prefix="/api/admin", tags=["Measurements"])


def _athlete(client: Client, coach: dict, athlete_id: str) -> dict:
    with banner_on_error("Failed to load athlete.", not_found="Athlete not found."):
        athlete = get_coach_athlete(client, coach["id"], athlete_id)
    if not athlete.get("user_id"):
        raise HTTPException(status_code=404, detail="Athlete has no linked account.")
    return athlete


@router.get(
    "/athletes/{athlete_id}/measurements",
    response_model=MeasurementListResponse,
    summary="Measurement history",
)
def athlete_measurements(athlete_id: str, coach: dict = Depends(require_coach), client: Client = Depends(get_baas)):
    athlete = _athlete(client, coach, athlete_id)
    with banner_on_error("Failed to load measurements."):
        rows = list_measurements(client, athlete["user_id"])
    return MeasurementListResponse(
        athlete_id=athlete_id,
        count=len(rows),
        measurements=[Measurement.model_validate(r) for r in rows],
    )


@router.get(
    "/athletes/{athlete_id}/measurements/latest",
    response_model=Optional[Measurement],
    summary="Most recent measurement",
)
def latest_measurement(athlete_id: str, coach: dict = Depends(require_coach), client: Client = Depends(get_baas)):
    athlete = _athlete(client, coach, athlete_id)
    with banner_on_error("Failed to load measurements."):
        row = get_latest_measurement(client, athlete["user_id"])
    return Measurement.model_validate(row) if row else None


@router.get(
    "/athletes/{athlete_id}/measurements/summary",
    response_model=MeasurementSummary,
    summary="Progress between first and latest measurement",
)
def measurement_summary(athlete_id: str, coach: dict = Depends(require_coach), client: Client = Depends(get_baas)):
    athlete = _athlete(client, coach, athlete_id)
    with banner_on_error("Failed to load measurements."):
        rows = list_measurements(client, athlete["user_id"])
    summary = summarize_measurements(rows)
    return MeasurementSummary(**summary) if summary else MeasurementSummary()


@router.post(
    "/athletes/{athlete_id}/measurements",
    response_model=Measurement,
    status_code=201,
    summary="Record a measurement",
)
def create_measurement(
    athlete_id: str,
    request: MeasurementCreateRequest,
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    athlete = _athlete(client, coach, athlete_id)
    with banner_on_error("Failed to save measurement"):
        previous = get_latest_measurement(client, athlete["user_id"])
        row = build_measurement_row(
            request.model_dump(),
            user_id=athlete["user_id"],
            profile=athlete,
            previous=previous,
            created_by=coach.get("user_id"),
        )
        saved = save_measurement(client, row)
    return Measurement.model_validate(saved)


@router.delete("/measurements/{measurement_id}", status_code=204, summary="Delete a measurement")
def remove_measurement(measurement_id: str, coach: dict = Depends(require_coach), client: Client = Depends(get_baas)):  # noqa: ARG001
    with banner_on_error("Failed to delete measurement"):
        delete_measurement(client, measurement_id)


@router.post("/calculators/body-fat", response_model=BodyFatCalculatorResponse, summary="Body fat calculator")
def body_fat_calculator(request: BodyFatCalculatorRequest, coach: dict = Depends(require_coach)):  # noqa: ARG001
    sites = request.model_dump(include=set(SITE_FIELDS))
    try:
        body_fat = compute_body_fat(
            request.method,
            request.gender.value,
            request.age,
            sites,
            height_cm=request.height_cm,
        )
    except (MissingInputError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    lean = fat = None
    if request.weight_kg:
        comp = body_composition(request.weight_kg, body_fat)
        lean, fat = comp.lean_mass_kg, comp.fat_mass_kg
    return BodyFatCalculatorResponse(
        method=request.method,
        body_fat_percentage=body_fat,
        lean_body_mass_kg=lean,
        fat_mass_kg=fat,
    )


@router.post("/calculators/bmr", response_model=BMRCalculatorResponse, summary="BMR / TDEE calculator")
def bmr_calculator(request: BMRCalculatorRequest, coach: dict = Depends(require_coach)):  # noqa: ARG001
    bmr = mifflin_st_jeor(request.gender.value, request.weight_kg, request.height_cm, request.age)
    targets = energy_targets(
        bmr,
        request.weight_kg,
        activity_factor=request.activity_factor,
        goal=request.goal,
        protein_g_per_kg=request.protein_g_per_kg,
        fat_g_per_kg=request.fat_g_per_kg,
    )
    return BMRCalculatorResponse(bmr=bmr, **targets)
