# -*- coding: utf-8 -*-
"""Measurements — `athlete_measurements` access + derived values."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from supabase import Client

from ..baas import first_row
from ..formatting import parse_date
from .formulas import BodyFatMethod, body_composition, compute_body_fat, mifflin_st_jeor

logger = logging.getLogger(__name__)

MEASUREMENT_TABLE = "athlete_measurements"

SITE_FIELDS = (
    "chest_mm", "abdominal_mm", "thigh_mm", "tricep_mm", "subscapular_mm", "suprailiac_mm",
    "midaxillary_mm", "bicep_mm", "lower_back_mm", "calf_mm", "waist_cm", "neck_cm", "hips_cm",
)


def list_measurements(client: Client, user_id: str) -> List[Dict[str, Any]]:
    return (
        client.table(MEASUREMENT_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("measurement_date", desc=True)
        .execute()
        .data
    ) or []


def get_latest_measurement(client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    return first_row(
        client.table(MEASUREMENT_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("measurement_date", desc=True)
    )


def save_measurement(client: Client, row: Dict[str, Any]) -> Dict[str, Any]:
    """Insert or replace the athlete's measurement for that date."""
    rows = client.table(MEASUREMENT_TABLE).upsert(row, on_conflict="user_id,measurement_date").execute().data
    return rows[0] if rows else row


def delete_measurement(client: Client, measurement_id: str) -> None:
    client.table(MEASUREMENT_TABLE).delete().eq("id", measurement_id).execute()


def build_measurement_row(
    data: Dict[str, Any],
    *,
    user_id: str,
    profile: Dict[str, Any],
    previous: Optional[Dict[str, Any]] = None,
    created_by: Optional[str] = None,
) -> Dict[str, Any]:
    """Form data -> table row, with body fat / composition / BMR filled in where possible.

    `body_fat_override` wins over the formula result.
    """
    row: Dict[str, Any] = {k: v for k, v in data.items() if v is not None}
    row["user_id"] = user_id
    if created_by:
        row["created_by"] = created_by
    if isinstance(row.get("calculation_method"), BodyFatMethod):
        row["calculation_method"] = row["calculation_method"].value

    weight = row.get("weight_kg")
    gender = profile.get("gender")
    age = profile.get("age")
    height = profile.get("height_cm")

    if weight and previous and previous.get("weight_kg"):
        row["weight_change_kg"] = round(float(weight) - float(previous["weight_kg"]), 2)

    body_fat: Optional[float] = None
    method = row.get("calculation_method")
    if method and gender and age:
        try:
            body_fat = compute_body_fat(
                BodyFatMethod(method),
                gender,
                float(age),
                {k: row.get(k) for k in SITE_FIELDS},
                height_cm=height,
            )
        except ValueError as exc:
            logger.info("Body fat not derived for %s: %s", user_id, exc)

    override = row.get("body_fat_override")
    if override:
        body_fat = float(override)

    if body_fat is not None:
        row["body_fat_percentage"] = body_fat
        if weight:
            comp = body_composition(float(weight), body_fat)
            row["lean_body_mass_kg"] = comp.lean_mass_kg
            row["fat_mass_kg"] = comp.fat_mass_kg

    if weight and height and age and gender:
        row["basal_metabolic_rate"] = mifflin_st_jeor(gender, float(weight), float(height), float(age))

    return row


def _change(latest: Dict[str, Any], oldest: Dict[str, Any], key: str) -> Optional[float]:
    a = latest.get(key)
    b = oldest.get(key)
    if not a or not b:
        return None
    return round(float(a) - float(b), 2)


def summarize_measurements(measurements: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Latest vs oldest changes; None when there are no measurements."""
    if not measurements:
        return None
    ordered = sorted(measurements, key=lambda m: parse_date(m["measurement_date"]), reverse=True)
    latest = ordered[0]
    oldest = ordered[-1]
    days = (parse_date(latest["measurement_date"]) - parse_date(oldest["measurement_date"])).days
    return {
        "latest": latest,
        "oldest": oldest,
        "weight_change": _change(latest, oldest, "weight_kg"),
        "body_fat_change": _change(latest, oldest, "body_fat_percentage"),
        "lean_mass_change": _change(latest, oldest, "lean_body_mass_kg"),
        "fat_mass_change": _change(latest, oldest, "fat_mass_kg"),
        "days": days,
        "weeks": days // 7,
        "months": days // 30,
    }
