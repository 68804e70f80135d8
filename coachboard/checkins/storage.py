# -*- coding: utf-8 -*-
"""Check-ins — table access (`check_ins`, `body_metrics`, `wellness_metrics`)."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from supabase import Client

from ..baas import BAAS_ERRORS, first_row
from .progress import normalize_check_in, period_range

logger = logging.getLogger(__name__)

CHECK_IN_TABLE = "check_ins"
BODY_METRICS_TABLE = "body_metrics"
WELLNESS_METRICS_TABLE = "wellness_metrics"

REVIEW_LIST_LIMIT = 50

CHECK_IN_COLUMNS = """
    *,
    body_metrics(*),
    wellness_metrics(*)
"""

BODY_FIELDS = (
    "weight_kg", "body_fat_percentage", "waist_cm", "hip_cm", "chest_cm",
    "left_arm_cm", "right_arm_cm", "left_thigh_cm", "right_thigh_cm",
)
WELLNESS_FIELDS = (
    "sleep_hours", "sleep_quality", "stress_level", "fatigue_level",
    "motivation_level", "digestion", "menstrual_cycle_notes",
)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()



def list_check_ins(
    client: Client,
    user_id: str,
    *,
    timeframe: str = "all",
    ref: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Check-ins with metrics, newest first, limited to the timeframe window."""
    query = client.table(CHECK_IN_TABLE).select(CHECK_IN_COLUMNS).eq("user_id", user_id)
    start, end = period_range(timeframe, ref or date.today())
    if start and end:
        query = query.gte("check_in_date", start.isoformat()).lte("check_in_date", end.isoformat())
    rows = query.order("check_in_date", desc=True).execute().data or []
    return [normalize_check_in(r) for r in rows]


def list_review_check_ins(client: Client, user_id: str, *, limit: int = REVIEW_LIST_LIMIT) -> List[Dict[str, Any]]:
    rows = (
        client.table(CHECK_IN_TABLE)
        .select("id, check_in_date, notes, body_metrics(weight_kg)")
        .eq("user_id", user_id)
        .order("check_in_date", desc=True)
        .limit(limit)
        .execute()
        .data
    ) or []
    return [normalize_check_in(r) for r in rows]


def list_recent_check_ins(client: Client, user_id: str, *, limit: int = 5) -> List[Dict[str, Any]]:
    """Latest check-ins with weight / body fat only (athlete overview)."""
    rows = (
        client.table(CHECK_IN_TABLE)
        .select(
            """
            id, user_id, check_in_date, photos, video_url, diet_adherence,
            training_adherence, steps_adherence, notes, coach_feedback, created_at,
            body_metrics:body_metrics(weight_kg, body_fat_percentage)
            """
        )
        .eq("user_id", user_id)
        .order("check_in_date", desc=True)
        .limit(limit)
        .execute()
        .data
    ) or []
    return [normalize_check_in(r) for r in rows]


def get_check_in(client: Client, check_in_id: str) -> Dict[str, Any]:
    row = client.table(CHECK_IN_TABLE).select(CHECK_IN_COLUMNS).eq("id", check_in_id).single().execute().data
    return normalize_check_in(row)


def get_latest_check_in(client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    row = first_row(
        client.table(CHECK_IN_TABLE)
        .select(CHECK_IN_COLUMNS)
        .eq("user_id", user_id)
        .order("check_in_date", desc=True)
    )
    return normalize_check_in(row) if row else None


def update_feedback(client: Client, check_in_id: str, feedback: str) -> Optional[Dict[str, Any]]:
    """Updated row, or None when no check-in has that id."""
    rows = (
        client.table(CHECK_IN_TABLE)
        .update({"coach_feedback": feedback, "updated_at": _utc_now_iso()})
        .eq("id", check_in_id)
        .execute()
        .data
    )
    return rows[0] if rows else None


def _metric_row(check_in_id: str, data: Dict[str, Any], fields: Sequence[str]) -> Dict[str, Any]:
    row: Dict[str, Any] = {"check_in_id": check_in_id}
    for key in fields:
        # Empty / zero form values are stored as null.
        row[key] = data.get(key) or None
    return row


def create_check_in(client: Client, user_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Insert the check-in, then its body and wellness rows.

    A failed metrics insert is logged and does not undo the check-in.
    Returns None when the insert came back without a row.
    """
    photos = [p for p in (data.get("photos") or []) if p]
    check_in = {
        "user_id": user_id,
        "check_in_date": data["check_in_date"],
        "photos": photos or None,
        "video_url": data.get("video_url"),
        "diet_adherence": data.get("diet_adherence"),
        "training_adherence": data.get("training_adherence"),
        "steps_adherence": data.get("steps_adherence"),
        "notes": data.get("notes"),
    }
    created = client.table(CHECK_IN_TABLE).insert(check_in).execute().data
    if not created:
        return None
    row = created[0]

    for table, fields in ((BODY_METRICS_TABLE, BODY_FIELDS), (WELLNESS_METRICS_TABLE, WELLNESS_FIELDS)):
        try:
            client.table(table).insert(_metric_row(row["id"], data, fields)).execute()
        except BAAS_ERRORS as exc:
            logger.warning("Insert into %s for check-in %s failed: %s", table, row["id"], exc)

    return normalize_check_in(row)
