# -*- coding: utf-8 -*-
"""Tracking — step goals / entries and water goals / entries.

Step goals are keyed by the athlete's profile id; step entries, water goals
and water entries by the auth user id.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from ..baas import BAAS_ERRORS, first_row

logger = logging.getLogger(__name__)

STEP_GOAL_TABLE = "step_goals"
STEP_ENTRY_TABLE = "step_entries"
WATER_GOAL_TABLE = "water_goals"
WATER_ENTRY_TABLE = "water_tracking"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _entries(client: Client, table: str, user_id: str, start: date, end: date) -> List[Dict[str, Any]]:
    return (
        client.table(table)
        .select("*")
        .eq("user_id", user_id)
        .gte("date", start.isoformat())
        .lte("date", end.isoformat())
        .order("date", desc=True)
        .execute()
        .data
    ) or []


def get_step_goal(client: Client, profile_id: str) -> Optional[Dict[str, Any]]:
    """Active goal, newest assignment first; lookup failures count as "no goal"."""
    try:
        return first_row(
            client.table(STEP_GOAL_TABLE)
            .select("*")
            .eq("user_id", profile_id)
            .eq("is_active", True)
            .order("assigned_at", desc=True)
        )
    except BAAS_ERRORS as exc:
        logger.warning("Step goal lookup for %s failed: %s", profile_id, exc)
        return None


def list_step_entries(client: Client, user_id: str, start: date, end: date) -> List[Dict[str, Any]]:
    return _entries(client, STEP_ENTRY_TABLE, user_id, start, end)


def set_step_goal(client: Client, profile_id: str, daily_steps: int) -> Dict[str, Any]:
    """Deactivate the current goal, then insert the new one as active."""
    (
        client.table(STEP_GOAL_TABLE)
        .update({"is_active": False, "updated_at": _utc_now_iso()})
        .eq("user_id", profile_id)
        .eq("is_active", True)
        .execute()
    )
    rows = (
        client.table(STEP_GOAL_TABLE)
        .insert({"user_id": profile_id, "daily_steps": daily_steps, "is_active": True})
        .execute()
        .data
    )
    return rows[0] if rows else {"user_id": profile_id, "daily_steps": daily_steps, "is_active": True}


def get_water_goal(client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    try:
        return first_row(client.table(WATER_GOAL_TABLE).select("*").eq("user_id", user_id))
    except BAAS_ERRORS as exc:
        logger.warning("Water goal lookup for %s failed: %s", user_id, exc)
        return None


def list_water_entries(client: Client, user_id: str, start: date, end: date) -> List[Dict[str, Any]]:
    return _entries(client, WATER_ENTRY_TABLE, user_id, start, end)


def set_water_goal(client: Client, user_id: str, water_goal_ml: int) -> Dict[str, Any]:
    """Update the athlete's goal row, or create it."""
    existing = first_row(client.table(WATER_GOAL_TABLE).select("id").eq("user_id", user_id))
    if existing:
        rows = (
            client.table(WATER_GOAL_TABLE)
            .update({"water_goal_ml": water_goal_ml, "updated_at": _utc_now_iso()})
            .eq("user_id", user_id)
            .execute()
            .data
        )
    else:
        rows = (
            client.table(WATER_GOAL_TABLE)
            .insert({"user_id": user_id, "water_goal_ml": water_goal_ml})
            .execute()
            .data
        )
    return rows[0] if rows else {"user_id": user_id, "water_goal_ml": water_goal_ml}
