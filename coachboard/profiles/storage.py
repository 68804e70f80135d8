# -*- coding: utf-8 -*-
"""Profiles — reads/writes against the `profiles` table."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from ..baas import BAAS_ERRORS, first_row

logger = logging.getLogger(__name__)

PROFILE_TABLE = "profiles"
ASSIGNMENT_TABLE = "assigned_plans"

ATHLETE_LIST_COLUMNS = """
    id, user_id, email, username, first_name, last_name, gender,
    onboarding_complete, invitation_status, created_at
"""

ASSIGNED_PROGRAM_COLUMNS = """
    id,
    program_template_id,
    start_date,
    assigned_at,
    program:program_templates!program_template_id(id, name, description, version)
"""


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def derive_username(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    first = (first_name or "").strip()
    last = (last_name or "").strip()
    if not first or not last:
        return None
    return f"{first}.{last}".lower().replace(" ", "")


def display_name(profile: Dict[str, Any]) -> str:
    username = (profile.get("username") or "").strip()
    if username:
        return username
    email = (profile.get("email") or "").strip()
    if email:
        return email.split("@", 1)[0] or "Unknown"
    return "Unknown"


def get_profile_by_user_id(client: Client, user_id: str) -> Dict[str, Any]:
    return client.table(PROFILE_TABLE).select("*").eq("user_id", user_id).single().execute().data


def update_profile(client: Client, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    values = dict(changes)
    if "first_name" in values or "last_name" in values:
        current = get_profile_by_user_id(client, user_id)
        username = derive_username(
            values.get("first_name", current.get("first_name")),
            values.get("last_name", current.get("last_name")),
        )
        if username:
            values["username"] = username
    values["updated_at"] = _utc_now_iso()
    rows = client.table(PROFILE_TABLE).update(values).eq("user_id", user_id).execute().data
    if rows:
        return rows[0]
    return get_profile_by_user_id(client, user_id)


def matches_search(profile: Dict[str, Any], query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    for key in ("username", "email"):
        value = (profile.get(key) or "").lower()
        if needle in value:
            return True
    return False


def list_coach_athletes(client: Client, coach_id: str, *, query: Optional[str] = None) -> List[Dict[str, Any]]:
    rows = (
        client.table(PROFILE_TABLE)
        .select(ATHLETE_LIST_COLUMNS)
        .eq("coach_id", coach_id)
        .neq("role", "coach")
        .order("created_at", desc=True)
        .execute()
        .data
    ) or []
    if query:
        rows = [r for r in rows if matches_search(r, query)]
    return [dict(r, display_name=display_name(r)) for r in rows]


def get_coach_athlete(client: Client, coach_id: str, athlete_id: str) -> Dict[str, Any]:
    return (
        client.table(PROFILE_TABLE)
        .select("*")
        .eq("id", athlete_id)
        .eq("coach_id", coach_id)
        .single()
        .execute()
        .data
    )


def get_assigned_program(client: Client, athlete_id: str) -> Optional[Dict[str, Any]]:
    """Latest training-program assignment; lookup failures count as "no program"."""
    try:
        row = first_row(
            client.table(ASSIGNMENT_TABLE)
            .select(ASSIGNED_PROGRAM_COLUMNS)
            .eq("athlete_id", athlete_id)
            .not_.is_("program_template_id", "null")
            .order("created_at", desc=True)
        )
    except BAAS_ERRORS as exc:
        logger.warning("Program lookup for %s failed: %s", athlete_id, exc)
        return None
    if not row:
        return None
    program = row.get("program") or {}
    return {
        "id": str(row["id"]),
        "program_template_id": row.get("program_template_id"),
        "name": program.get("name"),
        "description": program.get("description"),
        "version": program.get("version"),
        "start_date": row.get("start_date"),
        "assigned_at": row.get("assigned_at"),
    }


def _count(query: Any) -> int:
    return query.execute().count or 0


def count_dashboard(client: Client, coach_id: str) -> Dict[str, int]:
    athletes = _count(
        client.table(PROFILE_TABLE).select("id", count="exact", head=True).eq("coach_id", coach_id).neq("role", "coach")
    )
    programs = _count(client.table("program_templates").select("id", count="exact", head=True).eq("coach_id", coach_id))
    plans = _count(client.table("nutrition_plans").select("id", count="exact", head=True).eq("coach_id", coach_id))
    return {"athletes": athletes, "programs": programs, "nutrition_plans": plans}
