# -*- coding: utf-8 -*-
"""Auth — profile-backed role dependencies."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import Depends, HTTPException
from supabase import Client

from ..baas.deps import get_baas
from ..banners import banner_on_error
from ..profiles.storage import get_profile_by_user_id
from .security import get_current_user

COACH_ROLE = "coach"


def get_current_profile(
    user: Dict[str, Any] = Depends(get_current_user),
    client: Client = Depends(get_baas),
) -> Dict[str, Any]:
    with banner_on_error("Failed to load profile.", not_found="Profile not found."):
        return get_profile_by_user_id(client, user["id"])


def require_coach(profile: Dict[str, Any] = Depends(get_current_profile)) -> Dict[str, Any]:
    if profile.get("role") != COACH_ROLE:
        raise HTTPException(status_code=403, detail="Coach access required")
    return profile
