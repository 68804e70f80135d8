# -*- coding: utf-8 -*-
"""Check-ins — API endpoints (coach review + athlete submission)."""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from ..auth.roles import require_coach
from ..auth.security import get_current_user
from ..baas import BAAS_ERRORS, first_row
from ..baas.deps import get_baas
from ..banners import banner_on_error
from ..config import settings
from ..formatting import format_short_date, parse_date
from ..profiles.storage import PROFILE_TABLE, get_coach_athlete
from .models import (
    CheckIn,
    CheckInComparison,
    CheckInDetail,
    CheckInListResponse,
    CheckInSubmitRequest,
    FeedbackRequest,
    FeedbackResponse,
    LatestCheckInResponse,
    PhotoUploadRequest,
    PhotoUploadResponse,
    ReviewListResponse,
    Timeframe,
)
from .photos import photo_upload_key, sign_photo, sign_photos
from .progress import (
    adherence_views,
    compare_check_ins,
    compute_stats,
    days_since,
    measurement_series,
    period_range,
    review_item,
)
from .storage import (
    create_check_in,
    get_check_in,
    get_latest_check_in,
    list_check_ins,
    list_review_check_ins,
    update_feedback,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Check-ins"])


def parse_ref_or_400(ref: Optional[str]) -> date:
    if not ref:
        return date.today()
    try:
        return parse_date(ref)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid date: {ref}") from exc


def _athlete_user_id(client: Client, coach: Dict[str, Any], athlete_id: str) -> str:
    with banner_on_error("Failed to load athlete.", not_found="Athlete not found."):
        athlete = get_coach_athlete(client, coach["id"], athlete_id)
    user_id = athlete.get("user_id")
    if not user_id:
        raise HTTPException(status_code=404, detail="Athlete has no linked account.")
    return str(user_id)


def _athlete_summary(client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    try:
        return first_row(
            client.table(PROFILE_TABLE)
            .select("id, user_id, first_name, last_name, email, username")
            .eq("user_id", user_id)
        )
    except BAAS_ERRORS as exc:
        logger.warning("Athlete profile for check-in owner %s unavailable: %s", user_id, exc)
        return None


# ---- coach ----
@router.get(
    "/api/admin/athletes/{athlete_id}/check-ins",
    response_model=CheckInListResponse,
    summary="Athlete check-ins for a timeframe",
)
def athlete_check_ins(
    athlete_id: str,
    timeframe: Timeframe = Query(default=Timeframe.week),
    ref: Optional[str] = Query(default=None, description="YYYY-MM-DD reference date"),
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    ref_date = parse_ref_or_400(ref)
    user_id = _athlete_user_id(client, coach, athlete_id)
    with banner_on_error("Failed to load check-in data"):
        rows = list_check_ins(client, user_id, timeframe=timeframe.value, ref=ref_date)

    start, end = period_range(timeframe.value, ref_date)
    return CheckInListResponse(
        athlete_id=athlete_id,
        timeframe=timeframe,
        start=start.isoformat() if start else None,
        end=end.isoformat() if end else None,
        count=len(rows),
        stats=compute_stats(rows),
        check_ins=[CheckIn.model_validate(r) for r in rows],
        measurements=measurement_series(rows),
    )


@router.get(
    "/api/admin/athletes/{athlete_id}/check-ins/review",
    response_model=ReviewListResponse,
    summary="Recent check-ins for review",
)
def review_check_ins(athlete_id: str, coach: dict = Depends(require_coach), client: Client = Depends(get_baas)):
    user_id = _athlete_user_id(client, coach, athlete_id)
    with banner_on_error("Failed to load check-ins."):
        rows = list_review_check_ins(client, user_id)
    items = [review_item(r) for r in rows]
    return ReviewListResponse(athlete_id=athlete_id, count=len(items), items=items)


@router.get(
    "/api/admin/athletes/{athlete_id}/check-ins/compare",
    response_model=CheckInComparison,
    summary="Compare two check-ins",
)
def compare(
    athlete_id: str,
    a: str = Query(..., description="First check-in id"),
    b: str = Query(..., description="Second check-in id"),
    coach: dict = Depends(require_coach),
    client: Client = Depends(get_baas),
):
    if a == b:
        raise HTTPException(
            status_code=400,
            detail="Cannot compare a check-in with itself. Please select two different check-ins.",
        )
    user_id = _athlete_user_id(client, coach, athlete_id)
    with banner_on_error("Failed to load comparison data.", not_found="The requested check-in data could not be found."):
        first = get_check_in(client, a)
        second = get_check_in(client, b)
    if first.get("user_id") != user_id or second.get("user_id") != user_id:
        raise HTTPException(status_code=404, detail="The requested check-in data could not be found.")

    result = compare_check_ins(first, second)
    older, newer = result["older"], result["newer"]

    def _side(c: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": c["id"],
            "check_in_date": c["check_in_date"],
            "display_date": format_short_date(c["check_in_date"]),
            "photos": sign_photos(client, c.get("photos") or []),
        }

    return CheckInComparison(
        athlete_id=athlete_id,
        older=_side(older),
        newer=_side(newer),
        days_between=result["days_between"],
        body=result["body"],
        wellness=result["wellness"],
    )


@router.get("/api/admin/check-ins/{check_in_id}", response_model=CheckInDetail, summary="Check-in detail")
def check_in_detail(check_in_id: str, coach: dict = Depends(require_coach), client: Client = Depends(get_baas)):  # noqa: ARG001
    with banner_on_error("Failed to load check-in details.", not_found="Check-in not found."):
        row = get_check_in(client, check_in_id)

    video = row.get("video_url")
    return CheckInDetail.model_validate(
        dict(
            row,
            display_date=format_short_date(row["check_in_date"]),
            athlete=_athlete_summary(client, row["user_id"]),
            photo_urls=sign_photos(client, row.get("photos") or []),
            video_signed_url=sign_photo(client, video) if video else None,
            adherence=adherence_views(row),
        )
    )


@router.put(
    "/api/admin/check-ins/{check_in_id}/feedback",
    response_model=FeedbackResponse,
    summary="Save coach feedback",
)
def save_feedback(
    check_in_id: str,
    request: FeedbackRequest,
    coach: dict = Depends(require_coach),  # noqa: ARG001
    client: Client = Depends(get_baas),
):
    with banner_on_error("Failed to save feedback.", not_found="Check-in not found."):
        row = update_feedback(client, check_in_id, request.coach_feedback)
    if row is None:
        raise HTTPException(status_code=404, detail="Check-in not found.")
    return FeedbackResponse.model_validate(row)


# ---- athlete ----
@router.get("/api/check-ins", response_model=List[CheckIn], summary="Own check-ins")
def my_check_ins(user: dict = Depends(get_current_user), client: Client = Depends(get_baas)):
    with banner_on_error("Failed to fetch check-ins"):
        rows = list_check_ins(client, user["id"])
    return [CheckIn.model_validate(r) for r in rows]


@router.get("/api/check-ins/latest", response_model=LatestCheckInResponse, summary="Latest own check-in")
def my_latest_check_in(user: dict = Depends(get_current_user), client: Client = Depends(get_baas)):
    with banner_on_error("Failed to fetch latest check-in"):
        row = get_latest_check_in(client, user["id"])
    if not row:
        return LatestCheckInResponse()
    return LatestCheckInResponse(check_in=CheckIn.model_validate(row), days_since=days_since(row["check_in_date"]))


@router.post("/api/check-ins", response_model=CheckIn, status_code=201, summary="Submit a check-in")
def submit_check_in(
    request: CheckInSubmitRequest,
    user: dict = Depends(get_current_user),
    client: Client = Depends(get_baas),
):
    with banner_on_error("Failed to submit check-in"):
        row = create_check_in(client, user["id"], request.model_dump(mode="json"))
    if row is None:
        raise HTTPException(status_code=502, detail="Failed to submit check-in")
    return CheckIn.model_validate(row)


def _decode_image_or_400(image_base64: str, max_bytes: int) -> bytes:
    try:
        data = base64.b64decode(image_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid base64 image: {exc}") from exc
    if len(data) > max_bytes:
        raise HTTPException(status_code=400, detail=f"Image too large: {len(data)} bytes > {max_bytes}")
    return data


@router.post("/api/check-ins/photos", response_model=PhotoUploadResponse, status_code=201, summary="Upload a progress photo")
def upload_photo(
    request: PhotoUploadRequest,
    user: dict = Depends(get_current_user),
    client: Client = Depends(get_baas),
):
    data = _decode_image_or_400(request.image_base64, max_bytes=settings.max_photo_mb * 1024 * 1024)
    key = photo_upload_key(user["id"], request.position.value)
    with banner_on_error("Failed to upload photo"):
        client.storage.from_(settings.photo_bucket).upload(key, data, {"content-type": request.image_mime})
    return PhotoUploadResponse(path=key, url=sign_photo(client, key))
