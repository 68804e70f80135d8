# -*- coding: utf-8 -*-
"""Check-ins — progress photo keys and signed URLs."""

from __future__ import annotations

import logging
import time
from typing import Dict, Iterable, List, Optional

from supabase import Client

from ..baas import BAAS_ERRORS
from ..config import settings

logger = logging.getLogger(__name__)


def normalize_photo_key(path: str, bucket: Optional[str] = None) -> str:
    """Strip a leading `<bucket>/` and any leading slash from a stored key."""
    bucket = bucket or settings.photo_bucket
    key = (path or "").strip()
    prefix = f"{bucket}/"
    if key.startswith(prefix):
        key = key[len(prefix):]
    return key.lstrip("/")


def photo_upload_key(user_id: str, position: str, *, now_ms: Optional[int] = None) -> str:
    stamp = int(now_ms if now_ms is not None else time.time() * 1000)
    return f"{user_id}/photos/{position}-{stamp}.jpg"


def sign_photo(client: Client, path: str, *, ttl: Optional[int] = None) -> Optional[str]:
    key = normalize_photo_key(path)
    if not key:
        return None
    try:
        signed = client.storage.from_(settings.photo_bucket).create_signed_url(key, ttl or settings.signed_url_ttl)
    except BAAS_ERRORS as exc:
        logger.warning("Could not sign photo %s in %s: %s", key, settings.photo_bucket, exc)
        return None
    return signed.get("signedURL") or signed.get("signedUrl") or None


def sign_photos(client: Client, paths: Iterable[str], *, ttl: Optional[int] = None) -> List[Dict[str, str]]:
    """Signed URLs in input order; photos that fail to sign are dropped."""
    out: List[Dict[str, str]] = []
    for path in paths or []:
        url = sign_photo(client, path, ttl=ttl)
        if url:
            out.append({"path": path, "url": url})
    return out
