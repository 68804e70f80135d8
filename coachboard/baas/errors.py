# -*- coding: utf-8 -*-
"""Hosted backend — classifying table, storage and auth failures."""

from __future__ import annotations

from typing import Optional

import httpx
from supabase import AuthError, PostgrestAPIError, StorageException

# PostgREST code for `.single()` when the filter matched zero rows.
NO_ROWS_CODE = "PGRST116"
# Missing, expired or malformed JWT.
_JWT_CODES = {"PGRST301", "PGRST302", "PGRST303"}
# insufficient_privilege (row-level security refused the write).
_PRIVILEGE_CODE = "42501"

BAAS_ERRORS = (PostgrestAPIError, AuthError, StorageException, httpx.HTTPError)


def is_no_rows(exc: BaseException) -> bool:
    return isinstance(exc, PostgrestAPIError) and exc.code == NO_ROWS_CODE


def error_status(exc: BaseException) -> Optional[int]:
    """HTTP status the service reported for `exc`, where one can be recovered."""
    if isinstance(exc, PostgrestAPIError):
        if exc.code in _JWT_CODES:
            return 401
        if exc.code == _PRIVILEGE_CODE:
            return 403
        if exc.code == NO_ROWS_CODE:
            return 406
        return None
    if isinstance(exc, AuthError):
        return getattr(exc, "status", None)
    if isinstance(exc, StorageException):
        payload = exc.args[0] if exc.args else None
        if isinstance(payload, dict):
            try:
                return int(payload.get("statusCode") or payload.get("status") or 0) or None
            except (TypeError, ValueError):
                return None
    return None


def error_message(exc: BaseException) -> str:
    if isinstance(exc, PostgrestAPIError):
        return exc.message or str(exc)
    if isinstance(exc, StorageException):
        payload = exc.args[0] if exc.args else None
        if isinstance(payload, dict):
            return str(payload.get("message") or payload.get("error") or payload)
    return getattr(exc, "message", None) or str(exc)


def status_for(exc: BaseException) -> int:
    """Status the dashboard answers with when a backend call fails."""
    if is_no_rows(exc):
        return 404
    if isinstance(exc, httpx.HTTPError):
        return 503
    status = error_status(exc)
    if status in (401, 403):
        return status
    return 502
