# -*- coding: utf-8 -*-
"""Hosted backend client factory.

Every request gets its own supabase client carrying the caller's access
token, so the backend's row-level security decides what a coach or athlete
may read and write.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from supabase import Client, ClientOptions, create_client

from ..config import settings


def _options(access_token: Optional[str]) -> ClientOptions:
    headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
    return ClientOptions(
        headers=headers,
        # Server side: sessions live in the caller's cookies, never in the client.
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=settings.http_timeout,
        storage_client_timeout=int(settings.http_timeout),
    )


def user_client(access_token: Optional[str]) -> Client:
    client = create_client(settings.baas_url, settings.baas_anon_key, options=_options(access_token))
    if access_token:
        client.postgrest.auth(access_token)
    return client


def anon_client() -> Client:
    """Client without a user token (sign-in, refresh, recovery email)."""
    return user_client(None)


def first_row(query: Any) -> Optional[Dict[str, Any]]:
    """First row of a select builder, or None; several matches are not an error."""
    rows = query.limit(1).execute().data or []
    if isinstance(rows, dict):
        return rows
    return rows[0] if rows else None
