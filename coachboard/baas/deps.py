# -*- coding: utf-8 -*-
"""FastAPI dependencies that hand each request its own backend client."""

from __future__ import annotations

from fastapi import Request
from supabase import Client

from ..auth.security import get_token_from_request
from .client import anon_client, user_client


def get_baas(request: Request) -> Client:
    token = getattr(request.state, "access_token", None) or get_token_from_request(request)
    return user_client(token)


def get_anon_baas() -> Client:
    return anon_client()
