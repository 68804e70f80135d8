# -*- coding: utf-8 -*-
"""Auth — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = Field(None, min_length=1)


class UserPublic(BaseModel):
    id: str
    email: Optional[str] = None
    role: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserPublic
    token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., max_length=128)
    confirm_password: str = Field(..., max_length=128)


class ResetRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)


class ResetPasswordRequest(BaseModel):
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    new_password: str = Field(..., max_length=128)
    confirm_password: str = Field(..., max_length=128)


class StatusResponse(BaseModel):
    status: str = "ok"
    message: Optional[str] = None
