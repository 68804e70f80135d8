# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from supabase import AuthSessionMissingError, Client

from ..baas import BAAS_ERRORS, error_message, error_status
from ..baas.deps import get_anon_baas
from ..config import settings
from .models import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
    ResetRequest,
    StatusResponse,
    UserPublic,
)
from .security import REFRESH_COOKIE_NAME, TOKEN_COOKIE_NAME, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

REFRESH_COOKIE_MAX_AGE = 30 * 24 * 60 * 60
RESET_LINK_EXPIRED = "The password reset link has expired. Please request a new one."


def validate_new_password(new_password: str, confirm_password: str) -> None:
    if new_password != confirm_password:
        raise HTTPException(status_code=400, detail="New passwords don't match")
    if len(new_password) < settings.password_min_length:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.password_min_length} characters",
        )


def _user_public(user: Dict[str, Any]) -> UserPublic:
    role = user.get("role")
    meta = user.get("app_metadata") or {}
    if isinstance(meta, dict) and meta.get("role"):
        role = meta["role"]
    return UserPublic(id=str(user.get("id") or ""), email=user.get("email"), role=role)


def _session_payload(auth_response: Any) -> Dict[str, Any]:
    """SDK AuthResponse -> plain dict (tokens + the bits of the user we expose)."""
    session = getattr(auth_response, "session", None)
    if session is None:
        return {}
    user = getattr(session, "user", None) or getattr(auth_response, "user", None)
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": session.expires_in,
        "user": {"id": user.id, "email": user.email, "app_metadata": user.app_metadata or {}} if user else {},
    }


def _set_auth_cookies(resp: Response, session: Dict[str, Any]) -> None:
    max_age = int(session.get("expires_in") or 3600)
    resp.set_cookie(
        TOKEN_COOKIE_NAME,
        session["access_token"],
        httponly=True,
        secure=bool(settings.cookie_secure),
        samesite="lax",
        max_age=max_age,
        path="/",
    )
    refresh = session.get("refresh_token")
    if refresh:
        resp.set_cookie(
            REFRESH_COOKIE_NAME,
            refresh,
            httponly=True,
            secure=bool(settings.cookie_secure),
            samesite="lax",
            max_age=REFRESH_COOKIE_MAX_AGE,
            path="/api/auth",
        )


def _auth_response(session: Dict[str, Any]) -> AuthResponse:
    if not session.get("access_token"):
        raise HTTPException(status_code=502, detail="Sign-in did not return a session")
    return AuthResponse(
        user=_user_public(session.get("user") or {}),
        token=session["access_token"],
        refresh_token=session.get("refresh_token"),
        expires_in=session.get("expires_in"),
    )


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(request: LoginRequest, response: Response, client: Client = Depends(get_anon_baas)):
    try:
        result = client.auth.sign_in_with_password({"email": request.email, "password": request.password})
    except BAAS_ERRORS as exc:
        if error_status(exc) in (400, 401):
            raise HTTPException(status_code=401, detail="Invalid email or password") from exc
        logger.error("Sign-in failed: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to sign in.") from exc

    session = _session_payload(result)
    out = _auth_response(session)
    _set_auth_cookies(response, session)
    return out


@router.post("/refresh", response_model=AuthResponse, summary="Refresh the session")
def refresh(
    http_request: Request,
    response: Response,
    request: Optional[RefreshRequest] = None,
    client: Client = Depends(get_anon_baas),
):
    token = (request.refresh_token if request else None) or http_request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        result = client.auth.refresh_session(token)
    except BAAS_ERRORS as exc:
        logger.warning("Session refresh rejected: %s", exc)
        raise HTTPException(status_code=401, detail="Session expired") from exc

    session = _session_payload(result)
    out = _auth_response(session)
    _set_auth_cookies(response, session)
    return out


@router.post("/logout", response_model=StatusResponse, summary="Logout")
def logout(response: Response, user: dict = Depends(get_current_user), client: Client = Depends(get_anon_baas)):
    try:
        client.auth.admin.sign_out(user["access_token"])
    except BAAS_ERRORS as exc:
        # The local session is cleared either way.
        logger.warning("Sign-out for %s failed: %s", user["id"], exc)
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
    response.delete_cookie(REFRESH_COOKIE_NAME, path="/api/auth")
    return StatusResponse()


@router.get("/me", response_model=UserPublic, summary="Get current user")
def me(user: dict = Depends(get_current_user)):
    return _user_public(user)


@router.post("/password", response_model=StatusResponse, summary="Change own password")
def change_password(
    request: ChangePasswordRequest,
    user: dict = Depends(get_current_user),
    client: Client = Depends(get_anon_baas),
):
    validate_new_password(request.new_password, request.confirm_password)

    email = user.get("email")
    if not email:
        raise HTTPException(status_code=400, detail="Account has no email address")
    # Signing in again both checks the current password and gives the client a session to update.
    try:
        client.auth.sign_in_with_password({"email": email, "password": request.current_password})
    except BAAS_ERRORS as exc:
        if error_status(exc) in (400, 401):
            raise HTTPException(status_code=400, detail="Current password is incorrect") from exc
        logger.error("Password re-verification failed: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to update password") from exc

    try:
        client.auth.update_user({"password": request.new_password})
    except BAAS_ERRORS as exc:
        logger.error("Password update for %s failed: %s", user["id"], exc)
        raise HTTPException(status_code=502, detail="Failed to update password") from exc
    return StatusResponse(message="Password updated successfully")


@router.post("/password/reset-request", response_model=StatusResponse, summary="Email a password reset link")
def request_password_reset(request: ResetRequest, client: Client = Depends(get_anon_baas)):
    options = {"redirect_to": settings.reset_redirect_url} if settings.reset_redirect_url else {}
    try:
        client.auth.reset_password_for_email(request.email, options)
    except BAAS_ERRORS as exc:
        logger.error("Password reset request failed: %s", exc)
        raise HTTPException(status_code=502, detail=error_message(exc) or "Failed to send password reset email.") from exc
    return StatusResponse(message="Password reset instructions have been sent to your email")


@router.post("/password/reset", response_model=StatusResponse, summary="Set a new password from a reset link")
def reset_password(request: ResetPasswordRequest, client: Client = Depends(get_anon_baas)):
    validate_new_password(request.new_password, request.confirm_password)
    try:
        client.auth.set_session(request.access_token, request.refresh_token or "")
    except (AuthSessionMissingError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=RESET_LINK_EXPIRED) from exc
    except BAAS_ERRORS as exc:
        if error_status(exc) in (401, 403):
            raise HTTPException(status_code=400, detail=RESET_LINK_EXPIRED) from exc
        logger.error("Recovery session rejected: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to reset password") from exc

    try:
        client.auth.update_user({"password": request.new_password})
    except BAAS_ERRORS as exc:
        logger.error("Password reset failed: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to reset password") from exc
    return StatusResponse(message="Your password has been successfully reset.")
