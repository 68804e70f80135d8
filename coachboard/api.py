# -*- coding: utf-8 -*-
"""
Coachboard API

Coach dashboard over the hosted backend: athletes, check-ins, measurements,
nutrition, steps and water, plus the athlete-facing check-in endpoints.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from .auth.api import router as auth_router
from .auth.security import get_current_user_from_request
from .checkins.api import router as checkins_router
from .config import settings
from .measurements.api import router as measurements_router
from .nutrition.api import router as nutrition_router
from .profiles.api import router as profiles_router
from .tracking.api import router as tracking_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Coachboard",
    description="Coach dashboard: athletes, check-ins, measurements, nutrition, steps and water",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_AUTH_EXEMPT_PATHS = (
    "/api/auth/login",
    "/api/auth/refresh",
    "/api/auth/password/reset-request",
    "/api/auth/password/reset",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
)


def _is_exempt(path: str) -> bool:
    return any(path == p or path.startswith(p + "/") for p in _AUTH_EXEMPT_PATHS)


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    path = request.url.path
    if path.startswith("/api") and path != "/api/health" and not _is_exempt(path):
        try:
            get_current_user_from_request(request)
        except HTTPException as exc:
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
    return await call_next(request)


app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(checkins_router)
app.include_router(measurements_router)
app.include_router(nutrition_router)
app.include_router(tracking_router)


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "version": app.version,
        "timestamp": datetime.now().isoformat(),
    }


# ---------- static frontend ----------

if settings.frontend_dir.exists():
    app.mount("/app", StaticFiles(directory=settings.frontend_dir, html=True), name="app")


@app.get("/", include_in_schema=False)
def root():
    if settings.frontend_dir.exists():
        return RedirectResponse(url="/app/")
    return {"message": "Coachboard API", "docs": "/api/docs"}


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    host = os.environ.get("COACHBOARD_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("COACHBOARD_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000

    logger.info("Starting Coachboard on %s:%s", host, port)
    uvicorn.run("coachboard.api:app", host=host, port=port, reload=False)
