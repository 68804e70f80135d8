from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the coach dashboard backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent

        # ---- Hosted backend (auth / tables / storage) ----
        self.baas_url: str = (os.environ.get("COACHBOARD_BAAS_URL") or "http://127.0.0.1:54321").rstrip("/")
        self.baas_anon_key: str = os.environ.get("COACHBOARD_BAAS_ANON_KEY") or ""
        # Access tokens are issued by the hosted auth service and signed with the project JWT secret.
        # The dev fallback only exists so local demos start; production MUST set it.
        self.jwt_secret: str = os.environ.get("COACHBOARD_JWT_SECRET") or "dev-secret-change-me"
        self.http_timeout: float = float(os.environ.get("COACHBOARD_HTTP_TIMEOUT") or "15")

        # ---- Progress photos ----
        self.photo_bucket: str = os.environ.get("COACHBOARD_PHOTO_BUCKET") or "progress-media"
        self.signed_url_ttl: int = int(os.environ.get("COACHBOARD_SIGNED_URL_TTL") or "3600")
        self.max_photo_mb: int = int(os.environ.get("COACHBOARD_MAX_PHOTO_MB") or "10")

        # ---- Session / password ----
        self.cookie_secure: bool = (os.environ.get("COACHBOARD_COOKIE_SECURE") or "").strip() in {"1", "true", "True"}
        self.password_min_length: int = int(os.environ.get("COACHBOARD_PASSWORD_MIN_LENGTH") or "6")
        self.reset_redirect_url: str | None = os.environ.get("COACHBOARD_RESET_REDIRECT_URL") or None

        # ---- Dashboards ----
        self.expected_meals_per_day: int = int(os.environ.get("COACHBOARD_EXPECTED_MEALS_PER_DAY") or "3")

        self.log_level: str = (os.environ.get("COACHBOARD_LOG_LEVEL") or "INFO").upper()
        self.frontend_dir: Path = Path(
            os.environ.get("COACHBOARD_FRONTEND_DIR") or (base_dir.parent / "frontend")
        ).expanduser()

        cors = os.environ.get("COACHBOARD_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
