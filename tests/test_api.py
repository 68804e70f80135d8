# -*- coding: utf-8 -*-

from __future__ import annotations

import base64
import copy
import hashlib
import hmac
import json
import os
import sys
import time
import unittest
from datetime import date
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

from fastapi.testclient import TestClient
from supabase import AuthApiError, AuthSessionMissingError, PostgrestAPIError, StorageException

JWT_SECRET = "test-secret"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def jwt_encode(payload: Dict[str, Any], secret: str = JWT_SECRET) -> str:
    """HS256 token shaped like the ones the hosted auth service issues."""
    header = _b64url(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode("utf-8"))
    body = _b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header}.{body}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header}.{body}.{_b64url(sig)}"


COACH = {
    "id": "coach-profile",
    "user_id": "coach-user",
    "email": "coach@example.com",
    "username": "casey.coach",
    "role": "coach",
    "onboarding_complete": True,
}
ATHLETE = {
    "id": "athlete-1",
    "user_id": "athlete-user",
    "coach_id": "coach-profile",
    "email": "sam@example.com",
    "username": "sam.lee",
    "first_name": "Sam",
    "last_name": "Lee",
    "role": "athlete",
    "gender": "male",
    "age": 30,
    "height_cm": 180,
    "onboarding_complete": None,
    "created_at": "2024-01-01T00:00:00Z",
}

TABLES: Dict[str, List[Dict[str, Any]]] = {
    "profiles": [COACH, ATHLETE],
    "check_ins": [
        {
            "id": "c1",
            "user_id": "athlete-user",
            "check_in_date": "2024-03-01",
            "photos": ["athlete-user/photos/front-1.jpg"],
            "diet_adherence": "Good",
            "notes": "Feeling a bit tired this week after travelling",
            "body_metrics": [{"weight_kg": 82, "body_fat_percentage": 16}],
            "wellness_metrics": [{"sleep_hours": 7, "stress_level": 4}],
        },
        {
            "id": "c2",
            "user_id": "athlete-user",
            "check_in_date": "2024-03-15",
            "photos": ["progress-media/athlete-user/photos/front-2.jpg"],
            "body_metrics": [{"weight_kg": 80, "body_fat_percentage": 15}],
            "wellness_metrics": [{"sleep_hours": 8, "stress_level": 2}],
        },
    ],
    "body_metrics": [],
    "wellness_metrics": [],
    "assigned_plans": [
        {
            "id": "a0",
            "athlete_id": "athlete-1",
            "program_template_id": "t1",
            "start_date": "2024-02-01",
            "assigned_at": "2024-02-01T08:00:00Z",
            "created_at": "2024-02-01T08:00:00Z",
            "program": {"id": "t1", "name": "Strength Block", "description": "4 days upper/lower", "version": 2},
        },
        {
            "id": "a1",
            "athlete_id": "athlete-1",
            "nutrition_plan_id": "p1",
            "start_date": "2024-03-01",
            "nutrition_plan": {
                "id": "p1",
                "name": "Cut",
                "total_calories": 2000,
                "protein_grams": 150,
                "carbohydrate_grams": 200,
                "fat_grams": 60,
            },
        },
    ],
    "meal_logs": [
        {
            "id": "l1",
            "user_id": "athlete-user",
            "name": "Lunch",
            "date": "2024-03-09",
            "time": "12:30:00",
            "is_extra_meal": False,
            "created_at": "2024-03-09T12:30:00Z",
            "meal": {
                "id": "m1",
                "food_items": [
                    {
                        "id": "mf1",
                        "quantity": 200,
                        "food_item": {
                            "food_name": "Rice",
                            "calories_per_100g": 130,
                            "protein_per_100g": 2,
                            "carbs_per_100g": 28,
                            "fat_per_100g": 0,
                        },
                    }
                ],
            },
        }
    ],
    "extra_meal_food_items": [],
    "athlete_measurements": [
        {
            "id": "m1",
            "user_id": "athlete-user",
            "measurement_date": "2024-01-01",
            "weight_kg": 84,
            "body_fat_percentage": 18,
            "lean_body_mass_kg": 68.9,
            "fat_mass_kg": 15.1,
        },
        {
            "id": "m2",
            "user_id": "athlete-user",
            "measurement_date": "2024-03-01",
            "weight_kg": 81,
            "body_fat_percentage": 16,
            "lean_body_mass_kg": 68.0,
            "fat_mass_kg": 13.0,
        },
    ],
    "program_templates": [
        {"id": "t1", "coach_id": "coach-profile", "name": "Strength Block"},
        {"id": "t2", "coach_id": "coach-profile", "name": "Hypertrophy"},
        {"id": "t9", "coach_id": "someone-else", "name": "Not mine"},
    ],
    "nutrition_plans": [{"id": "p1", "coach_id": "coach-profile", "name": "Cut"}],
    "step_goals": [
        {"id": "sg0", "user_id": "athlete-1", "daily_steps": 8000, "is_active": False, "assigned_at": "2024-01-01T00:00:00Z"},
        {"id": "sg1", "user_id": "athlete-1", "daily_steps": 10000, "is_active": True, "assigned_at": "2024-02-01T00:00:00Z"},
    ],
    "step_entries": [
        {"id": "s1", "user_id": "athlete-user", "date": "2024-03-17", "step_count": 8000},
        {"id": "s2", "user_id": "athlete-user", "date": "2024-03-12", "step_count": 12000},
        {"id": "s0", "user_id": "athlete-user", "date": "2024-02-01", "step_count": 5000},
    ],
    "water_goals": [],
    "water_tracking": [
        {"id": "w1", "user_id": "athlete-user", "date": "2024-03-17", "amount_ml": 1500},
        {"id": "w2", "user_id": "athlete-user", "date": "2024-03-16", "amount_ml": 3000},
    ],
}

NO_ROWS = {"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"}


class FakeQuery:
    """Just enough of the table query builder for the dashboard's calls."""

    def __init__(self, backend: "FakeSupabase", table: str) -> None:
        self.backend = backend
        self.table = table
        self.action = "select"
        self.payload: Any = None
        self.on_conflict = ""
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.negate = False
        self.orders: List[Any] = []
        self.row_limit: Optional[int] = None
        self.one = False
        self.count_mode: Optional[str] = None
        self.head = False

    # ---- actions ----
    def select(self, *columns: str, count: Optional[str] = None, head: Optional[bool] = None) -> "FakeQuery":
        self.count_mode = count
        self.head = bool(head)
        return self

    def insert(self, rows: Any) -> "FakeQuery":
        self.action, self.payload = "insert", rows
        return self

    def update(self, values: Dict[str, Any]) -> "FakeQuery":
        self.action, self.payload = "update", values
        return self

    def upsert(self, rows: Any, on_conflict: str = "") -> "FakeQuery":
        self.action, self.payload, self.on_conflict = "upsert", rows, on_conflict
        return self

    def delete(self) -> "FakeQuery":
        self.action = "delete"
        return self

    # ---- filters ----
    def _where(self, test: Callable[[Dict[str, Any]], bool]) -> "FakeQuery":
        if self.negate:
            self.negate = False
            self.filters.append(lambda r: not test(r))
        else:
            self.filters.append(test)
        return self

    @property
    def not_(self) -> "FakeQuery":
        self.negate = True
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._where(lambda r: str(r.get(column)) == str(value))

    def neq(self, column: str, value: Any) -> "FakeQuery":
        return self._where(lambda r: str(r.get(column)) != str(value))

    def gte(self, column: str, value: Any) -> "FakeQuery":
        return self._where(lambda r: r.get(column) is not None and str(r.get(column)) >= str(value))

    def lte(self, column: str, value: Any) -> "FakeQuery":
        return self._where(lambda r: r.get(column) is not None and str(r.get(column)) <= str(value))

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        wanted = {str(v) for v in values}
        return self._where(lambda r: str(r.get(column)) in wanted)

    def is_(self, column: str, value: str) -> "FakeQuery":
        return self._where(lambda r: r.get(column) is None)

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.orders.append((column, desc))
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.row_limit = size
        return self

    def single(self) -> "FakeQuery":
        self.one = True
        return self

    # ---- run ----
    def execute(self) -> SimpleNamespace:
        self.backend.calls.append((self.table, self.action))
        if self.table in self.backend.fail_tables:
            raise PostgrestAPIError({"code": "42501", "message": f"permission denied for table {self.table}"})

        rows = self.backend.tables.setdefault(self.table, [])
        if self.action == "insert":
            return self._result([self.backend.add_row(self.table, r) for r in _as_list(self.payload)])
        if self.action == "upsert":
            return self._result([self._upsert_one(rows, r) for r in _as_list(self.payload)])

        matched = [r for r in rows if all(f(r) for f in self.filters)]
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return self._result([dict(r) for r in matched])
        if self.action == "delete":
            self.backend.tables[self.table] = [r for r in rows if not any(r is m for m in matched)]
            return self._result([dict(r) for r in matched])

        for column, desc in reversed(self.orders):
            matched.sort(key=lambda r, c=column: str(r.get(c) or ""), reverse=desc)
        total = len(matched)
        if self.row_limit is not None:
            matched = matched[: self.row_limit]
        data = [copy.deepcopy(r) for r in matched]
        if self.one:
            if len(data) != 1:
                raise PostgrestAPIError(dict(NO_ROWS))
            return self._result(data[0])
        if self.head:
            return self._result([], count=total)
        return self._result(data, count=total if self.count_mode else None)

    def _upsert_one(self, rows: List[Dict[str, Any]], row: Dict[str, Any]) -> Dict[str, Any]:
        keys = [k.strip() for k in self.on_conflict.split(",") if k.strip()]
        for existing in rows:
            if keys and all(str(existing.get(k)) == str(row.get(k)) for k in keys):
                existing.update(row)
                return dict(existing)
        return self.backend.add_row(self.table, row)

    @staticmethod
    def _result(data: Any, count: Optional[int] = None) -> SimpleNamespace:
        return SimpleNamespace(data=data, count=count)


def _as_list(rows: Any) -> List[Dict[str, Any]]:
    return list(rows) if isinstance(rows, list) else [rows]


class FakeBucket:
    def __init__(self, backend: "FakeSupabase", name: str) -> None:
        self.backend = backend
        self.name = name

    def create_signed_url(self, path: str, expires_in: int, options: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
        if self.backend.storage_down:
            raise StorageException({"statusCode": 500, "message": "storage unavailable"})
        return {"signedURL": f"http://baas.test/storage/v1/object/sign/{self.name}/{path}?token=signed"}

    def upload(self, path: str, file: bytes, file_options: Optional[Dict[str, str]] = None) -> SimpleNamespace:
        self.backend.uploads.append((self.name, path, file_options))
        return SimpleNamespace(path=path, full_path=f"{self.name}/{path}")


class FakeStorage:
    def __init__(self, backend: "FakeSupabase") -> None:
        self.backend = backend

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self.backend, bucket)


def _session(access_token: str, refresh_token: str, email: str = "coach@example.com") -> SimpleNamespace:
    user = SimpleNamespace(id="coach-user", email=email, app_metadata={"role": "coach"})
    session = SimpleNamespace(access_token=access_token, refresh_token=refresh_token, expires_in=3600, user=user)
    return SimpleNamespace(session=session, user=user)


class FakeAdmin:
    def __init__(self, backend: "FakeSupabase") -> None:
        self.backend = backend

    def sign_out(self, jwt: str, scope: str = "global") -> None:
        self.backend.signed_out.append(jwt)
        if self.backend.sign_out_fails:
            raise AuthApiError("Session not found", 404, "session_not_found")


class FakeAuth:
    def __init__(self, backend: "FakeSupabase") -> None:
        self.backend = backend
        self.admin = FakeAdmin(backend)

    def sign_in_with_password(self, credentials: Dict[str, str]) -> SimpleNamespace:
        if credentials.get("password") != "right-password":
            raise AuthApiError("Invalid login credentials", 400, "invalid_credentials")
        return _session("issued-token", "refresh-1", credentials["email"])

    def refresh_session(self, refresh_token: Optional[str] = None) -> SimpleNamespace:
        if refresh_token != "refresh-1":
            raise AuthApiError("Invalid Refresh Token: Refresh Token Not Found", 400, "refresh_token_not_found")
        return _session("refreshed-token", "refresh-2")

    def set_session(self, access_token: str, refresh_token: str) -> SimpleNamespace:
        if access_token == "expired-recovery":
            raise AuthSessionMissingError()
        self.backend.recovery_sessions.append(access_token)
        return _session(access_token, refresh_token)

    def update_user(self, attributes: Dict[str, Any]) -> SimpleNamespace:
        self.backend.password_updates.append(attributes.get("password"))
        return SimpleNamespace(user=SimpleNamespace(id="coach-user"))

    def reset_password_for_email(self, email: str, options: Optional[Dict[str, Any]] = None) -> None:
        if email == "limited@example.com":
            raise AuthApiError("Email rate limit exceeded", 429, "over_email_send_rate_limit")
        self.backend.reset_emails.append((email, options))


class FakeSupabase:
    """In-memory stand-in for the per-request supabase client."""

    def __init__(self) -> None:
        self.tables = copy.deepcopy(TABLES)
        self.fail_tables: set = set()
        self.storage_down = False
        self.sign_out_fails = False
        self.calls: List[Any] = []
        self.uploads: List[Any] = []
        self.signed_out: List[str] = []
        self.recovery_sessions: List[str] = []
        self.password_updates: List[Optional[str]] = []
        self.reset_emails: List[Any] = []
        self.storage = FakeStorage(self)
        self.auth = FakeAuth(self)
        self._ids = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        self._ids += 1
        stored = dict(row)
        stored.setdefault("id", f"{table}-{self._ids}")
        self.tables.setdefault(table, []).append(stored)
        return dict(stored)


class TestCoachboardApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        os.environ["COACHBOARD_JWT_SECRET"] = JWT_SECRET
        os.environ["COACHBOARD_BAAS_URL"] = "http://baas.test"
        os.environ["COACHBOARD_FRONTEND_DIR"] = "/nonexistent-coachboard-frontend"

        # Ensure settings/app reflect the env vars above.
        cls._saved_modules = {}
        for name in list(sys.modules.keys()):
            if name == "coachboard" or name.startswith("coachboard."):
                cls._saved_modules[name] = sys.modules.pop(name)

        from coachboard.api import app  # noqa: WPS433 (import inside test for env control)
        from coachboard.baas.deps import get_anon_baas, get_baas  # noqa: WPS433

        cls.app = app
        cls.deps = (get_baas, get_anon_baas)

        exp = int(time.time()) + 3600
        cls.coach_token = jwt_encode({"sub": "coach-user", "email": "coach@example.com", "exp": exp})
        cls.athlete_token = jwt_encode({"sub": "athlete-user", "email": "sam@example.com", "exp": exp})
        cls.expired_token = jwt_encode({"sub": "coach-user", "exp": int(time.time()) - 10})

    @classmethod
    def tearDownClass(cls) -> None:
        cls.app.dependency_overrides.clear()
        # Put back the modules other test files imported at collection time.
        for name in list(sys.modules.keys()):
            if name == "coachboard" or name.startswith("coachboard."):
                sys.modules.pop(name, None)
        sys.modules.update(cls._saved_modules)

    def setUp(self) -> None:
        self.backend = FakeSupabase()
        for dep in self.deps:
            self.app.dependency_overrides[dep] = lambda: self.backend
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self.client.close()

    def _auth(self, token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def _coach_get(self, path: str):
        return self.client.get(path, headers=self._auth(self.coach_token))

    # ---- gate ----
    def test_auth_required(self) -> None:
        resp = self.client.get("/api/admin/athletes")
        self.assertEqual(resp.status_code, 401)

        resp = self.client.get("/api/admin/athletes", headers=self._auth(self.expired_token))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Session expired")

    def test_exempt_paths_match_whole_segments(self) -> None:
        resp = self.client.get("/api/auth/login-anything")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Not authenticated")

        resp = self.client.post("/api/auth/password/reset-requests", json={})
        self.assertEqual(resp.status_code, 401)

        resp = self.client.get("/api/docs")
        self.assertEqual(resp.status_code, 200)

    def test_health_is_public(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")

    def test_admin_requires_coach_role(self) -> None:
        resp = self.client.get("/api/admin/athletes", headers=self._auth(self.athlete_token))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Coach access required")

    # ---- profiles ----
    def test_list_athletes(self) -> None:
        resp = self._coach_get("/api/admin/athletes")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["count"], 1)
        self.assertEqual(payload["items"][0]["display_name"], "sam.lee")

        resp = self._coach_get("/api/admin/athletes?q=nobody")
        self.assertEqual(resp.json()["count"], 0)

    def test_unknown_athlete_is_404(self) -> None:
        resp = self._coach_get("/api/admin/athletes/someone-else")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Athlete not found.")

    def test_patch_profile_derives_username(self) -> None:
        resp = self.client.patch(
            "/api/profile",
            json={"first_name": "First", "last_name": "Last"},
            headers=self._auth(self.athlete_token),
        )
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["username"], "first.last")
        self.assertEqual(payload["first_name"], "First")
        stored = [p for p in self.backend.tables["profiles"] if p["user_id"] == "athlete-user"][0]
        self.assertEqual(stored["username"], "first.last")
        self.assertIn("updated_at", stored)

    def test_dashboard_counts(self) -> None:
        resp = self._coach_get("/api/admin/dashboard")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"athletes": 1, "programs": 2, "nutrition_plans": 1})

    def test_athlete_overview(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/overview?ref=2024-03-18")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["athlete"]["display_name"], "sam.lee")
        self.assertEqual(payload["program"]["name"], "Strength Block")
        self.assertEqual(payload["program"]["version"], 2)
        self.assertEqual(payload["nutrition_plan"]["name"], "Cut")
        self.assertEqual(payload["step_goal"]["daily_steps"], 10000)

        self.assertEqual(len(payload["steps"]), 7)
        self.assertEqual(payload["steps"][0]["date"], "2024-03-18")
        self.assertTrue(payload["steps"][0]["placeholder"])
        self.assertEqual(payload["steps"][1]["value"], 8000)
        self.assertEqual(payload["steps"][6]["value"], 12000)

        self.assertEqual(payload["water_goal"]["water_goal_ml"], 2500)
        self.assertTrue(payload["water_goal_is_default"])
        self.assertEqual([d["value"] for d in payload["water"][:3]], [0, 1500, 3000])

        self.assertEqual([c["id"] for c in payload["recent_check_ins"]], ["c2", "c1"])
        self.assertEqual(payload["recent_check_ins"][0]["body_metrics"]["weight_kg"], 80)
        self.assertEqual(payload["days_since_check_in"], 3)

    def test_athlete_overview_sections_are_best_effort(self) -> None:
        self.backend.fail_tables = {"water_tracking", "step_goals"}
        with self.assertLogs("coachboard", level="WARNING"):
            resp = self._coach_get("/api/admin/athletes/athlete-1/overview?ref=2024-03-18")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["water"], [])
        self.assertIsNone(payload["step_goal"])
        self.assertEqual(len(payload["steps"]), 7)

        resp = self._coach_get("/api/admin/athletes/nobody/overview")
        self.assertEqual(resp.status_code, 404)

    # ---- check-ins (coach) ----
    def test_athlete_check_ins(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/check-ins?timeframe=all")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["count"], 2)
        self.assertEqual(payload["check_ins"][0]["id"], "c2")
        self.assertEqual(payload["stats"]["weight_change"], -2.0)
        self.assertEqual(payload["stats"]["weight_change_text"], "-2.0 kg")
        self.assertEqual(len(payload["measurements"]), 2)

    def test_review_list(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/check-ins/review")
        self.assertEqual(resp.status_code, 200)
        items = {i["id"]: i for i in resp.json()["items"]}
        self.assertEqual(items["c1"]["notes_preview"], "Feeling a bit tired this week ...")
        self.assertEqual(items["c2"]["weight_text"], "Weight: 80 kg")

    def test_compare_rejects_same_check_in(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/check-ins/compare?a=c1&b=c1")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Cannot compare a check-in with itself", resp.json()["detail"])

    def test_compare_two_check_ins(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/check-ins/compare?a=c2&b=c1")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["older"]["id"], "c1")
        self.assertEqual(payload["days_between"], 14)
        self.assertIn("/storage/v1/object/sign/progress-media/athlete-user/photos/front-2.jpg", payload["newer"]["photos"][0]["url"])
        stress = [r for r in payload["wellness"] if r["key"] == "stress_level"][0]
        self.assertTrue(stress["improved"])

    def test_check_in_detail(self) -> None:
        resp = self._coach_get("/api/admin/check-ins/c1")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["display_date"], "March 1, 2024")
        self.assertEqual(payload["athlete"]["username"], "sam.lee")
        self.assertEqual(len(payload["photo_urls"]), 1)
        self.assertEqual(payload["adherence"][0]["label"], "Diet: Good")

    def test_check_in_detail_without_storage_drops_photos(self) -> None:
        self.backend.storage_down = True
        resp = self._coach_get("/api/admin/check-ins/c1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["photo_urls"], [])

    def test_save_feedback(self) -> None:
        resp = self.client.put(
            "/api/admin/check-ins/c1/feedback",
            json={"coach_feedback": "Great progress, keep sleep above 7h."},
            headers=self._auth(self.coach_token),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["coach_feedback"], "Great progress, keep sleep above 7h.")

    def test_feedback_on_missing_check_in_is_404(self) -> None:
        resp = self.client.put(
            "/api/admin/check-ins/missing/feedback",
            json={"coach_feedback": "x"},
            headers=self._auth(self.coach_token),
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Check-in not found.")

    # ---- nutrition ----
    def test_athlete_nutrition(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/nutrition?timeframe=week&ref=2024-03-10")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["start"], "2024-03-03")
        self.assertEqual(len(payload["days"]), 8)
        self.assertEqual(payload["plan"]["name"], "Cut")
        self.assertEqual(payload["stats"]["days_tracked"], 1)
        self.assertEqual(payload["stats"]["average_calories"], 260)
        self.assertEqual(payload["bars"]["target_calories"], 2000)
        self.assertEqual(payload["macros"]["total"], 60)
        self.assertEqual(payload["log_days"][0]["logs"][0]["time_display"], "12:30 PM")

    def test_bad_reference_date(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/nutrition?ref=not-a-date")
        self.assertEqual(resp.status_code, 400)

    # ---- steps / water ----
    def test_athlete_steps(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/steps?timeframe=week&ref=2024-03-18")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual((payload["start"], payload["end"]), ("2024-03-11", "2024-03-18"))
        self.assertEqual(len(payload["days"]), 8)
        self.assertEqual(payload["goal"]["daily_steps"], 10000)
        self.assertEqual(payload["stats"]["average"], 10000)
        self.assertEqual(payload["stats"]["days_tracked"], 2)
        self.assertEqual(payload["stats"]["days_goal_met"], 1)

        bars = payload["bars"]
        self.assertEqual(bars["max_value"], 12000)
        self.assertEqual(bars["goal_offset_px"], 33.3)
        self.assertEqual(bars["bars"][0]["date"], "2024-03-11")
        self.assertEqual(bars["bars"][1]["height_px"], 200)
        self.assertTrue(bars["bars"][1]["met_goal"])
        self.assertEqual(bars["bars"][1]["label"], "Mar 12")

    def test_athlete_steps_month(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/steps?timeframe=month&ref=2024-02-10")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(len(payload["days"]), 29)
        self.assertEqual(payload["stats"]["total"], 5000)

    def test_set_step_goal_replaces_active_goal(self) -> None:
        resp = self.client.put(
            "/api/admin/athletes/athlete-1/steps/goal",
            json={"daily_steps": 12000},
            headers=self._auth(self.coach_token),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["daily_steps"], 12000)
        active = [g for g in self.backend.tables["step_goals"] if g["is_active"]]
        self.assertEqual([g["daily_steps"] for g in active], [12000])

        resp = self.client.put(
            "/api/admin/athletes/athlete-1/steps/goal",
            json={"daily_steps": -1},
            headers=self._auth(self.coach_token),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Please enter a valid non-negative number for the step goal.")

    def test_athlete_water_defaults_goal(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/water?ref=2024-03-18")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["goal"]["water_goal_ml"], 2500)
        self.assertTrue(payload["goal_is_default"])
        self.assertEqual(payload["stats"]["average"], 2250)
        self.assertEqual(payload["stats"]["days_goal_met"], 1)
        self.assertEqual(payload["average_text"], "2.3L")
        self.assertEqual(payload["bars"]["max_value"], 3000)

    def test_set_water_goal_creates_then_updates(self) -> None:
        headers = self._auth(self.coach_token)
        resp = self.client.put("/api/admin/athletes/athlete-1/water/goal", json={"water_goal_ml": 3000}, headers=headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["water_goal_ml"], 3000)

        resp = self.client.put("/api/admin/athletes/athlete-1/water/goal", json={"water_goal_ml": 3500}, headers=headers)
        self.assertEqual(resp.status_code, 200)
        goals = self.backend.tables["water_goals"]
        self.assertEqual(len(goals), 1)
        self.assertEqual(goals[0]["user_id"], "athlete-user")
        self.assertEqual(goals[0]["water_goal_ml"], 3500)

        resp = self._coach_get("/api/admin/athletes/athlete-1/water?ref=2024-03-18")
        self.assertFalse(resp.json()["goal_is_default"])

        resp = self.client.put("/api/admin/athletes/athlete-1/water/goal", json={"water_goal_ml": -5}, headers=headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Please enter a valid number for the water goal.")

    # ---- measurements ----
    def test_measurement_history_and_summary(self) -> None:
        resp = self._coach_get("/api/admin/athletes/athlete-1/measurements")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["count"], 2)
        self.assertEqual(payload["measurements"][0]["id"], "m2")

        resp = self._coach_get("/api/admin/athletes/athlete-1/measurements/latest")
        self.assertEqual(resp.json()["id"], "m2")

        resp = self._coach_get("/api/admin/athletes/athlete-1/measurements/summary")
        summary = resp.json()
        self.assertEqual(summary["weight_change"], -3.0)
        self.assertEqual(summary["body_fat_change"], -2.0)
        self.assertEqual((summary["days"], summary["weeks"], summary["months"]), (60, 8, 2))

    def test_measurements_empty(self) -> None:
        self.backend.tables["athlete_measurements"] = []
        resp = self._coach_get("/api/admin/athletes/athlete-1/measurements/latest")
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json())

        resp = self._coach_get("/api/admin/athletes/athlete-1/measurements/summary")
        self.assertEqual(resp.json()["days"], 0)
        self.assertIsNone(resp.json()["latest"])

    def test_create_measurement_upserts_by_date(self) -> None:
        resp = self.client.post(
            "/api/admin/athletes/athlete-1/measurements",
            json={"measurement_date": "2024-03-01", "weight_kg": 80, "body_fat_override": 15},
            headers=self._auth(self.coach_token),
        )
        self.assertEqual(resp.status_code, 201)
        payload = resp.json()
        self.assertEqual(payload["id"], "m2")
        self.assertEqual(payload["body_fat_percentage"], 15)
        self.assertEqual(payload["lean_body_mass_kg"], 68.0)
        self.assertEqual(payload["fat_mass_kg"], 12.0)
        self.assertEqual(payload["basal_metabolic_rate"], 1780)
        self.assertEqual(payload["weight_change_kg"], -1.0)
        self.assertEqual(payload["created_by"], "coach-user")
        self.assertEqual(len(self.backend.tables["athlete_measurements"]), 2)

    def test_delete_measurement(self) -> None:
        resp = self.client.delete("/api/admin/measurements/m1", headers=self._auth(self.coach_token))
        self.assertEqual(resp.status_code, 204)
        self.assertEqual([m["id"] for m in self.backend.tables["athlete_measurements"]], ["m2"])

    def test_body_fat_calculator(self) -> None:
        resp = self.client.post(
            "/api/admin/calculators/body-fat",
            json={"method": "navy_tape", "gender": "female", "age": 30, "height_cm": 165, "neck_cm": 32, "waist_cm": 75},
            headers=self._auth(self.coach_token),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Hip measurement required", resp.json()["detail"])

    def test_bmr_calculator(self) -> None:
        resp = self.client.post(
            "/api/admin/calculators/bmr",
            json={"gender": "male", "age": 30, "height_cm": 180, "weight_kg": 80},
            headers=self._auth(self.coach_token),
        )
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["bmr"], 1780)
        self.assertEqual(payload["tdee"], 2136)
        self.assertEqual(payload["calorie_target"], 2136)
        self.assertEqual(payload["protein_g"], 144.0)
        self.assertEqual(payload["fat_g"], 56.0)
        self.assertEqual(payload["carb_g"], 264.0)

    # ---- athlete ----
    def test_own_check_ins(self) -> None:
        resp = self.client.get("/api/check-ins", headers=self._auth(self.athlete_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([c["id"] for c in resp.json()], ["c2", "c1"])

    def test_latest_check_in(self) -> None:
        resp = self.client.get("/api/check-ins/latest", headers=self._auth(self.athlete_token))
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["check_in"]["id"], "c2")
        self.assertEqual(payload["days_since"], (date.today() - date(2024, 3, 15)).days)

        self.backend.tables["check_ins"] = []
        resp = self.client.get("/api/check-ins/latest", headers=self._auth(self.athlete_token))
        self.assertEqual(resp.json(), {"check_in": None, "days_since": None})

    def test_submit_check_in(self) -> None:
        body = {
            "check_in_date": "2024-03-22",
            "photos": ["athlete-user/photos/front-3.jpg", ""],
            "weight_kg": 79.5,
            "sleep_hours": 7.5,
            "diet_adherence": "Good",
            "notes": "Solid week",
        }
        resp = self.client.post("/api/check-ins", json=body, headers=self._auth(self.athlete_token))
        self.assertEqual(resp.status_code, 201)
        payload = resp.json()
        self.assertEqual(payload["user_id"], "athlete-user")
        self.assertEqual(payload["photos"], ["athlete-user/photos/front-3.jpg"])

        body_rows = self.backend.tables["body_metrics"]
        self.assertEqual(body_rows[0]["check_in_id"], payload["id"])
        self.assertEqual(body_rows[0]["weight_kg"], 79.5)
        self.assertIsNone(body_rows[0]["waist_cm"])
        self.assertEqual(self.backend.tables["wellness_metrics"][0]["sleep_hours"], 7.5)

    def test_submit_check_in_survives_metrics_failure(self) -> None:
        self.backend.fail_tables = {"body_metrics"}
        with self.assertLogs("coachboard.checkins.storage", level="WARNING") as logs:
            resp = self.client.post(
                "/api/check-ins",
                json={"check_in_date": "2024-03-22", "weight_kg": 79.5, "sleep_hours": 7},
                headers=self._auth(self.athlete_token),
            )
        self.assertEqual(resp.status_code, 201)
        self.assertTrue(any("body_metrics" in line for line in logs.output))
        self.assertEqual(len(self.backend.tables["check_ins"]), 3)
        self.assertEqual(len(self.backend.tables["wellness_metrics"]), 1)

    def test_photo_upload(self) -> None:
        image = base64.b64encode(b"\xff\xd8\xff fake jpeg").decode("ascii")
        resp = self.client.post(
            "/api/check-ins/photos",
            json={"position": "front", "image_base64": image},
            headers=self._auth(self.athlete_token),
        )
        self.assertEqual(resp.status_code, 201)
        payload = resp.json()
        self.assertTrue(payload["path"].startswith("athlete-user/photos/front-"))
        self.assertIn("token=signed", payload["url"])
        bucket, key, options = self.backend.uploads[0]
        self.assertEqual((bucket, key), ("progress-media", payload["path"]))
        self.assertEqual(options, {"content-type": "image/jpeg"})

        resp = self.client.post(
            "/api/check-ins/photos",
            json={"position": "front", "image_base64": "not base64!"},
            headers=self._auth(self.athlete_token),
        )
        self.assertEqual(resp.status_code, 400)

    # ---- auth ----
    def test_login_sets_cookie(self) -> None:
        resp = self.client.post("/api/auth/login", json={"email": "coach@example.com", "password": "right-password"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["role"], "coach")
        self.assertEqual(resp.cookies.get("coachboard_token"), "issued-token")

        resp = self.client.post("/api/auth/login", json={"email": "coach@example.com", "password": "wrong"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid email or password")

    def test_refresh(self) -> None:
        resp = self.client.post("/api/auth/refresh", json={"refresh_token": "refresh-1"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["token"], "refreshed-token")
        self.assertEqual(resp.json()["refresh_token"], "refresh-2")
        self.assertEqual(resp.cookies.get("coachboard_token"), "refreshed-token")

        resp = self.client.post("/api/auth/refresh", json={"refresh_token": "stale"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Session expired")

    def test_refresh_without_token(self) -> None:
        resp = self.client.post("/api/auth/refresh")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Not authenticated")

    def test_logout(self) -> None:
        resp = self.client.post("/api/auth/logout", headers=self._auth(self.coach_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.backend.signed_out, [self.coach_token])
        self.assertIn("coachboard_token", resp.headers.get("set-cookie", ""))

    def test_logout_when_service_refuses(self) -> None:
        self.backend.sign_out_fails = True
        resp = self.client.post("/api/auth/logout", headers=self._auth(self.coach_token))
        self.assertEqual(resp.status_code, 200)

    def test_change_password_validation(self) -> None:
        body = {"current_password": "right-password", "new_password": "abcdef", "confirm_password": "abcdeg"}
        resp = self.client.post("/api/auth/password", json=body, headers=self._auth(self.coach_token))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "New passwords don't match")

        body = {"current_password": "right-password", "new_password": "abc", "confirm_password": "abc"}
        resp = self.client.post("/api/auth/password", json=body, headers=self._auth(self.coach_token))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Password must be at least 6 characters")

        body = {"current_password": "wrong", "new_password": "abcdef", "confirm_password": "abcdef"}
        resp = self.client.post("/api/auth/password", json=body, headers=self._auth(self.coach_token))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Current password is incorrect")

        body = {"current_password": "right-password", "new_password": "abcdef", "confirm_password": "abcdef"}
        resp = self.client.post("/api/auth/password", json=body, headers=self._auth(self.coach_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Password updated successfully")
        self.assertEqual(self.backend.password_updates, ["abcdef"])

    def test_password_reset_request(self) -> None:
        resp = self.client.post("/api/auth/password/reset-request", json={"email": "sam@example.com"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Password reset instructions have been sent to your email")
        self.assertEqual(self.backend.reset_emails[0][0], "sam@example.com")

        resp = self.client.post("/api/auth/password/reset-request", json={"email": "limited@example.com"})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["detail"], "Email rate limit exceeded")

    def test_password_reset(self) -> None:
        body = {"access_token": "recovery-token", "new_password": "newpass1", "confirm_password": "newpass1"}
        resp = self.client.post("/api/auth/password/reset", json=body)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Your password has been successfully reset.")
        self.assertEqual(self.backend.recovery_sessions, ["recovery-token"])
        self.assertEqual(self.backend.password_updates, ["newpass1"])

    def test_password_reset_with_expired_link(self) -> None:
        body = {"access_token": "expired-recovery", "new_password": "newpass1", "confirm_password": "newpass1"}
        resp = self.client.post("/api/auth/password/reset", json=body)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "The password reset link has expired. Please request a new one.")
        self.assertEqual(self.backend.password_updates, [])


if __name__ == "__main__":
    unittest.main()
