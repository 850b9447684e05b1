"""
Security Test Suite: JWT Authentication and Roles

Tests that the centralized JWT verification in dependencies.py correctly:
- Rejects missing Authorization headers
- Rejects malformed, expired and wrongly signed tokens
- Accepts properly signed HS256 tokens when JWKS is unavailable
- Resolves roles server-side from user_roles
"""

import time

import jwt
import pytest
from fastapi import FastAPI, Depends
from fastapi.testclient import TestClient

from admissions.api.dependencies import (
    CurrentUser,
    get_current_user,
    get_current_user_id,
    require_admin,
    require_staff,
    resolve_role,
)
from admissions.config.settings import get_settings
from admissions.domain.models import UserRole
from admissions.infrastructure.db.database import get_supabase_client

from factories import ADMIN_ID, APPLICANT_ID, MODERATOR_ID, auth_headers, make_token


# ---------------------------------------------------------------------------
# Minimal app that uses the real dependencies
# ---------------------------------------------------------------------------

test_app = FastAPI()


@test_app.get("/protected")
async def protected_endpoint(user_id: str = Depends(get_current_user_id)):
    return {"user_id": user_id}


@test_app.get("/me")
async def me_endpoint(user: CurrentUser = Depends(get_current_user)):
    return {"id": user.id, "role": user.role.value, "classes": user.class_codes}


@test_app.get("/admin-only")
async def admin_endpoint(user: CurrentUser = Depends(require_admin)):
    return {"id": user.id}


@test_app.get("/staff-only")
async def staff_endpoint(user: CurrentUser = Depends(require_staff)):
    return {"id": user.id}


client = TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture
def wired(fake_supabase):
    test_app.dependency_overrides[get_supabase_client] = lambda: fake_supabase
    yield fake_supabase
    test_app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Tests: rejection scenarios
# ---------------------------------------------------------------------------


class TestJWTRejection:
    """Verify that invalid/missing JWTs are rejected with 401."""

    def test_no_auth_header(self):
        resp = client.get("/protected")
        assert resp.status_code == 401

    def test_empty_bearer(self):
        resp = client.get("/protected", headers={"Authorization": "Bearer "})
        assert resp.status_code == 401

    def test_malformed_scheme(self):
        resp = client.get("/protected", headers={"Authorization": "Basic abc123"})
        assert resp.status_code == 401

    def test_garbage_token(self):
        resp = client.get("/protected", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401

    def test_wrong_secret(self):
        settings = get_settings()
        payload = {
            "sub": APPLICANT_ID,
            "aud": "authenticated",
            "iss": settings.jwt_issuer,
            "exp": int(time.time()) + 3600,
        }
        token = jwt.encode(payload, "some-other-secret-that-is-long-enough-0000", algorithm="HS256")
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_expired_token_hs256(self):
        """An expired HS256 token (even with correct secret) must be rejected."""
        token = make_token(APPLICANT_ID, expires_in=-60)
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token has expired"

    def test_wrong_audience(self):
        token = make_token(APPLICANT_ID, aud="anon")
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_wrong_issuer(self):
        token = make_token(APPLICANT_ID, iss="https://elsewhere.example.com/auth/v1")
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_raw_uuid_rejected(self):
        resp = client.get(
            "/protected",
            headers={"Authorization": f"Bearer {APPLICANT_ID}"},
        )
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Tests: acceptance scenarios (JWKS disabled, HS256 fallback)
# ---------------------------------------------------------------------------


class TestJWTAcceptance:
    """Verify that valid JWTs are accepted."""

    def test_valid_hs256_token(self):
        resp = client.get("/protected", headers=auth_headers(APPLICANT_ID))
        assert resp.status_code == 200
        assert resp.json()["user_id"] == APPLICANT_ID

    def test_role_claim_in_token_is_ignored(self, wired):
        token = make_token(APPLICANT_ID, role="admin", user_role="admin")
        resp = client.get("/admin-only", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Tests: role resolution
# ---------------------------------------------------------------------------


class TestRoleResolution:

    def test_admin_wins(self):
        assert resolve_role([UserRole.MODERATOR, UserRole.ADMIN]) == UserRole.ADMIN
        assert resolve_role([UserRole.USER, UserRole.MODERATOR]) == UserRole.MODERATOR
        assert resolve_role([]) == UserRole.USER

    def test_moderator_gets_classes(self, wired):
        resp = client.get("/me", headers=auth_headers(MODERATOR_ID))
        assert resp.status_code == 200
        assert resp.json() == {"id": MODERATOR_ID, "role": "moderator", "classes": ["QTR-B04"]}

    def test_user_without_role_row(self, wired):
        resp = client.get("/me", headers=auth_headers(APPLICANT_ID))
        assert resp.json()["role"] == "user"

    def test_admin_and_staff_gates(self, wired):
        assert client.get("/admin-only", headers=auth_headers(ADMIN_ID)).status_code == 200
        assert client.get("/admin-only", headers=auth_headers(MODERATOR_ID)).status_code == 403
        assert client.get("/staff-only", headers=auth_headers(MODERATOR_ID)).status_code == 200
        assert client.get("/staff-only", headers=auth_headers(APPLICANT_ID)).status_code == 403

    def test_class_scope(self):
        admin = CurrentUser(id=ADMIN_ID, role=UserRole.ADMIN)
        moderator = CurrentUser(id=MODERATOR_ID, role=UserRole.MODERATOR, class_codes=["QTR-B04"])
        assert admin.class_scope is None
        assert admin.can_access_class("ANY-1")
        assert moderator.class_scope == ["QTR-B04"]
        assert not moderator.can_access_class("QTR-B05")
