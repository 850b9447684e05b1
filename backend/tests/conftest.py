"""
Test configuration and fixtures for the Admissions Backend.

Provides shared fixtures for unit and integration tests.
"""

import os

# Settings are read at import time; give them a project to point at.
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-for-hs256-signing-0123456789")
os.environ.setdefault("ENVIRONMENT", "development")

import jwt
import pytest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from fakes import FakeSupabaseClient
from factories import (
    ADMIN_ID,
    APPLICANT_ID,
    MODERATOR_ID,
    SAMPLE_APPLICATION_TEXT,
    auth_headers,
)


# =============================================================================
# Auth Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def no_jwks_fetch():
    """Never reach out to a JWKS endpoint; HS256 is the only path in tests."""
    with patch(
        "admissions.api.dependencies._decode_with_jwks",
        side_effect=jwt.exceptions.PyJWKClientError("JWKS disabled in tests"),
    ):
        yield


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID)


@pytest.fixture
def moderator_headers():
    return auth_headers(MODERATOR_ID)


@pytest.fixture
def applicant_headers():
    return auth_headers(APPLICANT_ID)


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_application_text():
    return SAMPLE_APPLICATION_TEXT


@pytest.fixture
def sample_class_row():
    return {
        "id": "class-1",
        "code": "QTR-B04",
        "name": "Qatar Batch 4",
        "description": "Weekend course",
        "template": SAMPLE_APPLICATION_TEXT,
        "validation_rules": {
            "ageRange": {"min": 25, "max": 45},
            "allowedStates": ["Qatar"],
            "minimumQualification": "Graduate",
        },
        "created_at": "2024-01-10T08:00:00+00:00",
        "updated_at": "2024-01-10T08:00:00+00:00",
    }


# =============================================================================
# Backend Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase(sample_class_row):
    """Tables seeded with one class, an admin and a moderator."""
    return FakeSupabaseClient({
        "classes": [sample_class_row],
        "applications": [],
        "user_roles": [
            {"user_id": ADMIN_ID, "role": "admin"},
            {"user_id": MODERATOR_ID, "role": "moderator"},
        ],
        "moderator_classes": [
            {"id": "mc-1", "user_id": MODERATOR_ID, "class_code": "QTR-B04"},
        ],
        "app_settings": [],
    })


@pytest.fixture
def mock_supabase():
    """Bare MagicMock client for tests that only inspect calls."""
    return MagicMock()


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app(fake_supabase):
    """Get the FastAPI application wired to the in-memory backend."""
    from admissions.main import app
    from admissions.api.dependencies import get_review_store
    from admissions.domain.review import ReviewSessionStore
    from admissions.infrastructure.db.database import get_supabase_client

    store = ReviewSessionStore()
    app.dependency_overrides[get_supabase_client] = lambda: fake_supabase
    app.dependency_overrides[get_review_store] = lambda: store
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app)
