"""
Test data builders shared by unit and integration tests.
"""

import time

import jwt

ADMIN_ID = "aaaaaaaa-0000-0000-0000-000000000001"
MODERATOR_ID = "bbbbbbbb-0000-0000-0000-000000000002"
APPLICANT_ID = "cccccccc-0000-0000-0000-000000000003"


SAMPLE_APPLICATION_TEXT = """\
(QTR-B04)
STUDENT DETAILS
Full Name: ahmed khan
Mobile +974: +974 5512 3456
WhatsApp: +974 5512 3456

BACK HOME DETAILS
Area: Mattancherry
Town: Kochi
District: Ernakulam
State: Kerala

CURRENT RESIDENCE
Area: Al Sadd
City: Doha
State: Qatar

OTHER DETAILS
Email: ahmed@example.com
Year of Birth: 1995
Qualification: Post Graduate
Profession: Engineer

REFERRED BY
Full Name: Yusuf Ali
Mobile +974: +974 6612 0000
Batch: B02
Student ID: QTR-B02-0011
"""


def make_token(user_id: str, expires_in: int = 3600, **claims) -> str:
    """Mint an HS256 token the way the Supabase project signs them."""
    from admissions.config.settings import get_settings

    settings = get_settings()
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "iss": settings.jwt_issuer,
        "exp": int(time.time()) + expires_in,
        **claims,
    }
    return jwt.encode(payload, settings.supabase_jwt_secret, algorithm="HS256")


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def application_row(
    application_id: str,
    class_code: str = "QTR-B04",
    status: str = "pending",
    full_name: str = "Ahmed Khan",
    mobile: str = "+974 5512 3456",
    email: str = "ahmed@example.com",
    created_at: str = "2024-03-05T10:00:00+00:00",
    batch: str = "B02",
) -> dict:
    """A stored ``applications`` row."""
    return {
        "id": application_id,
        "class_code": class_code,
        "status": status,
        "student_details": {"fullName": full_name, "mobile": mobile},
        "other_details": {"email": email},
        "hometown_details": {},
        "current_residence": {"city": "Doha", "state": "Qatar"},
        "referred_by": {"batch": batch} if batch else {},
        "validation_warnings": [],
        "user_id": APPLICANT_ID,
        "created_at": created_at,
        "updated_at": created_at,
    }
