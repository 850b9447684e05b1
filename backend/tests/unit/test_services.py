"""
Unit tests for the application services.

Services run against real repositories over the FakeSupabaseClient; the
identity admin API is the MagicMock hanging off ``client.auth``.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from admissions.domain.models import ApplicationStatus, ParsedApplication, ReviewStatus, UserRole
from admissions.domain.parsing import parse_application_text
from admissions.domain.review import ReviewSession
from admissions.infrastructure.db.models.application import Application
from admissions.infrastructure.db.repositories import (
    ApplicationRepository,
    ClassRepository,
    ModeratorClassRepository,
    UserRoleRepository,
)
from admissions.infrastructure.exceptions import (
    AuthServiceError,
    DatabaseError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from admissions.infrastructure.services import (
    ApplicationValidator,
    DuplicateChecker,
    ReportService,
    SubmissionService,
    UserAdminService,
)
from admissions.infrastructure.services.report_service import (
    export_csv,
    format_export_date,
    summarize,
)

from factories import (
    ADMIN_ID,
    APPLICANT_ID,
    MODERATOR_ID,
    SAMPLE_APPLICATION_TEXT,
    application_row,
)


@pytest.fixture
def parsed():
    return parse_application_text(SAMPLE_APPLICATION_TEXT, current_year=2024)


@pytest.fixture
def validator(fake_supabase):
    return ApplicationValidator(
        ApplicationRepository(fake_supabase),
        ClassRepository(fake_supabase),
    )


@pytest.fixture
def submission(fake_supabase, validator):
    return SubmissionService(ApplicationRepository(fake_supabase), validator)


@pytest.fixture
def user_admin(fake_supabase):
    return UserAdminService(
        fake_supabase,
        UserRoleRepository(fake_supabase),
        ModeratorClassRepository(fake_supabase),
    )


# =============================================================================
# Validation
# =============================================================================

class TestApplicationValidator:

    @pytest.mark.asyncio
    async def test_clean_application(self, validator, parsed):
        result = await validator.validate(parsed, "QTR-B04")
        assert result.valid is True
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_class_rules_applied(self, validator, parsed):
        parsed.other_details.age = 50
        result = await validator.validate(parsed, "QTR-B04")
        assert [w.message for w in result.warnings] == ["Age must not exceed 45 years"]

    @pytest.mark.asyncio
    async def test_unknown_class_means_no_rules(self, validator, parsed):
        parsed.other_details.age = 50
        result = await validator.validate(parsed, "NOPE-01")
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_same_class_duplicate(self, fake_supabase, validator, parsed):
        fake_supabase.tables["applications"].append(application_row("QTR-B04-0001"))
        result = await validator.validate(parsed, "QTR-B04")
        assert [(w.field, w.message) for w in result.warnings] == [
            ("Duplicate Application", "An application with this name and mobile number already exists"),
        ]

    @pytest.mark.asyncio
    async def test_rejected_or_other_class_not_duplicate(self, fake_supabase, validator, parsed):
        fake_supabase.tables["applications"].extend([
            application_row("QTR-B04-0001", status="rejected"),
            application_row("QTR-B05-0001", class_code="QTR-B05"),
        ])
        result = await validator.validate(parsed, "QTR-B04")
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_failed_duplicate_query_degrades(self, fake_supabase, validator, parsed):
        fake_supabase.failing_tables.add("applications")
        result = await validator.validate(parsed, "QTR-B04")
        assert [(w.field, w.message) for w in result.warnings] == [
            ("Validation Warning", "Could not check for duplicate applications"),
        ]

    @pytest.mark.asyncio
    async def test_no_class_skips_duplicate_query(self, fake_supabase, validator, parsed):
        fake_supabase.failing_tables.add("applications")
        result = await validator.validate(parsed)
        assert result.valid is True


# =============================================================================
# Duplicates
# =============================================================================

class TestDuplicateChecker:

    @pytest.mark.asyncio
    async def test_name_alone_rejected(self, fake_supabase):
        checker = DuplicateChecker(ApplicationRepository(fake_supabase))
        with pytest.raises(ValidationError, match="fullName alone"):
            await checker.find_duplicates(full_name="Ahmed Khan")

    @pytest.mark.asyncio
    async def test_nothing_usable(self, fake_supabase):
        checker = DuplicateChecker(ApplicationRepository(fake_supabase))
        with pytest.raises(ValidationError, match="mobile number or an email"):
            await checker.find_duplicates(mobile="n/a", email="  ")

    @pytest.mark.asyncio
    async def test_matches_across_classes_and_statuses(self, fake_supabase):
        fake_supabase.tables["applications"].extend([
            application_row("QTR-B04-0001", status="rejected"),
            application_row("QTR-B05-0001", class_code="QTR-B05", email="other@example.com"),
            application_row("QTR-B05-0002", class_code="QTR-B05", mobile="77000000", email="x@example.com"),
        ])
        checker = DuplicateChecker(ApplicationRepository(fake_supabase))

        matches = await checker.find_duplicates(mobile="55123456")

        assert [m.application_id for m in matches] == ["QTR-B04-0001", "QTR-B05-0001"]
        assert matches[0].status == "rejected"

    @pytest.mark.asyncio
    async def test_email_match(self, fake_supabase):
        fake_supabase.tables["applications"].append(application_row("QTR-B04-0001"))
        checker = DuplicateChecker(ApplicationRepository(fake_supabase))
        matches = await checker.find_duplicates(email="Ahmed@Example.com")
        assert len(matches) == 1

    @pytest.mark.asyncio
    async def test_batch(self, fake_supabase, parsed):
        fake_supabase.tables["applications"].append(application_row("QTR-B04-0001"))
        checker = DuplicateChecker(ApplicationRepository(fake_supabase))
        with_contact = ParsedApplication(data=parsed)
        without_contact = ParsedApplication(data=parse_application_text("Full Name: Nobody"))

        results = await checker.check_batch([with_contact, without_contact])

        assert [m.application_id for m in results[with_contact.temp_id]] == ["QTR-B04-0001"]
        assert results[without_contact.temp_id] == []


# =============================================================================
# Submission
# =============================================================================

class TestSubmissionService:

    @pytest.mark.asyncio
    async def test_ids_increment_per_class(self, submission, parsed):
        first = await submission.submit_parsed(parsed, "QTR-B04", user_id=APPLICANT_ID)
        second = await submission.submit_parsed(parsed, "QTR-B04", user_id=APPLICANT_ID)
        other = await submission.submit_parsed(parsed, "KER-B01")

        assert (first.id, second.id, other.id) == ("QTR-B04-0001", "QTR-B04-0002", "KER-B01-0001")

    @pytest.mark.asyncio
    async def test_stored_row(self, fake_supabase, submission, parsed):
        application = await submission.submit_parsed(parsed, "QTR-B04", user_id=APPLICANT_ID)

        assert application.status == ApplicationStatus.PENDING
        assert application.user_id == APPLICANT_ID
        assert application.student_details["fullName"] == "Ahmed Khan"
        assert application.referred_by["studentId"] == "QTR-B02-0011"
        assert application.remarks == "Auto-created application with 0 validation warnings"
        assert fake_supabase.tables["applications"][0]["id"] == "QTR-B04-0001"

    @pytest.mark.asyncio
    async def test_selected_class_wins(self, submission, parsed):
        assert parsed.class_code == "QTR-B04"
        application = await submission.submit_parsed(parsed, "KER-B01")
        assert application.class_code == "KER-B01"

    @pytest.mark.asyncio
    async def test_warnings_recorded(self, submission):
        data = parse_application_text("Full Name: Ahmed Khan")
        application = await submission.submit_parsed(data, "QTR-B04")
        assert application.remarks == "Auto-created application with 2 validation warnings"
        assert [w["field"] for w in application.validation_warnings] == ["Mobile Number", "Email Address"]

    @pytest.mark.asyncio
    async def test_class_required(self, submission, parsed):
        with pytest.raises(ValidationError):
            await submission.submit_parsed(parsed, "  ")

    @pytest.mark.asyncio
    async def test_session_item_marked_after_insert(self, submission, parsed):
        session = ReviewSession(owner_id=APPLICANT_ID, items=[ParsedApplication(data=parsed)])
        temp_id = session.items[0].temp_id

        application = await submission.submit_from_session(session, temp_id, "QTR-B04")

        assert session.items[0].status == ReviewStatus.SUBMITTED
        assert session.items[0].application_id == application.id
        with pytest.raises(InvalidTransitionError):
            await submission.submit_from_session(session, temp_id, "QTR-B04")

    @pytest.mark.asyncio
    async def test_failed_insert_leaves_item_pending(self, fake_supabase, submission, parsed):
        session = ReviewSession(owner_id=APPLICANT_ID, items=[ParsedApplication(data=parsed)])
        fake_supabase.failing_tables.add("applications")

        with pytest.raises(DatabaseError):
            await submission.submit_from_session(session, session.items[0].temp_id, "QTR-B04", warnings=[])

        assert session.items[0].status == ReviewStatus.PENDING


# =============================================================================
# User administration
# =============================================================================

class TestUserAdminService:

    @pytest.mark.asyncio
    async def test_list_users_joins_roles(self, fake_supabase, user_admin):
        fake_supabase.rpc_results["search_users"] = [
            {"id": ADMIN_ID, "email": "admin@example.com", "raw_user_meta_data": {"name": "Admin"}},
            {"id": MODERATOR_ID, "email": "mod@example.com", "raw_user_meta_data": None},
            {"id": APPLICANT_ID, "email": "student@example.com"},
        ]

        users = await user_admin.list_users("example")

        assert fake_supabase.rpc_calls == [("search_users", {"search_term": "example"})]
        assert [u.name for u in users] == ["Admin", None, None]
        assert users[1].roles == [UserRole.MODERATOR]
        assert users[1].class_codes == ["QTR-B04"]
        assert users[2].is_staff is False

        staff = await user_admin.list_users(staff_only=True)
        assert [u.id for u in staff] == [ADMIN_ID, MODERATOR_ID]

    @pytest.mark.asyncio
    async def test_search_failure(self, fake_supabase, user_admin):
        fake_supabase.failing_tables.add("search_users")
        with pytest.raises(DatabaseError):
            await user_admin.search_users("x")

    @pytest.mark.asyncio
    async def test_add_moderator(self, fake_supabase, user_admin):
        fake_supabase.auth.admin.create_user.return_value = SimpleNamespace(
            user=SimpleNamespace(id="new-user"),
        )

        user = await user_admin.add_staff_user(
            "new@example.com", "secret1", name="New", class_codes=["QTR-B04"],
        )

        assert user.roles == [UserRole.MODERATOR]
        fake_supabase.auth.admin.create_user.assert_called_once_with({
            "email": "new@example.com",
            "password": "secret1",
            "email_confirm": True,
            "user_metadata": {"name": "New"},
        })
        assert await UserRoleRepository(fake_supabase).get_roles("new-user") == [UserRole.MODERATOR]
        assert await ModeratorClassRepository(fake_supabase).get_class_codes("new-user") == ["QTR-B04"]

    @pytest.mark.asyncio
    async def test_add_admin(self, fake_supabase, user_admin):
        fake_supabase.auth.admin.create_user.return_value = SimpleNamespace(
            user=SimpleNamespace(id="new-admin"),
        )
        user = await user_admin.add_staff_user("boss@example.com", "secret1", is_admin=True)
        assert user.roles == [UserRole.ADMIN]
        assert user.class_codes == []

    @pytest.mark.asyncio
    async def test_short_password(self, fake_supabase, user_admin):
        with pytest.raises(ValidationError, match="at least 6"):
            await user_admin.add_staff_user("new@example.com", "123")
        fake_supabase.auth.admin.create_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_identity_service_rejects(self, fake_supabase, user_admin):
        fake_supabase.auth.admin.create_user.side_effect = RuntimeError("email taken")
        with pytest.raises(AuthServiceError):
            await user_admin.add_staff_user("new@example.com", "secret1")
        assert await UserRoleRepository(fake_supabase).list_roles() == {
            ADMIN_ID: [UserRole.ADMIN],
            MODERATOR_ID: [UserRole.MODERATOR],
        }

    @pytest.mark.asyncio
    async def test_missing_user_in_response(self, fake_supabase, user_admin):
        fake_supabase.auth.admin.create_user.return_value = SimpleNamespace(user=None)
        with pytest.raises(AuthServiceError):
            await user_admin.add_staff_user("new@example.com", "secret1")

    @pytest.mark.asyncio
    async def test_update_access(self, fake_supabase, user_admin):
        user = await user_admin.update_staff_user(MODERATOR_ID, is_admin=False, class_codes=["KER-B01"])
        assert user.class_codes == ["KER-B01"]
        assert fake_supabase.tables["moderator_classes"] == [
            {"user_id": MODERATOR_ID, "class_code": "KER-B01"},
        ]

    @pytest.mark.asyncio
    async def test_delete_removes_rows_before_identity(self, fake_supabase, user_admin):
        fake_supabase.auth.admin.delete_user.side_effect = RuntimeError("gone")

        with pytest.raises(AuthServiceError):
            await user_admin.delete_user(MODERATOR_ID)

        assert fake_supabase.tables["user_roles"] == [{"user_id": ADMIN_ID, "role": "admin"}]
        assert fake_supabase.tables["moderator_classes"] == []
        fake_supabase.auth.admin.delete_user.assert_called_once_with(MODERATOR_ID)

    @pytest.mark.asyncio
    async def test_reset_password(self, fake_supabase, user_admin):
        await user_admin.reset_password(MODERATOR_ID, "newsecret")
        fake_supabase.auth.admin.update_user_by_id.assert_called_once_with(
            MODERATOR_ID, {"password": "newsecret"},
        )

        with pytest.raises(ValidationError):
            await user_admin.reset_password(MODERATOR_ID, "short")


# =============================================================================
# Reports
# =============================================================================

def _applications():
    return [
        Application.model_validate(application_row("QTR-B04-0001", created_at="2024-03-01T10:00:00+00:00")),
        Application.model_validate(application_row(
            "QTR-B04-0002", status="approved", full_name="Bilal, Rahman",
            created_at="2024-04-02T10:00:00+00:00",
        )),
        Application.model_validate(application_row(
            "QTR-B05-0001", class_code="QTR-B05", status="rejected", batch="",
            created_at="2024-03-20T10:00:00+00:00",
        )),
    ]


class TestReports:

    def test_summary(self):
        summary = summarize(_applications())

        assert summary.total == 3
        assert summary.by_status == {"pending": 1, "approved": 1, "rejected": 1}
        assert summary.approval_rate == 33
        assert summary.by_class["QTR-B04"].model_dump() == {
            "total": 2, "approved": 1, "pending": 1, "rejected": 0,
        }
        assert summary.by_batch == {"B02": 2, "Unknown": 1}
        assert summary.by_month == {"2024-03": 2, "2024-04": 1}

    def test_empty_summary(self):
        summary = summarize([])
        assert summary.total == 0
        assert summary.approval_rate == 0
        assert summary.by_status == {"pending": 0, "approved": 0, "rejected": 0}

    def test_csv(self):
        lines = export_csv(_applications()).splitlines()

        assert lines[0] == "ID,Name,Email,Mobile,Class,Status,Date"
        assert lines[1] == 'QTR-B04-0001,Ahmed Khan,ahmed@example.com,+974 5512 3456,QTR-B04,pending,"Mar 1, 2024"'
        assert lines[2].startswith('QTR-B04-0002,"Bilal, Rahman",')
        assert len(lines) == 4

    def test_export_date(self):
        assert format_export_date(datetime(2024, 3, 5, tzinfo=timezone.utc)) == "Mar 5, 2024"
        assert format_export_date(None) == ""

    @pytest.mark.asyncio
    async def test_public_status(self, fake_supabase):
        fake_supabase.tables["applications"].append(application_row("QTR-B04-0001", status="approved"))
        service = ReportService(ApplicationRepository(fake_supabase))

        status = await service.get_public_status(" QTR-B04-0001 ")
        assert status.model_dump() == {
            "id": "QTR-B04-0001", "class_code": "QTR-B04", "status": ApplicationStatus.APPROVED,
        }
        with pytest.raises(NotFoundError):
            await service.get_public_status("QTR-B04-9999")

    @pytest.mark.asyncio
    async def test_scoped_summary(self, fake_supabase):
        fake_supabase.tables["applications"].extend([
            application_row("QTR-B04-0001"),
            application_row("QTR-B05-0001", class_code="QTR-B05"),
        ])
        service = ReportService(ApplicationRepository(fake_supabase))
        summary = await service.build_summary(class_codes=["QTR-B04"])
        assert summary.total == 1
        assert list(summary.by_class) == ["QTR-B04"]
