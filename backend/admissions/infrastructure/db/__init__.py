"""
Database Infrastructure Package for the Admissions Backend

Exports the Supabase client helpers and the repository dependencies.
"""

from admissions.infrastructure.db.database import (
    check_connection,
    create_supabase_client,
    get_supabase_client,
    reset_client,
)

from admissions.infrastructure.db.dependencies import (
    ClientDep,
    get_application_repository,
    get_class_repository,
    get_user_role_repository,
    get_moderator_class_repository,
    get_app_settings_repository,
    ApplicationRepoDep,
    ClassRepoDep,
    UserRoleRepoDep,
    ModeratorClassRepoDep,
    AppSettingsRepoDep,
)


__all__ = [
    # Client management
    "check_connection",
    "create_supabase_client",
    "get_supabase_client",
    "reset_client",
    # Dependencies
    "ClientDep",
    "get_application_repository",
    "get_class_repository",
    "get_user_role_repository",
    "get_moderator_class_repository",
    "get_app_settings_repository",
    "ApplicationRepoDep",
    "ClassRepoDep",
    "UserRoleRepoDep",
    "ModeratorClassRepoDep",
    "AppSettingsRepoDep",
]
