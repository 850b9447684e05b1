"""
Repository Layer for the Admissions Backend

Exports all repository classes for dependency injection.
"""

from admissions.infrastructure.db.repositories.base_repository import (
    BaseRepository,
    IReadRepository,
    IWriteRepository,
)
from admissions.infrastructure.db.repositories.application_repository import (
    ApplicationRepository,
)
from admissions.infrastructure.db.repositories.class_repository import (
    ClassRepository,
)
from admissions.infrastructure.db.repositories.access_repository import (
    ModeratorClassRepository,
    UserRoleRepository,
)
from admissions.infrastructure.db.repositories.app_settings_repository import (
    AppSettingsRepository,
)


__all__ = [
    # Base
    "BaseRepository",
    "IReadRepository",
    "IWriteRepository",
    # Repositories
    "ApplicationRepository",
    "ClassRepository",
    "UserRoleRepository",
    "ModeratorClassRepository",
    "AppSettingsRepository",
]
