"""
Dependency Injection Providers for the Admissions Backend

Provides FastAPI dependencies for the Supabase client and repositories.
Follows Dependency Inversion Principle - high-level modules depend on abstractions.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from supabase import Client

from admissions.infrastructure.db.database import get_supabase_client
from admissions.infrastructure.db.repositories import (
    ApplicationRepository,
    AppSettingsRepository,
    ClassRepository,
    ModeratorClassRepository,
    UserRoleRepository,
)


# Type alias for client dependency
ClientDep = Annotated[Client, Depends(get_supabase_client)]


async def get_application_repository(
    client: ClientDep,
) -> AsyncGenerator[ApplicationRepository, None]:
    """
    Dependency provider for ApplicationRepository.

    Usage:
        @router.get("/applications")
        async def list_applications(
            repo: ApplicationRepository = Depends(get_application_repository)
        ):
            ...
    """
    yield ApplicationRepository(client)


async def get_class_repository(
    client: ClientDep,
) -> AsyncGenerator[ClassRepository, None]:
    """
    Dependency provider for ClassRepository.
    """
    yield ClassRepository(client)


async def get_user_role_repository(
    client: ClientDep,
) -> AsyncGenerator[UserRoleRepository, None]:
    yield UserRoleRepository(client)


async def get_moderator_class_repository(
    client: ClientDep,
) -> AsyncGenerator[ModeratorClassRepository, None]:
    yield ModeratorClassRepository(client)


async def get_app_settings_repository(
    client: ClientDep,
) -> AsyncGenerator[AppSettingsRepository, None]:
    yield AppSettingsRepository(client)


# Type aliases for repository dependencies
ApplicationRepoDep = Annotated[
    ApplicationRepository,
    Depends(get_application_repository)
]
ClassRepoDep = Annotated[
    ClassRepository,
    Depends(get_class_repository)
]
UserRoleRepoDep = Annotated[
    UserRoleRepository,
    Depends(get_user_role_repository)
]
ModeratorClassRepoDep = Annotated[
    ModeratorClassRepository,
    Depends(get_moderator_class_repository)
]
AppSettingsRepoDep = Annotated[
    AppSettingsRepository,
    Depends(get_app_settings_repository)
]
