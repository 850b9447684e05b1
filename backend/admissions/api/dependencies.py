"""
API Dependencies

FastAPI dependency injection for authentication, role checks and services.

Security: JWT tokens are verified cryptographically using Supabase JWKS (ES256)
with HS256 fallback via the JWT secret. Never decode without verification.
Roles are always resolved server-side from ``user_roles``; nothing in the
token is trusted for authorization beyond the ``sub`` claim.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Annotated, List, Optional

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from admissions.config.settings import get_settings
from admissions.domain.models import UserRole
from admissions.domain.review import ReviewSessionStore
from admissions.infrastructure.exceptions import AuthorizationError
# Routers import DB dependencies from here, not from db.dependencies.
from admissions.infrastructure.db.dependencies import (  # noqa: F401
    ApplicationRepoDep,
    AppSettingsRepoDep,
    ClassRepoDep,
    ClientDep,
    ModeratorClassRepoDep,
    UserRoleRepoDep,
)
from admissions.infrastructure.services import (
    ApplicationValidator,
    DuplicateChecker,
    ReportService,
    SubmissionService,
    UserAdminService,
)


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Cached JWKS client; keys are not re-fetched per request.
# PyJWKClient caches keys internally and refreshes ~every 10 min.
_jwks_client: Optional[PyJWKClient] = None


def _get_jwks_client() -> PyJWKClient:
    """Return a singleton PyJWKClient for the Supabase JWKS endpoint."""
    global _jwks_client
    if _jwks_client is None:
        settings = get_settings()
        jwks_url = f"{settings.jwt_issuer}/.well-known/jwks.json"
        _jwks_client = PyJWKClient(jwks_url, cache_keys=True)
    return _jwks_client


def _decode_with_jwks(token: str, issuer: str) -> dict:
    """Verify JWT using Supabase JWKS endpoint (ES256 asymmetric keys)."""
    client = _get_jwks_client()
    signing_key = client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["ES256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


def _decode_with_secret(token: str, secret: str, issuer: str) -> dict:
    """Verify JWT using HS256 symmetric secret (legacy Supabase signing)."""
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Extract and verify user ID from a Supabase JWT.

    Verification strategy (in order):
      1. JWKS (ES256), preferred; follows key rotation automatically.
      2. HS256 with ``SUPABASE_JWT_SECRET``, fallback for legacy signing.

    Returns:
        Authenticated user ID (``sub`` claim).

    Raises:
        HTTPException 401: token missing, expired, or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    settings = get_settings()
    issuer = settings.jwt_issuer

    payload: Optional[dict] = None

    # --- Strategy 1: JWKS (ES256) ---
    try:
        payload = _decode_with_jwks(token, issuer)
    except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as jwks_err:
        logger.debug("JWKS verification failed, trying HS256 fallback: %s", jwks_err)

    # --- Strategy 2: HS256 fallback ---
    if payload is None and settings.supabase_jwt_secret:
        try:
            payload = _decode_with_secret(
                token, settings.supabase_jwt_secret, issuer
            )
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
            )
        except jwt.InvalidTokenError as e:
            logger.warning("HS256 JWT verification also failed: %s", e)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return user_id


# =============================================================================
# Role resolution
# =============================================================================

@dataclass
class CurrentUser:
    """The authenticated caller with roles resolved from ``user_roles``."""
    id: str
    role: UserRole = UserRole.USER
    class_codes: List[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_moderator(self) -> bool:
        return self.role == UserRole.MODERATOR

    @property
    def is_staff(self) -> bool:
        return self.is_admin or self.is_moderator

    @property
    def class_scope(self) -> Optional[List[str]]:
        """Classes the caller may see; None means every class."""
        return None if self.is_admin else list(self.class_codes)

    def can_access_class(self, class_code: str) -> bool:
        return self.is_admin or class_code in self.class_codes


def resolve_role(roles: List[UserRole]) -> UserRole:
    """Admin wins over moderator, moderator over plain user."""
    if UserRole.ADMIN in roles:
        return UserRole.ADMIN
    if UserRole.MODERATOR in roles:
        return UserRole.MODERATOR
    return UserRole.USER


async def get_current_user(
    user_id: Annotated[str, Depends(get_current_user_id)],
    role_repo: UserRoleRepoDep,
    moderator_class_repo: ModeratorClassRepoDep,
) -> CurrentUser:
    role = resolve_role(await role_repo.get_roles(user_id))
    class_codes: List[str] = []
    if role == UserRole.MODERATOR:
        class_codes = await moderator_class_repo.get_class_codes(user_id)
    return CurrentUser(id=user_id, role=role, class_codes=class_codes)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


async def require_admin(user: CurrentUserDep) -> CurrentUser:
    """
    Raises:
        HTTPException 403: caller is not an admin.
    """
    if not user.is_admin:
        logger.warning(f"Admin access denied for user {user.id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


async def require_staff(user: CurrentUserDep) -> CurrentUser:
    """
    Raises:
        HTTPException 403: caller is neither admin nor moderator.
    """
    if not user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin or moderator access required",
        )
    return user


def ensure_class_access(user: CurrentUser, class_code: str) -> None:
    """
    Raises:
        AuthorizationError: moderator acting outside their classes.
    """
    if not user.can_access_class(class_code):
        raise AuthorizationError(f"No access to class {class_code}", required_role="admin")


AdminUserDep = Annotated[CurrentUser, Depends(require_admin)]
StaffUserDep = Annotated[CurrentUser, Depends(require_staff)]


# =============================================================================
# Service providers
# =============================================================================

@lru_cache
def get_review_store() -> ReviewSessionStore:
    """Process-wide review session store."""
    return ReviewSessionStore()


def get_application_validator(
    application_repo: ApplicationRepoDep,
    class_repo: ClassRepoDep,
) -> ApplicationValidator:
    return ApplicationValidator(application_repo, class_repo)


ValidatorDep = Annotated[ApplicationValidator, Depends(get_application_validator)]


def get_duplicate_checker(application_repo: ApplicationRepoDep) -> DuplicateChecker:
    return DuplicateChecker(application_repo)


def get_submission_service(
    application_repo: ApplicationRepoDep,
    validator: ValidatorDep,
) -> SubmissionService:
    return SubmissionService(application_repo, validator)


def get_user_admin_service(
    client: ClientDep,
    role_repo: UserRoleRepoDep,
    moderator_class_repo: ModeratorClassRepoDep,
) -> UserAdminService:
    return UserAdminService(client, role_repo, moderator_class_repo)


def get_report_service(application_repo: ApplicationRepoDep) -> ReportService:
    return ReportService(application_repo)


ReviewStoreDep = Annotated[ReviewSessionStore, Depends(get_review_store)]
DuplicateCheckerDep = Annotated[DuplicateChecker, Depends(get_duplicate_checker)]
SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]
UserAdminServiceDep = Annotated[UserAdminService, Depends(get_user_admin_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]

