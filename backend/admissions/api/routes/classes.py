"""
Class Routes

Public read access to the classes on offer (the form's class selector)
and admin-only maintenance.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, status

from admissions.api.dependencies import AdminUserDep, ClassRepoDep
from admissions.domain.models import ValidationRules
from admissions.infrastructure.db.models.admission_class import (
    AdmissionClassCreate,
    AdmissionClassRecord,
    AdmissionClassUpdate,
)
from admissions.infrastructure.exceptions import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/classes", tags=["classes"])


def normalize_rules(raw: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Keep only well-formed rule entries, in their stored camelCase shape."""
    if raw is None:
        return None
    return ValidationRules.from_json(raw).model_dump(by_alias=True, exclude_none=True)


@router.get("", response_model=List[AdmissionClassRecord])
async def list_classes(repo: ClassRepoDep):
    return await repo.list_classes()


@router.get("/{code}", response_model=AdmissionClassRecord)
async def get_class(code: str, repo: ClassRepoDep):
    record = await repo.get_by_code(code)
    if record is None:
        raise NotFoundError(f"Class {code} not found")
    return record


@router.post("", response_model=AdmissionClassRecord, status_code=status.HTTP_201_CREATED)
async def create_class(
    request: AdmissionClassCreate,
    user: AdminUserDep,
    repo: ClassRepoDep,
):
    request.validation_rules = normalize_rules(request.validation_rules)
    record = await repo.create(request)
    logger.info(f"User {user.id} created class {record.code}")
    return record


@router.patch("/{code}", response_model=AdmissionClassRecord)
async def update_class(
    code: str,
    request: AdmissionClassUpdate,
    user: AdminUserDep,
    repo: ClassRepoDep,
):
    if "validation_rules" in request.model_fields_set:
        request.validation_rules = normalize_rules(request.validation_rules)
    record = await repo.update(code, request)
    if record is None:
        raise NotFoundError(f"Class {code} not found")
    return record


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class(
    code: str,
    user: AdminUserDep,
    repo: ClassRepoDep,
):
    """Applications keep their class code; the reference is soft."""
    if not await repo.delete(code):
        raise NotFoundError(f"Class {code} not found")
    logger.info(f"User {user.id} deleted class {code}")
