# API Routes Module
from admissions.api.routes import (
    parsing,
    review,
    applications,
    classes,
    admin,
    preferences,
    reports,
)

__all__ = [
    "parsing",
    "review",
    "applications",
    "classes",
    "admin",
    "preferences",
    "reports",
]
