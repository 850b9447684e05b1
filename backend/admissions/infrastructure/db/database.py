"""
Supabase Client Management for the Admissions Backend

The hosted Supabase project owns the tables, the identity service and the
admin API. This module builds the single service-role client every
repository shares.
"""

import asyncio
import logging
from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from admissions.config.settings import get_settings
from admissions.infrastructure.exceptions import ConfigurationError, DatabaseError

logger = logging.getLogger(__name__)


def create_supabase_client() -> Client:
    """
    Build a service-role Supabase client.

    Raises:
        ConfigurationError: If the project URL or service-role key is missing
    """
    settings = get_settings()
    missing = [
        name for name, value in (
            ("SUPABASE_URL", settings.supabase_url),
            ("SUPABASE_SERVICE_ROLE_KEY", settings.supabase_service_role_key),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError("Missing Supabase configuration", missing_keys=missing)

    options = ClientOptions(
        postgrest_client_timeout=settings.postgrest_timeout,
    )
    return create_client(settings.supabase_url, settings.supabase_service_role_key, options)


@lru_cache
def get_supabase_client() -> Client:
    """Get the cached client (dependency provider for FastAPI)."""
    return create_supabase_client()


async def check_connection() -> None:
    """Verify the project answers a trivial query (called on app startup)."""
    client = get_supabase_client()
    try:
        await asyncio.to_thread(
            lambda: client.table("classes").select("code").limit(1).execute()
        )
    except Exception as e:
        raise DatabaseError(
            f"Supabase connectivity check failed: {e}",
            operation="select",
            table="classes",
            original_error=e,
        )


def reset_client() -> None:
    """Drop the cached client (called on shutdown and in tests)."""
    get_supabase_client.cache_clear()
