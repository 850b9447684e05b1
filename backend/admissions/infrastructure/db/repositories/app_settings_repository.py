"""
App Settings Repository for the Admissions Backend

Key/value rows in ``app_settings``. Known keys:
- ``signup_enabled``: whether public sign-up is open (bool)
- ``theme:<user_id>``: a user's theme preference (JSON)
"""

from typing import Any, Optional

from supabase import Client

from admissions.infrastructure.db.models.access import AppSettingRecord
from admissions.infrastructure.db.repositories.base_repository import BaseRepository

SIGNUP_ENABLED_KEY = "signup_enabled"
THEME_KEY_PREFIX = "theme:"


def theme_key(user_id: str) -> str:
    return f"{THEME_KEY_PREFIX}{user_id}"


class AppSettingsRepository(
    BaseRepository[AppSettingRecord, AppSettingRecord, AppSettingRecord]
):
    """Repository for ``app_settings`` rows, keyed by setting name."""

    def __init__(self, client: Client):
        super().__init__(AppSettingRecord, client, "app_settings", primary_key="key")

    async def get_value(self, key: str, default: Any = None) -> Any:
        record = await self.get_by_id(key)
        if record is None or record.value is None:
            return default
        return record.value

    async def set_value(self, key: str, value: Any) -> AppSettingRecord:
        """Insert or overwrite a setting."""
        result = await self._execute(
            self._query().upsert({"key": key, "value": value}, on_conflict="key"),
            "upsert",
        )
        rows = result.data or []
        return self._to_model(rows[0]) if rows else AppSettingRecord(key=key, value=value)

    async def is_signup_enabled(self) -> bool:
        # Sign-up stays open until an admin turns it off.
        return bool(await self.get_value(SIGNUP_ENABLED_KEY, default=True))

    async def set_signup_enabled(self, enabled: bool) -> bool:
        await self.set_value(SIGNUP_ENABLED_KEY, enabled)
        return enabled

    async def get_theme(self, user_id: str) -> Optional[Any]:
        return await self.get_value(theme_key(user_id))

    async def set_theme(self, user_id: str, theme: Any) -> Any:
        await self.set_value(theme_key(user_id), theme)
        return theme
