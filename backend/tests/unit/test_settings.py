"""
Unit tests for Pydantic Settings configuration.

Tests settings loading and validation.
"""

import pytest

from admissions.config.settings import Settings


class TestSettings:
    """Tests for Settings configuration."""

    def test_settings_loads_from_env(self):
        """Settings should load from environment variables."""
        from admissions.config.settings import settings

        assert settings.supabase_url == "https://test-project.supabase.co"
        assert settings.supabase_service_role_key is not None

    def test_settings_has_defaults(self):
        """Settings should have sensible defaults."""
        from admissions.config.settings import settings

        assert settings.environment in ("development", "production", "testing")
        assert settings.min_application_fragment_length == 50
        assert settings.application_id_padding == 4
        assert settings.parser_country_code_marker == "+974"
        assert settings.min_password_length == 6

    def test_allowed_origins_includes_localhost(self):
        from admissions.config.settings import settings

        assert "http://localhost:5173" in settings.allowed_origins
        assert "http://localhost:3000" in settings.allowed_origins

    def test_trailing_slash_trimmed(self):
        settings = Settings(
            supabase_url="https://abc.supabase.co/",
            supabase_service_role_key="key",
            _env_file=None,
        )
        assert settings.supabase_url == "https://abc.supabase.co"
        assert settings.jwt_issuer == "https://abc.supabase.co/auth/v1"

    def test_url_scheme_required(self):
        with pytest.raises(ValueError):
            Settings(
                supabase_url="abc.supabase.co",
                supabase_service_role_key="key",
                _env_file=None,
            )
