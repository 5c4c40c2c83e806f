"""
Unit tests for the application configuration (Settings).

Tests cover:
- Default values
- DATABASE_URL property for SQLite and PostgreSQL mode
- PostgreSQL credential validation
"""

import os

import pytest

from app.core.config import Settings, settings


class TestSettingsDefaults:
    def test_project_name(self):
        assert settings.PROJECT_NAME == "Investor Onboarding API"

    def test_api_version_prefix(self):
        assert settings.API_V1_STR == "/api/v1"

    def test_test_suite_runs_on_sqlite(self):
        assert settings.USE_SQLITE is True
        assert settings.DATABASE_URL == "sqlite+aiosqlite://"

    def test_circuit_breaker_settings_have_defaults(self):
        assert settings.CB_FAILURE_THRESHOLD > 0
        assert settings.CB_RECOVERY_TIMEOUT > 0

    def test_identity_headers(self):
        assert settings.USER_ID_HEADER == "X-User-Id"
        assert settings.USER_ROLE_HEADER == "X-User-Role"


class TestDatabaseURL:
    def test_postgres_url(self):
        s = Settings(
            USE_SQLITE=False,
            POSTGRES_USER="u",
            POSTGRES_PASSWORD="p",
            POSTGRES_SERVER="localhost",
            POSTGRES_DB="db",
            POSTGRES_PORT=5432,
        )
        assert s.DATABASE_URL == "postgresql+asyncpg://u:p@localhost:5432/db"

    def test_pg_missing_credentials_raises(self):
        saved = {}
        for key in (
            "USE_SQLITE",
            "POSTGRES_USER",
            "POSTGRES_PASSWORD",
            "POSTGRES_SERVER",
            "POSTGRES_DB",
        ):
            saved[key] = os.environ.pop(key, None)
        try:
            with pytest.raises(ValueError, match="POSTGRES_USER"):
                Settings(USE_SQLITE=False, _env_file=None)  # type: ignore[call-arg]
        finally:
            for key, val in saved.items():
                if val is not None:
                    os.environ[key] = val
