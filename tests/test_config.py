"""Unit tests for core/config.py -- the SECRET_KEY policy and database URL resolution."""

import pytest
from pydantic import ValidationError

from core.config import Settings

KEY = "k" * 32

_ENV = (
    "DEBUG",
    "SECRET_KEY",
    "DATABASE_URL",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "POSTGRES_HOST",
    "POSTGRES_DATABASE",
    "REJECT_ZERO_COORDINATES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


class TestSecretKey:
    def test_missing_key_in_production_is_fatal(self):
        with pytest.raises(ValidationError, match="SECRET_KEY is required"):
            Settings(_env_file=None)

    def test_missing_key_in_debug_is_generated(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        settings = Settings(_env_file=None)
        assert len(settings.secret_key) >= 32

    def test_generated_keys_differ(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        assert Settings(_env_file=None).secret_key != Settings(_env_file=None).secret_key

    def test_short_key_rejected_even_in_debug(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("SECRET_KEY", "too-short")
        with pytest.raises(ValidationError, match="at least 32"):
            Settings(_env_file=None)

    def test_key_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", KEY)
        assert Settings(_env_file=None).secret_key == KEY


class TestDatabaseUrl:
    def test_defaults_to_local_sqlite(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", KEY)
        settings = Settings(_env_file=None)
        assert settings.database_url.startswith("sqlite:///")
        assert settings.database_url.endswith("beacon.db")

    def test_postgres_dsn_from_parts(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", KEY)
        monkeypatch.setenv("POSTGRES_USER", "beacon")
        monkeypatch.setenv("POSTGRES_PASSWORD", "pw")
        monkeypatch.setenv("POSTGRES_HOST", "db.local")
        monkeypatch.setenv("POSTGRES_DATABASE", "beacon")
        settings = Settings(_env_file=None)
        assert settings.database_url == "postgresql://beacon:pw@db.local/beacon?sslmode=disable"

    def test_explicit_url_wins(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", KEY)
        monkeypatch.setenv("POSTGRES_HOST", "db.local")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///elsewhere.db")
        assert Settings(_env_file=None).database_url == "sqlite:///elsewhere.db"


class TestDefaults:
    def test_header_port_and_zero_policy(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", KEY)
        settings = Settings(_env_file=None)
        assert settings.auth_header_name == "X-Auth-Token"
        assert settings.port == 8080
        assert settings.reject_zero_coordinates is False

    def test_zero_policy_from_environment(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", KEY)
        monkeypatch.setenv("REJECT_ZERO_COORDINATES", "true")
        assert Settings(_env_file=None).reject_zero_coordinates is True
