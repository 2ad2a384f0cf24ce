"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Beacon happen here. No module should call
os.getenv() or os.environ.get() directly -- import get_settings() instead.
Stores never call get_settings() themselves: api/main.py and main.py read the
settings once and pass the relevant values into each store's constructor.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

  @model_validator(mode="after"): Cross-field validation after all fields are
      resolved. Used for the DEBUG-conditional SECRET_KEY policy and for
      assembling a PostgreSQL DSN from the POSTGRES_* variables.

Security notes:
  SECRET_KEY is the HMAC key for stored token secrets. Shorter than 32 chars
  is rejected outright. In production mode (DEBUG not set or false) a missing
  SECRET_KEY is a hard startup failure: a random key would silently log every
  device out on restart.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or locations/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("beacon.config")

_DEFAULT_SQLITE_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'beacon.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "0.0.0.0"  # noqa: S104 # nosec B104 -- container deployment
    port: int = 8080
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    # Explicit SQLAlchemy URL wins. When empty, POSTGRES_HOST selects the
    # PostgreSQL DSN below, otherwise the local SQLite file is used.
    database_url: str = ""
    postgres_user: str = ""
    postgres_password: str = ""
    postgres_host: str = ""
    postgres_database: str = ""
    # Seconds the driver may spend opening a connection before giving up.
    db_connect_timeout: float = 5.0

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    auth_header_name: str = "X-Auth-Token"

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    # The first release treated 0.0 latitude/longitude as "missing" and
    # rejected it. Off by default; enable only for strict compatibility.
    reject_zero_coordinates: bool = False

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Issued tokens will not survive a restart -- acceptable locally.

        Production mode: refuse to start if SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning(
                    "WARNING: Using auto-generated SECRET_KEY. " "Issued tokens will not persist across restarts."
                )
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    @model_validator(mode="after")
    def resolve_database_url(self) -> "Settings":
        """Fill database_url from POSTGRES_* when no explicit URL is given."""
        if self.database_url:
            return self
        if self.postgres_host:
            self.database_url = (
                f"postgresql://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_host}/{self.postgres_database}?sslmode=disable"
            )
        else:
            self.database_url = _DEFAULT_SQLITE_URL
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
