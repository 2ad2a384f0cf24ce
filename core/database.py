"""
core/database.py -- Shared SQLAlchemy Core schema and engine for Beacon.

All three stores (CredentialStore, TokenRegistry, LocationLedger) share one
Database so the location listing can join against users in a single query.
SQLAlchemy Core (not ORM) keeps the dataclasses in auth/models.py and
locations/models.py the authoritative domain representation.

Uniqueness lives in the schema, not in application code:
  UNIQUE(users.email)         -- registration races end in IntegrityError
  UNIQUE(tokens.secret_hash)  -- no two live tokens share a secret

locations.token_id has no foreign key. Tokens are hard-deleted on logout and
the locations recorded with them are kept.

Connection failures (OperationalError / InterfaceError) raised inside
Database.connect() or Database.begin() are re-raised as StoreUnavailable so
the API boundary can log them and answer with a generic 500.

Usage:
    db = Database("sqlite:///beacon.db")                     # SQLite
    db = Database("postgresql://user:pw@host/db", 5.0)       # PostgreSQL
    with db.begin() as conn:
        conn.execute(users.insert().values(...))
    db.close()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    false,
    text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import InterfaceError, OperationalError

from core.errors import StoreUnavailable

logger = logging.getLogger("beacon.db")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("firstname", String(255), nullable=False),
    Column("lastname", String(255), nullable=False),
    Column("city", String(255), nullable=False),
    Column("country", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
)

tokens = Table(
    "tokens",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("secret_hash", String(64), nullable=False, unique=True),  # HMAC-SHA256 hex
    Column("secret_prefix", String(12), nullable=False),  # display only
    Column("name", String(100), nullable=False),  # device / session label
    Column("created_at", String(32), nullable=False),
)

locations = Table(
    "locations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("token_id", Integer, nullable=False),
    Column("private", Boolean, nullable=False, server_default=false()),
    Column("latitude", Float, nullable=False),
    Column("longitude", Float, nullable=False),
    Column("timestamp", String(40), nullable=False),  # ISO 8601 as supplied by the client
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Database handle
# ---------------------------------------------------------------------------


class Database:
    """Owns the engine and the schema. Stores borrow connections from it."""

    def __init__(self, db_url: str, connect_timeout: float = 5.0) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            connect_args["timeout"] = connect_timeout
        elif db_url.startswith("postgresql"):
            connect_args["connect_timeout"] = int(connect_timeout)
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=True)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)

    def create_tables(self) -> None:
        """Create any missing tables. Idempotent -- safe on every startup."""
        with self._translate_errors():
            metadata.create_all(self.engine)

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Yield a connection for reads. Callers commit explicitly if they write."""
        with self._translate_errors(), self.engine.connect() as conn:
            yield conn

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        """Yield a connection inside a transaction.

        Commits when the block exits normally, rolls back on any exception.
        """
        with self._translate_errors(), self.engine.begin() as conn:
            yield conn

    def ping(self) -> bool:
        """Return True if a trivial query succeeds. Used by the health endpoint."""
        try:
            with self.connect() as conn:
                conn.execute(text("SELECT 1"))
        except StoreUnavailable:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except (OperationalError, InterfaceError) as exc:
            logger.error("Database unavailable: %s", exc.__class__.__name__)
            raise StoreUnavailable(str(exc)) from exc
