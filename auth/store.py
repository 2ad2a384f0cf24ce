"""
auth/store.py -- SQLAlchemy Core persistence for user accounts.

Pattern: Repository + Data Mapper (same as auth/registry.py and
locations/store.py). CredentialStore is the repository; _row_to_user is the
mapper. Route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  Passwords arrive here as plaintext and leave as bcrypt hashes; nothing
  else in the codebase sees a stored hash except verify().

Registration race:
  register() looks the email up and inserts inside one transaction, and the
  users.email column is UNIQUE. Two concurrent registrations for the same
  email can both pass the lookup; the second INSERT then fails with
  IntegrityError, which is translated to DuplicateIdentity. Either way the
  caller sees exactly one success.

Layer rule: no imports from api/ or locations/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.tokens import hash_password, verify_password
from core.database import Database, users
from core.errors import DuplicateIdentity, InvalidCredentials, NotFound, WriteFailure

logger = logging.getLogger("beacon.auth")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CredentialStore:
    """Repository for User entities.

    Usage:
        store = CredentialStore(db)
        user_id = store.register("a@x.com", "pw", "A", "B", "City", "Country")
        user = store.verify("a@x.com", "pw")
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def register(
        self,
        email: str,
        password: str,
        firstname: str,
        lastname: str,
        city: str,
        country: str,
    ) -> int:
        """Create a user and return its id.

        Raises DuplicateIdentity if the email is already registered. Field
        validation (all non-empty) is the caller's job.
        """
        hashed = hash_password(password)
        try:
            with self.db.begin() as conn:
                existing = conn.execute(users.select().where(users.c.email == email)).fetchone()
                if existing is not None:
                    raise DuplicateIdentity()
                result = conn.execute(
                    users.insert().values(
                        email=email,
                        hashed_password=hashed,
                        firstname=firstname,
                        lastname=lastname,
                        city=city,
                        country=country,
                        created_at=_now_iso(),
                    )
                )
                if result.rowcount == 0:
                    raise WriteFailure("insert into users affected no rows")
                user_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            # A concurrent registration won the race after our lookup.
            raise DuplicateIdentity() from exc
        logger.info("Registered user id=%d", user_id)
        return user_id

    def verify(self, email: str, password: str) -> User:
        """Return the user if the password matches the stored hash.

        Raises NotFound for an unknown email and InvalidCredentials for a
        wrong password, so the route can answer 404 and 401 respectively.
        """
        user = self.get_by_email(email)
        if user is None:
            raise NotFound("user not found")
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentials()
        return user

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.db.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        with self.db.connect() as conn:
            row = conn.execute(users.select().where(users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        hashed_password=row.hashed_password,
        firstname=row.firstname,
        lastname=row.lastname,
        city=row.city,
        country=row.country,
        created_at=row.created_at,
    )
