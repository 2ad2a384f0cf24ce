"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in locations/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or locations/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is the login identifier and is compared case-sensitively, exactly
    as stored. hashed_password is a bcrypt hash; the plaintext is never kept.
    """

    email: str
    hashed_password: str
    firstname: str
    lastname: str
    city: str
    country: str
    id: int | None = None
    created_at: str | None = None


@dataclass
class Token:
    """A bearer credential bound to one user and one device/session label.

    Security design:
    - secret_hash is HMAC-SHA256(SECRET_KEY, secret). The cleartext secret is
      returned once by TokenRegistry.issue() and never persisted.
    - secret_prefix (first 12 chars of the secret) is kept for display so a
      user can tell devices apart without exposing the full value.
    - user_id never changes after creation.
    """

    user_id: int
    name: str  # device / session label supplied at login
    secret_hash: str
    secret_prefix: str
    id: int | None = None
    created_at: str | None = None
