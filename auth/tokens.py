"""
auth/tokens.py -- Password hashing and bearer-token secret utilities.

Security design decisions:
  Passwords: bcrypt directly (no passlib wrapper). Its cost factor makes
       brute-forcing low-entropy passwords expensive. verify_password() is the
       only query the rest of the code makes against a stored hash.

  Token secrets: secrets.token_hex(32) gives 256 bits of entropy, so guessing
       a live secret is computationally infeasible and collisions are
       negligible over the lifetime of the store. We persist
       HMAC-SHA256(SECRET_KEY, secret) so lookup is an O(1) index hit and a
       leaked table does not leak usable tokens. bcrypt's slowness would be
       wasted on secrets this strong and would tax every request.

  The HMAC key is passed in by the caller (TokenRegistry receives it from
  Settings at construction). This module never reads configuration itself.

Layer rule: no imports from api/ or locations/.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

import bcrypt

from core.errors import ValidationError

_SECRET_PREFIX = "bcn_"

# bcrypt input limit.
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt only looks at the first MAX_PASSWORD_BYTES bytes, and newer releases
    refuse longer input outright. Over-length passwords are rejected here
    instead of being truncated or failing inside bcrypt.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash makes bcrypt raise ValueError; that is a mismatch,
    not a server error. So is a password too long to have been registered.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# Token secrets
# ---------------------------------------------------------------------------


def generate_token_secret() -> str:
    """Generate a new bearer secret in the format: bcn_<64 hex chars>."""
    return f"{_SECRET_PREFIX}{secrets.token_hex(32)}"


def hash_token_secret(secret: str, key: str) -> str:
    """Return HMAC-SHA256(key, secret) as a hex string.

    Deterministic, so the registry can look a presented secret up by hash
    instead of scanning rows.
    """
    return hmac.new(key.encode(), secret.encode(), hashlib.sha256).hexdigest()
