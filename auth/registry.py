"""
auth/registry.py -- Bearer token issuance, lookup, and revocation.

Pattern: Repository + Data Mapper, like auth/store.py. TokenRegistry is the
only code that reads or writes the tokens table. Other components get
answers to three questions and nothing more:

  exists(secret)            -- is this a live token at all?      (liveness gate)
  owned_by(user_id, secret) -- is it bound to this user?         (ownership gate)
  lookup_id(user_id, secret)-- which row, for binding a location

Secrets are never stored. Every lookup hashes the presented secret with
HMAC-SHA256(secret_key, ...) and matches on the UNIQUE secret_hash column.

Revocation is scoped by owner: DELETE ... WHERE id = :id AND user_id = :uid.
A token id that belongs to somebody else affects zero rows, and zero rows is
raised as NotFound instead of being reported as success.

Logout policy (revoke_many): atomic fail-fast. The whole batch runs in one
transaction; the first id the user does not own raises NotFound and rolls
back every delete already made in the batch.

Layer rule: no imports from api/ or locations/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from auth.models import Token
from auth.tokens import generate_token_secret, hash_token_secret
from core.database import Database, tokens
from core.errors import NotFound, WriteFailure

logger = logging.getLogger("beacon.auth")

_PREFIX_LEN = 12


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TokenRegistry:
    """Repository for Token entities.

    Usage:
        registry = TokenRegistry(db, secret_key=settings.secret_key)
        token_id, secret = registry.issue(user_id, "phone")
        registry.exists(secret)              # True
        registry.revoke(user_id, token_id)
        registry.exists(secret)              # False
    """

    def __init__(self, db: Database, secret_key: str) -> None:
        self.db = db
        self._secret_key = secret_key

    def _hash(self, secret: str) -> str:
        return hash_token_secret(secret, self._secret_key)

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def issue(self, user_id: int, device: str) -> tuple[int, str]:
        """Create a token for user_id and return (token_id, secret).

        This is the only place the cleartext secret is ever available.
        """
        secret = generate_token_secret()
        try:
            with self.db.begin() as conn:
                result = conn.execute(
                    tokens.insert().values(
                        user_id=user_id,
                        secret_hash=self._hash(secret),
                        secret_prefix=secret[:_PREFIX_LEN],
                        name=device,
                        created_at=_now_iso(),
                    )
                )
                if result.rowcount == 0:
                    raise WriteFailure("insert into tokens affected no rows")
                token_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            # 256-bit secrets do not collide in practice; a UNIQUE violation
            # here means the store is in a state we cannot explain.
            raise WriteFailure("token secret collided with an existing token") from exc
        logger.info("Issued token id=%d for user id=%d (device=%r)", token_id, user_id, device)
        return token_id, secret

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def exists(self, secret: str) -> bool:
        """Return True if secret belongs to any live token, whoever owns it."""
        with self.db.connect() as conn:
            token_id = conn.execute(select(tokens.c.id).where(tokens.c.secret_hash == self._hash(secret))).scalar()
        return token_id is not None

    def owned_by(self, user_id: int, secret: str) -> bool:
        """Return True if secret is a live token bound to user_id."""
        return self.lookup_id(user_id, secret) is not None

    def lookup_id(self, user_id: int, secret: str) -> int | None:
        """Return the id of user_id's token matching secret, or None."""
        with self.db.connect() as conn:
            return conn.execute(
                select(tokens.c.id).where((tokens.c.user_id == user_id) & (tokens.c.secret_hash == self._hash(secret)))
            ).scalar()

    def list_for_user(self, user_id: int) -> list[Token]:
        """Return the user's live tokens, newest first. Secrets are not included."""
        with self.db.connect() as conn:
            rows = conn.execute(
                tokens.select().where(tokens.c.user_id == user_id).order_by(tokens.c.id.desc())
            ).fetchall()
        return [_row_to_token(r) for r in rows]

    # ------------------------------------------------------------------
    # Revocation
    # ------------------------------------------------------------------

    def revoke(self, user_id: int, token_id: int) -> int:
        """Delete token_id if user_id owns it and return the id.

        Raises NotFound if the token does not exist or belongs to another user.
        """
        return self.revoke_many(user_id, [token_id])[0]

    def revoke_many(self, user_id: int, token_ids: Iterable[int]) -> list[int]:
        """Delete every token in token_ids owned by user_id, all or nothing.

        Duplicate ids are collapsed, keeping first-seen order. Raises NotFound
        naming the first id the user does not own; nothing is deleted then.
        """
        ordered = list(dict.fromkeys(token_ids))
        with self.db.begin() as conn:
            for token_id in ordered:
                result = conn.execute(
                    tokens.delete().where((tokens.c.id == token_id) & (tokens.c.user_id == user_id))
                )
                if result.rowcount == 0:
                    logger.info("Revoke refused: token id=%d not owned by user id=%d", token_id, user_id)
                    raise NotFound(f"token {token_id} not found")
        logger.info("Revoked %d token(s) for user id=%d", len(ordered), user_id)
        return ordered


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_token(row) -> Token:
    return Token(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        secret_hash=row.secret_hash,
        secret_prefix=row.secret_prefix,
        created_at=row.created_at,
    )
