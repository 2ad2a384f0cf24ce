"""
auth/dependencies.py -- FastAPI Depends() helpers implementing the access guard.

Two checks, deliberately kept apart:

  require_token  -- liveness gate. Applied to every protected route. Reads the
                    bearer secret from the token header (X-Auth-Token unless
                    AUTH_HEADER_NAME says otherwise). Absent or blank secret
                    -> Unauthorized without touching the store; unknown
                    secret -> Unauthorized. Says nothing about whose token it is.

  require_owner  -- ownership gate. Applied on top of require_token to routes
                    with {user_id} in the path. A user_id that is not an
                    ASCII decimal within the 64-bit id range is a client
                    error (ValidationError, 400) and is logged as a
                    malformed path; a live token that belongs to someone else
                    is Unauthorized and logged as an ownership mismatch.

require_owner depends on require_token, so FastAPI always runs the liveness
gate first and, thanks to per-request dependency caching, only once.

Layer rule: no imports from api/ or locations/.
  auth/dependencies.py may import from fastapi (for Depends/Request) because
  this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Request

from auth.registry import TokenRegistry
from core.errors import Unauthorized, ValidationError

logger = logging.getLogger("beacon.auth")

# Largest value a signed 64-bit INTEGER column can hold.
_MAX_ID = 2**63 - 1


def _is_row_id(value: str) -> bool:
    # Length check first: int() refuses very long digit strings.
    return value.isascii() and value.isdigit() and len(value) <= 19 and int(value) <= _MAX_ID


@dataclass(frozen=True)
class AuthContext:
    """A request that passed both gates: the path user and the secret they presented."""

    user_id: int
    token: str


def require_token(request: Request) -> str:
    """Return the presented secret if it belongs to a live token.

    Use as a FastAPI dependency:
        router = APIRouter(dependencies=[Depends(require_token)])
    """
    header_name: str = request.app.state.settings.auth_header_name
    token = request.headers.get(header_name, "").strip()
    if not token:
        logger.info("Rejected %s %s: no %s header", request.method, request.url.path, header_name)
        raise Unauthorized()

    registry: TokenRegistry = request.app.state.token_registry
    if not registry.exists(token):
        logger.info("Rejected %s %s: unknown token", request.method, request.url.path)
        raise Unauthorized()
    return token


def require_owner(user_id: str, request: Request, token: str = Depends(require_token)) -> AuthContext:
    """Require that the live token belongs to the user named in the path.

    user_id is taken as a string so a malformed value reaches this function
    and can be reported as a client error rather than an auth failure.
    """
    if not _is_row_id(user_id):
        logger.warning("Malformed user id in path %s: %r", request.url.path, user_id)
        raise ValidationError(f"user id must be a 64-bit integer id, got {user_id!r}")
    uid = int(user_id)

    registry: TokenRegistry = request.app.state.token_registry
    if not registry.owned_by(uid, token):
        logger.warning("Ownership mismatch on %s %s: token not bound to user id=%d", request.method, request.url.path, uid)
        raise Unauthorized()
    return AuthContext(user_id=uid, token=token)
