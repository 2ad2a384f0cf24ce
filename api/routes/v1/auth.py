"""
api/routes/v1/auth.py -- Registration, login, logout, and session listing.

Routes:
  POST   /api/v1/auth/register            -- create an account (public)
  POST   /api/v1/auth/login               -- issue a bearer token (public)
  DELETE /api/v1/auth/{user_id}/logout    -- revoke the named token ids
  GET    /api/v1/auth/{user_id}/tokens    -- list the user's live sessions

Auth policy:
  register/login are public. logout and tokens pass the liveness gate
  (require_token) and the ownership gate (require_owner): the presented token
  must belong to {user_id}.

Status codes for login follow the first release of the service: 404 for an
unknown email, 401 for a wrong password.

Errors are raised as core.errors types and rendered by the handler in
api/main.py; routes do not build error responses themselves.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
    TokenInfo,
)
from auth.dependencies import AuthContext, require_owner
from auth.registry import TokenRegistry
from auth.store import CredentialStore

router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create an account. 409 if the email is already registered."""
    credentials: CredentialStore = request.app.state.credential_store
    user_id = credentials.register(
        body.email,
        body.password,
        body.firstname,
        body.lastname,
        body.city,
        body.country,
    )
    return RegisterResponse(id=user_id)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Verify email and password, then issue a new token for body.device.

    Every successful login creates a separate token, so one user can be
    logged in from several devices at once.
    """
    credentials: CredentialStore = request.app.state.credential_store
    registry: TokenRegistry = request.app.state.token_registry

    user = credentials.verify(body.email, body.password)
    token_id, secret = registry.issue(user.id, body.device)

    resp = JSONResponse(status_code=200, content=LoginResponse(id=token_id, token=secret).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# User-scoped endpoints (liveness + ownership)
# ---------------------------------------------------------------------------


@router.delete("/auth/{user_id}/logout", response_model=LogoutResponse)
def logout(
    request: Request,
    body: LogoutRequest,
    ctx: AuthContext = Depends(require_owner),
) -> LogoutResponse:
    """Invalidate the listed tokens of the path user.

    All or nothing: if any id is not one of the user's live tokens the
    request fails with 404 and no token is revoked.
    """
    registry: TokenRegistry = request.app.state.token_registry
    revoked = registry.revoke_many(ctx.user_id, body.tokens)
    return LogoutResponse(invalidated=revoked)


@router.get("/auth/{user_id}/tokens", response_model=list[TokenInfo])
def list_tokens(request: Request, ctx: AuthContext = Depends(require_owner)) -> list[TokenInfo]:
    """List the path user's live sessions. Token values are never returned."""
    registry: TokenRegistry = request.app.state.token_registry
    return [
        TokenInfo(id=t.id, device=t.name, token_prefix=t.secret_prefix, created_at=t.created_at or "")
        for t in registry.list_for_user(ctx.user_id)
    ]
