"""
API request and response models for Beacon REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
locations/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire shapes (field names, nested "position") match the first release of the
service so existing mobile clients keep working.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from auth.tokens import MAX_PASSWORD_BYTES
from locations.models import LocationView

# Non-empty after whitespace stripping. Applies to email, profile, and device fields.
_Required = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


def _fits_bcrypt(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8")
    return value


# Taken verbatim: surrounding whitespace is part of the password.
_Password = Annotated[str, Field(min_length=1), AfterValidator(_fits_bcrypt)]

# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register. All fields are required."""

    email: _Required
    password: _Password
    firstname: _Required
    lastname: _Required
    city: _Required
    country: _Required


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login.

    device is a free-form label ("phone", "laptop") stored with the token so
    the user can tell sessions apart.
    """

    email: _Required
    password: _Password
    device: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class LogoutRequest(BaseModel):
    """Request body for DELETE /api/v1/auth/{user_id}/logout."""

    tokens: list[int] = Field(default_factory=list, description="Ids of the tokens to invalidate.")


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int


class LoginResponse(BaseModel):
    """Returned once per login. The token value is never retrievable again."""

    model_config = ConfigDict(frozen=True)

    id: int
    token: str


class LogoutResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    invalidated: list[int]


class TokenInfo(BaseModel):
    """One live session in GET /api/v1/auth/{user_id}/tokens. Never includes the secret."""

    model_config = ConfigDict(frozen=True)

    id: int
    device: str
    token_prefix: str
    created_at: str


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


class Position(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class AddLocationRequest(BaseModel):
    """Request body for POST /api/v1/locations/{user_id}."""

    timestamp: datetime
    position: Position
    private: bool = False


class AddLocationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int


class LocationResponse(BaseModel):
    """One entry of GET /api/v1/locations.

    firstname and lastname are empty strings when the location is private.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    position: Position
    private: bool
    firstname: str
    lastname: str

    @classmethod
    def from_view(cls, view: LocationView) -> "LocationResponse":
        """Build a LocationResponse from a (redacted) LocationView."""
        return cls(
            timestamp=view.timestamp,
            position=Position(latitude=view.latitude, longitude=view.longitude),
            private=view.private,
            firstname=view.firstname,
            lastname=view.lastname,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
