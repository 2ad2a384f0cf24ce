"""
api/routes/v1/locations.py -- Location reporting and the shared location feed.

Routes:
  POST /api/v1/locations/{user_id}  -- record a position for the path user
  GET  /api/v1/locations            -- every recorded position, private ones redacted

Every route on this router passes the liveness gate (router-level
require_token). POST additionally passes the ownership gate, and the token id
bound to the new location is resolved from that same user/secret pair, so
the ledger never sees a user_id/token_id mismatch.

Zero coordinates:
  0.0 is a valid latitude (equator) and longitude (prime meridian) and is
  accepted. REJECT_ZERO_COORDINATES=true restores the first release's rule,
  which treated 0.0 as a missing value.
"""

from fastapi import APIRouter, Depends, Request

from api.models import AddLocationRequest, AddLocationResponse, LocationResponse
from auth.dependencies import AuthContext, require_owner, require_token
from auth.registry import TokenRegistry
from core.errors import Unauthorized, ValidationError
from locations.models import Location
from locations.store import LocationLedger
from locations.visibility import redact_private

router = APIRouter(dependencies=[Depends(require_token)])


@router.post("/locations/{user_id}", response_model=AddLocationResponse, status_code=201)
def add_location(
    request: Request,
    body: AddLocationRequest,
    ctx: AuthContext = Depends(require_owner),
) -> AddLocationResponse:
    """Record a position bound to the path user and the token used for this call."""
    if request.app.state.settings.reject_zero_coordinates and (
        body.position.latitude == 0 or body.position.longitude == 0
    ):
        raise ValidationError("latitude and longitude must be non-zero")

    registry: TokenRegistry = request.app.state.token_registry
    token_id = registry.lookup_id(ctx.user_id, ctx.token)
    if token_id is None:
        # Revoked between the ownership gate and here.
        raise Unauthorized()

    ledger: LocationLedger = request.app.state.location_ledger
    location_id = ledger.record(
        Location(
            user_id=ctx.user_id,
            token_id=token_id,
            timestamp=body.timestamp.isoformat(),
            latitude=body.position.latitude,
            longitude=body.position.longitude,
            private=body.private,
        )
    )
    return AddLocationResponse(id=location_id)


@router.get("/locations", response_model=list[LocationResponse])
def list_locations(request: Request) -> list[LocationResponse]:
    """Return all locations. Names on private entries are blanked."""
    ledger: LocationLedger = request.app.state.location_ledger
    return [LocationResponse.from_view(v) for v in redact_private(ledger.list_all())]
