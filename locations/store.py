"""
locations/store.py -- SQLAlchemy-backed persistence for recorded positions.

Pattern: Repository + Data Mapper. LocationLedger is the repository;
_row_to_view is the mapper. Route handlers never touch SQL directly.

The ledger trusts its caller on ownership: record() assumes token_id was
resolved for this exact user_id by the access guard in the same request and
does not check it again.

list_all() returns raw names. Privacy redaction is not applied here; it is
applied once, by locations.visibility.redact_private(), on the way out.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    ledger = LocationLedger(db)
    location_id = ledger.record(Location(user_id=1, token_id=7, ...))
    views = ledger.list_all()
"""

import logging

from sqlalchemy import select

from core.database import Database, locations, users
from core.errors import WriteFailure
from locations.models import Location, LocationView

logger = logging.getLogger("beacon.locations")


class LocationLedger:
    def __init__(self, db: Database) -> None:
        self.db = db

    def record(self, location: Location) -> int:
        """Insert a location and return its id.

        Raises WriteFailure if the insert affects no rows.
        """
        with self.db.begin() as conn:
            result = conn.execute(
                locations.insert().values(
                    user_id=location.user_id,
                    token_id=location.token_id,
                    timestamp=location.timestamp,
                    latitude=location.latitude,
                    longitude=location.longitude,
                    private=location.private,
                )
            )
            if result.rowcount == 0:
                raise WriteFailure("insert into locations affected no rows")
            location_id = result.inserted_primary_key[0]
        logger.info(
            "Recorded location id=%d for user id=%d via token id=%d (private=%s)",
            location_id,
            location.user_id,
            location.token_id,
            location.private,
        )
        return location_id

    def list_all(self) -> list[LocationView]:
        """Return every location joined with its owner's name.

        Order is insertion order; callers must not rely on it.
        """
        query = (
            select(
                locations.c.private,
                users.c.firstname,
                users.c.lastname,
                locations.c.latitude,
                locations.c.longitude,
                locations.c.timestamp,
            )
            .select_from(locations.join(users, locations.c.user_id == users.c.id))
            .order_by(locations.c.id)
        )
        with self.db.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_view(r) for r in rows]


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_view(row) -> LocationView:
    return LocationView(
        private=bool(row.private),
        firstname=row.firstname,
        lastname=row.lastname,
        latitude=row.latitude,
        longitude=row.longitude,
        timestamp=row.timestamp,
    )
