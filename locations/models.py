"""
locations/models.py -- Domain dataclasses for recorded positions.

These are pure data containers with zero logic. Persistence lives in
locations/store.py and redaction in locations/visibility.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Location:
    """A position reported by a user through one specific token.

    token_id is the token that was live when the position was recorded. It is
    kept after that token is revoked. timestamp is the client-supplied ISO 8601
    string, stored and returned verbatim.

    id is None before the record is written to the database.
    """

    user_id: int
    token_id: int
    timestamp: str
    latitude: float
    longitude: float
    private: bool = False
    id: Optional[int] = None


@dataclass(frozen=True)
class LocationView:
    """One row of the public location listing: a position plus its owner's name.

    Produced by LocationLedger.list_all() and passed through
    redact_private() before it leaves the service.
    """

    private: bool
    firstname: str
    lastname: str
    latitude: float
    longitude: float
    timestamp: str
