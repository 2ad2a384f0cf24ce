"""Unit tests for locations/store.py and locations/visibility.py.

Covers:
- record() returns an id and list_all() joins the owner's name
- list_all() returns raw names; redact_private() blanks them for private rows
- coordinates and timestamps of private rows pass through unchanged
- locations survive revocation of the token they were recorded with
"""

import pytest

from auth.registry import TokenRegistry
from auth.store import CredentialStore
from locations.models import Location, LocationView
from locations.store import LocationLedger
from locations.visibility import redact_private

T = "2024-05-01T12:30:00+00:00"


@pytest.fixture
def owner(credential_store: CredentialStore, token_registry: TokenRegistry) -> tuple[int, int]:
    user_id = credential_store.register("a@x.com", "pw", "A", "B", "City", "Country")
    token_id, _ = token_registry.issue(user_id, "phone")
    return user_id, token_id


class TestLedger:
    def test_record_then_list_all(self, ledger: LocationLedger, owner) -> None:
        user_id, token_id = owner
        location_id = ledger.record(Location(user_id=user_id, token_id=token_id, timestamp=T, latitude=1.0, longitude=2.0))
        assert isinstance(location_id, int)
        assert ledger.list_all() == [
            LocationView(private=False, firstname="A", lastname="B", latitude=1.0, longitude=2.0, timestamp=T)
        ]

    def test_list_all_does_not_redact(self, ledger: LocationLedger, owner) -> None:
        user_id, token_id = owner
        ledger.record(Location(user_id=user_id, token_id=token_id, timestamp=T, latitude=1.0, longitude=2.0, private=True))
        [view] = ledger.list_all()
        assert view.private is True
        assert (view.firstname, view.lastname) == ("A", "B")

    def test_list_all_empty(self, ledger: LocationLedger) -> None:
        assert ledger.list_all() == []

    def test_location_outlives_its_token(self, ledger: LocationLedger, token_registry: TokenRegistry, owner) -> None:
        user_id, token_id = owner
        ledger.record(Location(user_id=user_id, token_id=token_id, timestamp=T, latitude=-33.9, longitude=151.2))
        token_registry.revoke(user_id, token_id)
        assert len(ledger.list_all()) == 1

    def test_zero_coordinates_are_storable(self, ledger: LocationLedger, owner) -> None:
        user_id, token_id = owner
        ledger.record(Location(user_id=user_id, token_id=token_id, timestamp=T, latitude=0.0, longitude=0.0))
        [view] = ledger.list_all()
        assert (view.latitude, view.longitude) == (0.0, 0.0)


class TestRedactPrivate:
    def _view(self, private: bool) -> LocationView:
        return LocationView(private=private, firstname="Ada", lastname="Lovelace", latitude=51.5, longitude=-0.12, timestamp=T)

    def test_private_entry_loses_identity_only(self) -> None:
        [redacted] = redact_private([self._view(True)])
        assert (redacted.firstname, redacted.lastname) == ("", "")
        assert (redacted.latitude, redacted.longitude, redacted.timestamp) == (51.5, -0.12, T)
        assert redacted.private is True

    def test_public_entry_is_unchanged(self) -> None:
        view = self._view(False)
        assert redact_private([view]) == [view]

    def test_mixed_input_keeps_order(self) -> None:
        views = [self._view(False), self._view(True), self._view(False)]
        assert [v.firstname for v in redact_private(views)] == ["Ada", "", "Ada"]

    def test_input_is_not_mutated(self) -> None:
        view = self._view(True)
        redact_private([view])
        assert view.firstname == "Ada"

    def test_accepts_any_iterable(self) -> None:
        assert redact_private(iter([])) == []
