"""
locations/visibility.py -- Identity redaction for private locations.

This is the only place privacy is enforced. It is courtesy redaction, not
access control: a private entry keeps its coordinates and timestamp in the
listing; only the owner's first and last name are blanked.
"""

from collections.abc import Iterable
from dataclasses import replace

from locations.models import LocationView


def redact_private(views: Iterable[LocationView]) -> list[LocationView]:
    """Return views with firstname/lastname emptied on every private entry."""
    return [replace(v, firstname="", lastname="") if v.private else v for v in views]
