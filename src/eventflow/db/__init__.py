"""EventFlow database layer."""

from eventflow.db.base import Base, get_session, init_db
from eventflow.db.tables import (
    AuditLogTable,
    EventTable,
    LocationTable,
    ParticipantTable,
    PlaceOptionTable,
    PreferenceTable,
    VenueTable,
)

__all__ = [
    "Base",
    "get_session",
    "init_db",
    "AuditLogTable",
    "EventTable",
    "LocationTable",
    "ParticipantTable",
    "PlaceOptionTable",
    "PreferenceTable",
    "VenueTable",
]
