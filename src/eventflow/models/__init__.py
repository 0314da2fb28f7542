"""EventFlow data models."""

from eventflow.models.enums import (
    EventStatus,
    InvitationStatus,
    RuleId,
    VerificationStatus,
)
from eventflow.models.event import Event
from eventflow.models.participant import GeoPoint, Participant
from eventflow.models.preferences import AggregatedPreferences, PreferenceProfile
from eventflow.models.venue import EventPlaceOption, Venue, VenueScore
from eventflow.models.audit import AuditLogEntry

__all__ = [
    "AggregatedPreferences",
    "AuditLogEntry",
    "Event",
    "EventPlaceOption",
    "EventStatus",
    "GeoPoint",
    "InvitationStatus",
    "Participant",
    "PreferenceProfile",
    "RuleId",
    "Venue",
    "VenueScore",
    "VerificationStatus",
]
