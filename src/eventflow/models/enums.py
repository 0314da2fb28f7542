"""EventFlow enumerations."""

from enum import Enum


class EventStatus(str, Enum):
    """Event lifecycle status."""

    DRAFT = "draft"
    PLANNING = "planning"
    INVITING = "inviting"
    GATHERING_PREFERENCES = "gathering_preferences"
    AI_RECOMMENDING = "ai_recommending"
    VOTING = "voting"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def terminal_states(cls) -> set["EventStatus"]:
        """Return terminal states."""
        return {cls.COMPLETED, cls.CANCELLED}

    @classmethod
    def invitation_states(cls) -> set["EventStatus"]:
        """States in which invitations may still be sent."""
        return {cls.DRAFT, cls.PLANNING, cls.INVITING, cls.GATHERING_PREFERENCES}


class InvitationStatus(str, Enum):
    """Participant response to an event invitation."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class VerificationStatus(str, Enum):
    """Moderation state of a venue."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RuleId(str, Enum):
    """Stable identifiers for business rule violations."""

    MIN_ADVANCE_SCHEDULING = "min_advance_scheduling"
    MIN_PARTICIPANTS = "min_participants"
    BUDGET_FLOOR = "budget_floor"
    NO_TIME_OVERLAP = "no_time_overlap"
    INVITATION_DEADLINE = "invitation_deadline"
    INVITATION_STATUS = "invitation_status"
