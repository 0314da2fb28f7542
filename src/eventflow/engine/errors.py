"""EventFlow engine errors."""

from typing import Optional

from eventflow.models.enums import RuleId


class EventFlowError(Exception):
    """Base error for EventFlow operations."""

    def __init__(self, message: str, code: str = "EVENTFLOW_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class EventNotFound(EventFlowError):
    """Event does not exist."""

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}", "EVENT_NOT_FOUND")
        self.event_id = event_id


class InvalidStateTransition(EventFlowError):
    """Invalid event state transition."""

    def __init__(
        self,
        current_status: str,
        requested_status: str,
        guard: Optional[str] = None,
    ):
        message = f"Cannot transition from {current_status} to {requested_status}"
        if guard:
            message = f"{message}: {guard}"
        super().__init__(message, "INVALID_STATE_TRANSITION")
        self.current_status = current_status
        self.requested_status = requested_status
        self.guard = guard


class BusinessRuleViolation(EventFlowError):
    """A business rule rejected the event."""

    def __init__(self, rule_id: RuleId, message: str):
        super().__init__(message, "BUSINESS_RULE_VIOLATION")
        self.rule_id = rule_id
