"""EventFlow engine - lifecycle, rules, aggregation and recommendations."""

from eventflow.engine.core import PlanningEngine
from eventflow.engine.errors import (
    BusinessRuleViolation,
    EventFlowError,
    EventNotFound,
    InvalidStateTransition,
)
from eventflow.engine.lifecycle import EventLifecycle

__all__ = [
    "BusinessRuleViolation",
    "EventFlowError",
    "EventLifecycle",
    "EventNotFound",
    "InvalidStateTransition",
    "PlanningEngine",
]
