"""Audit log model - one entry per lifecycle transition."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class AuditLogEntry(BaseModel):
    """Audit trail for event status transitions."""

    audit_id: UUID
    event_id: UUID
    old_status: str
    new_status: str
    reason: str
    changed_at: datetime
    additional_data: dict[str, Any] = Field(default_factory=dict)


def default_reason(old_status: str, new_status: str) -> str:
    """Reason recorded when the caller supplies none."""
    return f"Status changed from {old_status} to {new_status}"
