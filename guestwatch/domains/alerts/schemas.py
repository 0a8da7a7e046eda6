from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.models.base import PyObjectId
from ...shared.models.references import PrincipalRef, require_author
from .models import Alert, AlertDraft, AlertStatus


class AlertCreate(BaseModel):
    """Manual alert raised by an officer or regional admin."""
    guest_id: PyObjectId
    reason: str = Field(..., min_length=1, max_length=500)
    created_by: PrincipalRef = Field(..., description="Authoring officer or admin, supplied by the gateway")

    @field_validator("reason", mode="before")
    @classmethod
    def strip_reason(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("created_by")
    @classmethod
    def author_must_be_a_person(cls, v: PrincipalRef) -> PrincipalRef:
        return require_author(v)

    def to_draft(self) -> AlertDraft:
        return AlertDraft(guest_id=self.guest_id, reason=self.reason, created_by=self.created_by)

    model_config = {
        "arbitrary_types_allowed": True,
        "json_schema_extra": {
            "example": {
                "guest_id": "665f1c2e8b3a4d0012345678",
                "reason": "Guest matches a description in an open case",
                "created_by": {"kind": "Police", "id": "665f1c2e8b3a4d0012345679"},
            }
        },
    }


class AlertResponse(BaseModel):
    id: str
    guest_id: str
    reason: str
    status: AlertStatus
    created_by: dict
    created_at: datetime
    resolved_at: Optional[datetime] = None

    @classmethod
    def from_alert(cls, alert: Alert) -> "AlertResponse":
        return cls(
            id=str(alert.id),
            guest_id=str(alert.guest_id),
            reason=alert.reason,
            status=alert.status,
            created_by={"kind": alert.created_by.kind.value, "id": str(alert.created_by.id)},
            created_at=alert.created_at,
            resolved_at=alert.resolved_at,
        )
