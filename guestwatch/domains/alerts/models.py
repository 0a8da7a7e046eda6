from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ...shared.models.base import BaseDocument, PyObjectId
from ...shared.models.references import PrincipalRef


class AlertStatus(str, Enum):
    OPEN = "Open"
    RESOLVED = "Resolved"


class AlertDraft(BaseModel):
    """What a caller supplies; the store assigns identity, timestamps and status."""
    guest_id: PyObjectId
    reason: str = Field(..., min_length=1)
    created_by: PrincipalRef

    model_config = {"arbitrary_types_allowed": True}


class Alert(BaseDocument):
    guest_id: PyObjectId = Field(..., description="Flagged guest")
    reason: str = Field(..., min_length=1)
    status: AlertStatus = Field(default=AlertStatus.OPEN)
    created_by: PrincipalRef = Field(..., description="Officer, admin or system account accountable for the alert")
    resolved_at: Optional[datetime] = None

    @classmethod
    def from_draft(cls, draft: AlertDraft) -> "Alert":
        return cls(guest_id=draft.guest_id, reason=draft.reason, created_by=draft.created_by)

    @property
    def is_open(self) -> bool:
        return self.status == AlertStatus.OPEN

    def to_mongo(self) -> dict:
        doc = super().to_mongo()
        doc["status"] = self.status.value
        doc["created_by"] = self.created_by.to_mongo()
        return doc
