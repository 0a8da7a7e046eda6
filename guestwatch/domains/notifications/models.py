from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator

from ...shared.models.base import BaseDocument, PyObjectId
from ...shared.models.references import PrincipalKind, PrincipalRef


class Notification(BaseDocument):
    """Per-recipient inbox entry.

    Officer notifications are always tagged with the officer's station;
    admin and hotel notifications never are.
    """
    recipient: PrincipalRef
    recipient_station: Optional[PyObjectId] = Field(default=None, description="Station of a Police recipient")
    message: str = Field(..., min_length=1)
    is_read: bool = Field(default=False)

    @model_validator(mode="after")
    def station_matches_recipient_kind(self) -> "Notification":
        kind = self.recipient.kind
        if kind == PrincipalKind.SYSTEM:
            raise ValueError("System accounts cannot receive notifications")
        if kind == PrincipalKind.POLICE and self.recipient_station is None:
            raise ValueError("Police notifications require a recipient_station")
        if kind != PrincipalKind.POLICE and self.recipient_station is not None:
            raise ValueError(f"{kind.value} notifications must not carry a recipient_station")
        return self

    @classmethod
    def for_officer(cls, officer_id, station_id, message: str) -> "Notification":
        return cls(recipient=PrincipalRef.police(officer_id), recipient_station=station_id, message=message)

    @classmethod
    def for_admin(cls, admin_id, message: str) -> "Notification":
        return cls(recipient=PrincipalRef.admin(admin_id), message=message)

    def to_mongo(self) -> dict:
        doc = super().to_mongo()
        doc["recipient"] = self.recipient.to_mongo()
        if self.recipient_station is None:
            doc.pop("recipient_station", None)
        return doc
