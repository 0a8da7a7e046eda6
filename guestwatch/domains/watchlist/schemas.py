from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ...shared.models.references import PrincipalRef, require_author
from .models import WatchlistEntry, WatchlistKind


class WatchlistEntryCreate(BaseModel):
    value: str = Field(..., min_length=1, max_length=64, description="ID number or phone number to flag")
    kind: WatchlistKind
    reason: str = Field(..., min_length=1, max_length=500)
    added_by: PrincipalRef = Field(..., description="Authoring officer or admin, supplied by the gateway")

    @field_validator("value", "reason", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("added_by")
    @classmethod
    def author_must_be_a_person(cls, v: PrincipalRef) -> PrincipalRef:
        return require_author(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "value": "X1234567",
                "kind": "ID_Number",
                "reason": "fraud suspect",
                "added_by": {"kind": "RegionalAdmin", "id": "65a1f0c2e4b0a1b2c3d4e5f6"},
            }
        }
    }


class WatchlistEntryResponse(BaseModel):
    id: str
    value: str
    kind: WatchlistKind
    reason: str
    added_by: dict
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: WatchlistEntry) -> "WatchlistEntryResponse":
        return cls(
            id=str(entry.id),
            value=entry.value,
            kind=entry.kind,
            reason=entry.reason,
            added_by={"kind": entry.added_by.kind.value, "id": str(entry.added_by.id)},
            created_at=entry.created_at,
        )
