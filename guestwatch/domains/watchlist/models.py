from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator

from ...shared.models.base import BaseDocument
from ...shared.models.references import PrincipalRef, require_author


class WatchlistKind(str, Enum):
    ID_NUMBER = "ID_Number"
    PHONE_NUMBER = "Phone_Number"


class WatchlistEntry(BaseDocument):
    value: str = Field(..., min_length=1, description="Flagged ID number or phone number")
    kind: WatchlistKind
    reason: str = Field(..., min_length=1, description="Why the value was flagged")
    added_by: PrincipalRef = Field(..., description="Officer or admin accountable for the entry")

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

    def to_mongo(self) -> dict:
        doc = super().to_mongo()
        doc["kind"] = self.kind.value
        doc["added_by"] = self.added_by.to_mongo()
        return doc
