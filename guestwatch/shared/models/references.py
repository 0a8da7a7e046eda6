"""
Typed references into the identity collections.

Officers, regional admins and hotels live in separate collections, so a
reference to "some principal" carries its kind next to the id instead of a
free-form model name.
"""

from enum import Enum

from pydantic import BaseModel

from .base import PyObjectId


class PrincipalKind(str, Enum):
    POLICE = "Police"
    REGIONAL_ADMIN = "RegionalAdmin"
    HOTEL = "Hotel"
    SYSTEM = "System"


class PrincipalRef(BaseModel):
    kind: PrincipalKind
    id: PyObjectId

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @classmethod
    def police(cls, officer_id) -> "PrincipalRef":
        return cls(kind=PrincipalKind.POLICE, id=officer_id)

    @classmethod
    def admin(cls, admin_id) -> "PrincipalRef":
        return cls(kind=PrincipalKind.REGIONAL_ADMIN, id=admin_id)

    def to_mongo(self) -> dict:
        return {"kind": self.kind.value, "id": self.id}


AUTHOR_KINDS = frozenset({PrincipalKind.POLICE, PrincipalKind.REGIONAL_ADMIN})


def require_author(ref: PrincipalRef) -> PrincipalRef:
    """Only officers and regional admins author watchlist entries and manual alerts."""
    if ref.kind not in AUTHOR_KINDS:
        raise ValueError(f"{ref.kind.value} accounts cannot author this record")
    return ref
