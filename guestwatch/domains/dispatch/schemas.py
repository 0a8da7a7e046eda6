from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ...shared.models.base import PyObjectId


class GuestSnapshot(BaseModel):
    """Read-only view of a freshly registered guest."""
    guest_id: PyObjectId
    name: str = Field(..., min_length=1)
    id_number: Optional[str] = None
    phone: Optional[str] = None
    room_number: Optional[str] = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    def candidate_values(self) -> List[str]:
        """Identity values to test against the watchlist, blanks dropped."""
        values = []
        for value in (self.id_number, self.phone):
            if value and value.strip() and value.strip() not in values:
                values.append(value.strip())
        return values


class HotelSnapshot(BaseModel):
    """Read-only view of the hotel the guest checked into."""
    hotel_id: PyObjectId
    name: str = Field(..., min_length=1)
    pin_code: Optional[str] = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def postal_code(self) -> Optional[str]:
        if self.pin_code is None or not self.pin_code.strip():
            return None
        return self.pin_code.strip()


class DispatchOutcome(str, Enum):
    """Where a dispatch stopped. Used for logging and tests, never returned to registrants."""
    NO_MATCH = "no_match"
    LOOKUP_FAILED = "lookup_failed"
    ALERT_FAILED = "alert_failed"
    MISSING_POSTAL_CODE = "missing_postal_code"
    NO_STATION = "no_station"
    NO_RECIPIENTS = "no_recipients"
    NOTIFY_FAILED = "notify_failed"
    DELIVERED = "delivered"
    FAILED = "failed"


class WatchlistCheckRequest(BaseModel):
    guest: GuestSnapshot
    hotel: HotelSnapshot

    model_config = {
        "json_schema_extra": {
            "example": {
                "guest": {
                    "guest_id": "65a1f0c2e4b0a1b2c3d4e5f7",
                    "name": "Ravi Kumar",
                    "id_number": "X1234567",
                    "phone": "9800000000",
                    "room_number": "204",
                },
                "hotel": {
                    "hotel_id": "65a1f0c2e4b0a1b2c3d4e5f8",
                    "name": "Grand",
                    "pin_code": "400001",
                },
            }
        }
    }


class WatchlistCheckAccepted(BaseModel):
    accepted: bool = True
    message: str = "Watchlist check scheduled"
