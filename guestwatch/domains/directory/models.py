from __future__ import annotations

from typing import List

from pydantic import Field

from ...shared.models.base import BaseDocument

ACTIVE_STATUS = "Active"


class Station(BaseDocument):
    name: str
    city: str
    jurisdiction_codes: List[str] = Field(default_factory=list, description="Postal codes served by the station")
