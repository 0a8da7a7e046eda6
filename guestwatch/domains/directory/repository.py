from __future__ import annotations

from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from .models import ACTIVE_STATUS, Station


class JurisdictionRepository:
    """Maps a hotel's postal code to the station responsible for it."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.stations = db["police_stations"]

    async def ensure_indexes(self) -> None:
        await self.stations.create_index([("jurisdiction_codes", ASCENDING)])

    async def resolve(self, postal_code: Optional[str]) -> Optional[Station]:
        code = (postal_code or "").strip()
        if not code:
            return None
        # Array equality on a scalar matches membership; no prefix matching
        doc = await self.stations.find_one(
            {"jurisdiction_codes": code},
            projection={"name": 1, "city": 1, "jurisdiction_codes": 1, "created_at": 1, "updated_at": 1},
            sort=[("_id", ASCENDING)],
        )
        if doc is None:
            return None
        return Station.model_validate(doc)


class RecipientDirectory:
    """Lists who should hear about an alert."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.officers = db["police"]
        self.admins = db["regional_admins"]

    async def ensure_indexes(self) -> None:
        await self.officers.create_index([("station_id", ASCENDING), ("status", ASCENDING)])
        await self.admins.create_index([("status", ASCENDING)])

    async def officers_at(self, station_id: ObjectId) -> List[ObjectId]:
        cursor = self.officers.find(
            {"station_id": station_id, "status": ACTIVE_STATUS},
            projection={"_id": 1},
        )
        docs = await cursor.to_list(length=None)
        return [d["_id"] for d in docs]

    async def active_admins(self) -> List[ObjectId]:
        cursor = self.admins.find({"status": ACTIVE_STATUS}, projection={"_id": 1})
        docs = await cursor.to_list(length=None)
        return [d["_id"] for d in docs]

    async def station_for_officer(self, officer_id: ObjectId) -> Optional[ObjectId]:
        doc = await self.officers.find_one({"_id": officer_id}, projection={"station_id": 1})
        if not doc:
            return None
        return doc.get("station_id")
