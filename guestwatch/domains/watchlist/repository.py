from __future__ import annotations

from typing import Any, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from ...shared.exceptions import ConflictError, ResourceNotFoundError
from .models import WatchlistEntry, WatchlistKind


class WatchlistRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.entries = db["watchlist"]

    async def ensure_indexes(self) -> None:
        await self.entries.create_index([("value", ASCENDING)], unique=True)
        await self.entries.create_index([("kind", ASCENDING)])
        await self.entries.create_index([("added_by.id", ASCENDING)])

    async def find_match(self, candidates: Iterable[Optional[str]]) -> Optional[WatchlistEntry]:
        """Return the oldest entry whose value equals any candidate, or None.

        Exact, case-sensitive comparison; blank candidates are ignored.
        """
        values = sorted({c for c in candidates if c and c.strip()})
        if not values:
            return None
        doc = await self.entries.find_one(
            {"value": {"$in": values}},
            sort=[("_id", ASCENDING)],
        )
        if doc is None:
            return None
        return WatchlistEntry.model_validate(doc)

    async def create_entry(self, entry: WatchlistEntry) -> WatchlistEntry:
        try:
            await self.entries.insert_one(entry.to_mongo())
        except DuplicateKeyError:
            raise ConflictError(
                "This ID or phone number is already on the watchlist",
                conflict_field="value",
                conflict_value=entry.value,
            )
        return entry

    async def list_entries(self, kind: Optional[WatchlistKind] = None, limit: int = 200) -> List[WatchlistEntry]:
        query: dict[str, Any] = {}
        if kind is not None:
            query["kind"] = kind.value
        cursor = self.entries.find(query).sort("created_at", DESCENDING).limit(limit)
        docs = await cursor.to_list(length=limit)
        return [WatchlistEntry.model_validate(d) for d in docs]

    async def delete_entry(self, entry_id: ObjectId) -> WatchlistEntry:
        doc = await self.entries.find_one_and_delete({"_id": entry_id})
        if doc is None:
            raise ResourceNotFoundError("WatchlistEntry", entry_id)
        return WatchlistEntry.model_validate(doc)
