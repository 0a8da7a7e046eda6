from __future__ import annotations

import logging
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from .models import WatchlistEntry, WatchlistKind
from .repository import WatchlistRepository
from .schemas import WatchlistEntryCreate

logger = logging.getLogger(__name__)


class WatchlistService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = WatchlistRepository(db)

    async def add_entry(self, payload: WatchlistEntryCreate) -> WatchlistEntry:
        entry = WatchlistEntry(
            value=payload.value,
            kind=payload.kind,
            reason=payload.reason,
            added_by=payload.added_by,
        )
        created = await self.repo.create_entry(entry)
        logger.info(
            "%s %s added a %s entry to the watchlist",
            created.added_by.kind.value, created.added_by.id, created.kind.value,
        )
        return created

    async def list_entries(self, kind: Optional[WatchlistKind] = None) -> List[WatchlistEntry]:
        return await self.repo.list_entries(kind)

    async def remove_entry(self, entry_id: ObjectId) -> WatchlistEntry:
        removed = await self.repo.delete_entry(entry_id)
        logger.info("Removed watchlist entry %s", entry_id)
        return removed
