from __future__ import annotations

from typing import Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from .models import Notification


class NotificationRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.notifications = db["notifications"]

    async def ensure_indexes(self) -> None:
        await self.notifications.create_index(
            [("recipient.id", ASCENDING), ("is_read", ASCENDING), ("created_at", DESCENDING)]
        )

    async def batch_create(self, notifications: Sequence[Notification]) -> int:
        """Insert a mixed officer/admin batch in one round-trip.

        Write errors propagate as-is; there is no per-item retry.
        """
        if not notifications:
            return 0
        res = await self.notifications.insert_many([n.to_mongo() for n in notifications])
        return len(res.inserted_ids)
