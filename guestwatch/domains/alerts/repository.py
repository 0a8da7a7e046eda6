from __future__ import annotations

from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from ...shared.exceptions import ResourceNotFoundError
from ...shared.models.base import utcnow
from .models import Alert, AlertDraft, AlertStatus


class AlertRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.alerts = db["alerts"]

    async def ensure_indexes(self) -> None:
        await self.alerts.create_index([("status", ASCENDING), ("created_at", DESCENDING)])
        await self.alerts.create_index([("guest_id", ASCENDING)])

    async def create(self, draft: AlertDraft) -> Alert:
        alert = Alert.from_draft(draft)
        await self.alerts.insert_one(alert.to_mongo())
        return alert

    async def get(self, alert_id: ObjectId) -> Alert:
        doc = await self.alerts.find_one({"_id": alert_id})
        if doc is None:
            raise ResourceNotFoundError("Alert", alert_id)
        return Alert.model_validate(doc)

    async def resolve(self, alert_id: ObjectId) -> Alert:
        """Mark an alert Resolved in one atomic update.

        Resolving twice succeeds and keeps the first ``resolved_at``.
        """
        now = utcnow()
        already_resolved = {"$eq": ["$status", AlertStatus.RESOLVED.value]}
        doc = await self.alerts.find_one_and_update(
            {"_id": alert_id},
            [
                {
                    "$set": {
                        "status": AlertStatus.RESOLVED.value,
                        "resolved_at": {"$ifNull": ["$resolved_at", now]},
                        "updated_at": {"$cond": [already_resolved, "$updated_at", now]},
                    }
                }
            ],
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise ResourceNotFoundError("Alert", alert_id)
        return Alert.model_validate(doc)

    async def list_alerts(self, status: Optional[AlertStatus] = None, limit: int = 50) -> List[Alert]:
        query: Dict[str, Any] = {}
        if status is not None:
            query["status"] = status.value
        cursor = self.alerts.find(query).sort("created_at", DESCENDING).limit(limit)
        docs = await cursor.to_list(length=limit)
        return [Alert.model_validate(d) for d in docs]
