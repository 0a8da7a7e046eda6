"""
Watchlist dispatch pipeline.

One dispatch takes a registered guest through:

    watchlist lookup -> alert write -> jurisdiction -> recipients
    -> notification batch -> station/admin broadcasts

Each step runs only if the previous one succeeded. Expected gaps (no
match, no station, nobody to notify) end the dispatch with an info or
warning record; bad hotel data and store or transport failures end it with
an error record. Nothing is retried and nothing is rolled back: the alert is
the durable record, everything after it is delivery.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List
from uuid import uuid4

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.metrics import DISPATCH_OUTCOMES
from ...shared.models.base import utcnow
from ...shared.realtime.broadcaster import Broadcaster
from ...shared.realtime.rooms import ADMIN_ROOM, NEW_ALERT_EVENT, station_room
from ..alerts.models import Alert, AlertDraft
from ..alerts.repository import AlertRepository
from ..directory.models import Station
from ..directory.repository import JurisdictionRepository, RecipientDirectory
from ..notifications.models import Notification
from ..notifications.repository import NotificationRepository
from ..watchlist.models import WatchlistEntry
from ..watchlist.repository import WatchlistRepository
from .schemas import DispatchOutcome, GuestSnapshot, HotelSnapshot

logger = logging.getLogger(__name__)

WATCHLIST_HIT = "WATCHLIST_HIT"
WATCHLIST_HIT_ADMIN = "WATCHLIST_HIT_ADMIN"


def alert_reason(match: WatchlistEntry) -> str:
    return f'AUTOMATIC FLAG: Guest matched watchlist. Reason: "{match.reason}" (Match on: {match.kind.value})'


def notification_message(guest: GuestSnapshot, hotel: HotelSnapshot, match: WatchlistEntry) -> str:
    return f"WATCHLIST MATCH: {guest.name} checked into {hotel.name} (Reason: {match.reason})"


def station_payload(alert: Alert, guest: GuestSnapshot, hotel: HotelSnapshot, message: str) -> Dict[str, Any]:
    """Everything an officer's screen needs without a follow-up fetch."""
    return {
        "type": WATCHLIST_HIT,
        "message": message,
        "alert": {
            "id": str(alert.id),
            "reason": alert.reason,
            "status": alert.status.value,
            "created_at": alert.created_at,
            "guest": {
                "id": str(guest.guest_id),
                "name": guest.name,
                "id_number": guest.id_number,
                "room_number": guest.room_number,
            },
        },
        "hotel_name": hotel.name,
        "timestamp": utcnow(),
    }


def admin_payload(alert: Alert, station: Station, hotel: HotelSnapshot) -> Dict[str, Any]:
    return {
        "type": WATCHLIST_HIT_ADMIN,
        "message": f"CRITICAL: Watchlist hit in {station.city}",
        "alert": {
            "id": str(alert.id),
            "reason": alert.reason,
            "status": alert.status.value,
            "created_at": alert.created_at,
        },
        "station_name": station.name,
        "station_city": station.city,
        "hotel_name": hotel.name,
        "timestamp": utcnow(),
    }


class WatchlistDispatcher:
    def __init__(
        self,
        watchlist: WatchlistRepository,
        alerts: AlertRepository,
        jurisdiction: JurisdictionRepository,
        directory: RecipientDirectory,
        notifications: NotificationRepository,
        broadcaster: Broadcaster,
    ):
        self.watchlist = watchlist
        self.alerts = alerts
        self.jurisdiction = jurisdiction
        self.directory = directory
        self.notifications = notifications
        self.broadcaster = broadcaster

    @classmethod
    def from_database(cls, db: AsyncIOMotorDatabase, broadcaster: Broadcaster) -> "WatchlistDispatcher":
        return cls(
            watchlist=WatchlistRepository(db),
            alerts=AlertRepository(db),
            jurisdiction=JurisdictionRepository(db),
            directory=RecipientDirectory(db),
            notifications=NotificationRepository(db),
            broadcaster=broadcaster,
        )

    async def dispatch(self, guest: GuestSnapshot, hotel: HotelSnapshot) -> DispatchOutcome:
        """Run one dispatch to completion or to its first failed guard. Never raises."""
        ctx = {
            "dispatch_id": uuid4().hex[:12],
            "guest_id": str(guest.guest_id),
            "hotel_id": str(hotel.hotel_id),
        }
        try:
            outcome = await self._run(guest, hotel, ctx)
        except Exception as e:
            logger.error(f"Watchlist check failed: {e}", exc_info=True, extra=ctx)
            outcome = DispatchOutcome.FAILED
        DISPATCH_OUTCOMES.labels(outcome=outcome.value).inc()
        logger.debug("Watchlist dispatch finished: %s", outcome.value, extra=ctx)
        return outcome

    async def _run(self, guest: GuestSnapshot, hotel: HotelSnapshot, ctx: Dict[str, str]) -> DispatchOutcome:
        try:
            match = await self.watchlist.find_match(guest.candidate_values())
        except Exception as e:
            logger.error(f"Watchlist lookup failed: {e}", extra=ctx)
            return DispatchOutcome.LOOKUP_FAILED

        if match is None:
            logger.info("No watchlist match for guest %s", guest.guest_id, extra=ctx)
            return DispatchOutcome.NO_MATCH

        logger.warning(
            f"WATCHLIST MATCH: Guest {guest.name} (ID: {guest.id_number}) matched watchlist (Reason: {match.reason})",
            extra=ctx,
        )

        draft = AlertDraft(guest_id=guest.guest_id, reason=alert_reason(match), created_by=match.added_by)
        try:
            alert = await self.alerts.create(draft)
        except Exception as e:
            logger.error(f"Alert write failed for guest {guest.guest_id}: {e}", extra=ctx)
            return DispatchOutcome.ALERT_FAILED
        ctx["alert_id"] = str(alert.id)

        postal_code = hotel.postal_code
        if postal_code is None:
            logger.error(f"Hotel {hotel.name} has no pin code. Cannot notify police.", extra=ctx)
            return DispatchOutcome.MISSING_POSTAL_CODE

        try:
            station = await self.jurisdiction.resolve(postal_code)
        except Exception as e:
            logger.error(f"Jurisdiction lookup failed for pin code {postal_code}: {e}", extra=ctx)
            return DispatchOutcome.LOOKUP_FAILED

        if station is None:
            logger.warning(f"No police station found with jurisdiction over pin code {postal_code}", extra=ctx)
            return DispatchOutcome.NO_STATION
        ctx["station_id"] = str(station.id)

        try:
            officers, admins = await asyncio.gather(
                self.directory.officers_at(station.id),
                self.directory.active_admins(),
            )
        except Exception as e:
            logger.error(f"Recipient lookup failed for station {station.name}: {e}", extra=ctx)
            return DispatchOutcome.LOOKUP_FAILED

        if not officers and not admins:
            logger.warning(f"No officers or admins to notify for station {station.name}", extra=ctx)
            return DispatchOutcome.NO_RECIPIENTS
        if not officers:
            logger.warning(f"No officers found for station {station.name}", extra=ctx)

        message = notification_message(guest, hotel, match)
        batch = self._build_notifications(officers, admins, station.id, message)
        try:
            await self.notifications.batch_create(batch)
        except Exception as e:
            logger.error(f"Notification batch write failed ({len(batch)} notifications): {e}", extra=ctx)
            return DispatchOutcome.NOTIFY_FAILED

        logger.info(
            f"Sent {len(officers)} police + {len(admins)} admin notifications about watchlist match",
            extra=ctx,
        )

        if officers:
            await self._emit(station_room(station.id), station_payload(alert, guest, hotel, message), ctx)
        if admins:
            await self._emit(ADMIN_ROOM, admin_payload(alert, station, hotel), ctx)

        return DispatchOutcome.DELIVERED

    @staticmethod
    def _build_notifications(
        officers: List[ObjectId],
        admins: List[ObjectId],
        station_id: ObjectId,
        message: str,
    ) -> List[Notification]:
        batch = [Notification.for_officer(officer_id, station_id, message) for officer_id in officers]
        batch.extend(Notification.for_admin(admin_id, message) for admin_id in admins)
        return batch

    async def _emit(self, room: str, payload: Dict[str, Any], ctx: Dict[str, str]) -> bool:
        try:
            delivered = await self.broadcaster.emit(room, NEW_ALERT_EVENT, payload)
        except Exception as e:
            logger.error(f"Socket emit to {room} failed: {e}", extra={**ctx, "room": room})
            return False
        if delivered:
            logger.info("Socket event emitted for watchlist match", extra={**ctx, "room": room})
        return delivered
