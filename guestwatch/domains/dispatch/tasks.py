from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from ...core.celery_config import celery_app
from ...core.config import settings
from ...core.database import DatabaseManager
from ...shared.realtime.broadcaster import SocketIOBroadcaster
from ...shared.realtime.socket_server import create_external_emitter
from .orchestrator import WatchlistDispatcher
from .schemas import DispatchOutcome, GuestSnapshot, HotelSnapshot

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="guestwatch.domains.dispatch.tasks.dispatch_watchlist_check")
def dispatch_watchlist_check(self, guest_data: Dict[str, Any], hotel_data: Dict[str, Any]) -> str:
    """Run one watchlist dispatch on a worker.

    No autoretry: a dispatch that fails is logged and dropped.
    """
    guest = GuestSnapshot.model_validate(guest_data)
    hotel = HotelSnapshot.model_validate(hotel_data)

    async def _run() -> DispatchOutcome:
        dbm = DatabaseManager()
        broadcaster = SocketIOBroadcaster(create_external_emitter(settings))
        try:
            db = await dbm.get_async_database()
            dispatcher = WatchlistDispatcher.from_database(db, broadcaster)
            return await dispatcher.dispatch(guest, hotel)
        finally:
            await broadcaster.close()
            await dbm.close_async_connection()

    try:
        outcome = asyncio.run(_run())
    except Exception as e:
        logger.exception("dispatch_watchlist_check failed for guest %s: %s", guest.guest_id, e)
        raise

    return outcome.value
