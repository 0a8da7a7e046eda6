"""Watchlist dispatch: detection-to-delivery pipeline for registered guests.

``tasks`` is imported lazily by the scheduler so the web process never
touches the Celery broker when running the inline backend.
"""

from .orchestrator import WatchlistDispatcher
from .scheduler import DispatchScheduler
from .schemas import DispatchOutcome, GuestSnapshot, HotelSnapshot

__all__ = [
    "WatchlistDispatcher",
    "DispatchScheduler",
    "DispatchOutcome",
    "GuestSnapshot",
    "HotelSnapshot",
]
