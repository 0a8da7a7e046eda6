"""
Fire-and-forget handoff from guest registration to the dispatch pipeline.

``submit`` is synchronous and returns as soon as the dispatch is queued, so
a registration response never waits on, or fails because of, a watchlist
check.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from ...core.metrics import DISPATCH_SUBMISSIONS
from ...shared.exceptions import DispatchSubmissionError
from .orchestrator import WatchlistDispatcher
from .schemas import GuestSnapshot, HotelSnapshot

logger = logging.getLogger(__name__)

INLINE = "inline"
CELERY = "celery"


class DispatchScheduler:
    def __init__(
        self,
        dispatcher: Optional[WatchlistDispatcher],
        backend: str = INLINE,
        enabled: bool = True,
        queue: Optional[str] = None,
    ):
        if backend not in (INLINE, CELERY):
            raise ValueError(f"Unknown dispatch backend: {backend}")
        self.dispatcher = dispatcher
        self.backend = backend
        self.enabled = enabled
        self.queue = queue
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, guest: GuestSnapshot, hotel: HotelSnapshot) -> None:
        """Schedule a watchlist check for a registered guest. Never raises."""
        if not self.enabled:
            logger.info("Watchlist dispatch disabled, skipping guest %s", guest.guest_id)
            DISPATCH_SUBMISSIONS.labels(backend=self.backend, result="disabled").inc()
            return

        try:
            if self.backend == CELERY:
                self._submit_to_worker(guest, hotel)
            else:
                self._submit_inline(guest, hotel)
        except Exception as e:
            logger.error(
                f"Could not schedule watchlist check for guest {guest.guest_id}: {e}",
                extra={"guest_id": str(guest.guest_id), "hotel_id": str(hotel.hotel_id)},
            )
            DISPATCH_SUBMISSIONS.labels(backend=self.backend, result="failed").inc()
            return
        DISPATCH_SUBMISSIONS.labels(backend=self.backend, result="scheduled").inc()

    def _submit_inline(self, guest: GuestSnapshot, hotel: HotelSnapshot) -> None:
        if self.dispatcher is None:
            raise DispatchSubmissionError("Inline dispatch backend has no dispatcher")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise DispatchSubmissionError("Inline dispatch requires a running event loop") from None

        task = loop.create_task(
            self.dispatcher.dispatch(guest, hotel),
            name=f"watchlist-dispatch-{guest.guest_id}",
        )
        # The loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _submit_to_worker(self, guest: GuestSnapshot, hotel: HotelSnapshot) -> None:
        from .tasks import dispatch_watchlist_check

        options = {"queue": self.queue} if self.queue else {}
        dispatch_watchlist_check.apply_async(
            args=[guest.model_dump(mode="json"), hotel.model_dump(mode="json")],
            **options,
        )

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Background watchlist check cancelled: {task.get_name()}")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Background watchlist check error: {exc}", exc_info=exc)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight inline dispatches, e.g. at shutdown."""
        if not self._tasks:
            return
        done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if pending:
            logger.warning(f"{len(pending)} watchlist dispatches still running after drain timeout")
