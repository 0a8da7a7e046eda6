from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from .scheduler import DispatchScheduler
from .schemas import WatchlistCheckAccepted, WatchlistCheckRequest


router = APIRouter(
    prefix="/watchlist",
    tags=["Watchlist dispatch"],
    responses={
        422: {"description": "Request validation failed"}
    }
)


def get_scheduler(request: Request) -> DispatchScheduler:
    return request.app.state.dispatch_scheduler


@router.post(
    "/checks",
    response_model=WatchlistCheckAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Check a registered guest against the watchlist",
    description="""
    Called by the guest-registration flow once a guest is saved.

    The check runs in the background: this endpoint answers immediately and
    its response does not depend on whether the guest is flagged or whether
    alert delivery succeeds.
    """,
)
async def submit_watchlist_check(
    payload: WatchlistCheckRequest,
    scheduler: DispatchScheduler = Depends(get_scheduler),
):
    scheduler.submit(payload.guest, payload.hotel)
    return WatchlistCheckAccepted()
