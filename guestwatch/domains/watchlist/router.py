from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.database import get_database_async
from ...shared.models.base import parse_object_id
from .models import WatchlistKind
from .schemas import WatchlistEntryCreate, WatchlistEntryResponse
from .service import WatchlistService


router = APIRouter(
    prefix="/watchlist",
    tags=["Watchlist"],
    responses={
        500: {"description": "Internal server error"},
        422: {"description": "Request validation failed"}
    }
)


async def get_service(db: AsyncIOMotorDatabase = Depends(get_database_async)) -> WatchlistService:
    return WatchlistService(db)


@router.get(
    "",
    response_model=List[WatchlistEntryResponse],
    summary="List watchlist entries",
)
async def list_entries(
    kind: Optional[WatchlistKind] = Query(None, description="Only entries of this kind"),
    svc: WatchlistService = Depends(get_service),
):
    entries = await svc.list_entries(kind)
    return [WatchlistEntryResponse.from_entry(e) for e in entries]


@router.post(
    "",
    response_model=WatchlistEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Flag an ID number or phone number",
    responses={409: {"description": "Value is already on the watchlist"}},
)
async def add_entry(payload: WatchlistEntryCreate, svc: WatchlistService = Depends(get_service)):
    entry = await svc.add_entry(payload)
    return WatchlistEntryResponse.from_entry(entry)


@router.delete(
    "/{entry_id}",
    summary="Remove a watchlist entry",
    responses={404: {"description": "Entry not found"}},
)
async def delete_entry(entry_id: str, svc: WatchlistService = Depends(get_service)):
    removed = await svc.remove_entry(parse_object_id(entry_id))
    return {"success": True, "message": "Item removed from watchlist", "id": str(removed.id)}
