from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.database import get_database_async
from ...shared.models.base import parse_object_id
from .models import AlertStatus
from .repository import AlertRepository
from .schemas import AlertCreate, AlertResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/alerts",
    tags=["Alerts"],
    responses={
        500: {"description": "Internal server error"},
        422: {"description": "Request validation failed"}
    }
)


async def get_repository(db: AsyncIOMotorDatabase = Depends(get_database_async)) -> AlertRepository:
    return AlertRepository(db)


@router.get("", response_model=List[AlertResponse], summary="List alerts, newest first")
async def list_alerts(
    status: Optional[AlertStatus] = Query(None, description="Filter by lifecycle state"),
    limit: int = Query(50, ge=1, le=200),
    repo: AlertRepository = Depends(get_repository),
):
    alerts = await repo.list_alerts(status=status, limit=limit)
    return [AlertResponse.from_alert(a) for a in alerts]


@router.post(
    "",
    response_model=AlertResponse,
    status_code=201,
    summary="Raise an alert manually",
    description="Officers and regional admins can flag a guest directly without a watchlist match.",
)
async def create_alert(payload: AlertCreate, repo: AlertRepository = Depends(get_repository)):
    alert = await repo.create(payload.to_draft())
    logger.info(
        "Alert %s raised manually for guest %s by %s %s",
        alert.id, alert.guest_id, alert.created_by.kind.value, alert.created_by.id,
    )
    return AlertResponse.from_alert(alert)


@router.put(
    "/{alert_id}/resolve",
    response_model=AlertResponse,
    summary="Resolve an alert",
    description="Idempotent: resolving an already resolved alert succeeds and changes nothing.",
    responses={404: {"description": "Alert not found"}},
)
async def resolve_alert(alert_id: str, repo: AlertRepository = Depends(get_repository)):
    alert = await repo.resolve(parse_object_id(alert_id))
    logger.info("Alert %s resolved", alert_id)
    return AlertResponse.from_alert(alert)


@router.get(
    "/{alert_id}",
    response_model=AlertResponse,
    summary="Get one alert",
    responses={404: {"description": "Alert not found"}},
)
async def get_alert(alert_id: str, repo: AlertRepository = Depends(get_repository)):
    alert = await repo.get(parse_object_id(alert_id))
    return AlertResponse.from_alert(alert)
