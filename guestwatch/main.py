import logging
from contextlib import asynccontextmanager

import socketio
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase

from .core.config import settings
from .core.database import db_manager, get_database_async
from .core.health import HealthChecker, HealthStatus
from .core.logging_config import setup_logging
from .core.metrics import init_metrics
from .domains.alerts.repository import AlertRepository
from .domains.alerts.router import router as alerts_router
from .domains.directory.repository import JurisdictionRepository, RecipientDirectory
from .domains.dispatch.orchestrator import WatchlistDispatcher
from .domains.dispatch.router import router as dispatch_router
from .domains.dispatch.scheduler import DispatchScheduler
from .domains.notifications.repository import NotificationRepository
from .domains.watchlist.repository import WatchlistRepository
from .domains.watchlist.router import router as watchlist_router
from .shared.exceptions import register_exception_handlers
from .shared.realtime.broadcaster import SocketIOBroadcaster
from .shared.realtime.socket_server import create_socket_server

logger = logging.getLogger(__name__)


async def get_recipient_directory() -> RecipientDirectory:
    return RecipientDirectory(await get_database_async())


sio = create_socket_server(settings, get_recipient_directory)
health_checker = HealthChecker(db_manager)


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    repositories = [
        WatchlistRepository(db),
        AlertRepository(db),
        NotificationRepository(db),
        JurisdictionRepository(db),
        RecipientDirectory(db),
    ]
    for repo in repositories:
        try:
            await repo.ensure_indexes()
        except Exception as e:
            logger.warning(f"Index creation failed for {repo.__class__.__name__}: {e}")


def build_scheduler(db: AsyncIOMotorDatabase) -> DispatchScheduler:
    dispatcher = WatchlistDispatcher.from_database(db, SocketIOBroadcaster(sio))
    return DispatchScheduler(
        dispatcher,
        backend=settings.watchlist_dispatch_backend,
        enabled=settings.watchlist_dispatch_enabled,
        queue=settings.watchlist_dispatch_queue,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    setup_logging()
    logger.info("Application starting...")

    try:
        db = await db_manager.get_async_database()
        await ensure_indexes(db)
        app.state.dispatch_scheduler = build_scheduler(db)
        logger.info(
            "Watchlist dispatch ready (backend=%s, enabled=%s)",
            settings.watchlist_dispatch_backend, settings.watchlist_dispatch_enabled,
        )
    except Exception as e:
        logger.error(f"Application startup failed: {e}")
        raise

    logger.info("Application started")

    yield

    logger.info("Application shutting down...")
    try:
        await app.state.dispatch_scheduler.drain(timeout=10)
    except Exception as e:
        logger.error(f"Error while draining watchlist dispatches: {e}")
    try:
        await db_manager.close_async_connection()
    except Exception as e:
        logger.error(f"Error while closing MongoDB connection: {e}")
    logger.info("Application stopped")


app = FastAPI(
    title="GuestWatch",
    description="""
    Watchlist screening for hotel guest registrations.

    - **Watchlist**: flag ID numbers and phone numbers
    - **Checks**: background watchlist check per registered guest
    - **Alerts**: review and resolve flagged-guest alerts
    - **Real-time**: Socket.IO `NEW_ALERT` events on station and admin rooms
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
init_metrics(app, enabled=settings.metrics_enabled, endpoint=settings.metrics_endpoint)

app.include_router(watchlist_router, prefix=settings.api_prefix)
app.include_router(dispatch_router, prefix=settings.api_prefix)
app.include_router(alerts_router, prefix=settings.api_prefix)


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    scheduler = getattr(request.app.state, "dispatch_scheduler", None)
    report = await health_checker.run(pending_dispatches=scheduler.pending if scheduler else None)
    report["dispatch_backend"] = settings.watchlist_dispatch_backend
    status_code = 503 if report["status"] == HealthStatus.UNHEALTHY.value else 200
    return JSONResponse(status_code=status_code, content=report)


# Socket.IO in front; everything else falls through to FastAPI
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app, socketio_path=settings.socket_path)


if __name__ == "__main__":
    uvicorn.run(
        "guestwatch.main:asgi_app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
    )
