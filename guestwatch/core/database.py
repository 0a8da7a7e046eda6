"""
MongoDB connection management with async support and connection pooling.

The web process keeps one ``DatabaseManager`` for its lifetime; Celery
workers create a fresh manager per task because each task runs its own
event loop.
"""

import logging
import time
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .config import settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Async database manager with connection pooling and health checks"""

    def __init__(self, mongodb_url: Optional[str] = None, database_name: Optional[str] = None):
        self.mongodb_url = mongodb_url or settings.mongodb_url
        self.database_name = database_name or settings.database_name
        self.async_client: Optional[AsyncIOMotorClient] = None
        self.async_database: Optional[AsyncIOMotorDatabase] = None
        self._connection_healthy = False
        self._last_health_check = 0.0
        self._health_check_interval = 30  # seconds

    def _get_async_client_options(self) -> Dict[str, Any]:
        """Get connection options for the async client"""
        return {
            # Connection pooling
            "maxPoolSize": 100,
            "minPoolSize": 5,
            "maxIdleTimeMS": 900000,  # 15 minutes
            "waitQueueTimeoutMS": 5000,

            # Timeouts
            "connectTimeoutMS": 5000,
            "socketTimeoutMS": 20000,
            "serverSelectionTimeoutMS": 5000,

            # Reliability options
            "retryWrites": True,
            "retryReads": True,
            "tz_aware": True,
        }

    async def connect_async(self) -> None:
        """Create asynchronous MongoDB connection"""
        try:
            self.async_client = AsyncIOMotorClient(self.mongodb_url, **self._get_async_client_options())
            self.async_database = self.async_client[self.database_name]

            await self.async_client.admin.command("ping", maxTimeMS=5000)
            self._connection_healthy = True
            self._last_health_check = time.time()

            logger.info("MongoDB async connection established (database=%s)", self.database_name)

        except Exception as e:
            logger.error(f"MongoDB async connection failed: {e}")
            self._connection_healthy = False
            raise

    async def close_async_connection(self) -> None:
        """Close asynchronous MongoDB connection"""
        if self.async_client:
            self.async_client.close()
            self.async_client = None
            self.async_database = None
            logger.info("MongoDB async connection closed")

    async def get_async_database(self) -> AsyncIOMotorDatabase:
        """Get asynchronous database instance"""
        if self.async_database is None:
            await self.connect_async()
        return self.async_database

    async def async_is_healthy(self) -> bool:
        """Ping the server, caching the result for a short interval"""
        current_time = time.time()

        if (current_time - self._last_health_check) < self._health_check_interval:
            return self._connection_healthy

        try:
            if self.async_client is None:
                return False
            await self.async_client.admin.command("ping", maxTimeMS=2000)
            self._connection_healthy = True
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            self._connection_healthy = False
        self._last_health_check = current_time
        return self._connection_healthy


# Global database manager instance for the web process
db_manager = DatabaseManager()


async def get_database_async() -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the shared async database"""
    return await db_manager.get_async_database()
