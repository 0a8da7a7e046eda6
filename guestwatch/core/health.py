"""
Health checks for the /health endpoint.

Each check returns a ``HealthCheckResult``; the overall status is the worst
of the individual ones.
"""

import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import psutil

from .database import DatabaseManager

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Health check status levels"""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


SEVERITY = {HealthStatus.HEALTHY: 0, HealthStatus.DEGRADED: 1, HealthStatus.UNHEALTHY: 2}


@dataclass
class HealthCheckResult:
    """Individual health check result"""
    name: str
    status: HealthStatus
    message: str
    response_time_ms: float
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["status"] = self.status.value
        return result


class HealthChecker:
    def __init__(self, database: DatabaseManager):
        self.database = database
        self.start_time = time.time()
        self.checks: Dict[str, Callable[[], Awaitable[HealthCheckResult]]] = {
            "database": self._check_database,
            "system_resources": self._check_system_resources,
        }

    async def _check_database(self) -> HealthCheckResult:
        start_time = time.time()
        healthy = await self.database.async_is_healthy()
        response_time = (time.time() - start_time) * 1000
        if healthy:
            return HealthCheckResult("database", HealthStatus.HEALTHY, "Database connection is healthy", response_time)
        return HealthCheckResult("database", HealthStatus.UNHEALTHY, "Database is unreachable", response_time)

    async def _check_system_resources(self) -> HealthCheckResult:
        start_time = time.time()
        cpu_percent = psutil.cpu_percent(interval=None)
        memory = psutil.virtual_memory()
        response_time = (time.time() - start_time) * 1000

        details = {
            "cpu_percent": cpu_percent,
            "memory_percent": memory.percent,
            "memory_available_mb": memory.available // 1024 // 1024,
        }

        if cpu_percent > 90 or memory.percent > 90:
            status = HealthStatus.UNHEALTHY
        elif cpu_percent > 70 or memory.percent > 70:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.HEALTHY
        message = f"CPU {cpu_percent}%, Memory {memory.percent}%"
        return HealthCheckResult("system_resources", status, message, response_time, details)

    async def run(self, pending_dispatches: Optional[int] = None) -> Dict[str, Any]:
        results: List[HealthCheckResult] = []
        for name, check in self.checks.items():
            try:
                results.append(await check())
            except Exception as e:
                logger.error(f"Health check {name} failed: {e}")
                results.append(HealthCheckResult(name, HealthStatus.UNHEALTHY, f"Check failed: {e}", 0.0))

        overall = max((r.status for r in results), key=SEVERITY.__getitem__, default=HealthStatus.HEALTHY)
        report: Dict[str, Any] = {
            "status": overall.value,
            "checks": [r.to_dict() for r in results],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": round(time.time() - self.start_time, 1),
        }
        if pending_dispatches is not None:
            report["pending_dispatches"] = pending_dispatches
        return report
