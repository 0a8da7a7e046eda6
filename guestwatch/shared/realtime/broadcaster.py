"""
Best-effort real-time broadcasting.

Emits reach only clients connected to the room at that moment; nothing is
queued for later. Persisted notifications are the durable record, so a
failed emit is logged and reported, never raised.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic_core import to_jsonable_python

from ...core.metrics import BROADCAST_FAILURES

logger = logging.getLogger(__name__)


class Broadcaster(ABC):
    """Named-room publish capability handed to the dispatcher."""

    @abstractmethod
    async def emit(self, room: str, event: str, payload: Dict[str, Any]) -> bool:
        """Publish ``event`` to ``room``. Returns False on failure instead of raising."""


class SocketIOBroadcaster(Broadcaster):
    """Broadcaster over a python-socketio server or a write-only Redis manager.

    Both ``socketio.AsyncServer`` and ``socketio.AsyncRedisManager`` expose a
    compatible async ``emit``.
    """

    def __init__(self, server: Any, namespace: str = "/"):
        self.server = server
        self.namespace = namespace

    async def emit(self, room: str, event: str, payload: Dict[str, Any]) -> bool:
        try:
            if self.server is None:
                raise RuntimeError("Socket transport not initialized")
            data = to_jsonable_python(payload, fallback=str)
            await self.server.emit(event, data, room=room, namespace=self.namespace)
        except Exception as e:
            logger.error(
                f"Socket emit of {event} to {room} failed: {e}",
                extra={"room": room, "event": event},
            )
            BROADCAST_FAILURES.labels(event=event).inc()
            return False

        logger.debug("Emitted %s to %s", event, room, extra={"room": room, "event": event})
        return True

    async def close(self) -> None:
        """Release the Redis connection of an external emitter, if any."""
        redis: Optional[Any] = getattr(self.server, "redis", None)
        if redis is not None and hasattr(redis, "aclose"):
            await redis.aclose()
