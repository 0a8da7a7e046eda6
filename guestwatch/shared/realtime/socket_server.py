"""
Socket.IO transport: server construction and room membership.

Clients authenticate with the JWT issued by the session layer, passed either
as ``auth.token`` in the handshake or in the ``jwt`` cookie. After a
successful handshake every client joins its personal room; officers also
join their station room, regional admins the global admin room and hotels
their hotel room.
"""

import logging
from http.cookies import SimpleCookie
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from bson import ObjectId
import socketio
from jose import JWTError, jwt
from socketio.exceptions import ConnectionRefusedError as SocketConnectionRefused

from ...core.config import Settings
from ..models.base import PyObjectId
from ..models.references import PrincipalKind
from .rooms import ADMIN_ROOM, hotel_room, station_room, user_room

logger = logging.getLogger(__name__)


class OfficerStationLookup(Protocol):
    async def station_for_officer(self, officer_id: ObjectId) -> Optional[ObjectId]: ...


DirectoryProvider = Callable[[], Awaitable[OfficerStationLookup]]

ROLE_ALIASES = {
    "Police": PrincipalKind.POLICE,
    "RegionalAdmin": PrincipalKind.REGIONAL_ADMIN,
    "Regional Admin": PrincipalKind.REGIONAL_ADMIN,
    "Hotel": PrincipalKind.HOTEL,
}


def extract_token(environ: Dict[str, Any], auth: Optional[Dict[str, Any]]) -> Optional[str]:
    """Handshake auth payload first, then the ``jwt`` cookie."""
    if auth and auth.get("token"):
        return auth["token"]
    raw_cookie = environ.get("HTTP_COOKIE")
    if raw_cookie:
        cookie = SimpleCookie()
        cookie.load(raw_cookie)
        if "jwt" in cookie:
            return cookie["jwt"].value
    return None


class SocketSessionHandler:
    """Authenticates connections and assigns rooms."""

    def __init__(self, sio: socketio.AsyncServer, settings: Settings, directory_provider: DirectoryProvider):
        self.sio = sio
        self.settings = settings
        self.directory_provider = directory_provider

    def decode_identity(self, token: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(token, self.settings.jwt_secret_key, algorithms=[self.settings.jwt_algorithm])
        except JWTError as e:
            raise SocketConnectionRefused("Authentication error: Invalid token") from e

        user_id = claims.get("id") or claims.get("sub")
        kind = ROLE_ALIASES.get(claims.get("role", ""))
        if not user_id or kind is None:
            raise SocketConnectionRefused("Authentication error: Invalid token")
        return {"user_id": str(user_id), "kind": kind}

    async def rooms_for(self, user_id: str, kind: PrincipalKind) -> List[str]:
        rooms = [user_room(user_id)]
        if kind == PrincipalKind.POLICE:
            try:
                directory = await self.directory_provider()
                station_id = await directory.station_for_officer(PyObjectId.validate(user_id))
            except Exception as e:
                # Officer still gets the personal room
                logger.error(f"Socket room lookup failed for officer {user_id}: {e}")
                station_id = None
            if station_id is not None:
                rooms.append(station_room(station_id))
        elif kind == PrincipalKind.REGIONAL_ADMIN:
            rooms.append(ADMIN_ROOM)
        elif kind == PrincipalKind.HOTEL:
            rooms.append(hotel_room(user_id))
        return rooms

    async def on_connect(self, sid: str, environ: Dict[str, Any], auth: Optional[Dict[str, Any]] = None):
        token = extract_token(environ, auth)
        if not token:
            raise SocketConnectionRefused("Authentication error: No token provided")

        identity = self.decode_identity(token)
        await self.sio.save_session(sid, {"user_id": identity["user_id"], "kind": identity["kind"].value})

        for room in await self.rooms_for(identity["user_id"], identity["kind"]):
            await self.sio.enter_room(sid, room)

        logger.info(f"Socket connected: {sid} (Role: {identity['kind'].value})")

    async def on_disconnect(self, sid: str, *args):
        logger.info(f"Socket disconnected: {sid}")


def create_socket_server(settings: Settings, directory_provider: DirectoryProvider) -> socketio.AsyncServer:
    client_manager = None
    if settings.socket_message_queue_enabled:
        client_manager = socketio.AsyncRedisManager(settings.redis_url)

    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.allowed_origins,
        ping_interval=settings.socket_ping_interval,
        ping_timeout=settings.socket_ping_timeout,
        client_manager=client_manager,
        logger=False,
        engineio_logger=False,
    )

    handler = SocketSessionHandler(sio, settings, directory_provider)
    sio.on("connect", handler.on_connect)
    sio.on("disconnect", handler.on_disconnect)
    return sio


def create_external_emitter(settings: Settings) -> socketio.AsyncRedisManager:
    """Write-only manager for processes that emit but never accept connections."""
    return socketio.AsyncRedisManager(settings.redis_url, write_only=True)
