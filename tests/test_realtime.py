from __future__ import annotations

import inspect
import logging

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock
from bson import ObjectId
from jose import jwt

from guestwatch.core.config import Settings
from guestwatch.shared.models.references import PrincipalKind
from guestwatch.shared.realtime.broadcaster import SocketIOBroadcaster
from guestwatch.shared.realtime import socket_server
from guestwatch.shared.realtime.rooms import ADMIN_ROOM, station_room
from guestwatch.shared.realtime.socket_server import (
    SocketConnectionRefused,
    SocketSessionHandler,
    extract_token,
)

SECRET = "socket_test_secret_key_with_at_least_32_chars"


@pytest.fixture
def socket_settings():
    return Settings(jwt_secret_key=SECRET, jwt_algorithm="HS256")


def make_token(**claims) -> str:
    return jwt.encode(claims, SECRET, algorithm="HS256")


class TestSocketIOBroadcaster:
    """Best-effort emits over a socket server"""

    @pytest.mark.asyncio
    async def test_emit_serializes_object_ids_and_datetimes(self):
        server = Mock()
        server.emit = AsyncMock()
        broadcaster = SocketIOBroadcaster(server)
        alert_id = ObjectId()
        at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        ok = await broadcaster.emit("admin", "NEW_ALERT", {"alert": {"id": alert_id, "created_at": at}})

        assert ok is True
        event, data = server.emit.call_args.args
        assert event == "NEW_ALERT"
        assert data == {"alert": {"id": str(alert_id), "created_at": "2024-01-02T03:04:05Z"}}
        assert server.emit.call_args.kwargs["room"] == "admin"

    @pytest.mark.asyncio
    async def test_transport_failure_returns_false(self, caplog):
        server = Mock()
        server.emit = AsyncMock(side_effect=ConnectionError("redis down"))
        broadcaster = SocketIOBroadcaster(server)

        with caplog.at_level(logging.ERROR):
            ok = await broadcaster.emit("station:1", "NEW_ALERT", {})

        assert ok is False
        assert "redis down" in caplog.text

    @pytest.mark.asyncio
    async def test_uninitialized_transport_returns_false(self):
        assert await SocketIOBroadcaster(None).emit("admin", "NEW_ALERT", {}) is False


class TestExtractToken:

    def test_handshake_auth_wins(self):
        environ = {"HTTP_COOKIE": "jwt=from-cookie"}
        assert extract_token(environ, {"token": "from-auth"}) == "from-auth"

    def test_cookie_fallback(self):
        environ = {"HTTP_COOKIE": "theme=dark; jwt=from-cookie"}
        assert extract_token(environ, None) == "from-cookie"

    def test_no_token(self):
        assert extract_token({}, {}) is None


class TestSocketSessionHandler:
    """Handshake authentication and room assignment"""

    @pytest.mark.asyncio
    async def test_officer_joins_station_room(self, socket_settings):
        officer_id, station_id = ObjectId(), ObjectId()
        directory = AsyncMock()
        directory.station_for_officer = AsyncMock(return_value=station_id)
        sio = AsyncMock()
        handler = SocketSessionHandler(sio, socket_settings, AsyncMock(return_value=directory))

        token = make_token(id=str(officer_id), role="Police")
        await handler.on_connect("sid-1", {}, {"token": token})

        joined = [c.args[1] for c in sio.enter_room.await_args_list]
        assert joined == [f"user:{officer_id}", station_room(station_id)]
        sio.save_session.assert_awaited_once_with("sid-1", {"user_id": str(officer_id), "kind": "Police"})

    @pytest.mark.asyncio
    async def test_admin_joins_admin_room(self, socket_settings):
        admin_id = ObjectId()
        sio = AsyncMock()
        provider = AsyncMock()
        handler = SocketSessionHandler(sio, socket_settings, provider)

        await handler.on_connect("sid-2", {}, {"token": make_token(sub=str(admin_id), role="RegionalAdmin")})

        joined = [c.args[1] for c in sio.enter_room.await_args_list]
        assert ADMIN_ROOM in joined
        provider.assert_not_called()

    @pytest.mark.asyncio
    async def test_any_station_lookup_object_is_accepted(self, socket_settings):
        officer_id, station_id = ObjectId(), ObjectId()

        class StaticLookup:
            async def station_for_officer(self, oid):
                return station_id if oid == officer_id else None

        async def provider():
            return StaticLookup()

        handler = SocketSessionHandler(AsyncMock(), socket_settings, provider)

        rooms = await handler.rooms_for(str(officer_id), PrincipalKind.POLICE)

        assert rooms == [f"user:{officer_id}", station_room(station_id)]

    def test_transport_does_not_import_domain_code(self):
        source = inspect.getsource(socket_server)
        assert "domains" not in source

    @pytest.mark.asyncio
    async def test_officer_lookup_failure_keeps_personal_room(self, socket_settings):
        officer_id = ObjectId()
        sio = AsyncMock()
        provider = AsyncMock(side_effect=RuntimeError("database not connected"))
        handler = SocketSessionHandler(sio, socket_settings, provider)

        rooms = await handler.rooms_for(str(officer_id), PrincipalKind.POLICE)

        assert rooms == [f"user:{officer_id}"]

    @pytest.mark.asyncio
    async def test_missing_token_refused(self, socket_settings):
        handler = SocketSessionHandler(AsyncMock(), socket_settings, AsyncMock())

        with pytest.raises(SocketConnectionRefused):
            await handler.on_connect("sid-3", {}, None)

    def test_bad_signature_refused(self, socket_settings):
        handler = SocketSessionHandler(AsyncMock(), socket_settings, AsyncMock())
        forged = jwt.encode({"id": str(ObjectId()), "role": "Police"}, "x" * 40, algorithm="HS256")

        with pytest.raises(SocketConnectionRefused):
            handler.decode_identity(forged)

    def test_unknown_role_refused(self, socket_settings):
        handler = SocketSessionHandler(AsyncMock(), socket_settings, AsyncMock())

        with pytest.raises(SocketConnectionRefused):
            handler.decode_identity(make_token(id=str(ObjectId()), role="Guest"))
