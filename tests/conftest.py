"""
Pytest configuration and shared fixtures.

Collaborators are mocked at the repository seam; no MongoDB, Redis or
Socket.IO server is needed to run the suite.
"""

import os
from typing import List
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from bson import ObjectId

os.environ.setdefault("JWT_SECRET_KEY", "test_jwt_secret_key_for_testing_minimum_32_chars_long")
os.environ.setdefault("WATCHLIST_DISPATCH_BACKEND", "inline")

from guestwatch.domains.alerts.models import Alert, AlertDraft
from guestwatch.domains.directory.models import Station
from guestwatch.domains.dispatch.orchestrator import WatchlistDispatcher
from guestwatch.domains.dispatch.schemas import GuestSnapshot, HotelSnapshot
from guestwatch.domains.watchlist.models import WatchlistEntry, WatchlistKind
from guestwatch.shared.models.references import PrincipalRef


def make_cursor(docs: List[dict]) -> MagicMock:
    """Motor-like cursor: chainable sort/limit, async to_list."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def collection():
    """Mock Motor collection"""
    coll = AsyncMock()
    coll.find = Mock(return_value=make_cursor([]))
    return coll


@pytest.fixture
def mock_db(collection):
    """Mock MongoDB database; every collection name maps to the same mock"""
    db = MagicMock()
    db.__getitem__.return_value = collection
    return db


@pytest.fixture
def admin_ref():
    return PrincipalRef.admin(ObjectId())


@pytest.fixture
def watchlist_entry(admin_ref):
    """Flagged ID number"""
    return WatchlistEntry(
        value="X1234567",
        kind=WatchlistKind.ID_NUMBER,
        reason="fraud suspect",
        added_by=admin_ref,
    )


@pytest.fixture
def station():
    return Station(name="Central PS", city="Mumbai", jurisdiction_codes=["400001", "400002"])


@pytest.fixture
def guest():
    return GuestSnapshot(
        guest_id=ObjectId(),
        name="Ravi Kumar",
        id_number="X1234567",
        phone="9800000000",
        room_number="204",
    )


@pytest.fixture
def hotel():
    return HotelSnapshot(hotel_id=ObjectId(), name="Grand", pin_code="400001")


@pytest.fixture
def broadcaster():
    b = AsyncMock()
    b.emit = AsyncMock(return_value=True)
    return b


@pytest.fixture
def repos(watchlist_entry, station):
    """Repository doubles wired for a full match with one officer and one admin"""

    async def create_alert(draft: AlertDraft) -> Alert:
        return Alert.from_draft(draft)

    watchlist = AsyncMock()
    watchlist.find_match = AsyncMock(return_value=watchlist_entry)

    alerts = AsyncMock()
    alerts.create = AsyncMock(side_effect=create_alert)

    jurisdiction = AsyncMock()
    jurisdiction.resolve = AsyncMock(return_value=station)

    directory = AsyncMock()
    directory.officers_at = AsyncMock(return_value=[ObjectId()])
    directory.active_admins = AsyncMock(return_value=[ObjectId()])

    notifications = AsyncMock()
    notifications.batch_create = AsyncMock(side_effect=lambda batch: len(batch))

    return {
        "watchlist": watchlist,
        "alerts": alerts,
        "jurisdiction": jurisdiction,
        "directory": directory,
        "notifications": notifications,
    }


@pytest.fixture
def dispatcher(repos, broadcaster):
    return WatchlistDispatcher(broadcaster=broadcaster, **repos)


@pytest.fixture
def cursor_factory():
    return make_cursor
