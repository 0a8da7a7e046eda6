from __future__ import annotations

import pytest
from unittest.mock import AsyncMock, Mock
from bson import ObjectId
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from guestwatch.domains.watchlist.models import WatchlistEntry, WatchlistKind
from guestwatch.domains.watchlist.repository import WatchlistRepository
from guestwatch.domains.watchlist.schemas import WatchlistEntryCreate
from guestwatch.domains.watchlist.service import WatchlistService
from guestwatch.shared.exceptions import ConflictError, ResourceNotFoundError
from guestwatch.shared.models.references import PrincipalKind, PrincipalRef


class TestWatchlistEntryModel:
    """Validation rules on watchlist entries"""

    def test_value_and_reason_are_stripped(self, admin_ref):
        entry = WatchlistEntry(value="  X1 ", kind=WatchlistKind.ID_NUMBER, reason=" spam ", added_by=admin_ref)

        assert entry.value == "X1"
        assert entry.reason == "spam"

    def test_blank_value_rejected(self, admin_ref):
        with pytest.raises(ValidationError):
            WatchlistEntry(value="   ", kind=WatchlistKind.PHONE_NUMBER, reason="x", added_by=admin_ref)

    @pytest.mark.parametrize("kind", [PrincipalKind.HOTEL, PrincipalKind.SYSTEM])
    def test_only_officers_and_admins_author_entries(self, kind):
        with pytest.raises(ValidationError):
            WatchlistEntry(
                value="X1",
                kind=WatchlistKind.ID_NUMBER,
                reason="x",
                added_by=PrincipalRef(kind=kind, id=ObjectId()),
            )

    def test_to_mongo_stores_plain_values(self, watchlist_entry):
        doc = watchlist_entry.to_mongo()

        assert doc["_id"] == watchlist_entry.id
        assert doc["kind"] == "ID_Number"
        assert doc["added_by"] == {"kind": "RegionalAdmin", "id": watchlist_entry.added_by.id}


class TestWatchlistRepository:
    """Watchlist lookups and maintenance against a mocked collection"""

    @pytest.mark.asyncio
    async def test_find_match_queries_all_candidates_oldest_first(self, mock_db, collection, watchlist_entry):
        collection.find_one = AsyncMock(return_value=watchlist_entry.to_mongo())
        repo = WatchlistRepository(mock_db)

        match = await repo.find_match(["9800000000", "X1234567"])

        assert match.id == watchlist_entry.id
        assert match.kind == WatchlistKind.ID_NUMBER
        query = collection.find_one.call_args.args[0]
        assert query == {"value": {"$in": ["9800000000", "X1234567"]}}
        assert collection.find_one.call_args.kwargs["sort"] == [("_id", 1)]

    @pytest.mark.asyncio
    async def test_find_match_returns_none_without_match(self, mock_db, collection):
        collection.find_one = AsyncMock(return_value=None)
        repo = WatchlistRepository(mock_db)

        assert await repo.find_match(["X1234567"]) is None

    @pytest.mark.asyncio
    async def test_blank_candidates_never_hit_the_store(self, mock_db, collection):
        collection.find_one = AsyncMock()
        repo = WatchlistRepository(mock_db)

        assert await repo.find_match([None, "", "   "]) is None
        collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_find_match_propagates_store_errors(self, mock_db, collection):
        collection.find_one = AsyncMock(side_effect=RuntimeError("connection reset"))
        repo = WatchlistRepository(mock_db)

        with pytest.raises(RuntimeError):
            await repo.find_match(["X1234567"])

    @pytest.mark.asyncio
    async def test_duplicate_value_is_a_conflict(self, mock_db, collection, watchlist_entry):
        collection.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key"))
        repo = WatchlistRepository(mock_db)

        with pytest.raises(ConflictError) as exc_info:
            await repo.create_entry(watchlist_entry)

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_list_entries_filters_by_kind(self, mock_db, collection, watchlist_entry, cursor_factory):
        collection.find = Mock(return_value=cursor_factory([watchlist_entry.to_mongo()]))
        repo = WatchlistRepository(mock_db)

        entries = await repo.list_entries(WatchlistKind.ID_NUMBER)

        assert [e.value for e in entries] == ["X1234567"]
        assert collection.find.call_args.args[0] == {"kind": "ID_Number"}

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self, mock_db, collection):
        collection.find_one_and_delete = AsyncMock(return_value=None)
        repo = WatchlistRepository(mock_db)

        with pytest.raises(ResourceNotFoundError):
            await repo.delete_entry(ObjectId())


class TestWatchlistService:

    @pytest.mark.asyncio
    async def test_add_entry_keeps_author(self, mock_db, admin_ref):
        service = WatchlistService(mock_db)
        service.repo = AsyncMock()
        service.repo.create_entry = AsyncMock(side_effect=lambda entry: entry)

        payload = WatchlistEntryCreate(
            value="9800000000", kind=WatchlistKind.PHONE_NUMBER, reason="harassment", added_by=admin_ref
        )
        entry = await service.add_entry(payload)

        assert entry.added_by == admin_ref
        assert entry.kind == WatchlistKind.PHONE_NUMBER
        service.repo.create_entry.assert_awaited_once()
