"""Tests for the inventory store."""

import pytest

from storeadmin.catalog.store import ChangeKind, InventoryStore
from storeadmin.domain.exceptions import (
    EntryNotFoundError,
    FetchError,
    SessionExpiredError,
)
from storeadmin.domain.value_objects import ProductStatus
from tests.conftest import make_entry, make_error_response, make_success_response


class TestLoad:
    """Tests for InventoryStore.load."""

    @pytest.mark.asyncio
    async def test_load_replaces_snapshot(self, store, mock_gateway, sample_entries):
        """Test a successful load keys entries by id in gateway order."""
        mock_gateway.list_products.return_value = make_success_response(sample_entries)

        snapshot = await store.load()

        assert [e.id for e in snapshot] == ["A", "B", "C", "D"]
        assert store.is_loaded is True
        assert len(store) == 4
        assert "C" in store

    @pytest.mark.asyncio
    async def test_failed_load_keeps_previous_snapshot(self, loaded_store, mock_gateway):
        """Test a fetch error leaves the old entries in place."""
        mock_gateway.list_products.return_value = make_error_response(
            "REQUEST_ERROR", "Connection failed", 503
        )

        with pytest.raises(FetchError) as exc_info:
            await loaded_store.load()

        assert exc_info.value.status_code == 503
        assert [e.id for e in loaded_store.snapshot] == ["A", "B", "C", "D"]

    @pytest.mark.asyncio
    async def test_unauthorized_load_chains_session_expired(self, store, mock_gateway):
        """Test a 401 surfaces as FetchError caused by SessionExpiredError."""
        mock_gateway.list_products.return_value = make_error_response(
            "UNAUTHORIZED", "Authentication required", 401
        )

        with pytest.raises(FetchError) as exc_info:
            await store.load()

        assert isinstance(exc_info.value.__cause__, SessionExpiredError)

    @pytest.mark.asyncio
    async def test_duplicate_ids_keep_last(self, store, mock_gateway):
        """Test the last record wins for a duplicated identifier."""
        mock_gateway.list_products.return_value = make_success_response(
            [make_entry("A", stock=1), make_entry("A", stock=2)]
        )

        await store.load()

        assert len(store) == 1
        assert store.require("A").stock == 2

    @pytest.mark.asyncio
    async def test_load_emits_loaded_change(self, store, mock_gateway, sample_entries):
        """Test subscribers receive the full id set."""
        changes = []
        store.subscribe(changes.append)
        mock_gateway.list_products.return_value = make_success_response(sample_entries)

        await store.load()

        assert changes[0].kind is ChangeKind.LOADED
        assert changes[0].ids == frozenset({"A", "B", "C", "D"})


class TestMutations:
    """Tests for local write-through mutations."""

    @pytest.mark.asyncio
    async def test_apply_replaces_entry(self, loaded_store):
        """Test apply produces a new entry and keeps the old one intact."""
        before = loaded_store.require("A")

        updated = loaded_store.apply("A", {"status": ProductStatus.INACTIVE})

        assert updated.status is ProductStatus.INACTIVE
        assert loaded_store.require("A") is updated
        assert before.status is ProductStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_apply_unknown_entry(self, loaded_store):
        """Test applying to a missing entry raises."""
        with pytest.raises(EntryNotFoundError):
            loaded_store.apply("nope", {"stock": 1})

    @pytest.mark.asyncio
    async def test_snapshot_is_stable(self, loaded_store):
        """Test a snapshot handed out earlier does not change."""
        snapshot = loaded_store.snapshot
        loaded_store.remove("A")

        assert [e.id for e in snapshot] == ["A", "B", "C", "D"]
        assert [e.id for e in loaded_store.snapshot] == ["B", "C", "D"]

    @pytest.mark.asyncio
    async def test_upsert_appends_new_entry(self, loaded_store):
        """Test new entries go to the end."""
        loaded_store.upsert(make_entry("E"))
        assert loaded_store.snapshot[-1].id == "E"

    @pytest.mark.asyncio
    async def test_remove_many_skips_missing(self, loaded_store):
        """Test removing a mix of known and unknown ids."""
        changes = []
        loaded_store.subscribe(changes.append)

        removed = loaded_store.remove_many(["A", "zz", "C"])

        assert removed == 2
        assert loaded_store.ids == frozenset({"B", "D"})
        assert changes[-1].kind is ChangeKind.REMOVED
        assert changes[-1].ids == frozenset({"A", "C"})

    @pytest.mark.asyncio
    async def test_unsubscribe(self, loaded_store):
        """Test unsubscribed listeners are not called."""
        changes = []
        unsubscribe = loaded_store.subscribe(changes.append)
        unsubscribe()

        loaded_store.remove("A")

        assert changes == []

    def test_require_on_empty_store(self, mock_gateway):
        """Test a fresh store is empty and unloaded."""
        store = InventoryStore(mock_gateway)
        assert store.is_loaded is False
        assert store.get("A") is None
        with pytest.raises(EntryNotFoundError):
            store.require("A")
