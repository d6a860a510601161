"""Inventory state store.

In-memory mirror of the remote catalog for the active session. The store
is write-through: it only changes after the gateway acknowledged the
corresponding remote operation (or, in stand-alone mode, after the
in-memory gateway applied it).
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, NoReturn

import structlog

from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.exceptions import (
    EntryNotFoundError,
    FetchError,
    MutationError,
    SessionExpiredError,
)
from storeadmin.infrastructure.gateway import CatalogGateway, GatewayResponse

logger = structlog.get_logger()


# ============================================================================
# Error Translation
# ============================================================================


def raise_fetch_error(result: GatewayResponse[Any], operation: str) -> NoReturn:
    """Raise FetchError for a failed read.

    A rejected credential is chained as SessionExpiredError.
    """
    error = result.error
    if error is None:
        raise FetchError(f"{operation} failed")
    fetch_error = FetchError(error.message, error.error_code, error.status_code)
    if error.is_unauthorized:
        raise fetch_error from SessionExpiredError(operation)
    raise fetch_error


def raise_mutation_error(
    result: GatewayResponse[Any],
    entry_id: str | None,
    operation: str,
) -> NoReturn:
    """Raise MutationError for a failed write.

    A rejected credential is chained as SessionExpiredError.
    """
    error = result.error
    if error is None:
        raise MutationError(entry_id, operation, "unknown error")
    mutation_error = MutationError(
        entry_id, operation, error.message, error.error_code, error.status_code
    )
    if error.is_unauthorized:
        raise mutation_error from SessionExpiredError(operation)
    raise mutation_error


# ============================================================================
# Change Notifications
# ============================================================================


class ChangeKind(str, Enum):
    """Kind of snapshot change."""

    LOADED = "loaded"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass(frozen=True)
class StoreChange:
    """Notification sent to store subscribers.

    Attributes:
        kind: What happened.
        ids: Identifiers affected; every id of the new snapshot for LOADED.
    """

    kind: ChangeKind
    ids: frozenset[str]


StoreListener = Callable[[StoreChange], None]


# ============================================================================
# Inventory Store
# ============================================================================


class InventoryStore:
    """Session-local source of truth for catalog views between fetches.

    Example usage:
        store = InventoryStore(gateway)
        await store.load()
        for entry in store.snapshot:
            ...
    """

    def __init__(self, gateway: CatalogGateway) -> None:
        """Initialize an empty store.

        Args:
            gateway: Gateway to load the catalog from.
        """
        self.gateway = gateway
        self._entries: dict[str, CatalogEntry] = {}
        self._listeners: list[StoreListener] = []
        self.loaded_at: datetime | None = None

    # =========================================================================
    # Read Access
    # =========================================================================

    @property
    def snapshot(self) -> tuple[CatalogEntry, ...]:
        """Current entries in gateway order."""
        return tuple(self._entries.values())

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._entries)

    @property
    def is_loaded(self) -> bool:
        return self.loaded_at is not None

    def get(self, entry_id: str) -> CatalogEntry | None:
        return self._entries.get(entry_id)

    def require(self, entry_id: str) -> CatalogEntry:
        """Get an entry or raise.

        Raises:
            EntryNotFoundError: If the entry is not in the snapshot.
        """
        entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener.

        Args:
            listener: Called after every snapshot change.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: ChangeKind, ids: Iterable[str]) -> None:
        change = StoreChange(kind=kind, ids=frozenset(ids))
        for listener in list(self._listeners):
            listener(change)

    # =========================================================================
    # Mutations
    # =========================================================================

    async def load(self) -> tuple[CatalogEntry, ...]:
        """Replace the whole snapshot from the gateway.

        Entries are keyed by identifier; records without a minimum stock
        were already back-filled with the configured default when parsed.

        Returns:
            The new snapshot.

        Raises:
            FetchError: If the gateway call failed. The previous snapshot
                is kept.
        """
        result = await self.gateway.list_products()
        if not result.success or result.data is None:
            logger.warning(
                "Catalog load failed, keeping previous snapshot",
                error=result.error.message if result.error else None,
                entry_count=len(self._entries),
            )
            raise_fetch_error(result, "list_products")

        entries: dict[str, CatalogEntry] = {}
        for entry in result.data:
            if entry.id in entries:
                logger.warning("Duplicate catalog entry id", entry_id=entry.id)
            entries[entry.id] = entry

        self._entries = entries
        self.loaded_at = datetime.now(timezone.utc)
        logger.info("Catalog loaded", entry_count=len(entries))
        self._emit(ChangeKind.LOADED, entries)
        return self.snapshot

    def apply(self, entry_id: str, patch: Mapping[str, Any]) -> CatalogEntry:
        """Update one entry after a confirmed remote mutation.

        Args:
            entry_id: Entry to update.
            patch: Attribute name to new value.

        Returns:
            The updated entry.

        Raises:
            EntryNotFoundError: If the entry is not in the snapshot.
        """
        updated = self.require(entry_id).with_changes(**dict(patch))
        self._entries[entry_id] = updated
        self._emit(ChangeKind.UPDATED, [entry_id])
        return updated

    def upsert(self, entry: CatalogEntry) -> None:
        """Insert or replace an entry returned by the gateway.

        New entries are appended to the end of the snapshot.
        """
        self._entries[entry.id] = entry
        self._emit(ChangeKind.UPDATED, [entry.id])

    def remove(self, entry_id: str) -> None:
        """Drop one entry after confirmed remote deletion.

        Raises:
            EntryNotFoundError: If the entry is not in the snapshot.
        """
        self.require(entry_id)
        del self._entries[entry_id]
        self._emit(ChangeKind.REMOVED, [entry_id])

    def remove_many(self, entry_ids: Iterable[str]) -> int:
        """Drop several entries after confirmed remote deletion.

        Identifiers no longer present are skipped.

        Returns:
            Number of entries removed.
        """
        removed = [i for i in entry_ids if self._entries.pop(i, None) is not None]
        if removed:
            self._emit(ChangeKind.REMOVED, removed)
        return len(removed)
