"""Selection manager.

Tracks the identifiers checked in the catalog view. The selection never
holds identifiers that are absent from the store snapshot: it is cleared
when the snapshot is replaced and pruned when entries are removed.
"""

from collections.abc import Iterable

import structlog

from storeadmin.catalog.store import ChangeKind, InventoryStore, StoreChange
from storeadmin.domain.entities import CatalogEntry

logger = structlog.get_logger()


class SelectionManager:
    """Set of selected catalog entry identifiers."""

    def __init__(self, store: InventoryStore) -> None:
        """Initialize an empty selection bound to a store.

        Args:
            store: Store whose snapshot bounds the selection.
        """
        self.store = store
        self._selected: set[str] = set()
        self._unsubscribe = store.subscribe(self._on_store_change)

    def _on_store_change(self, change: StoreChange) -> None:
        if change.kind is ChangeKind.LOADED:
            if self._selected:
                logger.debug("Selection cleared after reload", count=len(self._selected))
            self._selected.clear()
        elif change.kind is ChangeKind.REMOVED:
            self._selected -= change.ids

    def detach(self) -> None:
        """Stop following store changes."""
        self._unsubscribe()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def selected(self) -> frozenset[str]:
        return frozenset(self._selected)

    @property
    def count(self) -> int:
        return len(self._selected)

    @property
    def has_selection(self) -> bool:
        """Batch actions are enabled iff something is selected."""
        return bool(self._selected)

    def ordered_ids(self) -> list[str]:
        """Selected identifiers in snapshot order."""
        return [e.id for e in self.store.snapshot if e.id in self._selected]

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._selected

    # =========================================================================
    # Mutations
    # =========================================================================

    def toggle(self, entry_id: str) -> bool:
        """Flip the selection state of one entry.

        Identifiers absent from the snapshot are ignored.

        Args:
            entry_id: Entry to toggle.

        Returns:
            True if the entry is selected afterwards.
        """
        if entry_id in self._selected:
            self._selected.discard(entry_id)
            return False
        if entry_id not in self.store:
            logger.debug("Ignoring selection of unknown entry", entry_id=entry_id)
            return False
        self._selected.add(entry_id)
        return True

    def set_all(self, entry_ids: Iterable[str]) -> None:
        """Replace the selection.

        Identifiers absent from the snapshot are dropped.
        """
        known = self.store.ids
        self._selected = {i for i in entry_ids if i in known}

    def select_visible(self, entries: Iterable[CatalogEntry]) -> None:
        """Select exactly the entries of a (filtered) view."""
        self.set_all(e.id for e in entries)

    def clear(self) -> None:
        self._selected.clear()
