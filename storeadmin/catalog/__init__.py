"""Product catalog management.

Inventory store, filtering, selection, batch operations, low-stock
monitoring and the product edit session.
"""

from storeadmin.catalog.batch import (
    BatchExecutor,
    BatchResult,
    ConfirmationPrompt,
    ConfirmCallback,
)
from storeadmin.catalog.edit_session import CommitResult, ProductDraft, ProductEditSession
from storeadmin.catalog.export import export_csv
from storeadmin.catalog.filters import categories, filter_entries
from storeadmin.catalog.monitor import (
    InventorySummary,
    LowStockMonitor,
    summarize,
    top_sellers,
)
from storeadmin.catalog.selection import SelectionManager
from storeadmin.catalog.store import ChangeKind, InventoryStore, StoreChange

__all__ = [
    # Store
    "ChangeKind",
    "InventoryStore",
    "StoreChange",
    # Filtering
    "categories",
    "filter_entries",
    # Selection
    "SelectionManager",
    # Batch
    "BatchExecutor",
    "BatchResult",
    "ConfirmationPrompt",
    "ConfirmCallback",
    # Monitor
    "InventorySummary",
    "LowStockMonitor",
    "summarize",
    "top_sellers",
    # Edit session
    "CommitResult",
    "ProductDraft",
    "ProductEditSession",
    # Export
    "export_csv",
]
