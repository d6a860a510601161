"""Low-stock monitor and inventory summaries.

Everything here is derived on demand from the store snapshot; nothing is
cached, so the figures can never drift from the entries they describe.
The monitor is advisory and does not gate any write.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from storeadmin.catalog.store import InventoryStore
from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.value_objects import ProductStatus, StockLevel


def low_stock_entries(entries: Iterable[CatalogEntry]) -> tuple[CatalogEntry, ...]:
    """Entries with ``0 < stock <= min_stock``."""
    return tuple(e for e in entries if e.stock_level is StockLevel.LOW)


def low_stock_count(entries: Iterable[CatalogEntry]) -> int:
    return len(low_stock_entries(entries))


def out_of_stock_count(entries: Iterable[CatalogEntry]) -> int:
    return sum(1 for e in entries if e.stock == 0)


def alert_message(count: int) -> str | None:
    """Restocking banner text, None when nothing is low."""
    if count <= 0:
        return None
    noun = "product is" if count == 1 else "products are"
    return f"{count} {noun} running low on stock, please restock soon"


def top_sellers(
    entries: Iterable[CatalogEntry], limit: int = 5
) -> list[CatalogEntry]:
    """Best-selling entries, highest sales first.

    Entries without a sales figure count as zero; ties keep snapshot order.
    """
    return sorted(entries, key=lambda e: e.sales or 0, reverse=True)[:limit]


@dataclass(frozen=True)
class InventorySummary:
    """Headline figures for the catalog dashboard card.

    Attributes:
        total: Number of entries.
        active: Entries whose displayed status is active.
        inactive: Entries whose displayed status is inactive.
        low_stock: Entries at or below their threshold but not empty.
        out_of_stock: Entries with no stock.
        stock_value: Sum of price times stock.
    """

    total: int
    active: int
    inactive: int
    low_stock: int
    out_of_stock: int
    stock_value: Decimal


def summarize(entries: Iterable[CatalogEntry]) -> InventorySummary:
    """Compute the inventory summary of a snapshot."""
    items = list(entries)
    return InventorySummary(
        total=len(items),
        active=sum(1 for e in items if e.effective_status is ProductStatus.ACTIVE),
        inactive=sum(1 for e in items if e.effective_status is ProductStatus.INACTIVE),
        low_stock=low_stock_count(items),
        out_of_stock=out_of_stock_count(items),
        stock_value=sum((e.price * e.stock for e in items), Decimal("0.00")),
    )


class LowStockMonitor:
    """Live low-stock view over an inventory store.

    Example usage:
        monitor = LowStockMonitor(store)
        if monitor.count:
            show_banner(monitor.alert)
    """

    def __init__(self, store: InventoryStore) -> None:
        self.store = store

    @property
    def entries(self) -> tuple[CatalogEntry, ...]:
        return low_stock_entries(self.store.snapshot)

    @property
    def count(self) -> int:
        return low_stock_count(self.store.snapshot)

    @property
    def out_of_stock(self) -> int:
        return out_of_stock_count(self.store.snapshot)

    @property
    def alert(self) -> str | None:
        return alert_message(self.count)
