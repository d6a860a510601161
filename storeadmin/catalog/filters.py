"""Filter/search engine.

Pure recomputation of the visible catalog from a snapshot and the
current criteria. Filtering never reorders and never mutates entries.
"""

from collections.abc import Iterable

from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.value_objects import FilterCriteria, StockFilter


def matches_search(entry: CatalogEntry, search_text: str) -> bool:
    """Case-insensitive substring match on name, id and sku.

    A missing sku simply does not match.
    """
    needle = search_text.lower()
    if needle in entry.name.lower() or needle in entry.id.lower():
        return True
    return entry.sku is not None and needle in entry.sku.lower()


def matches_stock_filter(entry: CatalogEntry, stock_filter: StockFilter) -> bool:
    """Apply the stock predicate.

    ``low`` is ``0 < stock <= min_stock``; ``out`` is ``stock == 0``
    regardless of the stored status.
    """
    if stock_filter is StockFilter.LOW:
        return 0 < entry.stock <= entry.min_stock
    if stock_filter is StockFilter.OUT:
        return entry.stock == 0
    return True


def filter_entries(
    entries: Iterable[CatalogEntry],
    criteria: FilterCriteria,
) -> tuple[CatalogEntry, ...]:
    """Compute the filtered view.

    Criteria apply in order: text search, category, status, stock.

    Args:
        entries: Snapshot to filter.
        criteria: Active criteria.

    Returns:
        Matching entries in snapshot order.
    """
    filtered: Iterable[CatalogEntry] = entries

    if criteria.search_text:
        filtered = [e for e in filtered if matches_search(e, criteria.search_text)]

    if criteria.category:
        filtered = [e for e in filtered if e.category == criteria.category]

    if criteria.status is not None:
        filtered = [e for e in filtered if e.status == criteria.status]

    if criteria.stock_filter is not StockFilter.ALL:
        filtered = [
            e for e in filtered if matches_stock_filter(e, criteria.stock_filter)
        ]

    return tuple(filtered)


def categories(entries: Iterable[CatalogEntry]) -> list[str]:
    """Distinct categories in first-seen order, for the category picker."""
    return list(dict.fromkeys(e.category for e in entries))
