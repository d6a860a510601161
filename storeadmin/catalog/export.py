"""CSV export of catalog views."""

import csv
import io
from collections.abc import Iterable

from storeadmin.domain.entities import CatalogEntry

EXPORT_COLUMNS = (
    "ID",
    "Name",
    "Category",
    "Price",
    "Stock",
    "Min stock",
    "Supplier",
    "Status",
    "Description",
)


def export_csv(entries: Iterable[CatalogEntry]) -> str:
    """Render entries as CSV text, one row per entry in the given order.

    The status column shows the displayed status, so empty entries read
    ``out_of_stock``.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for entry in entries:
        writer.writerow(
            (
                entry.id,
                entry.name,
                entry.category,
                f"{entry.price:.2f}",
                entry.stock,
                entry.min_stock,
                entry.supplier or "",
                entry.effective_status.value,
                entry.description or "",
            )
        )
    return buffer.getvalue()
