"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self

from storeadmin.domain.exceptions import ValidationError

# Fallback used when the remote record carries no minimum stock.
DEFAULT_MIN_STOCK = 10

_CENTS = Decimal("0.01")


def to_price(value: Decimal | float | int | str) -> Decimal:
    """Normalize a price to a two-fraction-digit Decimal.

    Args:
        value: Price as number or numeric string.

    Returns:
        Decimal quantized to cents.
    """
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


# ============================================================================
# Enumerations
# ============================================================================


class ProductStatus(str, Enum):
    """Stored listing status of a catalog entry."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"

    @classmethod
    def batch_targets(cls) -> frozenset["ProductStatus"]:
        """Statuses a batch status change may set."""
        return frozenset({cls.ACTIVE, cls.INACTIVE})


class StockFilter(str, Enum):
    """Stock predicate applied after the other filter criteria."""

    ALL = "all"
    LOW = "low"
    OUT = "out"


class StockLevel(str, Enum):
    """Display classification of an entry's stock."""

    OUT = "out"
    LOW = "low"
    NORMAL = "normal"

    @classmethod
    def classify(cls, stock: int, min_stock: int) -> Self:
        """Classify a stock quantity against its threshold.

        Args:
            stock: Units on hand.
            min_stock: Low-stock threshold.

        Returns:
            OUT when nothing is left, LOW at or below the threshold,
            NORMAL otherwise.
        """
        if stock == 0:
            return cls.OUT
        if stock <= min_stock:
            return cls.LOW
        return cls.NORMAL


# ============================================================================
# Filter Criteria
# ============================================================================


@dataclass(frozen=True)
class FilterCriteria:
    """Criteria for the catalog filter/search view.

    Attributes:
        search_text: Case-insensitive substring matched against name, id and sku.
        category: Exact category match, None for any.
        status: Exact stored status match, None for any.
        stock_filter: Stock predicate.
    """

    search_text: str = ""
    category: str | None = None
    status: ProductStatus | None = None
    stock_filter: StockFilter = StockFilter.ALL

    @classmethod
    def reset(cls) -> Self:
        """Return criteria that match every entry."""
        return cls()

    @property
    def is_active(self) -> bool:
        """Check if any criterion narrows the view."""
        return self != FilterCriteria()

    def with_changes(self, **changes: object) -> Self:
        """Return a copy with the given criteria replaced.

        String values for ``status`` and ``stock_filter`` are coerced to
        their enums; empty strings clear ``category`` and ``status``.

        Raises:
            ValidationError: If a status or stock filter value is unknown.
        """
        if changes.get("category") == "":
            changes["category"] = None
        status = changes.get("status")
        if status == "":
            changes["status"] = None
        elif isinstance(status, str):
            changes["status"] = _coerce(ProductStatus, "status", status)
        stock_filter = changes.get("stock_filter")
        if isinstance(stock_filter, str):
            changes["stock_filter"] = _coerce(StockFilter, "stock_filter", stock_filter)
        if changes.get("search_text") is None and "search_text" in changes:
            changes["search_text"] = ""
        return replace(self, **changes)


def _coerce(enum_type: type[Enum], name: str, value: str) -> Enum:
    try:
        return enum_type(value)
    except ValueError as e:
        raise ValidationError(
            f"Unknown {name} filter: {value}", fields={name: f"Unknown value: {value}"}
        ) from e


# ============================================================================
# Pending Image
# ============================================================================


@dataclass(frozen=True)
class PendingImage:
    """A locally selected image that has not been uploaded yet.

    Attributes:
        content: Raw file bytes.
        filename: Original file name.
        content_type: MIME type reported for the file.
    """

    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    def __repr__(self) -> str:
        return (
            f"PendingImage(filename={self.filename!r}, "
            f"content_type={self.content_type!r}, size={self.size})"
        )
