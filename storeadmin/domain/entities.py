"""Catalog entities.

A CatalogEntry is one product record of the inventory snapshot. Entries
are immutable; every local change produces a new instance so that
snapshots handed out to views never change under them.
"""

from dataclasses import dataclass, fields, replace
from decimal import Decimal
from typing import Any, Self

from storeadmin.domain.value_objects import (
    DEFAULT_MIN_STOCK,
    ProductStatus,
    StockLevel,
    to_price,
)


@dataclass(frozen=True)
class CatalogEntry:
    """Product record mirrored from the remote catalog.

    Attributes:
        id: Stable identifier assigned by the gateway.
        name: Product name.
        category: Category label (open set).
        price: Unit price, two fraction digits.
        stock: Units on hand.
        status: Stored listing status.
        min_stock: Low-stock threshold.
        sku: Stock keeping unit, searchable.
        sales: Units sold.
        profit: Profit figure reported by the backend.
        image: Image URL.
        description: Free text description.
        brand: Brand name.
        supplier: Supplier name.
        create_time: ISO-8601 creation timestamp.
        update_time: ISO-8601 timestamp of the last mutation.
    """

    id: str
    name: str
    category: str
    price: Decimal
    stock: int
    status: ProductStatus = ProductStatus.ACTIVE
    min_stock: int = DEFAULT_MIN_STOCK
    sku: str | None = None
    sales: int | None = None
    profit: Decimal | None = None
    image: str | None = None
    description: str | None = None
    brand: str | None = None
    supplier: str | None = None
    create_time: str | None = None
    update_time: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", to_price(self.price))
        object.__setattr__(self, "status", ProductStatus(self.status))
        if self.profit is not None:
            object.__setattr__(self, "profit", to_price(self.profit))

    @property
    def key(self) -> str:
        """Display key used by views; equal to the identifier."""
        return self.id

    @property
    def effective_status(self) -> ProductStatus:
        """Status to display.

        An entry with no stock shows as out of stock whatever its
        stored status is. The stored status is left untouched.
        """
        if self.stock == 0:
            return ProductStatus.OUT_OF_STOCK
        return self.status

    @property
    def stock_level(self) -> StockLevel:
        return StockLevel.classify(self.stock, self.min_stock)

    @property
    def is_low_stock(self) -> bool:
        return self.stock_level is StockLevel.LOW

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock == 0

    def with_changes(self, **changes: Any) -> Self:
        """Return a copy with the given attributes replaced.

        Raises:
            TypeError: If a change names an unknown attribute or tries
                to replace the identifier.
        """
        if "id" in changes:
            raise TypeError("CatalogEntry id cannot be changed")
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise TypeError(f"Unknown CatalogEntry attributes: {sorted(unknown)}")
        return replace(self, **changes)
