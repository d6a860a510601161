"""Wire schemas for the product API.

Pydantic models translating between the remote JSON records (camelCase,
loosely typed) and the CatalogEntry domain entity.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.value_objects import DEFAULT_MIN_STOCK, ProductStatus


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSchema(BaseModel):
    """Product record as exchanged with the remote API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = Field(default=None, description="Server-assigned identifier")
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, description="Unit price, two fraction digits")
    stock: int = Field(..., ge=0)
    status: ProductStatus = Field(default=ProductStatus.ACTIVE)
    min_stock: int | None = Field(default=None, ge=0, alias="minStock")
    sku: str | None = None
    sales: int | None = Field(default=None, ge=0)
    profit: Decimal | None = None
    image: str | None = None
    description: str | None = None
    brand: str | None = None
    supplier: str | None = None
    create_time: str | None = Field(default=None, alias="createTime")
    update_time: str | None = Field(default=None, alias="updateTime")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # json-server hands out numeric ids for records created without one
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("image", mode="before")
    @classmethod
    def _blank_image_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_entry(self, default_min_stock: int = DEFAULT_MIN_STOCK) -> CatalogEntry:
        """Build the domain entity.

        Args:
            default_min_stock: Threshold used when the record has none.

        Returns:
            CatalogEntry instance.

        Raises:
            ValueError: If the record carries no identifier.
        """
        if not self.id:
            raise ValueError(f"Product record without id: {self.name!r}")
        return CatalogEntry(
            id=self.id,
            name=self.name,
            category=self.category,
            price=self.price,
            stock=self.stock,
            status=self.status,
            min_stock=(
                self.min_stock if self.min_stock is not None else default_min_stock
            ),
            sku=self.sku,
            sales=self.sales,
            profit=self.profit,
            image=self.image,
            description=self.description,
            brand=self.brand,
            supplier=self.supplier,
            create_time=self.create_time,
            update_time=self.update_time,
        )

    @classmethod
    def from_entry(cls, entry: CatalogEntry) -> "ProductSchema":
        """Create from a domain entity."""
        return cls(
            id=entry.id or None,
            name=entry.name,
            category=entry.category,
            price=entry.price,
            stock=entry.stock,
            status=entry.status,
            min_stock=entry.min_stock,
            sku=entry.sku,
            sales=entry.sales,
            profit=entry.profit,
            image=entry.image,
            description=entry.description,
            brand=entry.brand,
            supplier=entry.supplier,
            create_time=entry.create_time,
            update_time=entry.update_time,
        )

    def to_payload(self, include_id: bool = True) -> dict[str, Any]:
        """Serialize for a request body.

        Absent optional attributes are omitted rather than sent as null,
        and the price travels as a two-decimal string.

        Args:
            include_id: Whether to send the identifier.

        Returns:
            JSON-ready dictionary with remote field names.
        """
        exclude = None if include_id else {"id"}
        payload = self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude=exclude
        )
        payload["price"] = f"{self.price:.2f}"
        if self.profit is not None:
            payload["profit"] = f"{self.profit:.2f}"
        return payload


class StatusPatchSchema(BaseModel):
    """Body of a status-only partial update."""

    model_config = ConfigDict(populate_by_name=True)

    status: ProductStatus
    update_time: str = Field(..., alias="updateTime")


class UploadResponseSchema(BaseModel):
    """Response of the image upload endpoint."""

    model_config = ConfigDict(extra="ignore")

    url: str = Field(..., min_length=1)
