"""Catalog gateway contract.

The gateway is the only path to the authoritative product records. Its
methods never raise for remote failures; they return a GatewayResponse
carrying either the data or a GatewayError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.value_objects import ProductStatus

T = TypeVar("T")

# Error codes shared by gateway implementations
UNAUTHORIZED = "UNAUTHORIZED"
NOT_FOUND = "NOT_FOUND"
TIMEOUT = "TIMEOUT"
REQUEST_ERROR = "REQUEST_ERROR"
INVALID_RESPONSE = "INVALID_RESPONSE"
UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class GatewayError:
    """Represents a failed gateway call."""

    error_code: str
    message: str
    status_code: int
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_unauthorized(self) -> bool:
        return self.error_code == UNAUTHORIZED


@dataclass
class GatewayResponse(Generic[T]):
    """Outcome of a gateway call: data on success, error otherwise."""

    success: bool
    data: T | None = None
    error: GatewayError | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "GatewayResponse[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls,
        error_code: str,
        message: str,
        status_code: int,
        details: dict[str, Any] | None = None,
    ) -> "GatewayResponse[T]":
        return cls(
            success=False,
            error=GatewayError(
                error_code=error_code,
                message=message,
                status_code=status_code,
                details=details or {},
            ),
        )


class CatalogGateway(ABC):
    """Abstract product catalog gateway.

    Implementations own the authoritative stock, status and price values.
    """

    @abstractmethod
    async def list_products(self) -> GatewayResponse[list[CatalogEntry]]:
        """Fetch every catalog entry."""

    @abstractmethod
    async def create_product(
        self, entry: CatalogEntry
    ) -> GatewayResponse[CatalogEntry]:
        """Create an entry; the gateway assigns the identifier.

        Args:
            entry: Entry to create; its ``id`` is ignored.

        Returns:
            GatewayResponse with the stored entry.
        """

    @abstractmethod
    async def update_product(
        self, entry_id: str, entry: CatalogEntry
    ) -> GatewayResponse[CatalogEntry]:
        """Replace an entry's attributes.

        Args:
            entry_id: Entry to update.
            entry: New attributes.

        Returns:
            GatewayResponse with the stored entry.
        """

    @abstractmethod
    async def delete_product(self, entry_id: str) -> GatewayResponse[None]:
        """Delete an entry."""

    @abstractmethod
    async def patch_product_status(
        self,
        entry_id: str,
        status: ProductStatus,
        update_time: str,
    ) -> GatewayResponse[None]:
        """Change only the status and update timestamp of an entry."""

    @abstractmethod
    async def upload_image(
        self,
        content: bytes,
        filename: str,
        content_type: str,
    ) -> GatewayResponse[str]:
        """Store image bytes and return their URL."""

    async def close(self) -> None:
        """Release transport resources."""
