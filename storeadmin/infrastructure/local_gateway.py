"""In-memory catalog gateway for stand-alone mode.

Used when no remote API exists: the gateway's own dictionary is the
authoritative catalog, so every local mutation is final. Can be seeded
from a json-server style ``db.json`` fixture.
"""

import json
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

import pydantic
import structlog

from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.value_objects import DEFAULT_MIN_STOCK, ProductStatus
from storeadmin.infrastructure.gateway import (
    NOT_FOUND,
    CatalogGateway,
    GatewayResponse,
)
from storeadmin.infrastructure.schemas import ProductSchema

logger = structlog.get_logger()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryCatalogGateway(CatalogGateway):
    """Catalog gateway backed by a process-local dictionary.

    Insertion order is preserved, matching the order a json-server
    backend returns records in.
    """

    IMAGE_URL_PREFIX = "memory://images"

    def __init__(self, entries: list[CatalogEntry] | None = None) -> None:
        """Initialize the gateway.

        Args:
            entries: Initial catalog content.
        """
        self._entries: dict[str, CatalogEntry] = {}
        self._images: dict[str, bytes] = {}
        for entry in entries or []:
            self._entries[entry.id] = entry

    @classmethod
    def from_seed_file(
        cls,
        path: Path,
        default_min_stock: int = DEFAULT_MIN_STOCK,
    ) -> "InMemoryCatalogGateway":
        """Load a catalog from a JSON fixture.

        The file is either a list of product records or an object with a
        ``products`` list (json-server ``db.json``).

        Args:
            path: Fixture path.
            default_min_stock: Threshold for records without one.

        Returns:
            Seeded gateway.

        Raises:
            ValueError: If the file does not hold valid product records.
        """
        raw: Any = json.loads(Path(path).read_text(encoding="utf-8"))
        records = raw.get("products", []) if isinstance(raw, dict) else raw
        if not isinstance(records, list):
            raise ValueError(f"No product list in seed file {path}")
        try:
            entries = [
                ProductSchema.model_validate(record).to_entry(default_min_stock)
                for record in records
            ]
        except pydantic.ValidationError as e:
            raise ValueError(f"Invalid product record in {path}: {e}") from e
        logger.info("Seeded stand-alone catalog", path=str(path), count=len(entries))
        return cls(entries)

    def _not_found(self, entry_id: str) -> GatewayResponse[Any]:
        return GatewayResponse.fail(NOT_FOUND, f"Product {entry_id} not found", 404)

    # =========================================================================
    # Product Operations
    # =========================================================================

    async def list_products(self) -> GatewayResponse[list[CatalogEntry]]:
        return GatewayResponse.ok(list(self._entries.values()))

    async def create_product(
        self, entry: CatalogEntry
    ) -> GatewayResponse[CatalogEntry]:
        now = _now()
        stored = replace(
            entry,
            id=f"P{uuid4().hex[:12].upper()}",
            create_time=entry.create_time or now,
            update_time=entry.update_time or now,
        )
        self._entries[stored.id] = stored
        logger.debug("Created product", entry_id=stored.id)
        return GatewayResponse.ok(stored)

    async def update_product(
        self, entry_id: str, entry: CatalogEntry
    ) -> GatewayResponse[CatalogEntry]:
        current = self._entries.get(entry_id)
        if current is None:
            return self._not_found(entry_id)
        stored = replace(
            entry,
            id=entry_id,
            create_time=current.create_time,
            update_time=entry.update_time or _now(),
        )
        self._entries[entry_id] = stored
        return GatewayResponse.ok(stored)

    async def delete_product(self, entry_id: str) -> GatewayResponse[None]:
        if self._entries.pop(entry_id, None) is None:
            return self._not_found(entry_id)
        return GatewayResponse.ok(None)

    async def patch_product_status(
        self,
        entry_id: str,
        status: ProductStatus,
        update_time: str,
    ) -> GatewayResponse[None]:
        current = self._entries.get(entry_id)
        if current is None:
            return self._not_found(entry_id)
        self._entries[entry_id] = current.with_changes(
            status=status, update_time=update_time
        )
        return GatewayResponse.ok(None)

    # =========================================================================
    # Asset Operations
    # =========================================================================

    async def upload_image(
        self,
        content: bytes,
        filename: str,
        content_type: str,
    ) -> GatewayResponse[str]:
        url = f"{self.IMAGE_URL_PREFIX}/{uuid4().hex}/{filename}"
        self._images[url] = content
        return GatewayResponse.ok(url)

    def get_image(self, url: str) -> bytes | None:
        """Return uploaded bytes for a URL handed out by upload_image."""
        return self._images.get(url)
