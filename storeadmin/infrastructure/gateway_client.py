"""HTTP catalog gateway.

Thin async client for the remote product API (json-server compatible
REST/JSON). Handles bearer authentication from the session, error
mapping and response parsing.
"""

from typing import Any

import httpx
import pydantic
import structlog

from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.session import Session
from storeadmin.domain.value_objects import DEFAULT_MIN_STOCK, ProductStatus
from storeadmin.infrastructure.gateway import (
    INVALID_RESPONSE,
    NOT_FOUND,
    REQUEST_ERROR,
    TIMEOUT,
    UNAUTHORIZED,
    UNKNOWN_ERROR,
    CatalogGateway,
    GatewayResponse,
)
from storeadmin.infrastructure.schemas import (
    ProductSchema,
    StatusPatchSchema,
    UploadResponseSchema,
)

logger = structlog.get_logger()


class HttpCatalogGateway(CatalogGateway):
    """HTTP client for the product API.

    Every request carries the session's bearer credential. A 401 answer
    invalidates the session so the caller can force re-authentication.
    """

    PRODUCTS_PATH = "/products"
    UPLOAD_PATH = "/upload"

    def __init__(
        self,
        base_url: str,
        session: Session,
        timeout: float = 10.0,
        default_min_stock: int = DEFAULT_MIN_STOCK,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            base_url: Product API base URL.
            session: Session supplying the bearer credential.
            timeout: Request timeout in seconds.
            default_min_stock: Threshold for records without one.
            transport: Optional httpx transport (used to run against an
                in-process app).
        """
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.default_min_stock = default_min_stock
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
    ) -> GatewayResponse[Any]:
        """Make an API request.

        Args:
            method: HTTP method.
            path: API endpoint path.
            json: Request body as JSON.
            files: Multipart file fields.

        Returns:
            GatewayResponse with the decoded body or an error.
        """
        client = await self._get_client()

        headers = {}
        token = self.session.bearer_token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            logger.debug(
                "Making gateway request",
                method=method,
                path=path,
                has_body=json is not None or files is not None,
            )

            response = await client.request(
                method=method,
                url=path,
                json=json,
                files=files,
                headers=headers,
            )

            if response.status_code == 401:
                logger.warning("Gateway rejected credential", path=path)
                self.session.invalidate()
                return GatewayResponse.fail(
                    UNAUTHORIZED, "Authentication required", 401
                )

            if response.status_code >= 400:
                error_data = _error_body(response)
                default_code = NOT_FOUND if response.status_code == 404 else UNKNOWN_ERROR
                return GatewayResponse.fail(
                    error_data.get("error_code", default_code),
                    error_data.get("message", f"HTTP {response.status_code}"),
                    response.status_code,
                    error_data.get("details") or {},
                )

            # Handle empty responses (204 No Content)
            if response.status_code == 204 or not response.content:
                return GatewayResponse.ok(None)

            return GatewayResponse.ok(response.json())

        except httpx.TimeoutException as e:
            logger.error("Gateway request timeout", path=path, error=str(e))
            return GatewayResponse.fail(TIMEOUT, f"Request timed out: {path}", 504)
        except httpx.RequestError as e:
            logger.error("Gateway request failed", path=path, error=str(e))
            return GatewayResponse.fail(
                REQUEST_ERROR, f"Request failed: {str(e)}", 503
            )
        except ValueError as e:
            logger.error("Gateway response is not JSON", path=path, error=str(e))
            return GatewayResponse.fail(
                INVALID_RESPONSE, f"Malformed response from {path}", 502
            )

    def _parse_entry(self, data: Any) -> CatalogEntry:
        return ProductSchema.model_validate(data).to_entry(self.default_min_stock)

    # =========================================================================
    # Product Endpoints
    # =========================================================================

    async def list_products(self) -> GatewayResponse[list[CatalogEntry]]:
        """List every product.

        Returns:
            GatewayResponse with entries in server order.
        """
        result = await self._request("GET", self.PRODUCTS_PATH)
        if not result.success:
            return result
        if not isinstance(result.data, list):
            return GatewayResponse.fail(
                INVALID_RESPONSE, "Product list is not an array", 502
            )
        try:
            entries = [self._parse_entry(item) for item in result.data]
        except (pydantic.ValidationError, ValueError) as e:
            logger.error("Invalid product record", error=str(e))
            return GatewayResponse.fail(
                INVALID_RESPONSE, f"Invalid product record: {e}", 502
            )
        return GatewayResponse.ok(entries)

    async def create_product(
        self, entry: CatalogEntry
    ) -> GatewayResponse[CatalogEntry]:
        """Create a product.

        Args:
            entry: Entry to create; the identifier is not sent.

        Returns:
            GatewayResponse with the stored entry.
        """
        payload = ProductSchema.from_entry(entry).to_payload(include_id=False)
        result = await self._request("POST", self.PRODUCTS_PATH, json=payload)
        return self._entry_result(result)

    async def update_product(
        self, entry_id: str, entry: CatalogEntry
    ) -> GatewayResponse[CatalogEntry]:
        """Replace a product.

        Args:
            entry_id: Product identifier.
            entry: New attributes.

        Returns:
            GatewayResponse with the stored entry.
        """
        payload = ProductSchema.from_entry(entry).to_payload()
        payload["id"] = entry_id
        result = await self._request(
            "PUT", f"{self.PRODUCTS_PATH}/{entry_id}", json=payload
        )
        return self._entry_result(result)

    def _entry_result(
        self, result: GatewayResponse[Any]
    ) -> GatewayResponse[CatalogEntry]:
        if not result.success:
            return result
        try:
            return GatewayResponse.ok(self._parse_entry(result.data))
        except (pydantic.ValidationError, ValueError) as e:
            logger.error("Invalid product record", error=str(e))
            return GatewayResponse.fail(
                INVALID_RESPONSE, f"Invalid product record: {e}", 502
            )

    async def delete_product(self, entry_id: str) -> GatewayResponse[None]:
        """Delete a product.

        Args:
            entry_id: Product identifier.

        Returns:
            GatewayResponse without data.
        """
        result = await self._request("DELETE", f"{self.PRODUCTS_PATH}/{entry_id}")
        if not result.success:
            return result
        return GatewayResponse.ok(None)

    async def patch_product_status(
        self,
        entry_id: str,
        status: ProductStatus,
        update_time: str,
    ) -> GatewayResponse[None]:
        """Change a product's status.

        Args:
            entry_id: Product identifier.
            status: New stored status.
            update_time: ISO-8601 timestamp of the change.

        Returns:
            GatewayResponse without data.
        """
        body = StatusPatchSchema(status=status, update_time=update_time).model_dump(
            mode="json", by_alias=True
        )
        result = await self._request(
            "PATCH", f"{self.PRODUCTS_PATH}/{entry_id}", json=body
        )
        if not result.success:
            return result
        return GatewayResponse.ok(None)

    # =========================================================================
    # Asset Endpoints
    # =========================================================================

    async def upload_image(
        self,
        content: bytes,
        filename: str,
        content_type: str,
    ) -> GatewayResponse[str]:
        """Upload product image bytes.

        Args:
            content: File content.
            filename: Original file name.
            content_type: MIME type.

        Returns:
            GatewayResponse with the public URL of the stored image.
        """
        result = await self._request(
            "POST",
            self.UPLOAD_PATH,
            files={"file": (filename, content, content_type)},
        )
        if not result.success:
            return result
        try:
            return GatewayResponse.ok(UploadResponseSchema.model_validate(result.data).url)
        except pydantic.ValidationError as e:
            return GatewayResponse.fail(
                INVALID_RESPONSE, f"Upload response without url: {e}", 502
            )


def _error_body(response: httpx.Response) -> dict[str, Any]:
    """Decode an error body, tolerating non-JSON answers."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
