"""Product edit session.

Holds one in-flight create or edit transaction: a by-value draft of the
entry plus at most one locally selected image that is only uploaded when
the draft is committed.
"""

import math
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import uuid4

import structlog

from storeadmin.catalog.store import InventoryStore, raise_mutation_error
from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.exceptions import (
    FetchError,
    ImageRejectedError,
    InvalidStateTransitionError,
    ValidationError,
)
from storeadmin.domain.state_machines import (
    EditMode,
    EditState,
    validate_edit_transition,
)
from storeadmin.domain.value_objects import (
    DEFAULT_MIN_STOCK,
    PendingImage,
    ProductStatus,
    to_price,
)
from storeadmin.infrastructure.gateway import CatalogGateway

logger = structlog.get_logger()

DEFAULT_IMAGE_TYPES = ("image/jpeg", "image/png")
DEFAULT_IMAGE_MAX_BYTES = 2 * 1024 * 1024

IMAGE_UPLOAD_WARNING = "Image upload failed; the product was saved without the new image"
REFRESH_WARNING = "Saved, but the catalog could not be refreshed"

_REQUIRED_MESSAGES = {
    "name": "Please enter the product name",
    "sku": "Please enter the SKU",
    "category": "Please choose a category",
    "price": "Please enter the price",
    "stock": "Please enter the stock",
    "min_stock": "Please enter the minimum stock",
    "status": "Please choose a status",
}


# ============================================================================
# Draft
# ============================================================================


@dataclass
class ProductDraft:
    """Editable copy of a catalog entry.

    Values are copied in, so editing the draft never touches the live
    snapshot. Numeric fields accept loose input (strings from form
    widgets) and are checked by validate().
    """

    name: str | None = None
    sku: str | None = None
    category: str | None = None
    price: Any = None
    stock: Any = None
    min_stock: Any = DEFAULT_MIN_STOCK
    status: Any = ProductStatus.ACTIVE
    brand: str | None = None
    supplier: str | None = None
    description: str | None = None
    image: str | None = None

    @classmethod
    def from_entry(cls, entry: CatalogEntry) -> "ProductDraft":
        return cls(
            name=entry.name,
            sku=entry.sku,
            category=entry.category,
            price=entry.price,
            stock=entry.stock,
            min_stock=entry.min_stock,
            status=entry.status,
            brand=entry.brand,
            supplier=entry.supplier,
            description=entry.description,
            image=entry.image,
        )

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def validate(self) -> dict[str, str]:
        """Check required fields and numeric ranges.

        Returns:
            Field name to error message; empty when the draft is valid.
        """
        errors: dict[str, str] = {}
        for name in ("name", "sku", "category"):
            value = getattr(self, name)
            if value is None or not str(value).strip():
                errors[name] = _REQUIRED_MESSAGES[name]

        if _is_blank(self.price):
            errors["price"] = _REQUIRED_MESSAGES["price"]
        else:
            try:
                if to_price(self.price) < 0:
                    errors["price"] = "Price cannot be negative"
            except (InvalidOperation, ValueError, TypeError):
                errors["price"] = "Price must be a number"

        for name in ("stock", "min_stock"):
            value = getattr(self, name)
            if _is_blank(value):
                errors[name] = _REQUIRED_MESSAGES[name]
                continue
            number = _as_int(value)
            if number is None:
                errors[name] = "Must be a whole number"
            elif number < 0:
                errors[name] = "Cannot be negative"

        if _is_blank(self.status):
            errors["status"] = _REQUIRED_MESSAGES["status"]
        else:
            try:
                ProductStatus(self.status)
            except ValueError:
                errors["status"] = "Unknown status"
        return errors


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    return None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a successful commit.

    Attributes:
        entry: Entry as stored by the gateway.
        created: True for a new entry, False for an edit.
        warnings: Non-fatal problems (image upload, refresh).
    """

    entry: CatalogEntry
    created: bool
    warnings: tuple[str, ...] = field(default_factory=tuple)


# ============================================================================
# Edit Session
# ============================================================================


class ProductEditSession:
    """Create/edit transaction for a single catalog entry.

    State machine: IDLE → EDITING → COMMITTING → IDLE, with cancel going
    from EDITING back to IDLE and a failed remote write from COMMITTING
    back to EDITING.
    """

    def __init__(
        self,
        gateway: CatalogGateway,
        store: InventoryStore,
        allowed_image_types: tuple[str, ...] = DEFAULT_IMAGE_TYPES,
        max_image_bytes: int = DEFAULT_IMAGE_MAX_BYTES,
        default_min_stock: int = DEFAULT_MIN_STOCK,
    ) -> None:
        """Initialize an idle session.

        Args:
            gateway: Gateway used for upload, create and update.
            store: Store refreshed after a successful commit.
            allowed_image_types: Accepted image MIME types.
            max_image_bytes: Images must be strictly smaller than this.
            default_min_stock: Threshold prefilled for new entries.
        """
        self.gateway = gateway
        self.store = store
        self.allowed_image_types = allowed_image_types
        self.max_image_bytes = max_image_bytes
        self.default_min_stock = default_min_stock
        self.session_id = ""
        self.state = EditState.IDLE
        self.mode: EditMode | None = None
        self.original: CatalogEntry | None = None
        self.draft: ProductDraft | None = None
        self.pending_image: PendingImage | None = None

    def _transition(self, target: EditState) -> None:
        validate_edit_transition(self.session_id or "-", self.state, target)
        self.state = target

    def _require_editing(self) -> ProductDraft:
        if not self.state.is_editable() or self.draft is None:
            raise InvalidStateTransitionError(
                entity_type="EditSession",
                entity_id=self.session_id or "-",
                current_state=self.state.value,
                target_state=EditState.EDITING.value,
                allowed_transitions=[s.value for s in self.state.allowed_transitions()],
            )
        return self.draft

    def _reset(self) -> None:
        self.mode = None
        self.original = None
        self.draft = None
        self.pending_image = None

    # =========================================================================
    # Opening
    # =========================================================================

    def begin_create(self) -> ProductDraft:
        """Open the session for a new entry with default values."""
        self._transition(EditState.EDITING)
        self.session_id = uuid4().hex[:8]
        self.mode = EditMode.NEW
        self.original = None
        self.draft = ProductDraft(
            status=ProductStatus.ACTIVE, min_stock=self.default_min_stock
        )
        self.pending_image = None
        logger.debug("Edit session opened", session_id=self.session_id, mode="new")
        return self.draft

    def begin_edit(self, entry: CatalogEntry) -> ProductDraft:
        """Open the session prefilled from an existing entry."""
        self._transition(EditState.EDITING)
        self.session_id = uuid4().hex[:8]
        self.mode = EditMode.EXISTING
        self.original = entry
        self.draft = ProductDraft.from_entry(entry)
        self.pending_image = None
        logger.debug(
            "Edit session opened",
            session_id=self.session_id,
            mode="existing",
            entry_id=entry.id,
        )
        return self.draft

    # =========================================================================
    # Editing
    # =========================================================================

    def update(self, **changes: Any) -> ProductDraft:
        """Change draft fields.

        Raises:
            TypeError: If a change names an unknown field.
            InvalidStateTransitionError: If the session is not editing.
        """
        draft = self._require_editing()
        unknown = set(changes) - ProductDraft.field_names()
        if unknown:
            raise TypeError(f"Unknown draft fields: {sorted(unknown)}")
        for name, value in changes.items():
            setattr(draft, name, value)
        return draft

    def select_image(
        self, content: bytes, filename: str, content_type: str
    ) -> PendingImage:
        """Accept a local image for upload at commit time.

        Args:
            content: File bytes.
            filename: Original file name.
            content_type: MIME type of the file.

        Returns:
            The accepted pending image.

        Raises:
            ImageRejectedError: If the type or size is not allowed. Any
                previously accepted image is kept.
        """
        self._require_editing()
        if content_type not in self.allowed_image_types:
            allowed = "/".join(t.split("/")[-1].upper() for t in self.allowed_image_types)
            raise ImageRejectedError(filename, f"Only {allowed} images can be uploaded")
        if len(content) >= self.max_image_bytes:
            limit_mb = self.max_image_bytes / 1024 / 1024
            raise ImageRejectedError(
                filename, f"Image must be smaller than {limit_mb:g}MB"
            )
        self.pending_image = PendingImage(
            content=content, filename=filename, content_type=content_type
        )
        logger.debug(
            "Image selected",
            session_id=self.session_id,
            filename=filename,
            size=len(content),
        )
        return self.pending_image

    def discard_image(self) -> None:
        """Drop the pending image, keeping any stored image URL."""
        self._require_editing()
        self.pending_image = None

    @property
    def image_preview(self) -> PendingImage | str | None:
        """Pending image if any, else the stored image URL."""
        if self.pending_image is not None:
            return self.pending_image
        return self.draft.image if self.draft else None

    # =========================================================================
    # Closing
    # =========================================================================

    def cancel(self) -> None:
        """Discard the draft and pending image without remote calls."""
        self._transition(EditState.IDLE)
        logger.debug("Edit session cancelled", session_id=self.session_id)
        self._reset()

    async def commit(self) -> CommitResult:
        """Validate, upload the pending image, then create or update.

        Returns:
            CommitResult with the stored entry and any warnings.

        Raises:
            ValidationError: If required fields are missing or invalid;
                the session stays open.
            MutationError: If the gateway refused the write; the session
                returns to editing so the user can retry.
        """
        draft = self._require_editing()
        errors = draft.validate()
        if errors:
            raise ValidationError("Please correct the highlighted fields", fields=errors)

        self._transition(EditState.COMMITTING)
        try:
            result = await self._persist(draft)
        except Exception:
            self._transition(EditState.EDITING)
            raise

        self._transition(EditState.IDLE)
        self._reset()
        return result

    async def _persist(self, draft: ProductDraft) -> CommitResult:
        warnings: list[str] = []
        image_url = draft.image

        if self.pending_image is not None:
            pending = self.pending_image
            upload = await self.gateway.upload_image(
                pending.content, pending.filename, pending.content_type
            )
            if upload.success and upload.data:
                image_url = upload.data
                draft.image = image_url
                self.pending_image = None
            else:
                logger.warning(
                    "Image upload failed, saving without it",
                    session_id=self.session_id,
                    error=upload.error.message if upload.error else None,
                )
                warnings.append(IMAGE_UPLOAD_WARNING)

        entry = self._build_entry(draft, image_url)
        if self.mode is EditMode.EXISTING and self.original is not None:
            result = await self.gateway.update_product(self.original.id, entry)
            operation, entry_id = "update_product", self.original.id
        else:
            result = await self.gateway.create_product(entry)
            operation, entry_id = "create_product", None

        if not result.success or result.data is None:
            raise_mutation_error(result, entry_id, operation)

        saved = result.data
        logger.info(
            "Product saved",
            entry_id=saved.id,
            created=self.mode is EditMode.NEW,
            warnings=len(warnings),
        )

        try:
            await self.store.load()
        except FetchError as e:
            logger.warning("Refresh after save failed", error=e.message)
            self.store.upsert(saved)
            warnings.append(REFRESH_WARNING)

        return CommitResult(
            entry=saved,
            created=self.mode is EditMode.NEW,
            warnings=tuple(warnings),
        )

    def _build_entry(self, draft: ProductDraft, image_url: str | None) -> CatalogEntry:
        now = _now()
        values = dict(
            name=draft.name.strip(),
            sku=draft.sku.strip(),
            category=draft.category.strip(),
            price=to_price(draft.price),
            stock=_as_int(draft.stock),
            min_stock=_as_int(draft.min_stock),
            status=ProductStatus(draft.status),
            brand=_clean(draft.brand),
            supplier=_clean(draft.supplier),
            description=_clean(draft.description),
            image=image_url or None,
            update_time=now,
        )
        if self.mode is EditMode.EXISTING and self.original is not None:
            return replace(self.original, **values)
        return CatalogEntry(id="", sales=0, create_time=now, **values)
