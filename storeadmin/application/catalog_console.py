"""Catalog console application service.

The action boundary of the product management page: every user action
goes through here, and every domain error is turned into a notification
instead of escaping to the view.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from storeadmin.catalog.batch import BatchExecutor, BatchResult, ConfirmCallback
from storeadmin.catalog.edit_session import CommitResult, ProductDraft, ProductEditSession
from storeadmin.catalog.export import export_csv
from storeadmin.catalog.filters import categories, filter_entries
from storeadmin.catalog.monitor import (
    InventorySummary,
    LowStockMonitor,
    summarize,
    top_sellers,
)
from storeadmin.catalog.selection import SelectionManager
from storeadmin.catalog.store import InventoryStore
from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.exceptions import (
    AggregateBatchError,
    DomainError,
    FetchError,
    MutationError,
    SessionExpiredError,
    ValidationError,
)
from storeadmin.domain.session import Session
from storeadmin.domain.value_objects import FilterCriteria, ProductStatus
from storeadmin.infrastructure.config import Settings, settings as default_settings
from storeadmin.infrastructure.gateway import CatalogGateway
from storeadmin.infrastructure.gateway_client import HttpCatalogGateway
from storeadmin.infrastructure.local_gateway import InMemoryCatalogGateway

logger = structlog.get_logger()


# ============================================================================
# Notifications
# ============================================================================


class NotificationLevel(str, Enum):
    """Severity of a user-visible message."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """Message shown to the user after an action."""

    level: NotificationLevel
    message: str
    details: dict[str, Any] = field(default_factory=dict)


def notification_for(error: DomainError) -> Notification:
    """Translate a domain error into a user-visible notification.

    Args:
        error: Error caught at the action boundary.

    Returns:
        Notification describing the error.
    """
    if isinstance(error.__cause__, SessionExpiredError):
        return Notification(
            NotificationLevel.ERROR, error.__cause__.message, error.details
        )
    if isinstance(error, ValidationError):
        return Notification(NotificationLevel.WARNING, error.message, error.details)
    if isinstance(error, FetchError):
        return Notification(
            NotificationLevel.ERROR, "Failed to load products", error.details
        )
    if isinstance(error, AggregateBatchError):
        return Notification(
            NotificationLevel.ERROR,
            f"{error.succeeded_count} succeeded, {error.failed_count} failed: "
            f"{', '.join(error.failed_ids)}",
            error.details,
        )
    if isinstance(error, MutationError):
        return Notification(NotificationLevel.ERROR, error.message, error.details)
    return Notification(NotificationLevel.ERROR, error.message, error.details)


# ============================================================================
# Console
# ============================================================================


class CatalogConsole:
    """Product management page controller.

    Wires the store, filter criteria, selection, batch executor, low-stock
    monitor and edit session together and reports outcomes as
    notifications.

    Example usage:
        console = build_console(session, confirm=ask_user)
        await console.refresh()
        console.set_filters(stock_filter="low")
        console.select_all()
        await console.batch_set_status("inactive")
    """

    def __init__(
        self,
        gateway: CatalogGateway,
        store: InventoryStore,
        selection: SelectionManager,
        executor: BatchExecutor,
        editor: ProductEditSession,
        config: Settings | None = None,
        on_notify: Callable[[Notification], None] | None = None,
    ) -> None:
        """Initialize the console.

        Args:
            gateway: Gateway shared by all components.
            store: Inventory store.
            selection: Selection manager bound to the store.
            executor: Batch executor.
            editor: Product edit session.
            config: Settings; module settings when omitted.
            on_notify: Optional callback receiving every notification.
        """
        self.gateway = gateway
        self.store = store
        self.selection = selection
        self.executor = executor
        self.editor = editor
        self.monitor = LowStockMonitor(store)
        self.config = config or default_settings
        self.criteria = FilterCriteria()
        self.notifications: list[Notification] = []
        self.is_loading = False
        self._on_notify = on_notify

    def _notify(
        self,
        level: NotificationLevel,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(level, message, details or {})
        self.notifications.append(notification)
        if self._on_notify is not None:
            self._on_notify(notification)
        return notification

    def _report(self, action: str, error: DomainError) -> None:
        logger.warning("Catalog action failed", action=action, error=error.message)
        notification = notification_for(error)
        self.notifications.append(notification)
        if self._on_notify is not None:
            self._on_notify(notification)

    # =========================================================================
    # Loading
    # =========================================================================

    async def refresh(self) -> bool:
        """Reload the catalog.

        Returns:
            True on success; on failure the previous snapshot stays.
        """
        self.is_loading = True
        try:
            await self.store.load()
        except DomainError as e:
            self._report("refresh", e)
            return False
        finally:
            self.is_loading = False
        return True

    # =========================================================================
    # Views
    # =========================================================================

    def set_filters(self, **changes: Any) -> tuple[CatalogEntry, ...]:
        """Update filter criteria and return the new view.

        Args:
            **changes: Any of search_text, category, status, stock_filter.
                Unknown values are reported and the criteria stay as they were.
        """
        try:
            self.criteria = self.criteria.with_changes(**changes)
        except DomainError as e:
            self._report("set_filters", e)
        return self.visible_entries

    def reset_filters(self) -> tuple[CatalogEntry, ...]:
        self.criteria = FilterCriteria.reset()
        return self.visible_entries

    @property
    def visible_entries(self) -> tuple[CatalogEntry, ...]:
        return filter_entries(self.store.snapshot, self.criteria)

    @property
    def category_options(self) -> list[str]:
        return categories(self.store.snapshot)

    @property
    def low_stock_alert(self) -> str | None:
        if not self.config.low_stock_alert_enabled:
            return None
        return self.monitor.alert

    @property
    def summary(self) -> InventorySummary:
        return summarize(self.store.snapshot)

    def hot_products(self, limit: int = 5) -> list[CatalogEntry]:
        return top_sellers(self.store.snapshot, limit)

    def view_entry(self, entry_id: str) -> CatalogEntry | None:
        """Entry details for the detail drawer."""
        try:
            return self.store.require(entry_id)
        except DomainError as e:
            self._report("view_entry", e)
            return None

    def export_csv(self) -> str:
        """CSV of the currently visible entries."""
        content = export_csv(self.visible_entries)
        self._notify(NotificationLevel.SUCCESS, "Export complete")
        return content

    # =========================================================================
    # Selection
    # =========================================================================

    def toggle(self, entry_id: str) -> bool:
        return self.selection.toggle(entry_id)

    def select_all(self) -> None:
        """Select every visible entry."""
        self.selection.select_visible(self.visible_entries)

    def clear_selection(self) -> None:
        self.selection.clear()

    @property
    def batch_actions_enabled(self) -> bool:
        return self.selection.has_selection

    # =========================================================================
    # Batch Actions
    # =========================================================================

    async def batch_delete(self) -> BatchResult | None:
        """Delete the selection after confirmation."""
        try:
            result = await self.executor.batch_delete()
        except DomainError as e:
            self._report("batch_delete", e)
            return None
        if result is not None:
            self._notify(
                NotificationLevel.SUCCESS,
                f"Deleted {result.count} products",
                {"entry_ids": list(result.entry_ids)},
            )
        return result

    async def batch_set_status(self, status: ProductStatus | str) -> BatchResult | None:
        """List or unlist the selection after confirmation."""
        try:
            result = await self.executor.batch_set_status(status)
        except DomainError as e:
            self._report("batch_set_status", e)
            return None
        if result is not None:
            self._notify(
                NotificationLevel.SUCCESS,
                f"Updated the status of {result.count} products",
                {"entry_ids": list(result.entry_ids)},
            )
        return result

    async def delete_entry(self, entry_id: str) -> bool:
        """Delete one entry after confirmation."""
        try:
            deleted = await self.executor.delete_one(entry_id)
        except DomainError as e:
            self._report("delete_entry", e)
            return False
        if deleted:
            self._notify(NotificationLevel.SUCCESS, "Product deleted")
        return deleted

    # =========================================================================
    # Editing
    # =========================================================================

    def start_create(self) -> ProductDraft | None:
        try:
            return self.editor.begin_create()
        except DomainError as e:
            self._report("start_create", e)
            return None

    def start_edit(self, entry_id: str) -> ProductDraft | None:
        try:
            return self.editor.begin_edit(self.store.require(entry_id))
        except DomainError as e:
            self._report("start_edit", e)
            return None

    def update_draft(self, **changes: Any) -> bool:
        try:
            self.editor.update(**changes)
        except DomainError as e:
            self._report("update_draft", e)
            return False
        return True

    def select_image(self, content: bytes, filename: str, content_type: str) -> bool:
        """Accept a local image; rejected files leave the previous one."""
        try:
            self.editor.select_image(content, filename, content_type)
        except DomainError as e:
            self._report("select_image", e)
            return False
        self._notify(
            NotificationLevel.SUCCESS,
            "Image selected, it will be uploaded when you save",
        )
        return True

    async def save(self) -> CommitResult | None:
        """Commit the edit session."""
        try:
            result = await self.editor.commit()
        except DomainError as e:
            self._report("save", e)
            return None
        for warning in result.warnings:
            self._notify(NotificationLevel.WARNING, warning)
        self._notify(
            NotificationLevel.SUCCESS,
            "Product added" if result.created else "Product updated",
            {"entry_id": result.entry.id},
        )
        return result

    def cancel_edit(self) -> None:
        try:
            self.editor.cancel()
        except DomainError as e:
            self._report("cancel_edit", e)

    async def close(self) -> None:
        """Release the gateway transport."""
        self.selection.detach()
        await self.gateway.close()


# ============================================================================
# Wiring
# ============================================================================


def build_gateway(session: Session, config: Settings) -> CatalogGateway:
    """Create the gateway selected by the settings.

    Args:
        session: Session supplying the credential for HTTP calls.
        config: Settings choosing HTTP or stand-alone mode.

    Returns:
        Catalog gateway.
    """
    if config.standalone_mode:
        logger.info("Using stand-alone catalog", seed_file=str(config.seed_file))
        if config.seed_file is not None:
            return InMemoryCatalogGateway.from_seed_file(
                config.seed_file, config.default_min_stock
            )
        return InMemoryCatalogGateway()
    return HttpCatalogGateway(
        base_url=config.api_base_url,
        session=session,
        timeout=config.request_timeout,
        default_min_stock=config.default_min_stock,
    )


def build_console(
    session: Session,
    confirm: ConfirmCallback,
    config: Settings | None = None,
    gateway: CatalogGateway | None = None,
    on_notify: Callable[[Notification], None] | None = None,
) -> CatalogConsole:
    """Assemble a catalog console.

    Args:
        session: Authenticated session.
        confirm: Confirmation gate for irreversible actions.
        config: Settings; module settings when omitted.
        gateway: Gateway override; built from settings when omitted.
        on_notify: Optional notification callback.

    Returns:
        Ready-to-use console (call refresh() to load the catalog).
    """
    config = config or default_settings
    gateway = gateway or build_gateway(session, config)
    store = InventoryStore(gateway)
    selection = SelectionManager(store)
    executor = BatchExecutor(gateway, store, selection, confirm)
    editor = ProductEditSession(
        gateway,
        store,
        allowed_image_types=tuple(config.image_allowed_types),
        max_image_bytes=config.image_max_bytes,
        default_min_stock=config.default_min_stock,
    )
    return CatalogConsole(
        gateway=gateway,
        store=store,
        selection=selection,
        executor=executor,
        editor=editor,
        config=config,
        on_notify=on_notify,
    )
