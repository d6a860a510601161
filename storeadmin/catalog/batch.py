"""Batch operation executor.

Applies one operation across the current selection. Every action waits
for an explicit confirmation first, then fans out one gateway call per
identifier and joins on all of them (all-settle, not fail-fast). Local
state changes only for the identifiers the gateway acknowledged.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from storeadmin.catalog.selection import SelectionManager
from storeadmin.catalog.store import InventoryStore, raise_mutation_error
from storeadmin.domain.exceptions import (
    AggregateBatchError,
    SessionExpiredError,
    ValidationError,
)
from storeadmin.domain.value_objects import ProductStatus
from storeadmin.infrastructure.gateway import CatalogGateway, GatewayResponse

logger = structlog.get_logger()


# ============================================================================
# Confirmation Gate
# ============================================================================


@dataclass(frozen=True)
class ConfirmationPrompt:
    """Question put to the user before an irreversible action.

    Attributes:
        action: Machine-readable action name.
        title: Dialog title.
        message: Dialog body.
        entry_ids: Entries the action will touch.
    """

    action: str
    title: str
    message: str
    entry_ids: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.entry_ids)


ConfirmCallback = Callable[[ConfirmationPrompt], Awaitable[bool] | bool]


async def ask(confirm: ConfirmCallback, prompt: ConfirmationPrompt) -> bool:
    """Run a confirmation callback that may be sync or async."""
    answer = confirm(prompt)
    if inspect.isawaitable(answer):
        answer = await answer
    return bool(answer)


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a fully successful batch action."""

    operation: str
    entry_ids: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.entry_ids)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _partition(
    entry_ids: list[str],
    results: list[GatewayResponse[Any] | BaseException],
) -> tuple[list[str], dict[str, str], bool]:
    """Split settled results into succeeded ids and failed id -> reason.

    The flag is set when any failure was a rejected credential.
    """
    succeeded: list[str] = []
    failed: dict[str, str] = {}
    unauthorized = False
    for entry_id, result in zip(entry_ids, results):
        if isinstance(result, BaseException):
            failed[entry_id] = str(result) or type(result).__name__
        elif result.success:
            succeeded.append(entry_id)
        elif result.error is None:
            failed[entry_id] = "unknown error"
        else:
            failed[entry_id] = result.error.message
            unauthorized = unauthorized or result.error.is_unauthorized
    return succeeded, failed, unauthorized


# ============================================================================
# Executor
# ============================================================================


class BatchExecutor:
    """Runs batch delete and batch status change over the selection."""

    def __init__(
        self,
        gateway: CatalogGateway,
        store: InventoryStore,
        selection: SelectionManager,
        confirm: ConfirmCallback,
    ) -> None:
        """Initialize the executor.

        Args:
            gateway: Gateway receiving the per-entry calls.
            store: Store updated after acknowledgements.
            selection: Selection the batch acts on.
            confirm: Confirmation gate; a falsy answer aborts the action.
        """
        self.gateway = gateway
        self.store = store
        self.selection = selection
        self.confirm = confirm

    def _require_selection(self) -> list[str]:
        entry_ids = self.selection.ordered_ids()
        if not entry_ids:
            raise ValidationError(
                "Select at least one product first",
                fields={"selection": "No products selected"},
            )
        return entry_ids

    async def batch_delete(self) -> BatchResult | None:
        """Delete every selected entry.

        Returns:
            BatchResult on full success, None if the user declined.

        Raises:
            ValidationError: If nothing is selected.
            AggregateBatchError: If any deletion failed. Entries whose
                deletion succeeded are removed nonetheless and the
                selection is narrowed to the failed ones.
        """
        entry_ids = self._require_selection()
        prompt = ConfirmationPrompt(
            action="batch_delete",
            title="Confirm batch deletion",
            message=f"Delete the {len(entry_ids)} selected products?",
            entry_ids=tuple(entry_ids),
        )
        if not await ask(self.confirm, prompt):
            logger.info("Batch delete declined", count=len(entry_ids))
            return None

        logger.info("Batch delete started", count=len(entry_ids))
        results = await asyncio.gather(
            *(self.gateway.delete_product(i) for i in entry_ids),
            return_exceptions=True,
        )
        succeeded, failed, unauthorized = _partition(entry_ids, list(results))

        self.store.remove_many(succeeded)
        return self._settle("batch_delete", succeeded, failed, unauthorized)

    async def batch_set_status(self, status: ProductStatus | str) -> BatchResult | None:
        """Set the stored status of every selected entry.

        Args:
            status: ``active`` or ``inactive``.

        Returns:
            BatchResult on full success, None if the user declined.

        Raises:
            ValidationError: If nothing is selected or the status is not
                a batch target.
            AggregateBatchError: If any update failed. Succeeded updates
                stay applied locally.
        """
        try:
            target = ProductStatus(status)
        except ValueError:
            target = None
        if target not in ProductStatus.batch_targets():
            raise ValidationError(
                f"Cannot batch-set status {status!r}",
                fields={"status": "Status must be active or inactive"},
            )
        entry_ids = self._require_selection()
        verb = "List" if target is ProductStatus.ACTIVE else "Unlist"
        prompt = ConfirmationPrompt(
            action=f"batch_set_status:{target.value}",
            title="Confirm status change",
            message=f"{verb} the {len(entry_ids)} selected products?",
            entry_ids=tuple(entry_ids),
        )
        if not await ask(self.confirm, prompt):
            logger.info("Batch status change declined", count=len(entry_ids))
            return None

        logger.info("Batch status change started", status=target.value, count=len(entry_ids))
        stamps = {i: _now() for i in entry_ids}
        results = await asyncio.gather(
            *(
                self.gateway.patch_product_status(i, target, stamps[i])
                for i in entry_ids
            ),
            return_exceptions=True,
        )
        succeeded, failed, unauthorized = _partition(entry_ids, list(results))

        for entry_id in succeeded:
            if entry_id in self.store:
                self.store.apply(
                    entry_id, {"status": target, "update_time": stamps[entry_id]}
                )
        return self._settle(
            f"batch_set_status:{target.value}", succeeded, failed, unauthorized
        )

    def _settle(
        self,
        operation: str,
        succeeded: list[str],
        failed: dict[str, str],
        unauthorized: bool = False,
    ) -> BatchResult:
        if failed:
            logger.warning(
                "Batch partially failed",
                operation=operation,
                succeeded=len(succeeded),
                failed=sorted(failed),
            )
            self.selection.set_all(failed)
            error = AggregateBatchError(operation, succeeded, failed)
            if unauthorized:
                raise error from SessionExpiredError(operation)
            raise error

        self.selection.clear()
        logger.info("Batch completed", operation=operation, count=len(succeeded))
        return BatchResult(operation=operation, entry_ids=tuple(succeeded))

    async def delete_one(self, entry_id: str) -> bool:
        """Delete a single entry behind the same confirmation gate.

        Args:
            entry_id: Entry to delete.

        Returns:
            True if deleted, False if the user declined.

        Raises:
            EntryNotFoundError: If the entry is not in the snapshot.
            MutationError: If the gateway refused the deletion.
        """
        entry = self.store.require(entry_id)
        prompt = ConfirmationPrompt(
            action="delete",
            title="Confirm deletion",
            message=f"Delete product {entry.name}?",
            entry_ids=(entry_id,),
        )
        if not await ask(self.confirm, prompt):
            return False

        result = await self.gateway.delete_product(entry_id)
        if not result.success:
            raise_mutation_error(result, entry_id, "delete_product")
        self.store.remove(entry_id)
        logger.info("Product deleted", entry_id=entry_id)
        return True
