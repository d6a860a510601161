"""Domain layer - Entities, value objects, state machines, exceptions.

This module exports the core catalog building blocks:

- **Entities**: CatalogEntry, the immutable product record
- **Value Objects**: FilterCriteria, PendingImage and the status enums
- **State Machines**: EditState for the product edit session
- **Session**: explicit authentication context
- **Exceptions**: validation, fetch, mutation and batch errors

Example usage:
    from decimal import Decimal

    from storeadmin.domain import CatalogEntry, ProductStatus

    entry = CatalogEntry(
        id="P1",
        name="Apple",
        category="Fruit",
        price=Decimal("5.99"),
        stock=3,
    )
    entry.is_low_stock  # True, default threshold is 10
"""

from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.exceptions import (
    AggregateBatchError,
    DomainError,
    EntryNotFoundError,
    FetchError,
    ImageRejectedError,
    InvalidStateTransitionError,
    MutationError,
    SessionExpiredError,
    ValidationError,
)
from storeadmin.domain.session import Session, SessionStatus, UserInfo
from storeadmin.domain.state_machines import EditMode, EditState, validate_edit_transition
from storeadmin.domain.value_objects import (
    DEFAULT_MIN_STOCK,
    FilterCriteria,
    PendingImage,
    ProductStatus,
    StockFilter,
    StockLevel,
    to_price,
)

__all__ = [
    # Entities
    "CatalogEntry",
    # Value Objects
    "DEFAULT_MIN_STOCK",
    "FilterCriteria",
    "PendingImage",
    "ProductStatus",
    "StockFilter",
    "StockLevel",
    "to_price",
    # State Machines
    "EditMode",
    "EditState",
    "validate_edit_transition",
    # Session
    "Session",
    "SessionStatus",
    "UserInfo",
    # Exceptions
    "AggregateBatchError",
    "DomainError",
    "EntryNotFoundError",
    "FetchError",
    "ImageRejectedError",
    "InvalidStateTransitionError",
    "MutationError",
    "SessionExpiredError",
    "ValidationError",
]
