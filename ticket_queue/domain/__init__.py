from ticket_queue.domain.catalog import CatalogEntry, SalesRoundWindow
from ticket_queue.domain.validation import (
    MAX_TICKETS_PER_REQUEST,
    MIN_TICKETS_PER_REQUEST,
    ValidatedItem,
    ValidatedPurchaseRequest,
    validate_for_create,
    validate_for_update,
)

__all__ = [
    "CatalogEntry",
    "SalesRoundWindow",
    "ValidatedItem",
    "ValidatedPurchaseRequest",
    "validate_for_create",
    "validate_for_update",
    "MIN_TICKETS_PER_REQUEST",
    "MAX_TICKETS_PER_REQUEST",
]
