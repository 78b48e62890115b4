"""
Intake rules for purchase requests.

Both entry points are pure: the caller resolves the sales round and ticket types
beforehand and passes them in, together with "now". The rules run in a fixed order
and the first violation wins:

  1. sales round reference present and resolvable     -> MissingReference
  2. at least one item                                 -> EmptyRequest
  3. every item references a known ticket type         -> MissingReference
  4. window_start <= now <= window_end                 -> WindowClosed
  5. every quantity positive, total within [1, 4]      -> QuantityOutOfBounds

Approved quantities are never taken from the caller; accepted items start at zero.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ticket_queue.domain.catalog import CatalogEntry, SalesRoundWindow
from ticket_queue.domain.errors import (
    EmptyRequestError,
    MissingReferenceError,
    QuantityOutOfBoundsError,
    WindowClosedError,
)
from ticket_queue.models.purchase_request import PurchaseRequest
from ticket_queue.schemas.purchase_request import PurchaseRequestCreate, PurchaseRequestUpdate

MIN_TICKETS_PER_REQUEST = 1
MAX_TICKETS_PER_REQUEST = 4


@dataclass(frozen=True)
class ValidatedItem:
    ticket_type_id: int
    quantity_requested: int
    quantity_approved: int = 0


@dataclass(frozen=True)
class ValidatedPurchaseRequest:
    sales_round_id: int
    items: tuple[ValidatedItem, ...]

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity_requested for item in self.items)


def validate_for_create(
    candidate: PurchaseRequestCreate,
    sales_round: Optional[SalesRoundWindow],
    now: datetime,
    ticket_types: Mapping[int, CatalogEntry],
) -> ValidatedPurchaseRequest:
    """Check a new submission. Raises a ValidationError subclass on the first broken rule."""
    return _validate(candidate, sales_round, now, ticket_types)


def validate_for_update(
    candidate: PurchaseRequestUpdate,
    existing: PurchaseRequest,
    sales_round: Optional[SalesRoundWindow],
    now: datetime,
    ticket_types: Mapping[int, CatalogEntry],
) -> ValidatedPurchaseRequest:
    """Check a full item-list replacement for an existing request.

    The request stays in its original round, so the candidate must name that round.
    Queue number and status are not part of the outcome.
    """
    return _validate(
        candidate,
        sales_round,
        now,
        ticket_types,
        expected_sales_round_id=existing.sales_round_id,
    )


def _validate(
    candidate: PurchaseRequestCreate,
    sales_round: Optional[SalesRoundWindow],
    now: datetime,
    ticket_types: Mapping[int, CatalogEntry],
    expected_sales_round_id: Optional[int] = None,
) -> ValidatedPurchaseRequest:
    _check_sales_round_reference(candidate, sales_round, expected_sales_round_id)

    if not candidate.items:
        raise EmptyRequestError()

    for index, item in enumerate(candidate.items):
        if item.ticket_type_id is None:
            raise MissingReferenceError(
                "ticket type id cannot be null", field=f"items[{index}].ticket_type_id"
            )
        if item.ticket_type_id not in ticket_types:
            raise MissingReferenceError(
                f"ticket type {item.ticket_type_id} does not exist",
                field=f"items[{index}].ticket_type_id",
            )

    if not sales_round.is_open(now):
        raise WindowClosedError(
            f"sales round {sales_round.id} is not open "
            f"(window {sales_round.window_start.isoformat()} to {sales_round.window_end.isoformat()})",
            field="sales_round_id",
        )

    for index, item in enumerate(candidate.items):
        if item.quantity_requested < 1:
            raise QuantityOutOfBoundsError(
                "quantity requested must be positive", field=f"items[{index}].quantity_requested"
            )

    total = sum(item.quantity_requested for item in candidate.items)
    if not MIN_TICKETS_PER_REQUEST <= total <= MAX_TICKETS_PER_REQUEST:
        raise QuantityOutOfBoundsError(
            f"purchase request must total between {MIN_TICKETS_PER_REQUEST} and "
            f"{MAX_TICKETS_PER_REQUEST} tickets, got {total}",
            field="items",
        )

    return ValidatedPurchaseRequest(
        sales_round_id=sales_round.id,
        items=tuple(
            ValidatedItem(ticket_type_id=item.ticket_type_id, quantity_requested=item.quantity_requested)
            for item in candidate.items
        ),
    )


def _check_sales_round_reference(candidate, sales_round, expected_sales_round_id) -> None:
    if candidate.sales_round_id is None:
        raise MissingReferenceError("sales round id cannot be null", field="sales_round_id")
    if expected_sales_round_id is not None and candidate.sales_round_id != expected_sales_round_id:
        raise MissingReferenceError(
            f"purchase request belongs to sales round {expected_sales_round_id}",
            field="sales_round_id",
        )
    if sales_round is None or sales_round.id != candidate.sales_round_id:
        raise MissingReferenceError(
            f"sales round {candidate.sales_round_id} does not exist", field="sales_round_id"
        )
