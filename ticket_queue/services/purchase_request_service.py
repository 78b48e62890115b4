"""
Purchase request intake: create, replace items, read.

Every write goes through the intake rules in ticket_queue.domain.validation and
runs in one store transaction holding a shared lock on the sales round, so it
cannot interleave with that round's queue allocation.
"""

from typing import Optional

from ticket_queue.core.clock import Clock, utcnow
from ticket_queue.core.logging import get_logger
from ticket_queue.core.metrics import record_purchase_request
from ticket_queue.domain.catalog import CatalogEntry, SalesRoundWindow
from ticket_queue.domain.errors import (
    PurchaseRequestNotFoundError,
    SalesRoundNotFoundError,
    StorageFailureError,
    ValidationError,
    WindowClosedError,
)
from ticket_queue.domain.validation import validate_for_create, validate_for_update
from ticket_queue.models import PENDING, PurchaseRequest
from ticket_queue.schemas.purchase_request import (
    ConfirmationItem,
    PurchaseRequestConfirmation,
    PurchaseRequestCreate,
    PurchaseRequestUpdate,
)
from ticket_queue.services.interfaces import PurchaseRequestStore, SalesRoundGateway, TicketTypeCatalog

logger = get_logger(__name__)


class PurchaseRequestService:
    """Service for purchase request intake and lookups."""

    def __init__(
        self,
        store: PurchaseRequestStore,
        sales_rounds: SalesRoundGateway,
        ticket_types: TicketTypeCatalog,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._sales_rounds = sales_rounds
        self._ticket_types = ticket_types
        self._clock = clock

    async def create_purchase_request(
        self, candidate: PurchaseRequestCreate, customer_id: str
    ) -> PurchaseRequest:
        """
        Validate and persist a new pending request.

        Raises:
            ValidationError: a subclass naming the first broken rule.
        """
        try:
            async with self._store.transaction():
                sales_round = await self._lock_and_resolve_round(candidate.sales_round_id)
                catalog = await self._resolve_ticket_types(candidate)
                accepted = validate_for_create(candidate, sales_round, self._clock(), catalog)
                await self._ensure_not_allocated(accepted.sales_round_id)

                request = PurchaseRequest(
                    status=PENDING,
                    customer_id=customer_id,
                    sales_round_id=accepted.sales_round_id,
                    queue_number=None,
                )
                request.replace_items(accepted.items)
                saved = await self._store.save(request)
        except ValidationError as e:
            self._rejected("create", e, sales_round_id=candidate.sales_round_id, customer_id=customer_id)
            raise

        record_purchase_request("create", "accepted")
        logger.info(
            "purchase_request_created",
            purchase_request_id=saved.id,
            sales_round_id=saved.sales_round_id,
            customer_id=customer_id,
            tickets=saved.total_quantity,
        )
        return saved

    async def update_purchase_request(
        self, purchase_request_id: int, candidate: PurchaseRequestUpdate
    ) -> PurchaseRequest:
        """
        Replace the item list of an existing request while its round is open.
        Queue number and status are left as they are.

        Raises:
            PurchaseRequestNotFoundError: no request with this id.
            ValidationError: a subclass naming the first broken rule.
        """
        try:
            async with self._store.transaction():
                existing = await self._store.find_by_id(purchase_request_id)
                if existing is None:
                    raise PurchaseRequestNotFoundError(purchase_request_id)

                sales_round = await self._lock_and_resolve_round(existing.sales_round_id)
                catalog = await self._resolve_ticket_types(candidate)
                accepted = validate_for_update(candidate, existing, sales_round, self._clock(), catalog)
                await self._ensure_not_allocated(existing.sales_round_id)

                existing.replace_items(accepted.items)
                saved = await self._store.save(existing)
        except ValidationError as e:
            self._rejected("update", e, purchase_request_id=purchase_request_id)
            raise

        record_purchase_request("update", "accepted")
        logger.info(
            "purchase_request_updated",
            purchase_request_id=saved.id,
            sales_round_id=saved.sales_round_id,
            tickets=saved.total_quantity,
        )
        return saved

    async def get_purchase_request(self, purchase_request_id: int) -> PurchaseRequest:
        async with self._store.transaction():
            request = await self._store.find_by_id(purchase_request_id)
        if request is None:
            raise PurchaseRequestNotFoundError(purchase_request_id)
        return request

    async def get_purchase_request_confirmation(self, purchase_request_id: int) -> PurchaseRequestConfirmation:
        """
        The request together with its sales round window and ticket type names.
        The queue number is filled in once the round has been allocated.
        """
        async with self._store.transaction():
            request = await self._store.find_by_id(purchase_request_id)
            if request is None:
                raise PurchaseRequestNotFoundError(purchase_request_id)

            sales_round = await self._sales_rounds.resolve(request.sales_round_id)
            if sales_round is None:
                raise SalesRoundNotFoundError(request.sales_round_id)

            items = []
            for item in request.items:
                ticket_type = await self._ticket_types.resolve(item.ticket_type_id)
                if ticket_type is None:
                    raise StorageFailureError(f"ticket type {item.ticket_type_id} is missing from the catalog")
                items.append(
                    ConfirmationItem(
                        ticket_type_id=item.ticket_type_id,
                        ticket_type_name=ticket_type.name,
                        quantity_requested=item.quantity_requested,
                        quantity_approved=item.quantity_approved,
                    )
                )

        return PurchaseRequestConfirmation(
            purchase_request_id=request.id,
            status=request.status,
            customer_id=request.customer_id,
            sales_round_id=request.sales_round_id,
            event_id=sales_round.event_id,
            window_start=sales_round.window_start,
            window_end=sales_round.window_end,
            queue_number=request.queue_number,
            total_tickets=request.total_quantity,
            items=items,
        )

    async def list_by_sales_round(self, sales_round_id: int) -> list[PurchaseRequest]:
        """Requests of a round: allocated ones by queue number, then the rest by id."""
        async with self._store.transaction():
            requests = await self._store.find_all_by_sales_round(sales_round_id)
        return sorted(
            requests,
            key=lambda r: (r.queue_number is None, r.queue_number or 0, r.id),
        )

    async def list_by_customer(self, customer_id: str) -> list[PurchaseRequest]:
        async with self._store.transaction():
            return await self._store.find_all_by_customer(customer_id)

    async def delete_all_purchase_requests(self) -> int:
        """Administrative reset for test and ops tooling."""
        async with self._store.transaction():
            deleted = await self._store.delete_all()
        logger.warning("purchase_requests_reset", deleted=deleted)
        return deleted

    async def _lock_and_resolve_round(self, sales_round_id: Optional[int]) -> Optional[SalesRoundWindow]:
        if sales_round_id is None:
            return None
        if not await self._store.lock_sales_round(sales_round_id, exclusive=False):
            return None
        return await self._sales_rounds.resolve(sales_round_id)

    async def _resolve_ticket_types(self, candidate: PurchaseRequestCreate) -> dict[int, CatalogEntry]:
        resolved: dict[int, CatalogEntry] = {}
        for item in candidate.items:
            if item.ticket_type_id is None or item.ticket_type_id in resolved:
                continue
            entry = await self._ticket_types.resolve(item.ticket_type_id)
            if entry is not None:
                resolved[entry.id] = entry
        return resolved

    async def _ensure_not_allocated(self, sales_round_id: int) -> None:
        if await self._store.is_allocated(sales_round_id):
            raise WindowClosedError(
                f"queue numbers for sales round {sales_round_id} have been drawn",
                field="sales_round_id",
            )

    def _rejected(self, operation: str, error: ValidationError, **context) -> None:
        record_purchase_request(operation, error.code.value.lower())
        logger.info(
            "purchase_request_rejected",
            operation=operation,
            code=error.code.value,
            field=error.field,
            reason=error.message,
            **context,
        )
