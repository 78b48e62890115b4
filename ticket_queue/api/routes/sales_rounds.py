"""
Sales round endpoints: queue allocation and per-round listing.
"""

from fastapi import APIRouter, Depends

from ticket_queue.api.deps import get_clock, get_purchase_request_service, get_random_factory, get_store
from ticket_queue.core.clock import Clock
from ticket_queue.infrastructure.sql_store import SqlPurchaseRequestStore
from ticket_queue.schemas.allocation import QueueAllocationResponse
from ticket_queue.schemas.purchase_request import PurchaseRequestResponse
from ticket_queue.services.allocation_service import RandomFactory, allocate_queue_numbers
from ticket_queue.services.purchase_request_service import PurchaseRequestService

router = APIRouter(prefix="/sales-rounds", tags=["Sales Rounds"])


@router.post("/{sales_round_id}/allocation", response_model=QueueAllocationResponse)
async def allocate_sales_round(
    sales_round_id: int,
    store: SqlPurchaseRequestStore = Depends(get_store),
    rng_factory: RandomFactory = Depends(get_random_factory),
    clock: Clock = Depends(get_clock),
):
    """
    Draw queue numbers for every purchase request in the round.

    Meant to be triggered once by the round-close scheduler. A second call
    returns 409 and leaves the existing order untouched.
    """
    return await allocate_queue_numbers(store, sales_round_id, rng_factory=rng_factory, clock=clock)


@router.get("/{sales_round_id}/purchase-requests", response_model=list[PurchaseRequestResponse])
async def list_sales_round_purchase_requests(
    sales_round_id: int,
    service: PurchaseRequestService = Depends(get_purchase_request_service),
):
    """All purchase requests of a round, in queue order once allocated."""
    return await service.list_by_sales_round(sales_round_id)
