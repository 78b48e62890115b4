"""
Purchase request endpoints: submit, replace items, read, confirmation.
"""

from fastapi import APIRouter, Depends, status

from ticket_queue.api.deps import get_customer_id, get_purchase_request_service
from ticket_queue.schemas.purchase_request import (
    PurchaseRequestConfirmation,
    PurchaseRequestCreate,
    PurchaseRequestResponse,
    PurchaseRequestUpdate,
)
from ticket_queue.services.purchase_request_service import PurchaseRequestService

router = APIRouter(prefix="/purchase-requests", tags=["Purchase Requests"])


@router.post("", response_model=PurchaseRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase_request(
    payload: PurchaseRequestCreate,
    customer_id: str = Depends(get_customer_id),
    service: PurchaseRequestService = Depends(get_purchase_request_service),
):
    """
    Submit a purchase request for an open sales round.

    At most 4 tickets per request. The request stays pending without a queue
    number until the round is allocated.
    """
    return await service.create_purchase_request(payload, customer_id)


@router.get("", response_model=list[PurchaseRequestResponse])
async def list_my_purchase_requests(
    customer_id: str = Depends(get_customer_id),
    service: PurchaseRequestService = Depends(get_purchase_request_service),
):
    """List the calling customer's purchase requests, newest first."""
    return await service.list_by_customer(customer_id)


@router.get("/{purchase_request_id}", response_model=PurchaseRequestResponse)
async def get_purchase_request(
    purchase_request_id: int,
    service: PurchaseRequestService = Depends(get_purchase_request_service),
):
    return await service.get_purchase_request(purchase_request_id)


@router.put("/{purchase_request_id}", response_model=PurchaseRequestResponse)
async def update_purchase_request(
    purchase_request_id: int,
    payload: PurchaseRequestUpdate,
    service: PurchaseRequestService = Depends(get_purchase_request_service),
):
    """Replace the whole item list while the sales round is still open."""
    return await service.update_purchase_request(purchase_request_id, payload)


@router.get("/{purchase_request_id}/confirmation", response_model=PurchaseRequestConfirmation)
async def get_purchase_request_confirmation(
    purchase_request_id: int,
    service: PurchaseRequestService = Depends(get_purchase_request_service),
):
    """Confirmation view: sales round window, ticket names and the queue number once drawn."""
    return await service.get_purchase_request_confirmation(purchase_request_id)
