from ticket_queue.schemas.purchase_request import (
    ConfirmationItem,
    PurchaseRequestConfirmation,
    PurchaseRequestCreate,
    PurchaseRequestItemIn,
    PurchaseRequestItemResponse,
    PurchaseRequestResponse,
    PurchaseRequestUpdate,
)
from ticket_queue.schemas.allocation import ErrorResponse, QueueAllocationResponse

__all__ = [
    "PurchaseRequestCreate", "PurchaseRequestUpdate", "PurchaseRequestItemIn",
    "PurchaseRequestResponse", "PurchaseRequestItemResponse",
    "PurchaseRequestConfirmation", "ConfirmationItem",
    "QueueAllocationResponse", "ErrorResponse",
]
