from ticket_queue.models.sales_round import SalesRound, TicketType
from ticket_queue.models.purchase_request import PENDING, PurchaseRequest, PurchaseRequestItem
from ticket_queue.models.queue_allocation import QueueAllocation

__all__ = [
    "SalesRound", "TicketType",
    "PurchaseRequest", "PurchaseRequestItem", "PENDING",
    "QueueAllocation",
]
