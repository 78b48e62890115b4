"""
Pydantic schemas for purchase request payloads.

Input schemas only check shape and types. Business rules (non-empty items,
known references, open window, ticket cap) are enforced by the intake rules
so that every violation comes back with its own error code.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class PurchaseRequestItemIn(BaseModel):
    ticket_type_id: Optional[int] = None
    quantity_requested: int


class PurchaseRequestCreate(BaseModel):
    sales_round_id: Optional[int] = None
    items: list[PurchaseRequestItemIn] = Field(default_factory=list)


class PurchaseRequestUpdate(PurchaseRequestCreate):
    pass


class PurchaseRequestItemResponse(BaseModel):
    id: int
    ticket_type_id: int
    quantity_requested: int
    quantity_approved: int

    model_config = {"from_attributes": True}


class PurchaseRequestResponse(BaseModel):
    id: int
    status: str
    customer_id: str
    sales_round_id: int
    queue_number: Optional[int]
    items: list[PurchaseRequestItemResponse]
    created_at: datetime

    model_config = {"from_attributes": True}


class ConfirmationItem(BaseModel):
    ticket_type_id: int
    ticket_type_name: str
    quantity_requested: int
    quantity_approved: int


class PurchaseRequestConfirmation(BaseModel):
    """What a customer is shown for a submitted request: round, tickets and queue position."""

    purchase_request_id: int
    status: str
    customer_id: str
    sales_round_id: int
    event_id: int
    window_start: datetime
    window_end: datetime
    queue_number: Optional[int]
    total_tickets: int
    items: list[ConfirmationItem]
