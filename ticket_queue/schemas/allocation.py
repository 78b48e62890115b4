"""
Pydantic schemas for queue allocation responses.
"""

from datetime import datetime
from pydantic import BaseModel


class QueueAllocationResponse(BaseModel):
    sales_round_id: int
    request_count: int
    allocated_at: datetime

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    code: str
    detail: str
    field: str | None = None
