"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from ticket_queue.api.routes import purchase_requests, sales_rounds

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(purchase_requests.router)
api_router.include_router(sales_rounds.router)
