"""
FastAPI dependencies wiring services to the request's database session.
"""

import secrets

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from ticket_queue.core.clock import Clock, utcnow
from ticket_queue.db.session import get_db
from ticket_queue.infrastructure.sql_catalog import SqlSalesRoundGateway, SqlTicketTypeCatalog
from ticket_queue.infrastructure.sql_store import SqlPurchaseRequestStore
from ticket_queue.services.allocation_service import RandomFactory
from ticket_queue.services.purchase_request_service import PurchaseRequestService


def get_clock() -> Clock:
    return utcnow


def get_random_factory() -> RandomFactory:
    return secrets.SystemRandom


def get_customer_id(x_customer_id: str = Header(..., min_length=1, max_length=255)) -> str:
    """Customer identity as forwarded by the authenticating gateway."""
    return x_customer_id


def get_store(db: AsyncSession = Depends(get_db)) -> SqlPurchaseRequestStore:
    return SqlPurchaseRequestStore(db)


def get_purchase_request_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PurchaseRequestService:
    return PurchaseRequestService(
        store=SqlPurchaseRequestStore(db),
        sales_rounds=SqlSalesRoundGateway(db),
        ticket_types=SqlTicketTypeCatalog(db),
        clock=clock,
    )
