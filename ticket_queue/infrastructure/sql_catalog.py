"""
SQLAlchemy-backed catalog gateways with a Redis read-through cache in front.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ticket_queue.domain.catalog import CatalogEntry, SalesRoundWindow
from ticket_queue.models import SalesRound, TicketType
from ticket_queue.services import cache_service
from ticket_queue.services.interfaces import SalesRoundGateway, TicketTypeCatalog


class SqlSalesRoundGateway(SalesRoundGateway):

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def resolve(self, sales_round_id: int) -> Optional[SalesRoundWindow]:
        cached = await cache_service.get_cached_sales_round(sales_round_id)
        if cached:
            return cached

        result = await self._db.execute(select(SalesRound).where(SalesRound.id == sales_round_id))
        row = result.scalar_one_or_none()
        if row is None:
            return None

        window = SalesRoundWindow(
            id=row.id,
            event_id=row.event_id,
            window_start=row.window_start,
            window_end=row.window_end,
        )
        await cache_service.set_cached_sales_round(window)
        return window


class SqlTicketTypeCatalog(TicketTypeCatalog):

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def resolve(self, ticket_type_id: int) -> Optional[CatalogEntry]:
        cached = await cache_service.get_cached_ticket_type(ticket_type_id)
        if cached:
            return cached

        result = await self._db.execute(select(TicketType).where(TicketType.id == ticket_type_id))
        row = result.scalar_one_or_none()
        if row is None:
            return None

        entry = CatalogEntry(id=row.id, event_id=row.event_id, name=row.name)
        await cache_service.set_cached_ticket_type(entry)
        return entry
