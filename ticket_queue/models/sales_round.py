"""
Sales round and ticket type catalog tables.

Both are owned by catalog management. This service only reads them, and locks
the sales round row so that intake and queue allocation for one round never interleave.
"""

from sqlalchemy import Column, Integer, String, Index, CheckConstraint
from sqlalchemy.orm import relationship

from ticket_queue.db.base import Base, TimestampMixin, UTCDateTime


class SalesRound(Base, TimestampMixin):
    __tablename__ = "sales_rounds"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    window_start = Column(UTCDateTime(), nullable=False)
    window_end = Column(UTCDateTime(), nullable=False)

    purchase_requests = relationship("PurchaseRequest", back_populates="sales_round")
    allocation = relationship("QueueAllocation", back_populates="sales_round", uselist=False)

    __table_args__ = (
        CheckConstraint("window_start < window_end", name="check_sales_round_window"),
        Index("ix_sales_rounds_window", "window_start", "window_end"),
    )

    def __repr__(self) -> str:
        return f"<SalesRound(id={self.id}, event={self.event_id}, {self.window_start}..{self.window_end})>"


class TicketType(Base, TimestampMixin):
    __tablename__ = "ticket_types"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, nullable=False, index=True)
    name = Column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<TicketType(id={self.id}, event={self.event_id}, name={self.name})>"
