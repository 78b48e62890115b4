"""
Record of a completed queue allocation.

One row per sales round, written in the same transaction as the queue numbers.
The primary key on sales_round_id turns a second allocation of the same round
into a constraint violation even if two schedulers race.
"""

from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship

from ticket_queue.db.base import Base, UTCDateTime


class QueueAllocation(Base):
    __tablename__ = "queue_allocations"

    sales_round_id = Column(Integer, ForeignKey("sales_rounds.id"), primary_key=True)
    request_count = Column(Integer, nullable=False)
    allocated_at = Column(UTCDateTime(), nullable=False)

    sales_round = relationship("SalesRound", back_populates="allocation")

    def __repr__(self) -> str:
        return f"<QueueAllocation(round={self.sales_round_id}, requests={self.request_count})>"
