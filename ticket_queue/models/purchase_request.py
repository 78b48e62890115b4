"""
Purchase request and its line items.

Key design decisions:
- queue_number stays NULL until the sales round is allocated
- (sales_round_id, queue_number) is unique, so a round can never hold two requests
  with the same position; NULLs do not collide
- Items are owned by their request: replacing the list deletes the old rows
- status is a plain string; only "pending" is set here, later states belong to fulfillment
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship

from ticket_queue.db.base import Base, TimestampMixin

PENDING = "pending"


class PurchaseRequest(Base, TimestampMixin):
    __tablename__ = "purchase_requests"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(String(20), nullable=False, default=PENDING)
    customer_id = Column(String(255), nullable=False, index=True)
    sales_round_id = Column(Integer, ForeignKey("sales_rounds.id"), nullable=False)
    queue_number = Column(Integer, nullable=True)

    sales_round = relationship("SalesRound", back_populates="purchase_requests")
    items = relationship(
        "PurchaseRequestItem",
        back_populates="purchase_request",
        cascade="all, delete-orphan",
        order_by="PurchaseRequestItem.id",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("sales_round_id", "queue_number", name="uq_sales_round_queue_number"),
        CheckConstraint("queue_number IS NULL OR queue_number > 0", name="check_queue_number_positive"),
        Index("ix_purchase_requests_sales_round", "sales_round_id"),
    )

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity_requested for item in self.items)

    def replace_items(self, validated_items) -> None:
        """Swap the whole item list; approvals always restart at zero."""
        self.items = [
            PurchaseRequestItem(
                ticket_type_id=item.ticket_type_id,
                quantity_requested=item.quantity_requested,
                quantity_approved=0,
            )
            for item in validated_items
        ]

    def __repr__(self) -> str:
        return (
            f"<PurchaseRequest(id={self.id}, round={self.sales_round_id}, "
            f"customer={self.customer_id}, queue={self.queue_number})>"
        )


class PurchaseRequestItem(Base):
    __tablename__ = "purchase_request_items"

    id = Column(Integer, primary_key=True)
    purchase_request_id = Column(
        Integer, ForeignKey("purchase_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ticket_type_id = Column(Integer, ForeignKey("ticket_types.id"), nullable=False)
    quantity_requested = Column(Integer, nullable=False)
    quantity_approved = Column(Integer, nullable=False, default=0)

    purchase_request = relationship("PurchaseRequest", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity_requested > 0", name="check_item_quantity_requested_positive"),
        CheckConstraint("quantity_approved >= 0", name="check_item_quantity_approved_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<PurchaseRequestItem(id={self.id}, ticket_type={self.ticket_type_id}, qty={self.quantity_requested})>"
