from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base import Base, utcnow
from constants.statuses import POStatus, PaymentStatus, DeliveryStatus


class PurchaseOrder(Base):
    """
    Purchase Order with independent review, payment and delivery statuses.
    Status columns are plain strings: legacy synonyms may exist in older rows and are
    normalised when read (see constants.statuses).
    """
    __tablename__ = "purchase_orders"
    __table_args__ = (
        UniqueConstraint("po_number", name="uq_purchase_orders_po_number"),
    )

    id = Column(Integer, primary_key=True)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    po_number = Column(String(64), nullable=False, index=True)
    created_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    vendor_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)

    status = Column(String(32), nullable=False, default=POStatus.PENDING.value, index=True)
    payment_status = Column(String(32), nullable=False, default=PaymentStatus.NOT_PAID.value)
    delivery_status = Column(String(32), nullable=False, default=DeliveryStatus.NOT_RECEIVED.value)

    reviewed_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "POItem", back_populates="purchase_order", lazy="selectin", order_by="POItem.id", cascade="all, delete-orphan"
    )
    payment_updates = relationship(
        "PaymentUpdate", lazy="selectin", order_by="PaymentUpdate.id", cascade="all, delete-orphan"
    )
    delivery_updates = relationship(
        "DeliveryUpdate", lazy="selectin", order_by="DeliveryUpdate.id", cascade="all, delete-orphan"
    )
    created_by = relationship("User", foreign_keys=[created_by_user_id], lazy="joined")
    reviewed_by = relationship("User", foreign_keys=[reviewed_by_user_id], lazy="joined")


class POItem(Base):
    __tablename__ = "po_items"

    id = Column(Integer, primary_key=True)
    po_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    purchase_order = relationship("PurchaseOrder", back_populates="items")


class PaymentUpdate(Base):
    """
    Append-only history of payment status changes.
    """
    __tablename__ = "payment_updates"

    id = Column(Integer, primary_key=True)
    po_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    updated_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    old_status = Column(String(32), nullable=True)
    new_status = Column(String(32), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class DeliveryUpdate(Base):
    """
    Append-only history of delivery status changes.
    """
    __tablename__ = "delivery_updates"

    id = Column(Integer, primary_key=True)
    po_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    updated_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    old_status = Column(String(32), nullable=True)
    new_status = Column(String(32), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
