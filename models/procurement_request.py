from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from models.base import Base, utcnow
from constants.statuses import RequestStatus, AdminDecision


class ProcurementRequest(Base):
    """
    Root of the approval workflow.
    `selected_vendor_option_id` and `po_id` are written exactly once, when the PO is created.
    `selected_vendor_option_id` is a plain column (no FK) to avoid a table cycle with vendor options.
    """
    __tablename__ = "procurement_requests"

    id = Column(Integer, primary_key=True)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    request_number = Column(String(64), nullable=False, unique=True, index=True)
    requested_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    overall_reason = Column(Text, nullable=True)

    status = Column(String(32), nullable=False, default=RequestStatus.PENDING_ADMIN_REVIEW.value, index=True)
    admin_decision = Column(String(16), nullable=False, default=AdminDecision.PENDING.value)
    admin_notes = Column(Text, nullable=True)
    admin_reviewed_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    admin_reviewed_at = Column(DateTime(timezone=True), nullable=True)

    logistics_submitted_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    logistics_submitted_at = Column(DateTime(timezone=True), nullable=True)

    selected_vendor_option_id = Column(Integer, nullable=True)
    po_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "RequestItem",
        back_populates="request",
        lazy="selectin",
        order_by="RequestItem.id",
        cascade="all, delete-orphan",
    )
    vendor_options = relationship(
        "VendorOption",
        back_populates="request",
        lazy="selectin",
        order_by="VendorOption.id",
        cascade="all, delete-orphan",
    )
    requested_by = relationship("User", foreign_keys=[requested_by_user_id], lazy="joined")
    admin_reviewer = relationship("User", foreign_keys=[admin_reviewed_by_user_id], lazy="joined")
    logistics_submitter = relationship("User", foreign_keys=[logistics_submitted_by_user_id], lazy="joined")
    purchase_order = relationship("PurchaseOrder", lazy="joined")


class RequestItem(Base):
    """
    One requested line. Quantity is fixed at creation and never changes.
    """
    __tablename__ = "procurement_request_items"

    id = Column(Integer, primary_key=True)
    request_id = Column(Integer, ForeignKey("procurement_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    justification = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    request = relationship("ProcurementRequest", back_populates="items")


class VendorOption(Base):
    """
    One vendor's quote against the full item list of a request.
    All options of a request are replaced together on every submission.
    """
    __tablename__ = "procurement_vendor_options"

    id = Column(Integer, primary_key=True)
    request_id = Column(Integer, ForeignKey("procurement_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    vendor_name = Column(String(255), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text, nullable=True)
    submitted_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    request = relationship("ProcurementRequest", back_populates="vendor_options")
    items = relationship(
        "VendorOptionItem",
        back_populates="vendor_option",
        lazy="selectin",
        order_by="VendorOptionItem.request_item_id",
        cascade="all, delete-orphan",
    )
    submitted_by = relationship("User", lazy="joined")


class VendorOptionItem(Base):
    """
    Unit price for one request item within a vendor option; total_price = quantity x unit_price.
    """
    __tablename__ = "procurement_vendor_option_items"

    id = Column(Integer, primary_key=True)
    vendor_option_id = Column(
        Integer, ForeignKey("procurement_vendor_options.id", ondelete="CASCADE"), nullable=False, index=True
    )
    request_item_id = Column(
        Integer, ForeignKey("procurement_request_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    vendor_option = relationship("VendorOption", back_populates="items")
