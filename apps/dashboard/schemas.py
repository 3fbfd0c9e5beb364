from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field as PydanticField


class ProcurementRequestStats(BaseModel):
    total: int = 0
    pending_admin_review: int = PydanticField(default=0, alias="pendingAdminReview")
    admin_approved: int = PydanticField(default=0, alias="adminApproved")
    admin_hold: int = PydanticField(default=0, alias="adminHold")
    admin_rejected: int = PydanticField(default=0, alias="adminRejected")
    vendors_submitted: int = PydanticField(default=0, alias="vendorsSubmitted")
    po_created: int = PydanticField(default=0, alias="poCreated")
    pending_decision: Optional[int] = PydanticField(default=None, alias="pendingDecision")

    class Config:
        populate_by_name = True


class DashboardStats(BaseModel):
    total: int = 0
    total_amount: Decimal = PydanticField(default=Decimal("0.00"), alias="totalAmount")

    # PO review counts (Head of Department, Admin, Logistics)
    pending: Optional[int] = None
    approved: Optional[int] = None
    rejected: Optional[int] = None
    hold: Optional[int] = None

    # Finance
    not_paid: Optional[int] = PydanticField(default=None, alias="notPaid")
    partially_paid: Optional[int] = PydanticField(default=None, alias="partiallyPaid")
    paid: Optional[int] = None

    # Stores
    not_received: Optional[int] = PydanticField(default=None, alias="notReceived")
    partially_received: Optional[int] = PydanticField(default=None, alias="partiallyReceived")
    received_delivery: Optional[int] = PydanticField(default=None, alias="receivedDelivery")

    procurement_requests: Optional[ProcurementRequestStats] = PydanticField(default=None, alias="procurementRequests")

    class Config:
        populate_by_name = True


class DashboardStatsResponse(BaseModel):
    success: bool = True
    stats: DashboardStats
