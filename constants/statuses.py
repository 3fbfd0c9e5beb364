"""
Status vocabularies for procurement requests and purchase orders.

Stored values are the display strings. Older rows may carry legacy synonyms
("On Hold", "Delivered", ...); those are mapped onto the canonical members by
the normalize_* helpers at the read boundary and never reach the state
machines.
"""

from enum import Enum
from typing import Optional


class RequestStatus(str, Enum):
    PENDING_ADMIN_REVIEW = "Pending Admin Review"
    ADMIN_APPROVED = "Admin Approved"
    ADMIN_REJECTED = "Admin Rejected"
    ADMIN_HOLD = "Admin Hold"
    VENDORS_SUBMITTED = "Vendors Submitted"
    PO_CREATED = "PO Created"


class AdminDecision(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    HOLD = "Hold"


class POStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    HOLD = "Hold"


class PaymentStatus(str, Enum):
    NOT_PAID = "Not Paid"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"


class DeliveryStatus(str, Enum):
    NOT_RECEIVED = "Not Received"
    PARTIALLY_RECEIVED = "Partially Received"
    RECEIVED_DELIVERY = "Received Delivery"


TERMINAL_REQUEST_STATUSES = frozenset({RequestStatus.ADMIN_REJECTED, RequestStatus.PO_CREATED})

# Decisions an admin (request review) or a head of department (PO review) may hand down.
REVIEW_DECISIONS = (AdminDecision.APPROVED.value, AdminDecision.REJECTED.value, AdminDecision.HOLD.value)

PAID_STATUSES = frozenset({PaymentStatus.PAID, PaymentStatus.PARTIALLY_PAID})

LEGACY_PO_STATUSES = {
    "On Hold": POStatus.HOLD,
}

LEGACY_DELIVERY_STATUSES = {
    "Not Delivered": DeliveryStatus.NOT_RECEIVED,
    "Partially Delivered": DeliveryStatus.PARTIALLY_RECEIVED,
    "Delivered": DeliveryStatus.RECEIVED_DELIVERY,
}


def normalize_po_status(value: Optional[str]) -> Optional[POStatus]:
    if value is None:
        return None
    if value in LEGACY_PO_STATUSES:
        return LEGACY_PO_STATUSES[value]
    return POStatus(value)


def normalize_payment_status(value: Optional[str]) -> Optional[PaymentStatus]:
    if value is None:
        return None
    return PaymentStatus(value)


def normalize_delivery_status(value: Optional[str]) -> Optional[DeliveryStatus]:
    if value is None:
        return None
    if value in LEGACY_DELIVERY_STATUSES:
        return LEGACY_DELIVERY_STATUSES[value]
    return DeliveryStatus(value)
