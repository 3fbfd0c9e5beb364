"""
Procurement request lifecycle.

A pure transition table: (current status, event) -> next status. Anything not
listed is illegal and raises StateConflictError, so terminal states (Admin
Rejected, PO Created) accept no event at all.
"""

from enum import Enum
from typing import Dict, Tuple

from common.errors import IntegrityError, StateConflictError, ValidationError
from constants.statuses import AdminDecision, RequestStatus


class RequestEvent(str, Enum):
    APPROVE = "Approve"
    REJECT = "Reject"
    HOLD = "Hold"
    SUBMIT_VENDORS = "SubmitVendors"
    SELECT_VENDOR = "SelectVendor"


TRANSITIONS: Dict[Tuple[RequestStatus, RequestEvent], RequestStatus] = {
    (RequestStatus.PENDING_ADMIN_REVIEW, RequestEvent.APPROVE): RequestStatus.ADMIN_APPROVED,
    (RequestStatus.PENDING_ADMIN_REVIEW, RequestEvent.REJECT): RequestStatus.ADMIN_REJECTED,
    (RequestStatus.PENDING_ADMIN_REVIEW, RequestEvent.HOLD): RequestStatus.ADMIN_HOLD,
    (RequestStatus.ADMIN_HOLD, RequestEvent.APPROVE): RequestStatus.ADMIN_APPROVED,
    (RequestStatus.ADMIN_HOLD, RequestEvent.REJECT): RequestStatus.ADMIN_REJECTED,
    (RequestStatus.ADMIN_HOLD, RequestEvent.HOLD): RequestStatus.ADMIN_HOLD,
    (RequestStatus.ADMIN_APPROVED, RequestEvent.SUBMIT_VENDORS): RequestStatus.VENDORS_SUBMITTED,
    # Resubmission replaces the full vendor set without moving the request.
    (RequestStatus.VENDORS_SUBMITTED, RequestEvent.SUBMIT_VENDORS): RequestStatus.VENDORS_SUBMITTED,
    (RequestStatus.VENDORS_SUBMITTED, RequestEvent.SELECT_VENDOR): RequestStatus.PO_CREATED,
}

_DECISION_EVENTS = {
    AdminDecision.APPROVED: RequestEvent.APPROVE,
    AdminDecision.REJECTED: RequestEvent.REJECT,
    AdminDecision.HOLD: RequestEvent.HOLD,
}

_CONFLICT_MESSAGES = {
    RequestEvent.APPROVE: "Only pending or on-hold requests can be reviewed",
    RequestEvent.REJECT: "Only pending or on-hold requests can be reviewed",
    RequestEvent.HOLD: "Only pending or on-hold requests can be reviewed",
    RequestEvent.SUBMIT_VENDORS: "Vendor options can only be submitted for approved requests",
    RequestEvent.SELECT_VENDOR: "A vendor can only be selected once vendor options have been submitted",
}


def parse_request_status(status) -> RequestStatus:
    """
    Stored status as a RequestStatus; a value outside the vocabulary is corrupt data.
    """
    try:
        return RequestStatus(status)
    except ValueError:
        raise IntegrityError("Procurement request has an unrecognised status", details={"status": status})


def can_transition(status: RequestStatus, event: RequestEvent) -> bool:
    return (parse_request_status(status), event) in TRANSITIONS


def next_status(status: RequestStatus, event: RequestEvent) -> RequestStatus:
    current = parse_request_status(status)
    try:
        return TRANSITIONS[(current, event)]
    except KeyError:
        raise StateConflictError(_CONFLICT_MESSAGES[event], details={"status": current.value})


def decision_event(decision: str) -> RequestEvent:
    """
    Map an admin review decision to its lifecycle event.
    Only Approved, Rejected and Hold are decisions; anything else is invalid input.
    """
    try:
        return _DECISION_EVENTS[AdminDecision(decision)]
    except (ValueError, KeyError):
        raise ValidationError("Decision must be Approved, Rejected or Hold")
