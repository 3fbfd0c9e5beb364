"""
Role authorization gate.

One static table decides which role may perform each operation; services call
`authorize()` as their first step. Row visibility for reads is expressed as
SQLAlchemy filter clauses plus single-row checks, so list and detail endpoints
apply exactly the same rules.
"""

from enum import Enum
from typing import Dict, List

from sqlalchemy import exists, or_, select

from apps.procurement_requests.lifecycle import parse_request_status
from common.context import ActorContext
from common.errors import AuthorizationError
from constants.roles import Role
from constants.statuses import POStatus, RequestStatus
from models.procurement_request import ProcurementRequest
from models.purchase_order import PurchaseOrder


class Operation(str, Enum):
    CREATE_REQUEST = "create_request"
    REVIEW_REQUEST = "review_request"
    SUBMIT_VENDOR_OPTIONS = "submit_vendor_options"
    SELECT_VENDOR = "select_vendor"
    CREATE_PO = "create_po"
    REVIEW_PO = "review_po"
    UPDATE_PAYMENT = "update_payment"
    UPDATE_DELIVERY = "update_delivery"
    MANAGE_USERS = "manage_users"


PERMISSIONS: Dict[Operation, Role] = {
    Operation.CREATE_REQUEST: Role.HEAD_OF_DEPARTMENT,
    Operation.REVIEW_REQUEST: Role.ADMIN,
    Operation.SUBMIT_VENDOR_OPTIONS: Role.LOGISTICS,
    Operation.SELECT_VENDOR: Role.ADMIN,
    Operation.CREATE_PO: Role.LOGISTICS,
    Operation.REVIEW_PO: Role.HEAD_OF_DEPARTMENT,
    Operation.UPDATE_PAYMENT: Role.FINANCE,
    Operation.UPDATE_DELIVERY: Role.STORES,
    Operation.MANAGE_USERS: Role.ADMIN,
}

LOGISTICS_REQUEST_STATUSES = (
    RequestStatus.ADMIN_APPROVED,
    RequestStatus.VENDORS_SUBMITTED,
    RequestStatus.PO_CREATED,
)


def is_allowed(role: Role, operation: Operation) -> bool:
    return PERMISSIONS[operation] == role


def authorize(role: Role, operation: Operation) -> None:
    """
    Raise AuthorizationError unless `role` may perform `operation`.
    """
    if not is_allowed(role, operation):
        raise AuthorizationError("You do not have permission to perform this action")


# ---------------------------------------------------------------------------
# Procurement request visibility
# ---------------------------------------------------------------------------
def request_visibility_filters(ctx: ActorContext) -> List:
    filters = [ProcurementRequest.org_id == ctx.org_id]
    if ctx.role == Role.HEAD_OF_DEPARTMENT:
        filters.append(ProcurementRequest.requested_by_user_id == ctx.user_id)
    elif ctx.role == Role.LOGISTICS:
        filters.append(ProcurementRequest.status.in_([s.value for s in LOGISTICS_REQUEST_STATUSES]))
    elif ctx.role in (Role.FINANCE, Role.STORES):
        filters.append(ProcurementRequest.status == RequestStatus.PO_CREATED.value)
    return filters


def assert_can_view_request(ctx: ActorContext, request: ProcurementRequest) -> None:
    if ctx.role == Role.HEAD_OF_DEPARTMENT and request.requested_by_user_id != ctx.user_id:
        raise AuthorizationError("You can only view your own procurement requests")
    if ctx.role == Role.LOGISTICS and parse_request_status(request.status) not in LOGISTICS_REQUEST_STATUSES:
        raise AuthorizationError("You can only view procurement requests that are approved or in progress")
    if ctx.role in (Role.FINANCE, Role.STORES) and request.status != RequestStatus.PO_CREATED.value:
        raise AuthorizationError("You can only view procurement requests that resulted in purchase orders")


# ---------------------------------------------------------------------------
# Purchase order visibility
# ---------------------------------------------------------------------------
def _handled_by_logistics(user_id: int):
    return exists(
        select(ProcurementRequest.id).where(
            ProcurementRequest.po_id == PurchaseOrder.id,
            ProcurementRequest.logistics_submitted_by_user_id == user_id,
        )
    )


def po_visibility_filters(ctx: ActorContext) -> List:
    filters = [PurchaseOrder.org_id == ctx.org_id]
    if ctx.role == Role.LOGISTICS:
        filters.append(or_(PurchaseOrder.created_by_user_id == ctx.user_id, _handled_by_logistics(ctx.user_id)))
    elif ctx.role in (Role.FINANCE, Role.STORES):
        filters.append(PurchaseOrder.status == POStatus.APPROVED.value)
    return filters


def assert_can_view_po(ctx: ActorContext, po: PurchaseOrder, handled_request_ids: List[int]) -> None:
    """
    `handled_request_ids` are requests linked to this PO whose vendor options the actor submitted.
    """
    if ctx.role == Role.LOGISTICS and po.created_by_user_id != ctx.user_id and not handled_request_ids:
        raise AuthorizationError("You can only view your own purchase orders")
    if ctx.role in (Role.FINANCE, Role.STORES) and po.status != POStatus.APPROVED.value:
        raise AuthorizationError("You can only view approved purchase orders")
