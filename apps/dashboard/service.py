"""
Role-specific dashboard counters.

Counts are grouped in SQL by the raw stored value and folded onto canonical
statuses in Python, so legacy synonyms ("On Hold", "Delivered", ...) land in
the same bucket as their canonical value. Every counter defaults to zero.
"""

import logging
from collections import Counter
from decimal import Decimal
from typing import Callable, Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from apps.dashboard.schemas import DashboardStats, ProcurementRequestStats
from common.context import ActorContext
from common.money import money_sum
from constants.roles import Role
from constants.statuses import (
    DeliveryStatus,
    PaymentStatus,
    POStatus,
    RequestStatus,
    normalize_delivery_status,
    normalize_payment_status,
    normalize_po_status,
)
from models.procurement_request import ProcurementRequest
from models.purchase_order import PurchaseOrder

logger = logging.getLogger(__name__)

REVIEWING_ROLES = (Role.HEAD_OF_DEPARTMENT, Role.ADMIN, Role.LOGISTICS)

# Logistics works the queue between admin approval and vendor selection.
LOGISTICS_QUEUE = (RequestStatus.ADMIN_APPROVED, RequestStatus.VENDORS_SUBMITTED)

_REQUEST_STAT_FIELDS = {
    RequestStatus.PENDING_ADMIN_REVIEW: "pending_admin_review",
    RequestStatus.ADMIN_APPROVED: "admin_approved",
    RequestStatus.ADMIN_HOLD: "admin_hold",
    RequestStatus.ADMIN_REJECTED: "admin_rejected",
    RequestStatus.VENDORS_SUBMITTED: "vendors_submitted",
    RequestStatus.PO_CREATED: "po_created",
}


def fold_counts(rows, normalize: Callable) -> Counter:
    """
    Sum (raw_value, count) rows onto canonical enum members.
    Values no normalizer recognises are skipped and logged.
    """
    folded: Counter = Counter()
    for raw, count in rows:
        try:
            member = normalize(raw)
        except ValueError:
            logger.warning("Ignoring unrecognised stored status %r in dashboard stats", raw)
            continue
        if member is not None:
            folded[member] += int(count or 0)
    return folded


def _po_scope(ctx: ActorContext) -> list:
    scope = [PurchaseOrder.org_id == ctx.org_id]
    if ctx.role == Role.LOGISTICS:
        scope.append(PurchaseOrder.created_by_user_id == ctx.user_id)
    elif ctx.role in (Role.FINANCE, Role.STORES):
        scope.append(PurchaseOrder.status == POStatus.APPROVED.value)
    return scope


def _request_scope(ctx: ActorContext) -> list:
    scope = [ProcurementRequest.org_id == ctx.org_id]
    if ctx.role == Role.HEAD_OF_DEPARTMENT:
        scope.append(ProcurementRequest.requested_by_user_id == ctx.user_id)
    elif ctx.role == Role.LOGISTICS:
        scope.append(ProcurementRequest.status.in_([s.value for s in LOGISTICS_QUEUE]))
    return scope


class DashboardService:
    @staticmethod
    async def _grouped(db: AsyncSession, column, scope: list):
        stmt = select(column, func.count()).where(*scope).group_by(column)
        res = await db.execute(stmt)
        return res.all()

    @staticmethod
    async def request_stats(db: AsyncSession, ctx: ActorContext) -> ProcurementRequestStats:
        rows = await DashboardService._grouped(db, ProcurementRequest.status, _request_scope(ctx))
        counts = fold_counts(rows, RequestStatus)

        values: Dict[str, int] = {field: counts.get(status, 0) for status, field in _REQUEST_STAT_FIELDS.items()}
        stats = ProcurementRequestStats(total=sum(counts.values()), **values)
        if ctx.role == Role.ADMIN:
            stats.pending_decision = stats.pending_admin_review + stats.admin_hold
        return stats

    @staticmethod
    async def get_stats(db: AsyncSession, ctx: ActorContext) -> DashboardStats:
        """
        Read-only summary for the caller's role. Tolerates empty tables.
        """
        scope = _po_scope(ctx)
        totals_stmt = select(func.count(PurchaseOrder.id), func.sum(PurchaseOrder.total_amount)).where(*scope)
        count, amount = (await db.execute(totals_stmt)).one()
        stats = DashboardStats(total=int(count or 0), totalAmount=money_sum([Decimal(str(amount or 0))]))

        if ctx.role in REVIEWING_ROLES:
            counts = fold_counts(await DashboardService._grouped(db, PurchaseOrder.status, scope), normalize_po_status)
            stats.pending = counts.get(POStatus.PENDING, 0)
            stats.approved = counts.get(POStatus.APPROVED, 0)
            stats.rejected = counts.get(POStatus.REJECTED, 0)
            stats.hold = counts.get(POStatus.HOLD, 0)
            stats.procurement_requests = await DashboardService.request_stats(db, ctx)
        elif ctx.role == Role.FINANCE:
            counts = fold_counts(
                await DashboardService._grouped(db, PurchaseOrder.payment_status, scope), normalize_payment_status
            )
            stats.not_paid = counts.get(PaymentStatus.NOT_PAID, 0)
            stats.partially_paid = counts.get(PaymentStatus.PARTIALLY_PAID, 0)
            stats.paid = counts.get(PaymentStatus.PAID, 0)
        elif ctx.role == Role.STORES:
            counts = fold_counts(
                await DashboardService._grouped(db, PurchaseOrder.delivery_status, scope), normalize_delivery_status
            )
            stats.not_received = counts.get(DeliveryStatus.NOT_RECEIVED, 0)
            stats.partially_received = counts.get(DeliveryStatus.PARTIALLY_RECEIVED, 0)
            stats.received_delivery = counts.get(DeliveryStatus.RECEIVED_DELIVERY, 0)

        return stats
