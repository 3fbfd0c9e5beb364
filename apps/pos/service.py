import logging
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apps.audit.service import AuditLogService
from apps.pos.materializer import build_direct_po
from apps.pos.schemas import (
    DeliveryUpdateRequest,
    POCreate,
    PODetailResponse,
    POItemOut,
    POResponse,
    POReviewRequest,
    PaymentUpdateRequest,
    StatusUpdateOut,
)
from common.context import ActorContext
from common.errors import IntegrityError, NotFoundError, StateConflictError, ValidationError
from common.responses import success_response
from constants.statuses import (
    PAID_STATUSES,
    REVIEW_DECISIONS,
    DeliveryStatus,
    PaymentStatus,
    POStatus,
    normalize_delivery_status,
    normalize_payment_status,
    normalize_po_status,
)
from models.base import utcnow
from models.procurement_request import ProcurementRequest
from models.purchase_order import DeliveryUpdate, PaymentUpdate, PurchaseOrder
from security.authorization import Operation, assert_can_view_po, authorize, po_visibility_filters

logger = logging.getLogger(__name__)

ENTITY_TYPE = "purchase_order"


def _display(normalize: Callable, value: Optional[str]) -> Optional[str]:
    # Unknown stored values are shown as-is rather than failing the whole read.
    try:
        member = normalize(value)
    except ValueError:
        return value
    return member.value if member is not None else None


def _canonical(normalize: Callable, value: Optional[str], label: str):
    try:
        return normalize(value)
    except ValueError:
        raise IntegrityError(f"Purchase order has an unrecognised {label}", details={label: value})


def _serialize_history(rows) -> List[StatusUpdateOut]:
    return [
        StatusUpdateOut(
            id=row.id,
            oldStatus=row.old_status,
            newStatus=row.new_status,
            notes=row.notes,
            updatedByUserId=row.updated_by_user_id,
            createdAt=row.created_at,
        )
        for row in rows
    ]


def serialize_po(po: PurchaseOrder, detail: bool = False) -> POResponse:
    fields = dict(
        id=po.id,
        poNumber=po.po_number,
        vendorName=po.vendor_name,
        description=po.description,
        totalAmount=po.total_amount,
        status=_display(normalize_po_status, po.status),
        paymentStatus=_display(normalize_payment_status, po.payment_status),
        deliveryStatus=_display(normalize_delivery_status, po.delivery_status),
        createdByUserId=po.created_by_user_id,
        createdByName=po.created_by.full_name if po.created_by else None,
        reviewedByUserId=po.reviewed_by_user_id,
        reviewedByName=po.reviewed_by.full_name if po.reviewed_by else None,
        reviewedAt=po.reviewed_at,
        reviewNotes=po.review_notes,
        createdAt=po.created_at,
        updatedAt=po.updated_at,
        items=[POItemOut.model_validate(item) for item in po.items],
    )
    if not detail:
        return POResponse(**fields)
    return PODetailResponse(
        **fields,
        paymentUpdates=_serialize_history(po.payment_updates),
        deliveryUpdates=_serialize_history(po.delivery_updates),
    )


class POService:
    @staticmethod
    async def _lock_po(db: AsyncSession, ctx: ActorContext, po_id: int) -> PurchaseOrder:
        stmt = (
            select(PurchaseOrder)
            .where(PurchaseOrder.id == po_id, PurchaseOrder.org_id == ctx.org_id)
            .with_for_update(of=PurchaseOrder)
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        po = res.scalar_one_or_none()
        if not po:
            raise NotFoundError("Purchase order not found")
        return po

    @staticmethod
    async def create_po(db: AsyncSession, ctx: ActorContext, payload: POCreate) -> dict:
        """
        Logistics enters a purchase order directly; it waits for head-of-department review.
        """
        authorize(ctx.role, Operation.CREATE_PO)
        po = build_direct_po(ctx, payload.vendor_name, payload.description, payload.items)

        try:
            db.add(po)
            await db.flush()
            AuditLogService.log_action(
                db,
                ctx,
                "PO_CREATED",
                ENTITY_TYPE,
                po.id,
                {"poNumber": po.po_number, "vendorName": po.vendor_name, "totalAmount": po.total_amount},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Purchase order %s created by user %s", po.po_number, ctx.user_id)
        return success_response("Purchase order created successfully", poId=po.id, poNumber=po.po_number)

    @staticmethod
    async def list_pos(db: AsyncSession, ctx: ActorContext) -> List[POResponse]:
        stmt = (
            select(PurchaseOrder)
            .where(*po_visibility_filters(ctx))
            .order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc())
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        return [serialize_po(po) for po in res.scalars().all()]

    @staticmethod
    async def get_po(db: AsyncSession, ctx: ActorContext, po_id: int) -> PODetailResponse:
        stmt = (
            select(PurchaseOrder)
            .where(PurchaseOrder.id == po_id, PurchaseOrder.org_id == ctx.org_id)
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        po = res.scalar_one_or_none()
        if not po:
            raise NotFoundError("Purchase order not found")

        handled_stmt = select(ProcurementRequest.id).where(
            ProcurementRequest.po_id == po.id,
            ProcurementRequest.logistics_submitted_by_user_id == ctx.user_id,
        )
        handled = (await db.execute(handled_stmt)).scalars().all()
        assert_can_view_po(ctx, po, list(handled))
        return serialize_po(po, detail=True)

    @staticmethod
    async def review_po(db: AsyncSession, ctx: ActorContext, po_id: int, payload: POReviewRequest) -> dict:
        """
        One-shot review of a pending purchase order by the head of department.
        """
        authorize(ctx.role, Operation.REVIEW_PO)
        if payload.status not in REVIEW_DECISIONS:
            raise ValidationError("Status must be Approved, Rejected or Hold")

        try:
            po = await POService._lock_po(db, ctx, po_id)
            current = _canonical(normalize_po_status, po.status, "status")
            if current != POStatus.PENDING:
                raise StateConflictError(
                    "Only pending purchase orders can be reviewed", details={"status": current.value}
                )

            new_status = POStatus(payload.status)
            po.status = new_status.value
            po.reviewed_by_user_id = ctx.user_id
            po.reviewed_at = utcnow()
            po.review_notes = payload.notes or None

            AuditLogService.log_action(
                db, ctx, "PO_REVIEWED", ENTITY_TYPE, po.id, {"from": current.value, "to": new_status.value}
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Purchase order %s reviewed (%s) by user %s", po.po_number, new_status.value, ctx.user_id)
        return success_response(
            f"Purchase order {new_status.value.lower()}", poId=po.id, status=new_status.value
        )

    @staticmethod
    async def update_payment(db: AsyncSession, ctx: ActorContext, po_id: int, payload: PaymentUpdateRequest) -> dict:
        authorize(ctx.role, Operation.UPDATE_PAYMENT)
        try:
            new_status = PaymentStatus(payload.payment_status)
        except ValueError:
            raise ValidationError("Payment status must be Not Paid, Partially Paid or Paid")

        try:
            po = await POService._lock_po(db, ctx, po_id)
            if _canonical(normalize_po_status, po.status, "status") != POStatus.APPROVED:
                raise StateConflictError("Payment can only be updated for approved purchase orders")

            old_status = _canonical(normalize_payment_status, po.payment_status, "paymentStatus")
            po.payment_status = new_status.value
            po.payment_updates.append(
                PaymentUpdate(
                    po_id=po.id,
                    updated_by_user_id=ctx.user_id,
                    old_status=old_status.value if old_status else None,
                    new_status=new_status.value,
                    notes=payload.notes or None,
                )
            )
            AuditLogService.log_action(
                db,
                ctx,
                "PAYMENT_UPDATED",
                ENTITY_TYPE,
                po.id,
                {"from": old_status.value if old_status else None, "to": new_status.value},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Payment for %s set to %s by user %s", po.po_number, new_status.value, ctx.user_id)
        return success_response("Payment status updated", poId=po.id, paymentStatus=new_status.value)

    @staticmethod
    async def update_delivery(
        db: AsyncSession, ctx: ActorContext, po_id: int, payload: DeliveryUpdateRequest
    ) -> dict:
        """
        Stores records receipt of goods. Only approved purchase orders that are at
        least partially paid can be marked as received.
        """
        authorize(ctx.role, Operation.UPDATE_DELIVERY)
        try:
            new_status = DeliveryStatus(payload.delivery_status)
        except ValueError:
            raise ValidationError("Delivery status must be Not Received, Partially Received or Received Delivery")

        try:
            po = await POService._lock_po(db, ctx, po_id)
            if _canonical(normalize_po_status, po.status, "status") != POStatus.APPROVED:
                raise StateConflictError("Delivery can only be updated for approved purchase orders")
            if _canonical(normalize_payment_status, po.payment_status, "paymentStatus") not in PAID_STATUSES:
                raise StateConflictError("Delivery can only be updated once payment has been made")

            old_status = _canonical(normalize_delivery_status, po.delivery_status, "deliveryStatus")
            po.delivery_status = new_status.value
            po.delivery_updates.append(
                DeliveryUpdate(
                    po_id=po.id,
                    updated_by_user_id=ctx.user_id,
                    old_status=old_status.value if old_status else None,
                    new_status=new_status.value,
                    notes=payload.notes or None,
                )
            )
            AuditLogService.log_action(
                db,
                ctx,
                "DELIVERY_UPDATED",
                ENTITY_TYPE,
                po.id,
                {"from": old_status.value if old_status else None, "to": new_status.value},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Delivery for %s set to %s by user %s", po.po_number, new_status.value, ctx.user_id)
        return success_response("Delivery status updated", poId=po.id, deliveryStatus=new_status.value)
