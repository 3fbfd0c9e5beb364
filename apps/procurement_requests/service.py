import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apps.audit.service import AuditLogService
from apps.pos.materializer import materialize_from_vendor_option
from apps.procurement_requests.lifecycle import RequestEvent, decision_event, next_status
from apps.procurement_requests.schemas import (
    AdminReviewRequest,
    ProcurementRequestCreate,
    ProcurementRequestOut,
    RequestItemOut,
    UserSummary,
    VendorOptionIn,
    VendorOptionItemOut,
    VendorOptionOut,
)
from common.context import ActorContext
from common.errors import NotFoundError, ValidationError
from common.identifiers import generate_request_number
from common.money import MAX_QUANTITY, line_total, money_sum, to_money, valid_quantity, within_amount_limit
from common.responses import success_response
from constants.statuses import AdminDecision, RequestStatus
from models.base import utcnow
from models.procurement_request import ProcurementRequest, RequestItem, VendorOption, VendorOptionItem
from models.user import User
from security.authorization import Operation, assert_can_view_request, authorize, request_visibility_filters

logger = logging.getLogger(__name__)

REQUIRED_VENDOR_OPTIONS = 3
ENTITY_TYPE = "procurement_request"


def _user_summary(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, fullName=user.full_name, email=user.email)


def serialize_request(request: ProcurementRequest) -> ProcurementRequestOut:
    request_items = {item.id: item for item in request.items}
    vendor_options = []
    for option in request.vendor_options:
        priced = []
        for entry in option.items:
            source = request_items.get(entry.request_item_id)
            priced.append(
                VendorOptionItemOut(
                    id=entry.id,
                    requestItemId=entry.request_item_id,
                    itemName=source.item_name if source else None,
                    quantity=source.quantity if source else None,
                    unitPrice=entry.unit_price,
                    totalPrice=entry.total_price,
                )
            )
        vendor_options.append(
            VendorOptionOut(
                id=option.id,
                vendorName=option.vendor_name,
                totalPrice=option.total_price,
                notes=option.notes,
                isSelected=option.id == request.selected_vendor_option_id,
                createdAt=option.created_at,
                items=priced,
            )
        )

    return ProcurementRequestOut(
        id=request.id,
        requestNumber=request.request_number,
        title=request.title,
        overallReason=request.overall_reason,
        status=request.status,
        adminDecision=request.admin_decision,
        adminNotes=request.admin_notes,
        adminReviewedAt=request.admin_reviewed_at,
        logisticsSubmittedAt=request.logistics_submitted_at,
        requestedBy=_user_summary(request.requested_by),
        adminReviewedBy=_user_summary(request.admin_reviewer),
        logisticsSubmittedBy=_user_summary(request.logistics_submitter),
        selectedVendorOptionId=request.selected_vendor_option_id,
        poId=request.po_id,
        poNumber=request.purchase_order.po_number if request.purchase_order else None,
        createdAt=request.created_at,
        updatedAt=request.updated_at,
        items=[RequestItemOut.model_validate(item) for item in request.items],
        vendorOptions=vendor_options,
    )


def _build_request_items(payload: ProcurementRequestCreate) -> List[RequestItem]:
    if not payload.items:
        raise ValidationError("At least one item is required")
    items: List[RequestItem] = []
    for index, item in enumerate(payload.items, start=1):
        if not item.item_name:
            raise ValidationError(f"Item {index} is missing a name")
        if not valid_quantity(item.quantity):
            raise ValidationError(
                f"Item {index} must have a quantity greater than zero", details={"maxQuantity": MAX_QUANTITY}
            )
        items.append(
            RequestItem(item_name=item.item_name, quantity=item.quantity, justification=item.justification or None)
        )
    return items


def _build_vendor_options(
    ctx: ActorContext, request: ProcurementRequest, vendors: List[VendorOptionIn]
) -> List[VendorOption]:
    """
    Validate every vendor against the request's current items and build the replacement set.
    Nothing is attached to the session here, so a failure leaves the stored options untouched.
    """
    request_items: Dict[int, RequestItem] = {item.id: item for item in request.items}
    options: List[VendorOption] = []
    for index, vendor in enumerate(vendors, start=1):
        if not vendor.vendor_name:
            raise ValidationError(f"Vendor {index} is missing a name")
        if len(vendor.items) != len(request_items):
            raise ValidationError(
                f"Vendor {index} must price every requested item exactly once",
                details={"expected": len(request_items), "received": len(vendor.items)},
            )

        seen = set()
        priced: List[VendorOptionItem] = []
        for entry in vendor.items:
            source = request_items.get(entry.request_item_id)
            if source is None:
                raise ValidationError(
                    f"Vendor {index} prices an item that is not part of this request",
                    details={"requestItemId": entry.request_item_id},
                )
            if entry.request_item_id in seen:
                raise ValidationError(
                    f"Vendor {index} prices the same item more than once",
                    details={"requestItemId": entry.request_item_id},
                )
            seen.add(entry.request_item_id)

            unit_price = to_money(entry.unit_price)
            if unit_price is None or unit_price < 0:
                raise ValidationError(
                    f"Vendor {index} has an invalid unit price",
                    details={"requestItemId": entry.request_item_id},
                )
            total_price = line_total(source.quantity, unit_price)
            if not within_amount_limit(total_price):
                raise ValidationError(
                    f"Vendor {index} line total exceeds the maximum order amount",
                    details={"requestItemId": entry.request_item_id},
                )
            priced.append(
                VendorOptionItem(request_item_id=source.id, unit_price=unit_price, total_price=total_price)
            )

        option_total = money_sum(p.total_price for p in priced)
        if not within_amount_limit(option_total):
            raise ValidationError(f"Vendor {index} total exceeds the maximum order amount")
        options.append(
            VendorOption(
                vendor_name=vendor.vendor_name,
                notes=vendor.notes or None,
                submitted_by_user_id=ctx.user_id,
                total_price=option_total,
                items=priced,
            )
        )
    return options


class ProcurementRequestService:
    @staticmethod
    async def _lock_request(db: AsyncSession, ctx: ActorContext, request_id: int) -> ProcurementRequest:
        """
        Load the request row FOR UPDATE (within the actor's organization) with fresh state.
        """
        stmt = (
            select(ProcurementRequest)
            .where(ProcurementRequest.id == request_id, ProcurementRequest.org_id == ctx.org_id)
            .with_for_update(of=ProcurementRequest)
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        request = res.scalar_one_or_none()
        if not request:
            raise NotFoundError("Procurement request not found")
        return request

    @staticmethod
    async def create_request(db: AsyncSession, ctx: ActorContext, payload: ProcurementRequestCreate) -> dict:
        authorize(ctx.role, Operation.CREATE_REQUEST)
        if not payload.title:
            raise ValidationError("Title is required")
        items = _build_request_items(payload)

        try:
            request = ProcurementRequest(
                org_id=ctx.org_id,
                request_number=generate_request_number(ctx.org_id),
                requested_by_user_id=ctx.user_id,
                title=payload.title,
                overall_reason=payload.overall_reason or None,
                status=RequestStatus.PENDING_ADMIN_REVIEW.value,
                admin_decision=AdminDecision.PENDING.value,
                items=items,
            )
            db.add(request)
            await db.flush()
            AuditLogService.log_action(
                db,
                ctx,
                "PROCUREMENT_REQUEST_CREATED",
                ENTITY_TYPE,
                request.id,
                {"requestNumber": request.request_number, "itemCount": len(items)},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Procurement request %s created by user %s", request.request_number, ctx.user_id)
        return success_response(
            "Procurement request created successfully",
            requestId=request.id,
            requestNumber=request.request_number,
        )

    @staticmethod
    async def list_requests(db: AsyncSession, ctx: ActorContext) -> List[ProcurementRequestOut]:
        stmt = (
            select(ProcurementRequest)
            .where(*request_visibility_filters(ctx))
            .order_by(ProcurementRequest.created_at.desc(), ProcurementRequest.id.desc())
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        return [serialize_request(request) for request in res.scalars().all()]

    @staticmethod
    async def get_request(db: AsyncSession, ctx: ActorContext, request_id: int) -> ProcurementRequestOut:
        stmt = (
            select(ProcurementRequest)
            .where(ProcurementRequest.id == request_id, ProcurementRequest.org_id == ctx.org_id)
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        request = res.scalar_one_or_none()
        if not request:
            raise NotFoundError("Procurement request not found")
        assert_can_view_request(ctx, request)
        return serialize_request(request)

    @staticmethod
    async def admin_review(db: AsyncSession, ctx: ActorContext, request_id: int, payload: AdminReviewRequest) -> dict:
        """
        Approve, reject or hold a request awaiting review.
        Hold is re-entrant so an admin can update notes; Rejected is final.
        """
        authorize(ctx.role, Operation.REVIEW_REQUEST)
        event = decision_event(payload.decision)

        try:
            request = await ProcurementRequestService._lock_request(db, ctx, request_id)
            previous_status = request.status
            new_status = next_status(request.status, event)

            request.status = new_status.value
            request.admin_decision = AdminDecision(payload.decision).value
            request.admin_notes = payload.notes or None
            request.admin_reviewed_by_user_id = ctx.user_id
            request.admin_reviewed_at = utcnow()

            AuditLogService.log_action(
                db,
                ctx,
                "PROCUREMENT_REQUEST_REVIEWED",
                ENTITY_TYPE,
                request.id,
                {"decision": payload.decision, "from": previous_status, "to": new_status.value},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Procurement request %s reviewed (%s -> %s) by user %s",
            request.request_number,
            previous_status,
            new_status.value,
            ctx.user_id,
        )
        return success_response(
            f"Procurement request {payload.decision.lower()}",
            requestId=request.id,
            status=new_status.value,
        )

    @staticmethod
    async def submit_vendor_options(
        db: AsyncSession, ctx: ActorContext, request_id: int, vendors: List[VendorOptionIn]
    ) -> dict:
        """
        Replace the request's vendor options with exactly three fully priced quotes.
        Every vendor must price every request item once; totals are recomputed here,
        never taken from the client.
        """
        authorize(ctx.role, Operation.SUBMIT_VENDOR_OPTIONS)
        if len(vendors) != REQUIRED_VENDOR_OPTIONS:
            raise ValidationError(
                f"Exactly {REQUIRED_VENDOR_OPTIONS} vendor options are required",
                details={"received": len(vendors)},
            )

        try:
            request = await ProcurementRequestService._lock_request(db, ctx, request_id)
            new_status = next_status(request.status, RequestEvent.SUBMIT_VENDORS)
            await db.execute(
                select(RequestItem.id).where(RequestItem.request_id == request.id).with_for_update()
            )

            options = _build_vendor_options(ctx, request, vendors)
            # delete-orphan drops the previous options and their priced items
            request.vendor_options = options
            request.status = new_status.value
            request.logistics_submitted_by_user_id = ctx.user_id
            request.logistics_submitted_at = utcnow()
            await db.flush()

            AuditLogService.log_action(
                db,
                ctx,
                "VENDOR_OPTIONS_SUBMITTED",
                ENTITY_TYPE,
                request.id,
                {"vendors": [{"vendorName": o.vendor_name, "totalPrice": o.total_price} for o in options]},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Vendor options submitted for request %s by user %s", request.request_number, ctx.user_id)
        return success_response(
            "Vendor options submitted successfully",
            requestId=request.id,
            status=new_status.value,
        )

    @staticmethod
    async def select_vendor(db: AsyncSession, ctx: ActorContext, request_id: int, vendor_option_id: int) -> dict:
        """
        Pick one submitted vendor option and turn it into an approved purchase order.
        The request moves to PO Created in the same transaction, so a second selection fails.
        """
        authorize(ctx.role, Operation.SELECT_VENDOR)

        try:
            request = await ProcurementRequestService._lock_request(db, ctx, request_id)
            new_status = next_status(request.status, RequestEvent.SELECT_VENDOR)

            option = next((o for o in request.vendor_options if o.id == vendor_option_id), None)
            if option is None:
                raise NotFoundError("Vendor option not found for this request")

            po = await materialize_from_vendor_option(db, ctx, request, option)
            request.status = new_status.value
            request.selected_vendor_option_id = option.id
            request.po_id = po.id

            AuditLogService.log_action(
                db,
                ctx,
                "VENDOR_SELECTED",
                ENTITY_TYPE,
                request.id,
                {"vendorOptionId": option.id, "vendorName": option.vendor_name},
            )
            AuditLogService.log_action(
                db,
                ctx,
                "PO_CREATED_FROM_PROCUREMENT",
                "purchase_order",
                po.id,
                {"poNumber": po.po_number, "requestNumber": request.request_number, "totalAmount": po.total_amount},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Vendor option %s selected for request %s; PO %s created by user %s",
            option.id,
            request.request_number,
            po.po_number,
            ctx.user_id,
        )
        return success_response(
            "Vendor selected and purchase order created",
            poId=po.id,
            poNumber=po.po_number,
        )
