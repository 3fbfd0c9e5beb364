"""
Purchase order construction.

Two sources: a selected vendor option (pre-approved, priced from the option)
and a direct Logistics entry (pending head-of-department review). Neither
commits; the caller owns the transaction.
"""

from typing import Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from common.context import ActorContext
from common.errors import IntegrityError, ValidationError
from common.identifiers import generate_po_number
from common.money import line_total, money_sum, to_money, valid_quantity, within_amount_limit
from constants.statuses import DeliveryStatus, PaymentStatus, POStatus
from models.base import utcnow
from models.procurement_request import ProcurementRequest, VendorOption
from models.purchase_order import POItem, PurchaseOrder


async def materialize_from_vendor_option(
    db: AsyncSession,
    ctx: ActorContext,
    request: ProcurementRequest,
    option: VendorOption,
) -> PurchaseOrder:
    """
    Build an Approved PO from the chosen vendor option and flush it so its id is known.
    The deciding admin is recorded as reviewer: selection is the approval.
    """
    if not option.items:
        raise IntegrityError("Selected vendor option has no priced items")

    request_items = {item.id: item for item in request.items}
    po_items: List[POItem] = []
    for priced in option.items:
        source = request_items.get(priced.request_item_id)
        if source is None:
            raise IntegrityError(
                "Vendor option prices an item that is not part of the request",
                details={"requestItemId": priced.request_item_id},
            )
        po_items.append(
            POItem(
                item_name=source.item_name,
                quantity=source.quantity,
                unit_price=priced.unit_price,
                total_price=priced.total_price,
            )
        )

    now = utcnow()
    po = PurchaseOrder(
        org_id=ctx.org_id,
        po_number=generate_po_number(ctx.org_id),
        created_by_user_id=ctx.user_id,
        vendor_name=option.vendor_name,
        description=request.overall_reason or request.title,
        total_amount=option.total_price,
        status=POStatus.APPROVED.value,
        payment_status=PaymentStatus.NOT_PAID.value,
        delivery_status=DeliveryStatus.NOT_RECEIVED.value,
        reviewed_by_user_id=ctx.user_id,
        reviewed_at=now,
        items=po_items,
    )
    db.add(po)
    await db.flush()
    return po


def build_direct_po(ctx: ActorContext, vendor_name, description, items: Iterable) -> PurchaseOrder:
    """
    Validate a hand-entered PO and return it unsaved, status Pending.
    `items` are objects with item_name, quantity and unit_price attributes.
    """
    vendor_name = (vendor_name or "").strip()
    if not vendor_name:
        raise ValidationError("Vendor name is required")

    items = list(items or [])
    if not items:
        raise ValidationError("At least one item is required")

    po_items: List[POItem] = []
    for index, item in enumerate(items, start=1):
        name = (item.item_name or "").strip()
        quantity = item.quantity
        unit_price = to_money(item.unit_price)
        if not name:
            raise ValidationError(f"Item {index} is missing a name")
        if not valid_quantity(quantity):
            raise ValidationError(f"Item {index} must have a quantity greater than zero")
        if unit_price is None or unit_price < 0:
            raise ValidationError(f"Item {index} must have a unit price of zero or more")
        total_price = line_total(quantity, unit_price)
        if not within_amount_limit(total_price):
            raise ValidationError(f"Item {index} total exceeds the maximum order amount")
        po_items.append(
            POItem(
                item_name=name,
                quantity=quantity,
                unit_price=unit_price,
                total_price=total_price,
            )
        )

    total_amount = money_sum(i.total_price for i in po_items)
    if not within_amount_limit(total_amount):
        raise ValidationError("Purchase order total exceeds the maximum order amount")

    return PurchaseOrder(
        org_id=ctx.org_id,
        po_number=generate_po_number(ctx.org_id),
        created_by_user_id=ctx.user_id,
        vendor_name=vendor_name,
        description=(description or "").strip() or None,
        total_amount=total_amount,
        status=POStatus.PENDING.value,
        payment_status=PaymentStatus.NOT_PAID.value,
        delivery_status=DeliveryStatus.NOT_RECEIVED.value,
        items=po_items,
    )
