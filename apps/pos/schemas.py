from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField, constr


class POItemCreate(BaseModel):
    item_name: Optional[constr(strip_whitespace=True, max_length=255)] = PydanticField(default=None, alias="itemName")
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = PydanticField(default=None, alias="unitPrice")

    class Config:
        populate_by_name = True


class POCreate(BaseModel):
    vendor_name: Optional[constr(strip_whitespace=True, max_length=255)] = PydanticField(default=None, alias="vendorName")
    description: Optional[constr(strip_whitespace=True)] = None
    items: List[POItemCreate] = PydanticField(default_factory=list)

    class Config:
        populate_by_name = True


class POReviewRequest(BaseModel):
    status: str
    notes: Optional[constr(strip_whitespace=True)] = None


class PaymentUpdateRequest(BaseModel):
    payment_status: str = PydanticField(alias="paymentStatus")
    notes: Optional[constr(strip_whitespace=True)] = None

    class Config:
        populate_by_name = True


class DeliveryUpdateRequest(BaseModel):
    delivery_status: str = PydanticField(alias="deliveryStatus")
    notes: Optional[constr(strip_whitespace=True)] = None

    class Config:
        populate_by_name = True


class POItemOut(BaseModel):
    id: int
    item_name: str = PydanticField(alias="itemName")
    quantity: int
    unit_price: Decimal = PydanticField(alias="unitPrice")
    total_price: Decimal = PydanticField(alias="totalPrice")

    class Config:
        from_attributes = True
        populate_by_name = True


class StatusUpdateOut(BaseModel):
    id: int
    old_status: Optional[str] = PydanticField(default=None, alias="oldStatus")
    new_status: str = PydanticField(alias="newStatus")
    notes: Optional[str] = None
    updated_by_user_id: Optional[int] = PydanticField(default=None, alias="updatedByUserId")
    created_at: datetime = PydanticField(alias="createdAt")

    class Config:
        populate_by_name = True


class POResponse(BaseModel):
    id: int
    po_number: str = PydanticField(alias="poNumber")
    vendor_name: str = PydanticField(alias="vendorName")
    description: Optional[str] = None
    total_amount: Decimal = PydanticField(alias="totalAmount")
    status: str
    payment_status: str = PydanticField(alias="paymentStatus")
    delivery_status: str = PydanticField(alias="deliveryStatus")
    created_by_user_id: int = PydanticField(alias="createdByUserId")
    created_by_name: Optional[str] = PydanticField(default=None, alias="createdByName")
    reviewed_by_user_id: Optional[int] = PydanticField(default=None, alias="reviewedByUserId")
    reviewed_by_name: Optional[str] = PydanticField(default=None, alias="reviewedByName")
    reviewed_at: Optional[datetime] = PydanticField(default=None, alias="reviewedAt")
    review_notes: Optional[str] = PydanticField(default=None, alias="reviewNotes")
    created_at: datetime = PydanticField(alias="createdAt")
    updated_at: datetime = PydanticField(alias="updatedAt")
    items: List[POItemOut] = PydanticField(default_factory=list)

    class Config:
        populate_by_name = True


class PODetailResponse(POResponse):
    payment_updates: List[StatusUpdateOut] = PydanticField(default_factory=list, alias="paymentUpdates")
    delivery_updates: List[StatusUpdateOut] = PydanticField(default_factory=list, alias="deliveryUpdates")


class POCreatedResponse(BaseModel):
    success: bool = True
    message: str
    po_id: int = PydanticField(alias="poId")
    po_number: str = PydanticField(alias="poNumber")

    class Config:
        populate_by_name = True


class POActionResponse(BaseModel):
    success: bool = True
    message: str
    po_id: int = PydanticField(alias="poId")
    status: Optional[str] = None
    payment_status: Optional[str] = PydanticField(default=None, alias="paymentStatus")
    delivery_status: Optional[str] = PydanticField(default=None, alias="deliveryStatus")

    class Config:
        populate_by_name = True
