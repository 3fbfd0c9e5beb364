from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField, constr


# -------------------------------
# Inputs
# -------------------------------

class RequestItemCreate(BaseModel):
    item_name: Optional[constr(strip_whitespace=True, max_length=255)] = PydanticField(default=None, alias="itemName")
    quantity: Optional[int] = PydanticField(default=None, alias="quantity")
    justification: Optional[constr(strip_whitespace=True)] = PydanticField(default=None, alias="justification")

    class Config:
        populate_by_name = True


class ProcurementRequestCreate(BaseModel):
    title: Optional[constr(strip_whitespace=True, max_length=255)] = None
    overall_reason: Optional[constr(strip_whitespace=True)] = PydanticField(default=None, alias="overallReason")
    items: List[RequestItemCreate] = PydanticField(default_factory=list)

    class Config:
        populate_by_name = True


class AdminReviewRequest(BaseModel):
    decision: str
    notes: Optional[constr(strip_whitespace=True)] = None


class VendorOptionItemIn(BaseModel):
    request_item_id: int = PydanticField(alias="requestItemId")
    unit_price: Optional[Decimal] = PydanticField(default=None, alias="unitPrice")

    class Config:
        populate_by_name = True


class VendorOptionIn(BaseModel):
    vendor_name: Optional[constr(strip_whitespace=True, max_length=255)] = PydanticField(default=None, alias="vendorName")
    notes: Optional[constr(strip_whitespace=True)] = None
    items: List[VendorOptionItemIn] = PydanticField(default_factory=list)

    class Config:
        populate_by_name = True


class VendorOptionsSubmit(BaseModel):
    vendors: List[VendorOptionIn] = PydanticField(default_factory=list)


class SelectVendorRequest(BaseModel):
    vendor_option_id: int = PydanticField(alias="vendorOptionId")

    class Config:
        populate_by_name = True


# -------------------------------
# Outputs
# -------------------------------

class UserSummary(BaseModel):
    id: int
    full_name: str = PydanticField(alias="fullName")
    email: str

    class Config:
        from_attributes = True
        populate_by_name = True


class RequestItemOut(BaseModel):
    id: int
    item_name: str = PydanticField(alias="itemName")
    quantity: int
    justification: Optional[str] = None

    class Config:
        from_attributes = True
        populate_by_name = True


class VendorOptionItemOut(BaseModel):
    id: int
    request_item_id: int = PydanticField(alias="requestItemId")
    item_name: Optional[str] = PydanticField(default=None, alias="itemName")
    quantity: Optional[int] = None
    unit_price: Decimal = PydanticField(alias="unitPrice")
    total_price: Decimal = PydanticField(alias="totalPrice")

    class Config:
        populate_by_name = True


class VendorOptionOut(BaseModel):
    id: int
    vendor_name: str = PydanticField(alias="vendorName")
    total_price: Decimal = PydanticField(alias="totalPrice")
    notes: Optional[str] = None
    is_selected: bool = PydanticField(default=False, alias="isSelected")
    created_at: datetime = PydanticField(alias="createdAt")
    items: List[VendorOptionItemOut] = PydanticField(default_factory=list)

    class Config:
        populate_by_name = True


class ProcurementRequestOut(BaseModel):
    id: int
    request_number: str = PydanticField(alias="requestNumber")
    title: str
    overall_reason: Optional[str] = PydanticField(default=None, alias="overallReason")
    status: str
    admin_decision: str = PydanticField(alias="adminDecision")
    admin_notes: Optional[str] = PydanticField(default=None, alias="adminNotes")
    admin_reviewed_at: Optional[datetime] = PydanticField(default=None, alias="adminReviewedAt")
    logistics_submitted_at: Optional[datetime] = PydanticField(default=None, alias="logisticsSubmittedAt")
    requested_by: Optional[UserSummary] = PydanticField(default=None, alias="requestedBy")
    admin_reviewed_by: Optional[UserSummary] = PydanticField(default=None, alias="adminReviewedBy")
    logistics_submitted_by: Optional[UserSummary] = PydanticField(default=None, alias="logisticsSubmittedBy")
    selected_vendor_option_id: Optional[int] = PydanticField(default=None, alias="selectedVendorOptionId")
    po_id: Optional[int] = PydanticField(default=None, alias="poId")
    po_number: Optional[str] = PydanticField(default=None, alias="poNumber")
    created_at: datetime = PydanticField(alias="createdAt")
    updated_at: datetime = PydanticField(alias="updatedAt")
    items: List[RequestItemOut] = PydanticField(default_factory=list)
    vendor_options: List[VendorOptionOut] = PydanticField(default_factory=list, alias="vendorOptions")

    class Config:
        populate_by_name = True


class RequestCreatedResponse(BaseModel):
    success: bool = True
    message: str
    request_id: int = PydanticField(alias="requestId")
    request_number: str = PydanticField(alias="requestNumber")

    class Config:
        populate_by_name = True


class RequestActionResponse(BaseModel):
    success: bool = True
    message: str
    request_id: int = PydanticField(alias="requestId")
    status: str

    class Config:
        populate_by_name = True


class VendorSelectedResponse(BaseModel):
    success: bool = True
    message: str
    po_id: int = PydanticField(alias="poId")
    po_number: str = PydanticField(alias="poNumber")

    class Config:
        populate_by_name = True
