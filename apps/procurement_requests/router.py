from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.procurement_requests.schemas import (
    AdminReviewRequest,
    ProcurementRequestCreate,
    ProcurementRequestOut,
    RequestActionResponse,
    RequestCreatedResponse,
    SelectVendorRequest,
    VendorOptionsSubmit,
    VendorSelectedResponse,
)
from apps.procurement_requests.service import ProcurementRequestService
from common.context import ActorContext
from models.base import get_db
from security.auth_backend import get_actor

router = APIRouter(prefix="/api/procurement-requests", tags=["Procurement Requests"])


@router.post("", response_model=RequestCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: ProcurementRequestCreate,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    """
    Head of Department raises a new request; it starts in Pending Admin Review.
    """
    return await ProcurementRequestService.create_request(db, actor, payload)


@router.get("", response_model=List[ProcurementRequestOut])
async def list_requests(db: AsyncSession = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    return await ProcurementRequestService.list_requests(db, actor)


@router.get("/{request_id}", response_model=ProcurementRequestOut)
async def get_request(request_id: int, db: AsyncSession = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    return await ProcurementRequestService.get_request(db, actor, request_id)


@router.patch("/{request_id}/admin-review", response_model=RequestActionResponse)
async def admin_review(
    request_id: int,
    payload: AdminReviewRequest,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    return await ProcurementRequestService.admin_review(db, actor, request_id, payload)


@router.post("/{request_id}/vendor-options", response_model=RequestActionResponse)
async def submit_vendor_options(
    request_id: int,
    payload: VendorOptionsSubmit,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    """
    Logistics submits exactly three priced vendor quotes, replacing any earlier set.
    """
    return await ProcurementRequestService.submit_vendor_options(db, actor, request_id, payload.vendors)


@router.post("/{request_id}/select-vendor", response_model=VendorSelectedResponse)
async def select_vendor(
    request_id: int,
    payload: SelectVendorRequest,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    return await ProcurementRequestService.select_vendor(db, actor, request_id, payload.vendor_option_id)
