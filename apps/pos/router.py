from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.pos.schemas import (
    DeliveryUpdateRequest,
    POActionResponse,
    POCreate,
    POCreatedResponse,
    PODetailResponse,
    POResponse,
    POReviewRequest,
    PaymentUpdateRequest,
)
from apps.pos.service import POService
from common.context import ActorContext
from models.base import get_db
from security.auth_backend import get_actor


router = APIRouter(prefix="/api/purchase-orders", tags=["Purchase Orders"])


@router.post("", response_model=POCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_po(payload: POCreate, db: AsyncSession = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    return await POService.create_po(db, actor, payload)


@router.get("", response_model=List[POResponse])
async def list_pos(db: AsyncSession = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    return await POService.list_pos(db, actor)


@router.get("/{po_id}", response_model=PODetailResponse)
async def get_po(po_id: int, db: AsyncSession = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    """
    Single purchase order with items and its payment and delivery history.
    """
    return await POService.get_po(db, actor, po_id)


@router.patch("/{po_id}/review", response_model=POActionResponse)
async def review_po(
    po_id: int,
    payload: POReviewRequest,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    return await POService.review_po(db, actor, po_id, payload)


@router.patch("/{po_id}/payment", response_model=POActionResponse)
async def update_payment(
    po_id: int,
    payload: PaymentUpdateRequest,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    return await POService.update_payment(db, actor, po_id, payload)


@router.patch("/{po_id}/delivery", response_model=POActionResponse)
async def update_delivery(
    po_id: int,
    payload: DeliveryUpdateRequest,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    return await POService.update_delivery(db, actor, po_id, payload)
