from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from apps.dashboard.schemas import DashboardStatsResponse
from apps.dashboard.service import DashboardService
from common.context import ActorContext
from models.base import get_db
from security.auth_backend import get_actor

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse, response_model_exclude_none=True)
async def dashboard_stats(db: AsyncSession = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    """
    Counters for the caller's role: PO review, payment or delivery breakdowns plus request counts.
    """
    stats = await DashboardService.get_stats(db, actor)
    return DashboardStatsResponse(stats=stats)
