from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from apps.users.schemas import RoleUpdate, StatusUpdate, UserActionResponse, UserListResponse, UserOut
from apps.users.service import UserService
from common.context import ActorContext
from models.base import get_db
from security.auth_backend import get_actor

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(db: AsyncSession = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    """
    All users of the caller's organization (Admin only).
    """
    users = await UserService.list_users(db, actor)
    return UserListResponse(users=[UserOut.model_validate(u) for u in users])


@router.patch("/{user_id}/role", response_model=UserActionResponse)
async def update_role(
    user_id: int,
    payload: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    return await UserService.update_role(db, actor, user_id, payload.role)


@router.patch("/{user_id}/status", response_model=UserActionResponse)
async def update_status(
    user_id: int,
    payload: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    return await UserService.update_status(db, actor, user_id, payload.is_active)
