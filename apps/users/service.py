import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apps.audit.service import AuditLogService
from common.context import ActorContext
from common.errors import NotFoundError, ValidationError
from common.responses import success_response
from constants.roles import ALL_ROLES, Role
from models.user import User
from security.authorization import Operation, authorize

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    async def _lock_user(db: AsyncSession, ctx: ActorContext, user_id: int) -> User:
        stmt = (
            select(User)
            .where(User.id == user_id, User.org_id == ctx.org_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        user = res.scalar_one_or_none()
        if not user:
            raise NotFoundError("User not found in your organization")
        return user

    @staticmethod
    async def list_users(db: AsyncSession, ctx: ActorContext) -> List[User]:
        authorize(ctx.role, Operation.MANAGE_USERS)
        stmt = (
            select(User)
            .where(User.org_id == ctx.org_id)
            .order_by(User.created_at.desc(), User.id.desc())
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        return list(res.scalars().all())

    @staticmethod
    async def update_role(db: AsyncSession, ctx: ActorContext, user_id: int, role: str) -> dict:
        authorize(ctx.role, Operation.MANAGE_USERS)
        if role not in ALL_ROLES:
            raise ValidationError("Please select a valid role", details={"allowed": list(ALL_ROLES)})

        try:
            user = await UserService._lock_user(db, ctx, user_id)
            previous = user.role
            user.role = Role(role).value
            AuditLogService.log_action(
                db,
                ctx,
                "USER_ROLE_UPDATED",
                "user",
                user.id,
                {"oldRole": previous, "newRole": user.role, "targetEmail": user.email},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("User %s role changed %s -> %s by user %s", user.id, previous, user.role, ctx.user_id)
        return success_response("User role updated successfully", userId=user.id)

    @staticmethod
    async def update_status(db: AsyncSession, ctx: ActorContext, user_id: int, is_active: bool) -> dict:
        """
        Activate or deactivate an account. Admins cannot deactivate themselves.
        """
        authorize(ctx.role, Operation.MANAGE_USERS)
        if user_id == ctx.user_id and not is_active:
            raise ValidationError("You cannot deactivate your own account")

        try:
            user = await UserService._lock_user(db, ctx, user_id)
            user.is_active = bool(is_active)
            AuditLogService.log_action(
                db,
                ctx,
                "USER_STATUS_UPDATED",
                "user",
                user.id,
                {"isActive": user.is_active, "targetEmail": user.email},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        state = "activated" if user.is_active else "deactivated"
        logger.info("User %s %s by user %s", user.id, state, ctx.user_id)
        return success_response(f"User {state} successfully", userId=user.id)
