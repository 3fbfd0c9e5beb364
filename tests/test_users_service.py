import pytest
from sqlalchemy import select

from apps.users.service import UserService
from common.errors import AuthorizationError, NotFoundError, ValidationError
from constants.roles import Role
from models.audit_log import AuditLog


async def test_list_users_is_org_scoped(db, actor, other_org_admin):
    users = await UserService.list_users(db, actor(Role.ADMIN))
    assert len(users) == len(Role)
    assert "admin@globex.test" not in {u.email for u in users}


async def test_only_admin_manages_users(db, actor, users):
    target = users[Role.STORES].id
    for role in (Role.HEAD_OF_DEPARTMENT, Role.LOGISTICS, Role.FINANCE, Role.STORES):
        with pytest.raises(AuthorizationError):
            await UserService.list_users(db, actor(role))
        with pytest.raises(AuthorizationError):
            await UserService.update_role(db, actor(role), target, "Admin")


async def test_update_role(db, actor, users):
    target = users[Role.STORES].id
    result = await UserService.update_role(db, actor(Role.ADMIN), target, "Finance")
    assert result == {"success": True, "message": "User role updated successfully", "userId": target}

    listed = {u.id: u.role for u in await UserService.list_users(db, actor(Role.ADMIN))}
    assert listed[target] == "Finance"

    entry = (await db.execute(select(AuditLog).where(AuditLog.action == "USER_ROLE_UPDATED"))).scalar_one()
    assert entry.details["oldRole"] == "Stores"
    assert entry.details["newRole"] == "Finance"


async def test_update_role_rejects_unknown_role(db, actor, users):
    with pytest.raises(ValidationError):
        await UserService.update_role(db, actor(Role.ADMIN), users[Role.STORES].id, "Superuser")


async def test_cannot_touch_users_of_another_org(db, actor, other_org_admin):
    target = other_org_admin.id
    with pytest.raises(NotFoundError):
        await UserService.update_role(db, actor(Role.ADMIN), target, "Finance")
    with pytest.raises(NotFoundError):
        await UserService.update_status(db, actor(Role.ADMIN), target, False)


async def test_deactivate_and_reactivate(db, actor, users):
    target = users[Role.FINANCE].id
    result = await UserService.update_status(db, actor(Role.ADMIN), target, False)
    assert result["message"] == "User deactivated successfully"

    listed = {u.id: u.is_active for u in await UserService.list_users(db, actor(Role.ADMIN))}
    assert listed[target] is False

    result = await UserService.update_status(db, actor(Role.ADMIN), target, True)
    assert result["message"] == "User activated successfully"


async def test_admin_cannot_deactivate_self(db, actor):
    admin = actor(Role.ADMIN)
    with pytest.raises(ValidationError):
        await UserService.update_status(db, admin, admin.user_id, False)
