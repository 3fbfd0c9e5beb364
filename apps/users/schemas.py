from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class UserOut(BaseModel):
    """
    Public user model returned to clients.
    """
    id: int
    email: str
    full_name: str = Field(alias="fullName")
    role: str
    is_active: bool = Field(alias="isActive")
    created_at: datetime = Field(alias="createdAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class UserListResponse(BaseModel):
    success: bool = True
    users: List[UserOut]


class RoleUpdate(BaseModel):
    role: str


class StatusUpdate(BaseModel):
    is_active: bool = Field(alias="isActive")

    class Config:
        populate_by_name = True


class UserActionResponse(BaseModel):
    success: bool = True
    message: str
    user_id: int = Field(alias="userId")

    class Config:
        populate_by_name = True
