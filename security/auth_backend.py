import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from common.context import ActorContext
from common.jwt import verify_token
from models.base import get_db
from models.user import User

logger = logging.getLogger(__name__)

# Tokens are issued by the authentication service; tokenUrl only feeds the interactive docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=True)


async def get_current_user(token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)) -> User:
    """
    Dependency to retrieve the current authenticated user from the JWT.
    Validates the access token and fetches the associated user from DB.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = verify_token(token, expected_token_type="access")
        user_id: Optional[str] = payload.get("sub")
        org_id = payload.get("org_id")
        if user_id is None or org_id is None:
            raise credentials_exception
        user: Optional[User] = await db.get(User, int(user_id))
    except (JWTError, ValueError):
        raise credentials_exception

    if not user or user.org_id != int(org_id):
        raise credentials_exception
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Deactivated accounts keep their data but can no longer act.
    """
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")
    return current_user


async def get_actor(current_user: User = Depends(get_current_active_user)) -> ActorContext:
    """
    Explicit actor context handed to every service call.
    Role and organization always come from the user row, never from client input.
    """
    return ActorContext(user_id=current_user.id, org_id=current_user.org_id, role=current_user.role_enum)
