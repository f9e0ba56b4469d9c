from typing import Annotated, List
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ptcoach.database import get_db
from ptcoach.models.user import User
from ptcoach.models.enums import Role
from ptcoach.auth import security
from ptcoach.core import exceptions

bearer_scheme = HTTPBearer(auto_error=False)

async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    user_id = security.decode_access_token(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    stmt = select(User).where(User.id == user_id)
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception
    return user

class RoleChecker:
    def __init__(self, allowed_roles: List[Role]):
        self.allowed_roles = allowed_roles

    def __call__(self, user: Annotated[User, Depends(get_current_user)]):
        if user.role not in self.allowed_roles:
            allowed = ", ".join(role.value for role in self.allowed_roles)
            raise exceptions.RoleError(f"Operation requires role: {allowed}")
        return user

get_current_pt = RoleChecker([Role.PT])
get_current_trainee = RoleChecker([Role.TRAINEE])


def ensure_self(current_user: User, target_id, *, action: str) -> None:
    if current_user.id != target_id:
        raise exceptions.AuthorizationError(f"Cannot {action} on behalf of another user")
