from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from ptcoach.database import get_db
from ptcoach.auth import dependencies
from ptcoach.models.user import User
from ptcoach.models.enums import Role
from ptcoach.core.responses import ListResponse, StandardResponse
from ptcoach.schemas.users import UserCreate, UserDetailResponse, UserResponse, UserSummary, UserUpdate
from ptcoach.services.user_service import SupervisionView, UserService

router = APIRouter()


def _to_detail(view: SupervisionView) -> UserDetailResponse:
    base = UserResponse.model_validate(view.user).model_dump()
    return UserDetailResponse(
        **base,
        trainees=[UserSummary.model_validate(t) for t in view.trainees] if view.trainees is not None else None,
        personal_trainer=UserSummary.model_validate(view.personal_trainer) if view.personal_trainer else None,
    )


@router.post("", response_model=StandardResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register_user(
    user_in: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Register a trainee or a personal trainer."""
    user = await UserService.create_user(db, user_in)
    return StandardResponse(data=UserResponse.model_validate(user), message="User registered successfully")


@router.get("", response_model=ListResponse[UserResponse])
async def list_users(
    role: Annotated[Role, Query()],
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    users = await UserService.find_users_by_role(db, role)
    return ListResponse.of([UserResponse.model_validate(u) for u in users])


@router.get("/me", response_model=StandardResponse[UserDetailResponse])
async def get_me(
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    view = await UserService.get_user_with_supervision(db, current_user.id)
    return StandardResponse(data=_to_detail(view))


@router.get("/{user_id}", response_model=StandardResponse[UserDetailResponse])
async def get_user(
    user_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    view = await UserService.get_user_with_supervision(db, user_id)
    return StandardResponse(data=_to_detail(view))


@router.patch("/{user_id}", response_model=StandardResponse[UserResponse])
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Users update their own profile. The role cannot be changed."""
    dependencies.ensure_self(current_user, user_id, action="update a profile")
    user = await UserService.update_profile(db, user_id, data)
    return StandardResponse(data=UserResponse.model_validate(user), message="Profile updated successfully")


@router.delete("/{user_id}", response_model=StandardResponse)
async def delete_user(
    user_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    dependencies.ensure_self(current_user, user_id, action="delete an account")
    await UserService.delete_user(db, user_id)
    return StandardResponse(message="User deleted")
