from typing import Annotated
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ptcoach.auth import dependencies
from ptcoach.core.responses import ListResponse, StandardResponse
from ptcoach.database import get_db
from ptcoach.models.enums import RequestStatus
from ptcoach.models.user import User
from ptcoach.schemas.trainers import TraineeRequestCreate, TraineeRequestResponse, TrainerSummary
from ptcoach.schemas.users import UserResponse
from ptcoach.services.relationship_service import RelationshipService
from ptcoach.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=ListResponse[TrainerSummary])
async def list_trainers(
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    rows = await UserService.list_trainers(db)
    trainers = [
        TrainerSummary.model_validate(pt).model_copy(update={"trainee_count": count})
        for pt, count in rows
    ]
    return ListResponse.of(trainers)


@router.post(
    "/{pt_id}/requests",
    response_model=StandardResponse[TraineeRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_request(
    pt_id: uuid.UUID,
    data: TraineeRequestCreate,
    current_user: Annotated[User, Depends(dependencies.get_current_trainee)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    request = await RelationshipService.submit_request(db, current_user.id, pt_id, data.service_name)
    return StandardResponse(
        data=TraineeRequestResponse.model_validate(request),
        message="Request submitted successfully",
    )


@router.get("/{pt_id}/requests", response_model=ListResponse[TraineeRequestResponse])
async def list_requests(
    pt_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status: RequestStatus | None = None,
):
    dependencies.ensure_self(current_user, pt_id, action="view requests")
    requests = await RelationshipService.list_requests(db, pt_id, status)
    return ListResponse.of([TraineeRequestResponse.model_validate(r) for r in requests])


@router.post("/{pt_id}/requests/{trainee_id}/approve", response_model=StandardResponse[TraineeRequestResponse])
async def approve_request(
    pt_id: uuid.UUID,
    trainee_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    dependencies.ensure_self(current_user, pt_id, action="approve requests")
    request = await RelationshipService.approve_request(db, pt_id, trainee_id)
    return StandardResponse(data=TraineeRequestResponse.model_validate(request), message="Trainee request approved")


@router.post("/{pt_id}/requests/{trainee_id}/reject", response_model=StandardResponse[TraineeRequestResponse])
async def reject_request(
    pt_id: uuid.UUID,
    trainee_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    dependencies.ensure_self(current_user, pt_id, action="reject requests")
    request = await RelationshipService.reject_request(db, pt_id, trainee_id)
    return StandardResponse(data=TraineeRequestResponse.model_validate(request), message="Trainee request rejected")


@router.get("/{pt_id}/trainees", response_model=ListResponse[UserResponse])
async def list_trainees(
    pt_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    dependencies.ensure_self(current_user, pt_id, action="view trainees")
    trainees = await RelationshipService.list_trainees(db, pt_id)
    return ListResponse.of([UserResponse.model_validate(t) for t in trainees])


@router.delete("/{pt_id}/trainees/{trainee_id}", response_model=StandardResponse)
async def remove_trainee(
    pt_id: uuid.UUID,
    trainee_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    dependencies.ensure_self(current_user, pt_id, action="remove trainees")
    await RelationshipService.remove_supervision(db, pt_id, trainee_id)
    return StandardResponse(message="Trainee removed from supervision")
