from typing import Annotated
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ptcoach.auth import dependencies
from ptcoach.core.responses import ListResponse, StandardResponse
from ptcoach.database import get_db
from ptcoach.models.enums import AssignmentStatus
from ptcoach.models.user import User
from ptcoach.schemas.workouts import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    ExerciseProgressUpdate,
    TemplateCreate,
    TemplateDeleteResponse,
    TemplateResponse,
    TemplateUpdate,
)
from ptcoach.services.assignment_service import AssignmentService
from ptcoach.services.template_service import TemplateService

router = APIRouter()


# --- Templates ---

@router.post("/templates", response_model=StandardResponse[TemplateResponse], status_code=status.HTTP_201_CREATED)
async def create_template(
    data: TemplateCreate,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    template = await TemplateService.create_template(db, current_user.id, data)
    return StandardResponse(data=TemplateResponse.model_validate(template), message="Workout template created successfully")


@router.get("/templates", response_model=ListResponse[TemplateResponse])
async def list_templates(
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    templates = await TemplateService.list_templates_by_pt(db, current_user.id)
    return ListResponse.of([TemplateResponse.model_validate(t) for t in templates])


@router.get("/templates/{template_id}", response_model=StandardResponse[TemplateResponse])
async def get_template(
    template_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    template = await TemplateService.get_template(db, current_user.id, template_id)
    return StandardResponse(data=TemplateResponse.model_validate(template))


@router.patch("/templates/{template_id}", response_model=StandardResponse[TemplateResponse])
async def update_template(
    template_id: uuid.UUID,
    data: TemplateUpdate,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    template = await TemplateService.update_template(db, current_user.id, template_id, data)
    return StandardResponse(data=TemplateResponse.model_validate(template), message="Workout template updated successfully")


@router.delete("/templates/{template_id}", response_model=StandardResponse[TemplateDeleteResponse])
async def delete_template(
    template_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    removed = await TemplateService.delete_template(db, current_user.id, template_id)
    return StandardResponse(
        data=TemplateDeleteResponse(template_id=template_id, deleted_assignments=removed),
        message="Workout template and its assignments deleted",
    )


# --- Assignments ---

@router.post(
    "/templates/{template_id}/assignments",
    response_model=StandardResponse[AssignmentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def assign_template(
    template_id: uuid.UUID,
    data: AssignmentCreate,
    current_user: Annotated[User, Depends(dependencies.get_current_pt)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    assignment = await AssignmentService.create_assignment(
        db,
        template_id,
        data.trainee_id,
        current_user.id,
        due_date=data.due_date,
        pt_notes=data.pt_notes,
    )
    return StandardResponse(data=AssignmentResponse.model_validate(assignment), message="Workout assigned successfully")


@router.get("/trainees/{trainee_id}/assignments", response_model=ListResponse[AssignmentResponse])
async def list_trainee_assignments(
    trainee_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status: AssignmentStatus | None = None,
):
    assignments = await AssignmentService.list_trainee_assignments(db, trainee_id, current_user.id, status)
    return ListResponse.of([AssignmentResponse.model_validate(a) for a in assignments])


@router.get("/assignments/{assignment_id}", response_model=StandardResponse[AssignmentResponse])
async def get_assignment(
    assignment_id: uuid.UUID,
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    assignment = await AssignmentService.get_assignment(db, assignment_id, current_user.id)
    return StandardResponse(data=AssignmentResponse.model_validate(assignment))


@router.patch(
    "/assignments/{assignment_id}/exercises/{exercise_index}",
    response_model=StandardResponse[AssignmentResponse],
)
async def mark_exercise(
    assignment_id: uuid.UUID,
    exercise_index: int,
    data: ExerciseProgressUpdate,
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    assignment = await AssignmentService.mark_exercise_progress(
        db,
        assignment_id,
        exercise_index,
        current_user.id,
        completed=data.completed,
        actual_sets=data.actual_sets,
        actual_reps=data.actual_reps,
        notes=data.notes,
    )
    return StandardResponse(data=AssignmentResponse.model_validate(assignment), message="Exercise progress updated successfully")


@router.patch("/assignments/{assignment_id}", response_model=StandardResponse[AssignmentResponse])
async def update_assignment(
    assignment_id: uuid.UUID,
    data: AssignmentUpdate,
    current_user: Annotated[User, Depends(dependencies.get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    assignment = await AssignmentService.set_assignment_status(
        db,
        assignment_id,
        current_user.id,
        status=data.status,
        trainee_notes=data.trainee_notes,
        pt_notes=data.pt_notes,
    )
    return StandardResponse(data=AssignmentResponse.model_validate(assignment), message="Workout assignment updated successfully")
