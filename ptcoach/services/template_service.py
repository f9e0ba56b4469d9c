import logging
import uuid
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ptcoach.core import exceptions
from ptcoach.models.enums import Role
from ptcoach.models.workout import TemplateExercise, WorkoutTemplate
from ptcoach.schemas.workouts import ExerciseData, TemplateCreate, TemplateUpdate
from ptcoach.services.assignment_service import AssignmentService
from ptcoach.services.user_service import get_user_with_role

logger = logging.getLogger(__name__)


def validate_exercises(exercises: Sequence[ExerciseData] | None) -> None:
    if not exercises:
        raise exceptions.ValidationError("At least one exercise is required")
    for number, exercise in enumerate(exercises, start=1):
        if not exercise.name or not exercise.name.strip():
            raise exceptions.ValidationError(f"Exercise {number}: name is required")
        if exercise.sets is None or exercise.sets < 1:
            raise exceptions.ValidationError(f"Exercise {number}: sets must be a positive number")
        if not exercise.reps or not exercise.reps.strip():
            raise exceptions.ValidationError(f"Exercise {number}: reps are required")


def _validate_title(title: str | None) -> str:
    normalized = (title or "").strip()
    if not normalized:
        raise exceptions.ValidationError("Title is required")
    return normalized


def _build_exercises(exercises: Sequence[ExerciseData]) -> list[TemplateExercise]:
    return [
        TemplateExercise(
            position=position,
            name=exercise.name.strip(),
            sets=exercise.sets,
            reps=exercise.reps.strip(),
            notes=exercise.notes,
        )
        for position, exercise in enumerate(exercises)
    ]


async def get_template_or_404(db: AsyncSession, template_id: uuid.UUID) -> WorkoutTemplate:
    stmt = (
        select(WorkoutTemplate)
        .where(WorkoutTemplate.id == template_id)
        .execution_options(populate_existing=True)
    )
    template = (await db.execute(stmt)).scalar_one_or_none()
    if template is None:
        raise exceptions.NotFoundError("Workout template not found")
    return template


def _ensure_owner(template: WorkoutTemplate, pt_id: uuid.UUID, *, action: str) -> None:
    if template.created_by != pt_id:
        raise exceptions.AuthorizationError(f"Cannot {action} a template created by another PT")


class TemplateService:
    @staticmethod
    async def create_template(db: AsyncSession, pt_id: uuid.UUID, data: TemplateCreate) -> WorkoutTemplate:
        await get_user_with_role(db, pt_id, Role.PT)
        title = _validate_title(data.title)
        validate_exercises(data.exercises)

        template = WorkoutTemplate(
            title=title,
            description=data.description,
            difficulty=data.difficulty,
            estimated_duration=data.estimated_duration,
            created_by=pt_id,
            exercises=_build_exercises(data.exercises),
        )
        db.add(template)
        await db.commit()
        logger.info("PT %s created template %s with %d exercise(s)", pt_id, template.id, len(data.exercises))
        return await get_template_or_404(db, template.id)

    @staticmethod
    async def get_template(db: AsyncSession, pt_id: uuid.UUID, template_id: uuid.UUID) -> WorkoutTemplate:
        template = await get_template_or_404(db, template_id)
        _ensure_owner(template, pt_id, action="view")
        return template

    @staticmethod
    async def update_template(
        db: AsyncSession, pt_id: uuid.UUID, template_id: uuid.UUID, patch: TemplateUpdate
    ) -> WorkoutTemplate:
        template = await get_template_or_404(db, template_id)
        _ensure_owner(template, pt_id, action="update")

        update_data = patch.model_dump(exclude_unset=True, exclude={"exercises"})
        if "title" in update_data:
            update_data["title"] = _validate_title(update_data["title"])
        if "exercises" in patch.model_fields_set:
            validate_exercises(patch.exercises)
            # delete-orphan removes the previous rows; existing assignments keep their snapshot
            template.exercises = _build_exercises(patch.exercises)

        for key, value in update_data.items():
            setattr(template, key, value)

        await db.commit()
        logger.info("PT %s updated template %s (%s)", pt_id, template_id, ", ".join(sorted(patch.model_fields_set)))
        return await get_template_or_404(db, template_id)

    @staticmethod
    async def list_templates_by_pt(db: AsyncSession, pt_id: uuid.UUID) -> list[WorkoutTemplate]:
        await get_user_with_role(db, pt_id, Role.PT)
        stmt = (
            select(WorkoutTemplate)
            .where(WorkoutTemplate.created_by == pt_id)
            .order_by(WorkoutTemplate.created_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete_template(db: AsyncSession, pt_id: uuid.UUID, template_id: uuid.UUID) -> int:
        template = await get_template_or_404(db, template_id)
        _ensure_owner(template, pt_id, action="delete")
        return await AssignmentService.delete_template_cascade(db, template_id)
