"""Workout assignments and their per-exercise progress.

An assignment's status is derived from its progress entries:

* no exercise completed -> ``assigned``
* some exercises completed -> ``in_progress``
* every exercise completed -> ``completed`` (``completed_at`` stamped once)

``skipped`` is never derived. It is set explicitly, only on a workout that is
not completed yet, and survives progress edits
until an explicit status change clears it, at which point the status is
derived again. Any other explicit status is advisory only.
"""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ptcoach.core import exceptions
from ptcoach.models.enums import AssignmentStatus, Role
from ptcoach.models.workout import ExerciseProgress, TemplateExercise, WorkoutAssignment, WorkoutTemplate
from ptcoach.services.relationship_service import is_supervised
from ptcoach.services.user_service import get_user_or_404, get_user_with_role

logger = logging.getLogger(__name__)


def derive_status(total: int, completed: int) -> AssignmentStatus:
    if completed <= 0:
        return AssignmentStatus.ASSIGNED
    if completed < total:
        return AssignmentStatus.IN_PROGRESS
    return AssignmentStatus.COMPLETED


def _assignment_options():
    return (
        selectinload(WorkoutAssignment.template),
        selectinload(WorkoutAssignment.trainee),
        selectinload(WorkoutAssignment.pt),
    )


async def get_assignment_or_404(db: AsyncSession, assignment_id: uuid.UUID) -> WorkoutAssignment:
    stmt = (
        select(WorkoutAssignment)
        .where(WorkoutAssignment.id == assignment_id)
        .options(*_assignment_options())
        .execution_options(populate_existing=True)
    )
    assignment = (await db.execute(stmt)).scalar_one_or_none()
    if assignment is None:
        raise exceptions.NotFoundError("Workout assignment not found")
    return assignment


async def _lock_assignment(db: AsyncSession, assignment_id: uuid.UUID) -> WorkoutAssignment:
    # Row lock serialises writers of one assignment so re-derivation sees every slot update
    stmt = (
        select(WorkoutAssignment)
        .where(WorkoutAssignment.id == assignment_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    assignment = (await db.execute(stmt)).scalar_one_or_none()
    if assignment is None:
        raise exceptions.NotFoundError("Workout assignment not found")
    return assignment


async def _progress_counts(db: AsyncSession, assignment_id: uuid.UUID) -> tuple[int, int]:
    stmt = select(
        func.count(),
        func.coalesce(func.sum(case((ExerciseProgress.completed.is_(True), 1), else_=0)), 0),
    ).where(ExerciseProgress.assignment_id == assignment_id)
    total, completed = (await db.execute(stmt)).one()
    return int(total), int(completed)


async def _rederive_status(db: AsyncSession, assignment: WorkoutAssignment, now: datetime) -> AssignmentStatus:
    total, completed = await _progress_counts(db, assignment.id)
    status = derive_status(total, completed)
    values: dict = {"status": status}
    if status == AssignmentStatus.COMPLETED and assignment.completed_at is None:
        values["completed_at"] = now
    await db.execute(
        update(WorkoutAssignment)
        .where(WorkoutAssignment.id == assignment.id, WorkoutAssignment.status != AssignmentStatus.SKIPPED)
        .values(**values)
    )
    return status


def _ensure_participant(assignment: WorkoutAssignment, caller_id: uuid.UUID) -> None:
    if caller_id not in (assignment.trainee_id, assignment.pt_id):
        raise exceptions.AuthorizationError("This workout assignment belongs to another user")


class AssignmentService:
    @staticmethod
    async def create_assignment(
        db: AsyncSession,
        template_id: uuid.UUID,
        trainee_id: uuid.UUID,
        pt_id: uuid.UUID,
        due_date: datetime | None = None,
        pt_notes: str | None = None,
    ) -> WorkoutAssignment:
        template = (
            await db.execute(
                select(WorkoutTemplate)
                .where(WorkoutTemplate.id == template_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if template is None:
            raise exceptions.NotFoundError("Workout template not found")
        trainee = await get_user_with_role(db, trainee_id, Role.TRAINEE)
        pt = await get_user_with_role(db, pt_id, Role.PT)

        if not await is_supervised(db, pt.id, trainee.id):
            raise exceptions.AuthorizationError("Trainee is not supervised by this PT")
        if template.created_by != pt.id:
            raise exceptions.AuthorizationError("Cannot assign a template created by another PT")

        assignment = WorkoutAssignment(
            template_id=template.id,
            trainee_id=trainee.id,
            pt_id=pt.id,
            assigned_date=datetime.now(timezone.utc),
            due_date=due_date,
            status=AssignmentStatus.ASSIGNED,
            pt_notes=pt_notes,
            progress=[
                ExerciseProgress(exercise_index=index, exercise_name=exercise.name, completed=False)
                for index, exercise in enumerate(template.exercises)
            ],
        )
        db.add(assignment)
        await db.commit()
        logger.info(
            "PT %s assigned template %s to trainee %s (assignment %s, %d exercise(s))",
            pt.id, template.id, trainee.id, assignment.id, len(template.exercises),
        )
        return await get_assignment_or_404(db, assignment.id)

    @staticmethod
    async def get_assignment(db: AsyncSession, assignment_id: uuid.UUID, caller_id: uuid.UUID) -> WorkoutAssignment:
        assignment = await get_assignment_or_404(db, assignment_id)
        _ensure_participant(assignment, caller_id)
        return assignment

    @staticmethod
    async def list_trainee_assignments(
        db: AsyncSession,
        trainee_id: uuid.UUID,
        caller_id: uuid.UUID,
        status: AssignmentStatus | None = None,
    ) -> list[WorkoutAssignment]:
        trainee = await get_user_with_role(db, trainee_id, Role.TRAINEE)
        stmt = (
            select(WorkoutAssignment)
            .where(WorkoutAssignment.trainee_id == trainee.id)
            .options(*_assignment_options())
            .order_by(WorkoutAssignment.assigned_date.desc())
        )
        if caller_id != trainee.id:
            caller = await get_user_or_404(db, caller_id)
            if caller.role != Role.PT:
                raise exceptions.AuthorizationError("Cannot view another trainee's workouts")
            stmt = stmt.where(WorkoutAssignment.pt_id == caller.id)
        if status is not None:
            stmt = stmt.where(WorkoutAssignment.status == status)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def mark_exercise_progress(
        db: AsyncSession,
        assignment_id: uuid.UUID,
        exercise_index: int,
        caller_id: uuid.UUID,
        completed: bool = True,
        actual_sets: int | None = None,
        actual_reps: str | None = None,
        notes: str | None = None,
    ) -> WorkoutAssignment:
        assignment = await _lock_assignment(db, assignment_id)
        if assignment.trainee_id != caller_id:
            raise exceptions.AuthorizationError("This workout is not assigned to you")

        total, _ = await _progress_counts(db, assignment.id)
        if not 0 <= exercise_index < total:
            raise exceptions.RangeError(f"Exercise index must be between 0 and {total - 1}")

        now = datetime.now(timezone.utc)
        await db.execute(
            update(ExerciseProgress)
            .where(
                ExerciseProgress.assignment_id == assignment.id,
                ExerciseProgress.exercise_index == exercise_index,
            )
            .values(
                completed=completed,
                completed_at=now if completed else None,
                actual_sets=actual_sets,
                actual_reps=actual_reps,
                notes=notes,
            )
        )
        status = await _rederive_status(db, assignment, now)
        await db.commit()
        logger.info(
            "Trainee %s marked exercise %d of assignment %s completed=%s (derived status %s)",
            caller_id, exercise_index, assignment.id, completed, status.value,
        )
        return await get_assignment_or_404(db, assignment.id)

    @staticmethod
    async def set_assignment_status(
        db: AsyncSession,
        assignment_id: uuid.UUID,
        caller_id: uuid.UUID,
        status: AssignmentStatus | None = None,
        trainee_notes: str | None = None,
        pt_notes: str | None = None,
    ) -> WorkoutAssignment:
        assignment = await _lock_assignment(db, assignment_id)
        _ensure_participant(assignment, caller_id)
        if trainee_notes is not None and caller_id != assignment.trainee_id:
            raise exceptions.AuthorizationError("Only the assigned trainee can write trainee notes")
        if pt_notes is not None and caller_id != assignment.pt_id:
            raise exceptions.AuthorizationError("Only the assigning PT can write PT notes")

        values: dict = {}
        if trainee_notes is not None:
            values["trainee_notes"] = trainee_notes
        if pt_notes is not None:
            values["pt_notes"] = pt_notes
        if status == AssignmentStatus.SKIPPED:
            if assignment.status == AssignmentStatus.COMPLETED:
                raise exceptions.ValidationError("A completed workout cannot be skipped")
            values["status"] = AssignmentStatus.SKIPPED
        elif status is not None and assignment.status == AssignmentStatus.SKIPPED:
            # Un-skip: progress decides from here on
            values["status"] = AssignmentStatus.ASSIGNED
        if values:
            await db.execute(update(WorkoutAssignment).where(WorkoutAssignment.id == assignment.id).values(**values))

        if status is not None and status != AssignmentStatus.SKIPPED:
            assignment = await _lock_assignment(db, assignment.id)
            derived = await _rederive_status(db, assignment, datetime.now(timezone.utc))
            if derived != status:
                logger.info(
                    "Requested status %s for assignment %s is advisory; derived status is %s",
                    status.value, assignment.id, derived.value,
                )

        await db.commit()
        logger.info("User %s updated assignment %s (%s)", caller_id, assignment_id, ", ".join(sorted(values)) or "no-op")
        return await get_assignment_or_404(db, assignment_id)

    @staticmethod
    async def delete_template_cascade(db: AsyncSession, template_id: uuid.UUID) -> int:
        assignment_ids = select(WorkoutAssignment.id).where(WorkoutAssignment.template_id == template_id)
        removed = await db.scalar(
            select(func.count()).select_from(WorkoutAssignment).where(WorkoutAssignment.template_id == template_id)
        )
        await db.execute(delete(ExerciseProgress).where(ExerciseProgress.assignment_id.in_(assignment_ids)))
        await db.execute(delete(WorkoutAssignment).where(WorkoutAssignment.template_id == template_id))
        await db.execute(delete(TemplateExercise).where(TemplateExercise.template_id == template_id))
        await db.execute(delete(WorkoutTemplate).where(WorkoutTemplate.id == template_id))
        await db.commit()
        logger.info("Deleted template %s and %d assignment(s)", template_id, removed or 0)
        return int(removed or 0)
