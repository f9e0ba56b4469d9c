import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ptcoach.auth.security import hash_password
from ptcoach.core import exceptions
from ptcoach.models.enums import Role
from ptcoach.models.trainee_request import TraineeRequest
from ptcoach.models.user import FitnessProfile, Supervision, User
from ptcoach.models.workout import TemplateExercise, WorkoutAssignment, WorkoutTemplate
from ptcoach.schemas.users import TRAINEE_REQUIRED_FIELDS, UserCreate, UserUpdate

logger = logging.getLogger(__name__)

ROLE_LABELS = {Role.PT: "Personal Trainer", Role.TRAINEE: "Trainee"}


async def get_user_or_404(db: AsyncSession, user_id: uuid.UUID, *, label: str = "User", options=()) -> User:
    stmt = (
        select(User)
        .where(User.id == user_id)
        .options(*options)
        .execution_options(populate_existing=True)
    )
    user = (await db.execute(stmt)).scalar_one_or_none()
    if user is None:
        raise exceptions.NotFoundError(f"{label} not found")
    return user


def ensure_role(user: User, role: Role) -> None:
    if user.role != role:
        raise exceptions.RoleError(f"User is not a {ROLE_LABELS[role]}")


async def get_user_with_role(db: AsyncSession, user_id: uuid.UUID, role: Role, *, options=()) -> User:
    user = await get_user_or_404(db, user_id, label=ROLE_LABELS[role], options=options)
    ensure_role(user, role)
    return user


@dataclass
class SupervisionView:
    user: User
    trainees: list[User] | None = None
    personal_trainer: User | None = None


class UserService:
    @staticmethod
    async def create_user(db: AsyncSession, user_in: UserCreate) -> User:
        fitness = user_in.fitness_values()
        if user_in.role == Role.TRAINEE:
            missing = [name for name in TRAINEE_REQUIRED_FIELDS if fitness[name] is None]
            if missing:
                raise exceptions.ValidationError(
                    f"Missing required trainee fields: {', '.join(missing)}"
                )

        existing = await db.execute(select(User.id).where(User.email == user_in.email))
        if existing.scalar_one_or_none() is not None:
            raise exceptions.ConflictError("A user with this email already exists")

        user = User(
            email=user_in.email,
            hashed_password=hash_password(user_in.password),
            first_name=user_in.first_name,
            last_name=user_in.last_name,
            role=user_in.role,
            profile_picture_url=user_in.profile_picture_url,
            bio=user_in.bio,
            instagram=user_in.instagram,
        )
        if any(value is not None for value in fitness.values()):
            user.fitness_profile = FitnessProfile(**fitness)
        db.add(user)
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise exceptions.ConflictError("A user with this email already exists") from exc

        logger.info("Created %s user %s", user.role.value, user.id)
        return await get_user_or_404(db, user.id)

    @staticmethod
    async def find_users_by_role(db: AsyncSession, role: Role) -> list[User]:
        stmt = select(User).where(User.role == role).order_by(User.last_name, User.first_name)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_trainers(db: AsyncSession) -> list[tuple[User, int]]:
        trainee_count = (
            select(func.count())
            .select_from(Supervision)
            .where(Supervision.pt_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        stmt = (
            select(User, trainee_count)
            .where(User.role == Role.PT)
            .order_by(User.last_name, User.first_name)
        )
        result = await db.execute(stmt)
        return [(user, count) for user, count in result.all()]

    @staticmethod
    async def get_user_with_supervision(db: AsyncSession, user_id: uuid.UUID) -> SupervisionView:
        user = await get_user_or_404(
            db,
            user_id,
            options=(selectinload(User.trainees), selectinload(User.personal_trainer)),
        )
        if user.role == Role.PT:
            return SupervisionView(user=user, trainees=list(user.trainees))
        return SupervisionView(user=user, personal_trainer=user.personal_trainer)

    @staticmethod
    async def update_profile(db: AsyncSession, user_id: uuid.UUID, patch: UserUpdate) -> User:
        user = await get_user_or_404(db, user_id)
        update_data = patch.model_dump(exclude_unset=True)

        for name in ("first_name", "last_name"):
            if name in update_data and update_data[name] is None:
                raise exceptions.ValidationError(f"{name} cannot be cleared")

        new_email = update_data.pop("email", None)
        email_changed = bool(new_email) and new_email != user.email
        if email_changed:
            taken = await db.execute(select(User.id).where(User.email == new_email, User.id != user.id))
            if taken.scalar_one_or_none() is not None:
                raise exceptions.ConflictError("Email is already taken")
            user.email = new_email

        fitness_updates = {name: update_data.pop(name) for name in TRAINEE_REQUIRED_FIELDS if name in update_data}
        if user.role == Role.TRAINEE and any(value is None for value in fitness_updates.values()):
            raise exceptions.ValidationError("Trainee fitness fields cannot be cleared")
        if fitness_updates:
            if user.fitness_profile is None:
                user.fitness_profile = FitnessProfile()
            for key, value in fitness_updates.items():
                setattr(user.fitness_profile, key, value)

        for key, value in update_data.items():
            setattr(user, key, value)

        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            if not email_changed:
                raise
            raise exceptions.ConflictError("Email is already taken") from exc
        logger.info("Updated profile of user %s (%s)", user.id, ", ".join(sorted(patch.model_fields_set)))
        return await get_user_or_404(db, user.id)

    @staticmethod
    async def delete_user(db: AsyncSession, user_id: uuid.UUID) -> None:
        user = await get_user_or_404(db, user_id)

        assignment_count = await db.scalar(
            select(func.count())
            .select_from(WorkoutAssignment)
            .where(or_(WorkoutAssignment.trainee_id == user_id, WorkoutAssignment.pt_id == user_id))
        )
        if assignment_count:
            raise exceptions.PreconditionError(
                f"User is referenced by {assignment_count} workout assignment(s); delete them first"
            )

        template_ids = select(WorkoutTemplate.id).where(WorkoutTemplate.created_by == user_id)
        await db.execute(delete(TemplateExercise).where(TemplateExercise.template_id.in_(template_ids)))
        await db.execute(delete(WorkoutTemplate).where(WorkoutTemplate.created_by == user_id))
        await db.execute(
            delete(Supervision).where(or_(Supervision.pt_id == user_id, Supervision.trainee_id == user_id))
        )
        await db.execute(
            delete(TraineeRequest).where(or_(TraineeRequest.pt_id == user_id, TraineeRequest.trainee_id == user_id))
        )
        await db.execute(
            update(User).where(User.personal_trainer_id == user_id).values(personal_trainer_id=None)
        )
        await db.delete(user)
        await db.commit()
        logger.info("Deleted %s user %s", user.role.value, user_id)
