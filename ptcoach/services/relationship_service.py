import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ptcoach.core import exceptions
from ptcoach.models.enums import RequestStatus, Role
from ptcoach.models.trainee_request import TraineeRequest
from ptcoach.models.user import Supervision, User
from ptcoach.services.user_service import get_user_with_role

logger = logging.getLogger(__name__)


async def _get_request(db: AsyncSession, request_id: uuid.UUID) -> TraineeRequest:
    stmt = (
        select(TraineeRequest)
        .where(TraineeRequest.id == request_id)
        .options(selectinload(TraineeRequest.trainee))
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one()


async def _latest_pending_request_id(db: AsyncSession, pt_id: uuid.UUID, trainee_id: uuid.UUID) -> uuid.UUID | None:
    stmt = (
        select(TraineeRequest.id)
        .where(
            TraineeRequest.pt_id == pt_id,
            TraineeRequest.trainee_id == trainee_id,
            TraineeRequest.status == RequestStatus.PENDING,
        )
        .order_by(TraineeRequest.request_date.desc())
        .limit(1)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def is_supervised(db: AsyncSession, pt_id: uuid.UUID, trainee_id: uuid.UUID) -> bool:
    stmt = select(Supervision.pt_id).where(Supervision.pt_id == pt_id, Supervision.trainee_id == trainee_id)
    return (await db.execute(stmt)).scalar_one_or_none() is not None


class RelationshipService:
    """Trainee to PT requests and the supervision set they feed."""

    @staticmethod
    async def submit_request(
        db: AsyncSession, trainee_id: uuid.UUID, pt_id: uuid.UUID, service_name: str
    ) -> TraineeRequest:
        trainee = await get_user_with_role(db, trainee_id, Role.TRAINEE)
        pt = await get_user_with_role(db, pt_id, Role.PT)

        # Re-submitting while a request is pending is allowed and creates another entry
        request = TraineeRequest(
            pt_id=pt.id,
            trainee_id=trainee.id,
            status=RequestStatus.PENDING,
            service_name=service_name,
            request_date=datetime.now(timezone.utc),
        )
        db.add(request)
        await db.commit()
        logger.info("Trainee %s requested supervision from PT %s (request %s)", trainee.id, pt.id, request.id)
        return await _get_request(db, request.id)

    @staticmethod
    async def list_requests(
        db: AsyncSession, pt_id: uuid.UUID, status: RequestStatus | None = None
    ) -> list[TraineeRequest]:
        await get_user_with_role(db, pt_id, Role.PT)
        stmt = (
            select(TraineeRequest)
            .where(TraineeRequest.pt_id == pt_id)
            .options(selectinload(TraineeRequest.trainee))
            .order_by(TraineeRequest.request_date.desc())
        )
        if status is not None:
            stmt = stmt.where(TraineeRequest.status == status)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def _respond(
        db: AsyncSession, pt_id: uuid.UUID, trainee_id: uuid.UUID, outcome: RequestStatus
    ) -> TraineeRequest:
        await get_user_with_role(db, pt_id, Role.PT)
        await get_user_with_role(db, trainee_id, Role.TRAINEE)

        request_id = await _latest_pending_request_id(db, pt_id, trainee_id)
        if request_id is None:
            raise exceptions.NotFoundError("No pending request from this trainee")

        # Matching on status makes the transition happen at most once
        result = await db.execute(
            update(TraineeRequest)
            .where(TraineeRequest.id == request_id, TraineeRequest.status == RequestStatus.PENDING)
            .values(status=outcome, response_date=datetime.now(timezone.utc))
        )
        if result.rowcount == 0:
            await db.rollback()
            raise exceptions.NotFoundError("No pending request from this trainee")

        if outcome == RequestStatus.APPROVED:
            if not await is_supervised(db, pt_id, trainee_id):
                db.add(Supervision(pt_id=pt_id, trainee_id=trainee_id))
            await db.execute(update(User).where(User.id == trainee_id).values(personal_trainer_id=pt_id))

        await db.commit()
        logger.info("PT %s %s request %s from trainee %s", pt_id, outcome.value, request_id, trainee_id)
        return await _get_request(db, request_id)

    @staticmethod
    async def approve_request(db: AsyncSession, pt_id: uuid.UUID, trainee_id: uuid.UUID) -> TraineeRequest:
        return await RelationshipService._respond(db, pt_id, trainee_id, RequestStatus.APPROVED)

    @staticmethod
    async def reject_request(db: AsyncSession, pt_id: uuid.UUID, trainee_id: uuid.UUID) -> TraineeRequest:
        return await RelationshipService._respond(db, pt_id, trainee_id, RequestStatus.REJECTED)

    @staticmethod
    async def list_trainees(db: AsyncSession, pt_id: uuid.UUID) -> list[User]:
        pt = await get_user_with_role(db, pt_id, Role.PT, options=(selectinload(User.trainees),))
        return list(pt.trainees)

    @staticmethod
    async def remove_supervision(db: AsyncSession, pt_id: uuid.UUID, trainee_id: uuid.UUID) -> None:
        await get_user_with_role(db, pt_id, Role.PT)
        result = await db.execute(
            delete(Supervision).where(Supervision.pt_id == pt_id, Supervision.trainee_id == trainee_id)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise exceptions.NotFoundError("Trainee is not supervised by this PT")

        await db.execute(
            update(User)
            .where(User.id == trainee_id, User.personal_trainer_id == pt_id)
            .values(personal_trainer_id=None)
        )
        await db.commit()
        logger.info("PT %s stopped supervising trainee %s", pt_id, trainee_id)
