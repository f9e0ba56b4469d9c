import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Enum as SAEnum, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ptcoach.database import Base
from ptcoach.models.enums import RequestStatus


class TraineeRequest(Base):
    """A trainee's request to be supervised by a PT. Rows are kept as history."""

    __tablename__ = "trainee_requests"
    __table_args__ = (
        Index("ix_trainee_requests_pt_trainee_status", "pt_id", "trainee_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    pt_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    trainee_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        SAEnum(RequestStatus, native_enum=False), default=RequestStatus.PENDING, nullable=False
    )
    service_name: Mapped[str] = mapped_column(String, nullable=False)
    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    response_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    pt = relationship("User", foreign_keys=[pt_id])
    trainee = relationship("User", foreign_keys=[trainee_id])
