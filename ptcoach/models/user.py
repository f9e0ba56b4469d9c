import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Enum as SAEnum, Integer, Float, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ptcoach.database import Base
from ptcoach.models.enums import Role, FitnessLevel, FitnessGoal


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[Role] = mapped_column(SAEnum(Role, native_enum=False), nullable=False)

    # Profile Extensions
    profile_picture_url: Mapped[str | None] = mapped_column(String, nullable=True)
    bio: Mapped[str | None] = mapped_column(String, nullable=True)  # PT only
    instagram: Mapped[str | None] = mapped_column(String, nullable=True)  # PT only

    # Primary PT of a trainee, set on request approval
    personal_trainer_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    fitness_profile = relationship(
        "FitnessProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )
    personal_trainer = relationship("User", remote_side=[id], foreign_keys=[personal_trainer_id])
    trainees = relationship(
        "User",
        secondary="pt_trainees",
        primaryjoin="User.id == Supervision.pt_id",
        secondaryjoin="User.id == Supervision.trainee_id",
        order_by="User.last_name",
        viewonly=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class FitnessProfile(Base):
    """Fitness data attached to a user. Mandatory for trainees, optional for PTs."""

    __tablename__ = "fitness_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), primary_key=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    height_cm: Mapped[float | None] = mapped_column(Float, nullable=True)
    fitness_level: Mapped[FitnessLevel | None] = mapped_column(SAEnum(FitnessLevel, native_enum=False), nullable=True)
    fitness_goal: Mapped[FitnessGoal | None] = mapped_column(SAEnum(FitnessGoal, native_enum=False), nullable=True)
    workout_frequency: Mapped[int | None] = mapped_column(Integer, nullable=True)  # sessions per week

    user = relationship("User", back_populates="fitness_profile")


class Supervision(Base):
    __tablename__ = "pt_trainees"

    pt_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), primary_key=True)
    trainee_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
