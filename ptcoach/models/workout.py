import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Integer, ForeignKey, Text, DateTime, Boolean, Enum as SAEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ptcoach.database import Base
from ptcoach.models.enums import AssignmentStatus, FitnessLevel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkoutTemplate(Base):
    __tablename__ = "workout_templates"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    difficulty: Mapped[FitnessLevel | None] = mapped_column(SAEnum(FitnessLevel, native_enum=False), nullable=True)
    estimated_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes

    created_by: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    creator = relationship("User", foreign_keys=[created_by])
    exercises = relationship(
        "TemplateExercise",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateExercise.position",
        lazy="selectin",
    )


class TemplateExercise(Base):
    __tablename__ = "template_exercises"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    template_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("workout_templates.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    sets: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[str] = mapped_column(String, nullable=False)  # "8-12", "to failure"
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    template = relationship("WorkoutTemplate", back_populates="exercises")


class WorkoutAssignment(Base):
    __tablename__ = "workout_assignments"
    __table_args__ = (
        Index("ix_workout_assignments_trainee_date", "trainee_id", "assigned_date"),
        Index("ix_workout_assignments_pt_date", "pt_id", "assigned_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    template_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("workout_templates.id"), nullable=False, index=True)
    trainee_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    pt_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    assigned_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[AssignmentStatus] = mapped_column(
        SAEnum(AssignmentStatus, native_enum=False), default=AssignmentStatus.ASSIGNED, nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    trainee_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    pt_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    template = relationship("WorkoutTemplate")
    trainee = relationship("User", foreign_keys=[trainee_id])
    pt = relationship("User", foreign_keys=[pt_id])
    progress = relationship(
        "ExerciseProgress",
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="ExerciseProgress.exercise_index",
        lazy="selectin",
    )


class ExerciseProgress(Base):
    __tablename__ = "exercise_progress"

    assignment_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("workout_assignments.id"), primary_key=True)
    exercise_index: Mapped[int] = mapped_column(Integer, primary_key=True)
    exercise_name: Mapped[str] = mapped_column(String, nullable=False)  # snapshot at assignment time
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    actual_reps: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    assignment = relationship("WorkoutAssignment", back_populates="progress")
