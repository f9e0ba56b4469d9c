from typing import List, Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, ConfigDict, Field
from ptcoach.models.enums import AssignmentStatus, FitnessLevel
from ptcoach.schemas.users import UserSummary


class ExerciseData(BaseModel):
    # Checked by the template service so that a bad exercise is a domain validation error
    name: Optional[str] = None
    sets: Optional[int] = None
    reps: Optional[str] = None
    notes: Optional[str] = None


class TemplateCreate(BaseModel):
    title: str
    description: Optional[str] = None
    difficulty: Optional[FitnessLevel] = None
    estimated_duration: Optional[int] = Field(default=None, ge=1, le=600)
    exercises: List[ExerciseData] = Field(default_factory=list)


class TemplateUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    difficulty: Optional[FitnessLevel] = None
    estimated_duration: Optional[int] = Field(default=None, ge=1, le=600)
    exercises: Optional[List[ExerciseData]] = None


class ExerciseResponse(BaseModel):
    position: int
    name: str
    sets: int
    reps: str
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TemplateResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    difficulty: Optional[FitnessLevel] = None
    estimated_duration: Optional[int] = None
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
    exercises: List[ExerciseResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class TemplateDeleteResponse(BaseModel):
    template_id: uuid.UUID
    deleted_assignments: int


class AssignmentCreate(BaseModel):
    trainee_id: uuid.UUID
    due_date: Optional[datetime] = None
    pt_notes: Optional[str] = None


class ExerciseProgressUpdate(BaseModel):
    completed: bool = True
    actual_sets: Optional[int] = Field(default=None, ge=0)
    actual_reps: Optional[str] = None
    notes: Optional[str] = None


class AssignmentUpdate(BaseModel):
    status: Optional[AssignmentStatus] = None
    trainee_notes: Optional[str] = None
    pt_notes: Optional[str] = None


class ExerciseProgressResponse(BaseModel):
    exercise_index: int
    exercise_name: str
    completed: bool
    completed_at: Optional[datetime] = None
    actual_sets: Optional[int] = None
    actual_reps: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TemplateSummary(BaseModel):
    id: uuid.UUID
    title: str
    difficulty: Optional[FitnessLevel] = None
    estimated_duration: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class AssignmentResponse(BaseModel):
    id: uuid.UUID
    template_id: uuid.UUID
    trainee_id: uuid.UUID
    pt_id: uuid.UUID
    assigned_date: datetime
    due_date: Optional[datetime] = None
    status: AssignmentStatus
    completed_at: Optional[datetime] = None
    trainee_notes: Optional[str] = None
    pt_notes: Optional[str] = None
    progress: List[ExerciseProgressResponse] = Field(default_factory=list)
    template: Optional[TemplateSummary] = None
    trainee: Optional[UserSummary] = None
    pt: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)
