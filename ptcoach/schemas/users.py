from typing import List, Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from ptcoach.models.enums import Role, FitnessLevel, FitnessGoal

# Fitness profile fields a trainee must provide at registration
TRAINEE_REQUIRED_FIELDS = ("age", "weight_kg", "height_cm", "fitness_level", "fitness_goal", "workout_frequency")


class FitnessFields(BaseModel):
    age: Optional[int] = Field(default=None, ge=10, le=120)
    weight_kg: Optional[float] = Field(default=None, gt=0, le=500)
    height_cm: Optional[float] = Field(default=None, gt=0, le=300)
    fitness_level: Optional[FitnessLevel] = None
    fitness_goal: Optional[FitnessGoal] = None
    workout_frequency: Optional[int] = Field(default=None, ge=0, le=14)

    def fitness_values(self) -> dict:
        return {name: getattr(self, name) for name in TRAINEE_REQUIRED_FIELDS}


class UserCreate(FitnessFields):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str
    last_name: str
    role: Role
    profile_picture_url: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    instagram: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("must not be blank")
        return normalized

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserUpdate(FitnessFields):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    instagram: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        normalized = value.strip()
        if not normalized:
            raise ValueError("must not be blank")
        return normalized

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if value else value


class FitnessProfileResponse(BaseModel):
    age: Optional[int] = None
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    fitness_level: Optional[FitnessLevel] = None
    fitness_goal: Optional[FitnessGoal] = None
    workout_frequency: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    profile_picture_url: Optional[str] = None
    bio: Optional[str] = None
    instagram: Optional[str] = None
    personal_trainer_id: Optional[uuid.UUID] = None
    fitness_profile: Optional[FitnessProfileResponse] = None
    created_at: datetime


class UserDetailResponse(UserResponse):
    trainees: Optional[List[UserSummary]] = None
    personal_trainer: Optional[UserSummary] = None
