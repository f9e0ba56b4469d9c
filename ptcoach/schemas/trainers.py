from typing import Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, ConfigDict, Field, field_validator
from ptcoach.models.enums import RequestStatus
from ptcoach.schemas.users import UserSummary


class TraineeRequestCreate(BaseModel):
    service_name: str = Field(min_length=1, max_length=200)

    @field_validator("service_name")
    @classmethod
    def normalize_service_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("service_name must not be blank")
        return normalized


class TraineeRequestResponse(BaseModel):
    id: uuid.UUID
    pt_id: uuid.UUID
    trainee_id: uuid.UUID
    status: RequestStatus
    service_name: str
    request_date: datetime
    response_date: Optional[datetime] = None
    trainee: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class TrainerSummary(UserSummary):
    bio: Optional[str] = None
    instagram: Optional[str] = None
    profile_picture_url: Optional[str] = None
    trainee_count: int = 0
