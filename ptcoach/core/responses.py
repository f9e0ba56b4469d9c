from typing import Generic, List, TypeVar, Optional
from pydantic import BaseModel, Field

T = TypeVar("T")

class ResponseBase(BaseModel, Generic[T]):
    data: Optional[T] = None
    message: Optional[str] = None
    success: bool = True

class StandardResponse(ResponseBase[T]):
    pass

class ListResponse(BaseModel, Generic[T]):
    data: List[T] = Field(default_factory=list)
    count: int = 0
    message: Optional[str] = None
    success: bool = True

    @classmethod
    def of(cls, items: List[T], message: str | None = None) -> "ListResponse[T]":
        return cls(data=items, count=len(items), message=message)
