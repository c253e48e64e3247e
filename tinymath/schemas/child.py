import uuid
from datetime import datetime

from pydantic import Field

from tinymath.schemas.common import CamelModel


class ChildCreate(CamelModel):
    parent_id: uuid.UUID
    name: str = Field(min_length=1, max_length=100)
    age: int = Field(ge=0, le=150)


class ChildProgressUpdate(CamelModel):
    id: uuid.UUID
    stars: int | None = Field(default=None, ge=0)
    current_level: int | None = Field(default=None, ge=1)
    high_score: int | None = Field(default=None, ge=0)


class ChildResponse(CamelModel):
    id: uuid.UUID
    parent_id: uuid.UUID
    name: str
    age: int
    current_level: int
    stars: int
    high_score: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
