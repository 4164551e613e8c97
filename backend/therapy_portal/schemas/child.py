from datetime import date, datetime
from pydantic import BaseModel, field_validator
from typing import Optional


class ChildCreate(BaseModel):
    first_name: str
    birth_date: date
    gender: Optional[str] = None
    avatar_seed: Optional[str] = None


class ChildRead(BaseModel):
    id: int
    first_name: str
    birth_date: date
    gender: Optional[str] = None
    avatar_seed: Optional[str] = None
    total_stars: int
    created_at: datetime

    class Config:
        from_attributes = True


class ChildUpdate(BaseModel):
    first_name: str | None = None
    birth_date: date | None = None
    gender: str | None = None
    avatar_seed: str | None = None

    @field_validator("first_name", "birth_date")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value
