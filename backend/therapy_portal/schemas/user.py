# therapy_portal/schemas/user.py

from typing import Literal
from pydantic import BaseModel, EmailStr, field_validator

class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: Literal["parent", "therapist"] = "parent"
    phone: str | None = None

class UserResponse(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    status: str

    class Config:
        from_attributes = True


class UserMeResponse(UserResponse):
    permissions: list[str]


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    role: str | None = None
    status: str | None = None
    password: str | None = None

    @field_validator("name", "email", "role", "status")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value
