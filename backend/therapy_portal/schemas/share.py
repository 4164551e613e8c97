"""Schemas for inviting therapists or co-parents onto a care team."""
from pydantic import BaseModel
from typing import List, Optional


class ShareCodeCreate(BaseModel):
    # ``None`` grants the default therapist permissions
    permissions: Optional[List[str]] = None


class ShareCodeRead(BaseModel):
    code: str


class TeamMember(BaseModel):
    user_id: int
    name: str
    email: str
    role: str
    permissions: List[str]
    is_owner: bool
