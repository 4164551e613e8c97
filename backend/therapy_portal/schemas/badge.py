from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class BadgeDefinitionRead(BaseModel):
    name: str
    description: str
    icon_name: str
    emoji: str
    requirement_type: str
    requirement_value: int
    color: str

    class Config:
        from_attributes = True


class EarnedBadgeRead(BaseModel):
    name: str
    description: Optional[str] = None
    icon_name: Optional[str] = None
    emoji: Optional[str] = None
    requirement_type: str
    requirement_value: int
    color: Optional[str] = None
    earned_at: datetime


class MilestoneRead(BaseModel):
    stars: int
    title: str
    icon: str
    remaining: int
    progress: float


class StarAward(BaseModel):
    stars: int = Field(gt=0)
    reason: Optional[str] = None


class StarAwardResult(BaseModel):
    child_id: int
    total_stars: int
    new_badges: list[BadgeDefinitionRead]


class GamificationSummary(BaseModel):
    child_id: int
    total_stars: int
    goals_completed: int
    streak_days: int
    badges: list[EarnedBadgeRead]
    next_milestone: Optional[MilestoneRead] = None
    next_badges: dict[str, Optional[BadgeDefinitionRead]]
