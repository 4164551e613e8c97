from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from .badge import BadgeDefinitionRead


class GoalBase(BaseModel):
    title: str
    description: Optional[str] = None
    category: Literal[
        "communication", "social", "motor", "cognitive", "self_care", "behavior"
    ] = "communication"
    priority: Literal["low", "medium", "high"] = "medium"
    target_frequency: int = Field(default=1, ge=1)
    frequency_period: Literal["daily", "weekly", "monthly"] = "daily"
    target_value: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class GoalCreate(GoalBase):
    pass


class GoalRead(GoalBase):
    id: int
    child_id: int
    created_by: Optional[int] = None
    status: str
    is_active: bool
    created_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GoalUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Literal["low", "medium", "high"]] = None
    target_frequency: Optional[int] = Field(default=None, ge=1)
    frequency_period: Optional[Literal["daily", "weekly", "monthly"]] = None
    target_value: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = None
    end_date: Optional[date] = None
    status: Optional[Literal["active", "paused"]] = None

    @field_validator(
        "title", "priority", "target_frequency", "frequency_period", "status"
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value


class DailyLogCreate(BaseModel):
    completed: bool = True
    achieved_value: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    mood: Optional[
        Literal["great", "good", "okay", "difficult", "challenging"]
    ] = None
    log_date: Optional[date] = None


class DailyLogRead(BaseModel):
    id: int
    goal_id: int
    child_id: int
    logged_by: Optional[int] = None
    achieved_value: Optional[float] = None
    notes: Optional[str] = None
    mood: Optional[str] = None
    stars_earned: int
    log_date: date
    created_at: datetime

    class Config:
        from_attributes = True


class DailyLogResult(BaseModel):
    log: DailyLogRead
    new_badges: list[BadgeDefinitionRead]


class GoalCompleteResult(BaseModel):
    goal: GoalRead
    new_badges: list[BadgeDefinitionRead]
