"""Schemas for M-CHAT-R questions, submissions and stored results."""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, field_validator

from therapy_portal.mchat import QUESTION_COUNT


class QuestionRead(BaseModel):
    number: int
    question: str
    examples: List[str] = []
    yes_is_at_risk: bool
    is_critical: bool


class ScreeningSubmit(BaseModel):
    answers: Dict[int, bool]

    @field_validator("answers")
    @classmethod
    def check_question_numbers(cls, answers):
        for number in answers:
            if not 1 <= number <= QUESTION_COUNT:
                raise ValueError(f"Unknown question number {number}")
        return answers


class ScoreResult(BaseModel):
    total_score: int
    risk_level: str
    critical_items_count: int
    follow_up_needed: bool
    message: str
    risk_display_text: str
    risk_color: str


class ScreeningRead(BaseModel):
    id: int
    child_id: int
    parent_id: Optional[int] = None
    answers: Dict[str, bool]
    total_score: int
    risk_level: str
    critical_items_count: int
    follow_up_requested: bool
    completed_at: datetime

    class Config:
        from_attributes = True


class ScreeningCreated(BaseModel):
    screening: ScreeningRead
    result: ScoreResult
